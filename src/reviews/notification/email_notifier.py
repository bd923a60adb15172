"""EmailNotifier — renders review templates and dispatches them by email."""

import structlog

from reviews.errors import UpstreamUnavailable
from reviews.notification.email_port import EmailPort
from reviews.notification.port import Notifier
from reviews.notification.templates import get_template

logger = structlog.get_logger(__name__)


class EmailNotifier(Notifier):
    def __init__(self, channel: EmailPort) -> None:
        self.channel = channel

    def send(self, template_name: str, recipient: str, variables: dict) -> None:
        rendered = get_template(template_name).render(variables)
        result = self.channel.send(
            to=recipient,
            subject=rendered["subject"],
            body=rendered["body"],
        )

        if result.get("status") != "sent":
            raise UpstreamUnavailable(
                result.get("error") or "Email delivery failed",
                template=template_name,
                recipient=recipient,
            )

        logger.info(
            "Notification sent",
            template=template_name,
            recipient=recipient,
            message_id=result.get("message_id"),
        )
