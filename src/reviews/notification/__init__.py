"""Notification adapters for the Reviews domain.

``build_notifier()`` picks the email channel from the ``EMAIL_ADAPTER``
setting: the in-memory fake for development and tests, SMTP in production.
"""

import os

from reviews.notification.email_notifier import EmailNotifier
from reviews.notification.fake_email import FakeEmailAdapter
from reviews.notification.port import Notifier
from reviews.settings import get_setting


def build_notifier(domain=None) -> Notifier:
    """Construct the notifier configured for ``domain`` (default: the active one)."""
    adapter = get_setting("EMAIL_ADAPTER", domain)

    if adapter == "fake":
        return EmailNotifier(FakeEmailAdapter())
    if adapter == "smtp":
        from reviews.notification.smtp_email import SmtpEmailAdapter

        return EmailNotifier(
            SmtpEmailAdapter(
                host=os.getenv("SMTP_HOST") or get_setting("SMTP_HOST", domain),
                port=int(os.getenv("SMTP_PORT") or get_setting("SMTP_PORT", domain)),
                sender=get_setting("EMAIL_FROM", domain),
                username=os.getenv("SMTP_USER"),
                password=os.getenv("SMTP_PASSWORD"),
            )
        )
    raise ValueError(f"Unknown email adapter: {adapter}")
