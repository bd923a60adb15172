"""Notifier port — the contract the moderation workflow sends messages through."""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Sends a templated message to a single recipient."""

    @abstractmethod
    def send(self, template_name: str, recipient: str, variables: dict) -> None:
        """Render ``template_name`` with ``variables`` and deliver it to ``recipient``.

        Raises:
            UpstreamUnavailable: the message could not be handed to the channel.
        """
        ...
