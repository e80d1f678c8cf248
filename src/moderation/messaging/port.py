"""Messaging port — abstract interface for directed messages to users.

Moderation only ever sends one kind of message: a clarification request
to a review's author. Adapters are swapped via configuration.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SendResult:
    """Outcome of a message send."""

    success: bool
    message_id: str | None = None
    recipient_id: str | None = None
    error: str | None = None


class MessagingPort(ABC):
    """Abstract interface for messaging adapters."""

    @abstractmethod
    def send(
        self,
        sender_id: str,
        recipient_id: str,
        subject: str,
        body: str,
        priority: str = "normal",
    ) -> SendResult:
        """Deliver a message from ``sender_id`` to ``recipient_id``."""
        ...
