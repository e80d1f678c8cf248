"""Fake messaging adapter — records sent messages for testing and development."""

from uuid import uuid4

from moderation.messaging.port import MessagingPort, SendResult


class FakeMessenger(MessagingPort):
    """Messaging adapter that keeps messages in memory for test assertions."""

    def __init__(self):
        self.sent_messages: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Message delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Message delivery failed"):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(
        self,
        sender_id: str,
        recipient_id: str,
        subject: str,
        body: str,
        priority: str = "normal",
    ) -> SendResult:
        if not self.should_succeed:
            return SendResult(success=False, recipient_id=recipient_id, error=self.failure_reason)

        message_id = f"msg-{uuid4().hex[:12]}"
        self.sent_messages.append(
            {
                "message_id": message_id,
                "sender_id": sender_id,
                "recipient_id": recipient_id,
                "subject": subject,
                "body": body,
                "priority": priority,
            }
        )
        return SendResult(success=True, message_id=message_id, recipient_id=recipient_id)

    def reset(self):
        """Clear sent messages and restore default behavior."""
        self.sent_messages.clear()
        self.should_succeed = True
        self.failure_reason = "Message delivery failed"
