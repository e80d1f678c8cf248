"""Errors raised by moderation operations.

Validation problems use ``protean.exceptions.ValidationError`` and missing
reviews ``ObjectNotFoundError``. Everything else that stops an operation
(store unavailable, write rejected, message not delivered) surfaces as
``ModerationOperationError`` naming the operation that was attempted.
"""


class ModerationOperationError(Exception):
    """An operation failed and nothing was applied."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")
