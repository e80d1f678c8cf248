"""AuditEntry aggregate — append-only record of one moderation decision.

Entries are created by the audit recorder after a decision has been
applied. Nothing updates or deletes them.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String, Text

from moderation.domain import moderation
from moderation.review.review import ModerationAction


@moderation.aggregate
class AuditEntry:
    """Who did what to which review, and when."""

    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    action = String(choices=ModerationAction, required=True)
    detail = Text()
    recorded_at = DateTime(required=True)

    @classmethod
    def record(cls, review_id, actor_id, action, detail=None, recorded_at=None):
        return cls(
            review_id=review_id,
            actor_id=actor_id,
            action=action,
            detail=detail,
            recorded_at=recorded_at or datetime.now(UTC),
        )
