"""Review aggregate — the unit of moderation.

A Review is created ``pending`` by the booking/review submission flow and is
changed afterwards only by moderation decisions. The moderation status is an
explicit field; the customer's comment is never rewritten.

State machine (permissive, no terminal state):
    any state --approve--> APPROVED
    any state --reject---> REJECTED
    any state --flag-----> FLAGGED
    any state --escalate-> ESCALATED
    request_clarification is never applied to the review
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Date,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from moderation.domain import moderation
from moderation.review.events import (
    ReviewApproved,
    ReviewEscalated,
    ReviewFlagged,
    ReviewRejected,
    ReviewSubmitted,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewType(Enum):
    VENUE_REVIEW = "venue_review"
    SERVICE_FEEDBACK = "service_feedback"
    DISPUTE_COMMENT = "dispute_comment"


class ModerationStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"
    ESCALATED = "escalated"
    # Derived only: never stored on the review
    CLARIFICATION_REQUESTED = "clarification_requested"


class FlagSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RejectionReason(Enum):
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    SPAM = "spam"
    FAKE_REVIEW = "fake_review"
    PERSONAL_ATTACK = "personal_attack"
    IRRELEVANT = "irrelevant"


class ModerationAction(Enum):
    APPROVE = "approve"
    REJECT = "reject"
    FLAG = "flag"
    REQUEST_CLARIFICATION = "request_clarification"
    ESCALATE = "escalate"


_STORED_STATUSES = {
    ModerationStatus.PENDING.value,
    ModerationStatus.APPROVED.value,
    ModerationStatus.REJECTED.value,
    ModerationStatus.FLAGGED.value,
    ModerationStatus.ESCALATED.value,
}


def _require_text(field_name, value, label):
    if value is None or not str(value).strip():
        raise ValidationError({field_name: [f"{label} is required"]})


def _require_choice(field_name, value, enum_cls, label):
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        raise ValidationError({field_name: [f"{label} must be one of: {', '.join(allowed)}"]})


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@moderation.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"score": ["Rating must be between 1 and 5"]})


@moderation.value_object(part_of="Review")
class BookingSnapshot:
    """Booking context supplied by the booking flow when the review was written."""

    event_date = Date()
    status = String(max_length=50)
    total_amount = Float()
    event_type = String(max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@moderation.entity(part_of="Review")
class ModerationDecision:
    """One decision applied to the review, kept in order of application."""

    action = String(choices=ModerationAction, required=True)
    actor_id = Identifier(required=True)
    reason = String(max_length=255)
    severity = String(choices=FlagSeverity)
    message = Text()
    decided_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@moderation.aggregate
class Review:
    """A customer's review of a venue, and its current moderation state."""

    # Core identifiers
    venue_id = Identifier(required=True)
    author_id = Identifier(required=True)
    booking_id = Identifier()

    # Names captured from the venue and profile stores at submission
    venue_name = String(max_length=255)
    author_name = String(max_length=255)

    # Content
    review_type = String(choices=ReviewType, default=ReviewType.VENUE_REVIEW.value)
    rating = ValueObject(Rating, required=True)
    comment = Text()
    booking = ValueObject(BookingSnapshot)

    # Moderation
    status = String(choices=ModerationStatus, default=ModerationStatus.PENDING.value)
    status_reason = String(max_length=255)
    moderation_message = Text()
    flag_severity = String(choices=FlagSeverity)
    moderated_by = Identifier()
    moderated_at = DateTime()
    decisions = HasMany(ModerationDecision)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def derived_status_is_never_stored(self):
        if self.status is not None and self.status not in _STORED_STATUSES:
            raise ValidationError({"status": [f"Status '{self.status}' cannot be stored on a review"]})

    @invariant.post
    def severity_only_on_flagged_reviews(self):
        flagged = self.status == ModerationStatus.FLAGGED.value
        if flagged and not self.flag_severity:
            raise ValidationError({"flag_severity": ["Flagged reviews must carry a severity"]})
        if not flagged and self.flag_severity:
            raise ValidationError({"flag_severity": ["Only flagged reviews carry a severity"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        venue_id,
        author_id,
        rating,
        comment=None,
        review_type=ReviewType.VENUE_REVIEW.value,
        booking_id=None,
        venue_name=None,
        author_name=None,
        booking=None,
        submitted_at=None,
    ):
        """Create a pending review. ``submitted_at`` keeps the original time for imported records."""
        _require_choice("review_type", review_type, ReviewType, "Review type")

        now = submitted_at or datetime.now(UTC)

        review = cls(
            venue_id=venue_id,
            author_id=author_id,
            booking_id=booking_id,
            venue_name=venue_name,
            author_name=author_name,
            review_type=review_type,
            rating=Rating(score=rating),
            comment=comment,
            booking=BookingSnapshot(**booking) if booking else None,
            status=ModerationStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                venue_id=str(venue_id),
                author_id=str(author_id),
                booking_id=str(booking_id) if booking_id else None,
                review_type=review_type,
                rating=rating,
                submitted_at=now,
            )
        )

        return review

    @classmethod
    def restore(
        cls,
        venue_id,
        author_id,
        rating,
        status,
        comment=None,
        status_reason=None,
        flag_severity=None,
        moderation_message=None,
        **submission,
    ):
        """Rebuild a review that was already moderated elsewhere.

        Only ``ReviewSubmitted`` is raised: decisions taken before the import
        were audited by the system that took them.
        """
        review = cls.submit(venue_id=venue_id, author_id=author_id, rating=rating, comment=comment, **submission)

        if status != ModerationStatus.PENDING.value:
            with atomic_change(review):
                review.status = status
                review.status_reason = status_reason
                review.flag_severity = flag_severity
                review.moderation_message = moderation_message

        return review

    # -------------------------------------------------------------------
    # Moderation decisions
    # -------------------------------------------------------------------
    def _decide(self, action, actor_id, status, reason=None, severity=None, message=None):
        """Overwrite the current moderation state and append the decision to history."""
        _require_text("actor_id", actor_id, "Actor")

        now = datetime.now(UTC)

        with atomic_change(self):
            self.status = status.value
            self.status_reason = reason
            self.flag_severity = severity
            self.moderation_message = message
            self.moderated_by = actor_id
            self.moderated_at = now
            self.updated_at = now

        self.add_decisions(
            ModerationDecision(
                action=action.value,
                actor_id=actor_id,
                reason=reason,
                severity=severity,
                message=message,
                decided_at=now,
            )
        )
        return now

    def approve(self, actor_id, message=None):
        """Approve the review. Accepted from any status."""
        now = self._decide(
            ModerationAction.APPROVE,
            actor_id,
            ModerationStatus.APPROVED,
            message=message or None,
        )

        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                actor_id=str(actor_id),
                message=message or None,
                approved_at=now,
            )
        )

    def reject(self, actor_id, reason, message=""):
        """Reject the review with a reason from the controlled vocabulary."""
        _require_choice("reason", reason, RejectionReason, "Rejection reason")

        now = self._decide(
            ModerationAction.REJECT,
            actor_id,
            ModerationStatus.REJECTED,
            reason=reason,
            message=message or "",
        )

        self.raise_(
            ReviewRejected(
                review_id=str(self.id),
                actor_id=str(actor_id),
                reason=reason,
                message=message or "",
                rejected_at=now,
            )
        )

    def flag(self, actor_id, severity, reason):
        """Flag the review's content. The customer's comment is left as written."""
        _require_choice("severity", severity, FlagSeverity, "Severity")
        _require_text("reason", reason, "Flag reason")

        now = self._decide(
            ModerationAction.FLAG,
            actor_id,
            ModerationStatus.FLAGGED,
            reason=reason,
            severity=severity,
        )

        self.raise_(
            ReviewFlagged(
                review_id=str(self.id),
                actor_id=str(actor_id),
                severity=severity,
                reason=reason,
                flagged_at=now,
            )
        )

    def escalate(self, actor_id, reason):
        """Hand the review to a senior moderator."""
        _require_text("reason", reason, "Escalation reason")

        now = self._decide(
            ModerationAction.ESCALATE,
            actor_id,
            ModerationStatus.ESCALATED,
            reason=reason,
        )

        self.raise_(
            ReviewEscalated(
                review_id=str(self.id),
                actor_id=str(actor_id),
                reason=reason,
                escalated_at=now,
            )
        )
