"""Domain events for the Review aggregate.

Every accepted moderation decision is a versioned, immutable fact. The
audit recorder consumes these events to append to the audit log.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from moderation.domain import moderation


@moderation.event(part_of="Review")
class ReviewSubmitted:
    """A customer submitted a review of a venue."""

    __version__ = 1

    review_id = Identifier(required=True)
    venue_id = Identifier(required=True)
    author_id = Identifier(required=True)
    booking_id = Identifier()
    review_type = String(required=True)
    rating = Integer(required=True)
    submitted_at = DateTime(required=True)


@moderation.event(part_of="Review")
class ReviewApproved:
    """A moderator approved the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    message = Text()
    approved_at = DateTime(required=True)


@moderation.event(part_of="Review")
class ReviewRejected:
    """A moderator rejected the review with a controlled reason."""

    __version__ = 1

    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = String(required=True)
    message = Text()
    rejected_at = DateTime(required=True)


@moderation.event(part_of="Review")
class ReviewFlagged:
    """A moderator flagged the review's content."""

    __version__ = 1

    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    severity = String(required=True)
    reason = String(required=True)
    flagged_at = DateTime(required=True)


@moderation.event(part_of="Review")
class ReviewEscalated:
    """A moderator escalated the review to a senior moderator."""

    __version__ = 1

    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = String(required=True)
    escalated_at = DateTime(required=True)
