"""ImportLegacyReview — bring a marker-encoded review into the moderation store.

The legacy store kept moderation status inside the comment text, as
bracketed markers prepended by each decision. Import resolves the status
the same way the legacy store read it (first marker wins), strips the
marker chain to recover the customer's words, and stores the result in
explicit fields.
"""

import json

import structlog
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from moderation.domain import moderation
from moderation.review.resolver import parse_markers, resolve_comment
from moderation.review.review import ModerationStatus, Review, ReviewType

logger = structlog.get_logger(__name__)


@moderation.command(part_of="Review")
class ImportLegacyReview:
    venue_id = Identifier(required=True)
    author_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text()  # As stored by the legacy system, markers included
    review_type = String(default=ReviewType.VENUE_REVIEW.value)
    booking_id = Identifier()
    venue_name = String(max_length=255)
    author_name = String(max_length=255)
    booking = Text()  # JSON: {event_date, status, total_amount, event_type}
    created_at = DateTime(required=True)


def restored_comment(comment):
    """The customer's own text, or None when a rejection overwrote it."""
    markers, remainder = parse_markers(comment)
    if any(marker.status == ModerationStatus.REJECTED.value for marker in markers):
        return None
    return remainder or None


@moderation.command_handler(part_of=Review)
class ImportLegacyReviewHandler:
    @handle(ImportLegacyReview)
    def import_legacy_review(self, command):
        state = resolve_comment(command.comment)

        severity = state.flag.severity if state.flag else None
        if state.is_flagged and not severity:
            raise ValidationError({"comment": ["Flag marker carries no recognised severity"]})

        review = Review.restore(
            venue_id=command.venue_id,
            author_id=command.author_id,
            rating=command.rating,
            status=state.status,
            comment=restored_comment(command.comment),
            status_reason=state.reason,
            flag_severity=severity,
            moderation_message=state.message,
            review_type=command.review_type or ReviewType.VENUE_REVIEW.value,
            booking_id=command.booking_id,
            venue_name=command.venue_name,
            author_name=command.author_name,
            booking=json.loads(command.booking) if command.booking else None,
            submitted_at=command.created_at,
        )
        current_domain.repository_for(Review).add(review)

        logger.info(
            "Legacy review imported",
            review_id=str(review.id),
            status=state.status,
        )
        return str(review.id)
