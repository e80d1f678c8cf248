"""SubmitReview — intake of a review written after a booking.

The booking flow owns review submission; this command is the seam it
calls. Venue and author names are captured here so the moderation queue
can search them without calling back into the venue or profile stores.
"""

import json

import structlog
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from moderation.domain import moderation
from moderation.review.review import Review, ReviewType

logger = structlog.get_logger(__name__)


@moderation.command(part_of="Review")
class SubmitReview:
    venue_id = Identifier(required=True)
    author_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text()
    review_type = String(default=ReviewType.VENUE_REVIEW.value)
    booking_id = Identifier()
    venue_name = String(max_length=255)
    author_name = String(max_length=255)
    booking = Text()  # JSON: {event_date, status, total_amount, event_type}


@moderation.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        review = Review.submit(
            venue_id=command.venue_id,
            author_id=command.author_id,
            rating=command.rating,
            comment=command.comment,
            review_type=command.review_type or ReviewType.VENUE_REVIEW.value,
            booking_id=command.booking_id,
            venue_name=command.venue_name,
            author_name=command.author_name,
            booking=json.loads(command.booking) if command.booking else None,
        )
        current_domain.repository_for(Review).add(review)

        logger.info(
            "Review submitted",
            review_id=str(review.id),
            venue_id=str(command.venue_id),
            author_id=str(command.author_id),
            rating=command.rating,
        )
        return str(review.id)
