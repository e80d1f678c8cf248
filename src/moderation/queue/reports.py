"""Dashboard reports over the moderation queue: statistics, analytics, review detail."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from protean.utils.globals import current_domain

from moderation.audit.recorder import audit_trail, latest_actions
from moderation.queue.engine import ReviewView, build_view, compute_metrics, load_views
from moderation.queue.filters import as_utc, local_midnight
from moderation.review.resolver import resolve
from moderation.review.review import ModerationStatus, Review
from moderation.utils.store import fetch

RECENT_ACTIVITY_DAYS = 7


@dataclass(frozen=True)
class ReviewStatistics:
    total: int
    pending: int
    flagged: int
    aging: int
    average_rating: float
    recent_activity: int


@dataclass(frozen=True)
class ReviewAnalytics:
    period_days: int
    total_reviews: int
    average_rating: float
    rating_distribution: dict[int, int]
    pending_moderation: int
    flagged_content: int
    rejected_reviews: int


@dataclass(frozen=True)
class ReviewDetail:
    review: ReviewView
    customer_review_count: int
    booking: dict | None
    audit_trail: list


def _average_rating(views: list[ReviewView]) -> float:
    if not views:
        return 0.0
    return sum(view.rating for view in views) / len(views)


def review_statistics(as_of: datetime | None = None) -> ReviewStatistics:
    as_of = as_utc(as_of) or datetime.now(UTC)
    views = load_views(as_of)
    metrics = compute_metrics(views)
    recent_since = local_midnight(as_of) - timedelta(days=RECENT_ACTIVITY_DAYS)

    return ReviewStatistics(
        total=metrics.total,
        pending=metrics.pending,
        flagged=metrics.flagged,
        aging=metrics.aging,
        average_rating=_average_rating(views),
        recent_activity=sum(1 for view in views if view.created_at >= recent_since),
    )


def review_analytics(period_days: int = 30, as_of: datetime | None = None) -> ReviewAnalytics:
    """Rating and moderation breakdown of reviews submitted in the last ``period_days`` days."""
    as_of = as_utc(as_of) or datetime.now(UTC)
    start = as_of - timedelta(days=period_days)
    views = [view for view in load_views(as_of) if start <= view.created_at <= as_of]

    distribution = {score: 0 for score in range(1, 6)}
    for view in views:
        distribution[view.rating] += 1

    return ReviewAnalytics(
        period_days=period_days,
        total_reviews=len(views),
        average_rating=_average_rating(views),
        rating_distribution=distribution,
        pending_moderation=sum(1 for view in views if view.state.awaiting_decision),
        flagged_content=sum(1 for view in views if view.is_flagged),
        rejected_reviews=sum(1 for view in views if view.status == ModerationStatus.REJECTED.value),
    )


def review_for_moderation(review_id, as_of: datetime | None = None) -> ReviewDetail:
    """Everything a moderator sees when opening one review."""
    as_of = as_utc(as_of) or datetime.now(UTC)
    review = current_domain.repository_for(Review).get(review_id)
    state = resolve(review, latest_actions([review.id]).get(str(review.id)))

    booking = None
    if review.booking:
        booking = {
            "booking_id": str(review.booking_id) if review.booking_id else None,
            "event_date": review.booking.event_date,
            "status": review.booking.status,
            "total_amount": review.booking.total_amount,
            "event_type": review.booking.event_type,
        }

    return ReviewDetail(
        review=build_view(review, state, as_of),
        customer_review_count=len(fetch(Review, author_id=str(review.author_id))),
        booking=booking,
        audit_trail=audit_trail(review.id),
    )
