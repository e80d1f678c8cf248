"""Moderation queue — filtered, sorted views over the review collection.

Every fetch reads the reviews afresh and resolves each one's status, so
views and metrics always describe the data just read. Nothing is cached.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

import structlog

from moderation.audit.recorder import latest_actions
from moderation.queue.filters import (
    QueueFilters,
    as_utc,
    parse_rating_band,
    submitted_since,
    validate_filters,
)
from moderation.review.resolver import ModerationState, resolve
from moderation.review.review import ModerationStatus, Review
from moderation.utils.store import fetch

logger = structlog.get_logger(__name__)

# Reviews awaiting action longer than this many whole days are aging
AGING_THRESHOLD_DAYS = 2
LOW_RATING = 2


class Priority(Enum):
    URGENT = "urgent"
    ELEVATED = "elevated"
    ATTENTION = "attention"
    NORMAL = "normal"


@dataclass(frozen=True)
class ReviewView:
    """A review as the moderation queue presents it."""

    review_id: str
    venue_id: str
    venue_name: str | None
    author_id: str
    author_name: str | None
    booking_id: str | None
    review_type: str
    rating: int
    comment: str | None
    state: ModerationState
    created_at: datetime
    updated_at: datetime | None
    days_since_submission: int
    priority: str

    @property
    def status(self) -> str:
        return self.state.status

    @property
    def is_flagged(self) -> bool:
        return self.state.is_flagged

    @property
    def flag_severity(self) -> str | None:
        return self.state.flag.severity if self.state.flag else None

    @property
    def is_aging(self) -> bool:
        return (self.state.awaiting_decision or self.state.is_flagged) and (
            self.days_since_submission > AGING_THRESHOLD_DAYS
        )


@dataclass(frozen=True)
class QueueMetrics:
    total: int = 0
    pending: int = 0
    flagged: int = 0
    aging: int = 0
    by_status: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class QueueResult:
    items: list[ReviewView]
    metrics: QueueMetrics


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from ``earlier`` to ``later``."""
    return max(0, (as_utc(later) - as_utc(earlier)).days)


def priority_for(days_since_submission: int, state: ModerationState, rating: int) -> str:
    """Visual priority for the queue. Never used to reorder results."""
    if days_since_submission > AGING_THRESHOLD_DAYS:
        return Priority.URGENT.value
    if state.is_flagged:
        return Priority.ELEVATED.value
    if rating <= LOW_RATING:
        return Priority.ATTENTION.value
    return Priority.NORMAL.value


def build_view(review, state: ModerationState, as_of: datetime) -> ReviewView:
    days = days_between(review.created_at, as_of)
    rating = review.rating.score
    return ReviewView(
        review_id=str(review.id),
        venue_id=str(review.venue_id),
        venue_name=review.venue_name,
        author_id=str(review.author_id),
        author_name=review.author_name,
        booking_id=str(review.booking_id) if review.booking_id else None,
        review_type=review.review_type,
        rating=rating,
        comment=review.comment,
        state=state,
        created_at=as_utc(review.created_at),
        updated_at=as_utc(review.updated_at),
        days_since_submission=days,
        priority=priority_for(days, state, rating),
    )


def load_views(as_of: datetime, **criteria) -> list[ReviewView]:
    """Read reviews matching store ``criteria`` and resolve each one."""
    reviews = fetch(Review, **criteria)
    actions = latest_actions([review.id for review in reviews])
    return [build_view(review, resolve(review, actions.get(str(review.id))), as_of) for review in reviews]


def compute_metrics(views: list[ReviewView]) -> QueueMetrics:
    by_status = {status.value: 0 for status in ModerationStatus}
    for view in views:
        by_status[view.status] = by_status.get(view.status, 0) + 1

    return QueueMetrics(
        total=len(views),
        pending=sum(1 for view in views if view.state.awaiting_decision),
        flagged=by_status[ModerationStatus.FLAGGED.value],
        aging=sum(1 for view in views if view.is_aging),
        by_status=by_status,
    )


def _within_dates(view: ReviewView, filters: QueueFilters) -> bool:
    if filters.date_from and view.created_at < as_utc(filters.date_from):
        return False
    if filters.date_to and view.created_at > as_utc(filters.date_to):
        return False
    return True


def _matches_search(view: ReviewView, term: str) -> bool:
    return any(term in (text or "").lower() for text in (view.comment, view.venue_name, view.author_name))


def apply_filters(views: list[ReviewView], filters: QueueFilters, as_of: datetime) -> list[ReviewView]:
    band = parse_rating_band(filters.rating)
    since = submitted_since(filters.submitted, as_of)
    term = (filters.search or "").strip().lower()

    selected = []
    for view in views:
        if filters.status and view.status != filters.status:
            continue
        if filters.review_type and view.review_type != filters.review_type:
            continue
        if band and not (band[0] <= view.rating <= band[1]):
            continue
        if filters.severity and view.flag_severity != filters.severity:
            continue
        if since and view.created_at < since:
            continue
        if term and not _matches_search(view, term):
            continue
        selected.append(view)
    return selected


def query_queue(filters: QueueFilters | None = None, as_of: datetime | None = None) -> QueueResult:
    """Build the moderation queue.

    Metrics cover every candidate review (the whole queue for the chosen
    venue/author/date range); ``items`` is the filtered, sorted view of it.
    """
    filters = filters or QueueFilters()
    validate_filters(filters)
    as_of = as_utc(as_of) or datetime.now(UTC)

    candidates = [view for view in load_views(as_of, **filters.store_criteria()) if _within_dates(view, filters)]
    metrics = compute_metrics(candidates)

    items = apply_filters(candidates, filters, as_of)
    items.sort(key=lambda view: view.created_at, reverse=not filters.oldest_first)

    logger.debug(
        "Moderation queue built",
        candidates=metrics.total,
        shown=len(items),
        status=filters.status,
    )
    return QueueResult(items=items, metrics=metrics)
