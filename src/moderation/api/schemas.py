"""Pydantic request/response schemas for the Moderation API.

These are separate from Protean commands (anti-corruption pattern).
The API layer is the external contract; commands are internal domain concepts.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class BookingSchema(BaseModel):
    event_date: date | None = None
    status: str | None = None
    total_amount: float | None = None
    event_type: str | None = None


class SubmitReviewRequest(BaseModel):
    venue_id: str
    author_id: str
    rating: int = Field(ge=1, le=5)
    comment: str | None = None
    review_type: str = "venue_review"
    booking_id: str | None = None
    venue_name: str | None = None
    author_name: str | None = None
    booking: BookingSchema | None = None


class ImportLegacyReviewRequest(SubmitReviewRequest):
    created_at: datetime


class ApproveReviewRequest(BaseModel):
    message: str | None = None


class RejectReviewRequest(BaseModel):
    reason: str
    message: str = ""


class FlagReviewRequest(BaseModel):
    severity: str
    reason: str


class EscalateReviewRequest(BaseModel):
    reason: str


class ClarificationRequest(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewIdResponse(BaseModel):
    review_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
    review_status: str | None = None


class ClarificationResponse(BaseModel):
    status: str = "ok"
    message_id: str | None = None
    recipient_id: str | None = None


class ReviewViewResponse(BaseModel):
    review_id: str
    venue_id: str
    venue_name: str | None = None
    author_id: str
    author_name: str | None = None
    booking_id: str | None = None
    review_type: str
    rating: int
    comment: str | None = None
    status: str
    status_reason: str | None = None
    moderation_message: str | None = None
    is_flagged: bool
    flag_severity: str | None = None
    flag_reason: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    days_since_submission: int
    is_aging: bool
    priority: str

    @classmethod
    def from_view(cls, view) -> ReviewViewResponse:
        return cls(
            review_id=view.review_id,
            venue_id=view.venue_id,
            venue_name=view.venue_name,
            author_id=view.author_id,
            author_name=view.author_name,
            booking_id=view.booking_id,
            review_type=view.review_type,
            rating=view.rating,
            comment=view.comment,
            status=view.status,
            status_reason=view.state.reason,
            moderation_message=view.state.message,
            is_flagged=view.is_flagged,
            flag_severity=view.flag_severity,
            flag_reason=view.state.flag.reason if view.state.flag else None,
            created_at=view.created_at,
            updated_at=view.updated_at,
            days_since_submission=view.days_since_submission,
            is_aging=view.is_aging,
            priority=view.priority,
        )


class QueueMetricsResponse(BaseModel):
    total: int
    pending: int
    flagged: int
    aging: int
    by_status: dict[str, int]


class QueueResponse(BaseModel):
    items: list[ReviewViewResponse]
    metrics: QueueMetricsResponse

    @classmethod
    def from_result(cls, result) -> QueueResponse:
        metrics = result.metrics
        return cls(
            items=[ReviewViewResponse.from_view(view) for view in result.items],
            metrics=QueueMetricsResponse(
                total=metrics.total,
                pending=metrics.pending,
                flagged=metrics.flagged,
                aging=metrics.aging,
                by_status=metrics.by_status,
            ),
        )


class StatisticsResponse(BaseModel):
    total: int
    pending: int
    flagged: int
    aging: int
    average_rating: float
    recent_activity: int


class AnalyticsResponse(BaseModel):
    period_days: int
    total_reviews: int
    average_rating: float
    rating_distribution: dict[int, int]
    pending_moderation: int
    flagged_content: int
    rejected_reviews: int


class AuditEntryResponse(BaseModel):
    entry_id: str
    review_id: str
    actor_id: str
    action: str
    detail: str | None = None
    recorded_at: datetime

    @classmethod
    def from_entry(cls, entry) -> AuditEntryResponse:
        return cls(
            entry_id=str(entry.id),
            review_id=str(entry.review_id),
            actor_id=str(entry.actor_id),
            action=entry.action,
            detail=entry.detail,
            recorded_at=entry.recorded_at,
        )


class ReviewDetailResponse(BaseModel):
    review: ReviewViewResponse
    customer_review_count: int
    booking: dict | None = None
    audit_trail: list[AuditEntryResponse]
