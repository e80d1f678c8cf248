"""FastAPI routes for review moderation.

Intake routes accept reviews into the queue. Moderation routes require an
administrator: the caller identifies itself with ``X-Actor-Id`` and must
carry ``X-Actor-Role: admin``.
"""

from dataclasses import dataclass
from datetime import datetime

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from moderation import service
from moderation.api.schemas import (
    AnalyticsResponse,
    ApproveReviewRequest,
    AuditEntryResponse,
    ClarificationRequest,
    ClarificationResponse,
    EscalateReviewRequest,
    FlagReviewRequest,
    ImportLegacyReviewRequest,
    QueueResponse,
    RejectReviewRequest,
    ReviewDetailResponse,
    ReviewIdResponse,
    ReviewViewResponse,
    StatisticsResponse,
    StatusResponse,
    SubmitReviewRequest,
)
from moderation.errors import ModerationOperationError
from moderation.queue.filters import QueueFilters
from moderation.utils.logging import add_context

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Actor:
    actor_id: str
    role: str


def require_admin(
    x_actor_id: str = Header(default=""),
    x_actor_role: str = Header(default=""),
) -> Actor:
    if not x_actor_id or x_actor_role != ADMIN_ROLE:
        raise HTTPException(status_code=403, detail="Review moderation requires an administrator")
    add_context(actor_id=x_actor_id)
    return Actor(actor_id=x_actor_id, role=x_actor_role)


def register_moderation_exception_handlers(app: FastAPI) -> None:
    """Report failed moderation operations as 503 Service Unavailable."""

    @app.exception_handler(ModerationOperationError)
    async def moderation_operation_error_handler(request: Request, exc: ModerationOperationError):
        return JSONResponse(
            status_code=503,
            content={"error": str(exc), "operation": exc.operation},
        )


review_router = APIRouter(prefix="/reviews", tags=["reviews"])


# ---------------------------------------------------------------------------
# Intake
# ---------------------------------------------------------------------------
@review_router.post("", status_code=201, response_model=ReviewIdResponse)
async def submit_review(body: SubmitReviewRequest) -> ReviewIdResponse:
    """Submit a review into the moderation queue."""
    fields = body.model_dump(exclude={"venue_id", "author_id", "rating", "comment", "booking"})
    review_id = service.submit_review(
        venue_id=body.venue_id,
        author_id=body.author_id,
        rating=body.rating,
        comment=body.comment,
        booking=body.booking.model_dump() if body.booking else None,
        **fields,
    )
    return ReviewIdResponse(review_id=review_id)


@review_router.post("/legacy", status_code=201, response_model=ReviewIdResponse)
async def import_legacy_review(body: ImportLegacyReviewRequest, actor: Actor = Depends(require_admin)) -> ReviewIdResponse:
    """Import a review whose moderation state is encoded in its comment."""
    fields = body.model_dump(exclude={"venue_id", "author_id", "rating", "comment", "created_at", "booking"})
    review_id = service.import_legacy_review(
        venue_id=body.venue_id,
        author_id=body.author_id,
        rating=body.rating,
        comment=body.comment,
        created_at=body.created_at,
        booking=body.booking.model_dump() if body.booking else None,
        **fields,
    )
    return ReviewIdResponse(review_id=review_id)


# ---------------------------------------------------------------------------
# Queue & reports
# ---------------------------------------------------------------------------
@review_router.get("/moderation/queue", response_model=QueueResponse)
async def moderation_queue(
    status: str | None = None,
    review_type: str | None = None,
    rating: str | None = None,
    severity: str | None = None,
    submitted: str | None = None,
    search: str | None = None,
    venue_id: str | None = None,
    author_id: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    oldest_first: bool = False,
    actor: Actor = Depends(require_admin),
) -> QueueResponse:
    """Filtered moderation queue with metrics over the whole candidate set."""
    filters = QueueFilters(
        status=status,
        review_type=review_type,
        rating=rating,
        severity=severity,
        submitted=submitted,
        search=search,
        venue_id=venue_id,
        author_id=author_id,
        date_from=date_from,
        date_to=date_to,
        oldest_first=oldest_first,
    )
    return QueueResponse.from_result(service.get_filtered_reviews(filters))


@review_router.get("/moderation/pending", response_model=QueueResponse)
async def pending_reviews(actor: Actor = Depends(require_admin)) -> QueueResponse:
    """Reviews awaiting a first decision, oldest first."""
    return QueueResponse.from_result(service.get_pending_reviews())


@review_router.get("/moderation/statistics", response_model=StatisticsResponse)
async def review_statistics(actor: Actor = Depends(require_admin)) -> StatisticsResponse:
    stats = service.get_review_statistics()
    return StatisticsResponse(
        total=stats.total,
        pending=stats.pending,
        flagged=stats.flagged,
        aging=stats.aging,
        average_rating=stats.average_rating,
        recent_activity=stats.recent_activity,
    )


@review_router.get("/moderation/analytics", response_model=AnalyticsResponse)
async def review_analytics(period_days: int = 30, actor: Actor = Depends(require_admin)) -> AnalyticsResponse:
    analytics = service.get_review_analytics(period_days)
    return AnalyticsResponse(
        period_days=analytics.period_days,
        total_reviews=analytics.total_reviews,
        average_rating=analytics.average_rating,
        rating_distribution=analytics.rating_distribution,
        pending_moderation=analytics.pending_moderation,
        flagged_content=analytics.flagged_content,
        rejected_reviews=analytics.rejected_reviews,
    )


@review_router.get("/{review_id}/moderation", response_model=ReviewDetailResponse)
async def review_for_moderation(review_id: str, actor: Actor = Depends(require_admin)) -> ReviewDetailResponse:
    """One review with its booking, the author's review count and the audit trail."""
    detail = service.get_review_for_moderation(review_id)
    return ReviewDetailResponse(
        review=ReviewViewResponse.from_view(detail.review),
        customer_review_count=detail.customer_review_count,
        booking=detail.booking,
        audit_trail=[AuditEntryResponse.from_entry(entry) for entry in detail.audit_trail],
    )


@review_router.get("/{review_id}/audit", response_model=list[AuditEntryResponse])
async def review_audit_trail(review_id: str, actor: Actor = Depends(require_admin)) -> list[AuditEntryResponse]:
    return [AuditEntryResponse.from_entry(entry) for entry in service.get_audit_trail(review_id)]


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------
@review_router.put("/{review_id}/approve", response_model=StatusResponse)
async def approve_review(
    review_id: str, body: ApproveReviewRequest | None = None, actor: Actor = Depends(require_admin)
) -> StatusResponse:
    review = service.approve_review(review_id, actor.actor_id, message=body.message if body else None)
    return StatusResponse(review_status=review.status)


@review_router.put("/{review_id}/reject", response_model=StatusResponse)
async def reject_review(
    review_id: str, body: RejectReviewRequest, actor: Actor = Depends(require_admin)
) -> StatusResponse:
    review = service.reject_review(review_id, actor.actor_id, reason=body.reason, message=body.message)
    return StatusResponse(review_status=review.status)


@review_router.put("/{review_id}/flag", response_model=StatusResponse)
async def flag_review(review_id: str, body: FlagReviewRequest, actor: Actor = Depends(require_admin)) -> StatusResponse:
    review = service.flag_review(review_id, actor.actor_id, severity=body.severity, reason=body.reason)
    return StatusResponse(review_status=review.status)


@review_router.put("/{review_id}/escalate", response_model=StatusResponse)
async def escalate_review(
    review_id: str, body: EscalateReviewRequest, actor: Actor = Depends(require_admin)
) -> StatusResponse:
    review = service.escalate_review(review_id, actor.actor_id, reason=body.reason)
    return StatusResponse(review_status=review.status)


@review_router.post("/{review_id}/clarification", status_code=201, response_model=ClarificationResponse)
async def request_clarification(
    review_id: str, body: ClarificationRequest, actor: Actor = Depends(require_admin)
) -> ClarificationResponse:
    """Message the review's author asking for clarification."""
    result = service.request_clarification(review_id, actor.actor_id, message=body.message)
    return ClarificationResponse(message_id=result.message_id, recipient_id=result.recipient_id)
