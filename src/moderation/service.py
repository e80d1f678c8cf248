"""Review moderation service — the operations moderation screens call.

Each operation names itself for error reporting. Validation problems and
missing reviews propagate unchanged; any other failure is reported as a
ModerationOperationError for that operation, meaning nothing was applied.
Audit failures never reach this layer.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from moderation.audit.recorder import audit_trail
from moderation.errors import ModerationOperationError
from moderation.queue.engine import query_queue
from moderation.queue.filters import QueueFilters
from moderation.queue.reports import review_analytics, review_for_moderation, review_statistics
from moderation.review.legacy_import import ImportLegacyReview
from moderation.review.moderation import ModerateReview
from moderation.review.review import ModerationAction, ModerationStatus
from moderation.review.submission import SubmitReview

logger = structlog.get_logger(__name__)

_PASS_THROUGH = (ValidationError, ObjectNotFoundError, ModerationOperationError)


def _execute(operation, fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except _PASS_THROUGH:
        raise
    except Exception as exc:
        logger.error("Moderation operation failed", operation=operation, error=str(exc))
        raise ModerationOperationError(operation, str(exc)) from exc


def _moderate(review_id, actor_id, action, **payload):
    command = ModerateReview(review_id=review_id, actor_id=actor_id, action=action.value, **payload)
    return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------
def get_pending_reviews(as_of=None):
    """Reviews awaiting a first decision, oldest first."""
    filters = QueueFilters(status=ModerationStatus.PENDING.value, oldest_first=True)
    return _execute("get pending reviews", query_queue, filters, as_of)


def get_filtered_reviews(filters: QueueFilters, as_of=None):
    return _execute("get filtered reviews", query_queue, filters, as_of)


def search_reviews(term: str, as_of=None):
    return _execute("search reviews", query_queue, QueueFilters(search=term), as_of)


def get_review_statistics(as_of=None):
    return _execute("get review statistics", review_statistics, as_of)


def get_review_analytics(period_days: int = 30, as_of=None):
    if period_days < 1:
        raise ValidationError({"period_days": ["Period must be at least one day"]})
    return _execute("get review analytics", review_analytics, period_days, as_of)


def get_review_for_moderation(review_id, as_of=None):
    return _execute("get review for moderation", review_for_moderation, review_id, as_of)


def get_audit_trail(review_id):
    return _execute("get audit trail", audit_trail, review_id)


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------
def approve_review(review_id, actor_id, message=None):
    return _execute("approve review", _moderate, review_id, actor_id, ModerationAction.APPROVE, message=message)


def reject_review(review_id, actor_id, reason, message=""):
    return _execute(
        "reject review",
        _moderate,
        review_id,
        actor_id,
        ModerationAction.REJECT,
        reason=reason,
        message=message,
    )


def flag_review(review_id, actor_id, severity, reason):
    return _execute(
        "flag review",
        _moderate,
        review_id,
        actor_id,
        ModerationAction.FLAG,
        severity=severity,
        reason=reason,
    )


def request_clarification(review_id, actor_id, message):
    return _execute(
        "request clarification",
        _moderate,
        review_id,
        actor_id,
        ModerationAction.REQUEST_CLARIFICATION,
        message=message,
    )


def escalate_review(review_id, actor_id, reason):
    return _execute("escalate review", _moderate, review_id, actor_id, ModerationAction.ESCALATE, reason=reason)


# ---------------------------------------------------------------------------
# Intake
# ---------------------------------------------------------------------------
def submit_review(venue_id, author_id, rating, comment=None, booking=None, **fields):
    def _submit():
        command = SubmitReview(
            venue_id=venue_id,
            author_id=author_id,
            rating=rating,
            comment=comment,
            booking=json.dumps(booking, default=str) if booking else None,
            **fields,
        )
        return current_domain.process(command, asynchronous=False)

    return _execute("submit review", _submit)


def import_legacy_review(venue_id, author_id, rating, comment, created_at, booking=None, **fields):
    def _import():
        command = ImportLegacyReview(
            venue_id=venue_id,
            author_id=author_id,
            rating=rating,
            comment=comment,
            created_at=created_at,
            booking=json.dumps(booking, default=str) if booking else None,
            **fields,
        )
        return current_domain.process(command, asynchronous=False)

    return _execute("import legacy review", _import)
