"""Audit recorder — appends an AuditEntry for every moderation decision.

Runs as an event handler on the Review stream, after the decision's unit
of work has committed, so the audit write is a second, independent effect.
Writes are retried a bounded number of times; a write that still fails is
logged and dropped. The decision itself stays applied.

Clarification requests change no review and raise no event; the
moderation handler records them directly once the message is delivered.
"""

import os

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from moderation.audit.audit_entry import AuditEntry
from moderation.domain import moderation
from moderation.review.events import (
    ReviewApproved,
    ReviewEscalated,
    ReviewFlagged,
    ReviewRejected,
)
from moderation.review.review import ModerationAction
from moderation.utils.store import fetch

logger = structlog.get_logger(__name__)

AUDIT_WRITE_ATTEMPTS = max(1, int(os.environ.get("AUDIT_WRITE_ATTEMPTS", "3")))


def _append(entry):
    current_domain.repository_for(AuditEntry).add(entry)


def record_moderation_action(review_id, actor_id, action, detail, recorded_at=None):
    """Append one audit entry. Returns the entry, or None when every attempt failed."""
    try:
        entry = AuditEntry.record(
            review_id=review_id,
            actor_id=actor_id,
            action=action,
            detail=detail,
            recorded_at=recorded_at,
        )
    except Exception as exc:
        logger.error("Audit entry rejected", review_id=review_id, action=action, error=str(exc))
        return None

    for attempt in range(1, AUDIT_WRITE_ATTEMPTS + 1):
        try:
            _append(entry)
            return entry
        except Exception as exc:
            logger.warning(
                "Audit write failed",
                review_id=review_id,
                action=action,
                attempt=attempt,
                max_attempts=AUDIT_WRITE_ATTEMPTS,
                error=str(exc),
            )

    logger.error("Audit entry dropped", review_id=review_id, actor_id=actor_id, action=action, detail=detail)
    return None


def audit_trail(review_id) -> list:
    """Audit entries for one review, oldest first."""
    entries = fetch(AuditEntry, review_id=str(review_id))
    return sorted(entries, key=lambda entry: entry.recorded_at)


def latest_actions(review_ids=None) -> dict[str, str]:
    """Most recent audited action per review id, for ``review_ids`` or every review."""
    if review_ids is None:
        entries = fetch(AuditEntry)
    else:
        review_ids = [str(review_id) for review_id in review_ids]
        if not review_ids:
            return {}
        entries = fetch(AuditEntry, review_id__in=review_ids)

    latest = {}
    for entry in sorted(entries, key=lambda entry: entry.recorded_at):
        latest[str(entry.review_id)] = entry.action
    return latest


@moderation.event_handler(part_of=AuditEntry, stream_category="moderation::review")
class ModerationAuditHandler:
    """Turns moderation events into audit entries."""

    @handle(ReviewApproved)
    def on_review_approved(self, event: ReviewApproved) -> None:
        record_moderation_action(
            event.review_id,
            event.actor_id,
            ModerationAction.APPROVE.value,
            event.message or "Approved",
            event.approved_at,
        )

    @handle(ReviewRejected)
    def on_review_rejected(self, event: ReviewRejected) -> None:
        record_moderation_action(
            event.review_id,
            event.actor_id,
            ModerationAction.REJECT.value,
            f"{event.reason}: {event.message or ''}",
            event.rejected_at,
        )

    @handle(ReviewFlagged)
    def on_review_flagged(self, event: ReviewFlagged) -> None:
        record_moderation_action(
            event.review_id,
            event.actor_id,
            ModerationAction.FLAG.value,
            f"Severity: {event.severity}, Reason: {event.reason}",
            event.flagged_at,
        )

    @handle(ReviewEscalated)
    def on_review_escalated(self, event: ReviewEscalated) -> None:
        record_moderation_action(
            event.review_id,
            event.actor_id,
            ModerationAction.ESCALATE.value,
            event.reason,
            event.escalated_at,
        )
