"""Moderation bounded context — triage of venue reviews.

Handles the review moderation queue: intake of submitted reviews, the
moderation state machine (approve, reject, flag, escalate, request
clarification), queue metrics, and the audit trail of every decision.
"""

from protean.domain import Domain

from moderation.utils.logging import configure_logging, get_logger

configure_logging(log_file_prefix="moderation")

logger = get_logger(__name__)

moderation = Domain(name="moderation")
