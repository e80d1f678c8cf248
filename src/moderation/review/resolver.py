"""Moderation state resolution.

``resolve`` maps a review's persisted representation to its moderation
status and flag metadata. Reviews carry an explicit status; records from
the legacy store do not, and encode their status as bracketed markers
prepended to the comment:

    [APPROVED ...]                             -> approved
    [REJECTED: <reason>] <message>             -> rejected
    [FLAGGED: <severity> - <reason>] <comment> -> flagged
    [ESCALATED: <reason>] <comment>            -> escalated

When several markers are present the first one in the string wins.
Resolution is pure and never raises; anything unrecognised is pending.
"""

import re
from dataclasses import dataclass

from moderation.review.review import ModerationAction, ModerationStatus

_MARKER = re.compile(r"\[(APPROVED|REJECTED|FLAGGED|ESCALATED)(?=[\s:\]])([^\]]*)\]")
_FLAG_DETAIL = re.compile(r"^(low|medium|high|critical)\b\s*(?:-\s*(.*))?$", re.IGNORECASE | re.DOTALL)

_STATUS_BY_MARKER = {
    "APPROVED": ModerationStatus.APPROVED.value,
    "REJECTED": ModerationStatus.REJECTED.value,
    "FLAGGED": ModerationStatus.FLAGGED.value,
    "ESCALATED": ModerationStatus.ESCALATED.value,
}

_KNOWN_STATUSES = {status.value for status in ModerationStatus}


@dataclass(frozen=True)
class FlagMetadata:
    severity: str | None
    reason: str | None


@dataclass(frozen=True)
class ModerationState:
    """Resolved moderation status of one review."""

    status: str
    flag: FlagMetadata | None = None
    reason: str | None = None
    message: str | None = None

    @property
    def is_flagged(self) -> bool:
        return self.status == ModerationStatus.FLAGGED.value

    @property
    def awaiting_decision(self) -> bool:
        return self.status in (
            ModerationStatus.PENDING.value,
            ModerationStatus.CLARIFICATION_REQUESTED.value,
        )


PENDING = ModerationState(status=ModerationStatus.PENDING.value)


@dataclass(frozen=True)
class Marker:
    """One bracketed marker read from a legacy comment."""

    status: str
    detail: str


def _marker_from(match) -> Marker:
    detail = match.group(2).strip().removeprefix(":").strip()
    return Marker(status=_STATUS_BY_MARKER[match.group(1)], detail=detail)


def parse_markers(comment: str | None) -> tuple[list[Marker], str]:
    """Peel the chain of markers at the head of ``comment``, outermost first.

    Returns the markers and the text left after the last one. A chain stops
    at a rejection: the legacy store replaced the whole comment when
    rejecting, so the text after it is the rejection message.
    """
    markers = []
    text = (comment or "").lstrip()
    match = _MARKER.match(text)
    while match:
        markers.append(_marker_from(match))
        text = text[match.end() :].lstrip()
        if markers[-1].status == ModerationStatus.REJECTED.value:
            break
        match = _MARKER.match(text)
    return markers, text.strip()


def state_from_marker(marker: Marker | None, trailing_text: str | None = None) -> ModerationState:
    if marker is None:
        return PENDING

    if marker.status == ModerationStatus.FLAGGED.value:
        match = _FLAG_DETAIL.match(marker.detail)
        if match:
            severity = match.group(1).lower()
            reason = (match.group(2) or "").strip() or None
        else:
            severity = None
            reason = marker.detail or None
        return ModerationState(
            status=marker.status,
            flag=FlagMetadata(severity=severity, reason=reason),
            reason=reason,
        )

    if marker.status == ModerationStatus.REJECTED.value:
        return ModerationState(status=marker.status, reason=marker.detail or None, message=trailing_text)

    if marker.status == ModerationStatus.ESCALATED.value:
        return ModerationState(status=marker.status, reason=marker.detail or None)

    return ModerationState(status=marker.status, message=marker.detail or None)


def resolve_comment(comment: str | None) -> ModerationState:
    """Resolve a legacy, marker-encoded comment."""
    if not comment:
        return PENDING
    match = _MARKER.search(comment)
    if not match:
        return PENDING
    return state_from_marker(_marker_from(match), comment[match.end() :].strip())


def _state_from_fields(review) -> ModerationState:
    status = review.status
    if status not in _KNOWN_STATUSES:
        return PENDING
    if status == ModerationStatus.FLAGGED.value:
        return ModerationState(
            status=status,
            flag=FlagMetadata(severity=review.flag_severity, reason=review.status_reason),
            reason=review.status_reason,
        )
    return ModerationState(status=status, reason=review.status_reason, message=review.moderation_message)


def resolve(review, last_action: str | None = None) -> ModerationState:
    """Resolve the moderation state of ``review``.

    ``last_action`` is the most recent audit action for the review. A review
    still pending whose latest action asked for clarification resolves to
    ``clarification_requested``.
    """
    if getattr(review, "status", None):
        state = _state_from_fields(review)
    else:
        state = resolve_comment(getattr(review, "comment", None))

    if state.status == ModerationStatus.PENDING.value and last_action == ModerationAction.REQUEST_CLARIFICATION.value:
        return ModerationState(status=ModerationStatus.CLARIFICATION_REQUESTED.value)
    return state
