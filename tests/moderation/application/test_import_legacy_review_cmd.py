"""Application tests for importing marker-encoded legacy reviews."""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from moderation.review.legacy_import import ImportLegacyReview, restored_comment
from moderation.review.review import ModerationStatus, Review

_CREATED = datetime.now(UTC) - timedelta(days=5)


def _import(comment, **overrides):
    defaults = {
        "venue_id": "venue-legacy",
        "author_id": "author-legacy",
        "rating": 2,
        "comment": comment,
        "created_at": _CREATED,
    }
    defaults.update(overrides)
    review_id = current_domain.process(ImportLegacyReview(**defaults), asynchronous=False)
    return current_domain.repository_for(Review).get(review_id)


class TestImportLegacyReview:
    def test_plain_comment_is_pending(self):
        review = _import("Staff were lovely")
        assert review.status == ModerationStatus.PENDING.value
        assert review.comment == "Staff were lovely"

    def test_keeps_original_submission_time(self):
        review = _import("Staff were lovely")
        assert abs((review.created_at.astimezone(UTC) - _CREATED).total_seconds()) < 1

    def test_flagged_comment(self):
        review = _import("[FLAGGED: high - harassment] terrible")
        assert review.status == ModerationStatus.FLAGGED.value
        assert review.flag_severity == "high"
        assert review.status_reason == "harassment"
        assert review.comment == "terrible"

    def test_rejected_comment(self):
        review = _import("[REJECTED: spam] not relevant")
        assert review.status == ModerationStatus.REJECTED.value
        assert review.status_reason == "spam"
        assert review.moderation_message == "not relevant"
        assert review.comment is None

    def test_escalated_over_flagged(self):
        review = _import("[ESCALATED: second look] [FLAGGED: medium - tone] rude")
        assert review.status == ModerationStatus.ESCALATED.value
        assert review.status_reason == "second look"
        assert review.comment == "rude"

    def test_flag_without_severity_is_refused(self):
        with pytest.raises(ValidationError):
            _import("[FLAGGED: harassment] terrible")

    def test_requires_created_at(self):
        with pytest.raises(ValidationError):
            _import("fine", created_at=None)


class TestRestoredComment:
    def test_strips_marker_chain(self):
        assert restored_comment("[APPROVED] [FLAGGED: low - tone] meh") == "meh"

    def test_rejection_loses_comment(self):
        assert restored_comment("[REJECTED: spam] buy now") is None

    def test_empty(self):
        assert restored_comment("") is None
