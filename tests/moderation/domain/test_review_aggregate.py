"""Tests for the Review aggregate: submission, decisions and their events."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from moderation.review.events import (
    ReviewApproved,
    ReviewEscalated,
    ReviewFlagged,
    ReviewRejected,
    ReviewSubmitted,
)
from moderation.review.review import ModerationStatus, Review


def _make_review(**overrides):
    defaults = {
        "venue_id": "venue-001",
        "author_id": "author-001",
        "rating": 4,
        "comment": "Lovely venue, great staff.",
    }
    defaults.update(overrides)
    return Review.submit(**defaults)


class TestSubmission:
    def test_submitted_review_is_pending(self):
        review = _make_review()
        assert review.status == ModerationStatus.PENDING.value
        assert review.rating.score == 4
        assert review.review_type == "venue_review"
        assert review.created_at is not None

    def test_submission_raises_event(self):
        review = _make_review()
        assert len(review._events) == 1
        event = review._events[0]
        assert isinstance(event, ReviewSubmitted)
        assert event.venue_id == "venue-001"
        assert event.rating == 4

    def test_submitted_at_is_kept(self):
        submitted_at = datetime.now(UTC) - timedelta(days=10)
        review = _make_review(submitted_at=submitted_at)
        assert review.created_at == submitted_at

    def test_booking_snapshot(self):
        review = _make_review(
            booking_id="booking-001",
            booking={"event_date": "2026-06-01", "status": "completed", "total_amount": 1200.0, "event_type": "wedding"},
        )
        assert review.booking.status == "completed"
        assert review.booking.event_type == "wedding"

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, rating):
        with pytest.raises(ValidationError):
            _make_review(rating=rating)

    def test_unknown_review_type(self):
        with pytest.raises(ValidationError) as exc:
            _make_review(review_type="product_review")
        assert "review_type" in str(exc.value)


class TestApprove:
    def test_approve(self):
        review = _make_review()
        review.approve(actor_id="admin-1", message="Looks fine")
        assert review.status == ModerationStatus.APPROVED.value
        assert review.moderation_message == "Looks fine"
        assert review.moderated_by == "admin-1"
        assert review.moderated_at is not None

    def test_approve_raises_event(self):
        review = _make_review()
        review._events.clear()
        review.approve(actor_id="admin-1")
        assert isinstance(review._events[-1], ReviewApproved)
        assert review._events[-1].message is None

    def test_approve_requires_actor(self):
        review = _make_review()
        with pytest.raises(ValidationError):
            review.approve(actor_id="")


class TestReject:
    def test_reject_stores_reason_and_message_exactly(self):
        review = _make_review()
        review.reject(actor_id="admin-1", reason="spam", message="not relevant")
        assert review.status == ModerationStatus.REJECTED.value
        assert review.status_reason == "spam"
        assert review.moderation_message == "not relevant"

    def test_reject_keeps_the_comment(self):
        review = _make_review(comment="Buy cheap watches here")
        review.reject(actor_id="admin-1", reason="spam")
        assert review.comment == "Buy cheap watches here"

    def test_reject_message_defaults_to_empty(self):
        review = _make_review()
        review.reject(actor_id="admin-1", reason="fake_review")
        assert review.moderation_message == ""

    def test_reject_with_unknown_reason(self):
        review = _make_review()
        with pytest.raises(ValidationError) as exc:
            review.reject(actor_id="admin-1", reason="too long")
        assert "reason" in str(exc.value)
        assert review.status == ModerationStatus.PENDING.value

    def test_reject_raises_event(self):
        review = _make_review()
        review.reject(actor_id="admin-1", reason="spam", message="not relevant")
        event = review._events[-1]
        assert isinstance(event, ReviewRejected)
        assert event.reason == "spam"
        assert event.message == "not relevant"


class TestFlag:
    def test_flag(self):
        review = _make_review(rating=1, comment="terrible")
        review.flag(actor_id="admin-1", severity="high", reason="harassment")
        assert review.status == ModerationStatus.FLAGGED.value
        assert review.flag_severity == "high"
        assert review.status_reason == "harassment"

    def test_flag_keeps_the_comment(self):
        review = _make_review(rating=1, comment="terrible")
        review.flag(actor_id="admin-1", severity="low", reason="tone")
        assert review.comment == "terrible"

    def test_flag_with_unknown_severity(self):
        review = _make_review()
        with pytest.raises(ValidationError):
            review.flag(actor_id="admin-1", severity="severe", reason="tone")

    def test_flag_requires_reason(self):
        review = _make_review()
        with pytest.raises(ValidationError):
            review.flag(actor_id="admin-1", severity="low", reason="  ")

    def test_flag_raises_event(self):
        review = _make_review()
        review.flag(actor_id="admin-1", severity="medium", reason="profanity")
        event = review._events[-1]
        assert isinstance(event, ReviewFlagged)
        assert event.severity == "medium"


class TestEscalate:
    def test_escalate(self):
        review = _make_review()
        review.escalate(actor_id="admin-1", reason="legal threat")
        assert review.status == ModerationStatus.ESCALATED.value
        assert review.status_reason == "legal threat"
        assert isinstance(review._events[-1], ReviewEscalated)

    def test_escalate_requires_reason(self):
        review = _make_review()
        with pytest.raises(ValidationError):
            review.escalate(actor_id="admin-1", reason="")


class TestDecisionHistory:
    def test_each_decision_is_recorded(self):
        review = _make_review()
        review.flag(actor_id="admin-1", severity="low", reason="tone")
        review.approve(actor_id="admin-2")
        assert [decision.action for decision in review.decisions] == ["flag", "approve"]
        assert review.decisions[1].actor_id == "admin-2"

    def test_repeated_rejection_overwrites_current_reason(self):
        review = _make_review()
        review.reject(actor_id="admin-1", reason="spam", message="not relevant")
        review.reject(actor_id="admin-1", reason="fake_review", message="follow-up")
        assert review.status_reason == "fake_review"
        assert review.moderation_message == "follow-up"
        assert [decision.reason for decision in review.decisions] == ["spam", "fake_review"]


class TestRestore:
    def test_restore_pending(self):
        review = Review.restore(venue_id="venue-1", author_id="author-1", rating=3, status="pending", comment="ok")
        assert review.status == ModerationStatus.PENDING.value
        assert review.decisions == []

    def test_restore_flagged(self):
        review = Review.restore(
            venue_id="venue-1",
            author_id="author-1",
            rating=1,
            status="flagged",
            comment="terrible",
            status_reason="harassment",
            flag_severity="high",
        )
        assert review.status == ModerationStatus.FLAGGED.value
        assert review.flag_severity == "high"
        assert [type(event) for event in review._events] == [ReviewSubmitted]
