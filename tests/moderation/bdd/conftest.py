"""Shared BDD fixtures and step definitions for review moderation."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from moderation.audit.recorder import audit_trail, latest_actions
from moderation.queue.engine import query_queue
from moderation.review.resolver import resolve
from moderation.review.review import Review


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def _load(review_id):
    return current_domain.repository_for(Review).get(review_id)


def _resolved(review_id):
    return resolve(_load(review_id), latest_actions().get(review_id))


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a review rated {rating:d} saying "{comment}" submitted {days:d} days ago'),
    target_fixture="review_id",
)
def submitted_review(store_review, rating, comment, days):
    return store_review(rating=rating, comment=comment, days_old=days, author_id="author-bdd")


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the review resolves to "{status}"'))
def review_resolves_to(review_id, status):
    assert _resolved(review_id).status == status


@then(parsers.cfparse('the flag severity is "{severity}" with reason "{reason}"'))
def flag_metadata(review_id, severity, reason):
    flag = _resolved(review_id).flag
    assert (flag.severity, flag.reason) == (severity, reason)


@then(parsers.cfparse('the rejection reason is "{reason}" with message "{message}"'))
def rejection_details(review_id, reason, message):
    state = _resolved(review_id)
    assert (state.reason, state.message) == (reason, message)


@then(parsers.cfparse("the moderation queue counts {count:d} aging review"))
def aging_count(count):
    assert query_queue().metrics.aging == count


@then(parsers.cfparse('the audit trail has {count:d} "{action}" entries'))
def audit_entries(review_id, count, action):
    assert [entry.action for entry in audit_trail(review_id)].count(action) == count


@then(parsers.cfparse("exactly {count:d} message was sent to the author"))
def messages_sent(messenger, count):
    assert [message["recipient_id"] for message in messenger.sent_messages] == ["author-bdd"] * count


@then(parsers.cfparse('the review comment is still "{comment}"'))
def comment_unchanged(review_id, comment):
    assert _load(review_id).comment == comment


@then("the moderation action fails with a validation error")
def action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
