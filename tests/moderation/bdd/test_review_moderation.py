"""BDD tests for review moderation."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, when

from moderation import service

ACTOR = "admin-bdd"

scenarios("features/review_moderation.feature")


@when(parsers.cfparse('the review is flagged "{severity}" for "{reason}"'))
def flag_review(review_id, severity, reason):
    service.flag_review(review_id, ACTOR, severity, reason)


@when(parsers.cfparse('the review is rejected for "{reason}" with message "{message}"'))
def reject_review(review_id, reason, message, error):
    try:
        service.reject_review(review_id, ACTOR, reason, message)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the review is escalated for "{reason}"'))
def escalate_review(review_id, reason):
    service.escalate_review(review_id, ACTOR, reason)


@when(parsers.cfparse('clarification is requested with "{message}"'))
def request_clarification(review_id, message):
    service.request_clarification(review_id, ACTOR, message)
