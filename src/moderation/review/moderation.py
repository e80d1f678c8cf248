"""ModerateReview — apply one moderation decision to a review.

Validates the requested action and its payload before touching storage,
then applies the transition and persists the review. Clarification
requests go to the author through the messaging port instead and leave
the review untouched; once the message is delivered the request is
audited directly. Audit entries for decisions are appended afterwards by
the audit recorder, from the events raised here.

Any action is accepted from any status. There is no concurrency check:
when two moderators act on the same review the last write wins.
"""

import structlog
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from moderation.audit.recorder import record_moderation_action
from moderation.domain import moderation
from moderation.errors import ModerationOperationError
from moderation.messaging import get_messenger
from moderation.review.review import ModerationAction, Review

logger = structlog.get_logger(__name__)

# Payload fields each action cannot do without
_REQUIRED_PAYLOAD = {
    ModerationAction.APPROVE: (),
    ModerationAction.REJECT: ("reason",),
    ModerationAction.FLAG: ("severity", "reason"),
    ModerationAction.REQUEST_CLARIFICATION: ("message",),
    ModerationAction.ESCALATE: ("reason",),
}


@moderation.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    action = String(required=True)  # One of ModerationAction values
    message = Text()
    reason = String(max_length=255)
    severity = String(max_length=20)


def parse_action(value) -> ModerationAction:
    try:
        return ModerationAction(value)
    except ValueError:
        allowed = ", ".join(action.value for action in ModerationAction)
        raise ValidationError({"action": [f"Unknown moderation action '{value}'. Expected one of: {allowed}"]}) from None


def validate_payload(action: ModerationAction, command) -> None:
    errors = {}
    for field_name in _REQUIRED_PAYLOAD[action]:
        value = getattr(command, field_name)
        if value is None or not str(value).strip():
            errors[field_name] = [f"{field_name.capitalize()} is required to {action.value.replace('_', ' ')}"]
    if errors:
        raise ValidationError(errors)


def clarification_subject(review) -> str:
    return f"Clarification needed for your review of {review.venue_name or 'the venue'}"


@moderation.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        action = parse_action(command.action)
        validate_payload(action, command)

        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if action == ModerationAction.REQUEST_CLARIFICATION:
            return self._request_clarification(review, command)

        if action == ModerationAction.APPROVE:
            review.approve(actor_id=command.actor_id, message=command.message)
        elif action == ModerationAction.REJECT:
            review.reject(actor_id=command.actor_id, reason=command.reason, message=command.message or "")
        elif action == ModerationAction.FLAG:
            review.flag(actor_id=command.actor_id, severity=command.severity, reason=command.reason)
        else:  # ModerationAction.ESCALATE
            review.escalate(actor_id=command.actor_id, reason=command.reason)

        repo.add(review)

        logger.info(
            "Review moderated",
            review_id=str(review.id),
            actor_id=str(command.actor_id),
            action=action.value,
            status=review.status,
        )
        return review

    def _request_clarification(self, review, command):
        result = get_messenger().send(
            sender_id=str(command.actor_id),
            recipient_id=str(review.author_id),
            subject=clarification_subject(review),
            body=command.message,
            priority="normal",
        )
        if not result.success:
            raise ModerationOperationError("request clarification", result.error or "Message was not delivered")

        record_moderation_action(
            str(review.id),
            str(command.actor_id),
            ModerationAction.REQUEST_CLARIFICATION.value,
            command.message,
        )

        logger.info(
            "Clarification requested",
            review_id=str(review.id),
            actor_id=str(command.actor_id),
            recipient_id=str(review.author_id),
            message_id=result.message_id,
        )
        return result
