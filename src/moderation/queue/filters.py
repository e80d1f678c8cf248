"""Queue filters — what a moderator can narrow the review queue by.

Store-side criteria (venue, author, explicit date range) select the
candidate set that queue metrics are computed over. The remaining
filters only narrow the list shown to the moderator.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from protean.exceptions import ValidationError

from moderation.review.review import FlagSeverity, ModerationStatus, ReviewType

MIN_RATING = 1
MAX_RATING = 5


class DateBucket:
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"

    ALL = (TODAY, WEEK, MONTH)


@dataclass(frozen=True)
class QueueFilters:
    status: str | None = None
    review_type: str | None = None
    rating: str | int | None = None  # "1-2", "3", 3
    severity: str | None = None
    submitted: str | None = None  # DateBucket value
    search: str | None = None
    venue_id: str | None = None
    author_id: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    oldest_first: bool = False

    def store_criteria(self) -> dict:
        criteria = {}
        if self.venue_id:
            criteria["venue_id"] = str(self.venue_id)
        if self.author_id:
            criteria["author_id"] = str(self.author_id)
        return criteria


def as_utc(value: datetime | None) -> datetime | None:
    """Normalise to an aware UTC datetime. Naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def local_midnight(as_of: datetime) -> datetime:
    local = as_utc(as_of).astimezone()
    return local.replace(hour=0, minute=0, second=0, microsecond=0).astimezone(UTC)


def parse_rating_band(value) -> tuple[int, int] | None:
    """Parse a rating filter into an inclusive ``(min, max)`` band.

    ``"1-2"`` is a band, ``"3"``, ``3`` and ``"3-3"`` all mean exactly three.
    """
    if value is None or value == "":
        return None

    if isinstance(value, int):
        low = high = value
    else:
        text = str(value).strip()
        low_text, _, high_text = text.partition("-")
        try:
            low = int(low_text)
            high = int(high_text) if high_text else low
        except ValueError:
            raise ValidationError({"rating": [f"Invalid rating filter '{value}'"]}) from None

    if not (MIN_RATING <= low <= high <= MAX_RATING):
        raise ValidationError({"rating": [f"Rating filter must lie within {MIN_RATING}-{MAX_RATING}"]})
    return low, high


def submitted_since(bucket: str | None, as_of: datetime) -> datetime | None:
    """Start of the submission window for a date bucket; None means unbounded."""
    if not bucket:
        return None
    if bucket == DateBucket.TODAY:
        return local_midnight(as_of)
    if bucket == DateBucket.WEEK:
        return as_utc(as_of) - timedelta(days=7)
    if bucket == DateBucket.MONTH:
        return as_utc(as_of) - timedelta(days=30)
    raise ValidationError({"submitted": [f"Unknown date filter '{bucket}'. Expected one of: {', '.join(DateBucket.ALL)}"]})


def _check_choice(field_name, value, allowed):
    if value and value not in allowed:
        raise ValidationError({field_name: [f"Unknown {field_name.replace('_', ' ')} '{value}'"]})


def validate_filters(filters: QueueFilters) -> None:
    """Raise ValidationError for any filter value the queue cannot apply."""
    _check_choice("status", filters.status, {status.value for status in ModerationStatus})
    _check_choice("review_type", filters.review_type, {review_type.value for review_type in ReviewType})
    _check_choice("severity", filters.severity, {severity.value for severity in FlagSeverity})
    parse_rating_band(filters.rating)
    _check_choice("submitted", filters.submitted, set(DateBucket.ALL))
    if filters.date_from and filters.date_to and as_utc(filters.date_from) > as_utc(filters.date_to):
        raise ValidationError({"date_from": ["date_from must not be after date_to"]})
