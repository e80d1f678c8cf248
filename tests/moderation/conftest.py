from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def moderation_bed():
    from moderation.domain import moderation

    bed = DomainFixture(moderation)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(moderation_bed):
    with moderation_bed.domain_context():
        yield


@pytest.fixture()
def messenger():
    from moderation.messaging import get_messenger

    return get_messenger()


@pytest.fixture()
def store_review():
    """Persist a review submitted ``days_old`` days (or ``hours_old`` hours) ago.

    Goes through the aggregate directly so tests control the submission time.
    """
    from moderation.review.review import Review

    def _store(days_old=0, hours_old=0, now=None, **overrides):
        now = now or datetime.now(UTC)
        defaults = {
            "venue_id": "venue-001",
            "author_id": "author-001",
            "rating": 4,
            "comment": "Lovely venue, great staff.",
            "venue_name": "The Grand Hall",
            "author_name": "Sam Carter",
        }
        defaults.update(overrides)
        review = Review.submit(
            submitted_at=now - timedelta(days=days_old, hours=hours_old),
            **defaults,
        )
        current_domain.repository_for(Review).add(review)
        return str(review.id)

    return _store
