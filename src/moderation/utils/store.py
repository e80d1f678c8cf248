"""Read helpers over Protean repositories."""

import os

from protean.utils.globals import current_domain

# Records read per round trip; reads page through until the store is exhausted
PAGE_SIZE = int(os.environ.get("MODERATION_PAGE_SIZE", "1000"))


def fetch(aggregate_cls, **criteria) -> list:
    """Return every record of ``aggregate_cls`` matching ``criteria`` (all records when empty)."""
    query = current_domain.repository_for(aggregate_cls)._dao.query
    if criteria:
        query = query.filter(**criteria)
    query = query.order_by("id")

    records = []
    offset = 0
    while True:
        page = query.limit(PAGE_SIZE).offset(offset).all().items
        records.extend(page)
        if len(page) < PAGE_SIZE:
            return records
        offset += PAGE_SIZE
