"""Row counts for the QUERY_COUNTS action."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from folkstore.domain.records import TableCounts
from folkstore.infrastructure.database.schema import artists, partners, projects

if TYPE_CHECKING:
    from sqlalchemy import Table

    from folkstore.infrastructure.database.store import Store


def _count(store: Store, table: Table) -> int:
    return int(store.scalar(select(func.count()).select_from(table)) or 0)


def query_counts(store: Store) -> TableCounts:
    """Three independent read-only counts."""
    return TableCounts(
        partners=_count(store, partners),
        projects=_count(store, projects),
        artists=_count(store, artists),
    )
