"""BootstrapSeeder: one idempotent bulk load of the initial domain data.

INVARIANT: seeding only ever happens into an empty ``partners`` table, and
it happens in one transaction. Emptiness is checked again inside that
transaction because the fetch may suspend, letting another seed commit
first. A failure anywhere in the insert loop rolls
back every row, so a failed attempt leaves nothing behind and is safe to
retry later.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import func, insert, select

from folkstore.domain.records import (
    ArtistRecord,
    BootstrapDocument,
    PartnerRecord,
    ProjectRecord,
    SeedApplied,
    SeedSkipped,
    TableCounts,
)
from folkstore.errors import SeedError
from folkstore.infrastructure.database.schema import artists, partners, projects

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from sqlalchemy import Table

    from folkstore.infrastructure.bootstrap import BootstrapSource
    from folkstore.infrastructure.database.store import Store, StoreTransaction

logger = logging.getLogger(__name__)


def _json_text(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def partner_row(p: PartnerRecord) -> dict[str, Any]:
    return {
        "p_id": p.p_id,
        "name_json": _json_text(p.name_json),
        "type": p.type,
        "country_code": p.country_code,
        "next_cycle_date": p.next_cycle_date,
        "contact_enc": p.contact_enc,
    }


def project_row(pr: ProjectRecord) -> dict[str, Any]:
    return {
        "pr_id": pr.pr_id,
        "p_id": pr.p_id,
        "title_json": _json_text(pr.title_json),
        "is_outbound": 1 if pr.is_outbound else 0,
        "status": pr.status,
        "meta_json": _json_text(pr.meta_json),
    }


def artist_row(a: ArtistRecord) -> dict[str, Any]:
    return {
        "artist_id": a.artist_id,
        "dna_type": a.dna_type,
        "name_json": _json_text(a.name_json),
        "soul_stamp": 1 if a.soul_stamp else 0,
        "bio_json": _json_text(a.bio_json),
    }


def parse_document(raw: bytes) -> BootstrapDocument:
    """Parse the bootstrap blob, reporting malformed input as SeedError."""
    try:
        return BootstrapDocument.model_validate_json(raw)
    except ValidationError as exc:
        msg = f"Malformed bootstrap data: {exc.error_count()} validation error(s)"
        raise SeedError(msg) from exc


def _partner_count(run: Callable[[Any], list[tuple[Any, ...]]]) -> int:
    rows = run(select(func.count()).select_from(partners))
    return int(rows[0][0] or 0) if rows else 0


def _insert_all(
    txn: StoreTransaction,
    table: Table,
    records: Iterable[Any],
    to_row: Callable[[Any], dict[str, Any]],
) -> None:
    stmt = txn.prepare(insert(table))
    try:
        for record in records:
            stmt.bind(to_row(record))
            stmt.step()
            stmt.reset()
    finally:
        stmt.finalize()


class BootstrapSeeder:
    """Loads the bootstrap document into an empty store."""

    def __init__(self, source: BootstrapSource) -> None:
        self._source = source

    async def seed(self, store: Store) -> SeedSkipped | SeedApplied:
        logger.debug("Checking for existing data")
        count = _partner_count(store.exec)
        if count > 0:
            return SeedSkipped(count=count)

        logger.debug("Fetching bootstrap data from %r", self._source)
        raw = await self._source.fetch()
        document = parse_document(raw)
        logger.info("Seeding manifest version %s", document.manifest.version)

        try:
            with store.transaction() as txn:
                count = _partner_count(txn.exec)
                if count > 0:
                    logger.info("Another seed committed first (%d partners)", count)
                    return SeedSkipped(count=count)
                _insert_all(txn, partners, document.partners, partner_row)
                _insert_all(txn, projects, document.projects, project_row)
                _insert_all(txn, artists, document.artists, artist_row)
        except Exception as exc:
            logger.warning("Seeding rolled back: %s", exc)
            msg = f"Seeding rolled back: {exc}"
            raise SeedError(msg) from exc

        return SeedApplied(
            counts=TableCounts(
                partners=len(document.partners),
                projects=len(document.projects),
                artists=len(document.artists),
            )
        )
