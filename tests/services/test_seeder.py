"""Tests for BootstrapSeeder."""

from __future__ import annotations

import asyncio
import json

import pytest

from folkstore.domain.records import SeedApplied, SeedSkipped, TableCounts
from folkstore.errors import BootstrapFetchError, SeedError
from folkstore.infrastructure.bootstrap import StaticBootstrapSource
from folkstore.infrastructure.database.store import Store
from folkstore.services.counts import query_counts
from folkstore.services.seeder import BootstrapSeeder, parse_document
from tests.conftest import SAMPLE_DOCUMENT, document_bytes, sample_document


class _FailingSource:
    async def fetch(self) -> bytes:
        raise BootstrapFetchError("Failed to fetch bootstrap data from nowhere")


class _CountingSource:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.fetches = 0

    async def fetch(self) -> bytes:
        self.fetches += 1
        return self.data


def _seed(store: Store, doc: dict | None = None) -> SeedSkipped | SeedApplied:
    seeder = BootstrapSeeder(StaticBootstrapSource(document_bytes(doc)))
    return asyncio.run(seeder.seed(store))


class TestSeedEmptyStore:
    def test_reports_counts_from_document(self, store: Store) -> None:
        result = _seed(store)
        assert result == SeedApplied(counts=TableCounts(partners=1, projects=1, artists=0))

    def test_rows_land_in_tables(self, store: Store) -> None:
        _seed(store)
        assert query_counts(store) == TableCounts(partners=1, projects=1, artists=0)

    def test_json_columns_hold_json_text(self, store: Store) -> None:
        _seed(store)
        (name_json,) = store.exec("SELECT name_json FROM partners WHERE p_id = 1")[0]
        assert json.loads(name_json) == SAMPLE_DOCUMENT["partners"][0]["name_json"]
        (meta_json,) = store.exec("SELECT meta_json FROM projects WHERE pr_id = 1")[0]
        assert json.loads(meta_json) == {"year": 2025, "tags": ["nang yai"]}

    def test_booleans_stored_as_integers(self, store: Store) -> None:
        doc = sample_document(
            artists=[
                {"artist_id": 1, "dna_type": "weaver", "soul_stamp": True},
                {"artist_id": 2, "dna_type": "carver"},
            ]
        )
        _seed(store, doc)
        assert store.exec("SELECT is_outbound FROM projects") == [(1,)]
        assert store.exec("SELECT soul_stamp FROM artists ORDER BY artist_id") == [(1,), (0,)]

    def test_missing_manifest_is_accepted(self, store: Store) -> None:
        doc = sample_document()
        del doc["manifest"]
        assert isinstance(_seed(store, doc), SeedApplied)

    def test_empty_lists(self, store: Store) -> None:
        result = _seed(store, {"partners": [], "projects": [], "artists": []})
        assert result == SeedApplied(counts=TableCounts())


class TestSeedPopulatedStore:
    def test_second_seed_is_skipped(self, store: Store) -> None:
        _seed(store)
        result = _seed(store)
        assert result == SeedSkipped(count=1)
        assert result.message == "Data already exists"
        assert query_counts(store).partners == 1

    def test_skip_does_not_fetch(self, store: Store) -> None:
        store.exec("INSERT INTO partners (p_id) VALUES (1)")
        store.exec("INSERT INTO partners (p_id) VALUES (2)")
        source = _CountingSource(document_bytes())
        result = asyncio.run(BootstrapSeeder(source).seed(store))
        assert result == SeedSkipped(count=2)
        assert source.fetches == 0


    def test_rechecks_after_fetch(self, store: Store) -> None:
        class _RacingSource:
            """Another writer seeds the store while this fetch is in flight."""

            async def fetch(self) -> bytes:
                store.exec("INSERT INTO partners (p_id, type) VALUES (99, 'guild')")
                return document_bytes()

        result = asyncio.run(BootstrapSeeder(_RacingSource()).seed(store))
        assert result == SeedSkipped(count=1)
        assert query_counts(store) == TableCounts(partners=1, projects=0, artists=0)


class TestSeedFailures:
    def test_insert_failure_rolls_back_everything(self, store: Store) -> None:
        doc = sample_document(
            projects=[
                {"pr_id": 7, "p_id": 1},
                {"pr_id": 7, "p_id": 1},
            ]
        )
        with pytest.raises(SeedError, match="rolled back"):
            _seed(store, doc)
        assert query_counts(store) == TableCounts()

    def test_retry_after_rollback_succeeds(self, store: Store) -> None:
        bad = sample_document(partners=SAMPLE_DOCUMENT["partners"] * 2)
        with pytest.raises(SeedError):
            _seed(store, bad)
        assert isinstance(_seed(store), SeedApplied)

    def test_fetch_failure_propagates(self, store: Store) -> None:
        with pytest.raises(BootstrapFetchError):
            asyncio.run(BootstrapSeeder(_FailingSource()).seed(store))
        assert query_counts(store).partners == 0

    def test_malformed_json(self) -> None:
        with pytest.raises(SeedError, match="Malformed"):
            parse_document(b"{not json")

    def test_record_missing_key(self) -> None:
        with pytest.raises(SeedError, match="Malformed"):
            parse_document(json.dumps({"partners": [{"type": "guild"}]}).encode())
