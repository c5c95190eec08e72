"""Action results and bootstrap document records.

Results are a tagged union keyed by ``status`` so each action handler has a
statically known output. Bootstrap records mirror the table columns; the
``*_json`` fields hold arbitrary structured sub-objects and are encoded to
JSON text only when written to the store.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

# --- Action results ---


class TableCounts(BaseModel):
    """Row counts reported by QUERY_COUNTS."""

    model_config = {"frozen": True}

    partners: int = 0
    projects: int = 0
    artists: int = 0


class SeedSkipped(BaseModel):
    """SEED_DATA found existing data and changed nothing."""

    model_config = {"frozen": True}

    status: Literal["skipped"] = "skipped"
    message: str = "Data already exists"
    count: int


class SeedApplied(BaseModel):
    """SEED_DATA loaded the bootstrap document."""

    model_config = {"frozen": True}

    status: Literal["seeded"] = "seeded"
    counts: TableCounts


SeedResult = Annotated[SeedSkipped | SeedApplied, Field(discriminator="status")]


# --- Bootstrap document ---


class Manifest(BaseModel):
    """Informational header of the bootstrap document."""

    version: str = "unknown"


class PartnerRecord(BaseModel):
    p_id: int
    name_json: Any = None
    type: str | None = None
    country_code: str | None = None
    next_cycle_date: str | None = None
    contact_enc: str | None = None


class ProjectRecord(BaseModel):
    pr_id: int
    p_id: int | None = None
    title_json: Any = None
    is_outbound: bool = False
    status: str | None = None
    meta_json: Any = None


class ArtistRecord(BaseModel):
    artist_id: int
    dna_type: str | None = None
    name_json: Any = None
    soul_stamp: bool = False
    bio_json: Any = None


class BootstrapDocument(BaseModel):
    """Parsed bootstrap blob: manifest plus one list per seeded table."""

    manifest: Manifest = Field(default_factory=Manifest)
    partners: list[PartnerRecord] = Field(default_factory=list)
    projects: list[ProjectRecord] = Field(default_factory=list)
    artists: list[ArtistRecord] = Field(default_factory=list)
