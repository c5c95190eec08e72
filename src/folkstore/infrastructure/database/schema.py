"""SQLAlchemy Core table definitions for the folklore store.

``SCHEMA_VERSION`` is embedded in the store's file name. There are no
migrations: changing a column layout means bumping the version so that a
fresh store is opened instead of colliding with an old one.

``*_json`` columns hold JSON-encoded sub-objects; ``is_outbound`` and
``soul_stamp`` are booleans stored as 0/1. Foreign keys are declared for
documentation only; enforcement is left off.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, MetaData, Table, Text

SCHEMA_VERSION = "1.2"

metadata = MetaData()

partners = Table(
    "partners",
    metadata,
    Column("p_id", Integer, primary_key=True),
    Column("name_json", Text),  # JSON object
    Column("type", Text),
    Column("country_code", Text),
    Column("next_cycle_date", Text),
    Column("contact_enc", Text),
)

projects = Table(
    "projects",
    metadata,
    Column("pr_id", Integer, primary_key=True),
    Column("p_id", Integer, ForeignKey("partners.p_id")),
    Column("title_json", Text),  # JSON object
    Column("is_outbound", Integer),
    Column("status", Text),
    Column("meta_json", Text),  # JSON object
)

artists = Table(
    "artists",
    metadata,
    Column("artist_id", Integer, primary_key=True),
    Column("dna_type", Text),
    Column("name_json", Text),  # JSON object
    Column("soul_stamp", Integer),
    Column("bio_json", Text),  # JSON object
)

certificates = Table(
    "certificates",
    metadata,
    Column("cert_id", Integer, primary_key=True),
    Column("serial_no", Text),
    Column("p_id", Integer, ForeignKey("partners.p_id")),
    Column("issue_date", Text),
    Column("verify_hash", Text),
)
