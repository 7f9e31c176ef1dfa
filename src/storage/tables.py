"""Relational schema for shelters, dogs, photos and search runs."""

from __future__ import annotations

import logging

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

metadata = MetaData()

shelters = Table(
    "shelters",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("source", String, nullable=False),
    Column("client_id", String, nullable=False),
    Column("name", String, nullable=False, default=""),
    Column("address_line1", String),
    Column("city", String),
    Column("state", String),
    Column("zip", String),
    Column("phone", String),
    Column("email", String),
    Column("website_url", Text),
    Column("location_label", String),
    Column("location_address_html", Text),
    Column("ingested_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("source", "client_id", name="uq_shelters_source_client"),
)

dogs = Table(
    "dogs",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("source", String, nullable=False),
    Column("source_animal_id", String, nullable=False),
    Column("client_id", String, nullable=False),
    Column("name", String, nullable=False, default=""),
    Column("full_name", String),
    Column("animal_type", String),
    Column("primary_breed", String),
    Column("secondary_breed", String),
    Column("breed1", String),
    Column("breed2", String),
    Column("breed_display", String),
    Column("age", String),
    Column("age_display", String),
    Column("gender", String),
    Column("size_category", String),
    Column("description_html", Text),
    Column("bio_html", Text),
    Column("more_info_html", Text),
    Column("placement_info", Text),
    Column("weight_lbs", Float),
    Column("status", String),
    Column("cover_image_url", Text),
    Column("located_at", String),
    Column("brought_to_shelter", String),
    Column("city", String),
    Column("state", String),
    Column("lat", Float),
    Column("lon", Float),
    Column("filter_breed_group", String),
    Column("client_sort", Integer),
    Column("shelter_id", String(64), ForeignKey("shelters.id")),
    Column("listing_url", Text),
    Column("source_api_url", Text),
    Column("data_updated_note", String),
    Column("filter_age", String),
    Column("filter_gender", String),
    Column("filter_size", String),
    Column("filter_dob", String(10)),
    Column("filter_days_out", Float),
    Column("filter_primary_breed", String),
    Column("ingested_at", DateTime(timezone=True), nullable=False),
    Column("source_updated_at", DateTime(timezone=True)),
    Column("raw_payload", JSON),
    UniqueConstraint(
        "source", "source_animal_id", "client_id", name="uq_dogs_natural_key"
    ),
)

photos = Table(
    "photos",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("dog_id", String(64), ForeignKey("dogs.id"), nullable=False, index=True),
    Column("url", Text, nullable=False),
    Column("is_primary", Boolean, nullable=False, default=False),
    Column("position", Integer, nullable=False),
    Column("source", String),
    Column("ingested_at", DateTime(timezone=True)),
)

search_runs = Table(
    "search_runs",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("zip_postal", String),
    Column("breed", String),
    Column("animal_type", String),
    Column("search_url", Text),
    Column("started_at", DateTime(timezone=True), nullable=False),
    Column("completed_at", DateTime(timezone=True)),
)

search_results = Table(
    "search_results",
    metadata,
    Column("search_run_id", String(64), ForeignKey("search_runs.id"), nullable=False),
    Column("dog_id", String(64), ForeignKey("dogs.id"), nullable=False),
    Column("source_animal_id", String),
    Column("client_id", String),
    Column("ingested_at", DateTime(timezone=True)),
    UniqueConstraint("search_run_id", "dog_id", name="uq_search_results_run_dog"),
)

# Columns overwritten on natural-key conflict: everything except the id.
SHELTER_MUTABLE_COLUMNS = [c.name for c in shelters.columns if c.name != "id"]
DOG_MUTABLE_COLUMNS = [c.name for c in dogs.columns if c.name != "id"]


def dialect_insert(conn: Connection, table: Table):
    """Return an ``INSERT`` construct that supports ``ON CONFLICT`` clauses.

    Raises:
        NotImplementedError: For dialects other than SQLite and PostgreSQL.
    """
    name = conn.dialect.name
    if name == "sqlite":
        return sqlite.insert(table)
    if name == "postgresql":
        return postgresql.insert(table)
    raise NotImplementedError(f"Upserts are not supported on dialect {name!r}")


def create_schema(engine: Engine) -> None:
    """Create any missing tables; existing tables are left untouched.

    Args:
        engine: SQLAlchemy engine to create the tables on.
    """
    metadata.create_all(engine, checkfirst=True)
    logger.info("Schema ensured on %s", engine.url.render_as_string(hide_password=True))
