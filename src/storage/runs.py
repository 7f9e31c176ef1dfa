"""Search run bookkeeping: one row per collector run, one link per dog seen."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.engine import Connection, Engine

from src.data.identity import run_key_id
from src.storage.tables import dialect_insert, search_results, search_runs

logger = logging.getLogger(__name__)


class SearchRunRecord(BaseModel):
    """One execution of the collector with a given parameter set."""

    id: str
    zip_postal: str
    breed: str
    animal_type: str = "Dog"
    search_url: str
    started_at: datetime
    completed_at: datetime | None = None


def start_run(
    engine: Engine,
    search_url: str,
    zip_postal: str,
    breed: str,
    animal_type: str = "Dog",
) -> SearchRunRecord:
    """Record the start of a run and return it.

    The run id is derived from the search URL and the start timestamp.
    """
    started_at = datetime.now(UTC)
    run = SearchRunRecord(
        id=run_key_id(search_url, started_at.isoformat()),
        zip_postal=zip_postal,
        breed=breed,
        animal_type=animal_type,
        search_url=search_url,
        started_at=started_at,
    )
    with engine.begin() as conn:
        conn.execute(search_runs.insert().values(**run.model_dump()))
    logger.info("Started search run %s", run.id)
    return run


def link_search_result(
    conn: Connection,
    run_id: str,
    dog_id: str,
    source_animal_id: str,
    client_id: str,
) -> None:
    """Link a dog to a run; a pair that is already linked is left alone."""
    stmt = (
        dialect_insert(conn, search_results)
        .values(
            search_run_id=run_id,
            dog_id=dog_id,
            source_animal_id=source_animal_id,
            client_id=client_id,
            ingested_at=datetime.now(UTC),
        )
        .on_conflict_do_nothing(index_elements=["search_run_id", "dog_id"])
    )
    conn.execute(stmt)


def complete_run(engine: Engine, run_id: str) -> datetime:
    """Stamp the run's completion time, however many dogs failed."""
    completed_at = datetime.now(UTC)
    with engine.begin() as conn:
        conn.execute(
            update(search_runs)
            .where(search_runs.c.id == run_id)
            .values(completed_at=completed_at)
        )
    logger.info("Completed search run %s", run_id)
    return completed_at

