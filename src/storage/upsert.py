"""Idempotent persistence of normalized listings.

Each listing is written in its own transaction: the shelter, the dog, the
dog's photo set and the run link either all commit or all roll back.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.engine import Connection, Engine

from src.data.schemas import DogRecord, NormalizedListing, PhotoRecord, ShelterRecord
from src.storage.runs import link_search_result
from src.storage.tables import (
    DOG_MUTABLE_COLUMNS,
    SHELTER_MUTABLE_COLUMNS,
    dialect_insert,
    dogs,
    photos,
    shelters,
)

logger = logging.getLogger(__name__)


def upsert_shelter(conn: Connection, shelter: ShelterRecord) -> str:
    """Insert or overwrite a shelter and return the id stored for its key.

    On a (source, client_id) conflict every column except ``id`` is replaced.
    """
    stmt = dialect_insert(conn, shelters).values(**shelter.model_dump())
    stmt = stmt.on_conflict_do_update(
        index_elements=["source", "client_id"],
        set_={name: stmt.excluded[name] for name in SHELTER_MUTABLE_COLUMNS},
    )
    conn.execute(stmt)
    return conn.execute(
        select(shelters.c.id).where(
            shelters.c.source == shelter.source,
            shelters.c.client_id == shelter.client_id,
        )
    ).scalar_one()


def upsert_dog(conn: Connection, dog: DogRecord) -> str:
    """Insert or overwrite a dog and return the id stored for its key.

    On a (source, source_animal_id, client_id) conflict every column except
    ``id`` is replaced, raw payload included.
    """
    stmt = dialect_insert(conn, dogs).values(**dog.model_dump())
    stmt = stmt.on_conflict_do_update(
        index_elements=["source", "source_animal_id", "client_id"],
        set_={name: stmt.excluded[name] for name in DOG_MUTABLE_COLUMNS},
    )
    conn.execute(stmt)
    return conn.execute(
        select(dogs.c.id).where(
            dogs.c.source == dog.source,
            dogs.c.source_animal_id == dog.source_animal_id,
            dogs.c.client_id == dog.client_id,
        )
    ).scalar_one()


def replace_photos(conn: Connection, dog_id: str, new_photos: list[PhotoRecord]) -> None:
    """Delete every photo of *dog_id* and insert *new_photos* in order."""
    conn.execute(delete(photos).where(photos.c.dog_id == dog_id))
    if new_photos:
        conn.execute(
            photos.insert(),
            [photo.model_dump() | {"dog_id": dog_id} for photo in new_photos],
        )


def persist_listing(
    engine: Engine,
    listing: NormalizedListing,
    run_id: str | None = None,
) -> str:
    """Write one listing atomically and return the persisted dog id.

    The shelter goes first so its resolved id can be set on the dog.

    Args:
        engine: Database engine.
        listing: Output of ``normalize_dog``.
        run_id: Search run to link the dog to, if any.

    Returns:
        The dog id stored for the listing's natural key.
    """
    with engine.begin() as conn:
        listing.dog.shelter_id = upsert_shelter(conn, listing.shelter)
        dog_id = upsert_dog(conn, listing.dog)
        replace_photos(conn, dog_id, listing.photos)
        if run_id is not None:
            link_search_result(
                conn,
                run_id,
                dog_id,
                listing.dog.source_animal_id,
                listing.dog.client_id,
            )
    logger.debug(
        "Persisted %s/%s as %s",
        listing.dog.source_animal_id,
        listing.dog.client_id,
        dog_id,
    )
    return dog_id
