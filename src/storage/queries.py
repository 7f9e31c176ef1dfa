"""Read-side queries backing the dogs API."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, or_, select
from sqlalchemy.engine import Connection, RowMapping

from src.data.schemas import DogFilters, DogOut, PhotoOut, ShelterOut
from src.storage.tables import dogs, photos, shelters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DogQuery:
    """Filters accepted by the list endpoint; ``None`` means unfiltered."""

    q: str | None = None
    breed: str | None = None
    age: str | None = None
    gender: str | None = None
    size: str | None = None
    status: str | None = None
    client_id: str | None = None
    source_animal_id: str | None = None


def _base_select() -> Select:
    return select(
        dogs,
        shelters.c.name.label("shelter_name"),
        shelters.c.address_line1.label("shelter_address_line1"),
        shelters.c.city.label("shelter_city"),
        shelters.c.state.label("shelter_state"),
        shelters.c.zip.label("shelter_zip"),
        shelters.c.phone.label("shelter_phone"),
        shelters.c.email.label("shelter_email"),
        shelters.c.website_url.label("shelter_website_url"),
        shelters.c.location_label.label("shelter_location_label"),
        shelters.c.location_address_html.label("shelter_location_address_html"),
    ).select_from(dogs.outerjoin(shelters, dogs.c.shelter_id == shelters.c.id))


def _apply_filters(stmt: Select, query: DogQuery) -> Select:
    if query.q:
        token = f"%{query.q}%"
        stmt = stmt.where(
            or_(
                dogs.c.name.ilike(token),
                dogs.c.primary_breed.ilike(token),
                dogs.c.secondary_breed.ilike(token),
                dogs.c.description_html.ilike(token),
                shelters.c.name.ilike(token),
            )
        )
    if query.breed:
        stmt = stmt.where(dogs.c.primary_breed.ilike(f"%{query.breed}%"))
    if query.age:
        stmt = stmt.where(dogs.c.age == query.age)
    if query.gender:
        stmt = stmt.where(dogs.c.gender == query.gender)
    if query.size:
        stmt = stmt.where(dogs.c.size_category == query.size)
    if query.status:
        stmt = stmt.where(dogs.c.status == query.status)
    if query.client_id:
        stmt = stmt.where(dogs.c.client_id == query.client_id)
    if query.source_animal_id:
        stmt = stmt.where(dogs.c.source_animal_id == query.source_animal_id)
    return stmt


def _photos_by_dog(conn: Connection, dog_ids: list[str]) -> dict[str, list[PhotoOut]]:
    grouped: dict[str, list[PhotoOut]] = defaultdict(list)
    if not dog_ids:
        return grouped
    rows = conn.execute(
        select(photos.c.dog_id, photos.c.url, photos.c.is_primary, photos.c.position)
        .where(photos.c.dog_id.in_(dog_ids))
        .order_by(photos.c.dog_id, photos.c.position)
    ).mappings()
    for row in rows:
        grouped[row["dog_id"]].append(
            PhotoOut(url=row["url"], is_primary=row["is_primary"], position=row["position"])
        )
    return grouped


def _to_dog_out(row: RowMapping, dog_photos: list[PhotoOut]) -> DogOut:
    """Assemble the nested API shape from a flat joined row."""
    data: dict[str, Any] = dict(row)
    shelter = None
    if data.get("shelter_name"):
        shelter = ShelterOut(
            name=data["shelter_name"],
            address_line1=data["shelter_address_line1"],
            city=data["shelter_city"],
            state=data["shelter_state"],
            zip=data["shelter_zip"],
            phone=data["shelter_phone"],
            email=data["shelter_email"],
            website_url=data["shelter_website_url"],
            location_label=data["shelter_location_label"],
            location_address_html=data["shelter_location_address_html"],
        )
    filters = DogFilters(
        filter_age=data["filter_age"],
        filter_gender=data["filter_gender"],
        filter_size=data["filter_size"],
        filter_dob=data["filter_dob"],
        filter_days_out=data["filter_days_out"],
        filter_primary_breed=data["filter_primary_breed"],
    )
    dog_fields = {name: data[name] for name in DogOut.model_fields if name in data}
    return DogOut(**dog_fields, filters=filters, shelter=shelter, photos=dog_photos)


def list_dogs(
    conn: Connection,
    query: DogQuery,
    limit: int,
    offset: int = 0,
) -> list[DogOut]:
    """Return filtered dogs, most recently ingested first.

    Args:
        conn: Open database connection.
        query: Filters to apply.
        limit: Page size (already clamped by the caller).
        offset: Number of rows to skip.

    Returns:
        List of DogOut with shelter and ordered photos attached.
    """
    stmt = (
        _apply_filters(_base_select(), query)
        .order_by(dogs.c.ingested_at.desc(), dogs.c.id)
        .limit(limit)
        .offset(offset)
    )
    rows = conn.execute(stmt).mappings().all()
    logger.debug("Dog query %s matched %d rows", query, len(rows))
    grouped = _photos_by_dog(conn, [row["id"] for row in rows])
    return [_to_dog_out(row, grouped.get(row["id"], [])) for row in rows]


def get_dog(conn: Connection, dog_id: str) -> DogOut | None:
    """Return one dog by id, or None when it does not exist."""
    row = conn.execute(_base_select().where(dogs.c.id == dog_id)).mappings().first()
    if row is None:
        return None
    grouped = _photos_by_dog(conn, [dog_id])
    return _to_dog_out(row, grouped.get(dog_id, []))
