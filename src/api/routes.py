"""FastAPI routes for listing and fetching stored dogs, plus a health check."""

from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from src.data.schemas import (
    DogListResponse,
    DogOut,
    DogSummaryListResponse,
    DogSummaryOut,
    ShelterBrief,
)
from src.storage.engine import ping
from src.storage.queries import DogQuery, get_dog, list_dogs

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

_BEARER_RE = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


def clamp_page_size(
    value: str | None,
    default: int = DEFAULT_PAGE_SIZE,
    maximum: int = MAX_PAGE_SIZE,
) -> int:
    """Parse a requested page size and clamp it to ``maximum``.

    Non-numeric, non-positive or missing values fall back to ``default``.
    """
    try:
        parsed = int(value) if value is not None else 0
    except ValueError:
        return default
    if parsed <= 0:
        return default
    return min(parsed, maximum)


def parse_offset(value: str | None) -> int:
    """Parse an offset; anything that is not a non-negative integer is 0."""
    try:
        parsed = int(value) if value is not None else 0
    except ValueError:
        return 0
    return max(parsed, 0)


def _provided_key(request: Request) -> str | None:
    header_key = request.headers.get("x-api-key")
    if header_key:
        return header_key
    auth = request.headers.get("authorization")
    if not auth:
        return None
    match = _BEARER_RE.match(auth)
    return match.group(1) if match else None


def require_api_key(request: Request) -> None:
    """Reject requests that do not carry the shared API key.

    Raises:
        HTTPException: 500 if the server has no key configured, 401 if the
            client key is missing or wrong.
    """
    expected = request.app.state.config.api_key
    if not expected:
        raise HTTPException(status_code=500, detail="API_KEY not configured")
    if _provided_key(request) != expected:
        raise HTTPException(status_code=401, detail="Unauthorized")


public_router = APIRouter()
router = APIRouter(dependencies=[Depends(require_api_key)])


@public_router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness check; always answers, reporting database reachability.

    Returns:
        Dict with service and database status.
    """
    db_ok = ping(request.app.state.engine)
    return {
        "status": "ok",
        "database": "connected" if db_ok else "disconnected",
    }


def _summarize(dog: DogOut) -> DogSummaryOut:
    shelter = None
    if dog.shelter is not None:
        shelter = ShelterBrief(
            name=dog.shelter.name, city=dog.shelter.city, state=dog.shelter.state
        )
    return DogSummaryOut(
        id=dog.id,
        name=dog.name,
        breed_primary=dog.primary_breed,
        age=dog.age,
        gender=dog.gender,
        size_category=dog.size_category,
        status=dog.status,
        cover_image_url=dog.cover_image_url,
        listing_url=dog.listing_url,
        source_animal_id=dog.source_animal_id,
        client_id=dog.client_id,
        shelter=shelter,
    )


@router.get("/dogs", response_model=DogListResponse | DogSummaryListResponse)
def api_list_dogs(
    request: Request,
    q: str | None = None,
    breed: str | None = None,
    age: str | None = None,
    gender: str | None = None,
    size: str | None = None,
    status: str | None = None,
    client_id: str | None = None,
    source_animal_id: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
    view: str | None = None,
) -> DogListResponse | DogSummaryListResponse:
    """List stored dogs with optional filters and pagination.

    ``limit`` defaults to 50 and is capped at 200; ``view=summary`` returns
    the compact listing shape.
    """
    query = DogQuery(
        q=q,
        breed=breed,
        age=age,
        gender=gender,
        size=size,
        status=status,
        client_id=client_id,
        source_animal_id=source_animal_id,
    )
    try:
        with request.app.state.engine.connect() as conn:
            dogs = list_dogs(conn, query, clamp_page_size(limit), parse_offset(offset))
    except SQLAlchemyError as exc:
        logger.exception("Dog listing query failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    if view == "summary":
        return DogSummaryListResponse(
            count=len(dogs), dogs=[_summarize(dog) for dog in dogs]
        )
    return DogListResponse(count=len(dogs), dogs=dogs)


@router.get("/dogs/{dog_id}", response_model=DogOut)
def api_get_dog(request: Request, dog_id: str) -> DogOut:
    """Fetch one dog with its shelter and ordered photos."""
    try:
        with request.app.state.engine.connect() as conn:
            dog = get_dog(conn, dog_id)
    except SQLAlchemyError as exc:
        logger.exception("Dog lookup failed for %s", dog_id)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    if dog is None:
        raise HTTPException(status_code=404, detail="Not found")
    return dog
