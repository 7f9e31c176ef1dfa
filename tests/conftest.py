"""Shared test fixtures for the dobiefetch test suite."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from src.data.processor import normalize_dog
from src.data.schemas import NormalizedListing
from src.storage.tables import create_schema

_DETAIL_PAYLOAD: dict[str, Any] = {
    "ppRequired": [
        {
            "AnimalId": "A1042472",
            "ClientId": "CCST",
            "Pet Name": "Mindy (A1042472)",
            "Animal Type": "Dog",
            "Primary Breed": "Doberman Pinscher",
            "Secondary Breed": None,
            "Age": "Adult",
            "Gender": "Female",
            "Size Category": "Large",
            "Description": "<p>Mindy is a sweet girl.</p>",
            "Shelter Name": "Contra Costa County Animal Services",
            "Shelter Address": "4800 Imhoff Place",
            "City": "Martinez",
            "State": "CA",
            "Zip": "94553",
            "Phone Number": "(925) 608-8400",
            "Email": "test@example.com",
            "Website": '<a href="https://example.com/ccas" target="_blank">Visit</a>',
            "Pet Location": "Martinez",
            "Pet Location Address": "4800 Imhoff Place<br>Martinez, CA",
            "filterAge": "Adult",
            "filterGender": "F",
            "filterSize": "L",
            "filterDOB": "2019-05-04T00:00:00",
            "filterDaysOut": "12",
            "filterPrimaryBreed": "DOBERMAN PINSCH",
            "Some Unknown Key": "ignored",
        }
    ],
    "animalDetail": [
        {
            "Bio": "<p>Loves walks.</p>",
            "More Info": "Mindy is Available for Adoption now!",
            "Placement Info": "Adults only",
            "Weight": "68 lbs",
            "Data Updated": "Updated hourly",
        }
    ],
    "imageURL": [
        "https://img.example.com/mindy-1.jpg",
        "https://img.example.com/mindy-2.jpg",
    ],
}

_SEARCH_SUMMARY: dict[str, Any] = {
    "animalId": "A1042472",
    "clientId": "CCST",
    "coverImagePath": "https://img.example.com/mindy-cover.jpg",
    "city": "Pleasant Hill",
    "state": "CA",
    "lat": "37.9479",
    "lon": -122.0608,
    "breed1": "Doberman Pinscher",
    "breed2": "Mix",
    "breedDisplay": "Doberman Pinscher / Mix",
    "ageDisplay": "4 years",
    "locatedAt": "Shelter",
    "broughtToShelter": "2024-01-02",
    "filterBreedGroup": "Working",
    "clientSort": 3,
}


@pytest.fixture
def detail_payload() -> dict[str, Any]:
    """A detail endpoint response for one dog."""
    return copy.deepcopy(_DETAIL_PAYLOAD)


@pytest.fixture
def search_summary() -> dict[str, Any]:
    """A search API record matching ``detail_payload``."""
    return copy.deepcopy(_SEARCH_SUMMARY)


def _make_detail_payload(
    animal_id: str,
    client_id: str = "CCST",
    name: str | None = None,
    images: list[str] | None = None,
) -> dict[str, Any]:
    payload = copy.deepcopy(_DETAIL_PAYLOAD)
    payload["ppRequired"][0]["AnimalId"] = animal_id
    payload["ppRequired"][0]["ClientId"] = client_id
    payload["ppRequired"][0]["Pet Name"] = name or f"Dog ({animal_id})"
    if images is not None:
        payload["imageURL"] = images
    return payload


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Factory for detail payloads of arbitrary dogs."""
    return _make_detail_payload


@pytest.fixture
def sample_listing(detail_payload: dict[str, Any]) -> NormalizedListing:
    """The normalized form of ``detail_payload``."""
    return normalize_dog(detail_payload, "petplace")


@pytest.fixture
def engine() -> Iterator[Engine]:
    """In-memory SQLite engine with the schema applied.

    A StaticPool keeps the single in-memory database alive across
    connections and threads (the TestClient runs handlers in a worker).
    """
    db = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_schema(db)
    yield db
    db.dispose()
