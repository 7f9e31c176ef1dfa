"""Content-addressed identifiers derived from natural keys."""

from __future__ import annotations

import hashlib


def hash_id(composite_key: str) -> str:
    """Return the SHA-256 hex digest of *composite_key*'s UTF-8 bytes."""
    return hashlib.sha256(composite_key.encode("utf-8")).hexdigest()


def compose_key(*parts: object) -> str:
    """Colon-join natural key components, rendering ``None`` as empty."""
    return ":".join("" if part is None else str(part) for part in parts)


def shelter_key_id(source: str, client_id: str) -> str:
    return hash_id(compose_key(source, client_id))


def dog_key_id(source: str, source_animal_id: str, client_id: str) -> str:
    return hash_id(compose_key(source, source_animal_id, client_id))


def photo_key_id(dog_id: str, url: str) -> str:
    return hash_id(compose_key(dog_id, url))


def run_key_id(search_url: str, started_at: str) -> str:
    return hash_id(compose_key(search_url, started_at))
