"""Map PetPlace detail payloads onto dog, shelter and photo records."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from src.data.fields import (
    infer_status,
    parse_date,
    parse_float,
    parse_weight,
    parse_website_url,
    split_display_name,
)
from src.data.identity import dog_key_id, photo_key_id, shelter_key_id
from src.data.schemas import (
    DetailPayload,
    DogRecord,
    NormalizedListing,
    PhotoRecord,
    SearchSummary,
    ShelterRecord,
)

logger = logging.getLogger(__name__)

LISTING_BASE_URL = "https://www.petplace.com"
API_BASE_URL = "https://api.petplace.com"


def listing_url(animal_id: str, client_id: str) -> str:
    return f"{LISTING_BASE_URL}/pet-adoption/dogs/{animal_id}/{client_id}"


def source_api_url(animal_id: str, client_id: str) -> str:
    return f"{API_BASE_URL}/animal/{animal_id}/client/{client_id}"


def normalize_dog(
    payload: dict[str, Any],
    source: str,
    summary: dict[str, Any] | None = None,
    cover_image_path: str | None = None,
) -> NormalizedListing:
    """Normalize one detail payload into dog, shelter and photo records.

    When a search summary is supplied its geolocation, breed display, cover
    image and sort-order fields win over anything in the detail payload,
    since multi-zip searches return the full record in the summary.

    Args:
        payload: Raw JSON from the detail endpoint.
        source: Source name used in every natural key (e.g. ``"petplace"``).
        summary: Raw search API record for this animal, if any.
        cover_image_path: Cover image from an HTML or API search result.

    Returns:
        NormalizedListing with ids derived from natural keys.
    """
    decoded = DetailPayload.model_validate(payload)
    pp = decoded.required()
    detail = decoded.detail()
    search = SearchSummary.model_validate(summary) if summary is not None else None

    source_animal_id = pp.animal_id or ""
    client_id = pp.client_id or ""
    ingested_at = datetime.now(UTC)

    shelter_id = shelter_key_id(source, client_id)
    dog_id = dog_key_id(source, source_animal_id, client_id)

    cover = (search.cover_image_path if search else None) or cover_image_path
    photos = _build_photos(dog_id, decoded.image_urls, cover, source, ingested_at)

    dog = DogRecord(
        id=dog_id,
        source=source,
        source_animal_id=source_animal_id,
        client_id=client_id,
        name=split_display_name(pp.pet_name),
        full_name=pp.pet_name,
        animal_type=pp.animal_type or "Dog",
        primary_breed=pp.primary_breed,
        secondary_breed=pp.secondary_breed,
        age=pp.age,
        gender=pp.gender,
        size_category=pp.size_category,
        description_html=pp.description,
        bio_html=detail.bio,
        more_info_html=detail.more_info,
        placement_info=detail.placement_info,
        weight_lbs=parse_weight(detail.weight),
        status=infer_status(detail.more_info),
        shelter_id=shelter_id,
        listing_url=listing_url(source_animal_id, client_id),
        source_api_url=source_api_url(source_animal_id, client_id),
        data_updated_note=detail.data_updated,
        filter_age=pp.filter_age,
        filter_gender=pp.filter_gender,
        filter_size=pp.filter_size,
        filter_dob=parse_date(pp.filter_dob),
        filter_days_out=parse_float(pp.filter_days_out),
        filter_primary_breed=pp.filter_primary_breed,
        ingested_at=ingested_at,
        source_updated_at=None,
        raw_payload=_raw_payload(payload, summary),
        **_summary_fields(search, pp.primary_breed, pp.secondary_breed, pp.city, pp.state),
    )
    dog.cover_image_url = dog.cover_image_url or (photos[0].url if photos else None)

    shelter = ShelterRecord(
        id=shelter_id,
        source=source,
        client_id=client_id,
        name=pp.shelter_name or "",
        address_line1=pp.shelter_address,
        city=pp.city,
        state=pp.state,
        zip=pp.zip,
        phone=pp.phone_number or pp.pet_location_phone,
        email=pp.email,
        website_url=parse_website_url(pp.website),
        location_label=pp.pet_location,
        location_address_html=pp.pet_location_address,
        ingested_at=ingested_at,
    )

    logger.debug(
        "Normalized %s/%s with %d photos", source_animal_id, client_id, len(photos)
    )
    return NormalizedListing(dog=dog, shelter=shelter, photos=photos)


def _summary_fields(
    search: SearchSummary | None,
    primary_breed: str | None,
    secondary_breed: str | None,
    city: str | None,
    state: str | None,
) -> dict[str, Any]:
    """Fields the search summary owns, with detail-payload fallbacks."""
    if search is None:
        return {
            "breed1": primary_breed,
            "breed2": secondary_breed,
            "breed_display": primary_breed,
            "city": city,
            "state": state,
        }
    return {
        "breed1": search.breed1 or primary_breed,
        "breed2": search.breed2 or secondary_breed,
        "breed_display": search.breed_display or search.breed1 or primary_breed,
        "age_display": search.age_display,
        "cover_image_url": search.cover_image_path,
        "located_at": search.located_at,
        "brought_to_shelter": search.brought_to_shelter,
        "city": search.city or city,
        "state": search.state or state,
        "lat": search.lat,
        "lon": search.lon,
        "filter_breed_group": search.filter_breed_group,
        "client_sort": search.client_sort,
    }


def _build_photos(
    dog_id: str,
    image_urls: list[str],
    cover: str | None,
    source: str,
    ingested_at: datetime,
) -> list[PhotoRecord]:
    """Order photo URLs with the cover image first and index them.

    The cover is only prepended when the detail payload does not already
    carry it. Repeated URLs are dropped so photo ids stay unique.
    """
    urls = [cover, *image_urls] if cover and cover not in image_urls else list(image_urls)
    ordered = list(dict.fromkeys(urls))
    return [
        PhotoRecord(
            id=photo_key_id(dog_id, url),
            dog_id=dog_id,
            url=url,
            is_primary=index == 0,
            position=index,
            source=source,
            ingested_at=ingested_at,
        )
        for index, url in enumerate(ordered)
    ]


def _raw_payload(
    payload: dict[str, Any], summary: dict[str, Any] | None
) -> dict[str, Any]:
    if summary is None:
        return payload
    return {"detail": payload, "summary": summary}
