"""Pydantic models for upstream payloads, normalized records and API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from src.data.fields import parse_float, parse_int, to_str_or_none


def _dict_items(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _string_items(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


LooseStr = Annotated[str | None, BeforeValidator(to_str_or_none)]
LooseInt = Annotated[int | None, BeforeValidator(parse_int)]
LooseFloat = Annotated[float | None, BeforeValidator(parse_float)]


# ---------------------------------------------------------------------------
# Upstream payloads
# ---------------------------------------------------------------------------


class _SourceFields(BaseModel):
    """Flat source dictionary keyed by human-readable field names.

    Unknown keys are ignored and missing keys decode to ``None``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RequiredFields(_SourceFields):
    """The ``ppRequired[0]`` block of a detail payload."""

    animal_id: LooseStr = Field(default=None, alias="AnimalId")
    client_id: LooseStr = Field(default=None, alias="ClientId")
    pet_name: LooseStr = Field(default=None, alias="Pet Name")
    animal_type: LooseStr = Field(default=None, alias="Animal Type")
    primary_breed: LooseStr = Field(default=None, alias="Primary Breed")
    secondary_breed: LooseStr = Field(default=None, alias="Secondary Breed")
    age: LooseStr = Field(default=None, alias="Age")
    gender: LooseStr = Field(default=None, alias="Gender")
    size_category: LooseStr = Field(default=None, alias="Size Category")
    description: LooseStr = Field(default=None, alias="Description")
    shelter_name: LooseStr = Field(default=None, alias="Shelter Name")
    shelter_address: LooseStr = Field(default=None, alias="Shelter Address")
    city: LooseStr = Field(default=None, alias="City")
    state: LooseStr = Field(default=None, alias="State")
    zip: LooseStr = Field(default=None, alias="Zip")
    phone_number: LooseStr = Field(default=None, alias="Phone Number")
    pet_location_phone: LooseStr = Field(default=None, alias="Pet Location Phone")
    email: LooseStr = Field(default=None, alias="Email")
    website: LooseStr = Field(default=None, alias="Website")
    pet_location: LooseStr = Field(default=None, alias="Pet Location")
    pet_location_address: LooseStr = Field(default=None, alias="Pet Location Address")
    filter_age: LooseStr = Field(default=None, alias="filterAge")
    filter_gender: LooseStr = Field(default=None, alias="filterGender")
    filter_size: LooseStr = Field(default=None, alias="filterSize")
    filter_dob: LooseStr = Field(default=None, alias="filterDOB")
    filter_days_out: LooseStr = Field(default=None, alias="filterDaysOut")
    filter_primary_breed: LooseStr = Field(default=None, alias="filterPrimaryBreed")


class DetailFields(_SourceFields):
    """The ``animalDetail[0]`` block of a detail payload."""

    bio: LooseStr = Field(default=None, alias="Bio")
    more_info: LooseStr = Field(default=None, alias="More Info")
    placement_info: LooseStr = Field(default=None, alias="Placement Info")
    weight: LooseStr = Field(default=None, alias="Weight")
    data_updated: LooseStr = Field(default=None, alias="Data Updated")


class DetailPayload(BaseModel):
    """Decoded detail endpoint response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    pp_required: Annotated[list[RequiredFields], BeforeValidator(_dict_items)] = Field(
        default_factory=list, alias="ppRequired"
    )
    animal_detail: Annotated[list[DetailFields], BeforeValidator(_dict_items)] = Field(
        default_factory=list, alias="animalDetail"
    )
    image_urls: Annotated[list[str], BeforeValidator(_string_items)] = Field(
        default_factory=list, alias="imageURL"
    )

    def required(self) -> RequiredFields:
        return self.pp_required[0] if self.pp_required else RequiredFields()

    def detail(self) -> DetailFields:
        return self.animal_detail[0] if self.animal_detail else DetailFields()


class SearchSummary(_SourceFields):
    """One element of the search API's ``animal`` array."""

    animal_id: LooseStr = Field(default=None, alias="animalId")
    client_id: LooseStr = Field(default=None, alias="clientId")
    cover_image_path: LooseStr = Field(default=None, alias="coverImagePath")
    city: LooseStr = Field(default=None, alias="city")
    state: LooseStr = Field(default=None, alias="state")
    lat: LooseFloat = Field(default=None, alias="lat")
    lon: LooseFloat = Field(default=None, alias="lon")
    breed1: LooseStr = Field(default=None, alias="breed1")
    breed2: LooseStr = Field(default=None, alias="breed2")
    breed_display: LooseStr = Field(default=None, alias="breedDisplay")
    age_display: LooseStr = Field(default=None, alias="ageDisplay")
    located_at: LooseStr = Field(default=None, alias="locatedAt")
    brought_to_shelter: LooseStr = Field(default=None, alias="broughtToShelter")
    filter_breed_group: LooseStr = Field(default=None, alias="filterBreedGroup")
    client_sort: LooseInt = Field(default=None, alias="clientSort")


class SearchCandidate(BaseModel):
    """A listing found by the search step, before its detail is fetched."""

    animal_id: str
    client_id: str
    detail_url: str
    cover_image_path: str | None = None
    summary: dict[str, Any] | None = Field(
        default=None,
        description="Raw search API record, present for API-sourced candidates",
    )

    @property
    def key(self) -> tuple[str, str]:
        return (self.animal_id, self.client_id)


# ---------------------------------------------------------------------------
# Normalized records
# ---------------------------------------------------------------------------


class ShelterRecord(BaseModel):
    """Organization holding one or more dogs."""

    id: str
    source: str
    client_id: str
    name: str = ""
    address_line1: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    phone: str | None = None
    email: str | None = None
    website_url: str | None = None
    location_label: str | None = None
    location_address_html: str | None = None
    ingested_at: datetime


class DogRecord(BaseModel):
    """One adoptable dog listing, keyed by (source, source_animal_id, client_id)."""

    id: str
    source: str
    source_animal_id: str
    client_id: str
    name: str = ""
    full_name: str | None = None
    animal_type: str = "Dog"
    primary_breed: str | None = None
    secondary_breed: str | None = None
    breed1: str | None = None
    breed2: str | None = None
    breed_display: str | None = None
    age: str | None = None
    age_display: str | None = None
    gender: str | None = None
    size_category: str | None = None
    description_html: str | None = None
    bio_html: str | None = None
    more_info_html: str | None = None
    placement_info: str | None = None
    weight_lbs: float | None = None
    status: str | None = None
    cover_image_url: str | None = None
    located_at: str | None = None
    brought_to_shelter: str | None = None
    city: str | None = None
    state: str | None = None
    lat: float | None = None
    lon: float | None = None
    filter_breed_group: str | None = None
    client_sort: int | None = None
    shelter_id: str
    listing_url: str
    source_api_url: str
    data_updated_note: str | None = None
    filter_age: str | None = None
    filter_gender: str | None = None
    filter_size: str | None = None
    filter_dob: str | None = None
    filter_days_out: float | None = None
    filter_primary_breed: str | None = None
    ingested_at: datetime
    source_updated_at: datetime | None = None
    raw_payload: dict[str, Any] = Field(default_factory=dict)


class PhotoRecord(BaseModel):
    id: str
    dog_id: str
    url: str
    is_primary: bool
    position: int
    source: str
    ingested_at: datetime


class NormalizedListing(BaseModel):
    """Everything one detail payload maps to."""

    dog: DogRecord
    shelter: ShelterRecord
    photos: list[PhotoRecord] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Read API responses
# ---------------------------------------------------------------------------


class PhotoOut(BaseModel):
    url: str
    is_primary: bool
    position: int


class ShelterOut(BaseModel):
    name: str
    address_line1: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    phone: str | None = None
    email: str | None = None
    website_url: str | None = None
    location_label: str | None = None
    location_address_html: str | None = None


class DogFilters(BaseModel):
    filter_age: str | None = None
    filter_gender: str | None = None
    filter_size: str | None = None
    filter_dob: str | None = None
    filter_days_out: float | None = None
    filter_primary_breed: str | None = None


class DogOut(BaseModel):
    """Full dog record as served by the read API."""

    id: str
    source: str
    source_animal_id: str
    client_id: str
    name: str
    full_name: str | None = None
    animal_type: str | None = None
    primary_breed: str | None = None
    secondary_breed: str | None = None
    breed1: str | None = None
    breed2: str | None = None
    breed_display: str | None = None
    age: str | None = None
    age_display: str | None = None
    gender: str | None = None
    size_category: str | None = None
    description_html: str | None = None
    bio_html: str | None = None
    more_info_html: str | None = None
    placement_info: str | None = None
    weight_lbs: float | None = None
    status: str | None = None
    cover_image_url: str | None = None
    located_at: str | None = None
    brought_to_shelter: str | None = None
    city: str | None = None
    state: str | None = None
    lat: float | None = None
    lon: float | None = None
    filter_breed_group: str | None = None
    client_sort: int | None = None
    listing_url: str | None = None
    source_api_url: str | None = None
    data_updated_note: str | None = None
    filters: DogFilters
    shelter: ShelterOut | None = None
    photos: list[PhotoOut] = Field(default_factory=list)
    raw_payload: Any = None
    ingested_at: datetime | None = None
    source_updated_at: datetime | None = None


class DogListResponse(BaseModel):
    count: int = 0
    dogs: list[DogOut] = Field(default_factory=list)


class ShelterBrief(BaseModel):
    name: str
    city: str | None = None
    state: str | None = None


class DogSummaryOut(BaseModel):
    """Compact listing row returned for ``view=summary``."""

    id: str
    name: str
    breed_primary: str | None = None
    age: str | None = None
    gender: str | None = None
    size_category: str | None = None
    status: str | None = None
    cover_image_url: str | None = None
    listing_url: str | None = None
    source_animal_id: str
    client_id: str
    shelter: ShelterBrief | None = None


class DogSummaryListResponse(BaseModel):
    count: int = 0
    dogs: list[DogSummaryOut] = Field(default_factory=list)
