"""Fetch search results and detail payloads from PetPlace."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any
from urllib.parse import urlencode, urljoin, urlparse

import requests

from src.data.fields import to_str_or_none
from src.data.schemas import SearchCandidate

logger = logging.getLogger(__name__)

DEFAULT_TARGET_URL = "https://www.petplace.com"
SEARCH_API_URL = "https://api.petplace.com/animal"
DETAIL_API_URL = "https://api.petplace.com/animal/{animal_id}/client/{client_id}"
API_HOST = "api.petplace.com"
MAX_SEARCH_WORKERS = 8

_LISTING_LINK_RE = re.compile(r"/pet-adoption/dogs/([A-Za-z0-9]+)/([A-Za-z0-9_-]+)")


class FetchError(RuntimeError):
    """Raised when an upstream endpoint answers with a non-success status."""


def build_search_url(
    target_url: str,
    zip_postal: str,
    radius: str,
    breed: str,
    override: str | None = None,
) -> str:
    """Build the public search page URL, or return *override* unchanged."""
    if override:
        return override
    params = {
        "milesRadius": radius,
        "filterGender": "",
        "filterAge": "",
        "filterAnimalType": "Dog",
        "filterBreed": breed,
        "filterShelter": "",
        "zipPostal": zip_postal,
        "filterSize": "",
    }
    base = urljoin(target_url or DEFAULT_TARGET_URL, "/pet-adoption/search")
    return f"{base}?{urlencode(params)}"


def is_api_search_url(url: str) -> bool:
    """Return True if *url* points at the JSON search API rather than HTML."""
    parsed = urlparse(url)
    return parsed.hostname == API_HOST and parsed.path.startswith("/animal")


def _detail_url(base_url: str, animal_id: str, client_id: str) -> str:
    return urljoin(base_url, f"/pet-adoption/dogs/{animal_id}/{client_id}")


def extract_search_results(html: str, base_url: str) -> list[SearchCandidate]:
    """Scrape listing links out of a search results page.

    Best effort: any page layout yields zero or more candidates, and the
    same listing linked several times is reported once.

    Args:
        html: Search page body.
        base_url: URL the page was fetched from, for absolute detail URLs.

    Returns:
        Candidates in first-seen order.
    """
    results: dict[tuple[str, str], SearchCandidate] = {}
    for match in _LISTING_LINK_RE.finditer(html or ""):
        animal_id, client_id = match.group(1), match.group(2)
        if (animal_id, client_id) not in results:
            results[(animal_id, client_id)] = SearchCandidate(
                animal_id=animal_id,
                client_id=client_id,
                detail_url=_detail_url(base_url, animal_id, client_id),
            )
    return list(results.values())


def extract_search_results_from_api(
    payload: dict[str, Any], base_url: str = DEFAULT_TARGET_URL
) -> list[SearchCandidate]:
    """Turn a search API response into candidates.

    Entries without both ``animalId`` and ``clientId`` are skipped. The full
    entry is kept as the candidate's summary.
    """
    animals = payload.get("animal") if isinstance(payload, dict) else None
    if not isinstance(animals, list):
        return []

    results = []
    for item in animals:
        if not isinstance(item, dict):
            continue
        animal_id = to_str_or_none(item.get("animalId"))
        client_id = to_str_or_none(item.get("clientId"))
        if not animal_id or not client_id:
            continue
        results.append(
            SearchCandidate(
                animal_id=animal_id,
                client_id=client_id,
                detail_url=_detail_url(base_url, animal_id, client_id),
                cover_image_path=to_str_or_none(item.get("coverImagePath")),
                summary=item,
            )
        )
    return results


class PetPlaceClient:
    """Thin HTTP client for the PetPlace search and detail endpoints.

    Args:
        user_agent: Value sent as ``User-Agent`` on every request.
        timeout: Per-request timeout in seconds; ``None`` keeps the
            transport default.
        session: Optional pre-built session (mainly for tests).
    """

    def __init__(
        self,
        user_agent: str,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.timeout = timeout

    def get_search_page(self, url: str) -> requests.Response:
        """GET a search URL (HTML page or JSON API).

        Raises:
            FetchError: If the response status is not successful.
        """
        response = self.session.get(url, timeout=self.timeout)
        if not response.ok:
            raise FetchError(f"Search fetch failed ({response.status_code})")
        return response

    def search_api(
        self,
        zip_postal: str,
        radius: str,
        breed: str,
        start_index: int = 0,
        session: requests.Session | None = None,
    ) -> dict[str, Any]:
        """POST a structured search to the PetPlace animal API.

        Args:
            zip_postal: Zip code to search around.
            radius: Search radius in miles.
            breed: Breed filter in PetPlace's vocabulary.
            start_index: Result offset.
            session: Session to send the request on; defaults to the
                client's own.

        Raises:
            FetchError: If the response status is not successful.
        """
        body = {
            "locationInformation": {
                "clientId": None,
                "zipPostal": zip_postal,
                "milesRadius": radius,
            },
            "animalFilters": {
                "startIndex": start_index,
                "filterAnimalType": "Dog",
                "filterBreed": [breed],
                "filterGender": "",
                "filterAge": None,
                "filterSize": None,
            },
        }
        response = (session or self.session).post(
            SEARCH_API_URL,
            json=body,
            headers={
                "Accept": "application/json",
                "Origin": DEFAULT_TARGET_URL,
                "Referer": f"{DEFAULT_TARGET_URL}/",
            },
            timeout=self.timeout,
        )
        if not response.ok:
            raise FetchError(f"Search API fetch failed ({response.status_code})")
        return response.json()

    def search_zips(
        self,
        zips: list[str] | tuple[str, ...],
        radius: str,
        breed: str,
        start_index: int = 0,
    ) -> list[SearchCandidate]:
        """Search several zip codes concurrently and flatten the results.

        All requests complete before this returns; results keep zip order.
        A failure for any zip propagates. Each request runs on its own
        session carrying this client's headers; sessions are never shared
        between threads.
        """
        if not zips:
            return []

        def _search(zip_postal: str) -> list[SearchCandidate]:
            with requests.Session() as session:
                session.headers.update(self.session.headers)
                payload = self.search_api(
                    zip_postal, radius, breed, start_index, session=session
                )
            found = extract_search_results_from_api(payload)
            logger.info("Zip %s: %d listings", zip_postal, len(found))
            return found

        workers = min(len(zips), MAX_SEARCH_WORKERS)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            batches = list(executor.map(_search, zips))
        return [candidate for batch in batches for candidate in batch]

    def fetch_detail(self, animal_id: str, client_id: str) -> dict[str, Any]:
        """Fetch the JSON detail payload for one listing.

        Raises:
            FetchError: If the response status is not successful.
        """
        url = DETAIL_API_URL.format(animal_id=animal_id, client_id=client_id)
        response = self.session.get(
            url, headers={"Accept": "application/json"}, timeout=self.timeout
        )
        if not response.ok:
            raise FetchError(
                f"Detail fetch failed ({response.status_code}) "
                f"for {animal_id}/{client_id}"
            )
        return response.json()

    def close(self) -> None:
        self.session.close()
