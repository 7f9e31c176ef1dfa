"""Collector run: search, de-duplicate, then fetch and persist each listing."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy.engine import Engine
from tqdm import tqdm

from src.config import Config
from src.data.downloader import (
    PetPlaceClient,
    build_search_url,
    extract_search_results,
    extract_search_results_from_api,
    is_api_search_url,
)
from src.data.processor import normalize_dog
from src.data.schemas import SearchCandidate
from src.storage.runs import complete_run, start_run
from src.storage.tables import create_schema
from src.storage.upsert import persist_listing

logger = logging.getLogger(__name__)


class NoListingsError(RuntimeError):
    """Raised when the search step yields no candidates at all."""


@dataclass(frozen=True)
class RunOptions:
    """Parameters for a single collector run."""

    dry_run: bool = False
    limit: int = 25
    delay_ms: int = 250
    zip_postal: str = "94110"
    zips: tuple[str, ...] = ()
    breed: str = "DOBERMAN PINSCH"
    radius: str = "100"
    start_index: int = 0
    search_url: str | None = None

    @classmethod
    def from_config(cls, config: Config, **overrides: object) -> RunOptions:
        """Build options from configuration, letting non-None overrides win."""
        values = {
            "limit": config.limit,
            "delay_ms": config.delay_ms,
            "zip_postal": config.zip_postal,
            "zips": config.zips,
            "breed": config.breed,
            "radius": config.radius,
            "start_index": config.start_index,
            "search_url": config.search_url,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def zip_label(self) -> str:
        return ",".join(self.zips) if self.zips else self.zip_postal


@dataclass
class RunSummary:
    """Outcome of a collector run."""

    search_url: str
    found: int = 0
    attempted: int = 0
    upserted: int = 0
    failed: int = 0
    dry_run: bool = False
    run_id: str | None = None
    failures: list[tuple[str, str]] = field(default_factory=list)


def dedupe_candidates(candidates: list[SearchCandidate]) -> list[SearchCandidate]:
    """Keep the first candidate per (animal id, client id), in order."""
    seen: dict[tuple[str, str], SearchCandidate] = {}
    for candidate in candidates:
        seen.setdefault(candidate.key, candidate)
    return list(seen.values())


class Collector:
    """Drives one ingestion run against PetPlace.

    Candidates are processed strictly one at a time. A candidate that fails
    to fetch, normalize or persist is logged and skipped; it never aborts
    the run.

    Args:
        client: Upstream HTTP client.
        engine: Database engine; may be None for dry runs.
        source: Source name used in natural keys.
        sleep: Delay function, injectable for tests.
    """

    def __init__(
        self,
        client: PetPlaceClient,
        engine: Engine | None,
        source: str = "petplace",
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.engine = engine
        self.source = source
        self.sleep = sleep

    def search(self, options: RunOptions, target_url: str) -> tuple[str, list[SearchCandidate]]:
        """Collect raw candidates for the configured search.

        Returns:
            Tuple of (search URL, candidates before de-duplication).
        """
        search_url = build_search_url(
            target_url,
            options.zip_postal,
            options.radius,
            options.breed,
            override=options.search_url,
        )

        if options.zips:
            logger.info("Searching %d zip codes concurrently", len(options.zips))
            candidates = self.client.search_zips(
                options.zips, options.radius, options.breed, options.start_index
            )
            return search_url, candidates

        response = self.client.get_search_page(search_url)
        if is_api_search_url(search_url):
            return search_url, extract_search_results_from_api(response.json())

        candidates = extract_search_results(response.text, search_url)
        if not candidates:
            logger.info("No listing links in search page; falling back to the search API")
            payload = self.client.search_api(
                options.zip_postal, options.radius, options.breed, options.start_index
            )
            candidates = extract_search_results_from_api(payload)
        return search_url, candidates

    def run(self, options: RunOptions, target_url: str = "") -> RunSummary:
        """Execute a full collector run.

        Args:
            options: Search and pacing parameters.
            target_url: Base site URL used to build the search URL.

        Returns:
            RunSummary with per-run counters.

        Raises:
            NoListingsError: If the search yields no candidates.
        """
        search_url, raw = self.search(options, target_url)
        candidates = dedupe_candidates(raw)
        selected = candidates[: options.limit]

        logger.info("Loaded search URL=%s", search_url)
        logger.info("Found %d listings", len(candidates))
        summary = RunSummary(search_url=search_url, found=len(candidates))

        if not candidates:
            raise NoListingsError(
                "No listings found. The PetPlace API returned no animals for the "
                "search filters. Verify PETPLACE_ZIP, PETPLACE_RADIUS, and PETPLACE_BREED."
            )

        if options.dry_run:
            logger.info("Dry-run: would fetch %d detail payloads", len(selected))
            summary.dry_run = True
            return summary

        if self.engine is None:
            raise RuntimeError("A database engine is required outside dry-run mode")

        create_schema(self.engine)
        run = start_run(self.engine, search_url, options.zip_label, options.breed)
        summary.run_id = run.id

        for candidate in tqdm(selected, desc="Ingesting", unit="dog"):
            summary.attempted += 1
            try:
                self._ingest(candidate, run.id)
                summary.upserted += 1
            except Exception as exc:
                summary.failed += 1
                summary.failures.append(candidate.key)
                logger.error(
                    "Failed to process %s/%s: %s",
                    candidate.animal_id,
                    candidate.client_id,
                    exc,
                )
            finally:
                self.sleep(options.delay_ms / 1000)

        complete_run(self.engine, run.id)
        logger.info(
            "Upserted %d dogs (%d failed) for run %s",
            summary.upserted,
            summary.failed,
            run.id,
        )
        return summary

    def _ingest(self, candidate: SearchCandidate, run_id: str) -> str:
        payload = self.client.fetch_detail(candidate.animal_id, candidate.client_id)
        listing = normalize_dog(
            payload,
            self.source,
            summary=candidate.summary,
            cover_image_path=candidate.cover_image_path,
        )
        return persist_listing(self.engine, listing, run_id)
