"""
Batch orchestration across a product list.

Products are scraped in fixed-size batches. Members of a batch run
concurrently; the aggregate result is published to observers once per
batch, which bounds how often a UI has to re-render.

A scrape cycle is keyed by a structural fingerprint of its input list. An
identical cycle that is in flight is joined, and one that already
completed is answered from cache, so the same list is never scraped twice
by accident.
"""

import asyncio
import hashlib
import inspect
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from garment_scraper.config import ScraperConfig
from garment_scraper.exceptions import LaunchError
from garment_scraper.infrastructure.browser_session import (
    BrowserSession,
    BrowserSessionManager,
)
from garment_scraper.models import BatchUpdate, ScrapeRequest, ScrapeResult
from garment_scraper.scraper import ProductImageScraper

logger = logging.getLogger(__name__)


BatchObserver = Callable[[BatchUpdate], Any]
ScraperFactory = Callable[[BrowserSession, ScraperConfig], ProductImageScraper]


def cycle_key(requests: Iterable[ScrapeRequest]) -> str:
    """Structural fingerprint of an input list (order-sensitive)."""
    payload = json.dumps([list(request.key()) for request in requests])
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def duplicate_urls(requests: Iterable[ScrapeRequest]) -> List[str]:
    """URLs that appear more than once, in first-repeat order."""
    seen = set()
    duplicates: List[str] = []
    for request in requests:
        if request.url in seen and request.url not in duplicates:
            duplicates.append(request.url)
        seen.add(request.url)
    return duplicates


def chunk_requests(requests: List[ScrapeRequest], size: int) -> List[List[ScrapeRequest]]:
    """Split a request list into consecutive batches of at most ``size``."""
    return [requests[i:i + size] for i in range(0, len(requests), size)]


@dataclass
class _Cycle:
    key: str
    observers: List[BatchObserver] = field(default_factory=list)
    task: Optional[asyncio.Task] = None


class BatchOrchestrator:
    """
    Drives the product scraper across many products.

    Usage:
        orchestrator = BatchOrchestrator(BrowserSessionManager())
        results = await orchestrator.scrape_all(requests, on_batch=print)

    Features:
    - Fixed-size concurrent batches
    - Per-product failure isolation
    - Once-per-batch aggregate publication
    - Re-entrancy guard keyed by input fingerprint
    - Session closed once all cycles have settled, including on cancellation
    """

    def __init__(
        self,
        manager: BrowserSessionManager,
        config: Optional[ScraperConfig] = None,
        scraper_factory: Optional[ScraperFactory] = None,
    ):
        """
        Args:
            manager: Owner of the shared browser session
            config: Scraper tunables (batch_size in particular)
            scraper_factory: Builds the per-cycle product scraper
        """
        self.manager = manager
        self.config = config or ScraperConfig()
        self._scraper_factory = scraper_factory or (
            lambda session, config: ProductImageScraper(session, config)
        )
        self._cycles: Dict[str, _Cycle] = {}
        self._active_cycles = 0

    def is_running(self, requests: Iterable[ScrapeRequest]) -> bool:
        """Whether a cycle for this exact input is in flight."""
        cycle = self._cycles.get(cycle_key(requests))
        return cycle is not None and cycle.task is not None and not cycle.task.done()

    def forget(self, requests: Iterable[ScrapeRequest]) -> None:
        """Drop a completed cycle from the cache so the input can be scraped again."""
        key = cycle_key(requests)
        cycle = self._cycles.get(key)
        if cycle is not None and cycle.task is not None and cycle.task.done():
            del self._cycles[key]

    async def scrape_all(
        self,
        requests: Iterable[ScrapeRequest],
        on_batch: Optional[BatchObserver] = None,
    ) -> Dict[str, ScrapeResult]:
        """
        Scrape every product, batch by batch.

        Args:
            requests: Products to scrape
            on_batch: Called (or awaited) with a BatchUpdate after each batch

        Returns:
            Mapping of product URL to ScrapeResult

        Raises:
            LaunchError: If the browser cannot be started
            ValueError: If a URL appears more than once
        """
        requests = list(requests)
        if not requests:
            return {}

        duplicates = duplicate_urls(requests)
        if duplicates:
            # Results are keyed by URL, so a repeat would overwrite its twin
            raise ValueError(f"Duplicate product URLs: {', '.join(duplicates)}")

        key = cycle_key(requests)
        existing = self._cycles.get(key)

        if existing is not None and existing.task is not None:
            if not existing.task.done():
                logger.info(f"Scrape cycle {key[:12]} already running; joining it")
                if on_batch is not None:
                    existing.observers.append(on_batch)
                return dict(await asyncio.shield(existing.task))

            if not existing.task.cancelled() and existing.task.exception() is None:
                logger.info(f"Scrape cycle {key[:12]} already completed; returning cached results")
                return dict(existing.task.result())

            # A cycle that failed or was abandoned never completed; start over
            del self._cycles[key]

        cycle = _Cycle(key=key, observers=[on_batch] if on_batch is not None else [])
        cycle.task = asyncio.ensure_future(self._run_cycle(requests, cycle))
        self._cycles[key] = cycle

        try:
            return dict(await cycle.task)
        except BaseException:
            if self._cycles.get(key) is cycle:
                del self._cycles[key]
            raise

    async def _run_cycle(
        self,
        requests: List[ScrapeRequest],
        cycle: _Cycle,
    ) -> Dict[str, ScrapeResult]:
        batches = chunk_requests(requests, self.config.batch_size)
        aggregate: Dict[str, ScrapeResult] = {}
        self._active_cycles += 1

        logger.info(
            f"Scraping {len(requests)} products in {len(batches)} batches "
            f"of up to {self.config.batch_size}"
        )

        try:
            session = await self.manager.acquire()
            scraper = self._scraper_factory(session, self.config)

            for index, batch in enumerate(batches):
                logger.info(f"Batch {index + 1}/{len(batches)}: {len(batch)} products")

                results = await asyncio.gather(
                    *(self._scrape_one(scraper, request) for request in batch)
                )
                for result in results:
                    aggregate[result.url] = result

                failed = sum(1 for result in results if not result.ok)
                logger.info(
                    f"Batch {index + 1}/{len(batches)} complete "
                    f"({len(results) - failed} ok, {failed} failed)"
                )

                await self._publish(
                    cycle,
                    BatchUpdate(
                        batch_index=index,
                        total_batches=len(batches),
                        results=dict(aggregate),
                    ),
                )

            return aggregate
        finally:
            self._active_cycles -= 1
            if self._active_cycles == 0:
                await self.manager.close()

    async def _scrape_one(
        self,
        scraper: ProductImageScraper,
        request: ScrapeRequest,
    ) -> ScrapeResult:
        """Scrape one product; any failure except LaunchError stays with that product."""
        try:
            return await scraper.scrape(request)
        except LaunchError:
            raise
        except Exception as e:
            logger.error(f"Scrape failed for {request.url}: {e}")
            return ScrapeResult(
                url=request.url,
                status=getattr(e, "status", None),
                error=str(e),
                error_type=type(e).__name__,
                finished_at=datetime.now(),
            )

    async def _publish(self, cycle: _Cycle, update: BatchUpdate) -> None:
        for observer in list(cycle.observers):
            try:
                outcome = observer(update)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.warning(f"Batch observer failed: {e}")
