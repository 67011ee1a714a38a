"""
Navigation & Resilience Controller.

Loads a product page on a tab with a hard timeout, retrying transient
failures and block pages with exponential backoff plus jitter.

This is the only retry boundary in the engine. Nothing above it re-attempts
a failed load, and nothing below it retries on its own.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Iterable, Optional

from playwright.async_api import Error as PlaywrightError

from garment_scraper.config import ScraperConfig
from garment_scraper.constants import EXPONENTIAL_BACKOFF_BASE, PROXY_HEADERS
from garment_scraper.exceptions import NavigationError
from garment_scraper.models import PageLoadResult, ProxyConfig
from garment_scraper.utils.challenge_handler import (
    BLOCK_MARKERS,
    detect_block,
    is_blocked_status,
)

logger = logging.getLogger(__name__)


def backoff_delay(
    attempt: int,
    base: float,
    cap: float,
    jitter: float,
    rng: Optional[random.Random] = None,
) -> float:
    """Calculate exponential backoff delay with jitter.

    Args:
        attempt: Number of attempts already failed (0-indexed)
        base: Initial delay in seconds
        cap: Maximum delay before jitter
        jitter: Upper bound of the random offset added to the delay

    Returns:
        Delay in seconds before the next attempt (never negative)
    """
    rng = rng or random
    # Exponential backoff: base * (2 ^ attempt), capped
    delay = min(base * (EXPONENTIAL_BACKOFF_BASE ** attempt), cap)
    return delay + rng.uniform(0, jitter)


class NavigationController:
    """
    Loads pages with timeout, retry, backoff and block detection.

    Attempts that fail transiently (timeout, network error, no response,
    blocking status, block/CAPTCHA page) are retried up to max_retries
    attempts in total. A non-blocking error status is terminal at once.
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
        block_markers: Iterable[str] = BLOCK_MARKERS,
    ):
        """
        Args:
            config: Scraper tunables (timeout, retries, backoff)
            sleep: Coroutine used for backoff waits (injectable for tests)
            rng: Random source for jitter
            block_markers: Phrases identifying a block page
        """
        self.config = config or ScraperConfig()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._block_markers = tuple(block_markers)

    def _delay_for(self, attempt: int) -> float:
        return backoff_delay(
            attempt,
            base=self.config.backoff_base_s,
            cap=self.config.backoff_cap_s,
            jitter=self.config.backoff_jitter_s,
            rng=self._rng,
        )

    async def load_page(
        self,
        tab,
        url: str,
        proxy: Optional[ProxyConfig] = None,
    ) -> PageLoadResult:
        """
        Navigate a tab to a URL, retrying until it loads cleanly.

        Args:
            tab: Tab from BrowserSession.open_tab(), fingerprint already applied
            url: Product page URL
            proxy: Proxy the tab routes through, if any

        Returns:
            PageLoadResult with the final response status

        Raises:
            NavigationError: When retries are exhausted or the page returns
                a non-success status
        """
        page = tab.page

        if proxy is not None:
            await tab.update_headers(PROXY_HEADERS)
            logger.info(f"Using proxy: {proxy.server}")

        max_attempts = self.config.max_retries
        last_status: Optional[int] = None
        last_reason: Optional[str] = None

        for attempt in range(max_attempts):
            tab.mark_navigated()
            logger.info(f"Navigating to {url} (attempt {attempt + 1}/{max_attempts})")

            try:
                response = await page.goto(
                    url,
                    wait_until=self.config.wait_until,
                    timeout=self.config.navigation_timeout_ms,
                )
                if response is None:
                    last_reason = "no response"
                elif is_blocked_status(response.status):
                    last_status = response.status
                    last_reason = f"blocking status {last_status}"
                elif not 200 <= response.status < 400:
                    raise NavigationError(
                        f"Failed to load page: {response.status} {response.status_text}",
                        url=url,
                        status=response.status,
                        reason=response.status_text,
                        attempts=attempt + 1,
                    )
                else:
                    last_status = response.status
                    marker = detect_block(await page.content(), self._block_markers)
                    if marker is None:
                        logger.info(f"Loaded {url} (status={last_status})")
                        return PageLoadResult(
                            url=url,
                            final_url=page.url,
                            status=last_status,
                            attempts=attempt + 1,
                        )
                    last_reason = f"block marker detected: {marker}"
            except PlaywrightError as e:
                last_reason = f"{type(e).__name__}: {e}"

            if attempt + 1 < max_attempts:
                delay = self._delay_for(attempt)
                logger.warning(
                    f"Navigation attempt {attempt + 1}/{max_attempts} failed for {url} "
                    f"({last_reason}); retrying in {delay:.1f}s"
                )
                await self._sleep(delay)

        logger.error(f"Giving up on {url} after {max_attempts} attempts: {last_reason}")
        raise NavigationError(
            f"Failed to load {url} after {max_attempts} attempts: {last_reason}",
            url=url,
            status=last_status,
            reason=last_reason,
            attempts=max_attempts,
        )
