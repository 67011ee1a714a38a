"""
Browser Session Management.

This module owns the one headless browser shared by all scrape calls and
hands out isolated tabs from it.

The session is not a module-level global. A BrowserSessionManager is created
by the caller and passed, by handle, to whatever needs a browser:

    manager = BrowserSessionManager(config)
    session = await manager.acquire()
    async with session.open_tab(proxy) as tab:
        await tab.page.goto(url)
    await manager.close()

Lifecycle transitions (acquire/close) are expected to be serialized by the
caller: create at first use, destroy after all known work has settled.
Closing while tabs are open is a caller error and is logged, not prevented.
"""

import asyncio
import itertools
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, AsyncIterator, Dict, Optional

from playwright.async_api import async_playwright

from garment_scraper.browser_config import BrowserConfig
from garment_scraper.exceptions import LaunchError
from garment_scraper.models import ProxyConfig

logger = logging.getLogger(__name__)


@dataclass
class Tab:
    """An isolated browser context and page owned by one scrape call."""

    tab_id: int
    context: Any
    page: Any
    proxy: Optional[ProxyConfig] = None
    headers: Dict[str, str] = field(default_factory=dict)
    navigated: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    async def update_headers(self, headers: Dict[str, str]) -> None:
        """Merge headers into the tab's extra HTTP headers."""
        self.headers.update(headers)
        await self.page.set_extra_http_headers(dict(self.headers))

    def mark_navigated(self) -> None:
        self.navigated = True


class BrowserSession:
    """
    A running browser process and the tabs opened from it.

    Obtained from BrowserSessionManager.acquire(); never constructed by
    scrape code directly.
    """

    def __init__(self, playwright: Any, browser: Any, config: BrowserConfig):
        self._playwright = playwright
        self._browser = browser
        self._config = config
        self._open_tabs: Dict[int, Tab] = {}
        self._tab_ids = itertools.count(1)
        self._closed = False
        self.started_at = datetime.now()

    @property
    def config(self) -> BrowserConfig:
        return self._config

    @property
    def open_tab_count(self) -> int:
        """Number of tabs currently open."""
        return len(self._open_tabs)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @asynccontextmanager
    async def open_tab(self, proxy: Optional[ProxyConfig] = None) -> AsyncIterator[Tab]:
        """
        Open an isolated tab for exactly one scrape call.

        Usage:
            async with session.open_tab(proxy) as tab:
                await tab.page.goto(url)

        The tab's context is closed on every exit path, including errors
        and cancellation.

        Args:
            proxy: Optional proxy that all of this tab's traffic is routed through

        Yields:
            Tab wrapping a fresh BrowserContext and Page
        """
        if self._closed:
            raise RuntimeError("Browser session is closed. Acquire a new one first.")

        context_options: Dict[str, Any] = {
            "ignore_https_errors": self._config.ignore_https_errors,
        }
        if proxy is not None:
            # Playwright binds proxies to contexts, so routing is fixed here
            context_options["proxy"] = proxy.playwright_proxy

        context = await self._browser.new_context(**context_options)
        tab_id = next(self._tab_ids)

        try:
            page = await context.new_page()
            page.set_default_timeout(self._config.timeout)

            tab = Tab(tab_id=tab_id, context=context, page=page, proxy=proxy)
            self._open_tabs[tab_id] = tab
            logger.debug(f"Opened tab {tab_id} (open tabs: {len(self._open_tabs)})")

            yield tab
        finally:
            self._open_tabs.pop(tab_id, None)
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing tab {tab_id}: {e}")
            logger.debug(f"Closed tab {tab_id} (open tabs: {len(self._open_tabs)})")

    async def close(self) -> None:
        """Terminate the browser process and the Playwright driver."""
        if self._closed:
            return
        self._closed = True

        if self._open_tabs:
            logger.warning(
                f"Closing browser session with {len(self._open_tabs)} tab(s) still open"
            )

        try:
            await self._browser.close()
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")

        try:
            await self._playwright.stop()
        except Exception as e:
            logger.warning(f"Error stopping playwright: {e}")


class BrowserSessionManager:
    """
    Owns the shared browser session: created lazily, reused across scrape
    calls, torn down explicitly by the caller.

    Features:
    - Lazy launch on first acquire()
    - At most one browser process under concurrent first callers
    - Idempotent close()
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        """
        Initialize the session manager.

        Args:
            config: Browser launch configuration
        """
        self.config = config or BrowserConfig()
        self._session: Optional[BrowserSession] = None
        self._lock = asyncio.Lock()
        self._launch_count = 0

    @property
    def is_active(self) -> bool:
        """Whether a browser session is currently running."""
        return self._session is not None

    @property
    def launch_count(self) -> int:
        """How many browser processes this manager has launched."""
        return self._launch_count

    async def acquire(self) -> BrowserSession:
        """
        Return the running session, launching the browser if needed.

        Raises:
            LaunchError: If the browser process fails to start
        """
        if self._session is not None:
            return self._session

        async with self._lock:
            # Another caller may have launched while we waited for the lock
            if self._session is None:
                self._session = await self._launch()
            return self._session

    async def _launch(self) -> BrowserSession:
        """Start Playwright and launch the configured browser engine."""
        logger.info(
            f"Launching {self.config.browser_type} browser "
            f"(headless={self.config.headless})"
        )

        playwright = None
        try:
            playwright = await async_playwright().start()
            launcher = getattr(playwright, self.config.browser_type)

            launch_options: Dict[str, Any] = {"headless": self.config.headless}
            if self.config.launch_args:
                launch_options["args"] = self.config.launch_args

            browser = await launcher.launch(**launch_options)
        except Exception as e:
            if playwright is not None:
                try:
                    await playwright.stop()
                except Exception as stop_error:
                    logger.warning(f"Error stopping playwright after failed launch: {stop_error}")
            raise LaunchError(f"Failed to launch {self.config.browser_type}: {e}") from e

        self._launch_count += 1
        logger.info("Browser launched successfully")
        return BrowserSession(playwright, browser, self.config)

    async def close(self) -> None:
        """
        Close the browser session and clear the reference.

        Safe to call when no session exists.
        """
        async with self._lock:
            session, self._session = self._session, None

        if session is None:
            return

        await session.close()
        logger.info("Browser session closed")
