"""
Single-product image scraper.

One call owns one tab for its whole life:

    open tab -> apply fingerprint -> load page -> discover variants
             -> walk variants -> close tab
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from garment_scraper.config import ScraperConfig
from garment_scraper.infrastructure.browser_session import BrowserSession
from garment_scraper.infrastructure.fingerprint import apply_fingerprint
from garment_scraper.infrastructure.navigation import NavigationController
from garment_scraper.models import ProxyConfig, ScrapeRequest, ScrapeResult
from garment_scraper.variants.discovery import discover_variants
from garment_scraper.variants.interaction import DEFAULT_STRATEGIES, InteractionStrategy
from garment_scraper.variants.state_machine import VariantExtractor

logger = logging.getLogger(__name__)


class ProductImageScraper:
    """
    Scrapes every color variant's images from one product page.

    NavigationError propagates to the caller; variant-level failures are
    recorded in ScrapeResult.skipped_variants instead.
    """

    def __init__(
        self,
        session: BrowserSession,
        config: Optional[ScraperConfig] = None,
        strategies: Optional[Sequence[InteractionStrategy]] = None,
        navigator: Optional[NavigationController] = None,
        extractor: Optional[VariantExtractor] = None,
    ):
        """
        Args:
            session: Running browser session to open tabs from
            config: Scraper tunables
            strategies: Interaction strategies for variant switching
            navigator: Navigation controller (built from config when omitted)
            extractor: Variant state machine (built from config when omitted)
        """
        self.session = session
        self.config = config or ScraperConfig()
        self.navigator = navigator or NavigationController(self.config)
        self.extractor = extractor or VariantExtractor(
            self.config,
            strategies=strategies if strategies is not None else DEFAULT_STRATEGIES,
        )

    async def scrape(self, request: ScrapeRequest) -> ScrapeResult:
        """
        Scrape all images for one product.

        Args:
            request: Product URL and optional proxy

        Returns:
            ScrapeResult with one ImageRecord per extracted image

        Raises:
            NavigationError: If the page cannot be loaded
        """
        logger.info(f"Starting image scrape for {request.url}")
        result = ScrapeResult(url=request.url)

        async with self.session.open_tab(request.proxy) as tab:
            await apply_fingerprint(tab, self.session.config)

            load = await self.navigator.load_page(tab, request.url, request.proxy)
            result.status = load.status

            discovery = await discover_variants(tab, self.config.selectors)
            run = await self.extractor.run(tab, discovery)

        result.images = run.records
        result.skipped_variants = run.skipped
        result.finished_at = datetime.now()

        logger.info(
            f"Scraped {len(result.images)} images in {len(result.colors)} colors "
            f"from {request.url}"
        )
        return result


async def scrape_product_images(
    session: BrowserSession,
    url: str,
    proxy: Optional[ProxyConfig] = None,
    config: Optional[ScraperConfig] = None,
) -> ScrapeResult:
    """Scrape one product page with default strategies."""
    scraper = ProductImageScraper(session, config)
    return await scraper.scrape(ScrapeRequest(url=url, proxy=proxy))
