"""Per-color product image scraper on a shared headless browser."""

__version__ = "0.1.0"

from garment_scraper.models import (
    BatchUpdate,
    ColorVariant,
    ImageRecord,
    PageLoadResult,
    ProxyConfig,
    ScrapeRequest,
    ScrapeResult,
    VariantDiscovery,
)
from garment_scraper.config import PageSelectors, ScraperConfig, settings
from garment_scraper.browser_config import BrowserConfig, STEALTH_CONFIG
from garment_scraper.exceptions import (
    LaunchError,
    NavigationError,
    ScraperError,
    VariantSkipped,
)

# Infrastructure
from garment_scraper.infrastructure import (
    BrowserSession,
    BrowserSessionManager,
    Fingerprint,
    NavigationController,
    Tab,
    apply_fingerprint,
)

# Variants
from garment_scraper.variants import (
    VariantExtractor,
    VariantState,
    discover_variants,
    extract_images,
)

from garment_scraper.scraper import ProductImageScraper, scrape_product_images
from garment_scraper.orchestrator import BatchOrchestrator

__all__ = [
    "BatchOrchestrator",
    "BatchUpdate",
    "BrowserConfig",
    "BrowserSession",
    "BrowserSessionManager",
    "ColorVariant",
    "Fingerprint",
    "ImageRecord",
    "LaunchError",
    "NavigationController",
    "NavigationError",
    "PageLoadResult",
    "PageSelectors",
    "ProductImageScraper",
    "ProxyConfig",
    "STEALTH_CONFIG",
    "ScrapeRequest",
    "ScrapeResult",
    "ScraperConfig",
    "ScraperError",
    "Tab",
    "VariantDiscovery",
    "VariantExtractor",
    "VariantSkipped",
    "VariantState",
    "apply_fingerprint",
    "discover_variants",
    "extract_images",
    "scrape_product_images",
    "settings",
]
