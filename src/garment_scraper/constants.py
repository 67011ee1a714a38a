# src/garment_scraper/constants.py
"""Centralized constants for the scraping engine.

This module contains magic numbers and default values that are used across
multiple modules. For user-configurable tunables, see config.py and
ScraperConfig.
"""

# =============================================================================
# Navigation Constants
# =============================================================================

# Default page load timeout in milliseconds
DEFAULT_NAVIGATION_TIMEOUT_MS = 30000

# Default maximum navigation attempts per product
DEFAULT_MAX_RETRIES = 3

# Base for exponential backoff calculation
EXPONENTIAL_BACKOFF_BASE = 2

# Initial backoff delay in seconds
INITIAL_BACKOFF_DELAY_SECONDS = 1.0

# Maximum backoff delay in seconds (cap for exponential growth)
MAX_BACKOFF_DELAY_SECONDS = 10.0

# Upper bound of the random jitter added to each backoff delay
BACKOFF_JITTER_SECONDS = 1.0

# Headers sent when a request is routed through a proxy
PROXY_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
    "Proxy-Connection": "keep-alive",
}


# =============================================================================
# Variant Interaction Constants
# =============================================================================

# Timeout for waits on selector presence/visibility (milliseconds)
DEFAULT_INTERACTION_TIMEOUT_MS = 10000

# Pause after each click attempt before checking the selected marker
DEFAULT_SETTLE_DELAY_SECONDS = 0.25

# Pause after each extracted variant
DEFAULT_INTER_VARIANT_DELAY_SECONDS = 0.75

# Variants switched per sub-batch on one product page
DEFAULT_VARIANT_BATCH_SIZE = 3

# Products scraped concurrently per batch
DEFAULT_BATCH_SIZE = 3


# =============================================================================
# Image Extraction Constants
# =============================================================================

# Filename suffix identifying the full-resolution asset in a srcset
FULL_RES_SUFFIX = "e1.jpg"

# Media query of the desktop <source> inside each carousel <picture>
DESKTOP_SOURCE_MEDIA = "(min-width: 768px)"


# =============================================================================
# Viewport and Display Constants
# =============================================================================

# Baseline viewport before random jitter is applied
BASE_VIEWPORT_WIDTH = 1366
BASE_VIEWPORT_HEIGHT = 768

# Maximum pixels of jitter added to each viewport axis
VIEWPORT_JITTER_PX = 100

# Range of fake navigator.plugins entries
MIN_PLUGIN_COUNT = 1
MAX_PLUGIN_COUNT = 5

# Languages reported by navigator.languages
NAVIGATOR_LANGUAGES = ["en-US", "en"]
