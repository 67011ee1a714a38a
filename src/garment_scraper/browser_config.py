"""
Browser configuration for the Playwright session.

This module provides a validated Pydantic configuration model for the
browser process and the per-tab fingerprint baseline, plus the user agent
pool the fingerprint randomizer draws from.
"""
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from garment_scraper.constants import (
    BASE_VIEWPORT_HEIGHT,
    BASE_VIEWPORT_WIDTH,
    DEFAULT_NAVIGATION_TIMEOUT_MS,
    VIEWPORT_JITTER_PX,
)


# Desktop browsers the fingerprint randomizer may impersonate
USER_AGENTS = [
    # Chromium, Windows desktop
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    # Chromium, macOS desktop
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    # Gecko, Windows desktop
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) Gecko/20100101 Firefox/121.0",
    # WebKit, macOS desktop
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2.1 Safari/605.1.15",
]


class BrowserConfig(BaseModel):
    """Launch options for the shared browser and the fingerprint baseline of its tabs.

    Assignments are re-validated, so a config mutated after construction
    cannot carry an out-of-range timeout or viewport.
    """

    model_config = ConfigDict(validate_assignment=True)

    headless: bool = Field(
        default=True,
        description="Launch without a window; --headed turns this off"
    )

    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser engine to launch"
    )

    timeout: int = Field(
        default=DEFAULT_NAVIGATION_TIMEOUT_MS,
        description="Per-tab default timeout in ms for Playwright calls",
        ge=1000,
        le=300000
    )

    launch_args: List[str] = Field(
        default_factory=list,
        description="Extra command-line switches passed to the engine at launch"
    )

    ignore_https_errors: bool = Field(
        default=True,
        description="Ignore TLS errors (common behind intercepting proxies)"
    )

    viewport_width: int = Field(
        default=BASE_VIEWPORT_WIDTH,
        description="Baseline viewport width before jitter",
        ge=320
    )

    viewport_height: int = Field(
        default=BASE_VIEWPORT_HEIGHT,
        description="Baseline viewport height before jitter",
        ge=320
    )

    viewport_jitter: int = Field(
        default=VIEWPORT_JITTER_PX,
        description="Exclusive upper bound of random pixels added to each viewport axis",
        ge=1,
        le=1000
    )

    user_agents: List[str] = Field(
        default_factory=lambda: list(USER_AGENTS),
        description="Pool of user agents the fingerprint randomizer picks from",
        min_length=1
    )


# Preset used by the CLI

STEALTH_CONFIG = BrowserConfig(
    headless=True,
    launch_args=[
        "--disable-blink-features=AutomationControlled",
        "--disable-features=IsolateOrigins,site-per-process",
        "--no-first-run",
        "--no-default-browser-check",
    ],
)
"""
Stealth configuration for product pages behind bot protection.

Removes the automation-controlled blink feature and first-run noise.
"""
