"""
Per-tab fingerprint randomization.

Every tab gets its own user agent, a jittered viewport and navigator
overrides, so concurrent tabs do not share one detectable signature. The
fingerprint must be applied before the tab's first navigation: the init
script only runs on documents created after it is registered.
"""

import json
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from garment_scraper.browser_config import BrowserConfig
from garment_scraper.constants import (
    MAX_PLUGIN_COUNT,
    MIN_PLUGIN_COUNT,
    NAVIGATOR_LANGUAGES,
)

logger = logging.getLogger(__name__)


# Overrides for the navigator signals bot detectors check first.
# Placeholders are filled with JSON literals by build_stealth_script().
STEALTH_SCRIPT_TEMPLATE = """
    // Hide the automation flag
    Object.defineProperty(navigator, 'webdriver', {
        get: () => false,
        configurable: true
    });

    // Realistic language preferences
    Object.defineProperty(navigator, 'languages', {
        get: () => __LANGUAGES__,
        configurable: true
    });

    // Non-empty plugins array
    Object.defineProperty(navigator, 'plugins', {
        get: () => new Array(__PLUGIN_COUNT__).fill(null),
        configurable: true
    });

    // Keep navigator.userAgent consistent with the request header
    Object.defineProperty(navigator, 'userAgent', {
        get: () => __USER_AGENT__,
        configurable: true
    });
"""


@dataclass(frozen=True)
class Fingerprint:
    """Observable browser signals presented by one tab."""

    user_agent: str
    viewport: Dict[str, int]
    languages: List[str] = field(default_factory=lambda: list(NAVIGATOR_LANGUAGES))
    plugin_count: int = MIN_PLUGIN_COUNT

    @classmethod
    def generate(
        cls,
        config: Optional[BrowserConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> "Fingerprint":
        """
        Draw a fingerprint from the configured pool and baseline.

        Args:
            config: Browser config supplying the user agent pool and viewport baseline
            rng: Random source (injectable for tests)
        """
        config = config or BrowserConfig()
        rng = rng or random.Random()

        return cls(
            user_agent=rng.choice(config.user_agents),
            viewport={
                "width": config.viewport_width + rng.randrange(config.viewport_jitter),
                "height": config.viewport_height + rng.randrange(config.viewport_jitter),
            },
            languages=list(NAVIGATOR_LANGUAGES),
            plugin_count=rng.randint(MIN_PLUGIN_COUNT, MAX_PLUGIN_COUNT),
        )


def build_stealth_script(fingerprint: Fingerprint) -> str:
    """Render the navigator override script for a fingerprint."""
    return (
        STEALTH_SCRIPT_TEMPLATE
        .replace("__LANGUAGES__", json.dumps(fingerprint.languages))
        .replace("__PLUGIN_COUNT__", str(int(fingerprint.plugin_count)))
        .replace("__USER_AGENT__", json.dumps(fingerprint.user_agent))
    )


async def apply_fingerprint(
    tab,
    config: Optional[BrowserConfig] = None,
    fingerprint: Optional[Fingerprint] = None,
) -> None:
    """
    Apply a randomized fingerprint to a tab before its first page load.

    Args:
        tab: Tab from BrowserSession.open_tab()
        config: Browser config for the user agent pool and viewport baseline
        fingerprint: Explicit fingerprint; drawn at random when omitted

    Raises:
        RuntimeError: If the tab has already navigated
    """
    if tab.navigated:
        raise RuntimeError("Fingerprint must be applied before the first navigation")

    fingerprint = fingerprint or Fingerprint.generate(config)

    await tab.page.set_viewport_size(fingerprint.viewport)
    await tab.update_headers({"User-Agent": fingerprint.user_agent})
    await tab.page.add_init_script(build_stealth_script(fingerprint))

    logger.debug(
        f"Tab {tab.tab_id} fingerprint: viewport={fingerprint.viewport['width']}x"
        f"{fingerprint.viewport['height']}, plugins={fingerprint.plugin_count}"
    )
