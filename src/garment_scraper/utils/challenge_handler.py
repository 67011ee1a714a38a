"""
Block and CAPTCHA detection for loaded product pages.

Anti-bot defenses usually answer with a terse page whose title or visible
text announces the block. The navigation controller feeds every loaded page
through detect_block() and treats a hit as a failed attempt.

Markers are matched against visible text only. Product pages routinely
load CAPTCHA scripts without showing a challenge, so raw markup would give
false positives. The body is only scanned when it is short: a full product
page can mention "colour-blocked knit" in its copy, while an interstitial
is a few sentences long.
"""
import logging
import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


# Lowercase phrases whose presence in visible text means the page is a block page
BLOCK_MARKERS = (
    "captcha",
    "blocked",
    "rate limit",
    "access denied",
    "too many requests",
    "verify you are human",
)

# HTTP status codes that indicate blocking rather than a broken page
BLOCKING_STATUS_CODES = frozenset({403, 429})

# Visible body text longer than this is treated as real content
MAX_CHALLENGE_TEXT_CHARS = 1500

# Elements that never contribute visible text
_INVISIBLE_TAGS = ["script", "style", "noscript", "template"]


def visible_text(html: str) -> str:
    """Extract human-visible text from an HTML document."""
    soup = BeautifulSoup(html or "", "html.parser")
    for element in soup(_INVISIBLE_TAGS):
        element.decompose()
    return soup.get_text(" ", strip=True)


def _contains_phrase(text: str, marker: str) -> bool:
    # Whole words only, so "unblocked" does not read as "blocked"
    pattern = r"(?<![a-z0-9])" + re.escape(marker.lower()) + r"(?![a-z0-9])"
    return re.search(pattern, text) is not None


def detect_block(
    html: str,
    markers: Iterable[str] = BLOCK_MARKERS,
    max_text_chars: int = MAX_CHALLENGE_TEXT_CHARS,
) -> Optional[str]:
    """
    Detect whether a loaded page is a block or CAPTCHA page.

    The <title> is always checked. The rest of the visible text is checked
    only when it is at most ``max_text_chars`` long.

    Args:
        html: Page HTML
        markers: Phrases to look for (case-insensitive, whole words)
        max_text_chars: Longest body text still considered an interstitial

    Returns:
        The first matching marker, or None if the page looks normal
    """
    soup = BeautifulSoup(html or "", "html.parser")
    title = soup.title.get_text(" ", strip=True).lower() if soup.title else ""

    text = visible_text(html).lower()
    scanned = [title]
    if len(text) <= max_text_chars:
        scanned.append(text)
    else:
        logger.debug(f"Page text is {len(text)} chars; checking the title only")

    for marker in markers:
        if any(_contains_phrase(part, marker) for part in scanned):
            logger.debug(f"Block marker found in page text: {marker!r}")
            return marker
    return None


def is_blocked_status(status: Optional[int]) -> bool:
    """Check if an HTTP status code signals blocking or rate limiting."""
    return status in BLOCKING_STATUS_CODES
