"""
Carousel image extraction.

Each carousel slot is a responsive <picture> whose srcset lists the same
photo at several sizes. One URL is kept per slot: the full-resolution asset,
identified by its filename suffix, or the widest declared candidate when no
suffix convention is configured.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from garment_scraper.config import PageSelectors
from garment_scraper.constants import FULL_RES_SUFFIX

logger = logging.getLogger(__name__)

_WHITESPACE = " \t\n\r\f"
_WIDTH_DESCRIPTOR = re.compile(r"^(\d+)w$")


@dataclass(frozen=True)
class SrcsetCandidate:
    """One entry of a srcset attribute."""

    url: str
    width: Optional[int] = None


def _width_from(descriptors: List[str]) -> Optional[int]:
    for descriptor in descriptors:
        match = _WIDTH_DESCRIPTOR.match(descriptor)
        if match:
            return int(match.group(1))
    return None


def parse_srcset(srcset: Optional[str]) -> List[SrcsetCandidate]:
    """Split a srcset attribute into URL/width candidates.

    Tokenizes like a browser does: a URL is a run of non-whitespace with
    trailing commas stripped, and a comma outside parentheses in the
    descriptor list ends the candidate. Commas inside a URL are kept.
    """
    candidates: List[SrcsetCandidate] = []
    if not srcset:
        return candidates

    pos, end = 0, len(srcset)
    while pos < end:
        while pos < end and (srcset[pos] in _WHITESPACE or srcset[pos] == ","):
            pos += 1
        if pos >= end:
            break

        start = pos
        while pos < end and srcset[pos] not in _WHITESPACE:
            pos += 1
        url = srcset[start:pos]

        descriptors: List[str] = []
        if url.endswith(","):
            url = url.rstrip(",")
        else:
            current = ""
            depth = 0
            while pos < end:
                char = srcset[pos]
                pos += 1
                if char == "," and depth == 0:
                    break
                if char in _WHITESPACE and depth == 0:
                    if current:
                        descriptors.append(current)
                        current = ""
                    continue
                if char == "(":
                    depth += 1
                elif char == ")" and depth:
                    depth -= 1
                current += char
            if current:
                descriptors.append(current)

        if url:
            candidates.append(SrcsetCandidate(url=url, width=_width_from(descriptors)))

    return candidates


def select_full_resolution(
    candidates: List[SrcsetCandidate],
    suffix: Optional[str] = FULL_RES_SUFFIX,
) -> Optional[str]:
    """
    Pick the highest-fidelity URL from a picture's candidates.

    Args:
        candidates: Parsed srcset entries
        suffix: Filename suffix of the full-resolution asset; None picks
            the widest declared candidate instead

    Returns:
        Chosen URL, or None when nothing qualifies
    """
    if not candidates:
        return None

    if suffix is not None:
        for candidate in candidates:
            if candidate.url.split("?")[0].endswith(suffix):
                return candidate.url
        return None

    widest = max(candidates, key=lambda c: c.width or 0)
    return widest.url


def _picture_srcset(picture: Tag, selectors: PageSelectors) -> Optional[str]:
    """Srcset of the desktop <source>, falling back to any srcset in the slot."""
    for source in picture.find_all("source"):
        if source.get("media") == selectors.source_media and source.get("srcset"):
            return source["srcset"]

    fallback = picture.find(["source", "img"], attrs={"srcset": True})
    if fallback is not None:
        return fallback["srcset"]
    return None


def parse_images(
    html: str,
    selectors: Optional[PageSelectors] = None,
    full_res_suffix: Optional[str] = FULL_RES_SUFFIX,
) -> List[str]:
    """
    Extract one full-resolution URL per carousel slot.

    Args:
        html: Page HTML
        selectors: Selectors for the product page shape
        full_res_suffix: See select_full_resolution()

    Returns:
        URLs in carousel order; empty when the carousel has no usable images
    """
    selectors = selectors or PageSelectors()
    soup = BeautifulSoup(html or "", "html.parser")

    urls: List[str] = []
    for picture in soup.select(selectors.picture):
        url = select_full_resolution(
            parse_srcset(_picture_srcset(picture, selectors)),
            full_res_suffix,
        )
        if url:
            urls.append(url)

    return urls


async def extract_images(
    tab,
    selectors: Optional[PageSelectors] = None,
    full_res_suffix: Optional[str] = FULL_RES_SUFFIX,
) -> List[str]:
    """Read the active carousel of a tab and return its full-resolution URLs."""
    urls = parse_images(await tab.page.content(), selectors, full_res_suffix)
    logger.debug(f"Extracted {len(urls)} images from tab {tab.tab_id}")
    return urls
