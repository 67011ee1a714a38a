"""
Color variant discovery.

Reads the loaded product page and turns its color selector widget into
typed ColorVariant records. A page without the widget has exactly one
implicit variant, "default".
"""

import logging
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from garment_scraper.config import PageSelectors
from garment_scraper.models import DEFAULT_COLOR, ColorVariant, VariantDiscovery

logger = logging.getLogger(__name__)


def _has_class(element: Optional[Tag], class_name: str) -> bool:
    if element is None or not isinstance(element, Tag):
        return False
    return class_name in (element.get("class") or [])


def _button_is_selected(button: Tag, selectors: PageSelectors) -> bool:
    """Whether a control, or its parent, carries the selected marker."""
    return (
        _has_class(button, selectors.selected_class)
        or _has_class(button.parent, selectors.selected_class)
    )


def _unique_name(name: str, seen: set) -> str:
    if name not in seen:
        return name
    suffix = 2
    while f"{name} ({suffix})" in seen:
        suffix += 1
    return f"{name} ({suffix})"


def parse_variants(html: str, selectors: Optional[PageSelectors] = None) -> VariantDiscovery:
    """
    Parse a product page's color selector.

    Args:
        html: Page HTML
        selectors: Selectors for the product page shape

    Returns:
        VariantDiscovery with one entry per control, in widget order
    """
    selectors = selectors or PageSelectors()
    soup = BeautifulSoup(html or "", "html.parser")

    if soup.select_one(selectors.color_selector) is None:
        return VariantDiscovery(
            has_selector=False,
            variants=[ColorVariant(name=DEFAULT_COLOR, is_selected=True, index=0)],
        )

    buttons = soup.select(selectors.color_button)
    if not buttons:
        logger.debug("Color selector present but has no controls; treating as single variant")
        return VariantDiscovery(
            has_selector=False,
            variants=[ColorVariant(name=DEFAULT_COLOR, is_selected=True, index=0)],
        )

    variants: List[ColorVariant] = []
    seen: set = set()
    selected_found = False

    for index, button in enumerate(buttons):
        label = button.select_one(selectors.color_name)
        name = label.get_text(strip=True) if label is not None else ""
        if not name:
            # Unresolvable names still need a unique key
            name = f"color-{index + 1}"
        name = _unique_name(name, seen)
        seen.add(name)

        is_selected = not selected_found and _button_is_selected(button, selectors)
        selected_found = selected_found or is_selected

        variants.append(ColorVariant(name=name, is_selected=is_selected, index=index))

    return VariantDiscovery(has_selector=True, variants=variants)


def is_variant_selected(
    html: str,
    variant: ColorVariant,
    selectors: Optional[PageSelectors] = None,
) -> bool:
    """Check whether the control for a variant currently carries the selected marker."""
    selectors = selectors or PageSelectors()
    soup = BeautifulSoup(html or "", "html.parser")
    buttons = soup.select(selectors.color_button)

    if variant.index >= len(buttons):
        return False
    return _button_is_selected(buttons[variant.index], selectors)


async def discover_variants(tab, selectors: Optional[PageSelectors] = None) -> VariantDiscovery:
    """
    Inspect the tab's loaded page for color variants.

    Args:
        tab: Tab whose page has finished loading
        selectors: Selectors for the product page shape

    Returns:
        VariantDiscovery; a single "default" variant when there is no selector
    """
    discovery = parse_variants(await tab.page.content(), selectors)

    if discovery.has_selector:
        selected = discovery.selected
        logger.info(
            f"Found {len(discovery.variants)} color variants "
            f"(selected: {selected.name if selected else 'none'})"
        )
    else:
        logger.info("No color selector found - processing single color product")

    return discovery
