"""
Interaction strategies for selecting a color variant.

Product pages wire their color controls differently: some react to a real
pointer click on the button, some only to a scripted click event, and some
listen on the button's parent or on a nested swatch element. Each strategy
here is a plain async function ``(tab, target) -> bool`` that dispatches one
kind of click and reports whether it found something to click. The variant
state machine tries them in order and checks the page after each one.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Tuple

from playwright.async_api import Error as PlaywrightError

from garment_scraper.config import PageSelectors
from garment_scraper.constants import DEFAULT_INTERACTION_TIMEOUT_MS
from garment_scraper.models import ColorVariant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InteractionTarget:
    """The variant control a strategy should click, and how to find it."""

    variant: ColorVariant
    selectors: PageSelectors = field(default_factory=PageSelectors)
    timeout_ms: int = DEFAULT_INTERACTION_TIMEOUT_MS


InteractionStrategy = Callable[[Any, InteractionTarget], Awaitable[bool]]


# Runs in the page. Returns false when the element cannot be found.
SCRIPTED_CLICK_JS = """
([buttonSelector, index, scope, nestedSelector]) => {
    const button = document.querySelectorAll(buttonSelector)[index];
    if (!button) return false;
    let element = button;
    if (scope === 'parent') {
        element = button.parentElement;
    } else if (scope === 'nested') {
        element = button.querySelector(nestedSelector);
    }
    if (!element) return false;
    element.click();
    element.dispatchEvent(new MouseEvent('click', {
        bubbles: true,
        cancelable: true,
        view: window
    }));
    return true;
}
"""


def _locate(tab, target: InteractionTarget, scope: str):
    """Playwright locator for the control, its parent or its nested swatch."""
    button = tab.page.locator(target.selectors.color_button).nth(target.variant.index)
    if scope == "parent":
        return button.locator("xpath=..")
    if scope == "nested":
        return button.locator(target.selectors.nested_click_target).first
    return button


async def _native_click(tab, target: InteractionTarget, scope: str) -> bool:
    try:
        locator = _locate(tab, target, scope)
        if await locator.count() == 0:
            return False
        await locator.click(timeout=target.timeout_ms)
        return True
    except PlaywrightError as e:
        logger.debug(f"Native click ({scope}) failed for '{target.variant.name}': {e}")
        return False


async def _scripted_click(tab, target: InteractionTarget, scope: str) -> bool:
    try:
        return bool(await tab.page.evaluate(
            SCRIPTED_CLICK_JS,
            [
                target.selectors.color_button,
                target.variant.index,
                scope,
                target.selectors.nested_click_target,
            ],
        ))
    except PlaywrightError as e:
        logger.debug(f"Scripted click ({scope}) failed for '{target.variant.name}': {e}")
        return False


async def native_click(tab, target: InteractionTarget) -> bool:
    """Pointer click on the variant control."""
    return await _native_click(tab, target, "self")


async def scripted_click(tab, target: InteractionTarget) -> bool:
    """element.click() plus a synthesized click event on the control."""
    return await _scripted_click(tab, target, "self")


async def native_click_parent(tab, target: InteractionTarget) -> bool:
    return await _native_click(tab, target, "parent")


async def scripted_click_parent(tab, target: InteractionTarget) -> bool:
    return await _scripted_click(tab, target, "parent")


async def native_click_nested(tab, target: InteractionTarget) -> bool:
    return await _native_click(tab, target, "nested")


async def scripted_click_nested(tab, target: InteractionTarget) -> bool:
    return await _scripted_click(tab, target, "nested")


# Tried in this order until the control reports itself selected
DEFAULT_STRATEGIES: Tuple[InteractionStrategy, ...] = (
    native_click,
    scripted_click,
    native_click_parent,
    scripted_click_parent,
    native_click_nested,
    scripted_click_nested,
)
