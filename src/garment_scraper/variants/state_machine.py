"""
Variant switch and extraction state machine.

Per variant:

    IDLE -> SELECTING -> WAITING_FOR_REFRESH -> EXTRACTED
                  \\                \\
                   +-> SKIPPED       +-> SKIPPED

The variant that is already selected when the page loads goes straight
from IDLE to EXTRACTED. Any other variant is selected through the ordered
interaction strategies. A variant that cannot be selected, or whose
carousel never refreshes, is SKIPPED: logged, left out of the result, and
the walk continues with the next variant.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from playwright.async_api import Error as PlaywrightError

from garment_scraper.config import ScraperConfig
from garment_scraper.exceptions import VariantSkipped
from garment_scraper.models import (
    DEFAULT_COLOR,
    ColorVariant,
    ImageRecord,
    VariantDiscovery,
)
from garment_scraper.variants.discovery import is_variant_selected
from garment_scraper.variants.extraction import extract_images
from garment_scraper.variants.interaction import (
    DEFAULT_STRATEGIES,
    InteractionStrategy,
    InteractionTarget,
)

logger = logging.getLogger(__name__)


class VariantState(str, Enum):
    """Processing state of one color variant."""
    IDLE = "idle"
    SELECTING = "selecting"
    WAITING_FOR_REFRESH = "waiting_for_refresh"
    EXTRACTED = "extracted"
    SKIPPED = "skipped"


TERMINAL_STATES = frozenset({VariantState.EXTRACTED, VariantState.SKIPPED})


@dataclass
class VariantOutcome:
    """What happened to one variant."""
    variant: ColorVariant
    state: VariantState = VariantState.IDLE
    records: List[ImageRecord] = field(default_factory=list)
    reason: Optional[str] = None
    strategy: Optional[str] = None  # Name of the strategy that selected it
    history: List[VariantState] = field(default_factory=lambda: [VariantState.IDLE])

    def transition(self, state: VariantState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(
                f"Variant '{self.variant.name}' already finished as {self.state.value}"
            )
        self.state = state
        self.history.append(state)

    def skip(self, reason: str) -> None:
        self.reason = reason
        self.transition(VariantState.SKIPPED)
        logger.warning(str(VariantSkipped(self.variant.name, reason)))


@dataclass
class VariantRunResult:
    """Records and per-variant outcomes for one product page."""
    records: List[ImageRecord] = field(default_factory=list)
    outcomes: List[VariantOutcome] = field(default_factory=list)

    @property
    def skipped(self) -> List[str]:
        return [o.variant.name for o in self.outcomes if o.state == VariantState.SKIPPED]

    @property
    def extracted(self) -> List[str]:
        return [o.variant.name for o in self.outcomes if o.state == VariantState.EXTRACTED]


class VariantExtractor:
    """
    Walks every color variant on a loaded product page and extracts its images.

    Usage:
        extractor = VariantExtractor(config)
        run = await extractor.run(tab, await discover_variants(tab))
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        strategies: Sequence[InteractionStrategy] = DEFAULT_STRATEGIES,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            config: Scraper tunables (delays, timeouts, selectors)
            strategies: Interaction strategies, tried in order
            sleep: Coroutine used for settle and inter-variant delays
        """
        self.config = config or ScraperConfig()
        self.strategies = tuple(strategies)
        self._sleep = sleep

    @property
    def selectors(self):
        return self.config.selectors

    async def _extract(self, tab, color: str) -> List[ImageRecord]:
        urls = await extract_images(tab, self.selectors, self.config.full_res_suffix)
        return [ImageRecord(url=url, color=color) for url in urls]

    async def _attempt_selection(self, tab, variant: ColorVariant) -> Optional[str]:
        """Try each strategy; return the name of the one that worked."""
        target = InteractionTarget(
            variant=variant,
            selectors=self.selectors,
            timeout_ms=self.config.interaction_timeout_ms,
        )

        for strategy in self.strategies:
            name = getattr(strategy, "__name__", repr(strategy))
            logger.debug(f"Selecting '{variant.name}' with {name}")

            if not await strategy(tab, target):
                continue

            await self._sleep(self.config.settle_delay_s)

            try:
                html = await tab.page.content()
            except PlaywrightError as e:
                logger.debug(f"Could not read page after {name}: {e}")
                continue

            if is_variant_selected(html, variant, self.selectors):
                return name

        return None

    async def select_variant(self, tab, variant: ColorVariant) -> bool:
        """
        Select a variant through the cascading interaction strategies.

        Returns:
            True once the control carries the selected marker, False when
            every strategy has been exhausted
        """
        return await self._attempt_selection(tab, variant) is not None

    async def wait_for_refresh(self, tab) -> None:
        """Wait for the selected marker and a visible carousel image."""
        timeout = self.config.interaction_timeout_ms
        waits = [
            asyncio.ensure_future(
                tab.page.wait_for_selector(self.selectors.selected_button, timeout=timeout)
            ),
            asyncio.ensure_future(
                tab.page.wait_for_selector(
                    self.selectors.visible_image, state="visible", timeout=timeout
                )
            ),
        ]
        try:
            await asyncio.gather(*waits)
        finally:
            # One wait failing must not leave the other pending on this tab
            for wait in waits:
                wait.cancel()

    async def process_current(self, tab, color: str, variant: ColorVariant) -> VariantOutcome:
        """Extract the variant shown at load time, without any UI interaction."""
        outcome = VariantOutcome(variant=variant)
        try:
            outcome.records = await self._extract(tab, color)
        except PlaywrightError as e:
            outcome.skip(f"extraction failed: {e}")
            return outcome

        outcome.transition(VariantState.EXTRACTED)
        logger.info(f"Extracted {len(outcome.records)} images for '{color}'")
        return outcome

    async def process_variant(self, tab, variant: ColorVariant) -> VariantOutcome:
        """Switch to a variant, wait for its carousel and extract its images."""
        outcome = VariantOutcome(variant=variant)

        outcome.transition(VariantState.SELECTING)
        outcome.strategy = await self._attempt_selection(tab, variant)
        if outcome.strategy is None:
            outcome.skip(f"all {len(self.strategies)} interaction strategies failed")
            return outcome

        outcome.transition(VariantState.WAITING_FOR_REFRESH)
        try:
            await self.wait_for_refresh(tab)
            outcome.records = await self._extract(tab, variant.name)
        except PlaywrightError as e:
            outcome.skip(f"carousel did not refresh: {e}")
            return outcome

        outcome.transition(VariantState.EXTRACTED)
        logger.info(
            f"Extracted {len(outcome.records)} images for '{variant.name}' "
            f"(via {outcome.strategy})"
        )

        await self._sleep(self.config.inter_variant_delay_s)
        return outcome

    async def run(self, tab, discovery: VariantDiscovery) -> VariantRunResult:
        """
        Extract images for every discovered variant.

        Args:
            tab: Tab showing the loaded product page
            discovery: Result of discover_variants() on that page

        Returns:
            VariantRunResult with records in processing order
        """
        result = VariantRunResult()

        if not discovery.has_selector:
            outcome = await self.process_current(tab, DEFAULT_COLOR, discovery.variants[0])
            result.outcomes.append(outcome)
            result.records.extend(outcome.records)
            return result

        selected = discovery.selected
        if selected is not None:
            outcome = await self.process_current(tab, selected.name, selected)
            result.outcomes.append(outcome)
            result.records.extend(outcome.records)

        others = [v for v in discovery.variants if not v.is_selected]
        batch_size = self.config.variant_batch_size

        for start in range(0, len(others), batch_size):
            batch = others[start:start + batch_size]
            batch_records: List[ImageRecord] = []

            # Variants in a sub-batch share this tab, so they switch one at a time
            for variant in batch:
                outcome = await self.process_variant(tab, variant)
                result.outcomes.append(outcome)
                batch_records.extend(outcome.records)

            result.records.extend(batch_records)
            logger.debug(
                f"Variant sub-batch {start // batch_size + 1} done "
                f"({len(batch_records)} images)"
            )

        if result.skipped:
            logger.warning(f"Skipped variants: {', '.join(result.skipped)}")

        return result
