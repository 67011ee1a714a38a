"""
Variants Package.

Color variant discovery, carousel image extraction, interaction strategies
and the per-variant switch/extract state machine.
"""

from .discovery import (
    discover_variants,
    is_variant_selected,
    parse_variants,
)
from .extraction import (
    SrcsetCandidate,
    extract_images,
    parse_images,
    parse_srcset,
    select_full_resolution,
)
from .interaction import (
    DEFAULT_STRATEGIES,
    InteractionStrategy,
    InteractionTarget,
    native_click,
    native_click_nested,
    native_click_parent,
    scripted_click,
    scripted_click_nested,
    scripted_click_parent,
)
from .state_machine import (
    VariantExtractor,
    VariantOutcome,
    VariantRunResult,
    VariantState,
)

__all__ = [
    # Discovery
    "discover_variants",
    "is_variant_selected",
    "parse_variants",
    # Extraction
    "SrcsetCandidate",
    "extract_images",
    "parse_images",
    "parse_srcset",
    "select_full_resolution",
    # Interaction
    "DEFAULT_STRATEGIES",
    "InteractionStrategy",
    "InteractionTarget",
    "native_click",
    "native_click_nested",
    "native_click_parent",
    "scripted_click",
    "scripted_click_nested",
    "scripted_click_parent",
    # State machine
    "VariantExtractor",
    "VariantOutcome",
    "VariantRunResult",
    "VariantState",
]
