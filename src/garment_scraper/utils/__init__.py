"""
Utilities Package.

Provides block/CAPTCHA detection for loaded pages.
"""

from .challenge_handler import (
    BLOCK_MARKERS,
    BLOCKING_STATUS_CODES,
    detect_block,
    is_blocked_status,
    visible_text,
)

__all__ = [
    "BLOCK_MARKERS",
    "BLOCKING_STATUS_CODES",
    "detect_block",
    "is_blocked_status",
    "visible_text",
]
