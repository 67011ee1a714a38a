"""
Infrastructure Package.

Provides the shared browser session, per-tab fingerprinting and resilient
page navigation.
"""

from .browser_session import (
    BrowserSession,
    BrowserSessionManager,
    Tab,
)
from .fingerprint import (
    Fingerprint,
    STEALTH_SCRIPT_TEMPLATE,
    apply_fingerprint,
    build_stealth_script,
)
from .navigation import (
    NavigationController,
    backoff_delay,
)

__all__ = [
    # Browser Session
    "BrowserSession",
    "BrowserSessionManager",
    "Tab",
    # Fingerprint
    "Fingerprint",
    "STEALTH_SCRIPT_TEMPLATE",
    "apply_fingerprint",
    "build_stealth_script",
    # Navigation
    "NavigationController",
    "backoff_delay",
]
