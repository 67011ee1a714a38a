"""Error taxonomy for the scraping engine.

Failures are isolated at the smallest meaningful unit:

- LaunchError: the browser could not start. Globally fatal.
- NavigationError: a product page could not be loaded within the retry
  budget. Fatal for that product only.
- VariantSkipped: one color variant could not be selected. Logged and
  recorded, never raised out of the variant state machine.
"""

from typing import Optional


class ScraperError(Exception):
    """Base class for all scraping engine errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class LaunchError(ScraperError):
    """Raised when the headless browser process fails to start."""


class NavigationError(ScraperError):
    """Raised when a product page fails to load.

    Carries the last observed status and reason so callers can report it.
    Never retried by a caller; the navigation controller already did.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
        reason: Optional[str] = None,
        attempts: int = 0,
    ):
        self.url = url
        self.status = status
        self.reason = reason
        self.attempts = attempts
        super().__init__(message)


class VariantSkipped(ScraperError):
    """A color variant could not be selected after every interaction strategy."""

    def __init__(self, variant: str, reason: str):
        self.variant = variant
        self.reason = reason
        super().__init__(f"Variant '{variant}' skipped: {reason}")
