"""Logging setup for the garment scraper.

Logs go to stderr so that results printed on stdout stay machine-readable,
plus an optional file. Proxy credentials embedded in a URL are masked
before any handler writes the record.
"""

import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that are too chatty below WARNING
QUIET_LOGGERS = ('asyncio', 'playwright')

_URL_CREDENTIALS = re.compile(
    r"(?P<scheme>[a-z][a-z0-9+.-]*://)[^:@/\s]+:[^@/\s]*@",
    re.IGNORECASE,
)


def redact_credentials(text: str) -> str:
    """Replace ``user:password@`` in URLs with ``***@``."""
    return _URL_CREDENTIALS.sub(r"\g<scheme>***@", text)


class CredentialRedactingFilter(logging.Filter):
    """Masks proxy credentials in formatted log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_credentials(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """Configure the root logger for a scrape run.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Also write to this file, creating its directory
        format_string: Record format; DEFAULT_FORMAT when omitted
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    redactor = CredentialRedactingFilter()
    for handler in handlers:
        handler.addFilter(redactor)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers,
        force=True  # Replace handlers from any earlier setup
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (usually for ``__name__``)."""
    return logging.getLogger(name)
