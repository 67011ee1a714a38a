"""Data models for product image scraping."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple


DEFAULT_COLOR = "default"

_PROXY_PATTERN = re.compile(
    r"^(?:(?P<scheme>[a-z0-9]+)://)?"
    r"(?:(?P<username>[^:@/]+)(?::(?P<password>[^@/]*))?@)?"
    r"(?P<host>[^:@/]+):(?P<port>\d+)/?$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ImageRecord:
    """A single full-resolution image URL tagged with its color variant."""

    url: str
    color: str

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "color": self.color}


def group_by_color(records: Iterable[ImageRecord]) -> Dict[str, List[str]]:
    """Group image URLs by color in first-seen order."""
    groups: Dict[str, List[str]] = {}
    for record in records:
        groups.setdefault(record.color, []).append(record.url)
    return groups


@dataclass(frozen=True)
class ColorVariant:
    """One selectable color option, as read from the live page."""

    name: str
    is_selected: bool
    index: int = 0  # Position of the control inside the color widget


@dataclass
class VariantDiscovery:
    """Result of inspecting a page for its color selector."""

    has_selector: bool
    variants: List[ColorVariant] = field(default_factory=list)

    @property
    def selected(self) -> Optional[ColorVariant]:
        """The variant flagged as selected at inspection time, if any."""
        for variant in self.variants:
            if variant.is_selected:
                return variant
        return None

    @property
    def names(self) -> List[str]:
        return [variant.name for variant in self.variants]


@dataclass(frozen=True)
class ProxyConfig:
    """Per-call proxy descriptor, scoped to one tab's lifetime."""

    host: str
    port: int
    username: Optional[str] = None
    password: Optional[str] = None
    scheme: str = "http"

    @property
    def server(self) -> str:
        """Proxy server address without credentials (safe to log)."""
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def playwright_proxy(self) -> Dict[str, Any]:
        """Get proxy config for Playwright."""
        proxy = {"server": self.server}
        if self.username:
            proxy["username"] = self.username
            proxy["password"] = self.password or ""
        return proxy

    @classmethod
    def parse(cls, text: str) -> "ProxyConfig":
        """Parse ``[scheme://][user[:pass]@]host:port``.

        Raises:
            ValueError: If the text is not a proxy address
        """
        match = _PROXY_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Invalid proxy address: {text!r}")
        return cls(
            host=match.group("host"),
            port=int(match.group("port")),
            username=match.group("username"),
            password=match.group("password"),
            scheme=(match.group("scheme") or "http").lower(),
        )


@dataclass(frozen=True)
class ScrapeRequest:
    """A product page to scrape, with an optional proxy."""

    url: str
    proxy: Optional[ProxyConfig] = None

    def key(self) -> Tuple[str, Optional[str], Optional[int], Optional[str]]:
        """Stable structural key used to fingerprint a scrape cycle."""
        if self.proxy is None:
            return (self.url, None, None, None)
        return (self.url, self.proxy.host, self.proxy.port, self.proxy.username)


@dataclass
class PageLoadResult:
    """Outcome of a successful page load."""

    url: str
    final_url: str
    status: int
    attempts: int


@dataclass
class ScrapeResult:
    """All images extracted for one product, in extraction order."""

    url: str
    images: List[ImageRecord] = field(default_factory=list)
    status: Optional[int] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    skipped_variants: List[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def colors(self) -> List[str]:
        """Distinct colors in first-seen order."""
        return list(self.by_color())

    def by_color(self) -> Dict[str, List[str]]:
        """Group image URLs by color, preserving carousel order."""
        return group_by_color(self.images)


@dataclass
class BatchUpdate:
    """Aggregate snapshot published to observers after each batch."""

    batch_index: int
    total_batches: int
    results: Dict[str, ScrapeResult]

    @property
    def is_final(self) -> bool:
        return self.batch_index + 1 >= self.total_batches
