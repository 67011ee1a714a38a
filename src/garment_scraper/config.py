from dotenv import load_dotenv
from dataclasses import dataclass, field, fields
from typing import Optional
from pathlib import Path
import json
import os

from garment_scraper.constants import (
    BACKOFF_JITTER_SECONDS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_INTER_VARIANT_DELAY_SECONDS,
    DEFAULT_INTERACTION_TIMEOUT_MS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_NAVIGATION_TIMEOUT_MS,
    DEFAULT_SETTLE_DELAY_SECONDS,
    DEFAULT_VARIANT_BATCH_SIZE,
    DESKTOP_SOURCE_MEDIA,
    FULL_RES_SUFFIX,
    INITIAL_BACKOFF_DELAY_SECONDS,
    MAX_BACKOFF_DELAY_SECONDS,
)

load_dotenv()  # Loads variables from .env file


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    HEADLESS = os.getenv("SCRAPER_HEADLESS", "true").lower() not in ("0", "false", "no")
    BROWSER_TYPE = os.getenv("SCRAPER_BROWSER_TYPE", "chromium")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


@dataclass(frozen=True)
class PageSelectors:
    """CSS selectors for the supported product detail page shape."""

    color_selector: str = ".product-detail-color-selector__colors"
    color_button: str = '[data-qa-action="select-color"]'
    color_name: str = ".screen-reader-text"
    selected_class: str = "product-detail-color-selector__color-button--is-selected"
    nested_click_target: str = ".product-detail-color-selector__color-area"
    picture: str = ".media-image"
    visible_image: str = ".media-image__image"
    source_media: str = DESKTOP_SOURCE_MEDIA

    @property
    def selected_button(self) -> str:
        return f".{self.selected_class}"


@dataclass
class ScraperConfig:
    """Tunables for navigation, variant switching and batching.

    Delay and retry values are tuning knobs, not correctness requirements.
    """

    # Navigation
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    wait_until: str = "networkidle"
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base_s: float = INITIAL_BACKOFF_DELAY_SECONDS
    backoff_cap_s: float = MAX_BACKOFF_DELAY_SECONDS
    backoff_jitter_s: float = BACKOFF_JITTER_SECONDS

    # Variant interaction
    interaction_timeout_ms: int = DEFAULT_INTERACTION_TIMEOUT_MS
    settle_delay_s: float = DEFAULT_SETTLE_DELAY_SECONDS
    inter_variant_delay_s: float = DEFAULT_INTER_VARIANT_DELAY_SECONDS
    variant_batch_size: int = DEFAULT_VARIANT_BATCH_SIZE

    # Batching
    batch_size: int = DEFAULT_BATCH_SIZE

    # Extraction; None selects the widest srcset candidate instead
    full_res_suffix: Optional[str] = FULL_RES_SUFFIX
    selectors: PageSelectors = field(default_factory=PageSelectors)

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.batch_size < 1 or self.variant_batch_size < 1:
            raise ValueError("batch sizes must be at least 1")
        if self.navigation_timeout_ms <= 0 or self.interaction_timeout_ms <= 0:
            raise ValueError("timeouts must be positive")
        if min(self.backoff_base_s, self.backoff_cap_s, self.backoff_jitter_s) < 0:
            raise ValueError("backoff values must not be negative")
        if min(self.settle_delay_s, self.inter_variant_delay_s) < 0:
            raise ValueError("delays must not be negative")
        if self.wait_until not in ("load", "domcontentloaded", "networkidle", "commit"):
            raise ValueError(f"Unsupported wait_until: {self.wait_until}")

    @classmethod
    def _tunable_fields(cls):
        return [f for f in fields(cls) if f.name != "selectors"]

    @classmethod
    def from_env(cls) -> "ScraperConfig":
        """Load tunables from environment variables.

        Environment variables should be prefixed with SCRAPER_
        e.g., SCRAPER_MAX_RETRIES=5

        Returns:
            ScraperConfig with values from environment
        """
        values = {}
        prefix = "SCRAPER_"

        for f in cls._tunable_fields():
            env_value = os.getenv(f"{prefix}{f.name.upper()}")
            if env_value is None:
                continue

            default = getattr(cls, f.name, None)
            try:
                if isinstance(default, bool):
                    continue
                if isinstance(default, int):
                    values[f.name] = int(env_value)
                elif isinstance(default, float):
                    values[f.name] = float(env_value)
                elif f.name == "full_res_suffix" and env_value.lower() in ("", "none"):
                    values[f.name] = None
                else:
                    values[f.name] = env_value
            except ValueError:
                pass  # Keep default if conversion fails

        return cls(**values)

    @classmethod
    def from_file(cls, path: str) -> "ScraperConfig":
        """Load tunables from a JSON configuration file.

        Args:
            path: Path to JSON configuration file

        Returns:
            ScraperConfig with values from file
        """
        file_path = Path(path)

        if not file_path.exists():
            return cls()

        with open(file_path, 'r') as f:
            config = json.load(f)

        scraper_config = config.get('scraper', config)
        known = {f.name for f in cls._tunable_fields()}
        values = {k: v for k, v in scraper_config.items() if k in known}

        if isinstance(scraper_config.get('selectors'), dict):
            values['selectors'] = PageSelectors(**scraper_config['selectors'])

        return cls(**values)

    def to_dict(self) -> dict:
        """Convert tunables to dictionary."""
        data = {f.name: getattr(self, f.name) for f in self._tunable_fields()}
        data["selectors"] = {
            f.name: getattr(self.selectors, f.name) for f in fields(self.selectors)
        }
        return data

