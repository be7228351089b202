"""Configuration for audit-insight."""

from dataclasses import dataclass
from typing import Optional
import os


PAGE_SIZES = (10, 25, 50, 100)


@dataclass
class InsightConfig:
    """Runtime settings for loading and viewing audit reports."""

    # Where the JSON artifacts live: an http(s) URL or a local directory
    base: str = "."

    # Exclusion-config artifact, fetched relative to base
    exclude_config: str = "ui-code-insight.config.json"

    # Query view defaults
    page_size: int = 10
    page_sizes: tuple[int, ...] = PAGE_SIZES
    legacy_pin_sort: bool = False  # pin selected level, leave the rest unsorted

    # Quiet period before a search edit is applied
    debounce_ms: int = 300

    log_level: str = "warning"

    # None keeps the transport's own default
    timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "InsightConfig":
        """Create config from environment variables."""
        timeout = os.environ.get("AUDIT_INSIGHT_TIMEOUT")
        return cls(
            base=os.environ.get("AUDIT_INSIGHT_BASE", "."),
            exclude_config=os.environ.get(
                "AUDIT_INSIGHT_EXCLUDE_CONFIG", "ui-code-insight.config.json"
            ),
            page_size=int(os.environ.get("AUDIT_INSIGHT_PAGE_SIZE", "10")),
            legacy_pin_sort=os.environ.get("AUDIT_INSIGHT_LEGACY_SORT", "false").lower() == "true",
            debounce_ms=int(os.environ.get("AUDIT_INSIGHT_DEBOUNCE_MS", "300")),
            log_level=os.environ.get("AUDIT_INSIGHT_LOG_LEVEL", "warning"),
            timeout=float(timeout) if timeout else None,
        )


DEFAULT_CONFIG = InsightConfig()
