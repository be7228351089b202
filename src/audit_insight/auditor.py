"""End-to-end pipeline: load artifacts, normalize, classify and score."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .config import DEFAULT_CONFIG, InsightConfig
from .exceptions import MalformedArtifactError
from .exclusions import ExclusionConfig
from .loader import LoadResult, load_artifacts
from .models import (
    Category,
    CompositeMetrics,
    LoadWarning,
    NormalizedReport,
    ProjectMeta,
)
from .normalizers import normalize_artifact
from .scorer import build_metrics


logger = logging.getLogger(__name__)


@dataclass
class AuditSnapshot:
    """One load cycle's normalized reports and scores."""
    location: str
    reports: dict[Category, NormalizedReport] = field(default_factory=dict)
    metrics: CompositeMetrics = field(default_factory=CompositeMetrics)
    exclusions: ExclusionConfig = field(default_factory=ExclusionConfig)
    warnings: list[LoadWarning] = field(default_factory=list)
    meta: Optional[ProjectMeta] = None
    load_time_ms: int = 0

    def report_for(self, category: Category) -> Optional[NormalizedReport]:
        return self.reports.get(category)

    def warnings_for(self, category: Category) -> list[LoadWarning]:
        return [w for w in self.warnings if w.category == category]


def normalize_loaded(loaded: LoadResult) -> AuditSnapshot:
    """Turn raw artifacts into a scored snapshot.

    A malformed artifact, or one the normalizer cannot read, leaves its
    category empty and records a warning.
    """
    snapshot = AuditSnapshot(location=loaded.location, warnings=list(loaded.warnings))
    snapshot.exclusions = ExclusionConfig.from_artifact(loaded.exclusions)

    for category, data in loaded.artifacts.items():
        try:
            report = normalize_artifact(category, data, snapshot.exclusions.excluded(category))
        except MalformedArtifactError as e:
            logger.warning("Ignoring %s: %s", e.artifact, e.message)
            snapshot.warnings.append(
                LoadWarning(category=category, artifact=e.artifact, message=e.message)
            )
            continue
        except Exception as e:
            logger.warning("Could not normalize %s: %s", category.artifact, e)
            snapshot.warnings.append(LoadWarning(
                category=category,
                artifact=category.artifact or category.value,
                message=f"could not normalize: {e}",
            ))
            continue
        if report.skipped:
            logger.info("Skipped %d unreadable entries in %s", report.skipped, category.artifact)
        snapshot.reports[category] = report
        if snapshot.meta is None and report.meta is not None:
            snapshot.meta = report.meta

    snapshot.metrics = build_metrics(snapshot.reports, loaded.summary)
    return snapshot


async def load_snapshot(
    config: InsightConfig = DEFAULT_CONFIG,
    location: Optional[str] = None,
    categories: Optional[Iterable[Category]] = None,
) -> AuditSnapshot:
    """Load and score every category under ``location`` (or ``config.base``)."""
    start_time = time.time()
    loaded = await load_artifacts(
        location or config.base,
        categories=categories,
        exclude_config=config.exclude_config,
        timeout=config.timeout,
    )
    snapshot = normalize_loaded(loaded)
    snapshot.load_time_ms = int((time.time() - start_time) * 1000)
    return snapshot


def audit_reports(
    location: Optional[str] = None, config: InsightConfig = DEFAULT_CONFIG
) -> AuditSnapshot:
    """Run the complete pipeline synchronously.

    Args:
        location: Directory or http(s) URL holding the artifacts
        config: Runtime settings; ``config.base`` is used when no location is given

    Returns:
        AuditSnapshot with normalized reports, scores and load warnings
    """
    return asyncio.run(load_snapshot(config, location=location))
