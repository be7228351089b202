"""Composite 0-100 health scores per category."""

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from .models import (
    Category,
    CategoryReport,
    CompositeMetrics,
    Issue,
    NormalizedReport,
    PageSpeedTarget,
    ScoreSource,
    Severity,
)
from .normalizers.page_speed import sub_scores


logger = logging.getLogger(__name__)

MAX_SCORE = 100


@dataclass(frozen=True)
class ScoringWeights:
    """Per-issue deductions, heaviest for critical."""
    critical: int = 20
    high: int = 10
    medium: int = 5
    low: int = 1
    per_issue: int = 2

    def deduction(self, severity: Optional[Severity]) -> int:
        weighted = {
            Severity.CRITICAL: self.critical,
            Severity.HIGH: self.high,
            Severity.MEDIUM: self.medium,
            Severity.LOW: self.low,
        }.get(severity, 0)
        return weighted + self.per_issue


DEFAULT_WEIGHTS = ScoringWeights()

CATEGORY_WEIGHTS = {
    Category.PERFORMANCE: ScoringWeights(per_issue=3),
    Category.ACCESSIBILITY: ScoringWeights(per_issue=3),
}

# Contribution of each area to the overall score
OVERALL_WEIGHTS = {
    "security": 0.30,
    "performance": 0.25,
    "accessibility": 0.20,
    "code_quality": 0.15,
    "dependency": 0.10,
}

# Summary "dashboard" block keys
DASHBOARD_SCORE_KEYS = {
    "securityScore": Category.SECURITY,
    "codePerformanceScore": Category.PERFORMANCE,
    "accessibilityScore": Category.ACCESSIBILITY,
    "runtimePerformanceScore": Category.PAGE_SPEED,
}

SUMMARY_COUNT_KEYS = {
    "criticalSeverity": Severity.CRITICAL,
    "criticalIssues": Severity.CRITICAL,
    "highSeverity": Severity.HIGH,
    "mediumSeverity": Severity.MEDIUM,
    "lowSeverity": Severity.LOW,
}


def weights_for(category: Category) -> ScoringWeights:
    return CATEGORY_WEIGHTS.get(category, DEFAULT_WEIGHTS)


def clamp(value: float) -> float:
    return max(0, min(MAX_SCORE, value))


def deduct(severities: Iterable[Optional[Severity]], weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
    """Start at 100 and apply one deduction per issue, clamping every step."""
    total: float = MAX_SCORE
    for severity in severities:
        total = clamp(total - weights.deduction(severity))
    return round(total)


def deduct_counts(
    counts: Iterable[tuple[Optional[Severity], int]], weights: ScoringWeights = DEFAULT_WEIGHTS
) -> int:
    """Same result as ``deduct`` over ``count`` issues of each level.

    Every deduction is positive, so clamping once per level equals
    clamping after each issue, and the cost no longer grows with counts.
    """
    total: float = MAX_SCORE
    for severity, count in counts:
        if count > 0:
            total = clamp(total - count * weights.deduction(severity))
    return round(total)


def score(category: Category, issues: Iterable[Issue]) -> int:
    """Score a category from its classified issues."""
    return deduct((i.normalized_severity for i in issues), weights_for(category))


def score_counts(
    category: Category, by_severity: Mapping[Severity, int], total: Optional[int] = None
) -> int:
    """Score from counts alone, as a precomputed summary provides them.

    Issues counted in ``total`` but not in any level take only the flat
    deduction.
    """
    counts: list[tuple[Optional[Severity], int]] = [
        (severity, max(0, by_severity.get(severity, 0))) for severity in Severity
    ]
    if total is not None:
        counts.append((None, total - sum(n for _, n in counts)))
    return deduct_counts(counts, weights_for(category))


def page_speed_score(targets: Iterable[PageSpeedTarget]) -> Optional[int]:
    """Producer's own performance sub-score, averaged over targets and devices."""
    values = [
        d.performance
        for t in targets
        for d in t.devices
        if d.performance is not None
    ]
    if not values:
        return None
    return round(clamp(sum(values) / len(values)))


def count_by_severity(issues: Iterable[Issue]) -> dict[Severity, int]:
    counts = {s: 0 for s in Severity}
    for issue in issues:
        counts[issue.normalized_severity] += 1
    return counts


@dataclass
class SummaryEntry:
    """One category's figures from the comprehensive summary artifact."""
    total_issues: Optional[int] = None
    by_severity: Optional[dict[Severity, int]] = None
    score: Optional[float] = None

    @property
    def has_counts(self) -> bool:
        return self.total_issues is not None or self.by_severity is not None


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def parse_summary_entry(data: Any, category: Optional[Category] = None) -> Optional[SummaryEntry]:
    """Counts and score of one summary category block.

    A page-speed block without its own score passes its performance
    sub-score through.
    """
    if not isinstance(data, dict):
        return None
    counts: dict[Severity, int] = {}
    for key, severity in SUMMARY_COUNT_KEYS.items():
        value = _number(data.get(key))
        if value is not None:
            counts[severity] = counts.get(severity, 0) + int(value)
    total = _number(data.get("totalIssues"))
    entry = SummaryEntry(
        total_issues=int(total) if total is not None else None,
        by_severity=counts or None,
        score=_number(data.get("score")),
    )
    if category is Category.PAGE_SPEED and entry.score is None:
        entry.score = sub_scores(data)["performance"]
    if entry.has_counts and entry.total_issues is None:
        entry.total_issues = sum(counts.values())
    if not entry.has_counts and entry.score is None:
        return None
    return entry


def parse_summary(data: Any) -> dict[Category, SummaryEntry]:
    """Per-category entries of the comprehensive summary artifact."""
    entries: dict[Category, SummaryEntry] = {}
    if not isinstance(data, dict):
        return entries

    categories = data.get("categories")
    if isinstance(categories, dict):
        for key, value in categories.items():
            category = Category.from_key(key)
            entry = parse_summary_entry(value, category)
            if entry is None:
                continue
            if category is Category.OTHER and Category.OTHER in entries:
                merged = entries[Category.OTHER]
                merged.total_issues = (merged.total_issues or 0) + (entry.total_issues or 0)
                continue
            entries[category] = entry

    dashboard = data.get("dashboard")
    if isinstance(dashboard, dict):
        for key, category in DASHBOARD_SCORE_KEYS.items():
            value = _number(dashboard.get(key))
            if value is None:
                continue
            entry = entries.setdefault(category, SummaryEntry())
            if entry.score is None:
                entry.score = value

    return entries


def build_category_report(
    category: Category,
    normalized: Optional[NormalizedReport],
    summary: Optional[SummaryEntry] = None,
) -> CategoryReport:
    """Counts and score for one category, applying summary precedence."""
    if normalized is not None:
        by_severity = count_by_severity(normalized.issues)
        total = len(normalized.issues)
    else:
        by_severity = {s: 0 for s in Severity}
        total = 0

    if summary is not None and summary.has_counts:
        by_severity = {s: (summary.by_severity or {}).get(s, 0) for s in Severity}
        total = summary.total_issues if summary.total_issues is not None else sum(by_severity.values())

    report = CategoryReport(
        category=category,
        total_issues=total,
        by_severity=by_severity,
        score=MAX_SCORE,
        score_source=ScoreSource.DEFAULT,
        available=normalized is not None or summary is not None,
    )

    if summary is not None and summary.score is not None:
        report.score = round(clamp(summary.score))
        report.score_source = ScoreSource.PRECOMPUTED_SUMMARY
    elif summary is not None and summary.has_counts and category is not Category.PAGE_SPEED:
        report.score = score_counts(category, by_severity, total)
        report.score_source = ScoreSource.PRECOMPUTED_SUMMARY
    elif normalized is not None and category is Category.PAGE_SPEED:
        if normalized.targets:
            report.score = page_speed_score(normalized.targets)
            report.score_source = ScoreSource.COMPUTED
    elif normalized is not None:
        report.score = score(category, normalized.issues)
        report.score_source = ScoreSource.COMPUTED

    return report


def overall_score(reports: Mapping[Category, CategoryReport]) -> Optional[int]:
    """Weighted blend of the evidence-backed category scores."""

    def evidence(category: Category) -> Optional[int]:
        report = reports.get(category)
        if report is None or report.score is None or report.score_source is ScoreSource.DEFAULT:
            return None
        return report.score

    lint = [s for s in (evidence(Category.LINT_JS), evidence(Category.LINT_STYLE)) if s is not None]
    parts = {
        "security": evidence(Category.SECURITY),
        "performance": evidence(Category.PERFORMANCE),
        "accessibility": evidence(Category.ACCESSIBILITY),
        "code_quality": sum(lint) / len(lint) if lint else None,
        "dependency": evidence(Category.DEPENDENCY),
    }
    weighted = [(OVERALL_WEIGHTS[k], v) for k, v in parts.items() if v is not None]
    if not weighted:
        return None
    total_weight = sum(w for w, _ in weighted)
    return round(sum(w * v for w, v in weighted) / total_weight)


def build_metrics(
    normalized: Mapping[Category, NormalizedReport],
    summary_data: Any = None,
    categories: Optional[Iterable[Category]] = None,
) -> CompositeMetrics:
    """Recompute the whole-project snapshot from one load cycle."""
    summary = parse_summary(summary_data)
    if categories is None:
        categories = Category.auditable()

    metrics = CompositeMetrics()
    for category in categories:
        metrics.reports[category] = build_category_report(
            category, normalized.get(category), summary.get(category)
        )
    if Category.OTHER in summary:
        metrics.reports[Category.OTHER] = build_category_report(
            Category.OTHER, None, summary[Category.OTHER]
        )

    metrics.overall_score = overall_score(metrics.reports)
    logger.debug("Overall score %s", metrics.overall_score)
    return metrics


def score_band(value: Optional[float]) -> Optional[str]:
    """Display band for a score: good, average or poor."""
    if value is None:
        return None
    if value >= 90:
        return "good"
    if value >= 50:
        return "average"
    return "poor"
