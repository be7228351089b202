"""Data models for normalized audit results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class Severity(Enum):
    """Four-level severity taxonomy shared by every category."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["Severity"]:
        """Return the matching level for a producer string, or None."""
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}

# Rows without any severity (a lint file with no messages) sort last.
UNRANKED = len(SEVERITY_RANK)


class Shape(Enum):
    """Native artifact shape of a producer."""
    LINT = "lint"
    FLAT = "flat"
    PAGE_SPEED = "page-speed"


class Category(str, Enum):
    """Audit categories."""
    LINT_JS = "lint-js"
    LINT_STYLE = "lint-style"
    SECURITY = "security"
    PERFORMANCE = "performance"
    ACCESSIBILITY = "accessibility"
    PAGE_SPEED = "page-speed"
    DEPENDENCY = "dependency"
    OTHER = "other"

    @property
    def info(self) -> "CategoryInfo":
        return CATEGORY_TABLE[self]

    @property
    def label(self) -> str:
        return self.info.label

    @property
    def shape(self) -> Optional[Shape]:
        return self.info.shape

    @property
    def artifact(self) -> Optional[str]:
        return self.info.artifact

    @property
    def is_lint(self) -> bool:
        return self.info.shape is Shape.LINT

    @classmethod
    def auditable(cls) -> list["Category"]:
        """Categories backed by an artifact, in display order."""
        return [c for c in cls if CATEGORY_TABLE[c].artifact]

    @classmethod
    def from_key(cls, key: str) -> "Category":
        """Resolve a value, artifact stem, summary key or config key.

        Unknown keys resolve to OTHER rather than raising.
        """
        if isinstance(key, Category):
            return key
        return _KEY_INDEX.get(str(key).strip().lower(), cls.OTHER)


@dataclass(frozen=True)
class CategoryInfo:
    """Static per-category dispatch data."""
    label: str
    shape: Optional[Shape]
    artifact: Optional[str]
    summary_keys: tuple[str, ...] = ()
    config_key: Optional[str] = None


CATEGORY_TABLE: dict[Category, CategoryInfo] = {
    Category.LINT_JS: CategoryInfo(
        label="JavaScript Lint",
        shape=Shape.LINT,
        artifact="eslint-report.json",
        summary_keys=("eslint",),
        config_key="eslint",
    ),
    Category.LINT_STYLE: CategoryInfo(
        label="Style Lint",
        shape=Shape.LINT,
        artifact="stylelint-report.json",
        summary_keys=("stylelint",),
        config_key="stylelint",
    ),
    Category.SECURITY: CategoryInfo(
        label="Security",
        shape=Shape.FLAT,
        artifact="security-audit-report.json",
        summary_keys=("security",),
        config_key="security",
    ),
    Category.PERFORMANCE: CategoryInfo(
        label="Code Performance",
        shape=Shape.FLAT,
        artifact="performance-audit-report.json",
        summary_keys=("performance",),
        config_key="performance",
    ),
    Category.ACCESSIBILITY: CategoryInfo(
        label="Accessibility",
        shape=Shape.FLAT,
        artifact="accessibility-audit-report.json",
        summary_keys=("accessibility",),
        config_key="accessibility",
    ),
    Category.PAGE_SPEED: CategoryInfo(
        label="Page Speed",
        shape=Shape.PAGE_SPEED,
        artifact="lightHouseCombine-report.json",
        summary_keys=("lighthouse",),
        config_key="lighthouse",
    ),
    Category.DEPENDENCY: CategoryInfo(
        label="Dependencies",
        shape=Shape.FLAT,
        artifact="dependency-audit-report.json",
        summary_keys=("dependency",),
        config_key="dependency",
    ),
    Category.OTHER: CategoryInfo(label="Other", shape=None, artifact=None),
}


def _build_key_index() -> dict[str, Category]:
    index: dict[str, Category] = {}
    for category, info in CATEGORY_TABLE.items():
        index[category.value] = category
        if info.artifact:
            index[info.artifact.removesuffix("-report.json").lower()] = category
        for key in info.summary_keys:
            index[key] = category
        if info.config_key:
            index[info.config_key] = category
    return index


_KEY_INDEX = _build_key_index()


class ScoreSource(Enum):
    """Where a category score came from."""
    COMPUTED = "computed"
    PRECOMPUTED_SUMMARY = "precomputed-summary"
    DEFAULT = "default"


RawSeverity = Union[int, str, None]


@dataclass(frozen=True)
class Issue:
    """A single normalized finding."""
    source_category: Category
    message: str
    raw_severity: RawSeverity
    normalized_severity: Severity
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None
    rule_id: Optional[str] = None
    suggestions: tuple[str, ...] = ()
    code: Optional[str] = None
    context: Optional[str] = None
    device: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.normalized_severity in (Severity.CRITICAL, Severity.HIGH)

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on message, location and rule."""
        if not term:
            return True
        term = term.lower()
        return any(
            term in value.lower()
            for value in (self.message, self.file, self.rule_id)
            if value
        )


@dataclass(frozen=True)
class FileResult:
    """Lint issues grouped by originating file.

    Error and warning counts are derived from ``issues`` so they can never
    drift from the current issue set. The producer's own counts are kept
    separately as display-only values.
    """
    file_path: str
    issues: tuple[Issue, ...] = ()
    reported_error_count: Optional[int] = None
    reported_warning_count: Optional[int] = None

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if not i.is_error)

    @property
    def severity(self) -> Optional[Severity]:
        """Worst severity among the file's issues."""
        if not self.issues:
            return None
        return min((i.normalized_severity for i in self.issues), key=lambda s: s.rank)

    def matches(self, term: str) -> bool:
        return not term or term.lower() in self.file_path.lower()

    def with_issues(self, issues: tuple[Issue, ...]) -> "FileResult":
        return FileResult(
            file_path=self.file_path,
            issues=issues,
            reported_error_count=self.reported_error_count,
            reported_warning_count=self.reported_warning_count,
        )


@dataclass(frozen=True)
class WebVital:
    """One core web vital measurement."""
    name: str
    value: Optional[float]
    unit: Optional[str]
    score: Optional[float]  # 0-1, colour-coding only

    @property
    def rating(self) -> Optional[str]:
        if self.score is None:
            return None
        if self.score >= 0.9:
            return "good"
        if self.score >= 0.5:
            return "needs-improvement"
        return "poor"


@dataclass(frozen=True)
class DeviceResult:
    """Page-speed measurements for one device profile."""
    device: str
    performance: Optional[float] = None
    accessibility: Optional[float] = None
    best_practices: Optional[float] = None
    seo: Optional[float] = None
    issues: tuple[Issue, ...] = ()
    vitals: tuple[WebVital, ...] = ()
    report_file: Optional[str] = None


@dataclass(frozen=True)
class PageSpeedTarget:
    """Page-speed results for one tested URL."""
    url: str
    desktop: Optional[DeviceResult] = None
    mobile: Optional[DeviceResult] = None

    @property
    def devices(self) -> list[DeviceResult]:
        return [d for d in (self.desktop, self.mobile) if d is not None]

    @property
    def issues(self) -> list[Issue]:
        return [i for d in self.devices for i in d.issues]


@dataclass(frozen=True)
class ProjectMeta:
    """Project information some lint artifacts carry."""
    project_type: Optional[str] = None
    reports: tuple[str, ...] = ()


@dataclass
class NormalizedReport:
    """Normalizer output for one category."""
    category: Category
    issues: list[Issue] = field(default_factory=list)
    files: list[FileResult] = field(default_factory=list)
    targets: list[PageSpeedTarget] = field(default_factory=list)
    meta: Optional[ProjectMeta] = None
    reported_total: Optional[int] = None
    skipped: int = 0


@dataclass
class CategoryReport:
    """Score and counts for one category."""
    category: Category
    total_issues: int
    by_severity: dict[Severity, int]
    score: Optional[int]
    score_source: ScoreSource
    available: bool = True

    @property
    def label(self) -> str:
        return self.category.label


@dataclass
class CompositeMetrics:
    """Whole-project snapshot of category scores."""
    reports: dict[Category, CategoryReport] = field(default_factory=dict)
    overall_score: Optional[int] = None

    @property
    def total_issues(self) -> int:
        return sum(r.total_issues for r in self.reports.values())

    @property
    def by_severity(self) -> dict[Severity, int]:
        totals = {s: 0 for s in Severity}
        for report in self.reports.values():
            for severity, count in report.by_severity.items():
                totals[severity] += count
        return totals

    def score_for(self, category: Category) -> Optional[int]:
        report = self.reports.get(category)
        return report.score if report else None


@dataclass
class ViewState:
    """Live search, sort and pagination state for one category."""
    search_term: str = ""
    sort_by_severity: Optional[Severity] = None
    page: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class LoadWarning:
    """A recoverable problem met while loading an artifact."""
    category: Optional[Category]
    artifact: str
    message: str
