"""Normalize page-speed artifacts (per-target desktop/mobile measurements)."""

from typing import Any, Optional

from ..models import Category, DeviceResult, NormalizedReport, PageSpeedTarget, WebVital
from .common import as_float, as_text, first_text, unwrap_list
from .flat import normalize_flat_issue


DEVICES = ("desktop", "mobile")

VITAL_ALIASES = {
    "largest-contentful-paint": ("largest-contentful-paint", "largestContentfulPaint", "lcp"),
    "total-blocking-time": ("total-blocking-time", "totalBlockingTime", "tbt"),
    "cumulative-layout-shift": ("cumulative-layout-shift", "cumulativeLayoutShift", "cls"),
    "first-contentful-paint": ("first-contentful-paint", "firstContentfulPaint", "fcp"),
    "interaction-delay": (
        "interaction-delay",
        "interaction-to-next-paint",
        "interactionToNextPaint",
        "max-potential-fid",
        "maxPotentialFid",
        "first-input-delay",
        "firstInputDelay",
        "inp",
        "fid",
    ),
}

_VITAL_INDEX = {
    alias.lower(): name for name, aliases in VITAL_ALIASES.items() for alias in aliases
}

DEFAULT_UNITS = {
    "largest-contentful-paint": "ms",
    "total-blocking-time": "ms",
    "cumulative-layout-shift": None,
    "first-contentful-paint": "ms",
    "interaction-delay": "ms",
}


SUB_SCORE_KEYS = {
    "performance": ("performance",),
    "accessibility": ("accessibility",),
    "best_practices": ("bestPractices", "best-practices"),
    "seo": ("seo",),
}


def as_score(value: Any, fractional: bool = False) -> Optional[float]:
    """Sub-score on a 0-100 scale, clamped. ``fractional`` values are 0-1."""
    score = as_float(value)
    if score is None:
        return None
    if fractional:
        score *= 100
    return max(0.0, min(100.0, score))


def sub_scores(data: dict[str, Any]) -> dict[str, Optional[float]]:
    """The four sub-scores of one device block on a 0-100 scale.

    Producers write either 0-100 or 0-1 for a whole block, so the block is
    read as fractions when every present sub-score is at most 1.
    """
    raw: dict[str, Optional[float]] = {}
    for name, keys in SUB_SCORE_KEYS.items():
        values = [as_float(data.get(key)) for key in keys]
        raw[name] = next((v for v in values if v is not None), None)
    present = [v for v in raw.values() if v is not None]
    fractional = bool(present) and all(v <= 1 for v in present)
    return {name: as_score(value, fractional) for name, value in raw.items()}


def parse_vital(name: str, raw: Any) -> WebVital:
    if isinstance(raw, dict):
        score = as_float(raw.get("score"))
        return WebVital(
            name=name,
            value=as_float(raw.get("value", raw.get("numericValue"))),
            unit=as_text(raw.get("unit", raw.get("numericUnit"))) or DEFAULT_UNITS[name],
            score=max(0.0, min(1.0, score)) if score is not None else None,
        )
    return WebVital(name=name, value=as_float(raw), unit=DEFAULT_UNITS[name], score=None)


def parse_vitals(raw: Any) -> tuple[WebVital, ...]:
    """Core web vitals keyed by canonical name, in canonical order."""
    found: dict[str, WebVital] = {}
    if isinstance(raw, dict):
        items = list(raw.items())
    elif isinstance(raw, list):
        items = [
            (first_text(v, "name", "id") or "", v) for v in raw if isinstance(v, dict)
        ]
    else:
        items = []
    for key, value in items:
        name = _VITAL_INDEX.get(str(key).lower())
        if name and name not in found:
            found[name] = parse_vital(name, value)
    return tuple(found[n] for n in VITAL_ALIASES if n in found)


def parse_device(
    device: str, url: str, data: dict[str, Any], excluded: frozenset[str]
) -> DeviceResult:
    issues = []
    raw_issues = data.get("issues")
    for item in raw_issues if isinstance(raw_issues, list) else []:
        if not isinstance(item, dict):
            continue
        issue = normalize_flat_issue(Category.PAGE_SPEED, item, file=url, device=device)
        if issue.rule_id and issue.rule_id in excluded:
            continue
        issues.append(issue)
    scores = sub_scores(data)
    return DeviceResult(
        device=device,
        performance=scores["performance"],
        accessibility=scores["accessibility"],
        best_practices=scores["best_practices"],
        seo=scores["seo"],
        issues=tuple(issues),
        vitals=parse_vitals(data.get("coreWebVitals")),
        report_file=as_text(data.get("fileName")),
    )


def parse_target(item: dict[str, Any], excluded: frozenset[str]) -> PageSpeedTarget:
    url = first_text(item, "url", "finalUrl") or ""
    devices: dict[str, Optional[DeviceResult]] = {}
    for device in DEVICES:
        block = item.get(device)
        devices[device] = parse_device(device, url, block, excluded) if isinstance(block, dict) else None
    if not any(devices.values()) and ("performance" in item or "issues" in item):
        # Older single-profile shape keeps scores on the target itself
        devices["desktop"] = parse_device("desktop", url, item, excluded)
    return PageSpeedTarget(url=url, desktop=devices["desktop"], mobile=devices["mobile"])


def normalize_page_speed(
    category: Category, data: Any, excluded: frozenset[str] = frozenset()
) -> NormalizedReport:
    """Flatten every target's device issues and keep the per-target scores."""
    report = NormalizedReport(category=category)
    if isinstance(data, dict) and "results" not in data and "url" in data:
        data = [data]

    for item in unwrap_list(data, "results", category.artifact or category.value):
        if not isinstance(item, dict):
            report.skipped += 1
            continue
        target = parse_target(item, excluded)
        report.targets.append(target)
        report.issues.extend(target.issues)

    return report
