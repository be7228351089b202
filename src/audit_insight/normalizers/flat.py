"""Normalize flat issue-list artifacts (security, performance, accessibility, dependency)."""

from dataclasses import replace
from typing import Any, Optional

from ..classifier import classify, preliminary_severity
from ..models import Category, Issue, NormalizedReport
from .common import as_int, as_text, first_text, unwrap_list


def normalize_flat_issue(
    category: Category,
    item: dict[str, Any],
    file: Optional[str] = None,
    device: Optional[str] = None,
) -> Issue:
    """Map one producer issue object to an Issue."""
    raw_severity = item.get("severity")
    recommendation = first_text(item, "recommendation", "fix")
    issue = Issue(
        source_category=category,
        message=first_text(item, "message", "title", "description", "type") or "",
        raw_severity=raw_severity,
        normalized_severity=preliminary_severity(category, raw_severity),
        file=file or first_text(item, "file", "url", "package"),
        line=as_int(item.get("line")),
        column=as_int(item.get("column")),
        rule_id=first_text(item, "type", "rule", "ruleId", "id"),
        suggestions=(recommendation,) if recommendation else (),
        code=as_text(item.get("code")),
        context=as_text(item.get("context")),
        device=device,
    )
    return replace(issue, normalized_severity=classify(issue))


def normalize_flat(
    category: Category, data: Any, excluded: frozenset[str] = frozenset()
) -> NormalizedReport:
    """Each element of the ``issues`` array becomes one Issue."""
    report = NormalizedReport(category=category)
    if isinstance(data, dict):
        report.reported_total = as_int(data.get("totalIssues"))

    for item in unwrap_list(data, "issues", category.artifact or category.value):
        if not isinstance(item, dict):
            report.skipped += 1
            continue
        issue = normalize_flat_issue(category, item)
        if issue.rule_id and issue.rule_id in excluded:
            continue
        report.issues.append(issue)

    return report
