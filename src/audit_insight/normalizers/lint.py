"""Normalize linter artifacts (array of file results with messages)."""

import logging
from dataclasses import replace
from typing import Any

from ..classifier import classify, preliminary_severity
from ..models import Category, FileResult, Issue, NormalizedReport, ProjectMeta
from .common import as_int, as_text, first_text, unwrap_list


logger = logging.getLogger(__name__)


def message_suggestions(message: dict[str, Any]) -> tuple[str, ...]:
    """Collect human-readable suggestions from a lint message."""
    suggestions: list[str] = []
    raw = message.get("suggestions")
    if isinstance(raw, list):
        for item in raw:
            if isinstance(item, dict):
                text = first_text(item, "desc", "message", "messageId")
            else:
                text = as_text(item)
            if text:
                suggestions.append(text)
    if message.get("fix"):
        suggestions.append("Auto-fix available")
    return tuple(suggestions)


def normalize_message(
    category: Category, file_path: str, message: dict[str, Any]
) -> Issue:
    raw_severity = message.get("severity")
    issue = Issue(
        source_category=category,
        message=first_text(message, "message", "text") or "",
        raw_severity=raw_severity,
        normalized_severity=preliminary_severity(category, raw_severity),
        file=file_path,
        line=as_int(message.get("line")),
        column=as_int(message.get("column")),
        end_line=as_int(message.get("endLine")),
        end_column=as_int(message.get("endColumn")),
        rule_id=first_text(message, "ruleId", "rule"),
        suggestions=message_suggestions(message),
        code=as_text(message.get("source")),
    )
    return replace(issue, normalized_severity=classify(issue))


def project_meta(data: Any) -> ProjectMeta | None:
    if not isinstance(data, dict):
        return None
    if "projectType" not in data and "reports" not in data:
        return None
    reports = data.get("reports")
    return ProjectMeta(
        project_type=as_text(data.get("projectType")),
        reports=tuple(str(r) for r in reports) if isinstance(reports, list) else (),
    )


def normalize_lint(
    category: Category, data: Any, excluded: frozenset[str] = frozenset()
) -> NormalizedReport:
    """Map a JS or style linter artifact to issues grouped by file.

    Entries without a file path are dropped. Messages whose rule is in
    ``excluded`` are hidden, and file counts follow the remaining issues.
    """
    report = NormalizedReport(category=category, meta=project_meta(data))

    for entry in unwrap_list(data, "results", category.artifact or category.value):
        if not isinstance(entry, dict):
            report.skipped += 1
            continue
        file_path = first_text(entry, "filePath", "source")
        if not file_path:
            report.skipped += 1
            continue

        messages = entry.get("messages")
        if messages is None:
            messages = entry.get("warnings")
        issues = []
        for message in messages if isinstance(messages, list) else []:
            if not isinstance(message, dict):
                report.skipped += 1
                continue
            issue = normalize_message(category, file_path, message)
            if issue.rule_id and issue.rule_id in excluded:
                continue
            issues.append(issue)

        report.files.append(FileResult(
            file_path=file_path,
            issues=tuple(issues),
            reported_error_count=as_int(entry.get("errorCount")),
            reported_warning_count=as_int(entry.get("warningCount")),
        ))
        report.issues.extend(issues)

    if report.skipped:
        logger.debug("Skipped %d unusable %s entries", report.skipped, category.value)
    return report
