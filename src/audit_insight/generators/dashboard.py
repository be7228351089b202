"""Generate a static HTML dashboard from an audit snapshot."""

from typing import Optional

from bs4 import BeautifulSoup, Tag

from .. import __version__
from ..auditor import AuditSnapshot
from ..models import Category, CategoryReport, FileResult, PageSpeedTarget, ScoreSource, Severity
from ..query import QueryEngine, Row
from ..scorer import score_band


TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Audit Insight</title>
<style>
body { font-family: system-ui, sans-serif; margin: 2rem; color: #1f2933; }
.cards { display: flex; flex-wrap: wrap; gap: 1rem; }
.card { border: 1px solid #d9e2ec; border-radius: 8px; padding: 1rem; min-width: 12rem; }
.score { font-size: 2rem; font-weight: bold; }
.good { color: #2f9e44; } .average { color: #f08c00; } .poor { color: #e03131; }
.no-data { color: #868e96; font-style: italic; }
.source { font-size: 0.8rem; color: #52606d; }
table { border-collapse: collapse; width: 100%; margin-bottom: 2rem; }
th, td { text-align: left; padding: 0.3rem 0.6rem; border-bottom: 1px solid #e4e7eb; }
.sev-critical { color: #c92a2a; } .sev-high { color: #e8590c; }
.sev-medium { color: #f59f00; } .sev-low { color: #1c7ed6; }
</style>
</head>
<body>
<header id="header"></header>
<section id="overview"><h2>Overview</h2><div class="cards"></div></section>
<section id="details"></section>
<footer id="footer"></footer>
</body>
</html>
"""


def _tag(soup: BeautifulSoup, name: str, text: Optional[str] = None, **attrs: str) -> Tag:
    if "class_" in attrs:
        attrs["class"] = attrs.pop("class_")
    tag = soup.new_tag(name, attrs=attrs)
    if text is not None:
        tag.string = text
    return tag


def _severity_class(severity: Optional[Severity]) -> str:
    return f"sev-{severity.value}" if severity else ""


def build_card(soup: BeautifulSoup, report: CategoryReport) -> Tag:
    """Overview card: score, where it came from, and severity counts."""
    card = _tag(soup, "div", class_="card", id=f"card-{report.category.value}")
    card.append(_tag(soup, "h3", report.label))

    if not report.available:
        card.append(_tag(soup, "div", "No data", class_="no-data"))
        return card

    score = report.score
    card.append(_tag(
        soup, "div", "n/a" if score is None else str(score),
        class_=f"score {score_band(score) or ''}".strip(),
    ))
    card.append(_tag(soup, "div", report.score_source.value, class_="source"))

    counts = _tag(soup, "ul", class_="counts")
    for severity in Severity:
        counts.append(_tag(
            soup, "li", f"{severity.value}: {report.by_severity.get(severity, 0)}",
            class_=_severity_class(severity),
        ))
    card.append(counts)
    card.append(_tag(soup, "div", f"{report.total_issues} issues", class_="total"))
    return card


def _row_cells(row: Row) -> list[str]:
    if isinstance(row, FileResult):
        return [
            row.file_path,
            row.severity.value if row.severity else "",
            str(row.error_count),
            str(row.warning_count),
        ]
    location = row.file or ""
    if row.line is not None:
        location = f"{location}:{row.line}"
    return [
        row.message,
        row.normalized_severity.value,
        location,
        row.rule_id or "",
    ]


def build_issue_table(soup: BeautifulSoup, category: Category, rows: list[Row]) -> Tag:
    headers = (
        ["File", "Severity", "Errors", "Warnings"]
        if category.is_lint
        else ["Message", "Severity", "Location", "Rule"]
    )
    table = _tag(soup, "table", class_="issues")
    head = _tag(soup, "tr")
    for header in headers:
        head.append(_tag(soup, "th", header))
    table.append(head)
    for row in rows:
        tr = _tag(soup, "tr")
        for i, cell in enumerate(_row_cells(row)):
            td = _tag(soup, "td", cell)
            if i == 1 and cell:
                td["class"] = f"sev-{cell}"
            tr.append(td)
        table.append(tr)
    return table


def build_page_speed_table(soup: BeautifulSoup, targets: list[PageSpeedTarget]) -> Tag:
    table = _tag(soup, "table", class_="page-speed")
    head = _tag(soup, "tr")
    for header in ("URL", "Device", "Performance", "Accessibility", "Best Practices", "SEO"):
        head.append(_tag(soup, "th", header))
    table.append(head)
    for target in targets:
        for device in target.devices:
            tr = _tag(soup, "tr")
            tr.append(_tag(soup, "td", target.url))
            tr.append(_tag(soup, "td", device.device))
            for value in (device.performance, device.accessibility, device.best_practices, device.seo):
                text = "n/a" if value is None else str(round(value))
                tr.append(_tag(soup, "td", text, class_=score_band(value) or ""))
            table.append(tr)
    return table


def render_dashboard(snapshot: AuditSnapshot, engine: Optional[QueryEngine] = None) -> str:
    """Render the snapshot as a standalone HTML page.

    Each category shows the first page of its current view.
    """
    if engine is None:
        engine = QueryEngine.from_reports(snapshot.reports)
    soup = BeautifulSoup(TEMPLATE, "lxml")
    metrics = snapshot.metrics

    header = soup.find(id="header")
    header.append(_tag(soup, "h1", "Audit Insight"))
    header.append(_tag(soup, "p", snapshot.location, class_="location"))
    if snapshot.meta and snapshot.meta.project_type:
        header.append(_tag(soup, "p", f"Project type: {snapshot.meta.project_type}", class_="project"))
    overall = metrics.overall_score
    header.append(_tag(
        soup, "p", f"Overall score: {'n/a' if overall is None else overall}",
        class_=f"overall {score_band(overall) or ''}".strip(),
    ))

    cards = soup.find(id="overview").find("div", class_="cards")
    for report in metrics.reports.values():
        cards.append(build_card(soup, report))

    details = soup.find(id="details")
    for category, report in metrics.reports.items():
        if category is Category.OTHER:
            continue
        section = _tag(soup, "section", id=f"category-{category.value}")
        section.append(_tag(soup, "h2", report.label))
        for warning in snapshot.warnings_for(category):
            section.append(_tag(soup, "p", f"Warning: {warning.message}", class_="warning"))

        normalized = snapshot.report_for(category)
        if normalized is None:
            section.append(_tag(soup, "p", "No data", class_="no-data"))
            details.append(section)
            continue

        if category is Category.PAGE_SPEED and normalized.targets:
            section.append(build_page_speed_table(soup, normalized.targets))

        view = engine.view(category)
        if view.total_items:
            section.append(build_issue_table(soup, category, view.rows))
            section.append(_tag(
                soup, "p",
                f"Showing {view.first_item}-{view.last_item} of {view.total_items}",
                class_="paging",
            ))
        else:
            section.append(_tag(soup, "p", "No issues found", class_="clean"))
        if report.score_source is ScoreSource.PRECOMPUTED_SUMMARY:
            section.append(_tag(soup, "p", "Score from comprehensive summary", class_="source"))
        details.append(section)

    soup.find(id="footer").append(_tag(soup, "small", f"audit-insight v{__version__}"))
    return str(soup)
