"""CLI interface for audit-insight."""

import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from . import __version__
from .auditor import AuditSnapshot, audit_reports
from .config import PAGE_SIZES, InsightConfig
from .exceptions import InsightError
from .loader import is_url
from .logging_config import setup_logging
from .models import Category, CategoryReport, FileResult, Issue, ScoreSource, Severity
from .query import QueryEngine, View, resolve_category
from .scorer import score_band


console = Console()

COMMANDS = ("summary", "issues", "pagespeed", "excluded", "report")


def severity_style(severity: Optional[Severity]) -> str:
    """Get Rich style for severity level."""
    return {
        Severity.CRITICAL: "bold red",
        Severity.HIGH: "red",
        Severity.MEDIUM: "yellow",
        Severity.LOW: "blue",
    }.get(severity, "white")


def severity_icon(severity: Optional[Severity]) -> str:
    """Get icon for severity level."""
    return {
        Severity.CRITICAL: "✗",
        Severity.HIGH: "✗",
        Severity.MEDIUM: "⚠",
        Severity.LOW: "ℹ",
    }.get(severity, "•")


def score_color(score: Optional[float]) -> str:
    """Get color for a score value."""
    band = score_band(score)
    if band == "good":
        return "green"
    elif band == "average":
        return "yellow"
    elif band == "poor":
        return "red"
    else:
        return "dim"


def print_score_bar(score: Optional[int], width: int = 20) -> Text:
    """Create a visual score bar."""
    bar = Text()
    if score is None:
        bar.append("░" * width, style="dim")
        bar.append(" n/a", style="dim")
        return bar

    filled = int((score / 100) * width)
    empty = width - filled
    color = score_color(score)

    bar.append("█" * filled, style=color)
    bar.append("░" * empty, style="dim")
    bar.append(f" {score}/100", style=f"bold {color}")
    return bar


def score_cell(value: Optional[float]) -> str:
    if value is None:
        return "[dim]n/a[/dim]"
    return f"[{score_color(value)}]{round(value)}[/]"


def source_badge(report: CategoryReport) -> str:
    if not report.available:
        return "[dim]no data[/dim]"
    return {
        ScoreSource.COMPUTED: "[cyan]computed[/cyan]",
        ScoreSource.PRECOMPUTED_SUMMARY: "[magenta]summary[/magenta]",
        ScoreSource.DEFAULT: "[dim]default[/dim]",
    }[report.score_source]


def report_to_dict(report: CategoryReport) -> dict[str, Any]:
    return {
        "category": report.category.value,
        "label": report.label,
        "score": report.score,
        "score_source": report.score_source.value,
        "available": report.available,
        "total_issues": report.total_issues,
        "by_severity": {s.value: n for s, n in report.by_severity.items()},
    }


def issue_to_dict(issue: Issue) -> dict[str, Any]:
    return {
        "category": issue.source_category.value,
        "message": issue.message,
        "severity": issue.normalized_severity.value,
        "raw_severity": issue.raw_severity,
        "file": issue.file,
        "line": issue.line,
        "column": issue.column,
        "rule_id": issue.rule_id,
        "suggestions": list(issue.suggestions),
        "device": issue.device,
    }


def row_to_dict(row) -> dict[str, Any]:
    if isinstance(row, FileResult):
        return {
            "file_path": row.file_path,
            "severity": row.severity.value if row.severity else None,
            "error_count": row.error_count,
            "warning_count": row.warning_count,
            "issues": [issue_to_dict(i) for i in row.issues],
        }
    return issue_to_dict(row)


def load_snapshot_or_fail(base: str, config: InsightConfig) -> AuditSnapshot:
    if not is_url(base) and not Path(base).is_dir():
        raise click.ClickException(f"Not a directory or http(s) URL: {base}")
    with console.status(f"[bold blue]Loading reports from {base}...[/bold blue]"):
        return audit_reports(base, config=config)


def print_warnings(snapshot: AuditSnapshot) -> None:
    for warning in snapshot.warnings:
        console.print(f"  [yellow]⚠[/yellow] {warning.artifact}: {escape(warning.message)}")


def print_summary(snapshot: AuditSnapshot) -> None:
    """Print category scores to console."""
    metrics = snapshot.metrics

    # Header
    console.print()
    header = f"[bold]{snapshot.location}[/bold]\n[dim]Loaded in {snapshot.load_time_ms}ms[/dim]"
    if snapshot.meta and snapshot.meta.project_type:
        header += f"\n[dim]Project type: {snapshot.meta.project_type}[/dim]"
    console.print(Panel(header, title="📊 Audit Insight", border_style="blue"))

    # Overall score
    console.print()
    console.print("  Overall Score: ", end="")
    console.print(print_score_bar(metrics.overall_score, width=25))
    console.print()

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Score")
    table.add_column("Source")
    table.add_column("Issues", justify="right")
    table.add_column("Severity")

    for report in metrics.reports.values():
        counts = [
            f"[{severity_style(s)}]{report.by_severity.get(s, 0)} {s.value}[/]"
            for s in Severity
            if report.by_severity.get(s, 0)
        ]
        table.add_row(
            report.label,
            print_score_bar(report.score, width=15),
            source_badge(report),
            str(report.total_issues),
            ", ".join(counts) if counts else "[green]OK[/green]",
        )

    console.print(table)

    if snapshot.warnings:
        console.print("[bold]Warnings:[/bold]\n")
        print_warnings(snapshot)
        console.print()

    # Footer
    console.print("[dim]─" * 50 + "[/dim]")
    console.print(f"[dim]audit-insight v{__version__}[/dim]")
    console.print()


def print_view(category: Category, view: View) -> None:
    """Print one page of a category's rows."""
    if not view.total_items:
        message = f"No results for '{view.search}'" if view.search else "No issues found"
        console.print(f"\n[green]{message}[/green]\n")
        return

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    if category.is_lint:
        table.add_column("File", style="cyan")
        table.add_column("Severity")
        table.add_column("Errors", justify="right")
        table.add_column("Warnings", justify="right")
        for row in view.rows:
            style = severity_style(row.severity)
            table.add_row(
                escape(row.file_path),
                f"[{style}]{row.severity.value if row.severity else '-'}[/]",
                str(row.error_count),
                str(row.warning_count),
            )
    else:
        table.add_column("Severity")
        table.add_column("Message")
        table.add_column("Location", style="cyan")
        table.add_column("Rule", style="dim")
        for row in view.rows:
            style = severity_style(row.normalized_severity)
            location = row.file or ""
            if row.line is not None:
                location = f"{location}:{row.line}"
            table.add_row(
                f"[{style}]{severity_icon(row.normalized_severity)} {row.normalized_severity.value}[/]",
                escape(row.message),
                escape(location),
                escape(row.rule_id or ""),
            )

    console.print(table)
    console.print(
        f"[dim]Showing {view.first_item}-{view.last_item} of {view.total_items}"
        f" • page {view.page}/{view.total_pages}[/dim]\n"
    )


@click.group(invoke_without_command=True)
@click.option("--log-level", default=None, help="Log level (default: warning)")
@click.pass_context
@click.version_option(version=__version__)
def cli(ctx, log_level: Optional[str]):
    """Audit Insight - browse and score front-end audit reports.

    \b
    Quick start:
        audit-insight ./reports
        audit-insight issues ./reports security --sort critical

    \b
    Commands:
        summary    Category scores and issue counts
        issues     Search, sort and page through a category
        pagespeed  Per-URL page-speed scores and web vitals
        excluded   Rules hidden by the exclusion config
        report     Write a static HTML dashboard
    """
    config = InsightConfig.from_env()
    if log_level:
        config = replace(config, log_level=log_level)
    setup_logging(config.log_level)
    ctx.obj = config
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("base", required=False)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def summary(config: InsightConfig, base: Optional[str], json_output: bool):
    """Show category scores for the reports under BASE.

    \b
    Examples:
        audit-insight summary ./reports
        audit-insight summary https://ci.example.com/reports --json
    """
    snapshot = load_snapshot_or_fail(base or config.base, config)

    if json_output:
        output = {
            "location": snapshot.location,
            "overall_score": snapshot.metrics.overall_score,
            "total_issues": snapshot.metrics.total_issues,
            "by_severity": {s.value: n for s, n in snapshot.metrics.by_severity.items()},
            "load_time_ms": snapshot.load_time_ms,
            "categories": [report_to_dict(r) for r in snapshot.metrics.reports.values()],
            "warnings": [
                {
                    "category": w.category.value if w.category else None,
                    "artifact": w.artifact,
                    "message": w.message,
                }
                for w in snapshot.warnings
            ],
        }
        click.echo(json.dumps(output, indent=2))
    else:
        print_summary(snapshot)


@cli.command()
@click.argument("base")
@click.argument("category")
@click.option("-s", "--search", default="", help="Filter by file path, message or rule")
@click.option("--sort", type=click.Choice([s.value for s in Severity] + ["none"]),
              default="none", help="Pin a severity level to the top")
@click.option("-p", "--page", default=1, help="Page number")
@click.option("-n", "--page-size", type=int, default=None,
              help=f"Rows per page ({', '.join(str(s) for s in PAGE_SIZES)})")
@click.option("--legacy-sort", is_flag=True,
              help="Leave rows outside the pinned level in original order")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def issues(config: InsightConfig, base: str, category: str, search: str, sort: str,
           page: int, page_size: Optional[int], legacy_sort: bool, json_output: bool):
    """Browse one category's issues.

    \b
    Examples:
        audit-insight issues ./reports lint-js --search src/app
        audit-insight issues ./reports security --sort critical --page 2
    """
    try:
        selected = resolve_category(category)
        snapshot = load_snapshot_or_fail(base, config)
        if legacy_sort:
            config = replace(config, legacy_pin_sort=True)
        engine = QueryEngine.from_config(snapshot.reports, config)
        engine.open(selected)
        if page_size is not None:
            engine.set_page_size(selected, page_size)
        engine.set_search(selected, search)
        engine.set_sort(selected, sort)
        view = engine.set_page(selected, page)
    except InsightError as e:
        raise click.ClickException(str(e)) from e

    if json_output:
        output = {
            "category": selected.value,
            "search": view.search,
            "sort": view.sort.value if view.sort else None,
            "page": view.page,
            "page_size": view.page_size,
            "total_items": view.total_items,
            "total_pages": view.total_pages,
            "rows": [row_to_dict(r) for r in view.rows],
        }
        click.echo(json.dumps(output, indent=2))
        return

    report = snapshot.metrics.reports.get(selected)
    console.print()
    console.print(Panel(
        f"[bold]{selected.label}[/bold]\n[dim]{snapshot.location}[/dim]",
        title="🔍 Issues",
        border_style="blue",
    ))
    if report is not None and not report.available:
        console.print(f"\n[dim]No data for {selected.label}[/dim]\n")
        return
    for warning in snapshot.warnings_for(selected):
        console.print(f"  [yellow]⚠[/yellow] {escape(warning.message)}")
    print_view(selected, view)

    # Suggestions for the visible flat issues
    if not selected.is_lint:
        hints = [r for r in view.rows if r.suggestions]
        for issue in hints[:3]:
            console.print(f"  [bold]{escape(issue.message)}[/bold]")
            console.print(f"    [cyan]→ {escape(issue.suggestions[0])}[/cyan]")
        if hints:
            console.print()


@cli.command()
@click.argument("base")
@click.pass_obj
def pagespeed(config: InsightConfig, base: str):
    """Show per-URL page-speed scores and core web vitals.

    \b
    Examples:
        audit-insight pagespeed ./reports
    """
    snapshot = load_snapshot_or_fail(base, config)
    report = snapshot.report_for(Category.PAGE_SPEED)

    console.print()
    if report is None or not report.targets:
        console.print("[dim]No page-speed data[/dim]\n")
        return

    for target in report.targets:
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold", title=target.url)
        table.add_column("Device", style="cyan")
        table.add_column("Performance")
        table.add_column("Accessibility", justify="right")
        table.add_column("Best Practices", justify="right")
        table.add_column("SEO", justify="right")
        table.add_column("Issues", justify="right")

        for device in target.devices:
            table.add_row(
                device.device,
                print_score_bar(round(device.performance) if device.performance is not None else None, width=10),
                score_cell(device.accessibility),
                score_cell(device.best_practices),
                score_cell(device.seo),
                str(len(device.issues)),
            )
        console.print(table)

        for device in target.devices:
            if not device.vitals:
                continue
            console.print(f"  [bold]{device.device} web vitals[/bold]")
            for vital in device.vitals:
                style = {"good": "green", "needs-improvement": "yellow", "poor": "red"}.get(vital.rating, "white")
                value = "n/a" if vital.value is None else f"{vital.value:g}{vital.unit or ''}"
                console.print(f"    [{style}]•[/] {vital.name}: {value}")
            console.print()


@cli.command()
@click.argument("base")
@click.argument("category", required=False)
@click.option("-s", "--search", default="", help="Filter rules by id or description")
@click.pass_obj
def excluded(config: InsightConfig, base: str, category: Optional[str], search: str):
    """List rules hidden by the exclusion config.

    \b
    Examples:
        audit-insight excluded ./reports
        audit-insight excluded ./reports lint-js --search react
    """
    try:
        categories = [resolve_category(category)] if category else [Category.LINT_JS, Category.LINT_STYLE]
    except InsightError as e:
        raise click.ClickException(str(e)) from e
    snapshot = load_snapshot_or_fail(base, config)

    console.print()
    if not snapshot.exclusions.present:
        console.print(f"[dim]No exclusion config ({config.exclude_config}); nothing is hidden[/dim]\n")
        return

    for selected in categories:
        groups = snapshot.exclusions.describe_excluded(selected, search)
        console.print(f"[bold]{selected.label}[/bold]")
        if not groups:
            console.print("  [dim]No excluded rules[/dim]\n")
            continue
        for group, rules in groups.items():
            console.print(f"  [cyan]{group}[/cyan]")
            for rule in rules:
                badge = "[magenta]custom[/magenta]" if rule.custom else "[dim]default[/dim]"
                line = f"    • {rule.rule} {badge}"
                if rule.description:
                    line += f" [dim]{rule.description}[/dim]"
                console.print(line)
        console.print()


@cli.command()
@click.argument("base")
@click.option("-o", "--output", type=click.Path(), default="audit-insight.html",
              help="Output file (default: audit-insight.html)")
@click.pass_obj
def report(config: InsightConfig, base: str, output: str):
    """Write a static HTML dashboard.

    \b
    Examples:
        audit-insight report ./reports
        audit-insight report ./reports -o dashboard.html
    """
    from .generators import render_dashboard

    snapshot = load_snapshot_or_fail(base, config)
    try:
        engine = QueryEngine.from_config(snapshot.reports, config)
    except InsightError as e:
        raise click.ClickException(str(e)) from e
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_dashboard(snapshot, engine), encoding="utf-8")
    console.print(f"\n[green]✓[/green] Generated [cyan]{output_path}[/cyan]\n")


# Convenience: allow `audit-insight BASE` as shortcut for `audit-insight summary BASE`
def main():
    """Entry point that handles both `audit-insight BASE` and `audit-insight summary BASE`."""
    args = sys.argv[1:]

    # If first arg is not a command or option, treat it as the base location
    if args and not args[0].startswith('-') and args[0] not in COMMANDS:
        sys.argv.insert(1, 'summary')

    cli()


if __name__ == "__main__":
    main()
