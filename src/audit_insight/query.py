"""Search, severity sort and pagination over one category's rows.

Lint categories are browsed file by file (FileResult rows), every other
category issue by issue. Each category keeps its own ViewState, owned by
a QueryEngine, so interacting with one category never moves another.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence, Union

from .config import PAGE_SIZES, InsightConfig
from .exceptions import InvalidPageSizeError, UnknownCategoryError
from .models import (
    UNRANKED,
    Category,
    FileResult,
    Issue,
    NormalizedReport,
    Severity,
    ViewState,
)


logger = logging.getLogger(__name__)

Row = Union[Issue, FileResult]


def resolve_category(name: Union[str, Category]) -> Category:
    """Map a user-supplied name to a browsable category."""
    category = Category.from_key(name)
    if category is Category.OTHER:
        raise UnknownCategoryError(str(name))
    return category


def resolve_severity(value: Union[str, Severity, None]) -> Optional[Severity]:
    """Parse a sort selection; empty, "none" and "all" mean unsorted."""
    if value is None or isinstance(value, Severity):
        return value
    if value.strip().lower() in ("", "none", "all"):
        return None
    severity = Severity.parse(value)
    if severity is None:
        raise ValueError(f"Unknown severity: {value}")
    return severity


def row_severity(row: Row) -> Optional[Severity]:
    if isinstance(row, FileResult):
        return row.severity
    return row.normalized_severity


def row_rank(row: Row) -> int:
    severity = row_severity(row)
    return severity.rank if severity else UNRANKED


def rows_for_report(report: NormalizedReport) -> list[Row]:
    if report.category.is_lint:
        return list(report.files)
    return list(report.issues)


def filter_rows(rows: Iterable[Row], term: str) -> list[Row]:
    """Case-insensitive substring match; an empty term keeps everything."""
    return [row for row in rows if row.matches(term)]


def sort_rows(
    rows: Sequence[Row], level: Optional[Severity], legacy_pin: bool = False
) -> list[Row]:
    """Pin ``level`` to the front, then order the rest by severity rank.

    ``legacy_pin`` leaves the remainder in its original relative order.
    No level keeps the original order entirely.
    """
    if level is None:
        return list(rows)
    pinned = [r for r in rows if row_severity(r) is level]
    rest = [r for r in rows if row_severity(r) is not level]
    if not legacy_pin:
        rest.sort(key=row_rank)
    return pinned + rest


def count_pages(total_items: int, page_size: int) -> int:
    return math.ceil(total_items / page_size) if total_items else 0


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(page, total_pages))


@dataclass
class View:
    """The visible slice of a category plus paging details."""
    rows: list[Row]
    total_items: int
    total_pages: int
    page: int
    page_size: int
    sort: Optional[Severity] = None
    search: str = ""

    @property
    def first_item(self) -> int:
        """1-based index of the first visible row, 0 when nothing is visible."""
        if not self.rows:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def last_item(self) -> int:
        return self.first_item + len(self.rows) - 1 if self.rows else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def apply_view(rows: Sequence[Row], state: ViewState, legacy_pin: bool = False) -> View:
    """Filter, sort and slice ``rows`` according to ``state``.

    The state's page is clamped in place so it always names a valid page.
    """
    matched = sort_rows(filter_rows(rows, state.search_term), state.sort_by_severity, legacy_pin)
    total_pages = count_pages(len(matched), state.page_size)
    state.page = clamp_page(state.page, total_pages)
    start = (state.page - 1) * state.page_size
    return View(
        rows=matched[start:start + state.page_size],
        total_items=len(matched),
        total_pages=total_pages,
        page=state.page,
        page_size=state.page_size,
        sort=state.sort_by_severity,
        search=state.search_term,
    )


class QueryEngine:
    """Owns the per-category view states for one load cycle's rows."""

    def __init__(
        self,
        rows: Optional[Mapping[Category, Sequence[Row]]] = None,
        page_size: int = 10,
        page_sizes: tuple[int, ...] = PAGE_SIZES,
        legacy_pin_sort: bool = False,
    ):
        if page_size not in page_sizes:
            raise InvalidPageSizeError(page_size, page_sizes)
        self.page_size = page_size
        self.page_sizes = page_sizes
        self.legacy_pin_sort = legacy_pin_sort
        self.states: dict[Category, ViewState] = {}
        self._rows: dict[Category, tuple[Row, ...]] = {}
        self._set_rows(rows or {})

    @classmethod
    def from_reports(
        cls, reports: Mapping[Category, NormalizedReport], **kwargs
    ) -> "QueryEngine":
        return cls({c: rows_for_report(r) for c, r in reports.items()}, **kwargs)

    @classmethod
    def from_config(
        cls, reports: Mapping[Category, NormalizedReport], config: InsightConfig
    ) -> "QueryEngine":
        return cls.from_reports(
            reports,
            page_size=config.page_size,
            page_sizes=config.page_sizes,
            legacy_pin_sort=config.legacy_pin_sort,
        )

    def _set_rows(self, rows: Mapping[Category, Sequence[Row]]) -> None:
        self._rows = {resolve_category(c): tuple(r) for c, r in rows.items()}

    def rows_for(self, category: Union[str, Category]) -> tuple[Row, ...]:
        return self._rows.get(resolve_category(category), ())

    def state(self, category: Union[str, Category]) -> ViewState:
        category = resolve_category(category)
        if category not in self.states:
            self.states[category] = ViewState(page_size=self.page_size)
        return self.states[category]

    def view(self, category: Union[str, Category]) -> View:
        category = resolve_category(category)
        return apply_view(self.rows_for(category), self.state(category), self.legacy_pin_sort)

    def open(self, category: Union[str, Category]) -> View:
        """Start (or resume) browsing a category."""
        return self.view(category)

    def set_search(self, category: Union[str, Category], term: str) -> View:
        state = self.state(category)
        state.search_term = term or ""
        state.page = 1
        return self.view(category)

    def set_sort(self, category: Union[str, Category], level: Union[str, Severity, None]) -> View:
        self.state(category).sort_by_severity = resolve_severity(level)
        return self.view(category)

    def set_page(self, category: Union[str, Category], page: int) -> View:
        self.state(category).page = page
        return self.view(category)

    def set_page_size(self, category: Union[str, Category], page_size: int) -> View:
        if page_size not in self.page_sizes:
            raise InvalidPageSizeError(page_size, self.page_sizes)
        state = self.state(category)
        state.page_size = page_size
        state.page = 1
        return self.view(category)

    def reload(self, rows: Mapping[Category, Sequence[Row]]) -> None:
        """Swap in a new load cycle's rows, keeping every view valid."""
        self._set_rows(rows)
        for category in self.states:
            self.view(category)
        logger.debug("Reloaded %d categories", len(self._rows))


class SearchDebouncer:
    """Apply search edits after a quiet period, latest edit wins.

    Every submission bumps the category's sequence number and cancels the
    pending one. A run that wakes up under an older sequence number does
    nothing, so stale results can never overwrite newer ones.
    """

    def __init__(self, engine: QueryEngine, delay_ms: int = 300):
        self.engine = engine
        self.delay = delay_ms / 1000
        self.sequence: dict[Category, int] = {}
        self.latest: dict[Category, View] = {}
        self._pending: dict[Category, asyncio.Task] = {}

    @classmethod
    def from_config(cls, engine: QueryEngine, config: InsightConfig) -> "SearchDebouncer":
        return cls(engine, delay_ms=config.debounce_ms)

    def submit(self, category: Union[str, Category], term: str) -> asyncio.Task:
        category = resolve_category(category)
        seq = self.sequence.get(category, 0) + 1
        self.sequence[category] = seq

        pending = self._pending.get(category)
        if pending is not None and not pending.done():
            pending.cancel()

        task = asyncio.get_running_loop().create_task(self._run(category, term, seq))
        self._pending[category] = task
        return task

    async def _run(self, category: Category, term: str, seq: int) -> Optional[View]:
        await asyncio.sleep(self.delay)
        if seq != self.sequence.get(category):
            logger.debug("Dropping stale search %r for %s", term, category.value)
            return None
        view = self.engine.set_search(category, term)
        self.latest[category] = view
        return view

    async def flush(self) -> None:
        """Wait for every pending search to settle."""
        tasks = [t for t in self._pending.values() if not t.done()]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def cancel_all(self) -> None:
        for task in self._pending.values():
            if not task.done():
                task.cancel()
        self._pending.clear()
