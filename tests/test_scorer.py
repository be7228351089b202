"""Tests for the composite scorer."""

import time

import pytest

from audit_insight.models import (
    Category,
    DeviceResult,
    Issue,
    NormalizedReport,
    PageSpeedTarget,
    ScoreSource,
    Severity,
)
from audit_insight.normalizers import normalize_artifact
from audit_insight.scorer import (
    build_category_report,
    build_metrics,
    deduct,
    deduct_counts,
    parse_summary,
    score,
    score_band,
    score_counts,
)

from conftest import SECURITY_REPORT


def make_issue(severity: Severity, category: Category = Category.SECURITY) -> Issue:
    return Issue(
        source_category=category,
        message=f"{severity.value} finding",
        raw_severity=severity.value,
        normalized_severity=severity,
    )


def flat_report(category: Category, *severities: Severity) -> NormalizedReport:
    return NormalizedReport(category=category, issues=[make_issue(s, category) for s in severities])


class TestScore:
    """Tests for the deduction formula."""

    def test_no_issues_is_100(self):
        """Given zero issues, should score 100."""
        assert score(Category.SECURITY, []) == 100

    def test_weighted_deductions(self):
        """Given one issue per level, should deduct the level weight plus the flat amount."""
        assert score(Category.SECURITY, [make_issue(Severity.CRITICAL)]) == 78
        assert score(Category.SECURITY, [make_issue(Severity.HIGH)]) == 88
        assert score(Category.SECURITY, [make_issue(Severity.MEDIUM)]) == 93
        assert score(Category.SECURITY, [make_issue(Severity.LOW)]) == 97

    def test_performance_flat_deduction(self):
        """Given a performance issue, should use the larger flat deduction."""
        issue = make_issue(Severity.MEDIUM, Category.PERFORMANCE)
        assert score(Category.PERFORMANCE, [issue]) == 92

    def test_large_counts_clamp_to_zero(self):
        """Given far more issues than the score can absorb, should clamp at 0."""
        issues = [make_issue(Severity.CRITICAL)] * 500
        assert score(Category.SECURITY, issues) == 0

    @pytest.mark.parametrize("count", [0, 1, 4, 9, 50, 1000])
    def test_always_in_range(self, count):
        """Given any number of issues, should stay within 0..100."""
        result = score(Category.ACCESSIBILITY, [make_issue(Severity.LOW, Category.ACCESSIBILITY)] * count)
        assert 0 <= result <= 100

    def test_unleveled_issues_take_flat_deduction(self):
        """Given counts without a level, should deduct only the flat amount."""
        assert deduct([None, None]) == 96
        assert score_counts(Category.SECURITY, {Severity.HIGH: 1}, total=3) == 100 - 12 - 2 - 2

    @pytest.mark.parametrize("counts", [
        {Severity.CRITICAL: 2, Severity.LOW: 3},
        {Severity.HIGH: 7, Severity.MEDIUM: 4, None: 2},
        {Severity.LOW: 0},
    ])
    def test_bucketed_deduction_matches_per_issue(self, counts):
        """Given per-level counts, should equal deducting the same issues one by one."""
        severities = [s for s, n in counts.items() for _ in range(n)]
        assert deduct_counts(counts.items()) == deduct(severities)

    def test_huge_summary_count_clamps_quickly(self):
        """Given an artificially large summary count, should clamp to 0 without walking every issue."""
        # Given
        summary = {"categories": {"security": {"totalIssues": 30_000_000, "highSeverity": 10**12}}}

        # When
        started = time.perf_counter()
        metrics = build_metrics({}, summary)
        elapsed = time.perf_counter() - started

        # Then
        report = metrics.reports[Category.SECURITY]
        assert report.score == 0
        assert report.score_source is ScoreSource.PRECOMPUTED_SUMMARY
        assert elapsed < 1.0


class TestScenarioA:
    """JS-lint artifact with one critical error and one clean file."""

    def test_score_below_100_with_one_issue(self):
        """Given one critical-pattern error, should score below 100 with one issue."""
        # Given
        data = [
            {"filePath": "a.js", "messages": [{"ruleId": "no-eval", "severity": 2, "message": "eval"}]},
            {"filePath": "b.js", "messages": []},
        ]
        normalized = normalize_artifact(Category.LINT_JS, data)

        # When
        report = build_category_report(Category.LINT_JS, normalized)

        # Then
        assert report.total_issues == 1
        assert report.score < 100
        assert report.score_source is ScoreSource.COMPUTED
        assert report.by_severity[Severity.CRITICAL] == 1


class TestSummaryPrecedence:
    """Tests for the comprehensive-summary override."""

    def test_scenario_c_summary_counts_win(self):
        """Given a summary count that disagrees with the local artifact, should use the summary."""
        # Given
        normalized = normalize_artifact(Category.SECURITY, SECURITY_REPORT)
        summary = parse_summary({"categories": {"security": {"totalIssues": 5, "highSeverity": 5}}})

        # When
        report = build_category_report(Category.SECURITY, normalized, summary[Category.SECURITY])

        # Then
        assert len(normalized.issues) == 2
        assert report.total_issues == 5
        assert report.by_severity[Severity.HIGH] == 5
        assert report.score_source is ScoreSource.PRECOMPUTED_SUMMARY
        assert report.score == 100 - 5 * 12

    def test_summary_score_wins_over_local(self):
        """Given a dashboard score, should use it as-is instead of the local formula."""
        normalized = flat_report(Category.SECURITY, Severity.CRITICAL)
        summary = parse_summary({"dashboard": {"securityScore": 73}})

        report = build_category_report(Category.SECURITY, normalized, summary[Category.SECURITY])

        assert report.score == 73
        assert report.score_source is ScoreSource.PRECOMPUTED_SUMMARY
        assert report.total_issues == 1

    def test_category_score_field(self):
        """Given a score on the summary category, should take it."""
        summary = parse_summary({"categories": {"accessibility": {"totalIssues": 3, "score": 64}}})
        report = build_category_report(Category.ACCESSIBILITY, None, summary[Category.ACCESSIBILITY])
        assert report.score == 64
        assert report.available

    def test_summary_keys_resolve(self):
        """Given upstream summary keys, should map them onto categories."""
        summary = parse_summary({
            "categories": {
                "eslint": {"totalIssues": 1},
                "lighthouse": {"totalIssues": 2},
                "mystery": {"totalIssues": 4},
            },
            "dashboard": {"runtimePerformanceScore": 81},
        })
        assert summary[Category.LINT_JS].total_issues == 1
        assert summary[Category.PAGE_SPEED].score == 81
        assert summary[Category.OTHER].total_issues == 4

    def test_junk_summary_ignored(self):
        """Given a summary of the wrong shape, should contribute nothing."""
        assert parse_summary(["not", "a", "summary"]) == {}
        assert parse_summary({"categories": {"security": "oops"}}) == {}

    def test_non_finite_summary_numbers_ignored(self):
        """Given NaN and infinite figures, should treat them as missing."""
        summary = parse_summary({
            "categories": {"security": {"totalIssues": float("inf"), "score": float("nan")}},
            "dashboard": {"accessibilityScore": float("-inf")},
        })
        assert summary == {}


class TestDefaults:
    """Tests for categories without evidence."""

    def test_absent_category_defaults_to_100(self):
        """Given no artifact and no summary, should score 100 marked default."""
        report = build_category_report(Category.SECURITY, None)
        assert report.score == 100
        assert report.score_source is ScoreSource.DEFAULT
        assert not report.available

    def test_loaded_clean_artifact_is_computed(self):
        """Given a loaded artifact with zero issues, should be a computed 100."""
        report = build_category_report(Category.SECURITY, NormalizedReport(category=Category.SECURITY))
        assert report.score == 100
        assert report.score_source is ScoreSource.COMPUTED


class TestPageSpeed:
    """Tests for the page-speed pass-through."""

    def test_mean_of_performance_scores(self):
        """Given desktop and mobile performance, should pass through their mean."""
        normalized = NormalizedReport(
            category=Category.PAGE_SPEED,
            targets=[PageSpeedTarget(
                url="https://a.test",
                desktop=DeviceResult(device="desktop", performance=90),
                mobile=DeviceResult(device="mobile", performance=50),
            )],
        )
        report = build_category_report(Category.PAGE_SPEED, normalized)
        assert report.score == 70
        assert report.score_source is ScoreSource.COMPUTED

    def test_no_targets_is_default(self):
        """Given a page-speed artifact with no targets, should keep the default score."""
        report = build_category_report(Category.PAGE_SPEED, NormalizedReport(category=Category.PAGE_SPEED))
        assert report.score == 100
        assert report.score_source is ScoreSource.DEFAULT

    def test_targets_without_scores(self):
        """Given targets that carry no performance score, should leave the score unknown."""
        normalized = NormalizedReport(
            category=Category.PAGE_SPEED,
            targets=[PageSpeedTarget(url="https://a.test", desktop=DeviceResult(device="desktop"))],
        )
        assert build_category_report(Category.PAGE_SPEED, normalized).score is None

    def test_summary_performance_passes_through(self):
        """Given a lighthouse summary block, should take its performance score, not the deduction formula."""
        # Given
        normalized = NormalizedReport(
            category=Category.PAGE_SPEED,
            targets=[PageSpeedTarget(url="https://a.test", desktop=DeviceResult(device="desktop", performance=40))],
        )
        summary = parse_summary({"categories": {"lighthouse": {
            "totalIssues": 3, "performance": 40, "accessibility": 90, "bestPractices": 80, "seo": 70,
        }}})

        # When
        report = build_category_report(Category.PAGE_SPEED, normalized, summary[Category.PAGE_SPEED])

        # Then
        assert report.score == 40
        assert report.score_source is ScoreSource.PRECOMPUTED_SUMMARY
        assert report.total_issues == 3

    def test_summary_fractional_performance(self):
        """Given a lighthouse summary on the 0-1 scale, should scale a perfect 1 to 100."""
        summary = parse_summary({"categories": {"lighthouse": {"performance": 1, "accessibility": 0.9}}})
        assert summary[Category.PAGE_SPEED].score == 100

    def test_summary_counts_never_score_page_speed(self):
        """Given summary counts without a score, should keep the local pass-through."""
        normalized = NormalizedReport(
            category=Category.PAGE_SPEED,
            targets=[PageSpeedTarget(
                url="https://a.test",
                desktop=DeviceResult(device="desktop", performance=90),
                mobile=DeviceResult(device="mobile", performance=50),
            )],
        )
        summary = parse_summary({"categories": {"lighthouse": {"totalIssues": 12, "highSeverity": 12}}})

        report = build_category_report(Category.PAGE_SPEED, normalized, summary[Category.PAGE_SPEED])

        assert report.score == 70
        assert report.score_source is ScoreSource.COMPUTED
        assert report.total_issues == 12


class TestCompositeMetrics:
    """Tests for the whole-project snapshot."""

    def test_every_auditable_category_reported(self):
        """Given no data at all, should still report every category with defaults."""
        metrics = build_metrics({})
        assert set(metrics.reports) == set(Category.auditable())
        assert metrics.overall_score is None
        assert metrics.total_issues == 0

    def test_overall_uses_only_evidence(self):
        """Given one scored category, overall should equal that category's score."""
        metrics = build_metrics({Category.SECURITY: flat_report(Category.SECURITY, Severity.HIGH)})
        assert metrics.overall_score == 88

    def test_overall_weighting(self):
        """Given security and both lint scores, should weight security and average lint."""
        metrics = build_metrics({
            Category.SECURITY: flat_report(Category.SECURITY),
            Category.LINT_JS: flat_report(Category.LINT_JS, Severity.CRITICAL),
            Category.LINT_STYLE: flat_report(Category.LINT_STYLE, Severity.LOW),
        })
        code_quality = (78 + 97) / 2
        expected = (0.30 * 100 + 0.15 * code_quality) / 0.45
        assert metrics.overall_score == round(expected)

    def test_totals_by_severity(self):
        """Given issues across categories, should total them per level."""
        metrics = build_metrics({
            Category.SECURITY: flat_report(Category.SECURITY, Severity.HIGH, Severity.LOW),
            Category.PERFORMANCE: flat_report(Category.PERFORMANCE, Severity.HIGH),
        })
        assert metrics.total_issues == 3
        assert metrics.by_severity[Severity.HIGH] == 2
        assert metrics.score_for(Category.PERFORMANCE) == 100 - 10 - 3


@pytest.mark.parametrize("value,band", [(100, "good"), (90, "good"), (89, "average"), (50, "average"),
                                        (49, "poor"), (None, None)])
def test_score_band(value, band):
    assert score_band(value) == band
