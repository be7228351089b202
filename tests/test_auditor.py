"""End-to-end tests for the load, normalize and score pipeline."""

import pytest

from audit_insight import auditor as auditor_module
from audit_insight.auditor import audit_reports, load_snapshot
from audit_insight.config import InsightConfig
from audit_insight.models import Category, ScoreSource, Severity

from conftest import ESLINT_REPORT, SECURITY_REPORT, write_artifacts


class TestPipeline:
    """Tests for audit_reports over a report directory."""

    def test_full_directory(self, reports_dir):
        """Given a directory with several artifacts, should score each category."""
        # When
        snapshot = audit_reports(str(reports_dir))

        # Then
        metrics = snapshot.metrics
        assert metrics.reports[Category.LINT_JS].total_issues == 2
        assert metrics.reports[Category.SECURITY].by_severity[Severity.CRITICAL] == 1
        assert metrics.reports[Category.PAGE_SPEED].score == 75
        assert metrics.reports[Category.ACCESSIBILITY].score_source is ScoreSource.DEFAULT
        assert not metrics.reports[Category.DEPENDENCY].available
        assert metrics.overall_score is not None
        assert snapshot.warnings == []

    def test_malformed_artifact_isolated(self, tmp_path):
        """Given one corrupt and one scalar artifact, other categories should still score."""
        write_artifacts(tmp_path, {
            "eslint-report.json": ESLINT_REPORT,
            "security-audit-report.json": "{broken",
            "performance-audit-report.json": "42",
        })

        snapshot = audit_reports(str(tmp_path))

        assert snapshot.metrics.reports[Category.LINT_JS].score_source is ScoreSource.COMPUTED
        for category in (Category.SECURITY, Category.PERFORMANCE):
            report = snapshot.metrics.reports[category]
            assert report.score == 100
            assert report.score_source is ScoreSource.DEFAULT
            assert snapshot.warnings_for(category)

    def test_non_finite_numbers_do_not_sink_the_run(self, tmp_path):
        """Given Infinity and NaN in a lint artifact, should keep the message and every other category."""
        # Given
        write_artifacts(tmp_path, {
            "eslint-report.json": (
                '[{"filePath": "a.js", "messages": ['
                '{"ruleId": "no-undef", "severity": NaN, "message": "odd", "line": Infinity}]}]'
            ),
            "security-audit-report.json": SECURITY_REPORT,
        })

        # When
        snapshot = audit_reports(str(tmp_path))

        # Then
        [issue] = snapshot.reports[Category.LINT_JS].issues
        assert issue.line is None
        assert issue.normalized_severity is Severity.MEDIUM
        assert snapshot.metrics.reports[Category.SECURITY].score_source is ScoreSource.COMPUTED
        assert snapshot.warnings == []

    def test_normalizer_failure_isolated(self, tmp_path, monkeypatch):
        """Given a normalizer that fails unexpectedly, should warn for that category only."""
        real_normalize = auditor_module.normalize_artifact

        def failing_normalize(category, data, excluded):
            if category is Category.LINT_JS:
                raise OverflowError("cannot convert float infinity to integer")
            return real_normalize(category, data, excluded)

        monkeypatch.setattr(auditor_module, "normalize_artifact", failing_normalize)
        write_artifacts(tmp_path, {
            "eslint-report.json": ESLINT_REPORT,
            "security-audit-report.json": SECURITY_REPORT,
        })

        snapshot = audit_reports(str(tmp_path))

        assert Category.LINT_JS not in snapshot.reports
        assert snapshot.metrics.reports[Category.LINT_JS].score_source is ScoreSource.DEFAULT
        [warning] = snapshot.warnings_for(Category.LINT_JS)
        assert "could not normalize" in warning.message
        assert snapshot.metrics.reports[Category.SECURITY].score_source is ScoreSource.COMPUTED

    def test_summary_overrides_local(self, tmp_path):
        """Given a comprehensive summary, its security count should replace the local one."""
        write_artifacts(tmp_path, {
            "security-audit-report.json": SECURITY_REPORT,
            "comprehensive-audit-report.json": {
                "categories": {"security": {"totalIssues": 5, "highSeverity": 2, "mediumSeverity": 3}},
            },
        })

        snapshot = audit_reports(str(tmp_path))

        security = snapshot.metrics.reports[Category.SECURITY]
        assert security.total_issues == 5
        assert security.score_source is ScoreSource.PRECOMPUTED_SUMMARY
        assert len(snapshot.reports[Category.SECURITY].issues) == 2

    def test_exclusions_applied_before_scoring(self, tmp_path):
        """Given an exclusion config, excluded rules should not count toward the score."""
        write_artifacts(tmp_path, {
            "eslint-report.json": ESLINT_REPORT,
            "ui-code-insight.config.json": {"excludeRules": {"eslint": {"enabled": True}}},
        })

        snapshot = audit_reports(str(tmp_path))

        lint = snapshot.metrics.reports[Category.LINT_JS]
        assert lint.total_issues == 1
        assert lint.score == 78
        assert snapshot.exclusions.present

    def test_project_meta(self, tmp_path):
        """Given a lint wrapper with project metadata, should expose it on the snapshot."""
        write_artifacts(tmp_path, {
            "eslint-report.json": {"projectType": "vue", "results": ESLINT_REPORT},
        })
        snapshot = audit_reports(str(tmp_path))
        assert snapshot.meta.project_type == "vue"

    @pytest.mark.asyncio
    async def test_load_snapshot_uses_config_base(self, reports_dir):
        """Given only a config, should load from its base location."""
        snapshot = await load_snapshot(InsightConfig(base=str(reports_dir)))
        assert snapshot.location == str(reports_dir)
        assert Category.LINT_STYLE in snapshot.reports
