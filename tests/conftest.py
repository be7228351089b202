"""Shared fixtures: sample artifacts as the upstream scanners write them."""

import json
from pathlib import Path

import pytest


ESLINT_REPORT = [
    {
        "filePath": "/app/src/app.js",
        "errorCount": 1,
        "warningCount": 1,
        "messages": [
            {"ruleId": "no-undef", "severity": 2, "message": "'x' is not defined.", "line": 3, "column": 5},
            {"ruleId": "semi", "severity": 1, "message": "Missing semicolon.", "line": 7, "column": 12,
             "fix": {"range": [80, 80], "text": ";"}},
        ],
    },
    {"filePath": "/app/src/clean.js", "errorCount": 0, "warningCount": 0, "messages": []},
]

STYLELINT_REPORT = [
    {
        "source": "/app/styles/main.css",
        "warnings": [
            {"rule": "color-no-invalid-hex", "severity": "error", "text": "Unexpected invalid hex color", "line": 4},
            {"rule": "indentation", "severity": "warning", "text": "Expected indentation of 2 spaces", "line": 9},
        ],
    },
]

SECURITY_REPORT = {
    "issues": [
        {"type": "xss", "severity": "high", "file": "src/render.js", "line": 10,
         "message": "Assignment to innerHTML", "recommendation": "Use textContent"},
        {"type": "hardcoded-secret", "severity": "critical", "file": "src/config.js",
         "message": "API key committed to source"},
    ],
    "totalIssues": 2,
}

PERFORMANCE_REPORT = {
    "issues": [
        {"type": "large-bundle", "severity": "medium", "file": "dist/main.js", "message": "Bundle exceeds 500kb"},
    ],
}

LIGHTHOUSE_REPORT = [
    {
        "url": "https://example.com",
        "desktop": {
            "performance": 92,
            "accessibility": 88,
            "bestPractices": 100,
            "seo": 90,
            "issues": [{"type": "render-blocking-resources", "severity": "medium",
                        "message": "Eliminate render-blocking resources"}],
            "coreWebVitals": {"lcp": {"value": 1800, "score": 0.95}, "cls": {"value": 0.02, "score": 1}},
        },
        "mobile": {"performance": 0.58, "accessibility": 0.85, "issues": []},
    },
]


def write_artifacts(directory: Path, artifacts: dict) -> Path:
    """Write each value as JSON (or raw text for str values) under ``directory``."""
    for name, content in artifacts.items():
        text = content if isinstance(content, str) else json.dumps(content)
        (directory / name).write_text(text, encoding="utf-8")
    return directory


@pytest.fixture
def reports_dir(tmp_path):
    """A report directory with lint, security, performance and page-speed artifacts."""
    return write_artifacts(tmp_path, {
        "eslint-report.json": ESLINT_REPORT,
        "stylelint-report.json": STYLELINT_REPORT,
        "security-audit-report.json": SECURITY_REPORT,
        "performance-audit-report.json": PERFORMANCE_REPORT,
        "lightHouseCombine-report.json": LIGHTHOUSE_REPORT,
    })
