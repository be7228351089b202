"""Severity classification.

Producers disagree on what "error" means: the JS linter uses 0/1/2, the
style linter "error"/"warning", the audit tools free-form level strings.
``classify`` maps all of them onto one critical/high/medium/low ordering
using the rule identifier where the raw level alone is not enough.
"""

import math
from typing import Optional

from .models import Category, RawSeverity, Severity, Shape


# JS rules whose errors point at broken or unsafe code
JS_CRITICAL_RULES = {
    "no-undef",
    "no-eval",
    "no-implied-eval",
    "no-new-func",
    "no-script-url",
    "no-debugger",
    "no-console",
    "no-alert",
    "no-unreachable",
    "no-unsafe-finally",
    "no-unsafe-negation",
    "no-dupe-keys",
    "no-dupe-args",
    "no-dupe-class-members",
    "no-duplicate-case",
    "no-func-assign",
    "no-const-assign",
    "no-class-assign",
    "no-import-assign",
    "no-self-assign",
    "no-prototype-builtins",
    "jsx-no-undef",
    "jsx-no-duplicate-props",
    "no-danger",
    "no-danger-with-children",
}

JS_COSMETIC_RULES = {
    "indent",
    "quotes",
    "semi",
    "comma-dangle",
    "eol-last",
    "no-trailing-spaces",
    "no-multiple-empty-lines",
    "no-multi-spaces",
    "no-mixed-spaces-and-tabs",
    "no-tabs",
    "max-len",
    "linebreak-style",
    "brace-style",
    "padded-blocks",
    "quote-props",
    "jsx-quotes",
}

# Fragments that mark a JS rule as layout-only
JS_COSMETIC_MARKERS = ("spacing", "space-", "-indent", "newline", "linebreak", "empty-line")

STYLE_CRITICAL_RULES = {
    "declaration-block-no-duplicate-properties",
    "declaration-block-no-shorthand-property-overrides",
    "font-family-no-duplicate-names",
    "no-duplicate-selectors",
    "no-duplicate-at-import-rules",
    "color-no-invalid-hex",
    "function-calc-no-unspaced-operator",
    "function-linear-gradient-no-nonstandard-direction",
    "string-no-newline",
    "unit-no-unknown",
    "property-no-unknown",
    "keyframe-declaration-no-important",
}

# Fragments that mark a style rule as structural
STYLE_CRITICAL_MARKERS = ("no-duplicate", "no-invalid", "no-unknown")

STYLE_COSMETIC_RULES = {
    "indentation",
    "string-quotes",
    "color-hex-case",
    "color-hex-length",
    "color-named",
    "font-family-name-quotes",
    "font-weight-notation",
    "number-leading-zero",
    "number-no-trailing-zeros",
    "length-zero-no-unit",
    "function-url-quotes",
    "max-line-length",
    "no-eol-whitespace",
    "no-missing-end-of-source-newline",
    "declaration-block-trailing-semicolon",
}

STYLE_COSMETIC_MARKERS = ("-case", "space-", "-space", "newline", "empty-line", "quotes")


def bare_rule(rule_id: Optional[str]) -> str:
    """Strip a plugin prefix such as ``react/`` or ``@typescript-eslint/``."""
    if not rule_id:
        return ""
    return rule_id.rsplit("/", 1)[-1].strip().lower()


def _has_marker(rule: str, markers: tuple[str, ...]) -> bool:
    return any(m in rule for m in markers)


def is_js_critical(rule_id: Optional[str]) -> bool:
    return bare_rule(rule_id) in JS_CRITICAL_RULES


def is_js_cosmetic(rule_id: Optional[str]) -> bool:
    rule = bare_rule(rule_id)
    return rule in JS_COSMETIC_RULES or _has_marker(rule, JS_COSMETIC_MARKERS)


def is_style_critical(rule_id: Optional[str]) -> bool:
    rule = bare_rule(rule_id)
    return rule in STYLE_CRITICAL_RULES or _has_marker(rule, STYLE_CRITICAL_MARKERS)


def is_style_cosmetic(rule_id: Optional[str]) -> bool:
    rule = bare_rule(rule_id)
    return rule in STYLE_COSMETIC_RULES or _has_marker(rule, STYLE_COSMETIC_MARKERS)


def lint_level(raw_severity: RawSeverity) -> Optional[str]:
    """Reduce a lint producer's level to "error", "warning", "off" or None."""
    if isinstance(raw_severity, bool):
        return None
    if isinstance(raw_severity, float) and not math.isfinite(raw_severity):
        return None
    if isinstance(raw_severity, (int, float)):
        return {2: "error", 1: "warning", 0: "off"}.get(int(raw_severity))
    if isinstance(raw_severity, str):
        value = raw_severity.strip().lower()
        if value.isdigit():
            return {"2": "error", "1": "warning", "0": "off"}.get(value.lstrip("0") or "0")
        if value in ("error", "warning", "off"):
            return value
        if value == "warn":
            return "warning"
    return None


def preliminary_severity(category: Category, raw_severity: RawSeverity) -> Severity:
    """First-pass severity attached by the normalizer before classification."""
    if category.shape is Shape.LINT:
        level = lint_level(raw_severity)
        if level == "error":
            return Severity.HIGH
        if level == "off":
            return Severity.LOW
        return Severity.MEDIUM
    return Severity.parse(raw_severity) or Severity.MEDIUM


def classify_lint(
    raw_severity: RawSeverity,
    rule_id: Optional[str],
    is_critical,
    is_cosmetic,
) -> Severity:
    level = lint_level(raw_severity)
    if level == "error":
        return Severity.CRITICAL if is_critical(rule_id) else Severity.HIGH
    if level == "warning":
        return Severity.LOW if is_cosmetic(rule_id) else Severity.MEDIUM
    if level == "off":
        return Severity.LOW
    return Severity.MEDIUM


def classify_severity(
    category: Category, rule_id: Optional[str], raw_severity: RawSeverity
) -> Severity:
    """Classify a (category, rule, raw level) triple. Pure and deterministic."""
    if category is Category.LINT_JS:
        return classify_lint(raw_severity, rule_id, is_js_critical, is_js_cosmetic)
    if category is Category.LINT_STYLE:
        return classify_lint(raw_severity, rule_id, is_style_critical, is_style_cosmetic)
    return Severity.parse(raw_severity) or Severity.MEDIUM


def classify(issue) -> Severity:
    """Classify a normalized issue."""
    return classify_severity(issue.source_category, issue.rule_id, issue.raw_severity)
