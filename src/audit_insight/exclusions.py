"""Rule exclusion settings.

The exclusion-config artifact looks like::

    {"excludeRules": {"eslint": {"enabled": true,
                                 "overrideDefault": false,
                                 "additionalRules": ["no-console"]}}}

Excluded rule ids are removed from the normalized set before scoring.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .models import Category


logger = logging.getLogger(__name__)


# Formatting and style rules project architects commonly switch off
DEFAULT_JS_EXCLUDES = (
    "no-trailing-spaces",
    "eol-last",
    "comma-dangle",
    "quotes",
    "semi",
    "indent",
    "no-multiple-empty-lines",
    "object-curly-spacing",
    "array-bracket-spacing",
    "comma-spacing",
    "key-spacing",
    "space-before-blocks",
    "space-before-function-paren",
    "space-in-parens",
    "space-infix-ops",
    "spaced-comment",
    "arrow-spacing",
    "max-len",
    "linebreak-style",
    "no-mixed-spaces-and-tabs",
    "no-tabs",
    "no-multi-spaces",
    "prefer-const",
    "no-var",
    "prefer-arrow-callback",
    "prefer-destructuring",
    "prefer-template",
    "sort-imports",
    "sort-keys",
    "camelcase",
    "new-cap",
    "id-match",
    "no-underscore-dangle",
    "react/jsx-filename-extension",
    "react/prop-types",
    "react/react-in-jsx-scope",
    "react/jsx-props-no-spreading",
    "react/jsx-one-expression-per-line",
    "react/jsx-indent",
    "react/jsx-indent-props",
    "import/prefer-default-export",
    "import/order",
    "import/extensions",
    "import/no-unresolved",
    "@typescript-eslint/explicit-function-return-type",
    "@typescript-eslint/explicit-module-boundary-types",
    "@typescript-eslint/no-explicit-any",
    "@typescript-eslint/naming-convention",
)

DEFAULT_STYLE_EXCLUDES = (
    "indentation",
    "string-quotes",
    "color-hex-case",
    "color-hex-length",
    "color-named",
    "font-family-name-quotes",
    "font-weight-notation",
    "number-leading-zero",
    "number-no-trailing-zeros",
    "unit-case",
    "value-keyword-case",
    "function-comma-space-after",
    "function-parentheses-space-inside",
    "declaration-colon-space-after",
    "declaration-colon-space-before",
    "block-opening-brace-space-before",
    "selector-list-comma-newline-after",
    "declaration-block-semicolon-newline-after",
    "block-closing-brace-newline-after",
    "selector-max-class",
    "selector-max-compound-selectors",
    "selector-max-id",
    "selector-no-qualifying-type",
    "selector-class-pattern",
    "selector-id-pattern",
    "custom-property-pattern",
    "keyframes-name-pattern",
    "scss/at-rule-no-unknown",
    "scss/dollar-variable-pattern",
    "scss/at-import-partial-extension",
    "declaration-block-trailing-semicolon",
    "declaration-empty-line-before",
    "value-no-vendor-prefix",
    "property-no-vendor-prefix",
)

DEFAULT_EXCLUDES: dict[Category, tuple[str, ...]] = {
    Category.LINT_JS: DEFAULT_JS_EXCLUDES,
    Category.LINT_STYLE: DEFAULT_STYLE_EXCLUDES,
}

RULE_DESCRIPTIONS = {
    "no-console": "Disallows console statements",
    "prefer-const": "Requires const for variables that are never reassigned",
    "no-var": "Requires let or const instead of var",
    "quotes": "Enforces consistent quote style",
    "semi": "Requires or disallows semicolons",
    "indent": "Enforces consistent indentation",
    "comma-dangle": "Requires or disallows trailing commas",
    "react/prop-types": "Disallows missing props validation in React components",
    "react/jsx-filename-extension": "Restricts file extensions that may contain JSX",
    "@typescript-eslint/no-explicit-any": "Disallows usage of the any type",
    "import/order": "Enforces a convention in module import order",
    "indentation": "Specifies indentation",
    "string-quotes": "Specifies quote style for strings",
    "color-hex-case": "Specifies lowercase or uppercase for hex colors",
    "color-hex-length": "Specifies short or long notation for hex colors",
    "selector-class-pattern": "Specifies a pattern for class selectors",
    "declaration-block-trailing-semicolon": "Requires or disallows a trailing semicolon within declaration blocks",
    "declaration-colon-space-after": "Requires or disallows a space after the colon in declarations",
    "function-comma-space-after": "Requires or disallows a space after function comma",
}


@dataclass
class CategoryExclusion:
    """Exclusion settings for one category."""
    enabled: bool = True
    override_default: bool = False
    additional_rules: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "CategoryExclusion":
        if not isinstance(data, dict):
            return cls()
        additional = data.get("additionalRules") or []
        if not isinstance(additional, list):
            additional = []
        return cls(
            enabled=data.get("enabled") is not False,
            override_default=data.get("overrideDefault") is True,
            additional_rules=tuple(str(r) for r in additional if r),
        )

    def merged(self, defaults: tuple[str, ...]) -> list[str]:
        if not self.enabled:
            return []
        if self.override_default:
            return list(self.additional_rules)
        merged = list(defaults)
        merged.extend(r for r in self.additional_rules if r not in defaults)
        return merged


@dataclass
class ExcludedRule:
    """A rule shown in the excluded-rules listing."""
    rule: str
    group: str
    custom: bool
    description: str = ""


@dataclass
class ExclusionConfig:
    """Parsed exclusion-config artifact."""
    present: bool = False
    categories: dict[Category, CategoryExclusion] = field(default_factory=dict)

    @classmethod
    def from_artifact(cls, data: Optional[Any]) -> "ExclusionConfig":
        """Parse the artifact; None means no config and nothing excluded."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            logger.warning("Ignoring exclusion config with unexpected shape")
            return cls(present=True)
        rules = data.get("excludeRules") or {}
        config = cls(present=True)
        if not isinstance(rules, dict):
            return config
        for key, value in rules.items():
            category = Category.from_key(key)
            if category is Category.OTHER:
                logger.info("Exclusion config names unknown category %r", key)
                continue
            config.categories[category] = CategoryExclusion.from_dict(value)
        return config

    def rules_for(self, category: Category) -> list[str]:
        """Merged list of rule ids hidden for a category."""
        if not self.present:
            return []
        settings = self.categories.get(category, CategoryExclusion())
        return settings.merged(DEFAULT_EXCLUDES.get(category, ()))

    def excluded(self, category: Category) -> frozenset[str]:
        return frozenset(self.rules_for(category))

    def describe_excluded(self, category: Category, search: str = "") -> dict[str, list[ExcludedRule]]:
        """Excluded rules grouped for display, optionally filtered."""
        settings = self.categories.get(category, CategoryExclusion())
        defaults = DEFAULT_EXCLUDES.get(category, ())
        term = search.lower()
        groups: dict[str, list[ExcludedRule]] = {}
        for rule in self.rules_for(category):
            description = RULE_DESCRIPTIONS.get(rule, "")
            if term and term not in rule.lower() and term not in description.lower():
                continue
            custom = settings.override_default or rule not in defaults
            group = rule_group(rule, category)
            groups.setdefault(group, []).append(
                ExcludedRule(rule=rule, group=group, custom=custom, description=description)
            )
        return groups


def rule_group(rule: str, category: Category) -> str:
    """Display bucket for an excluded rule."""
    if category is Category.LINT_JS:
        if "react/" in rule:
            return "react specific"
        if "@typescript-eslint/" in rule:
            return "typescript specific"
        if "import/" in rule:
            return "import/export"
        if rule in ("quotes", "semi", "indent", "comma-dangle", "no-trailing-spaces", "eol-last"):
            return "formatting"
        if "spacing" in rule or "space" in rule:
            return "spacing and layout"
        if rule in ("no-console", "prefer-const", "no-var", "prefer-arrow-callback") or rule.startswith("prefer-"):
            return "style preferences"
        if rule in ("camelcase", "id-match", "new-cap", "no-underscore-dangle"):
            return "naming conventions"
        return "other"
    if category is Category.LINT_STYLE:
        if "indentation" in rule or "quotes" in rule or "case" in rule:
            return "formatting"
        if "space" in rule or "newline" in rule:
            return "spacing and layout"
        if "selector" in rule:
            return "selectors"
        if "declaration" in rule:
            return "declarations"
        if "function" in rule:
            return "functions"
        if "value" in rule:
            return "values"
    return "other"
