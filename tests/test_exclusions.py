"""Tests for rule exclusion settings."""

from audit_insight.exclusions import (
    DEFAULT_JS_EXCLUDES,
    CategoryExclusion,
    ExclusionConfig,
    rule_group,
)
from audit_insight.models import Category


class TestMerge:
    """Tests for merging defaults with project settings."""

    def test_absent_config_hides_nothing(self):
        """Given no exclusion-config artifact, should exclude no rules."""
        config = ExclusionConfig.from_artifact(None)
        assert not config.present
        assert config.excluded(Category.LINT_JS) == frozenset()

    def test_defaults_plus_additional(self):
        """Given additional rules, should add them to the defaults."""
        config = ExclusionConfig.from_artifact({
            "excludeRules": {"eslint": {"enabled": True, "additionalRules": ["no-alert"]}},
        })
        rules = config.rules_for(Category.LINT_JS)
        assert rules[:len(DEFAULT_JS_EXCLUDES)] == list(DEFAULT_JS_EXCLUDES)
        assert rules[-1] == "no-alert"

    def test_override_default(self):
        """Given overrideDefault, should exclude only the additional rules."""
        config = ExclusionConfig.from_artifact({
            "excludeRules": {"eslint": {"overrideDefault": True, "additionalRules": ["no-alert"]}},
        })
        assert config.rules_for(Category.LINT_JS) == ["no-alert"]

    def test_disabled(self):
        """Given enabled false, should exclude nothing for that category."""
        config = ExclusionConfig.from_artifact({
            "excludeRules": {"stylelint": {"enabled": False, "additionalRules": ["color-named"]}},
        })
        assert config.rules_for(Category.LINT_STYLE) == []

    def test_present_config_without_category_uses_defaults(self):
        """Given a config that does not mention a lint category, should apply its defaults."""
        config = ExclusionConfig.from_artifact({"excludeRules": {}})
        assert "semi" in config.excluded(Category.LINT_JS)
        assert config.excluded(Category.SECURITY) == frozenset()

    def test_unknown_category_keys_ignored(self):
        """Given a config for an unknown tool, should ignore it."""
        config = ExclusionConfig.from_artifact({"excludeRules": {"prettier": {"enabled": False}}})
        assert config.categories == {}

    def test_from_dict_tolerates_junk(self):
        assert CategoryExclusion.from_dict("yes") == CategoryExclusion()
        assert CategoryExclusion.from_dict({"additionalRules": "semi"}).additional_rules == ()


class TestDescribe:
    """Tests for the excluded-rules listing."""

    def test_groups_and_custom_flags(self):
        """Given defaults plus a custom rule, should group them and mark the custom one."""
        config = ExclusionConfig.from_artifact({
            "excludeRules": {"eslint": {"additionalRules": ["react/no-danger"]}},
        })
        groups = config.describe_excluded(Category.LINT_JS)

        formatting = {r.rule: r for r in groups["formatting"]}
        assert not formatting["semi"].custom
        react = {r.rule: r for r in groups["react specific"]}
        assert react["react/no-danger"].custom

    def test_search_filters_rules(self):
        """Given a search term, should keep rules matching id or description."""
        config = ExclusionConfig.from_artifact({"excludeRules": {}})
        groups = config.describe_excluded(Category.LINT_JS, "semicolon")
        assert [r.rule for rules in groups.values() for r in rules] == ["semi"]

    def test_rule_groups(self):
        assert rule_group("@typescript-eslint/no-explicit-any", Category.LINT_JS) == "typescript specific"
        assert rule_group("import/order", Category.LINT_JS) == "import/export"
        assert rule_group("camelcase", Category.LINT_JS) == "naming conventions"
        assert rule_group("selector-max-id", Category.LINT_STYLE) == "selectors"
        assert rule_group("color-hex-case", Category.LINT_STYLE) == "formatting"
