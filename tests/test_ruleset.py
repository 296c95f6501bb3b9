# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Tests for the rule set and its configuration."""

import logging

import pytest

from okta_ruleset.core.exceptions import ConfigError, EmissionError
from okta_ruleset.core.models import Severity
from okta_ruleset.core.ruleset import RuleSet
from okta_ruleset.core.ruleset_config import RulesetConfig
from okta_ruleset.rules import BaseRule, OktaGroupNamePrefixRule, RuleConfig, builtin_rules


class RecordingRule(BaseRule):
    """Minimal rule that records each check call."""

    def __init__(self, rule_name="recording", enabled=True, error=None):
        self._name = rule_name
        self._enabled = enabled
        self.error = error
        self.calls = []

    def name(self):
        return self._name

    def enabled(self):
        return self._enabled

    def check(self, runner):
        self.calls.append(runner)
        if self.error:
            raise self.error


class TestRuleSetConstruction:
    def test_builtin_rules(self):
        ruleset = RuleSet()
        assert ruleset.rule_names() == ["okta_group_name_prefix"]
        assert "okta_group_name_prefix" in ruleset
        assert len(ruleset) == 1

    def test_builtin_rules_are_fresh_instances(self):
        assert builtin_rules()[0] is not builtin_rules()[0]

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate rule name"):
            RuleSet([RecordingRule("a"), RecordingRule("a")])

    def test_enabled_rules_before_config(self):
        ruleset = RuleSet([RecordingRule("on"), RecordingRule("off", enabled=False)])
        assert [r.name() for r in ruleset.enabled_rules] == ["on"]


class TestApplyConfig:
    def test_disable_rule(self):
        ruleset = RuleSet()
        ruleset.apply_config(RulesetConfig.from_dict({"rules": {"okta_group_name_prefix": False}}))
        assert ruleset.enabled_rules == []

    def test_enable_rule_disabled_by_default(self):
        ruleset = RuleSet([RecordingRule("off", enabled=False)])
        ruleset.apply_config(RulesetConfig.from_dict({"rules": {"off": True}}))
        assert [r.name() for r in ruleset.enabled_rules] == ["off"]

    def test_options_and_severity_applied(self):
        ruleset = RuleSet()
        ruleset.apply_config(
            RulesetConfig.from_dict({"rules": {"okta_group_name_prefix": {"prefix": "tf-", "severity": "warning"}}})
        )
        rule = ruleset.enabled_rules[0]
        assert rule.config.prefix == "tf-"
        assert rule.severity() == Severity.WARNING

    def test_catalog_keeps_unconfigured_rule(self):
        ruleset = RuleSet()
        ruleset.apply_config(RulesetConfig.from_dict({"rules": {"okta_group_name_prefix": {"prefix": "tf-"}}}))
        assert ruleset.get("okta_group_name_prefix").config.prefix == "terraform-"

    def test_unknown_rule_warns(self, caplog):
        ruleset = RuleSet()
        with caplog.at_level(logging.WARNING, logger="okta_ruleset.core.ruleset"):
            ruleset.apply_config(RulesetConfig.from_dict({"rules": {"no_such_rule": True}}))
        assert "unknown rule 'no_such_rule'" in caplog.text

    def test_options_for_rule_without_options(self):
        ruleset = RuleSet([RecordingRule("plain")])
        with pytest.raises(ConfigError, match="does not accept options"):
            ruleset.apply_config(RulesetConfig.from_dict({"rules": {"plain": {"level": 3}}}))

    def test_invalid_rule_config_wrapped(self):
        class BrokenConfigRule(OktaGroupNamePrefixRule):
            def configure(self, severity=None, options=None):
                raise ValueError("bad value")

        ruleset = RuleSet([BrokenConfigRule(RuleConfig())])
        with pytest.raises(ConfigError, match="okta_group_name_prefix: bad value"):
            ruleset.apply_config(RulesetConfig.from_dict({}))


class TestCheck:
    def test_runs_enabled_rules_in_order(self):
        first, second, off = RecordingRule("first"), RecordingRule("second"), RecordingRule("off", enabled=False)
        ruleset = RuleSet([first, second, off])
        runner = object()

        assert ruleset.check(runner) == ["first", "second"]
        assert first.calls == [runner]
        assert off.calls == []

    def test_error_stops_run(self):
        failing = RecordingRule("failing", error=EmissionError("closed"))
        after = RecordingRule("after")
        ruleset = RuleSet([failing, after])

        with pytest.raises(EmissionError):
            ruleset.check(object())
        assert after.calls == []
