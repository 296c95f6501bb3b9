# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Tests for the module-backed runner."""

import pytest

from okta_ruleset.core.exceptions import EmissionError, EvaluationError, HostQueryError, UnknownValueError
from okta_ruleset.core.loader import ModuleLoader
from okta_ruleset.core.models import AttributeSchema, BodySchema, Expression, Severity, SourcePos, SourceRange
from okta_ruleset.core.runner import ModuleRunner
from okta_ruleset.rules.okta_group_name_prefix import OktaGroupNamePrefixRule, RuleConfig

RANGE = SourceRange("main.tf.json", SourcePos(1, 1), SourcePos(1, 5))
NAME_SCHEMA = BodySchema(attributes=[AttributeSchema(name="name")])


@pytest.fixture
def make_runner(make_module):
    def _factory(groups=None, on_unresolved="skip", issue_sink=None, **kwargs):
        module = ModuleLoader().load_module(make_module(groups, **kwargs))
        return ModuleRunner(module, on_unresolved=on_unresolved, issue_sink=issue_sink)

    return _factory


class TestGetResourceContent:
    def test_blocks_filtered_to_schema(self, make_runner):
        runner = make_runner({"g": {"name": "x", "description": "y"}})
        content = runner.get_resource_content("okta_group", NAME_SCHEMA)

        assert len(content.blocks) == 1
        block = content.blocks[0]
        assert block.type == "resource"
        assert block.labels == ["okta_group", "g"]
        assert block.address == "okta_group.g"
        assert set(block.body.attributes) == {"name"}

    def test_absent_attribute_not_present(self, make_runner):
        runner = make_runner({"g": {"description": "y"}})
        block = runner.get_resource_content("okta_group", NAME_SCHEMA).blocks[0]
        assert block.body.attributes == {}

    def test_unknown_type_has_no_blocks(self, make_runner):
        runner = make_runner({"g": {"name": "x"}})
        assert runner.get_resource_content("okta_user", NAME_SCHEMA).blocks == []

    @pytest.mark.parametrize("resource_type", ["", "okta group", "1okta", None])
    def test_invalid_resource_type(self, make_runner, resource_type):
        runner = make_runner()
        with pytest.raises(HostQueryError, match="Invalid resource type"):
            runner.get_resource_content(resource_type, NAME_SCHEMA)

    def test_invalid_schema(self, make_runner):
        runner = make_runner()
        with pytest.raises(HostQueryError, match="BodySchema"):
            runner.get_resource_content("okta_group", {"name"})

    def test_invalid_attribute_name(self, make_runner):
        runner = make_runner()
        schema = BodySchema(attributes=[AttributeSchema(name="bad name")])
        with pytest.raises(HostQueryError, match="Invalid attribute name"):
            runner.get_resource_content("okta_group", schema)


class TestEvaluateExpr:
    def test_string(self, make_runner):
        runner = make_runner()
        assert runner.evaluate_expr(Expression("terraform-x", RANGE), str) == "terraform-x"

    def test_variable(self, make_runner):
        runner = make_runner(variables={"team": {"default": "ops"}})
        assert runner.evaluate_expr(Expression("${var.team}", RANGE)) == "ops"

    def test_unknown_skipped(self, make_runner):
        runner = make_runner()
        assert runner.evaluate_expr(Expression("${local.x}", RANGE)) is None

    def test_unknown_raises_in_error_mode(self, make_runner):
        runner = make_runner(on_unresolved="error")
        with pytest.raises(UnknownValueError, match="unknown") as exc_info:
            runner.evaluate_expr(Expression("${local.x}", RANGE))
        assert exc_info.value.range == RANGE

    def test_null_raises_in_error_mode(self, make_runner):
        runner = make_runner(on_unresolved="error")
        with pytest.raises(UnknownValueError, match="null"):
            runner.evaluate_expr(Expression(None, RANGE))

    def test_object_is_not_a_string(self, make_runner):
        runner = make_runner()
        with pytest.raises(EvaluationError, match="string required, got object"):
            runner.evaluate_expr(Expression({"a": 1}, RANGE), str)

    def test_bool_conversion(self, make_runner):
        runner = make_runner()
        assert runner.evaluate_expr(Expression("true", RANGE), bool) is True
        assert runner.evaluate_expr(Expression(False, RANGE), bool) is False

    def test_number_conversion(self, make_runner):
        runner = make_runner()
        assert runner.evaluate_expr(Expression("12", RANGE), int) == 12
        assert runner.evaluate_expr(Expression(2, RANGE), float) == 2.0

    def test_bad_number(self, make_runner):
        runner = make_runner()
        with pytest.raises(EvaluationError, match="int required, got string"):
            runner.evaluate_expr(Expression("twelve", RANGE), int)

    def test_invalid_mode(self, make_runner):
        with pytest.raises(ValueError, match="on_unresolved"):
            make_runner(on_unresolved="ignore")


class TestEmitIssue:
    def test_issue_recorded(self, make_runner):
        runner = make_runner()
        rule = OktaGroupNamePrefixRule(RuleConfig(severity="WARNING", link="https://example.com/naming"))
        runner.emit_issue(rule, "bad name", RANGE)

        assert len(runner.issues) == 1
        issue = runner.issues[0]
        assert issue.rule_name == "okta_group_name_prefix"
        assert issue.severity == Severity.WARNING
        assert issue.link == "https://example.com/naming"
        assert issue.range == RANGE

    def test_sink_receives_issue(self, make_runner):
        received = []
        runner = make_runner(issue_sink=received.append)
        runner.emit_issue(OktaGroupNamePrefixRule(), "bad name", RANGE)
        assert received == runner.issues

    def test_sink_failure_is_emission_error(self, make_runner):
        def broken_sink(_issue):
            raise OSError("disk full")

        runner = make_runner(issue_sink=broken_sink)
        with pytest.raises(EmissionError, match="disk full"):
            runner.emit_issue(OktaGroupNamePrefixRule(), "bad name", RANGE)
        assert runner.issues == []

    def test_empty_message_rejected(self, make_runner):
        runner = make_runner()
        with pytest.raises(EmissionError, match="without a message"):
            runner.emit_issue(OktaGroupNamePrefixRule(), "", RANGE)

    def test_missing_range_rejected(self, make_runner):
        runner = make_runner()
        with pytest.raises(EmissionError, match="without a source range"):
            runner.emit_issue(OktaGroupNamePrefixRule(), "bad name", None)
