# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""
Runner: the host interface rules use to read configuration and report issues.

A rule never touches files or parsed JSON directly. It asks the runner for
resource content restricted to the attributes it needs, asks the runner to
evaluate an attribute's expression, and hands issues back to the runner.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .exceptions import EmissionError, EvaluationError, HostQueryError, UnknownValueError
from .expressions import UNKNOWN, ExpressionEvaluator, to_string, type_name
from .models import Block, BodyContent, BodySchema, Expression, Issue, Module, SourceRange

if TYPE_CHECKING:
    from ..rules.base import BaseRule

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

# What to do when an expression cannot be resolved statically
ON_UNRESOLVED_SKIP = "skip"
ON_UNRESOLVED_ERROR = "error"
ON_UNRESOLVED_CHOICES = (ON_UNRESOLVED_SKIP, ON_UNRESOLVED_ERROR)


class Runner(ABC):
    """Abstract host interface consumed by rules."""

    @abstractmethod
    def get_resource_content(self, resource_type: str, schema: BodySchema) -> BodyContent:
        """
        Return every ``resource`` block of *resource_type*.

        Each block's body only contains attributes named in *schema* that
        were explicitly authored.

        Raises:
            HostQueryError: If the query is malformed
        """
        pass

    @abstractmethod
    def evaluate_expr(self, expr: Expression, wanted_type: type = str) -> Any:
        """
        Evaluate *expr* and convert the result to *wanted_type*.

        Returns:
            The converted value, or ``None`` when the runner decides the
            value should be skipped (unknown or null).

        Raises:
            EvaluationError: If the value cannot be converted, or cannot be
                resolved and the runner does not skip unresolved values
        """
        pass

    @abstractmethod
    def emit_issue(self, rule: BaseRule, message: str, issue_range: SourceRange) -> None:
        """
        Record an issue for *rule* at *issue_range*.

        Raises:
            EmissionError: If the issue cannot be recorded
        """
        pass


class ModuleRunner(Runner):
    """Runner backed by a module loaded from ``*.tf.json`` files.

    Issues are collected on :attr:`issues` and, when *issue_sink* is given,
    forwarded to it as they are emitted.
    """

    def __init__(
        self,
        module: Module,
        on_unresolved: str = ON_UNRESOLVED_SKIP,
        issue_sink: Callable[[Issue], None] | None = None,
    ):
        if on_unresolved not in ON_UNRESOLVED_CHOICES:
            raise ValueError(
                f"Unknown on_unresolved mode '{on_unresolved}'. Available: {', '.join(ON_UNRESOLVED_CHOICES)}"
            )
        self.module = module
        self.on_unresolved = on_unresolved
        self.issue_sink = issue_sink
        self.evaluator = ExpressionEvaluator(module.variable_values)
        self.issues: list[Issue] = []

    def get_resource_content(self, resource_type: str, schema: BodySchema) -> BodyContent:
        if not isinstance(resource_type, str) or not _IDENTIFIER_RE.match(resource_type):
            raise HostQueryError(f"Invalid resource type: {resource_type!r}")
        if not isinstance(schema, BodySchema):
            raise HostQueryError(f"Expected a BodySchema, got {type(schema).__name__}")
        wanted = schema.attribute_names
        for name in wanted:
            if not _IDENTIFIER_RE.match(name):
                raise HostQueryError(f"Invalid attribute name in schema: {name!r}")

        content = BodyContent()
        for resource in self.module.resources_of_type(resource_type):
            attributes = {name: attr for name, attr in resource.attributes.items() if name in wanted}
            content.blocks.append(
                Block(
                    type="resource",
                    labels=[resource.type, resource.name],
                    body=BodyContent(attributes=attributes),
                    def_range=resource.def_range,
                )
            )
        return content

    def evaluate_expr(self, expr: Expression, wanted_type: type = str) -> Any:
        value = self.evaluator.evaluate(expr)

        if value is UNKNOWN or value is None:
            what = "unknown" if value is UNKNOWN else "null"
            if self.on_unresolved == ON_UNRESOLVED_ERROR:
                raise UnknownValueError(f"Expression value is {what} and cannot be checked statically", expr.range)
            logger.debug("Skipping %s value at %s", what, expr.range)
            return None

        return self._convert(value, wanted_type, expr)

    def emit_issue(self, rule: BaseRule, message: str, issue_range: SourceRange) -> None:
        if not isinstance(message, str) or not message:
            raise EmissionError(f"Rule {rule.name()} emitted an issue without a message")
        if not isinstance(issue_range, SourceRange):
            raise EmissionError(f"Rule {rule.name()} emitted an issue without a source range")

        issue = Issue(
            rule_name=rule.name(),
            message=message,
            range=issue_range,
            severity=rule.severity(),
            link=rule.link(),
        )
        if self.issue_sink is not None:
            try:
                self.issue_sink(issue)
            except Exception as e:
                raise EmissionError(f"Failed to record issue for rule {rule.name()}: {e}") from e
        self.issues.append(issue)

    @staticmethod
    def _convert(value: Any, wanted_type: type, expr: Expression) -> Any:
        if wanted_type is str:
            text = to_string(value)
            if text is None:
                raise EvaluationError(f"Inappropriate value: string required, got {type_name(value)}", expr.range)
            return text
        if wanted_type is bool:
            if isinstance(value, bool):
                return value
            if value in ("true", "false"):
                return value == "true"
        elif wanted_type in (int, float):
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return wanted_type(value)
            if isinstance(value, str):
                try:
                    return wanted_type(value)
                except ValueError:
                    pass
        elif isinstance(value, wanted_type):
            return value
        raise EvaluationError(
            f"Inappropriate value: {wanted_type.__name__} required, got {type_name(value)}",
            expr.range,
        )
