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
Static evaluation of Terraform JSON-syntax expressions.

In the JSON syntax every string is a template. This evaluator understands
the subset that can be resolved without a plan:

* literal text, with ``$${`` and ``%%{`` escapes
* ``${var.NAME}`` interpolations of input variables

Anything else (``local.*``, ``data.*``, resource attributes, function calls,
``%{...}`` directives, variables with no value) is *unknown*. Whether an
unknown value is skipped or treated as an error is the caller's decision.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from .exceptions import EvaluationError
from .models import Expression

logger = logging.getLogger(__name__)

_VAR_REF_RE = re.compile(r"^var\.([A-Za-z_][A-Za-z0-9_-]*)$")


class _Unknown:
    """Marker for values that cannot be resolved statically."""

    _instance: _Unknown | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN"

    def __bool__(self) -> bool:
        return False


UNKNOWN = _Unknown()


def type_name(value: Any) -> str:
    """Terraform type name for a decoded JSON value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "tuple"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def to_string(value: Any) -> str | None:
    """Convert a primitive value to its Terraform string form, or ``None`` if not convertible."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return None


class ExpressionEvaluator:
    """Evaluates expressions against a fixed set of variable values."""

    def __init__(self, variables: dict[str, Any] | None = None):
        self.variables = dict(variables or {})

    def evaluate(self, expr: Expression) -> Any:
        """
        Evaluate *expr* to a concrete value.

        Returns:
            The decoded value, ``None`` for null, or :data:`UNKNOWN`.

        Raises:
            EvaluationError: If a template is malformed or interpolates a
                value that has no string form.
        """
        if isinstance(expr.value, str):
            return self._evaluate_template(expr)
        return expr.value

    def _evaluate_template(self, expr: Expression) -> Any:
        parts = self._split_template(expr)

        # A template consisting of a single interpolation yields the raw value
        if len(parts) == 1 and parts[0][0] == "interp":
            return self._resolve(parts[0][1])

        chunks: list[str] = []
        for kind, content in parts:
            if kind == "literal":
                chunks.append(content)
                continue
            if kind == "directive":
                return UNKNOWN
            value = self._resolve(content)
            if value is UNKNOWN:
                return UNKNOWN
            if value is None:
                raise EvaluationError("Invalid template interpolation value: the value is null", expr.range)
            text = to_string(value)
            if text is None:
                raise EvaluationError(
                    f"Invalid template interpolation value: cannot include a {type_name(value)} in a string template",
                    expr.range,
                )
            chunks.append(text)
        return "".join(chunks)

    def _resolve(self, reference: str) -> Any:
        match = _VAR_REF_RE.match(reference)
        if not match:
            logger.debug("Treating '%s' as unknown: only var.* references are resolved statically", reference)
            return UNKNOWN
        name = match.group(1)
        if name not in self.variables:
            logger.debug("Variable '%s' has no value", name)
            return UNKNOWN
        return self.variables[name]

    @staticmethod
    def _split_template(expr: Expression) -> list[tuple[str, str]]:
        """Split a template into ``literal``, ``interp`` and ``directive`` parts."""
        text: str = expr.value
        parts: list[tuple[str, str]] = []
        literal: list[str] = []
        i = 0
        while i < len(text):
            two = text[i : i + 2]
            three = text[i : i + 3]
            if three in ("$${", "%%{"):
                literal.append(three[1:])
                i += 3
                continue
            if two in ("${", "%{"):
                end = ExpressionEvaluator._find_closing_brace(text, i + 2)
                if end < 0:
                    raise EvaluationError("Unterminated template sequence", expr.range)
                if literal:
                    parts.append(("literal", "".join(literal)))
                    literal = []
                content = text[i + 2 : end].strip().strip("~").strip()
                parts.append(("interp" if two == "${" else "directive", content))
                i = end + 1
                continue
            literal.append(text[i])
            i += 1
        if literal or not parts:
            parts.append(("literal", "".join(literal)))
        return parts

    @staticmethod
    def _find_closing_brace(text: str, start: int) -> int:
        depth = 0
        in_string = False
        i = start
        while i < len(text):
            ch = text[i]
            if in_string:
                if ch == "\\":
                    i += 2
                    continue
                if ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                if depth == 0:
                    return i
                depth -= 1
            i += 1
        return -1
