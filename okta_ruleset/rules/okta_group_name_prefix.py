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

"""Naming convention check for Okta groups.

Rule: okta_group_name_prefix.

Every ``okta_group`` resource that sets ``name`` explicitly must use a value
starting with ``terraform-``. Resources that leave ``name`` unset are
skipped, and values the runner cannot resolve are handled however the
runner decides.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..core.exceptions import ConfigError
from ..core.models import Attribute, AttributeSchema, Block, BodySchema, Severity
from .base import BaseRule

if TYPE_CHECKING:
    from ..core.runner import Runner

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


@dataclass(frozen=True)
class RuleConfig:
    """Static parameters of a prefix rule."""

    name: str = "okta_group_name_prefix"
    resource_type: str = "okta_group"
    attribute_name: str = "name"
    prefix: str = "terraform-"
    severity: Severity = Severity.ERROR
    enabled_by_default: bool = True
    # Human-readable resource kind used in issue messages
    resource_label: str = "Okta group"
    link: str = ""

    def __post_init__(self):
        for field_name in ("name", "resource_type", "attribute_name"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
                raise ValueError(f"RuleConfig.{field_name} must be a non-empty identifier, got {value!r}")
        if not isinstance(self.prefix, str):
            raise ValueError(f"RuleConfig.prefix must be a string, got {type(self.prefix).__name__}")
        if not self.resource_label:
            raise ValueError("RuleConfig.resource_label must not be empty")
        object.__setattr__(self, "severity", Severity.parse(self.severity))

    @property
    def message(self) -> str:
        return f"{self.resource_label} name must start with '{self.prefix}'"


class OktaGroupNamePrefixRule(BaseRule):
    """Checks that the ``name`` of each ``okta_group`` starts with the required prefix."""

    OPTIONS = ("prefix",)

    def __init__(self, config: RuleConfig | None = None):
        self.config = config or RuleConfig()

    def name(self) -> str:
        return self.config.name

    def enabled(self) -> bool:
        return self.config.enabled_by_default

    def severity(self) -> Severity:
        return self.config.severity

    def link(self) -> str:
        return self.config.link

    def check(self, runner: Runner) -> None:
        logger.debug("checking %s rule", self.name())
        self.check_all(self.scan(runner), runner)

    def scan(self, runner: Runner) -> Iterator[tuple[Block, Attribute]]:
        """Yield ``(block, attribute)`` for every resource that sets the attribute."""
        content = runner.get_resource_content(
            self.config.resource_type,
            BodySchema(attributes=[AttributeSchema(name=self.config.attribute_name)]),
        )
        for block in content.blocks:
            attribute = block.body.attributes.get(self.config.attribute_name)
            if attribute is None:
                # Unset here, e.g. left to the provider or to a default
                continue
            yield block, attribute

    def check_all(self, pairs: Iterable[tuple[Block, Attribute]], runner: Runner) -> None:
        """Evaluate each attribute and emit one issue per value missing the prefix."""
        for block, attribute in pairs:
            value = runner.evaluate_expr(attribute.expr, str)
            if value is None:
                continue
            if not value.startswith(self.config.prefix):
                logger.debug("%s: %r does not start with %r", block.address, value, self.config.prefix)
                runner.emit_issue(self, self.config.message, attribute.range)

    def configure(self, severity: Severity | None = None, options: dict[str, Any] | None = None) -> BaseRule:
        options = dict(options or {})
        unknown = sorted(set(options) - set(self.OPTIONS))
        if unknown:
            raise ConfigError(f"Rule {self.name()} does not accept options: {', '.join(unknown)}")

        changes: dict[str, Any] = {}
        if severity is not None:
            changes["severity"] = severity
        if "prefix" in options:
            if not isinstance(options["prefix"], str):
                raise ConfigError(f"Rule {self.name()}: 'prefix' must be a string")
            changes["prefix"] = options["prefix"]
        if not changes:
            return self
        return OktaGroupNamePrefixRule(dataclasses.replace(self.config, **changes))
