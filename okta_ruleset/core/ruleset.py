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
Rule set: the catalog of available rules and the subset enabled by config.
"""

from __future__ import annotations

import logging

from ..rules import BaseRule, builtin_rules
from .exceptions import ConfigError
from .ruleset_config import RulesetConfig
from .runner import Runner

logger = logging.getLogger(__name__)


class RuleSet:
    """Holds every known rule and the configured, enabled subset.

    Until :meth:`apply_config` is called, rules that are enabled by default
    are the enabled set.
    """

    def __init__(self, rules: list[BaseRule] | None = None):
        self._rules: dict[str, BaseRule] = {}
        for rule in builtin_rules() if rules is None else rules:
            if rule.name() in self._rules:
                raise ValueError(f"Duplicate rule name: '{rule.name()}'")
            self._rules[rule.name()] = rule
        self._enabled: list[BaseRule] = [r for r in self._rules.values() if r.enabled()]

    def rule_names(self) -> list[str]:
        return list(self._rules)

    def get(self, rule_name: str) -> BaseRule | None:
        return self._rules.get(rule_name)

    def all_rules(self) -> list[BaseRule]:
        return list(self._rules.values())

    @property
    def enabled_rules(self) -> list[BaseRule]:
        return list(self._enabled)

    def apply_config(self, config: RulesetConfig) -> None:
        """Compute the enabled rules, applying severity overrides and rule options."""
        for name in config.rules:
            if name not in self._rules:
                logger.warning("Config refers to unknown rule '%s'", name)

        enabled: list[BaseRule] = []
        for name, rule in self._rules.items():
            if not config.is_rule_enabled(name, rule.enabled()):
                logger.debug("Rule %s is disabled", name)
                continue
            settings = config.rule_settings(name)
            if settings is not None:
                try:
                    rule = rule.configure(severity=settings.severity, options=settings.options)
                except ValueError as e:
                    raise ConfigError(f"Rule {name}: {e}") from e
            enabled.append(rule)
        self._enabled = enabled

    def check(self, runner: Runner) -> list[str]:
        """Run every enabled rule against *runner*; return the names of rules run.

        The first error raised by a rule stops the run and propagates.
        """
        names: list[str] = []
        for rule in self._enabled:
            rule.check(runner)
            names.append(rule.name())
        return names

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_name: str) -> bool:
        return rule_name in self._rules
