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
Base rule interface for Terraform lint rules.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..core.exceptions import ConfigError
from ..core.models import Severity

if TYPE_CHECKING:
    from ..core.runner import Runner


class BaseRule(ABC):
    """Abstract base class for all rules."""

    @abstractmethod
    def name(self) -> str:
        """Unique rule name, e.g. ``okta_group_name_prefix``."""
        pass

    def enabled(self) -> bool:
        """Whether the rule runs when the configuration says nothing about it."""
        return True

    def severity(self) -> Severity:
        return Severity.ERROR

    def link(self) -> str:
        """Documentation URL for the rule (may be empty)."""
        return ""

    @abstractmethod
    def check(self, runner: Runner) -> None:
        """
        Inspect the configuration exposed by *runner* and emit issues.

        Args:
            runner: Host runner

        Raises:
            RulesetError: Any runner error, propagated unchanged
        """
        pass

    def configure(self, severity: Severity | None = None, options: dict[str, Any] | None = None) -> BaseRule:
        """Return a copy of this rule with a severity override and rule options applied.

        Rules that take options override this.
        """
        if options:
            raise ConfigError(f"Rule {self.name()} does not accept options: {', '.join(sorted(options))}")
        if severity is not None:
            raise ConfigError(f"Rule {self.name()} does not support severity overrides")
        return self
