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

"""Ruleset exceptions.

All exceptions inherit from RulesetError for easy catching. Rules never
recover from these locally: an error raised by the runner propagates
unchanged out of ``check()`` and stops the pass.

Example:
    >>> from okta_ruleset.core.scanner import ModuleScanner
    >>> from okta_ruleset.core.exceptions import ModuleLoadError, EvaluationError
    >>>
    >>> scanner = ModuleScanner()
    >>>
    >>> try:
    ...     result = scanner.scan_module("path/to/module")
    ... except ModuleLoadError as e:
    ...     print(f"Failed to load module: {e}")
    ... except EvaluationError as e:
    ...     print(f"Could not evaluate: {e}")
"""


class RulesetError(Exception):
    """Base exception for all ruleset errors."""

    pass


class ModuleLoadError(RulesetError):
    """Raised when a Terraform module directory cannot be loaded.

    This can indicate:
    - Missing directory
    - Malformed ``*.tf.json`` or ``*.tfvars.json`` file
    - Unexpected top-level structure
    """

    pass


class ConfigError(RulesetError):
    """Raised when the ruleset configuration is invalid."""

    pass


class HostQueryError(RulesetError):
    """Raised when a resource content query is malformed or unsupported."""

    pass


class EvaluationError(RulesetError):
    """Raised when an expression cannot be evaluated to the wanted type."""

    def __init__(self, message: str, range=None):
        super().__init__(message)
        self.range = range

    def __str__(self) -> str:
        message = super().__str__()
        if self.range is not None:
            return f"{self.range}: {message}"
        return message


class UnknownValueError(EvaluationError):
    """Raised for statically unresolvable values when the runner is told not to skip them."""

    pass


class EmissionError(RulesetError):
    """Raised when an issue cannot be recorded by the runner."""

    pass
