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
okta-ruleset - Naming convention checks for Okta Terraform configuration.
"""

try:
    from ._version import __version__
except ImportError:
    __version__ = "0.0.0+unknown"


def __getattr__(name: str):
    """Lazy-load public API symbols on first access.

    Keeps ``python -m okta_ruleset.cli.cli`` from importing the whole
    package eagerly.
    """
    _lazy_map = {
        "Config": (".config.config", "Config"),
        "OktaRulesetConstants": (".config.constants", "OktaRulesetConstants"),
        "ModuleLoader": (".core.loader", "ModuleLoader"),
        "Issue": (".core.models", "Issue"),
        "Report": (".core.models", "Report"),
        "ScanResult": (".core.models", "ScanResult"),
        "Severity": (".core.models", "Severity"),
        "SourceRange": (".core.models", "SourceRange"),
        "ModuleRunner": (".core.runner", "ModuleRunner"),
        "Runner": (".core.runner", "Runner"),
        "RuleSet": (".core.ruleset", "RuleSet"),
        "RulesetConfig": (".core.ruleset_config", "RulesetConfig"),
        "ModuleScanner": (".core.scanner", "ModuleScanner"),
        "scan_module": (".core.scanner", "scan_module"),
        "scan_directory": (".core.scanner", "scan_directory"),
        "OktaGroupNamePrefixRule": (".rules.okta_group_name_prefix", "OktaGroupNamePrefixRule"),
        "RuleConfig": (".rules.okta_group_name_prefix", "RuleConfig"),
    }
    if name in _lazy_map:
        module_path, attr = _lazy_map[name]
        import importlib

        mod = importlib.import_module(module_path, __package__)
        val = getattr(mod, attr)
        # Cache on the module so __getattr__ is only called once per symbol
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ModuleScanner",
    "scan_module",
    "scan_directory",
    "Issue",
    "ScanResult",
    "Report",
    "Severity",
    "SourceRange",
    "ModuleLoader",
    "Runner",
    "ModuleRunner",
    "RuleSet",
    "RulesetConfig",
    "OktaGroupNamePrefixRule",
    "RuleConfig",
    "Config",
    "OktaRulesetConstants",
]
