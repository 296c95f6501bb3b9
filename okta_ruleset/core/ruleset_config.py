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
Ruleset configuration: which rules run, at what severity, with which options.

Usage
-----
    from okta_ruleset.core.ruleset_config import RulesetConfig

    # Load built-in defaults
    config = RulesetConfig.default()

    # Load a project configuration (merges on top of defaults)
    config = RulesetConfig.from_yaml(".okta-ruleset.yaml")

    # Dump the current (including default) configuration for editing
    config.to_yaml("generated.yaml")

A configuration file looks like::

    config:
      on_unresolved: error
    rules:
      okta_group_name_prefix:
        enabled: true
        severity: WARNING
        prefix: "tf-"

Every key under a rule other than ``enabled`` and ``severity`` is passed to
the rule as an option.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..data import DEFAULT_CONFIG_PATH
from .exceptions import ConfigError
from .models import Severity
from .runner import ON_UNRESOLVED_CHOICES, ON_UNRESOLVED_SKIP

logger = logging.getLogger(__name__)

# File names picked up automatically from a module directory
CONFIG_FILE_NAMES = (".okta-ruleset.yaml", ".okta-ruleset.yml")


@dataclass
class RuleSettings:
    """Per-rule settings from the ``rules:`` section."""

    enabled: bool | None = None
    severity: Severity | None = None
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class RulesetConfig:
    """Top-level ruleset configuration."""

    config_name: str = "default"
    config_version: str = "1.0"
    on_unresolved: str = ON_UNRESOLVED_SKIP
    disabled_by_default: bool = False
    rules: dict[str, RuleSettings] = field(default_factory=dict)

    def __post_init__(self):
        if self.on_unresolved not in ON_UNRESOLVED_CHOICES:
            raise ConfigError(
                f"Invalid on_unresolved '{self.on_unresolved}'. Available: {', '.join(ON_UNRESOLVED_CHOICES)}"
            )

    def rule_settings(self, rule_name: str) -> RuleSettings | None:
        return self.rules.get(rule_name)

    def is_rule_enabled(self, rule_name: str, default: bool) -> bool:
        """Resolve enablement: explicit setting, then ``disabled_by_default``, then the rule default."""
        settings = self.rules.get(rule_name)
        if settings is not None and settings.enabled is not None:
            return settings.enabled
        if self.disabled_by_default:
            return False
        return default

    # -----------------------------------------------------------------------
    # Construction helpers
    # -----------------------------------------------------------------------

    @classmethod
    def default(cls) -> RulesetConfig:
        """Load the built-in default configuration that ships with the package."""
        return cls.from_yaml(DEFAULT_CONFIG_PATH)

    @classmethod
    def from_yaml(cls, path: str | Path) -> RulesetConfig:
        """
        Load a configuration from a YAML file.

        The YAML is first merged on top of the built-in defaults so that
        users only need to specify the sections they want to override.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        if path.resolve() == DEFAULT_CONFIG_PATH.resolve():
            return cls._from_dict(raw)
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> RulesetConfig:
        """Build a configuration from a mapping merged over the built-in defaults."""
        merged = cls._deep_merge(cls._load_default_raw(), raw)
        return cls._from_dict(merged)

    @classmethod
    def discover(cls, module_directory: str | Path) -> RulesetConfig:
        """Load the first config file found in *module_directory*, else the defaults."""
        directory = Path(module_directory)
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                logger.info("Using config file %s", candidate)
                return cls.from_yaml(candidate)
        return cls.default()

    def to_yaml(self, path: str | Path) -> None:
        """Dump the full configuration to a YAML file for editing."""
        data = self._to_dict()
        with open(path, "w", encoding="utf-8") as fh:
            fh.write("# okta-ruleset – Ruleset Configuration\n")
            fh.write("# Only include sections you want to override; omitted sections\n")
            fh.write("# will use the built-in defaults.\n\n")
            yaml.dump(data, fh, default_flow_style=False, sort_keys=False, width=120)

    # -----------------------------------------------------------------------
    # Internal parsing
    # -----------------------------------------------------------------------

    @classmethod
    def _load_default_raw(cls) -> dict[str, Any]:
        if DEFAULT_CONFIG_PATH.exists():
            with open(DEFAULT_CONFIG_PATH, encoding="utf-8") as fh:
                return yaml.safe_load(fh) or {}
        return {}

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Recursively merge *override* into *base*; non-dict values are replaced."""
        result = dict(base)
        for key, val in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(val, dict):
                result[key] = RulesetConfig._deep_merge(result[key], val)
            else:
                result[key] = val
        return result

    @classmethod
    def _from_dict(cls, d: dict[str, Any]) -> RulesetConfig:
        cfg = d.get("config") or {}
        if not isinstance(cfg, dict):
            raise ConfigError("'config' must be a mapping")

        raw_rules = d.get("rules") or {}
        if not isinstance(raw_rules, dict):
            raise ConfigError("'rules' must be a mapping")

        rules: dict[str, RuleSettings] = {}
        for rule_name, body in raw_rules.items():
            rules[str(rule_name)] = cls._parse_rule_settings(str(rule_name), body)

        return cls(
            config_name=str(d.get("config_name", "default")),
            config_version=str(d.get("config_version", "1.0")),
            on_unresolved=str(cfg.get("on_unresolved", ON_UNRESOLVED_SKIP)).lower(),
            disabled_by_default=bool(cfg.get("disabled_by_default", False)),
            rules=rules,
        )

    @staticmethod
    def _parse_rule_settings(rule_name: str, body: Any) -> RuleSettings:
        # Shorthand: ``rule_name: false``
        if isinstance(body, bool):
            return RuleSettings(enabled=body)
        if body is None:
            return RuleSettings()
        if not isinstance(body, dict):
            raise ConfigError(f"Settings for rule '{rule_name}' must be a mapping or a boolean")

        options = dict(body)
        enabled = options.pop("enabled", None)
        if enabled is not None and not isinstance(enabled, bool):
            raise ConfigError(f"Rule '{rule_name}': 'enabled' must be true or false")

        severity = options.pop("severity", None)
        if severity is not None:
            try:
                severity = Severity.parse(severity)
            except ValueError as e:
                raise ConfigError(f"Rule '{rule_name}': {e}") from e

        return RuleSettings(enabled=enabled, severity=severity, options=options)

    def _to_dict(self) -> dict[str, Any]:
        rules: dict[str, Any] = {}
        for name, settings in self.rules.items():
            body: dict[str, Any] = {}
            if settings.enabled is not None:
                body["enabled"] = settings.enabled
            if settings.severity is not None:
                body["severity"] = settings.severity.value
            body.update(settings.options)
            rules[name] = body
        return {
            "config_name": self.config_name,
            "config_version": self.config_version,
            "config": {
                "on_unresolved": self.on_unresolved,
                "disabled_by_default": self.disabled_by_default,
            },
            "rules": rules,
        }
