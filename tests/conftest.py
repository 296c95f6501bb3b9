# Copyright 2026 Cisco Systems, Inc. and its affiliates
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
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before running tests.
All fixtures defined here are available to every test module without
explicit imports.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import pytest
import yaml

from okta_ruleset.core.ruleset_config import RulesetConfig
from okta_ruleset.core.scanner import ModuleScanner

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep OKTA_RULESET_* settings from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("OKTA_RULESET_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_module(tmp_path):
    """Factory fixture: create a module directory with a ``main.tf.json``.

    Usage::

        def test_something(make_module):
            module_dir = make_module({"admins": {"name": "terraform-admins"}})
    """
    _counter = [0]

    def _factory(
        groups: dict[str, Any] | None = None,
        *,
        variables: dict[str, Any] | None = None,
        extra_files: dict[str, Any] | None = None,
        dirname: str | None = None,
    ) -> Path:
        _counter[0] += 1
        module_dir = tmp_path / (dirname or f"module_{_counter[0]}")
        module_dir.mkdir(parents=True, exist_ok=True)

        doc: dict[str, Any] = {}
        if groups is not None:
            doc["resource"] = {"okta_group": groups}
        if variables:
            doc["variable"] = variables
        (module_dir / "main.tf.json").write_text(json.dumps(doc, indent=2), encoding="utf-8")

        for name, content in (extra_files or {}).items():
            text = content if isinstance(content, str) else json.dumps(content, indent=2)
            (module_dir / name).write_text(text, encoding="utf-8")
        return module_dir

    return _factory


@pytest.fixture
def make_config(tmp_path):
    """Factory fixture: write a ruleset config YAML and return its path."""

    def _factory(data: dict[str, Any], name: str = "ruleset.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.dump(data, default_flow_style=False), encoding="utf-8")
        return path

    return _factory


@pytest.fixture
def default_scanner() -> ModuleScanner:
    """Scanner with the built-in rules and configuration."""
    return ModuleScanner(config=RulesetConfig.default())
