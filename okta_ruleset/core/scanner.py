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
Core scanner engine: load a module, run the enabled rules, collect issues.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from ..rules import BaseRule
from .exceptions import ModuleLoadError
from .loader import ModuleLoader
from .models import Report, ScanResult
from .ruleset import RuleSet
from .ruleset_config import RulesetConfig
from .runner import ModuleRunner

logger = logging.getLogger(__name__)

# Directories never searched for modules
_SKIP_DIRS = frozenset({".terraform", ".git", "node_modules", "__pycache__"})


class ModuleScanner:
    """Main scanner that runs the ruleset over Terraform modules."""

    def __init__(
        self,
        rules: list[BaseRule] | None = None,
        config: RulesetConfig | None = None,
        loader: ModuleLoader | None = None,
    ):
        """
        Initialize scanner.

        Args:
            rules: Rules to run. If None, uses the built-in rules.
            config: Ruleset configuration. If None, loads built-in defaults.
            loader: Module loader. If None, a default loader is created.
        """
        self.config = config or RulesetConfig.default()
        self.ruleset = RuleSet(rules)
        self.ruleset.apply_config(self.config)
        self.loader = loader or ModuleLoader()

    def scan_module(
        self,
        module_directory: str | Path,
        variables: dict[str, Any] | None = None,
        var_files: list[str | Path] | None = None,
    ) -> ScanResult:
        """
        Check a single module directory.

        Args:
            module_directory: Path to the module
            variables: Explicit variable values
            var_files: Extra ``*.tfvars.json`` files

        Returns:
            ScanResult with issues

        Raises:
            ModuleLoadError: If the module cannot be loaded
            RulesetError: Any error raised while a rule runs
        """
        if not isinstance(module_directory, Path):
            module_directory = Path(module_directory)

        start_time = time.time()
        module = self.loader.load_module(module_directory, var_files=var_files, variables=variables)
        runner = ModuleRunner(module, on_unresolved=self.config.on_unresolved)
        rules_run = self.ruleset.check(runner)

        result = ScanResult(
            module_directory=str(module_directory.absolute()),
            issues=list(runner.issues),
            rules_run=rules_run,
            scan_duration_seconds=time.time() - start_time,
        )
        logger.info("Checked %s: %d issue(s) from %d rule(s)", module_directory, len(result.issues), len(rules_run))
        return result

    def scan_directory(
        self,
        directory: str | Path,
        recursive: bool = False,
        variables: dict[str, Any] | None = None,
        var_files: list[str | Path] | None = None,
    ) -> Report:
        """
        Check every module directory under *directory*.

        Modules that fail to load are logged and skipped; errors raised
        while rules run stop the whole scan.

        Args:
            directory: Root directory
            recursive: If True, search nested directories for modules
            variables: Explicit variable values applied to every module
            var_files: Extra ``*.tfvars.json`` files applied to every module

        Returns:
            Report with results from all modules
        """
        if not isinstance(directory, Path):
            directory = Path(directory)

        if not directory.exists():
            raise FileNotFoundError(f"Directory does not exist: {directory}")

        report = Report()
        for module_dir in self._find_module_directories(directory, recursive):
            try:
                result = self.scan_module(module_dir, variables=variables, var_files=var_files)
            except ModuleLoadError as e:
                logger.warning("Failed to load %s: %s", module_dir, e)
                continue
            report.add_scan_result(result)

        return report

    def _find_module_directories(self, directory: Path, recursive: bool) -> list[Path]:
        """
        Find all directories containing ``*.tf.json`` files.

        Args:
            directory: Directory to search
            recursive: Search recursively

        Returns:
            Sorted list of module directory paths
        """
        candidates = [directory]
        if recursive:
            candidates.extend(
                p for p in directory.rglob("*") if p.is_dir() and not (_SKIP_DIRS & set(p.relative_to(directory).parts))
            )
        else:
            candidates.extend(p for p in directory.iterdir() if p.is_dir() and p.name not in _SKIP_DIRS)

        return sorted(p for p in candidates if self.loader.is_module_directory(p))

    def list_rules(self) -> list[str]:
        """Get names of all enabled rules."""
        return [rule.name() for rule in self.ruleset.enabled_rules]


def scan_module(
    module_directory: str | Path,
    config: RulesetConfig | None = None,
    variables: dict[str, Any] | None = None,
) -> ScanResult:
    """
    Convenience function to check a single module.

    Args:
        module_directory: Path to module directory
        config: Optional ruleset configuration
        variables: Optional explicit variable values

    Returns:
        ScanResult
    """
    scanner = ModuleScanner(config=config)
    return scanner.scan_module(module_directory, variables=variables)


def scan_directory(
    directory: str | Path,
    recursive: bool = False,
    config: RulesetConfig | None = None,
    variables: dict[str, Any] | None = None,
) -> Report:
    """
    Convenience function to check multiple modules.

    Args:
        directory: Directory containing modules
        recursive: Search recursively
        config: Optional ruleset configuration
        variables: Optional explicit variable values

    Returns:
        Report with all results
    """
    scanner = ModuleScanner(config=config)
    return scanner.scan_directory(directory, recursive=recursive, variables=variables)
