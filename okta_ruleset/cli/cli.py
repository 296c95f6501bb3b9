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

"""Command-line interface for okta-ruleset."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from ..config.config import Config
from ..config.constants import OktaRulesetConstants
from ..core.exceptions import ConfigError, ModuleLoadError, RulesetError
from ..core.loader import ModuleLoader
from ..core.models import Report, ScanResult, Severity
from ..core.reporters.json_reporter import JSONReporter
from ..core.reporters.sarif_reporter import SARIFReporter
from ..core.ruleset import RuleSet
from ..core.ruleset_config import RulesetConfig
from ..core.runner import ON_UNRESOLVED_CHOICES
from ..core.scanner import ModuleScanner

logger = logging.getLogger("okta_ruleset.cli")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _configure_logging(args: argparse.Namespace, env: Config) -> None:
    level_name = "DEBUG" if getattr(args, "verbose", False) else env.log_level
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s [%(name)s] %(message)s", stream=sys.stderr)


def _load_config(args: argparse.Namespace, env: Config, module_directory: Path) -> RulesetConfig:
    """Load ruleset config from ``--config``, the environment, the module directory, or defaults.

    Raises:
        FileNotFoundError: If an explicitly named config file is missing
        ConfigError: If the config is invalid
    """
    config_path = getattr(args, "config", None) or env.config_file
    if config_path:
        config = RulesetConfig.from_yaml(config_path)
        logger.info("Using ruleset config: %s (%s)", config_path, config.config_name)
    else:
        config = RulesetConfig.discover(module_directory)

    on_unresolved = getattr(args, "on_unresolved", None) or env.on_unresolved
    if on_unresolved:
        if on_unresolved not in ON_UNRESOLVED_CHOICES:
            raise ConfigError(
                f"Invalid on_unresolved '{on_unresolved}'. Available: {', '.join(ON_UNRESOLVED_CHOICES)}"
            )
        config.on_unresolved = on_unresolved
    return config


def _parse_variables(pairs: list[str] | None) -> dict[str, Any]:
    """Parse repeated ``--var NAME=VALUE`` flags."""
    variables: dict[str, Any] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Invalid --var '{pair}': expected NAME=VALUE")
        variables[name] = value
    return variables


def _format_output(args: argparse.Namespace, result_or_report: ScanResult | Report) -> str:
    """Generate the formatted output string for a scan result / report."""
    fmt = getattr(args, "format", "summary")
    if fmt == "json":
        return JSONReporter(pretty=not args.compact).generate_report(result_or_report)
    if fmt == "sarif":
        reporter = SARIFReporter(tool_name=OktaRulesetConstants.TOOL_NAME, tool_version=OktaRulesetConstants.VERSION)
        return reporter.generate_report(result_or_report)
    if isinstance(result_or_report, Report):
        return _generate_multi_module_summary(result_or_report)
    return _generate_summary(result_or_report)


def _write_output(args: argparse.Namespace, output: str) -> None:
    """Write *output* to a file or stdout."""
    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(output)
        print(f"Report saved to: {args.output}", file=sys.stderr)
    else:
        print(output)


def _exit_code(args: argparse.Namespace, issue_count: int) -> int:
    if issue_count and args.fail_on_issues:
        return OktaRulesetConstants.EXIT_ISSUES
    return OktaRulesetConstants.EXIT_OK


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def scan_command(args: argparse.Namespace) -> int:
    """Handle the ``scan`` command for a single module."""
    env = Config.from_env()
    module_dir = Path(args.module_directory)
    if not module_dir.exists():
        print(f"Error: Directory does not exist: {module_dir}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE

    try:
        config = _load_config(args, env, module_dir)
        variables = _parse_variables(args.var)
        scanner = ModuleScanner(config=config, loader=ModuleLoader(max_file_size_mb=env.max_file_size_mb))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE
    except (ConfigError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE

    try:
        result = scanner.scan_module(module_dir, variables=variables, var_files=args.var_file)
    except ModuleLoadError as e:
        print(f"Error loading module: {e}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE
    except RulesetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE

    _write_output(args, _format_output(args, result))
    return _exit_code(args, len(result.issues))


def scan_all_command(args: argparse.Namespace) -> int:
    """Handle the ``scan-all`` command for a tree of modules."""
    env = Config.from_env()
    root = Path(args.directory)
    if not root.exists():
        print(f"Error: Directory does not exist: {root}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE

    try:
        config = _load_config(args, env, root)
        variables = _parse_variables(args.var)
        scanner = ModuleScanner(config=config, loader=ModuleLoader(max_file_size_mb=env.max_file_size_mb))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE
    except (ConfigError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE

    try:
        report = scanner.scan_directory(root, recursive=args.recursive, variables=variables, var_files=args.var_file)
    except RulesetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE

    if report.total_modules_scanned == 0:
        print(f"No modules (*.tf.json) found in {root}", file=sys.stderr)

    _write_output(args, _format_output(args, report))
    return _exit_code(args, report.total_issues)


def list_rules_command(_args: argparse.Namespace) -> int:
    """Handle the ``list-rules`` command."""
    ruleset = RuleSet()
    print("Available rules:")
    for rule in ruleset.all_rules():
        state = "enabled" if rule.enabled() else "disabled"
        print(f"  {rule.name():<30s} {rule.severity().value:<8s} ({state} by default)")
    return OktaRulesetConstants.EXIT_OK


def generate_config_command(args: argparse.Namespace) -> int:
    """Handle the ``generate-config`` command."""
    try:
        RulesetConfig.default().to_yaml(args.output)
    except OSError as e:
        print(f"Error writing config: {e}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE
    print(f"Config written to: {args.output}")
    return OktaRulesetConstants.EXIT_OK


# ---------------------------------------------------------------------------
# Summary formatters
# ---------------------------------------------------------------------------


def _format_issue(issue) -> list[str]:
    label = issue.severity.value.capitalize()
    lines = [
        f"{label}: {issue.message} ({issue.rule_name})",
        f"  on {issue.range.filename} line {issue.range.start.line}, column {issue.range.start.column}",
    ]
    if issue.link:
        lines.append(f"  Reference: {issue.link}")
    return lines


def _generate_summary(result: ScanResult) -> str:
    lines = [
        "=" * 60,
        f"Module: {result.module_directory}",
        "=" * 60,
        f"Status: {'[OK] CLEAN' if result.is_clean else '[FAIL] ISSUES FOUND'}",
        f"Total Issues: {len(result.issues)}",
        f"Scan Duration: {result.scan_duration_seconds:.2f}s",
        "",
    ]
    if result.issues:
        lines.append("Issues Summary:")
        for sev in (Severity.ERROR, Severity.WARNING, Severity.NOTICE):
            lines.append(f"  {sev.value:>8s}: {len(result.get_issues_by_severity(sev))}")
        lines.append("")
        for issue in result.issues:
            lines.extend(_format_issue(issue))
            lines.append("")
    return "\n".join(lines).rstrip()


def _generate_multi_module_summary(report: Report) -> str:
    lines = [
        "=" * 60,
        "Okta Ruleset Report",
        "=" * 60,
        f"Modules Checked: {report.total_modules_scanned}",
        f"Clean Modules: {report.clean_count}",
        f"Total Issues: {report.total_issues}",
        "",
        "Issues by Severity:",
        f"    Error: {report.error_count}",
        f"  Warning: {report.warning_count}",
        f"   Notice: {report.notice_count}",
        "",
        "Individual Modules:",
    ]
    for r in report.scan_results:
        tag = "[OK]" if r.is_clean else "[FAIL]"
        lines.append(f"  {tag} {r.module_directory} - {len(r.issues)} issues")
        for issue in r.issues:
            lines.extend(f"      {line}" for line in _format_issue(issue))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Shared argparse helpers
# ---------------------------------------------------------------------------


def _add_common_scan_flags(parser: argparse.ArgumentParser) -> None:
    """Add flags shared between ``scan`` and ``scan-all``."""
    parser.add_argument(
        "--format",
        choices=["summary", "json", "sarif"],
        default=None,
        help="Output format (default: summary, or OKTA_RULESET_FORMAT). Use 'sarif' for GitHub Code Scanning.",
    )
    parser.add_argument("--output", "-o", help="Output file path")
    parser.add_argument("--compact", action="store_true", help="Compact JSON output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--fail-on-issues", action="store_true", help="Exit with status 2 if any issue is found")
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Ruleset config YAML (default: OKTA_RULESET_CONFIG, .okta-ruleset.yaml in the module, or built-in)",
    )
    parser.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="Set an input variable (repeatable)",
    )
    parser.add_argument(
        "--var-file",
        action="append",
        metavar="PATH",
        help="Load input variables from a *.tfvars.json file (repeatable)",
    )
    parser.add_argument(
        "--on-unresolved",
        choices=list(ON_UNRESOLVED_CHOICES),
        help="Skip values that cannot be resolved statically, or fail with an error",
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="okta-ruleset - Naming convention checks for Okta Terraform configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  okta-ruleset scan ./infra/okta
  okta-ruleset scan ./infra/okta --var group_prefix=terraform- --format json
  okta-ruleset scan ./infra/okta --on-unresolved error --fail-on-issues
  okta-ruleset scan-all ./infra --recursive --format sarif -o results.sarif
  okta-ruleset generate-config -o .okta-ruleset.yaml
  okta-ruleset list-rules
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {OktaRulesetConstants.VERSION}")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # -- scan --------------------------------------------------------------
    scan_p = subparsers.add_parser("scan", help="Check a single Terraform module")
    scan_p.add_argument("module_directory", help="Path to module directory")
    _add_common_scan_flags(scan_p)

    # -- scan-all ----------------------------------------------------------
    scan_all_p = subparsers.add_parser("scan-all", help="Check every module under a directory")
    scan_all_p.add_argument("directory", help="Directory containing modules")
    scan_all_p.add_argument("--recursive", "-r", action="store_true", help="Recursively search for modules")
    _add_common_scan_flags(scan_all_p)

    # -- list-rules --------------------------------------------------------
    subparsers.add_parser("list-rules", help="List available rules")

    # -- generate-config ---------------------------------------------------
    gc_p = subparsers.add_parser("generate-config", help="Write the default ruleset config YAML")
    gc_p.add_argument("--output", "-o", default=".okta-ruleset.yaml", help="Output file path")

    # -- dispatch ----------------------------------------------------------
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return OktaRulesetConstants.EXIT_FAILURE

    try:
        env = Config.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return OktaRulesetConstants.EXIT_FAILURE
    _configure_logging(args, env)
    if getattr(args, "format", "summary") is None:
        args.format = env.output_format if env.output_format in ("summary", "json", "sarif") else "summary"

    dispatch = {
        "scan": scan_command,
        "scan-all": scan_all_command,
        "list-rules": list_rules_command,
        "generate-config": generate_config_command,
    }
    handler = dispatch.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return OktaRulesetConstants.EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
