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
SARIF format reporter for GitHub Code Scanning integration.

Implements SARIF 2.1.0 specification for lint results.
https://docs.oasis-open.org/sarif/sarif/v2.1.0/sarif-v2.1.0.html
"""

import json
import os
from typing import Any

from ...core.models import Issue, Report, ScanResult, Severity


class SARIFReporter:
    """Generates SARIF 2.1.0 format reports for GitHub Code Scanning."""

    SARIF_VERSION = "2.1.0"
    SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"

    # Map severity to SARIF levels
    SEVERITY_TO_LEVEL = {
        Severity.ERROR: "error",
        Severity.WARNING: "warning",
        Severity.NOTICE: "note",
    }

    def __init__(self, tool_name: str = "okta-ruleset", tool_version: str = "0.1.0"):
        """
        Initialize SARIF reporter.

        Args:
            tool_name: Name of the linting tool
            tool_version: Version of the linting tool
        """
        self.tool_name = tool_name
        self.tool_version = tool_version

    def generate_report(self, data: ScanResult | Report) -> str:
        """
        Generate SARIF report.

        Args:
            data: ScanResult or Report object

        Returns:
            SARIF JSON string
        """
        if isinstance(data, ScanResult):
            results = [data]
            timestamp = data.timestamp
        else:
            results = data.scan_results
            timestamp = data.timestamp

        all_issues = [issue for result in results for issue in result.issues]
        sarif_results = []
        for result in results:
            sarif_results.extend(self._convert_issues(result.issues, result.module_directory))

        sarif = {
            "$schema": self.SARIF_SCHEMA,
            "version": self.SARIF_VERSION,
            "runs": [
                {
                    "tool": self._create_tool_component(self._extract_rules(all_issues)),
                    "results": sarif_results,
                    "invocations": [
                        {
                            "executionSuccessful": True,
                            "endTimeUtc": timestamp.isoformat() + "Z",
                        }
                    ],
                }
            ],
        }
        return json.dumps(sarif, indent=2, default=str)

    def _create_tool_component(self, rules: list[dict[str, Any]]) -> dict[str, Any]:
        """Create the tool component with rules."""
        return {
            "driver": {
                "name": self.tool_name,
                "version": self.tool_version,
                "rules": rules,
            }
        }

    def _extract_rules(self, issues: list[Issue]) -> list[dict[str, Any]]:
        """Extract unique rules from issues."""
        seen_rules: set[str] = set()
        rules = []

        for issue in issues:
            if issue.rule_name in seen_rules:
                continue
            seen_rules.add(issue.rule_name)

            rule: dict[str, Any] = {
                "id": issue.rule_name,
                "name": issue.rule_name.replace("_", " ").title(),
                "shortDescription": {"text": issue.message},
                "defaultConfiguration": {"level": self.SEVERITY_TO_LEVEL.get(issue.severity, "warning")},
            }
            if issue.link:
                rule["helpUri"] = issue.link
            rules.append(rule)

        return rules

    def _convert_issues(self, issues: list[Issue], base_path: str) -> list[dict[str, Any]]:
        """Convert issues to SARIF results."""
        results = []

        for issue in issues:
            rng = issue.range
            try:
                uri = os.path.relpath(os.path.abspath(rng.filename), base_path)
            except ValueError:
                uri = rng.filename

            results.append(
                {
                    "ruleId": issue.rule_name,
                    "level": self.SEVERITY_TO_LEVEL.get(issue.severity, "warning"),
                    "message": {"text": issue.message},
                    "locations": [
                        {
                            "physicalLocation": {
                                "artifactLocation": {
                                    "uri": uri.replace(os.sep, "/"),
                                    "uriBaseId": "%SRCROOT%",
                                },
                                "region": {
                                    "startLine": rng.start.line,
                                    "startColumn": rng.start.column,
                                    "endLine": rng.end.line,
                                    "endColumn": rng.end.column,
                                },
                            }
                        }
                    ],
                }
            )

        return results

    def save_report(self, data: ScanResult | Report, output_path: str):
        """
        Save SARIF report to file.

        Args:
            data: ScanResult or Report object
            output_path: Path to save file
        """
        report_json = self.generate_report(data)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(report_json)
