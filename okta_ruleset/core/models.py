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
Data models for Terraform configuration content and lint issues.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Severity levels for lint issues."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    NOTICE = "NOTICE"

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        """Parse a severity name case-insensitively."""
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unknown severity '{value}'. Available: {', '.join(s.value for s in cls)}") from None


@dataclass(frozen=True)
class SourcePos:
    """A position in a source file (1-based line/column, 0-based byte offset)."""

    line: int
    column: int
    byte: int = 0


@dataclass(frozen=True)
class SourceRange:
    """A span of source text used to locate diagnostics."""

    filename: str
    start: SourcePos
    end: SourcePos

    def __str__(self) -> str:
        return f"{self.filename}:{self.start.line},{self.start.column}-{self.end.line},{self.end.column}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "start": {"line": self.start.line, "column": self.start.column, "byte": self.start.byte},
            "end": {"line": self.end.line, "column": self.end.column, "byte": self.end.byte},
        }


@dataclass(frozen=True)
class Expression:
    """An unevaluated configuration expression.

    ``value`` is the decoded JSON value exactly as authored (a string
    template, number, bool, list, object or ``None``). Only the host runner
    knows how to turn it into a concrete value.
    """

    value: Any
    range: SourceRange


@dataclass(frozen=True)
class Attribute:
    """An attribute explicitly set on a block."""

    name: str
    expr: Expression
    range: SourceRange


@dataclass(frozen=True)
class AttributeSchema:
    name: str
    required: bool = False


@dataclass(frozen=True)
class BodySchema:
    """Restricts which attributes a content query populates."""

    attributes: list[AttributeSchema] = field(default_factory=list)

    @property
    def attribute_names(self) -> set[str]:
        return {a.name for a in self.attributes}


@dataclass
class BodyContent:
    """Attributes and nested blocks returned from a content query.

    An attribute appears in ``attributes`` only when it was authored in the
    configuration and requested by the schema.
    """

    attributes: dict[str, Attribute] = field(default_factory=dict)
    blocks: list["Block"] = field(default_factory=list)


@dataclass
class Block:
    """A declared block such as ``resource "okta_group" "admins"``."""

    type: str
    labels: list[str]
    body: BodyContent
    def_range: SourceRange

    @property
    def address(self) -> str:
        """Terraform-style address, e.g. ``okta_group.admins``."""
        return ".".join(self.labels)


@dataclass(frozen=True)
class Issue:
    """A lint issue emitted by a rule."""

    rule_name: str
    message: str
    range: SourceRange
    severity: Severity
    link: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert issue to dictionary."""
        return {
            "rule": self.rule_name,
            "message": self.message,
            "severity": self.severity.value,
            "link": self.link,
            "range": self.range.to_dict(),
        }


@dataclass
class ScanResult:
    """Results from checking a single Terraform module directory."""

    module_directory: str
    issues: list[Issue] = field(default_factory=list)
    rules_run: list[str] = field(default_factory=list)
    scan_duration_seconds: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def has_errors(self) -> bool:
        """Check if any ERROR-severity issue was emitted."""
        return any(i.severity == Severity.ERROR for i in self.issues)

    @property
    def is_clean(self) -> bool:
        return not self.issues

    @property
    def max_severity(self) -> Severity | None:
        """Get the highest severity level found, or ``None`` for a clean module."""
        for severity in (Severity.ERROR, Severity.WARNING, Severity.NOTICE):
            if any(i.severity == severity for i in self.issues):
                return severity
        return None

    def get_issues_by_severity(self, severity: Severity) -> list[Issue]:
        """Get all issues of a specific severity."""
        return [i for i in self.issues if i.severity == severity]

    def to_dict(self) -> dict[str, Any]:
        """Convert scan result to dictionary."""
        max_severity = self.max_severity
        return {
            "module_path": self.module_directory,
            "is_clean": self.is_clean,
            "max_severity": max_severity.value if max_severity else None,
            "issues_count": len(self.issues),
            "issues": [i.to_dict() for i in self.issues],
            "rules_run": self.rules_run,
            "scan_duration_seconds": self.scan_duration_seconds,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Report:
    """Aggregated report from checking one or more module directories."""

    scan_results: list[ScanResult] = field(default_factory=list)
    total_modules_scanned: int = 0
    total_issues: int = 0
    error_count: int = 0
    warning_count: int = 0
    notice_count: int = 0
    clean_count: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def add_scan_result(self, result: ScanResult):
        """Add a scan result and update counters."""
        self.scan_results.append(result)
        self.total_modules_scanned += 1
        self.total_issues += len(result.issues)

        for issue in result.issues:
            if issue.severity == Severity.ERROR:
                self.error_count += 1
            elif issue.severity == Severity.WARNING:
                self.warning_count += 1
            elif issue.severity == Severity.NOTICE:
                self.notice_count += 1

        if result.is_clean:
            self.clean_count += 1

    @property
    def issues(self) -> list[Issue]:
        return [i for r in self.scan_results for i in r.issues]

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "summary": {
                "total_modules_scanned": self.total_modules_scanned,
                "total_issues": self.total_issues,
                "clean_modules": self.clean_count,
                "issues_by_severity": {
                    "error": self.error_count,
                    "warning": self.warning_count,
                    "notice": self.notice_count,
                },
                "timestamp": self.timestamp.isoformat(),
            },
            "results": [result.to_dict() for result in self.scan_results],
        }


@dataclass
class ResourceDecl:
    """A ``resource`` declaration as read from a ``*.tf.json`` file.

    ``attributes`` holds every attribute authored in the resource body;
    content queries filter it down to what a rule asks for.
    """

    type: str
    name: str
    attributes: dict[str, Attribute]
    def_range: SourceRange

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"


@dataclass
class Module:
    """A loaded Terraform module (one directory of configuration files)."""

    directory: str
    files: list[str] = field(default_factory=list)
    resources: list[ResourceDecl] = field(default_factory=list)
    variable_defaults: dict[str, Any] = field(default_factory=dict)
    variable_values: dict[str, Any] = field(default_factory=dict)

    def resources_of_type(self, resource_type: str) -> list[ResourceDecl]:
        """Return resources of *resource_type* in declaration order."""
        return [r for r in self.resources if r.type == resource_type]
