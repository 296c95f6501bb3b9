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

"""API router for okta-ruleset endpoints.

Composable ``APIRouter`` that can be mounted in other FastAPI applications.
Parameters mirror the ``scan`` CLI command.
"""

import logging
import os
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from .. import __version__ as PACKAGE_VERSION
from ..core.exceptions import ConfigError, ModuleLoadError, RulesetError
from ..core.ruleset import RuleSet
from ..core.ruleset_config import RulesetConfig
from ..core.runner import ON_UNRESOLVED_CHOICES
from ..core.scanner import ModuleScanner

logger = logging.getLogger("okta_ruleset.api")

router = APIRouter()

# Environment-configurable allowlist of directories the API may access.
# When empty (default) any *resolved* absolute path is accepted.
_ALLOWED_ROOTS: list[Path] = [
    Path(p).resolve() for p in os.environ.get("OKTA_RULESET_ALLOWED_ROOTS", "").split(":") if p.strip()
]


def _validate_path(user_input: str, *, label: str = "path") -> Path:
    """Sanitize and validate a user-supplied filesystem path.

    Rejects null bytes, resolves symlinks, and enforces the optional
    OKTA_RULESET_ALLOWED_ROOTS allowlist.
    """
    if "\x00" in user_input:
        raise HTTPException(status_code=400, detail=f"Invalid {label}: null bytes are not allowed")

    resolved = Path(user_input).resolve()

    if _ALLOWED_ROOTS and not any(resolved == root or resolved.is_relative_to(root) for root in _ALLOWED_ROOTS):
        raise HTTPException(
            status_code=403,
            detail=f"Access denied: {label} is outside the allowed directories",
        )

    return resolved


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class ScanRequest(BaseModel):
    """Request model for checking a module."""

    module_directory: str = Field(..., description="Path to Terraform module directory")
    config: dict[str, Any] | None = Field(
        None, description="Ruleset configuration, merged over the built-in defaults"
    )
    variables: dict[str, Any] = Field(default_factory=dict, description="Input variable values")
    on_unresolved: str | None = Field(None, description="skip or error")


class IssueRange(BaseModel):
    filename: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int


class IssueModel(BaseModel):
    rule: str
    message: str
    severity: str
    link: str = ""
    range: IssueRange


class ScanResponse(BaseModel):
    """Response model for a module check."""

    module_directory: str
    is_clean: bool
    max_severity: str | None
    issues_count: int
    issues: list[IssueModel]
    rules_run: list[str]
    scan_duration_seconds: float
    timestamp: str


class HealthResponse(BaseModel):
    status: str
    version: str
    rules_available: list[str]


class RuleInfo(BaseModel):
    name: str
    severity: str
    enabled_by_default: bool
    link: str = ""


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/", response_model=dict)
async def root():
    """Root endpoint."""
    return {"service": "Okta Ruleset API", "version": PACKAGE_VERSION, "docs": "/docs", "health": "/health"}


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=PACKAGE_VERSION, rules_available=RuleSet().rule_names())


@router.get("/rules", response_model=list[RuleInfo])
async def list_rules():
    """List available rules with their defaults."""
    return [
        RuleInfo(name=r.name(), severity=r.severity().value, enabled_by_default=r.enabled(), link=r.link())
        for r in RuleSet().all_rules()
    ]


@router.post("/scan", response_model=ScanResponse)
async def scan_module(request: ScanRequest):
    """Check a single Terraform module."""
    import asyncio

    module_dir = _validate_path(request.module_directory, label="module_directory")

    if not module_dir.exists():
        raise HTTPException(status_code=404, detail=f"Module directory not found: {module_dir}")

    if not module_dir.is_dir():
        raise HTTPException(status_code=400, detail="module_directory must be a directory")

    try:
        config = RulesetConfig.from_dict(request.config) if request.config else RulesetConfig.default()
        if request.on_unresolved:
            if request.on_unresolved not in ON_UNRESOLVED_CHOICES:
                raise ConfigError(
                    f"Invalid on_unresolved '{request.on_unresolved}'. Available: {', '.join(ON_UNRESOLVED_CHOICES)}"
                )
            config.on_unresolved = request.on_unresolved
        scanner = ModuleScanner(config=config)
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))

    def run_scan():
        return scanner.scan_module(module_dir, variables=request.variables)

    try:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, run_scan)
    except ModuleLoadError as e:
        raise HTTPException(status_code=400, detail=f"Failed to load module: {e}")
    except RulesetError as e:
        raise HTTPException(status_code=422, detail=str(e))

    max_severity = result.max_severity
    return ScanResponse(
        module_directory=result.module_directory,
        is_clean=result.is_clean,
        max_severity=max_severity.value if max_severity else None,
        issues_count=len(result.issues),
        issues=[
            IssueModel(
                rule=i.rule_name,
                message=i.message,
                severity=i.severity.value,
                link=i.link,
                range=IssueRange(
                    filename=i.range.filename,
                    start_line=i.range.start.line,
                    start_column=i.range.start.column,
                    end_line=i.range.end.line,
                    end_column=i.range.end.column,
                ),
            )
            for i in result.issues
        ],
        rules_run=result.rules_run,
        scan_duration_seconds=result.scan_duration_seconds,
        timestamp=result.timestamp.isoformat(),
    )
