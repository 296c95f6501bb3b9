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
Environment configuration for okta-ruleset.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .constants import OktaRulesetConstants


@dataclass
class Config:
    """
    Process-level settings, read from the environment.

    Rule-level behaviour lives in the YAML ruleset configuration; this class
    only says where that file is and how the tool should behave around it.
    """

    # Path to a ruleset YAML file (None → discover in the module, then defaults)
    config_file: str | None = None

    # skip | error; None keeps the value from the ruleset configuration
    on_unresolved: str | None = None

    # Logging
    log_level: str = "WARNING"

    # Output Options
    output_format: str = "summary"

    # Loader limits
    max_file_size_mb: int = OktaRulesetConstants.DEFAULT_MAX_FILE_SIZE_MB

    def __post_init__(self):
        """Load configuration from environment variables if not provided."""

        if self.config_file is None:
            self.config_file = os.getenv("OKTA_RULESET_CONFIG") or None

        if self.on_unresolved is None:
            if env_mode := os.getenv("OKTA_RULESET_ON_UNRESOLVED"):
                self.on_unresolved = env_mode.lower()

        # Log level from environment (only if still at default)
        if self.log_level == "WARNING":
            if env_level := os.getenv("OKTA_RULESET_LOG"):
                self.log_level = env_level.upper()

        if self.output_format == "summary":
            if env_format := os.getenv("OKTA_RULESET_FORMAT"):
                self.output_format = env_format.lower()

        if self.max_file_size_mb == OktaRulesetConstants.DEFAULT_MAX_FILE_SIZE_MB:
            if env_size := os.getenv("OKTA_RULESET_MAX_FILE_SIZE_MB"):
                try:
                    self.max_file_size_mb = int(env_size)
                except ValueError:
                    raise ValueError(f"OKTA_RULESET_MAX_FILE_SIZE_MB must be an integer, got {env_size!r}") from None

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        Returns:
            Config instance with values from environment
        """
        return cls()

    @classmethod
    def from_file(cls, config_file: Path) -> "Config":
        """
        Load configuration from .env file.

        Values already present in the environment take precedence.

        Args:
            config_file: Path to .env file

        Returns:
            Config instance
        """
        if config_file.exists():
            load_dotenv(config_file, override=False)

        return cls.from_env()
