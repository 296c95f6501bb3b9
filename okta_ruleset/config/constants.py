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
Constants for okta-ruleset.
"""

try:
    from .._version import __version__ as PACKAGE_VERSION
except Exception:  # pragma: no cover
    PACKAGE_VERSION = "0.0.0-dev"


class OktaRulesetConstants:
    """Constants used throughout the ruleset."""

    VERSION = PACKAGE_VERSION
    TOOL_NAME = "okta-ruleset"

    # Default values
    DEFAULT_MAX_FILE_SIZE_MB = 10

    # CLI exit codes
    EXIT_OK = 0
    EXIT_FAILURE = 1
    EXIT_ISSUES = 2
