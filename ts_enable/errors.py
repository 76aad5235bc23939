# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
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

"""Error types for ts-enable.

Most failure modes in ts-enable are states, not exceptions: a missing
installer, a missing query or a failed installation end up as values in
the availability registry. The exceptions below cover the remaining cases
that a caller must see, such as an unreadable configuration file.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Categories of errors for classification and handling."""

    # Configuration errors
    CONFIG_INVALID = "config_invalid"
    CONFIG_MISSING = "config_missing"

    # Installer errors
    INSTALLER_MISSING = "installer_missing"
    INSTALL_FAILED = "install_failed"

    # User errors
    INVALID_COMMAND = "invalid_command"

    UNKNOWN = "unknown"


class TSEnableError(Exception):
    """Base exception for all ts-enable errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        details: Optional[Dict[str, Any]] = None,
        recovery_hint: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}
        self.recovery_hint = recovery_hint
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.message,
            "category": self.category.value,
            "recovery_hint": self.recovery_hint,
            "details": self.details,
        }

    def __str__(self) -> str:
        result = self.message
        if self.recovery_hint:
            result += f"\nRecovery hint: {self.recovery_hint}"
        return result


class ConfigurationError(TSEnableError):
    """Configuration file could not be read or failed validation."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.CONFIG_INVALID,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            category=category,
            details={"path": path} if path else {},
            recovery_hint="Check the YAML syntax and field names of the configuration file",
            cause=cause,
        )
        self.path = path


class InstallerError(TSEnableError):
    """Grammar installer is missing, or raised while installing a language."""

    def __init__(
        self,
        message: str,
        languages: Optional[list] = None,
        category: ErrorCategory = ErrorCategory.INSTALL_FAILED,
        recovery_hint: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            category=category,
            details={"languages": list(languages or [])},
            recovery_hint=recovery_hint,
            cause=cause,
        )
        self.languages = list(languages or [])


class CommandError(TSEnableError):
    """Unknown sub-command passed to the command dispatcher."""

    def __init__(self, command: str, valid_commands: Optional[list] = None):
        valid = list(valid_commands or [])
        super().__init__(
            f'Invalid sub-command "{command}"',
            category=ErrorCategory.INVALID_COMMAND,
            details={"command": command, "valid_commands": valid},
            recovery_hint=f"Use one of: {', '.join(valid)}" if valid else None,
        )
        self.command = command
