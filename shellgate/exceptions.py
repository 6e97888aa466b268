"""
Custom exceptions for the Shell Gateway.
"""

# SPDX-License-Identifier: GPL-3.0-or-later


class ShellGateError(Exception):
    """Base exception for all Shell Gateway errors."""

    pass


class RequestMalformedError(ShellGateError):
    """Raised when a request is missing a required field."""

    def __init__(self, field_name: str, message: str = "") -> None:
        """Initialize the error."""
        super().__init__(message or f"{field_name} is required")
        self.field_name = field_name


class CommandRejectedError(ShellGateError):
    """Raised when a command or its arguments fail validation."""

    pass


class PathTraversalError(ShellGateError):
    """Raised when a mutating operation is given a path containing '..'."""

    def __init__(self, path: str) -> None:
        """Initialize the error."""
        super().__init__("Invalid path: path traversal not allowed")
        self.path = path


class PathResolutionError(ShellGateError):
    """Raised in strict mode when a path cannot be canonicalized."""

    pass


class PackagePolicyError(ShellGateError):
    """Raised when a package name or package manager is not permitted."""

    pass


class ConfigurationError(ShellGateError):
    """Raised when configuration is invalid."""

    pass
