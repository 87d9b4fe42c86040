"""Custom exception hierarchy for gofuzzbuild."""

from __future__ import annotations


class GoFuzzBuildError(Exception):
    """Base exception for gofuzzbuild."""

    pass


class ConfigError(GoFuzzBuildError):
    """Raised when user input or configuration is invalid."""

    pass


class ResolveError(GoFuzzBuildError):
    """Raised when the package query fails or reports package errors."""

    pass


class GenerationError(GoFuzzBuildError):
    """Raised when the harness source cannot be written."""

    pass


class BuildError(GoFuzzBuildError):
    """Raised when the go build invocation fails."""

    pass
