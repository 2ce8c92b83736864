"""Exception hierarchy for swagnote.

All exceptions inherit from :class:`SwagnoteError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`swagnote.exit_codes`.
The top-level error handler in :func:`swagnote.app.main` catches
``SwagnoteError`` and exits with the appropriate code.

Only environment and configuration errors are fatal during a run.
Resolution and annotation errors are caught by the generator and turned
into :class:`~swagnote.models.Diagnostic` entries so that one bad
annotation does not suppress documentation for the rest of the codebase.

Subclass hierarchy::

    SwagnoteError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- EnvironmentError_      (exit 3)
    +-- ResolutionError        (exit 4)
    |   +-- PackageNotFoundError
    |   +-- TypeResolutionError
    +-- AnnotationSyntaxError  (exit 5)
    +-- ConfigError            (exit 6)
"""

from __future__ import annotations

from swagnote.exit_codes import (
    EXIT_ANNOTATION_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_ENVIRONMENT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_RESOLUTION_ERROR,
)


class SwagnoteError(Exception):
    """Base exception for all swagnote errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SwagnoteError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class EnvironmentError_(SwagnoteError):
    """Raised when a search root or the main API file is missing or unreadable.

    Named with a trailing underscore to avoid shadowing the built-in
    ``EnvironmentError`` alias of ``OSError``.
    """

    exit_code = EXIT_ENVIRONMENT_ERROR


class ResolutionError(SwagnoteError):
    """Base class for package and type lookup failures."""

    exit_code = EXIT_RESOLUTION_ERROR


class PackageNotFoundError(ResolutionError):
    """Raised when a package identifier has no location under any search root."""

    def __init__(self, package: str):
        super().__init__(f"Can not find package {package}")
        self.package = package


class TypeResolutionError(ResolutionError):
    """Raised when a type name cannot be found in its package or its imports."""


class AnnotationSyntaxError(SwagnoteError):
    """Raised when a comment annotation does not match its tag grammar."""

    exit_code = EXIT_ANNOTATION_ERROR


class ConfigError(SwagnoteError):
    """Raised for configuration problems (invalid file, bad regular expression)."""

    exit_code = EXIT_CONFIG_ERROR
