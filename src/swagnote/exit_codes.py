"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~swagnote.exceptions.SwagnoteError` subclass.
CI scripts can inspect the exit code to tell a broken environment apart
from an annotation that failed to resolve.

Example::

    $ swagnote generate --strict
    $ echo $?
    4   # EXIT_RESOLUTION_ERROR -- a referenced type could not be found
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_ENVIRONMENT_ERROR = 3
"""A required search root or the main API file is missing or unreadable."""

EXIT_RESOLUTION_ERROR = 4
"""A package or type referenced by an annotation could not be resolved."""

EXIT_ANNOTATION_ERROR = 5
"""An annotation line did not match its grammar."""

EXIT_CONFIG_ERROR = 6
"""The configuration file or a filter expression is invalid."""
