"""Exception hierarchy for clientsmith.

All exceptions inherit from :class:`ClientsmithError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`clientsmith.exit_codes`.
The top-level error handler in :func:`clientsmith.app.main` catches
``ClientsmithError`` and exits with the appropriate code.

Generation has no partial-output mode: any of these errors raised while
building the document or the client aborts the run before a file is written.

Subclass hierarchy::

    ClientsmithError (exit 1)
    +-- InvalidUsageError    (exit 2)
    +-- SpecificationError   (exit 7)
    +-- EvaluationError      (exit 8)
    +-- ConfigError          (exit 1)
"""

from clientsmith.exit_codes import (
    EXIT_EVALUATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPECIFICATION_ERROR,
)


class ClientsmithError(Exception):
    """Base exception for all clientsmith errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`clientsmith.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ClientsmithError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class SpecificationError(ClientsmithError):
    """Raised when the API definition is malformed.

    Covers unreadable definition files, pydantic validation failures and
    unknown input sources met while compiling the client. The message names
    the offending field and operation.
    """

    exit_code = EXIT_SPECIFICATION_ERROR


class EvaluationError(ClientsmithError):
    """Raised when a validation expression cannot be evaluated to a JSON Schema."""

    exit_code = EXIT_EVALUATION_ERROR


class ConfigError(ClientsmithError):
    """Raised for configuration problems (invalid project config, unwritable output)."""

    exit_code = EXIT_GENERIC_FAILURE
