"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~clientsmith.exceptions.ClientsmithError` subclass.
Build scripts can inspect the exit code to tell an authoring mistake in the
definition file apart from an environment problem without parsing stderr.

Example::

    $ clientsmith generate api.yaml
    $ echo $?
    7   # EXIT_SPECIFICATION_ERROR -- the definition file is malformed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPECIFICATION_ERROR = 7
"""The API definition could not be loaded or contains an invalid value."""

EXIT_EVALUATION_ERROR = 8
"""A validation expression could not be turned into a JSON Schema."""
