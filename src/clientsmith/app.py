"""Typer application and CLI entry point for clientsmith.

Two commands share one pipeline: a definition file is loaded into an
:class:`~clientsmith.models.ApiDefinition`, then

* ``clientsmith openapi`` feeds its routes through
  :class:`~clientsmith.openapi.Paths` and prints (or writes) the OpenAPI
  document, and
* ``clientsmith generate`` compiles its groups with
  :func:`~clientsmith.sdk.generate_client_sdk` and writes the client package.

Commands turn :class:`~clientsmith.exceptions.ClientsmithError` into a clean
error message and the error's exit code. :func:`main` is the console-script
entry point declared in ``pyproject.toml``.

See Also:
    :mod:`clientsmith.config`: Output settings resolution.
    :mod:`clientsmith.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from clientsmith import __version__
from clientsmith.exceptions import ClientsmithError
from clientsmith.exit_codes import EXIT_GENERIC_FAILURE

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="clientsmith",
    help="Build OpenAPI documents and typed Python clients from API definitions.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"clientsmith {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Route the ``clientsmith`` loggers to a Rich handler on stderr.

    Replaces any handler installed by an earlier call, so repeated CLI
    invocations in one process do not duplicate log lines.
    """
    package_logger = logging.getLogger("clientsmith")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~clientsmith.output.OutputManager` and the
    log handler from the CLI flags.
    """
    from clientsmith.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose=verbose, no_color=no_color)


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Report a :class:`ClientsmithError` and exit with its code."""
    from clientsmith.output import error

    try:
        yield
    except ClientsmithError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@app.command("generate")
def generate_command(
    definition: str = typer.Argument(..., help="Definition file, URL, or '-' for stdin."),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Directory for the generated client."
    ),
    common_module: Optional[str] = typer.Option(
        None, "--common-module", help="Importable module with shared definitions."
    ),
    name: Optional[str] = typer.Option(None, "--name", help="Client name."),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="List the files without writing them."
    ),
) -> None:
    """Generate the client package for DEFINITION.

    Example::

        clientsmith generate petstore.yaml --output ./petstore_client
    """
    from clientsmith.config import resolve_config, write_artifacts
    from clientsmith.loader import load_definition
    from clientsmith.output import debug, print_table, success, warning
    from clientsmith.sdk import generate_client_sdk

    with _handle_errors():
        config = resolve_config(
            cli_output=output, cli_common_module=common_module, cli_name=name
        )
        api = load_definition(definition)
        overrides: dict[str, Any] = {}
        if config.common_module is not None:
            overrides["common_module"] = config.common_module
        if config.name is not None:
            overrides["name"] = config.name
        api = api.model_copy(update=overrides)
        if not api.groups:
            warning(f"{definition} declares no groups; only the runtime modules are generated")

        artifacts = generate_client_sdk(api)
        if dry_run:
            rows = [[path, str(len(content.encode("utf-8")))] for path, content in artifacts.items()]
            print_table(["File", "Bytes"], rows, title=f"Dry run: {config.output}")
            return

        written = write_artifacts(artifacts, config.output)
        for path in written:
            debug(f"Wrote {path}")
        success(f"Generated {len(written)} files in {config.output}")


@app.command("openapi")
def openapi_command(
    definition: str = typer.Argument(..., help="Definition file, URL, or '-' for stdin."),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the document to this file instead of stdout."
    ),
) -> None:
    """Build the OpenAPI 3.1 document for DEFINITION.

    Example::

        clientsmith openapi petstore.yaml -o openapi.json
    """
    from clientsmith.config import resolve_config, write_file
    from clientsmith.loader import load_definition
    from clientsmith.openapi import Paths, build_document
    from clientsmith.output import print_json, success, warning

    with _handle_errors():
        config = resolve_config()
        api = load_definition(definition)
        if not api.routes:
            warning(f"{definition} declares no routes; the document has no paths")
        paths = Paths(common_module=config.common_module or api.common_module)
        for route in api.routes:
            paths.add_route(route)
        document = build_document(
            asyncio.run(paths.get_paths()),
            title=api.title,
            version=api.version,
            description=api.description,
            servers=api.servers,
        )

        target = output or config.openapi_output
        if target is None:
            print_json(document)
            return
        write_file(Path(target), json.dumps(document, indent=2, ensure_ascii=False) + "\n")
        success(f"Wrote OpenAPI document to {target}")


def _setup_signal_handlers() -> None:
    def _handler(signum: int, frame: Any) -> None:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``clientsmith`` console script.

    Unhandled :class:`~clientsmith.exceptions.ClientsmithError` instances exit
    with the error's ``exit_code``. Anything else is reported as an
    unexpected error, with the traceback logged at debug level.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    from clientsmith.output import error

    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except ClientsmithError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        logger.debug("Unexpected error", exc_info=True)
        error(f"Unexpected error: {exc}. Re-run with --verbose for the traceback.")
        sys.exit(EXIT_GENERIC_FAILURE)
