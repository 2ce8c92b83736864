"""Typer application and CLI entry point for swagnote.

The root callback installs the global :class:`~swagnote.output.OutputManager`
and routes the ``swagnote`` logger through a Rich handler on stderr. The
sub-commands live in :mod:`swagnote.commands`:

* ``swagnote generate`` -- build and write the Swagger document.
* ``swagnote inspect paths|definitions`` -- build the document and print a
  summary table instead of writing it.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. It maps :class:`~swagnote.exceptions.SwagnoteError`
to the error's exit code.
"""

from __future__ import annotations

import logging
import sys

import typer
from rich.logging import RichHandler

from swagnote import __version__
from swagnote.commands.generate import generate_command
from swagnote.commands.inspect import inspect_app
from swagnote.exceptions import SwagnoteError
from swagnote.exit_codes import EXIT_GENERIC_FAILURE
from swagnote.output import OutputFormat, OutputManager, error, set_output

app = typer.Typer(
    name="swagnote",
    help="Generate Swagger 2.0 documents from annotated Go source.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("generate")(generate_command)
app.add_typer(inspect_app, name="inspect", help="Summarise the generated document.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"swagnote {__version__}")
        raise typer.Exit()


def configure_logging(output: OutputManager, verbose: bool = False, quiet: bool = False) -> None:
    """Send ``swagnote.*`` log records to stderr through Rich.

    WARNING and above by default, DEBUG with ``--verbose``, ERROR only with
    ``--quiet``.
    """
    logger = logging.getLogger("swagnote")
    handler = RichHandler(
        console=output.stderr_console,
        show_time=False,
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING)
    logger.propagate = False


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Args:
        ctx: Typer invocation context.
        version: Print the version string and exit.
        json_output: Force JSON output for tables.
        plain_output: Force plain-text output for tables.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational messages.
        verbose: Enable debug messages and debug logging.
    """
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(output, verbose=verbose, quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def main() -> None:
    """CLI entry point invoked by the ``swagnote`` console script.

    :class:`~swagnote.exceptions.SwagnoteError` escaping a command exits
    with the error's ``exit_code``; anything else is logged with its
    traceback and exits with :data:`~swagnote.exit_codes.EXIT_GENERIC_FAILURE`.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except SwagnoteError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        logging.getLogger("swagnote").exception("Unexpected error")
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
