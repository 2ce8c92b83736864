"""Inspect commands -- summarise the generated document without writing it.

Provides the ``swagnote inspect`` sub-command group:

* ``paths`` -- one row per operation: method, path, tags and summary.
* ``definitions`` -- one row per definitions entry: id, type, required
  names and up to five property names.

Both run the generator with the same configuration resolution as
``swagnote generate`` and print through the active output format (Rich
table, plain TSV or JSON).
"""

from __future__ import annotations

from typing import Optional

import typer

from swagnote.commands.generate import run_generator
from swagnote.config import resolve_config
from swagnote.exceptions import SwagnoteError
from swagnote.models import HTTPMethod, SwaggerDocument
from swagnote.output import error, info, print_table

inspect_app = typer.Typer(no_args_is_help=True)


def _build_document(
    api_package: Optional[list[str]],
    main_file: Optional[str],
    controller_class: Optional[str],
    ignore: Optional[str],
    config_file: Optional[str],
) -> SwaggerDocument:
    """Resolve the configuration and run the generator.

    Raises:
        typer.Exit: With the error's exit code on any fatal problem.
    """
    try:
        config = resolve_config(
            cli_api_packages=api_package,
            cli_main_file=main_file,
            cli_controller_class=controller_class,
            cli_ignore=ignore,
            config_file=config_file,
        )
        return run_generator(config).document
    except SwagnoteError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


_API_PACKAGE = typer.Option(None, "--api-package", "-a", help="Go package to document.")
_MAIN_FILE = typer.Option(None, "--main-file", "-m", help="Go file with document-level annotations.")
_CONTROLLER_CLASS = typer.Option(None, "--controller-class", help="Receiver type regular expression.")
_IGNORE = typer.Option(None, "--ignore", help="Regular expression of import paths to ignore.")
_CONFIG = typer.Option(None, "--config", "-c", help="Project config file.")


@inspect_app.command("paths")
def inspect_paths(
    api_package: Optional[list[str]] = _API_PACKAGE,
    main_file: Optional[str] = _MAIN_FILE,
    controller_class: Optional[str] = _CONTROLLER_CLASS,
    ignore: Optional[str] = _IGNORE,
    config_file: Optional[str] = _CONFIG,
) -> None:
    """List every documented operation.

    Example::

        swagnote inspect paths -a github.com/acme/api/controllers
    """
    document = _build_document(api_package, main_file, controller_class, ignore, config_file)
    if not document.paths:
        info("No operations documented.")
        return

    headers = ["Method", "Path", "Tags", "Summary"]
    rows: list[list[str]] = []
    for path, item in sorted(document.paths.items()):
        for method in HTTPMethod:
            operation = item.operation(method)
            if operation is None:
                continue
            rows.append([
                method.value.upper(),
                path,
                ", ".join(operation.tags) or "-",
                operation.summary or "-",
            ])

    title = document.info.title or "API"
    print_table(headers, rows, title=f"{title} -- Paths ({len(rows)})")


@inspect_app.command("definitions")
def inspect_definitions(
    api_package: Optional[list[str]] = _API_PACKAGE,
    main_file: Optional[str] = _MAIN_FILE,
    controller_class: Optional[str] = _CONTROLLER_CLASS,
    ignore: Optional[str] = _IGNORE,
    config_file: Optional[str] = _CONFIG,
) -> None:
    """List every definitions entry with its properties.

    Example::

        swagnote inspect definitions --json
    """
    document = _build_document(api_package, main_file, controller_class, ignore, config_file)
    if not document.definitions:
        info("No definitions produced.")
        return

    headers = ["Definition", "Type", "Required", "Properties"]
    rows: list[list[str]] = []
    for name, schema in sorted(document.definitions.items()):
        prop_names = list(schema.properties)
        props = ", ".join(prop_names[:5])
        if len(prop_names) > 5:
            props += "..."
        rows.append([name, schema.type or "object", ", ".join(schema.required) or "-", props or "-"])

    print_table(headers, rows, title=f"Definitions ({len(rows)})")
