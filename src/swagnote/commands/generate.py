"""``swagnote generate`` -- build the Swagger document and write it out.

Configuration is resolved by :func:`~swagnote.config.resolve_config`
(flags > environment > project file > defaults). Diagnostics are printed
to stderr as warnings and errors. With ``--strict`` any error diagnostic
aborts the command with :data:`~swagnote.exit_codes.EXIT_RESOLUTION_ERROR`
and nothing is written. ``--output -`` prints the document to stdout.
"""

from __future__ import annotations

from typing import Optional

import typer

from swagnote.config import resolve_config
from swagnote.exceptions import InvalidUsageError, ResolutionError, SwagnoteError
from swagnote.generator import Generator
from swagnote.models import GenerationResult, GeneratorConfig
from swagnote.output import debug, diagnostics, error, print_data, success
from swagnote.writer import render, write_document


def run_generator(config: GeneratorConfig) -> GenerationResult:
    """Run the generator for *config* and print its diagnostics.

    Raises:
        InvalidUsageError: If no API package is configured.
        SwagnoteError: For fatal environment and configuration problems.
    """
    if not config.api_packages:
        raise InvalidUsageError(
            "No API package given. Pass --api-package or set SWAGNOTE_API_PACKAGE."
        )
    debug(f"Documenting {', '.join(config.api_packages)}")
    result = Generator(config).run()
    diagnostics(result.diagnostics)
    return result


def generate_command(
    api_package: Optional[list[str]] = typer.Option(
        None, "--api-package", "-a",
        help="Go package to document, sub-packages included. Repeat or comma-separate.",
    ),
    main_file: Optional[str] = typer.Option(
        None, "--main-file", "-m", help="Go file holding the document-level annotations."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output file path, or - for stdout."
    ),
    fmt: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: json or yaml (default: from extension)."
    ),
    controller_class: Optional[str] = typer.Option(
        None, "--controller-class", help="Regular expression matched against receiver types."
    ),
    ignore: Optional[str] = typer.Option(
        None, "--ignore", help="Regular expression of import paths to ignore."
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Fail without writing when any error is reported."
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Project config file (JSON or YAML)."
    ),
) -> None:
    """Generate a Swagger 2.0 document from annotated Go packages.

    Example::

        swagnote generate -a github.com/acme/api/controllers -m main.go -o swagger.json
    """
    try:
        config = resolve_config(
            cli_api_packages=api_package,
            cli_main_file=main_file,
            cli_output=output,
            cli_format=fmt,
            cli_controller_class=controller_class,
            cli_ignore=ignore,
            cli_strict=strict,
            config_file=config_file,
        )
        result = run_generator(config)
        if config.strict and result.errors:
            raise ResolutionError(
                f"{len(result.errors)} error(s) reported; document not written (--strict)"
            )

        if config.output_path == "-":
            print_data(render(result.document, config.output_format))
            return
        path = write_document(result.document, config.output_path, config.output_format)
    except SwagnoteError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(
        f"Wrote {path} ({len(result.document.paths)} paths, "
        f"{len(result.document.definitions)} definitions)"
    )
