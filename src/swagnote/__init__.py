"""swagnote -- Generate Swagger 2.0 documents from annotated Go source.

This package reads the comment annotations written above Go controller
methods (``@router``, ``@param``, ``@success`` ...) together with the Go
type declarations they reference, and folds them into a single OpenAPI 2.0
document: an info block, a path/method table and a deduplicated
``definitions`` graph.

Typical workflow::

    swagnote generate --api-package github.com/acme/api/controllers \\
        --main-file main.go -o swagger.json

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models for the output document, diagnostics and config.
    config: Project config loading and precedence resolution.
    generator: Orchestrates one documentation run.
    document: Path table, tag catalogue and definitions assembly.
    packages: Package location cache and import graph.
    schema: Type/schema resolution engine.
    annotations: Comment annotation grammar and parsers.
    source: Go source lexer, declaration scanner and providers.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
