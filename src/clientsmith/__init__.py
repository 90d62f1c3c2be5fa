"""clientsmith -- Build OpenAPI documents and typed Python clients from API definitions.

This package takes a structured description of an HTTP API (operations grouped
by feature, each with parameters, validation expressions and response shapes)
and produces two things:

* an OpenAPI 3.1 description document, and
* the source of a typed Python client: validation-schema modules, an endpoint
  registry, a streaming-endpoint registry and a request-dispatch table.

Typical workflow::

    clientsmith openapi api.yaml -o openapi.json   # description document
    clientsmith generate api.yaml --output ./sdk   # client sources

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for definition files and configuration.
    loader: Load definition files from disk, URL or stdin.
    config: Generator configuration and artifact writing.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
    openapi: Structural types, schema serialization and the paths builder.
    sdk: The client artifact compiler.
"""

__version__ = "0.3.0"
