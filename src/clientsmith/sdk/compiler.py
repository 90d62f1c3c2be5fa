"""Compile a :class:`~clientsmith.models.ClientSpec` into client source files.

The single public entry point is :func:`generate_client_sdk`. It walks the
client spec's groups in order and, for every operation:

1. binds a schema identifier (``<operation>_schema``) in the group's
   ``inputs/<group>.py`` module, either to the single variant's expression or
   to a dict of variant tag to expression;
2. sorts the operation's input fields into header, query, body and path
   buckets, dropping ``internal`` fields;
3. builds an :class:`~clientsmith.sdk.emitters.EndpointKey` per variant
   (streaming operations get a single key for their whole schema) and writes
   the same key into the endpoint registry (or the streaming registry) and
   the dispatch table;
4. for standard operations, builds the error union from the declared errors
   (``ServerError`` when none are declared) plus ``ParseError[<input>]``.

An input field with an unknown source aborts the whole compilation with a
:class:`~clientsmith.exceptions.SpecificationError`; no artifacts are returned
in that case.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from clientsmith.exceptions import SpecificationError
from clientsmith.models import ClientSpec, Operation, OperationKind
from clientsmith.openapi.evaluator import COMMON_NAME
from clientsmith.sdk.boilerplate import runtime_artifacts
from clientsmith.sdk.emitters import (
    DispatchTable,
    EndpointKey,
    EndpointRegistry,
    SchemaModule,
    StreamEndpointRegistry,
)
from clientsmith.sdk.naming import (
    pascal_case,
    py_literal,
    remove_duplicates,
    snake_case,
    to_lit_object,
)

logger = logging.getLogger(__name__)

DEFAULT_VARIANT = "json"
DEFAULT_ERROR = "ServerError"
DEFAULT_ENCODER = "json"
RELATIVE_COMMON_MODULE = ".."


@dataclass
class InputBuckets:
    """Input field names of one operation, by transport location."""

    headers: list[str] = field(default_factory=list)
    query: list[str] = field(default_factory=list)
    body: list[str] = field(default_factory=list)
    params: list[str] = field(default_factory=list)

    def as_arguments(self) -> str:
        """Render the buckets as keyword arguments of an encoder call."""
        return (
            f"input_headers={py_literal(self.headers)}, "
            f"input_query={py_literal(self.query)}, "
            f"input_body={py_literal(self.body)}, "
            f"input_params={py_literal(self.params)}"
        )


def classify_inputs(operation: Operation) -> InputBuckets:
    """Sort the input fields of *operation* into transport buckets.

    Raises:
        SpecificationError: If a field declares an unknown source.
    """
    buckets = InputBuckets()
    for name, prop in operation.inputs.items():
        if prop.source in ("headers", "header"):
            buckets.headers.append(name)
        elif prop.source == "query":
            buckets.query.append(name)
        elif prop.source == "body":
            buckets.body.append(name)
        elif prop.source == "path":
            buckets.params.append(name)
        elif prop.source == "internal":
            continue
        else:
            raise SpecificationError(
                f"Unknown source {prop.source} in {name} "
                f"{json.dumps(prop.model_dump(by_alias=True))} in {operation.name}"
            )
    return buckets


def endpoint_keys(operation: Operation) -> list[tuple[str, EndpointKey]]:
    """Return ``(variant, key)`` for every schema variant of *operation*.

    The variant prefix is part of the key only when the operation declares
    several variants and the variant is not the default ``json`` one.
    """
    has_variants = len(operation.schemas) > 1
    keys = []
    for variant in operation.schemas:
        prefix = variant if has_variants and variant != DEFAULT_VARIANT else ""
        keys.append((variant, EndpointKey(prefix, operation.method.value, operation.path)))
    return keys


def generate_client_sdk(spec: ClientSpec) -> dict[str, str]:
    """Generate the client source files for *spec*.

    Args:
        spec: The validated client spec.

    Returns:
        A mapping from relative file path (``inputs/pets.py``,
        ``endpoints.py``, ...) to file contents, including the runtime
        modules from :func:`~clientsmith.sdk.boilerplate.runtime_artifacts`.

    Raises:
        SpecificationError: If an operation input has an unknown source.

    Example::

        artifacts = generate_client_sdk(definition)
        write_artifacts(artifacts, "./sdk")
    """
    registry = EndpointRegistry()
    stream_registry = StreamEndpointRegistry()
    dispatch = DispatchTable()
    modules: dict[str, SchemaModule] = {}
    shared_names: list[str] = []
    errors: list[str] = []
    owners: dict[str, str] = {}

    for group, operations in spec.groups.items():
        module_name = snake_case(group)
        modules[module_name] = SchemaModule(group)
        group_import = f"from .inputs import {module_name}"
        registry.add_import(group_import)
        stream_registry.add_import(group_import)
        dispatch.add_import(group_import)

        for operation in operations:
            schema_name = snake_case(f"{operation.name} schema")
            modules[module_name].add_schema(schema_name, _schema_code(operation))
            shared_names.extend(
                named.name for item in operation.imports for named in item.named_imports
            )
            schema_ref = f"{module_name}.{schema_name}"
            buckets = classify_inputs(operation)
            output_module = f".outputs.{snake_case(operation.name)}"

            if operation.kind == OperationKind.STREAM:
                stream_registry.add_import(
                    f"from {output_module} import {pascal_case(operation.name)}"
                )
                key = EndpointKey("", operation.method.value, operation.path)
                _claim_key(owners, key, operation.name)
                stream_registry.add_endpoint(
                    key,
                    f"StreamEndpoint(input={schema_ref}, output={operation.output.use})",
                )
                dispatch.add_endpoint(
                    key, _dispatch_entry(key, schema_ref, DEFAULT_ENCODER, buckets)
                )
                logger.debug("Compiled stream operation %s", operation.name)
                continue

            registry.add_import(f"from {output_module} import {operation.output.import_}")
            declared_errors = operation.errors or [DEFAULT_ERROR]
            errors.extend(declared_errors)
            has_variants = len(operation.schemas) > 1
            encoder = operation.content_type or DEFAULT_ENCODER
            for variant, key in endpoint_keys(operation):
                _claim_key(owners, key, operation.name)
                input_ref = f"{schema_ref}[{py_literal(variant)}]" if has_variants else schema_ref
                error_union = ", ".join([*declared_errors, f"ParseError[{input_ref}]"])
                registry.add_endpoint(
                    key,
                    f"Endpoint(input={input_ref}, output={operation.output.use}, "
                    f"error=Union[{error_union}])",
                )
                dispatch.add_endpoint(key, _dispatch_entry(key, input_ref, encoder, buckets))
            logger.debug("Compiled operation %s", operation.name)

    unique_errors = remove_duplicates(errors)
    if unique_errors:
        registry.add_import(f"from .response import {', '.join(unique_errors)}")

    shared_lines = _shared_import_lines(spec, remove_duplicates(shared_names))
    artifacts: dict[str, str] = {}
    for module_name, module in modules.items():
        for line in shared_lines:
            module.add_import(line)
        artifacts[f"inputs/{module_name}.py"] = module.complete()

    artifacts.update(runtime_artifacts(spec))
    artifacts["schemas.py"] = dispatch.complete()
    artifacts["endpoints.py"] = registry.complete()
    artifacts["stream_endpoints.py"] = stream_registry.complete()
    logger.info("Generated %d client artifacts", len(artifacts))
    return artifacts


def _schema_code(operation: Operation) -> str:
    if len(operation.schemas) == 1:
        return next(iter(operation.schemas.values()))
    return to_lit_object(operation.schemas)


def _claim_key(owners: dict[str, str], key: EndpointKey, operation_name: str) -> None:
    """Record *operation_name* as the owner of *key*, warning on a collision."""
    rendered = str(key)
    previous = owners.get(rendered)
    if previous is not None:
        logger.warning(
            "Endpoint %s of operation %s replaces the one of operation %s",
            rendered,
            operation_name,
            previous,
        )
    owners[rendered] = operation_name


def _dispatch_entry(
    key: EndpointKey, schema_ref: str, encoder: str, buckets: InputBuckets
) -> str:
    return (
        "Dispatch(\n"
        f"        schema={schema_ref},\n"
        "        to_request=lambda payload, init: to_request(\n"
        f"            {py_literal(str(key))},\n"
        f"            {encoder}(payload, {buckets.as_arguments()}),\n"
        "            init,\n"
        "        ),\n"
        "    )"
    )


def _shared_import_lines(spec: ClientSpec, names: list[str]) -> list[str]:
    """Import lines binding the shared-definitions module in schema modules.

    Without a ``common_module`` the shared definitions are expected in a
    ``common`` module next to the generated ``inputs`` package.
    """
    lines = []
    if spec.common_module:
        if names:
            lines.append(f"from {spec.common_module} import {', '.join(names)}")
        lines.append(f"import {spec.common_module} as {COMMON_NAME}")
    elif names:
        lines.append(f"from {RELATIVE_COMMON_MODULE}{COMMON_NAME} import {', '.join(names)}")
    return lines
