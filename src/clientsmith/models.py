"""Canonical Pydantic models shared across all clientsmith modules.

This is the single source of truth for data shapes read from definition files
and configuration. The models fall into three groups:

**Description-document inputs** -- consumed by :class:`~clientsmith.openapi.paths.Paths`:
    :class:`HTTPMethod`, :class:`SemanticSource`, :class:`Selector`,
    :class:`ResponseItem`, and :class:`RouteDefinition`.

**Client-compiler inputs** -- consumed by
:func:`~clientsmith.sdk.compiler.generate_client_sdk`:
    :class:`OperationInput`, :class:`NamedImport`, :class:`Import`,
    :class:`OutputRef`, :class:`OperationKind`, :class:`Operation`,
    :class:`OptionSpec`, :class:`SecurityScheme`, and :class:`ClientSpec`.

**Top-level documents** -- :class:`ApiDefinition` (a whole definition file)
and :class:`GeneratorConfig` (output settings resolved by
:func:`~clientsmith.config.resolve_config`).

All models use Pydantic v2. Fields whose natural name collides with a Python
keyword or a ``BaseModel`` attribute (``schema``, ``import``, ``in``) are
declared with a trailing underscore and an alias, and accept both spellings.
"""

from __future__ import annotations

import enum
import keyword
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def check_module_path(value: Optional[str]) -> Optional[str]:
    """Reject a module name that cannot follow ``import`` in generated code."""
    if value is None:
        return value
    parts = value.split(".")
    if not all(part.isidentifier() and not keyword.iskeyword(part) for part in parts):
        raise ValueError(f"common_module must be a dotted module path, got {value!r}")
    return value


# --- Description-document inputs ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods an operation may be registered under."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    TRACE = "trace"
    HEAD = "head"


class SemanticSource(str, enum.Enum):
    """Where a :class:`Selector` reads its value from in the incoming request.

    ``query`` and ``queries`` both map to the OpenAPI ``query`` location,
    ``params`` to ``path`` and ``headers`` to ``header``. ``body`` is never a
    location parameter: it becomes a property of the synthesized request body.
    """

    QUERY = "query"
    QUERIES = "queries"
    BODY = "body"
    PARAMS = "params"
    HEADERS = "headers"


class Selector(BaseModel):
    """A single input-parameter binding of a route.

    ``against`` holds the validation expression that the
    :class:`~clientsmith.openapi.evaluator.Evaluator` turns into the
    parameter's JSON Schema.
    """

    name: str
    select: str = ""
    against: str
    source: SemanticSource
    nullable: bool = False
    required: bool = False


class ResponseItem(BaseModel):
    """One declared response of a route for a status code and content type.

    Several items may target the same ``(status_code, content_type)`` pair;
    :class:`~clientsmith.openapi.paths.Paths` merges them instead of
    overwriting.
    """

    model_config = ConfigDict(populate_by_name=True)

    status_code: str
    response_type: Any = Field(default=None, alias="response")
    content_type: str = "application/json"
    headers: list[str] = Field(default_factory=list)

    @field_validator("status_code", mode="before")
    @classmethod
    def _status_code_as_string(cls, value: Any) -> Any:
        # YAML reads unquoted status codes as integers
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("response_type", mode="before")
    @classmethod
    def _coerce_response_type(cls, value: Any) -> Any:
        from clientsmith.openapi.nodes import coerce_type_node

        return coerce_type_node(value)


class RouteDefinition(BaseModel):
    """A route as registered with :meth:`~clientsmith.openapi.paths.Paths.add_path`."""

    name: str
    path: str
    method: HTTPMethod
    selectors: list[Selector] = Field(default_factory=list)
    responses: list[ResponseItem] = Field(default_factory=list)
    source_file: str = ""
    tags: Optional[list[str]] = None
    description: Optional[str] = None


# --- Client-compiler inputs ---


class OperationInput(BaseModel):
    """Binding of one operation input field.

    ``source`` is kept as a free string on purpose: the compiler classifies
    it and reports unknown values with the field and operation name.
    """

    model_config = ConfigDict(populate_by_name=True)

    source: str
    schema_: str = Field(default="", alias="schema")


class NamedImport(BaseModel):
    """A name imported from the shared-definitions module."""

    name: str
    alias: Optional[str] = None
    is_type_only: bool = False


class Import(BaseModel):
    """An import statement an operation's validation expressions depend on."""

    module_specifier: str = ""
    is_type_only: bool = False
    default_import: Optional[str] = None
    named_imports: list[NamedImport] = Field(default_factory=list)
    namespace_import: Optional[str] = None


class OutputRef(BaseModel):
    """How the registry refers to an operation's output type.

    ``import_`` is the name imported from ``outputs/<operation>.py`` and
    ``use`` is the type expression written into the registry entry.
    """

    model_config = ConfigDict(populate_by_name=True)

    import_: str = Field(alias="import")
    use: str


class OperationKind(str, enum.Enum):
    """Standard request/response operations versus streaming ones."""

    STANDARD = "standard"
    STREAM = "stream"


class Operation(BaseModel):
    """A single client operation inside a :class:`ClientSpec` group.

    ``schemas`` maps a variant tag (``json``, ``urlencoded``, ...) to the
    validation expression of the operation input for that variant. With a
    single variant the generated schema identifier binds the expression
    directly.
    """

    name: str
    method: HTTPMethod
    path: str
    inputs: dict[str, OperationInput] = Field(default_factory=dict)
    schemas: dict[str, str] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    kind: OperationKind = OperationKind.STANDARD
    content_type: Optional[Literal["json", "urlencoded", "formdata"]] = None
    imports: list[Import] = Field(default_factory=list)
    output: OutputRef


class OptionSpec(BaseModel):
    """An extra client option sent with every request."""

    model_config = ConfigDict(populate_by_name=True)

    in_: Literal["header"] = Field(default="header", alias="in")
    schema_: str = Field(default="str", alias="schema")


class SecurityScheme(BaseModel):
    """HTTP bearer authentication applied by the generated client."""

    type: Literal["http"] = "http"
    scheme: Literal["bearer"] = "bearer"
    bearer_format: Optional[str] = "JWT"


class ClientSpec(BaseModel):
    """Everything the client compiler needs.

    ``groups`` is an ordered mapping from group name to its operations; the
    group name decides the generated ``inputs/<group>.py`` module.
    ``common_module`` names the shared-definitions module validation
    expressions may refer to as ``common``.
    """

    name: Optional[str] = None
    common_module: Optional[str] = None
    options: dict[str, OptionSpec] = Field(default_factory=dict)
    security_scheme: Optional[SecurityScheme] = None
    groups: dict[str, list[Operation]] = Field(default_factory=dict)

    @field_validator("common_module")
    @classmethod
    def _check_common_module(cls, value: Optional[str]) -> Optional[str]:
        return check_module_path(value)


# --- Top-level documents ---


class ServerInfo(BaseModel):
    """A server entry copied into the document's ``servers`` array."""

    url: str
    description: Optional[str] = None


class ApiDefinition(ClientSpec):
    """A complete definition file.

    Extends :class:`ClientSpec` with the document metadata and the
    :class:`RouteDefinition` list that feeds the description document.

    See Also:
        :func:`~clientsmith.loader.load_definition`: Load and validate a file.
    """

    title: str = "Untitled API"
    version: str = "0.0.0"
    description: Optional[str] = None
    servers: list[ServerInfo] = Field(default_factory=list)
    routes: list[RouteDefinition] = Field(default_factory=list)


class GeneratorConfig(BaseModel):
    """Output settings for a generation run.

    Resolved by :func:`~clientsmith.config.resolve_config` from CLI flags,
    ``CLIENTSMITH_*`` environment variables and ``./clientsmith.json``.
    ``common_module`` and ``name`` override the values of the definition file
    when set.
    """

    output: str = Field(default="./client", description="Directory for client sources")
    openapi_output: Optional[str] = Field(
        default=None, description="File for the OpenAPI document; stdout when unset"
    )
    common_module: Optional[str] = None
    name: Optional[str] = None

    @field_validator("common_module")
    @classmethod
    def _check_common_module(cls, value: Optional[str]) -> Optional[str]:
        return check_module_path(value)
