"""Canonical Pydantic models shared across all specreq modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`GlobalConfig` and :class:`Profile`.

**Schema nodes** -- the normalized, composition-free type tree produced by
:mod:`specreq.schema.normalizer` and consumed by the prompt compiler:
    :class:`StringNode`, :class:`NumberNode`, :class:`IntegerNode`,
    :class:`BooleanNode`, :class:`ArrayNode`, :class:`ObjectNode`, plus
    :class:`ChoiceNode`, which only exists between the two normalization
    phases (see :func:`~specreq.schema.normalizer.resolve_choices`).

**Request models** -- produced by the request assembler:
    :class:`HTTPMethod`, :class:`ParameterLocation`,
    :class:`ParameterDescriptor`, :class:`RequestOverrides`,
    :class:`OperationSummary` and :class:`RequestDescriptor`.

Schema nodes and request descriptors are frozen: a node's tag and facets
never change once normalized, and a descriptor is immutable once built.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Config ---


class RequestFormat(str, enum.Enum):
    """Textual representations a finished request can be printed as."""

    CURL = "curl"
    FETCH = "fetch"


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specreq/config.json``.

    Loaded and saved by :func:`~specreq.config.load_global_config` and
    :func:`~specreq.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~specreq.config.resolve_config`.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    format: RequestFormat = Field(
        default=RequestFormat.CURL, description="Output format: curl or fetch"
    )
    no_color: bool = False


class Profile(BaseModel):
    """Per-API profile stored as JSON under the ``profiles/`` config directory.

    A profile remembers which OpenAPI document to read and which base URL
    and extra headers to use, so that ``specreq request`` can be run without
    repeating them. Profiles are managed with ``specreq profile``.

    Extra fields are preserved and accessible via ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    spec: str = Field(description="File path, URL or '-' for the OpenAPI document")
    base_url: Optional[str] = Field(
        default=None, description="Override the first server URL of the document"
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers appended to every request"
    )


# --- Schema nodes ---


Numeric = Union[int, float]


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    required: bool = False
    title: Optional[str] = None
    description: Optional[str] = None


class StringNode(_Node):
    """A ``type: string`` schema with its validation facets."""

    kind: Literal["string"] = "string"
    format: Optional[str] = None
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    enum: list[str] = Field(default_factory=list)


class _NumericNode(_Node):
    minimum: Optional[Numeric] = None
    maximum: Optional[Numeric] = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    multiple_of: Optional[Numeric] = None
    enum: list[Numeric] = Field(default_factory=list)


class NumberNode(_NumericNode):
    """A ``type: number`` schema. Bounds are compared as reals."""

    kind: Literal["number"] = "number"


class IntegerNode(_NumericNode):
    """A ``type: integer`` schema. Bounds are compared against whole numbers."""

    kind: Literal["integer"] = "integer"


class BooleanNode(_Node):
    """A ``type: boolean`` schema."""

    kind: Literal["boolean"] = "boolean"


class ArrayNode(_Node):
    """A ``type: array`` schema with its normalized item node."""

    kind: Literal["array"] = "array"
    items: SchemaNode
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    unique_items: bool = False


class ObjectNode(_Node):
    """A ``type: object`` schema.

    ``properties`` preserves declaration order. Each child node carries its
    own ``required`` flag (looked up in the parent's ``required`` list) and
    description.
    """

    kind: Literal["object"] = "object"
    properties: dict[str, SchemaNode] = Field(default_factory=dict)


class ChoiceNode(_Node):
    """A ``oneOf``/``anyOf`` schema whose alternative has not been picked yet.

    Produced by the first normalization phase only. The second phase
    replaces every choice node with the alternative the user selects, so the
    prompt compiler never receives one.
    """

    kind: Literal["choice"] = "choice"
    operator: Literal["oneOf", "anyOf"] = "oneOf"
    alternatives: list[SchemaNode] = Field(default_factory=list)


SchemaNode = Annotated[
    Union[
        StringNode,
        NumberNode,
        IntegerNode,
        BooleanNode,
        ArrayNode,
        ObjectNode,
        ChoiceNode,
    ],
    Field(discriminator="kind"),
]

ArrayNode.model_rebuild()
ObjectNode.model_rebuild()
ChoiceNode.model_rebuild()


# --- Request models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects.

    Values are the lowercase keys used inside a path item; use
    :attr:`label` for the uppercase wire form.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"

    @property
    def label(self) -> str:
        return self.value.upper()


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class ParameterDescriptor(BaseModel):
    """A classified operation parameter, ready to be prompted for.

    ``node`` is the first-phase normalized schema, so it may still be a
    :class:`ChoiceNode`. ``allow_empty_value`` is only meaningful for query
    parameters; an explicit ``False`` makes the parameter required.
    """

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    node: SchemaNode
    allow_empty_value: Optional[bool] = None


class RequestOverrides(BaseModel):
    """Caller-supplied values that bypass prompting.

    Keys are parameter names per location; ``fields`` pre-populates
    properties of an object request body.
    """

    path: dict[str, Any] = Field(default_factory=dict)
    query: dict[str, Any] = Field(default_factory=dict)
    header: dict[str, Any] = Field(default_factory=dict)
    cookie: dict[str, Any] = Field(default_factory=dict)
    fields: dict[str, Any] = Field(default_factory=dict)

    def for_location(self, location: ParameterLocation) -> dict[str, Any]:
        return getattr(self, location.value)


class OperationSummary(BaseModel):
    """One path + method pair, as listed by ``specreq paths``."""

    path: str
    method: HTTPMethod
    summary: Optional[str] = None
    deprecated: bool = False


class RequestDescriptor(BaseModel):
    """The fully resolved, encoding-ready representation of one HTTP request.

    ``path`` has every ``{name}`` placeholder substituted. ``query`` holds
    ``(name, value)`` pairs where a ``None`` value renders as a bare flag;
    query, header and cookie lists keep the operation's declaration order.
    ``body`` is the collected JSON value, or ``None`` when the request has
    no body. Serialisation is left to :mod:`specreq.formatters`.
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    base_url: str
    path: str
    query: list[tuple[str, Optional[str]]] = Field(default_factory=list)
    headers: list[tuple[str, str]] = Field(default_factory=list)
    cookies: list[tuple[str, str]] = Field(default_factory=list)
    body: Any = None
