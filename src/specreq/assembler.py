"""Request assembler: collect every value an operation needs.

For a chosen path and method the assembler

1. merges path-level and operation-level parameters (operation wins on
   the same ``(name, in)``) and classifies them by location,
2. takes caller-supplied overrides as-is when they match the parameter's
   type, and prompts for everything else (optional parameters through
   :class:`~specreq.widgets.Skippable`),
3. prompts for the ``application/json`` request body, if any,
4. substitutes path placeholders and encodes query, header and cookie
   values into a :class:`~specreq.models.RequestDescriptor`.

Prompts are grouped: path parameters, query parameters, headers,
cookies, then the body.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from specreq.compiler import PromptCompiler
from specreq.encoding import encode_pair, encode_query, path_placeholders, substitute_path
from specreq.exceptions import (
    InvalidUsageError,
    MissingServerError,
    NotFoundError,
    UnsupportedSchemaError,
)
from specreq.models import (
    ChoiceNode,
    HTTPMethod,
    ObjectNode,
    OperationSummary,
    ParameterDescriptor,
    ParameterLocation,
    RequestDescriptor,
    RequestOverrides,
    SchemaNode,
    StringNode,
)
from specreq.output import debug, warning
from specreq.parser.resolver import ComponentKind, resolve, resolve_all
from specreq.schema import describe, normalize, resolve_choices
from specreq.session import SessionDriver
from specreq.values import ABSENT, coerce_override, is_absent, to_text
from specreq.widgets import Select, SelectOption, Skippable

JSON_MEDIA_TYPE = "application/json"
BODY_LABEL = "Request Body"

_STEPS = (
    (ParameterLocation.PATH, "Path parameters"),
    (ParameterLocation.QUERY, "Query parameters"),
    (ParameterLocation.HEADER, "Headers"),
    (ParameterLocation.COOKIE, "Cookies"),
)


# --- Document helpers ---


def list_operations(document: dict[str, Any]) -> list[OperationSummary]:
    """List every path + method pair in document order."""
    operations: list[OperationSummary] = []
    for path, item in (document.get("paths") or {}).items():
        item = resolve(item, document, ComponentKind.PATH_ITEM)
        if not isinstance(item, dict):
            continue
        for method in HTTPMethod:
            operation = item.get(method.value)
            if not isinstance(operation, dict):
                continue
            operations.append(
                OperationSummary(
                    path=path,
                    method=method,
                    summary=operation.get("summary"),
                    deprecated=bool(operation.get("deprecated", False)),
                )
            )
    return operations


def resolve_base_url(document: dict[str, Any], override: Optional[str] = None) -> str:
    """Return the base URL requests are built against.

    The override wins; otherwise the first ``servers`` entry is used with
    its ``{variables}`` replaced by their defaults.

    Raises:
        MissingServerError: If there is neither an override nor a server.
    """
    if override:
        return override
    servers = document.get("servers") or []
    if not servers or not isinstance(servers[0], dict) or not servers[0].get("url"):
        raise MissingServerError()
    server = servers[0]
    url = server["url"]
    for name, variable in (server.get("variables") or {}).items():
        if isinstance(variable, dict) and "default" in variable:
            url = url.replace("{" + name + "}", str(variable["default"]))
    return url


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field).
    """
    op_keys = {(param.get("name", ""), param.get("in", "")) for param in op_params}
    merged = [
        param
        for param in path_params
        if (param.get("name", ""), param.get("in", "")) not in op_keys
    ]
    merged.extend(op_params)
    return merged


def classify_parameters(
    path_item: dict[str, Any],
    operation: dict[str, Any],
    document: dict[str, Any],
) -> list[ParameterDescriptor]:
    """Resolve, merge and normalize an operation's parameters.

    Path parameters are always required. A query parameter is required when
    it says so or when it declares ``allowEmptyValue: false``.

    Raises:
        UnsupportedSchemaError: For parameters described by ``content``,
            without a schema, or with an unknown location.
    """
    path_params = list(resolve_all(path_item.get("parameters") or [], document, ComponentKind.PARAMETER))
    op_params = list(resolve_all(operation.get("parameters") or [], document, ComponentKind.PARAMETER))

    descriptors: list[ParameterDescriptor] = []
    for param in _merge_parameters(path_params, op_params):
        name = param.get("name", "")
        try:
            location = ParameterLocation(param.get("in"))
        except ValueError:
            raise UnsupportedSchemaError(
                f"Parameter '{name}' has unsupported location {param.get('in')!r}"
            ) from None
        if "schema" not in param:
            if "content" in param:
                raise UnsupportedSchemaError(f"Parameter '{name}': 'content' parameters are not supported")
            raise UnsupportedSchemaError(f"Parameter '{name}' declares no schema")

        allow_empty = param.get("allowEmptyValue")
        required = bool(param.get("required", False))
        if location is ParameterLocation.PATH:
            required = True
        elif location is ParameterLocation.QUERY and allow_empty is False:
            required = True

        node, description = normalize(param["schema"], document, required)
        descriptors.append(
            ParameterDescriptor(
                name=name,
                location=location,
                required=required,
                description=param.get("description") or description,
                node=node,
                allow_empty_value=allow_empty,
            )
        )
    return descriptors


def _coerce(node: SchemaNode, value: Any, name: str) -> Any:
    """Check an override against *node*, trying each alternative of a choice."""
    if isinstance(node, ChoiceNode):
        for alternative in node.alternatives:
            try:
                return _coerce(alternative, value, name)
            except InvalidUsageError:
                continue
        raise InvalidUsageError(f"Invalid value for '{name}': matches no alternative, got {value!r}")
    return coerce_override(node.kind, value, name)


def _encode(encoder: Callable[[str, Any], Any], values: list[tuple[str, Any]]) -> list:
    """Encode collected values in order, dropping the ones the encoder omits."""
    encoded = []
    for name, value in values:
        pair = encoder(name, value)
        if pair is not None:
            encoded.append(pair)
    return encoded


def _match_headers(group: list[ParameterDescriptor], values: dict[str, Any]) -> dict[str, Any]:
    """Key header overrides by the declared parameter name, ignoring case."""
    by_lower = {name.lower(): value for name, value in values.items()}
    return {p.name: by_lower[p.name.lower()] for p in group if p.name.lower() in by_lower}


# --- Assembler ---


class RequestAssembler:
    """Build a :class:`~specreq.models.RequestDescriptor` interactively.

    Args:
        document: The loaded OpenAPI document.
        driver: Runs the widgets.
        compiler: Builds the widgets; a default compiler if omitted.
        base_url: Overrides the document's first server URL.
    """

    def __init__(
        self,
        document: dict[str, Any],
        driver: SessionDriver,
        compiler: Optional[PromptCompiler] = None,
        base_url: Optional[str] = None,
    ):
        self.document = document
        self.driver = driver
        self.compiler = compiler or PromptCompiler()
        self.base_url = base_url

    # ------------------------------------------------------------------ #
    # Operation selection
    # ------------------------------------------------------------------ #

    def _paths(self) -> dict[str, Any]:
        return self.document.get("paths") or {}

    def select_path(self, path: Optional[str] = None) -> str:
        """Return *path* if the document has it, or let the user pick one.

        Raises:
            NotFoundError: If a given *path* is not in the document.
        """
        paths = self._paths()
        if path is not None:
            if path not in paths:
                raise NotFoundError(f"Path not found: {path}")
            return path

        options = []
        for name, item in paths.items():
            item = resolve(item, self.document, ComponentKind.PATH_ITEM)
            hint = item.get("summary") or item.get("description") if isinstance(item, dict) else None
            options.append(SelectOption(name, name, hint))
        return self.driver.run(Select("Path", options, controls=self.compiler.controls))

    def select_method(self, path: str, method: Optional[str] = None) -> HTTPMethod:
        """Return *method* if the path defines it, or let the user pick one.

        Raises:
            NotFoundError: If a given *method* is not defined for *path*.
        """
        item = self._path_item(path)
        available = [m for m in HTTPMethod if isinstance(item.get(m.value), dict)]
        if method is not None:
            try:
                chosen = HTTPMethod(method.lower())
            except ValueError:
                raise NotFoundError(f"Method not found: {method.upper()} {path}") from None
            if chosen not in available:
                raise NotFoundError(f"Method not found: {chosen.label} {path}")
            return chosen

        if not available:
            raise NotFoundError(f"No operations defined for {path}")
        options = [SelectOption(m.label, m, item[m.value].get("summary")) for m in available]
        return self.driver.run(Select("Method", options, controls=self.compiler.controls))

    def _path_item(self, path: str) -> dict[str, Any]:
        item = resolve(self._paths()[path], self.document, ComponentKind.PATH_ITEM)
        if not isinstance(item, dict):
            raise UnsupportedSchemaError(f"Path item for {path} is not an object")
        return item

    # ------------------------------------------------------------------ #
    # Value collection
    # ------------------------------------------------------------------ #

    def _choice_select(self, choice: ChoiceNode, label: str) -> Select:
        options = [SelectOption(describe(alt), index) for index, alt in enumerate(choice.alternatives)]
        message = f"{label or 'Value'} ({choice.operator})"
        return Select(message, options, choice.description, controls=self.compiler.controls)

    def _choose(self, choice: ChoiceNode, label: str) -> int:
        return self.driver.run(self._choice_select(choice, label))

    def _prompt(
        self,
        node: SchemaNode,
        label: str,
        description: Optional[str],
        required: bool,
        default: Any = None,
    ) -> Any:
        choose = self._choose
        if not required and isinstance(node, ChoiceNode):
            # an optional union can be skipped at its alternative picker
            picked = self.driver.run(Skippable(self._choice_select(node, label)))
            if is_absent(picked):
                return ABSENT
            top = node

            def choose(choice: ChoiceNode, where: str) -> int:
                return picked if choice is top else self._choose(choice, where)

        node = resolve_choices(node, choose, label)
        widget = self.compiler.compile(node, label, description, default)
        if not required:
            widget = Skippable(widget)
        return self.driver.run(widget)

    def _collect(self, param: ParameterDescriptor, overrides: dict[str, Any]) -> Any:
        if param.name in overrides:
            debug(f"Using {param.location.value} override for '{param.name}'")
            return _coerce(param.node, overrides[param.name], param.name)
        return self._prompt(param.node, param.name, param.description, param.required)

    def _collect_body(self, operation: dict[str, Any], fields: dict[str, Any]) -> Any:
        request_body = resolve(operation["requestBody"], self.document, ComponentKind.REQUEST_BODY)
        media = (request_body.get("content") or {}).get(JSON_MEDIA_TYPE)
        if media is None or "schema" not in media:
            found = ", ".join(request_body.get("content") or {}) or "none"
            raise UnsupportedSchemaError(
                f"Only supported '{JSON_MEDIA_TYPE}' request bodies (found: {found})"
            )

        required = bool(request_body.get("required", False))
        node, description = normalize(media["schema"], self.document, required)
        description = request_body.get("description") or description

        default = None
        if fields:
            if not isinstance(node, ObjectNode):
                raise InvalidUsageError("--field can only be used with object request bodies")
            default = {
                name: _coerce(node.properties[name], value, name) if name in node.properties else value
                for name, value in fields.items()
            }
        return self._prompt(node, BODY_LABEL, description, required, default)

    # ------------------------------------------------------------------ #
    # Assembly
    # ------------------------------------------------------------------ #

    def assemble(
        self,
        path: Optional[str] = None,
        method: Optional[str] = None,
        overrides: Optional[RequestOverrides] = None,
        extra_headers: Iterable[tuple[str, str]] = (),
    ) -> RequestDescriptor:
        """Run the prompt sequence for one operation.

        Args:
            path: Pre-selected path template; prompted for when ``None``.
            method: Pre-selected method; prompted for when ``None``.
            overrides: Values that bypass prompting, per location, plus
                request body property defaults. Header overrides that
                match no declared header are sent as extra headers.
            extra_headers: Headers appended after all others.

        Returns:
            The finished request descriptor.

        Raises:
            NotFoundError: A pre-selected path or method does not exist.
            MissingServerError: No base URL is available.
            SchemaError: A reference or schema cannot be prompted for.
            InvalidUsageError: An override has the wrong type.
            PromptCancelled: The user cancelled a prompt.
            PromptError: A widget or the terminal failed.
        """
        overrides = overrides or RequestOverrides()
        base_url = resolve_base_url(self.document, self.base_url)

        path = self.select_path(path)
        chosen = self.select_method(path, method)
        path_item = self._path_item(path)
        operation = path_item[chosen.value]
        debug(f"Assembling {chosen.label} {path}")
        if operation.get("deprecated"):
            warning(f"{chosen.label} {path} is deprecated")

        params = classify_parameters(path_item, operation, self.document)
        declared = {p.name for p in params if p.location is ParameterLocation.PATH}
        for name in path_placeholders(path):
            if name not in declared:
                params.append(
                    ParameterDescriptor(
                        name=name,
                        location=ParameterLocation.PATH,
                        required=True,
                        node=StringNode(required=True),
                    )
                )

        collected: dict[ParameterLocation, list[tuple[str, Any]]] = {}
        for location, title in _STEPS:
            group = [p for p in params if p.location is location]
            if not group:
                continue
            values = overrides.for_location(location)
            if location is ParameterLocation.HEADER:
                values = _match_headers(group, values)
            if any(p.name not in values for p in group):
                self.driver.step(title)
            collected[location] = [(p.name, self._collect(p, values)) for p in group]

        body = None
        if operation.get("requestBody") is not None:
            self.driver.step(BODY_LABEL)
            body = self._collect_body(operation, overrides.fields)
            if is_absent(body):
                body = None

        resolved_path = path
        for name, value in collected.get(ParameterLocation.PATH, []):
            resolved_path = substitute_path(resolved_path, name, value)

        query = _encode(encode_query, collected.get(ParameterLocation.QUERY, []))
        headers = _encode(encode_pair, collected.get(ParameterLocation.HEADER, []))
        cookies = _encode(encode_pair, collected.get(ParameterLocation.COOKIE, []))

        declared_headers = {p.name.lower() for p in params if p.location is ParameterLocation.HEADER}
        headers.extend(
            (name, to_text(value))
            for name, value in overrides.header.items()
            if name.lower() not in declared_headers
        )
        headers.extend(extra_headers)
        if body is not None and not any(name.lower() == "content-type" for name, _ in headers):
            headers.insert(0, ("Content-Type", JSON_MEDIA_TYPE))

        return RequestDescriptor(
            method=chosen,
            base_url=base_url,
            path=resolved_path,
            query=query,
            headers=headers,
            cookies=cookies,
            body=body,
        )
