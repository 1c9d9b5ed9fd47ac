"""A client whose methods are generated at runtime from a spec's operations.

:class:`DynamicClient` exposes every operation of a
:class:`~swagctl.models.ParsedSpec` as a callable named after its
``operationId`` (see :func:`~swagctl.parser.naming.operation_name`)::

    client = DynamicClient.generate("petstore.json")
    client.base_url = "http://localhost:8080/v1"
    response = client.list_pets({"limit": 10})

The same method is reachable as ``client["list_pets"]`` and
``client("list_pets", {"limit": 10})``; iterating over the client yields the
method names.

A call takes a single flat dict of arguments. Each declared parameter reads
its value from the key of the same name and is routed to the path, query
string, headers, cookies, or form fields according to its ``in``. The
request body is read from the ``body`` key (or, for Swagger 2, the body
parameter's name); when that key is absent and the body schema is an
object, the remaining arguments matching its properties are collected
instead. Arguments are checked against the operation before anything is
sent, and all problems are reported together in one
:class:`~swagctl.exceptions.InputValidationError`.
"""

from __future__ import annotations

import functools
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, Optional
from urllib.parse import quote, urljoin, urlparse

import httpx

from swagctl.client.sync_client import SyncClient
from swagctl.exceptions import InputValidationError, InvalidUsageError
from swagctl.models import (
    APIOperation,
    APIParameter,
    ParameterLocation,
    ParsedSpec,
    RequestConfig,
)
from swagctl.parser import open_spec, operation_name

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"^-?\d+$")
_NUMBER_RE = re.compile(r"^-?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")
_BOOLEAN_STRINGS = frozenset({"true", "false", "1", "0"})
_FORM_MARKERS = ("form-urlencoded", "multipart/form-data")


@dataclass
class PreparedCall:
    """Everything needed to send one operation call, after validation."""

    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    json_body: Any = None
    data: Optional[dict[str, Any]] = None
    files: Optional[dict[str, Any]] = None


class DynamicClient:
    """HTTP client with one method per operation of a spec.

    Args:
        spec: The parsed spec.
        config: Request settings; ``config.base_url`` overrides the spec's
            server URL.
        dry_run: Print requests instead of sending them.
        transport: Optional httpx transport handed to
            :class:`~swagctl.client.sync_client.SyncClient`.
    """

    def __init__(
        self,
        spec: ParsedSpec,
        config: Optional[RequestConfig] = None,
        dry_run: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._spec = spec
        self._config = config or RequestConfig()
        self._dry_run = dry_run
        self._transport = transport

        ordered = sorted(spec.operations, key=lambda op: (op.path, op.method.value))
        self._operations: dict[str, APIOperation] = {}
        self._aliases: dict[str, str] = {}
        for op in ordered:
            name = operation_name(op)
            if name in self._operations:
                logger.warning("Duplicate method name %s for %s %s", name, op.method.value, op.path)
                continue
            self._operations[name] = op
            if op.operation_id and op.operation_id != name:
                self._aliases[op.operation_id] = name

        self._base_url = self._default_base_url()
        if self._config.base_url:
            self.base_url = self._config.base_url

    @classmethod
    def generate(
        cls,
        source: str,
        config: Optional[RequestConfig] = None,
        dry_run: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> DynamicClient:
        """Load the spec at *source* (file, URL or ``-``) and build a client for it."""
        return cls(open_spec(source), config=config, dry_run=dry_run, transport=transport)

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def spec(self) -> ParsedSpec:
        """The spec this client was generated from."""
        return self._spec

    @property
    def operations(self) -> list[str]:
        """Method names, sorted by path then HTTP method."""
        return list(self._operations)

    @property
    def base_url(self) -> str:
        """The URL every operation path is appended to."""
        return self._base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidUsageError(f"Invalid base URL: {value!r}")
        self._base_url = value.rstrip("/")

    def operation(self, name: str) -> APIOperation:
        """Return the operation called *name* (method name or raw ``operationId``).

        Raises:
            InvalidUsageError: If no such operation exists.
        """
        name = self._aliases.get(name, name)
        try:
            return self._operations[name]
        except KeyError:
            raise InvalidUsageError(
                f"No such method '{name}' in {self._spec.info.title}"
            ) from None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and (name in self._operations or name in self._aliases)

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __getitem__(self, name: str) -> Callable[..., httpx.Response]:
        if name not in self:
            raise KeyError(f"Operation '{name}' not found")
        return functools.partial(self.call, name)

    def __getattr__(self, name: str) -> Callable[..., httpx.Response]:
        # Only reached for names that are not regular attributes.
        if name.startswith("_") or name not in self:
            raise AttributeError(f"'{type(self).__name__}' has no operation '{name}'")
        return functools.partial(self.call, name)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._operations))

    def __call__(self, name: str, args: Optional[dict[str, Any]] = None) -> httpx.Response:
        return self.call(name, args)

    # ------------------------------------------------------------------ #
    # Calling operations
    # ------------------------------------------------------------------ #

    def call(self, name: str, args: Optional[dict[str, Any]] = None) -> httpx.Response:
        """Validate *args*, build the request for operation *name*, and send it.

        Returns:
            The :class:`httpx.Response`, whatever its status.

        Raises:
            InvalidUsageError: Unknown method, or no absolute base URL.
            InputValidationError: *args* do not satisfy the operation.
            UnreachableError: The server could not be reached.
        """
        prepared = self.build_request(name, args or {})

        if not urlparse(self._base_url).scheme:
            raise InvalidUsageError(
                f"No absolute base URL for {self._spec.info.title} "
                f"(spec gives {self._base_url!r}). Use -b or SWAGGER_BASE_URL."
            )

        logger.debug("Calling %s: %s %s%s", name, prepared.method, self._base_url, prepared.path)
        with SyncClient(
            self._base_url,
            self._config,
            dry_run=self._dry_run,
            transport=self._transport,
        ) as client:
            return client.request(
                method=prepared.method,
                path=prepared.path,
                params=prepared.params,
                headers=prepared.headers,
                cookies=prepared.cookies,
                json_body=prepared.json_body,
                data=prepared.data,
                files=prepared.files,
            )

    def build_request(self, name: str, args: dict[str, Any]) -> PreparedCall:
        """Translate *args* into a :class:`PreparedCall` for operation *name*.

        Raises:
            InvalidUsageError: If *name* is not an operation.
            InputValidationError: If *args* fail validation.
        """
        op = self.operation(name)
        method_name = operation_name(op)

        body = _body_value(op, args)
        errors = validate_arguments(op, args, body)
        if errors:
            raise InputValidationError(method_name, errors)

        prepared = PreparedCall(method=op.method.value.upper(), path=op.path)
        form: dict[str, Any] = {}
        files: dict[str, Any] = {}

        for param in op.parameters:
            value = args.get(param.name)
            if value is None:
                continue
            if param.location == ParameterLocation.PATH:
                prepared.path = prepared.path.replace(
                    "{" + param.name + "}", quote(_scalar_text(value), safe="")
                )
            elif param.location == ParameterLocation.QUERY:
                prepared.params[param.name] = (
                    [_scalar_text(v) for v in value] if isinstance(value, list) else _scalar_text(value)
                )
            elif param.location == ParameterLocation.HEADER:
                prepared.headers[param.name] = _scalar_text(value)
            elif param.location == ParameterLocation.COOKIE:
                prepared.cookies[param.name] = _scalar_text(value)
            elif param.schema_type == "file":
                path = Path(str(value))
                try:
                    files[param.name] = (path.name, path.read_bytes())
                except OSError as exc:
                    raise InvalidUsageError(f"Cannot read file for '{param.name}': {exc}") from exc
            else:
                form[param.name] = _scalar_text(value)

        if body is not None:
            content_types = op.request_body.content_types if op.request_body else []
            if content_types and any(m in content_types[0] for m in _FORM_MARKERS) and isinstance(body, dict):
                form.update({k: _scalar_text(v) for k, v in body.items()})
            else:
                prepared.json_body = body

        if form or files:
            prepared.data = form
        if files:
            prepared.files = files
        return prepared

    def _default_base_url(self) -> str:
        """First server URL, resolved against the spec URL when relative."""
        url = self._spec.servers[0].url if self._spec.servers else "/"
        source = self._spec.source or ""
        if not urlparse(url).scheme and source.startswith(("http://", "https://")):
            url = urljoin(source, url)
        return url.rstrip("/") if url != "/" else url


# ---------------------------------------------------------------------- #
# Argument validation
# ---------------------------------------------------------------------- #


def validate_arguments(
    operation: APIOperation,
    args: dict[str, Any],
    body: Any = None,
) -> list[str]:
    """Check *args* against *operation*'s parameters and body.

    Returns:
        One ``"/<name>: <message>"`` line per problem, in parameter order.
    """
    errors: list[str] = []

    for param in operation.parameters:
        value = args.get(param.name)
        if value is None:
            if param.required:
                errors.append(f"/{param.name}: Missing property.")
            continue
        problem = _check_parameter(param, value)
        if problem:
            errors.append(f"/{param.name}: {problem}")

    request_body = operation.request_body
    if request_body is not None and request_body.required and body is None:
        errors.append(f"/{request_body.name}: Missing property.")

    return errors


def _check_parameter(param: APIParameter, value: Any) -> Optional[str]:
    if param.enum_values:
        allowed = [str(v) for v in param.enum_values]
        values = value if isinstance(value, list) else [value]
        if any(_scalar_text(v) not in allowed for v in values):
            return f"Not in enum list: {', '.join(allowed)}."

    expected = param.schema_type
    if expected == "file":
        return None if Path(str(value)).is_file() else f"File not found: {value}."
    if expected == "array":
        return None
    if not _matches_type(value, expected):
        return f"Expected {expected} - got {_json_type(value)}."
    return None


def _matches_type(value: Any, expected: str) -> bool:
    if expected == "integer":
        if isinstance(value, bool):
            return False
        return isinstance(value, int) or (isinstance(value, str) and bool(_INTEGER_RE.match(value)))
    if expected == "number":
        if isinstance(value, bool):
            return False
        return isinstance(value, (int, float)) or (
            isinstance(value, str) and bool(_NUMBER_RE.match(value))
        )
    if expected == "boolean":
        return isinstance(value, bool) or (
            isinstance(value, str) and value.lower() in _BOOLEAN_STRINGS
        )
    if expected == "object":
        return isinstance(value, (dict, str))
    # string: command-line values may already have been coerced to numbers
    return not isinstance(value, (dict, list))


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return "string"


def _scalar_text(value: Any) -> str:
    """Render a value for a URL, header, or form field."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        if isinstance(value, list) and all(not isinstance(v, (dict, list)) for v in value):
            return ",".join(_scalar_text(v) for v in value)
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _body_value(operation: APIOperation, args: dict[str, Any]) -> Any:
    """Pick the request body out of *args*.

    The body parameter's own key wins; otherwise an object schema collects
    the arguments that name one of its properties and are not parameters.
    """
    request_body = operation.request_body
    if request_body is None:
        return None
    if request_body.name in args:
        return args[request_body.name]

    schema = request_body.schema_ or {}
    properties = schema.get("properties") if isinstance(schema, dict) else None
    if not isinstance(properties, dict):
        return None

    param_names = {p.name for p in operation.parameters}
    collected = {
        key: value
        for key, value in args.items()
        if key in properties and key not in param_names
    }
    return collected or None
