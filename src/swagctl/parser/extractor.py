"""Extract operations, parameters, and servers from resolved Swagger/OpenAPI specs.

This module walks a ``$ref``-resolved document and builds a
:class:`~swagctl.models.ParsedSpec`. Swagger 2.0 and OpenAPI 3.x are
normalised into the same models:

* ``servers`` -- taken from the OpenAPI 3 ``servers`` array, or synthesised
  from Swagger 2 ``schemes`` + ``host`` + ``basePath``.
* request bodies -- the OpenAPI 3 ``requestBody``, or the Swagger 2
  ``in: body`` parameter (its name is kept so the client knows which
  argument carries the body).
* responses -- the schema comes from ``content`` (OpenAPI 3) or directly
  from ``schema`` with ``produces`` as content types (Swagger 2).
* security schemes -- ``components/securitySchemes`` or
  ``securityDefinitions``.

Parameter merging follows both specifications: path-level parameters provide
defaults, and operation-level parameters override them when they share the
same ``name`` and ``in`` values.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import ValidationError

from swagctl.exceptions import SpecParseError
from swagctl.models import (
    APIInfo,
    APIOperation,
    APIParameter,
    HTTPMethod,
    ParameterLocation,
    ParsedSpec,
    RequestBodyInfo,
    ResponseInfo,
    SecurityScheme,
    ServerInfo,
)
from swagctl.parser.resolver import resolve_refs

_DEFAULT_CONTENT_TYPES = ["application/json"]


def extract_spec(
    raw_spec: dict[str, Any],
    spec_version: str,
    source: Optional[str] = None,
) -> ParsedSpec:
    """Extract a :class:`~swagctl.models.ParsedSpec` from a raw document.

    Args:
        raw_spec: The raw document as returned by
            :func:`~swagctl.parser.loader.load_spec` (before ref resolution).
        spec_version: The version returned by
            :func:`~swagctl.parser.loader.detect_spec_version`.
        source: Where the document came from. A URL source supplies the
            default host and scheme for Swagger 2 specs without ``host``.

    Raises:
        SpecParseError: A $ref cannot be resolved, or a field has the
            wrong type (e.g. a numeric ``info.title``).

    Example::

        raw = load_spec("petstore.yaml")
        parsed = extract_spec(raw, detect_spec_version(raw), "petstore.yaml")
        for op in parsed.operations:
            print(f"{op.method.value.upper()} {op.path}")
    """
    spec = resolve_refs(raw_spec)
    swagger2 = spec_version.startswith("2.")
    try:
        return ParsedSpec(
            info=_extract_info(spec),
            servers=_swagger2_servers(spec, source) if swagger2 else _extract_servers(spec),
            operations=_extract_operations(spec, swagger2),
            security_schemes=_extract_security_schemes(spec, swagger2),
            spec_version=spec_version,
            source=source,
        )
    except ValidationError as exc:
        raise SpecParseError(f"Spec has fields of the wrong type: {exc}") from exc


def _extract_info(spec: dict[str, Any]) -> APIInfo:
    info = spec.get("info") or {}
    contact = info.get("contact") or {}
    license_info = info.get("license") or {}

    return APIInfo(
        title=info.get("title") or "Untitled API",
        version=str(info.get("version", "0.0.0")),
        description=info.get("description"),
        contact_name=contact.get("name"),
        contact_email=contact.get("email"),
        license_name=license_info.get("name"),
    )


def _extract_servers(spec: dict[str, Any]) -> list[ServerInfo]:
    """OpenAPI 3 ``servers``, with ``{variable}`` placeholders filled from defaults."""
    servers: list[ServerInfo] = []
    for server in spec.get("servers") or []:
        if not isinstance(server, dict):
            continue
        url = server.get("url", "/")
        for name, variable in (server.get("variables") or {}).items():
            if isinstance(variable, dict) and "default" in variable:
                url = url.replace("{" + name + "}", str(variable["default"]))
        servers.append(ServerInfo(url=url, description=server.get("description")))
    return servers


def _swagger2_servers(spec: dict[str, Any], source: Optional[str]) -> list[ServerInfo]:
    """Build one server URL per scheme from ``schemes``, ``host`` and ``basePath``.

    A missing ``host`` means "the host serving the documentation", so it is
    taken from *source* when that is a URL; otherwise only the base path is
    returned and the caller has to supply a base URL.
    """
    base_path = (spec.get("basePath") or "").rstrip("/")
    host = spec.get("host")
    source_url = urlparse(source) if source and source.startswith(("http://", "https://")) else None

    if not host and source_url is not None:
        host = source_url.netloc
    if not host:
        return [ServerInfo(url=base_path or "/")]

    schemes = spec.get("schemes") or [source_url.scheme if source_url else "http"]
    return [ServerInfo(url=f"{scheme}://{host}{base_path}") for scheme in schemes]


def _extract_operations(spec: dict[str, Any], swagger2: bool) -> list[APIOperation]:
    """Extract all operations from ``paths``, in path then method order."""
    paths = spec.get("paths") or {}
    global_consumes = spec.get("consumes") or _DEFAULT_CONTENT_TYPES
    global_produces = spec.get("produces") or _DEFAULT_CONTENT_TYPES
    operations: list[APIOperation] = []

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        path_params = path_item.get("parameters") or []

        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue

            merged = _merge_parameters(path_params, operation.get("parameters") or [])

            if swagger2:
                consumes = operation.get("consumes") or global_consumes
                produces = operation.get("produces") or global_produces
                request_body = _swagger2_body(merged, consumes)
                responses = _swagger2_responses(operation.get("responses") or {}, produces)
            else:
                request_body = _extract_request_body(operation.get("requestBody"))
                responses = _extract_responses(operation.get("responses") or {})

            operations.append(
                APIOperation(
                    path=path,
                    method=method,
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    tags=operation.get("tags") or [],
                    parameters=_extract_parameters(merged, swagger2),
                    request_body=request_body,
                    responses=responses,
                    deprecated=bool(operation.get("deprecated", False)),
                )
            )

    return operations


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters, operation-level winning."""
    overridden = {
        (param.get("name", ""), param.get("in", ""))
        for param in op_params
        if isinstance(param, dict)
    }
    merged = [
        param
        for param in path_params
        if isinstance(param, dict)
        and (param.get("name", ""), param.get("in", "")) not in overridden
    ]
    merged.extend(param for param in op_params if isinstance(param, dict))
    return merged


def _extract_parameters(params_list: list[dict[str, Any]], swagger2: bool) -> list[APIParameter]:
    """Convert raw parameter dicts into :class:`~swagctl.models.APIParameter` models.

    ``in: body`` parameters and unknown locations are skipped; the body is
    handled by :func:`_swagger2_body`. Path parameters are always required.
    """
    parameters: list[APIParameter] = []

    for param in params_list:
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            continue

        # Swagger 2 keeps type information on the parameter itself.
        schema = param if swagger2 else (param.get("schema") or {})
        if not isinstance(schema, dict):
            schema = {}

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            APIParameter(
                name=param.get("name", ""),
                location=location,
                required=required,
                description=param.get("description"),
                schema_type=extract_schema_type(schema),
                schema_format=schema.get("format"),
                default=schema.get("default"),
                enum_values=schema.get("enum"),
            )
        )

    return parameters


def extract_schema_type(schema: Any) -> str:
    """Return the JSON Schema type of *schema*, defaulting to ``"string"``.

    OpenAPI 3.1 type arrays (``["string", "null"]``) yield the first
    non-null entry. Schemas with ``properties`` but no ``type`` are objects.
    """
    if not isinstance(schema, dict):
        return "string"

    type_value = schema.get("type")
    if type_value is None:
        return "object" if "properties" in schema else "string"

    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return non_null[0] if non_null else "string"

    return str(type_value)


def _swagger2_body(params_list: list[dict[str, Any]], consumes: list[str]) -> RequestBodyInfo | None:
    for param in params_list:
        if param.get("in") == "body":
            return RequestBodyInfo(
                name=param.get("name") or "body",
                required=bool(param.get("required", False)),
                description=param.get("description"),
                content_types=list(consumes),
                schema=param.get("schema"),
            )
    return None


def _extract_request_body(body: dict[str, Any] | None) -> RequestBodyInfo | None:
    """Extract an OpenAPI 3 ``requestBody``; the schema of the first content type wins."""
    if not isinstance(body, dict):
        return None

    content = body.get("content") or {}
    return RequestBodyInfo(
        required=bool(body.get("required", False)),
        description=body.get("description"),
        content_types=list(content.keys()),
        schema=_first_schema(content),
    )


def _extract_responses(responses: dict[str, Any]) -> list[ResponseInfo]:
    result: list[ResponseInfo] = []
    for status_code, response in responses.items():
        if not isinstance(response, dict):
            continue
        content = response.get("content") or {}
        result.append(
            ResponseInfo(
                status_code=str(status_code),
                description=response.get("description"),
                content_types=list(content.keys()),
                schema=_first_schema(content),
            )
        )
    return result


def _swagger2_responses(responses: dict[str, Any], produces: list[str]) -> list[ResponseInfo]:
    result: list[ResponseInfo] = []
    for status_code, response in responses.items():
        if not isinstance(response, dict):
            continue
        schema = response.get("schema")
        result.append(
            ResponseInfo(
                status_code=str(status_code),
                description=response.get("description"),
                content_types=list(produces) if schema is not None else [],
                schema=schema,
            )
        )
    return result


def _first_schema(content: dict[str, Any]) -> dict[str, Any] | None:
    for media in content.values():
        if isinstance(media, dict) and "schema" in media:
            return media["schema"]
    return None


def _extract_security_schemes(spec: dict[str, Any], swagger2: bool) -> dict[str, SecurityScheme]:
    if swagger2:
        schemes_raw = spec.get("securityDefinitions") or {}
    else:
        schemes_raw = (spec.get("components") or {}).get("securitySchemes") or {}

    schemes: dict[str, SecurityScheme] = {}
    for name, scheme_data in schemes_raw.items():
        if not isinstance(scheme_data, dict):
            continue
        schemes[name] = SecurityScheme(
            name=name,
            type=scheme_data.get("type", ""),
            description=scheme_data.get("description"),
            in_name=scheme_data.get("name"),
            in_location=scheme_data.get("in"),
            scheme=scheme_data.get("scheme"),
        )
    return schemes
