"""Pydantic models shared by the parser, the client, the docs and the editor.

Two families live here. The settings models are what ``config.json`` and
``./swagctl.json`` deserialise into. The spec models are what
:func:`~swagctl.parser.extractor.extract_spec` produces: Swagger 2.0 and
OpenAPI 3.x documents end up in the same shapes, and
:attr:`ParsedSpec.spec_version` remembers which one it was.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Settings ---


class RequestConfig(BaseModel):
    """How ``swagctl client`` talks to the API."""

    base_url: Optional[str] = Field(default=None, description="Replaces the spec's server URL")
    timeout: int = Field(default=30, description="Seconds before a request gives up")
    max_retries: int = Field(default=0, description="Extra attempts on 5xx and network errors")
    verify_ssl: bool = True


class EditorConfig(BaseModel):
    listen: str = Field(
        default="http://127.0.0.1:3000",
        description="Listen URL for `swagctl edit`; `*` means every interface",
    )


class OutputConfig(BaseModel):
    format: Literal["auto", "json", "plain", "rich"] = "auto"
    pager: bool = Field(default=True, description="Page `view` output when stdout is a TTY")


class GlobalConfig(BaseModel):
    """One settings document, user-wide or per project.

    See :func:`~swagctl.config.resolve_config` for how the layers combine.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Parsed specs ---


class HTTPMethod(str, enum.Enum):
    """Keys of a path item that are operations."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """A parameter's ``in``.

    ``formData`` exists only in Swagger 2.0. Swagger 2.0 ``in: body``
    parameters become a :class:`RequestBodyInfo` instead.
    """

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"
    FORM_DATA = "formData"


class APIParameter(BaseModel):
    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    schema_type: str = "string"
    schema_format: Optional[str] = None
    default: Any = None
    enum_values: Optional[list[Any]] = None


class RequestBodyInfo(BaseModel):
    """What an operation accepts as its body.

    ``name`` is the argument the dynamic client reads the body from: the
    ``in: body`` parameter's name for Swagger 2.0, ``body`` for OpenAPI 3.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = "body"
    required: bool = False
    description: Optional[str] = None
    content_types: list[str] = Field(default_factory=list)
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class ResponseInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status_code: str
    description: Optional[str] = None
    content_types: list[str] = Field(default_factory=list)
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class SecurityScheme(BaseModel):
    """An entry of ``securityDefinitions`` or ``components/securitySchemes``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: str
    description: Optional[str] = None
    # apiKey schemes: the header/query/cookie name and where it goes
    param_name: Optional[str] = Field(default=None, alias="in_name")
    location: Optional[str] = Field(default=None, alias="in_location")
    # http schemes: basic, bearer, ...
    scheme: Optional[str] = None


class APIOperation(BaseModel):
    """One method on one path."""

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    deprecated: bool = False
    parameters: list[APIParameter] = Field(default_factory=list)
    request_body: Optional[RequestBodyInfo] = None
    responses: list[ResponseInfo] = Field(default_factory=list)


class APIInfo(BaseModel):
    title: str
    version: str
    description: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    license_name: Optional[str] = None


class ServerInfo(BaseModel):
    """A base URL the API answers on.

    Swagger 2.0 has no ``servers``; the extractor builds one entry per
    scheme from ``schemes``, ``host`` and ``basePath``.
    """

    url: str
    description: Optional[str] = None


class ParsedSpec(BaseModel):
    """Everything swagctl needs from a document, with ``$ref`` resolved."""

    info: APIInfo
    spec_version: str = Field(description="The 'swagger' or 'openapi' value, e.g. '2.0', '3.0.3'")
    source: Optional[str] = Field(default=None, description="Path or URL it was loaded from")
    servers: list[ServerInfo] = Field(default_factory=list)
    operations: list[APIOperation] = Field(default_factory=list)
    security_schemes: dict[str, SecurityScheme] = Field(default_factory=dict)

    @property
    def is_swagger2(self) -> bool:
        return self.spec_version.startswith("2.")
