"""Render reference documentation for a parsed spec.

The renderer backs three features:

* ``swagctl doc`` -- :func:`render_markdown` for the whole API.
* ``swagctl view`` and ``swagctl client <spec> <method> help`` -- the same
  Markdown, rendered for the terminal by :mod:`swagctl.output`, and
  :func:`render_operation_markdown` for a single method.
* the editor preview -- :func:`render_html`.

Templates live in ``docs/templates/`` and are rendered with Jinja2. Every
template receives the context built by :func:`_build_context`: the API
info, the effective base URL, and one entry per operation holding its
method name, parameters, body schema, and responses.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from swagctl.exceptions import InvalidUsageError
from swagctl.models import APIOperation, ParsedSpec
from swagctl.parser.naming import operation_name


TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``docs/templates/``)."""


def render_markdown(spec: ParsedSpec, base_url: Optional[str] = None) -> str:
    """Render the full Markdown reference for *spec*.

    Args:
        spec: The parsed spec.
        base_url: Base URL to document. Defaults to the first server URL.
    """
    env = _create_jinja_env()
    context = _build_context(spec, spec.operations, base_url)
    return env.get_template("reference.md.j2").render(context)


def render_operation_markdown(spec: ParsedSpec, name: str) -> str:
    """Render the Markdown section for the method called *name*.

    *name* may be the method name or the raw ``operationId``.

    Raises:
        InvalidUsageError: If the spec has no such operation.
    """
    for op in spec.operations:
        if name in (operation_name(op), op.operation_id):
            env = _create_jinja_env()
            context = _build_context(spec, [op], None)
            return env.get_template("operation.md.j2").render(context)
    raise InvalidUsageError(f"No such method '{name}' in {spec.info.title}")


def render_html(spec: ParsedSpec, base_url: Optional[str] = None) -> str:
    """Render the reference as an HTML fragment (no ``<html>`` wrapper)."""
    env = _create_jinja_env()
    context = _build_context(spec, spec.operations, base_url)
    return env.get_template("reference.html.j2").render(context)


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for the documentation templates.

    Autoescape is enabled only for ``.html.j2`` templates. Block trimming
    and lstrip keep the Markdown output free of stray blank lines.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["cell"] = _table_cell
    env.filters["pretty_json"] = _pretty_json
    return env


def _build_context(
    spec: ParsedSpec,
    operations: list[APIOperation],
    base_url: Optional[str],
) -> dict[str, Any]:
    if base_url is None and spec.servers:
        base_url = spec.servers[0].url

    ordered = sorted(operations, key=lambda op: (op.path, op.method.value))
    return {
        "info": spec.info,
        "spec_family": "Swagger" if spec.is_swagger2 else "OpenAPI",
        "spec_version": spec.spec_version,
        "base_url": base_url,
        "servers": spec.servers,
        "security_schemes": list(spec.security_schemes.values()),
        "operations": [_operation_context(op) for op in ordered],
    }


def _operation_context(op: APIOperation) -> dict[str, Any]:
    body = op.request_body
    return {
        "name": operation_name(op),
        "operation_id": op.operation_id,
        "method": op.method.value.upper(),
        "path": op.path,
        "summary": op.summary,
        "description": op.description,
        "deprecated": op.deprecated,
        "tags": op.tags,
        "parameters": [
            {
                "name": p.name,
                "location": p.location.value,
                "type": p.schema_type + (f" ({p.schema_format})" if p.schema_format else ""),
                "required": p.required,
                "description": p.description or "",
                "enum": p.enum_values,
                "default": p.default,
            }
            for p in op.parameters
        ],
        "body": None
        if body is None
        else {
            "name": body.name,
            "required": body.required,
            "description": body.description,
            "content_types": body.content_types,
            "schema": body.schema_,
        },
        "responses": [
            {
                "status": r.status_code,
                "description": r.description or "",
                "schema": r.schema_,
            }
            for r in op.responses
        ],
    }


def _table_cell(value: Any) -> str:
    """Make *value* safe for a single Markdown table cell."""
    if value is None:
        return ""
    text = str(value).replace("|", "\\|")
    return " ".join(text.split())


def _pretty_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)
