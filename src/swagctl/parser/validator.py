"""Validate documents against the Swagger 2.0 / OpenAPI 3.x meta-schemas.

Validation itself is delegated to :mod:`openapi_spec_validator`; this module
picks the validator class that matches the document's declared version and
flattens the errors into ``"<json pointer>: <message>"`` lines, the format
``swagctl validate`` prints and the editor returns.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from openapi_spec_validator import (
    OpenAPIV2SpecValidator,
    OpenAPIV30SpecValidator,
    OpenAPIV31SpecValidator,
)
from referencing.exceptions import Unresolvable

from swagctl.parser.loader import detect_spec_version

logger = logging.getLogger(__name__)


def validate_spec(spec: dict[str, Any], base_uri: str = "") -> list[str]:
    """Return the validation errors of *spec*; an empty list means valid.

    Errors are sorted by JSON pointer and de-duplicated. A ``$ref`` that
    points nowhere stops the validator; it is reported as an error at the
    location of the reference, together with the errors found before it.

    Args:
        spec: The raw (unresolved) document.
        base_uri: Base URI used to resolve relative ``$ref`` pointers.

    Raises:
        SpecParseError: If the document declares no supported version.
    """
    version = detect_spec_version(spec)
    if version.startswith("2."):
        validator_cls = OpenAPIV2SpecValidator
    elif version.startswith("3.0."):
        validator_cls = OpenAPIV30SpecValidator
    else:
        validator_cls = OpenAPIV31SpecValidator

    logger.debug("Validating %s document with %s", version, validator_cls.__name__)
    validator = validator_cls(spec, base_uri=base_uri)
    messages: set[str] = set()
    try:
        for err in validator.iter_errors():
            messages.add(format_error(err))
    except Unresolvable as exc:
        target = f"#{exc.ref}" if exc.ref.startswith("/") else exc.ref
        pointers = list(_ref_pointers(spec, target)) or ["/"]
        messages.update(f"{pointer}: Unresolvable $ref {target!r}" for pointer in pointers)
    return sorted(messages)


def format_error(err: Any) -> str:
    """Format a validation error as ``/json/pointer: message``.

    The pointer segments are escaped per RFC 6901, so an error under the
    ``/pets/{id}`` path reads ``/paths/~1pets~1{id}/get: ...``.
    """
    segments = getattr(err, "absolute_path", None) or getattr(err, "path", None) or []
    pointer = "".join("/" + _escape(segment) for segment in segments)
    message = getattr(err, "message", None) or str(err)
    return f"{pointer or '/'}: {message}"


def _escape(segment: Any) -> str:
    return str(segment).replace("~", "~0").replace("/", "~1")


def _ref_pointers(node: Any, target: str, pointer: str = "") -> Iterator[str]:
    """Yield the pointer of every ``$ref`` in *node* that equals *target*."""
    if isinstance(node, dict):
        if node.get("$ref") == target:
            yield pointer or "/"
        for key, value in node.items():
            yield from _ref_pointers(value, target, f"{pointer}/{_escape(key)}")
    elif isinstance(node, list):
        for index, value in enumerate(node):
            yield from _ref_pointers(value, target, f"{pointer}/{index}")
