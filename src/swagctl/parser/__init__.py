"""Spec parser -- load, resolve ``$ref`` pointers, extract operations, validate.

This sub-package turns a raw Swagger 2.0 or OpenAPI 3.x document (JSON or
YAML, local file or remote URL) into a :class:`~swagctl.models.ParsedSpec`
that the dynamic client and the documentation renderer consume.

Typical usage::

    from swagctl.parser import open_spec, operation_name

    spec = open_spec("https://petstore.swagger.io/v2/swagger.json")
    for op in spec.operations:
        print(operation_name(op))

Sub-modules:

* :mod:`~swagctl.parser.loader` -- I/O layer (URL, file, stdin) plus format
  and version detection.
* :mod:`~swagctl.parser.resolver` -- Recursive ``$ref`` inlining with cycle
  detection.
* :mod:`~swagctl.parser.extractor` -- Builds :class:`~swagctl.models.ParsedSpec`.
* :mod:`~swagctl.parser.naming` -- Method names used by ``swagctl client``.
* :mod:`~swagctl.parser.validator` -- Meta-schema validation.
"""

from __future__ import annotations

from swagctl.models import ParsedSpec
from swagctl.parser.extractor import extract_spec
from swagctl.parser.loader import detect_spec_version, load_spec, parse_spec_text
from swagctl.parser.naming import operation_name, snake_case


def open_spec(source: str) -> ParsedSpec:
    """Load, version-check, and extract the spec at *source* in one call.

    Raises:
        SpecParseError: If the document cannot be loaded, has no supported
            version, or contains unresolvable ``$ref`` pointers.
    """
    raw = load_spec(source)
    version = detect_spec_version(raw)
    return extract_spec(raw, version, source=source)


__all__ = [
    "detect_spec_version",
    "extract_spec",
    "load_spec",
    "open_spec",
    "operation_name",
    "parse_spec_text",
    "snake_case",
]
