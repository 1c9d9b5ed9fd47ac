"""Read Swagger/OpenAPI documents into plain dictionaries.

A source is a local path, an ``http(s)://`` URL or ``-`` for stdin. Both
JSON and YAML are accepted: the file extension or ``Content-Type`` gives a
hint, and the text itself has the final say.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from swagctl.exceptions import SpecParseError

logger = logging.getLogger(__name__)

_SUFFIX_HINTS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_spec(source: str) -> dict[str, Any]:
    """Read and decode the spec at *source*.

    Raises:
        SpecParseError: The source is missing, unreachable, empty, or not a
            JSON/YAML object.
    """
    logger.debug("Loading spec from %s", source)
    if source == "-":
        text, hint = _read_stdin(), ""
    elif source.startswith(("http://", "https://")):
        text, hint = _fetch(source)
    else:
        text, hint = _read_file(source)
    return _decode(text, hint)


def parse_spec_text(content: str, hint: str = "") -> dict[str, Any]:
    """Decode a document held in memory, as the editor receives it.

    *hint* is ``"json"``, ``"yaml"`` or empty.
    """
    if not content.strip():
        raise SpecParseError("Spec document is empty")
    return _decode(content, hint)


def _read_stdin() -> str:
    try:
        text = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not text.strip():
        raise SpecParseError("No input received from stdin")
    return text


def _fetch(url: str) -> tuple[str, str]:
    """GET *url*; return the body and a format hint from its content type."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(f"HTTP {exc.response.status_code} fetching spec from {url}") from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.text, "json"
    if "yaml" in content_type or "yml" in content_type:
        return response.text, "yaml"
    return response.text, ""


def _read_file(path: str) -> tuple[str, str]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    if not text.strip():
        raise SpecParseError(f"Spec file is empty: {path}")
    return text, _SUFFIX_HINTS.get(file_path.suffix.lower(), "")


def _decode(text: str, hint: str = "") -> dict[str, Any]:
    """Decode *text* as JSON, then YAML.

    A ``json`` hint reports the JSON error straight away rather than a
    confusing YAML one; a ``yaml`` hint skips JSON.
    """
    problems = []

    if hint != "yaml":
        try:
            return _as_object(json.loads(text))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            problems.append(f"JSON error: {exc}")

    try:
        return _as_object(yaml.safe_load(text))
    except yaml.YAMLError as exc:
        problems.append(f"YAML error: {exc}")

    raise SpecParseError("\n  ".join(["Failed to parse spec as JSON or YAML", *problems]))


def _as_object(document: Any) -> dict[str, Any]:
    if isinstance(document, dict):
        return document
    got = "empty document" if document is None else type(document).__name__
    raise SpecParseError(f"Spec must be a JSON/YAML object (got {got})")


def detect_spec_version(spec: dict[str, Any]) -> str:
    """Return ``"2.0"`` for Swagger documents or the ``openapi`` version.

    YAML loads an unquoted ``swagger: 2.0`` as a float, which is accepted.

    Raises:
        SpecParseError: Neither field is present, or the version is not
            Swagger 2.0 or OpenAPI 3.x.
    """
    supported = "Only Swagger 2.0 and OpenAPI 3.x are supported."
    if "swagger" in spec:
        version = str(spec["swagger"])
        if version != "2.0":
            raise SpecParseError(f"Unsupported Swagger version: {version}. {supported}")
        return version

    if spec.get("openapi") is None:
        raise SpecParseError("Missing 'swagger' or 'openapi' field. Is this a Swagger/OpenAPI document?")

    version = str(spec["openapi"])
    if not version.startswith("3."):
        raise SpecParseError(f"Unsupported OpenAPI version: {version}. {supported}")
    return version
