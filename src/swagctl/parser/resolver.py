"""Inline ``$ref`` JSON Reference pointers in Swagger/OpenAPI documents.

Both spec families point at shared definitions with ``$ref``: Swagger 2.0
uses ``#/definitions/...``, ``#/parameters/...`` and ``#/responses/...``,
OpenAPI 3 uses ``#/components/...``. :func:`resolve_refs` returns a copy of
the document in which every internal pointer has been replaced by its
target, which is what the extractor and the documentation renderer need.

Only internal references (``#/...``) are followed. A reference that is
already being expanded further up the same branch is a cycle; it is left as
the original ``{"$ref": ...}`` dict so recursive schemas (trees, linked
lists) stay finite.

Keys written next to ``$ref`` (OpenAPI 3.1 allows ``description`` and
``summary`` overrides there) are laid over the resolved target.
"""

from __future__ import annotations

import copy
from typing import Any

from swagctl.exceptions import SpecParseError


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of *spec* with all internal ``$ref`` pointers inlined.

    Args:
        spec: The raw document, as returned by
            :func:`~swagctl.parser.loader.load_spec`.

    Returns:
        A new dictionary; *spec* is not modified.

    Raises:
        SpecParseError: If a pointer is external or names a missing location.

    Example::

        resolved = resolve_refs(load_spec("petstore.yaml"))
        schema = resolved["paths"]["/pets"]["get"]["responses"]["200"]["schema"]
    """
    root = copy.deepcopy(spec)
    return _expand(root, root, frozenset())


def resolve_pointer(root: dict[str, Any], ref: str) -> Any:
    """Look up a single ``#/...`` pointer in *root*.

    Segments are unescaped per RFC 6901 (``~1`` is ``/``, ``~0`` is ``~``),
    so ``#/paths/~1pets~1{petId}`` addresses the ``/pets/{petId}`` path item.

    Raises:
        SpecParseError: If *ref* is not internal, or a segment is missing.
    """
    if ref == "#":
        return root
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for raw_segment in ref[2:].split("/"):
        segment = raw_segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': '{segment}' not found"
            )
    return current


def _expand(node: Any, root: dict[str, Any], active: frozenset[str]) -> Any:
    """Depth-first expansion; *active* holds the refs open on this branch."""
    if isinstance(node, list):
        return [_expand(item, root, active) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if not isinstance(ref, str):
        return {key: _expand(value, root, active) for key, value in node.items()}

    if ref in active:
        return node

    target = _expand(resolve_pointer(root, ref), root, active | {ref})
    siblings = {k: v for k, v in node.items() if k != "$ref"}
    if siblings and isinstance(target, dict):
        target = {**target, **_expand(siblings, root, active)}
    return target
