"""Method names for operations.

``swagctl client`` calls operations by a *method name*: the snake_case form
of the ``operationId`` (``listPets`` -> ``list_pets``). Operations without an
``operationId`` get a name built from the HTTP method and the path words
(``GET /pets/{petId}`` -> ``get_pets_pet_id``), so every operation stays
callable from the command line.
"""

from __future__ import annotations

import re

from swagctl.models import APIOperation

_NON_WORD_RE = re.compile(r"\W+")


def snake_case(name: str) -> str:
    """Convert a camelCase, PascalCase, or dashed identifier to snake_case.

    Example::

        >>> snake_case("listPets")
        'list_pets'
        >>> snake_case("getHTTPStatus")
        'get_http_status'
        >>> snake_case("delete-pet")
        'delete_pet'
    """
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result)
    result = _NON_WORD_RE.sub("_", result.lower())
    return re.sub(r"_+", "_", result).strip("_")


def operation_name(operation: APIOperation) -> str:
    """Return the method name ``swagctl client`` uses for *operation*."""
    if operation.operation_id:
        name = snake_case(operation.operation_id)
        if name:
            return name
    return snake_case(f"{operation.method.value} {operation.path}")
