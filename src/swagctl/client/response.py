"""Response formatting bridge -- maps :class:`httpx.Response` to the output system.

After an operation call completes, :func:`format_api_response` writes the
status line to stderr and the body to stdout: JSON bodies are
pretty-printed, anything else is printed as received.
:func:`status_error` then turns an error status into the exception whose
exit code ``swagctl client`` terminates with.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from swagctl.exceptions import AuthError, NotFoundError, ServerError, SwagctlError
from swagctl.output import get_output


def format_api_response(response: httpx.Response) -> None:
    """Print the status line to stderr and the body to stdout."""
    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())

    content_type = response.headers.get("content-type", "")
    data = extract_response_data(response)
    if data is None:
        return
    if isinstance(data, str):
        output.format_response(data, content_type or "text/plain")
    else:
        output.format_response(data, content_type or "application/json")


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    JSON is decoded when the content type says JSON or, lacking a content
    type, when the body parses as JSON. Anything else is returned as text.
    Returns ``None`` for an empty body.
    """
    if not response.content:
        return None

    content_type = response.headers.get("content-type", "")
    if "json" in content_type or not content_type:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            pass

    return response.text


def status_error(response: httpx.Response) -> Optional[SwagctlError]:
    """Return the error matching an HTTP error status, or ``None`` below 400.

    * 401 / 403 -> :class:`~swagctl.exceptions.AuthError`
    * 404 -> :class:`~swagctl.exceptions.NotFoundError`
    * 5xx -> :class:`~swagctl.exceptions.ServerError`
    * other 4xx -> :class:`~swagctl.exceptions.SwagctlError`
    """
    status = response.status_code
    if status < 400:
        return None

    message = f"HTTP {status}"
    detail = _error_detail(response)
    if detail:
        message = f"{message}: {detail}"

    if status in (401, 403):
        return AuthError(message)
    if status == 404:
        return NotFoundError(message)
    if status >= 500:
        return ServerError(message)
    return SwagctlError(message)


def _error_detail(response: httpx.Response) -> str:
    data = extract_response_data(response)
    if isinstance(data, dict):
        detail = data.get("message") or data.get("error") or data.get("detail") or ""
        return str(detail)
    if isinstance(data, str):
        return data.strip()[:200]
    return ""
