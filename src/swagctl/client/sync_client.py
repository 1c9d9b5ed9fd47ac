"""Blocking HTTP transport for ``swagctl client``.

:class:`SyncClient` sits under :class:`~swagctl.client.dynamic.DynamicClient`
and owns one :class:`httpx.Client` for the length of a ``with`` block. On
top of httpx it adds a dry-run mode and retries with exponential backoff.

Error statuses are returned, not raised: the command prints the body of a
failed call before :func:`~swagctl.client.response.status_error` turns the
status into an exit code.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

import httpx

from swagctl.exceptions import UnreachableError
from swagctl.models import RequestConfig
from swagctl.output import info

logger = logging.getLogger(__name__)


class SyncClient:
    """Sends requests relative to *base_url*.

    Args:
        base_url: Prefix for every request path; a trailing slash is dropped.
        config: Timeout, SSL verification and retry settings.
        dry_run: Describe requests on stderr instead of sending them.
        transport: httpx transport override, e.g. ``httpx.MockTransport``.

    Example::

        with SyncClient("https://petstore.example.com/v1") as client:
            response = client.request("GET", "/pets", params={"limit": 10})
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[RequestConfig] = None,
        dry_run: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._config = config or RequestConfig()
        self._dry_run = dry_run
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> SyncClient:
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        cookies: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
        data: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request and return the response, whatever its status.

        *data* is sent urlencoded, or as multipart together with *files*;
        *json_body* is used only when neither is given. 5xx responses and
        network errors are retried ``config.max_retries`` times.

        Raises:
            UnreachableError: Every attempt failed without a response.
        """
        headers = {"Accept": "application/json", **(headers or {})}
        params = params or {}

        if self._dry_run:
            return self._describe(method, path, headers, params, json_body, data)

        options: dict[str, Any] = {"headers": headers, "params": params}
        options.update(_body_options(json_body, data, files))
        if cookies:
            options["cookies"] = cookies

        logger.debug("%s %s%s params=%s", method, self._base_url, path, params)
        return self._send(method, path, options)

    def _send(self, method: str, path: str, options: dict[str, Any]) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("SyncClient must be used as a context manager")

        attempts = self._config.max_retries + 1
        attempt = 1
        while True:
            try:
                response = self._client.request(method, path, **options)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt >= attempts:
                    raise UnreachableError(
                        f"Connection failed after {attempts} attempt(s): {exc}"
                    ) from exc
                reason = f"Connection error: {exc}"
            else:
                if response.status_code < 500 or attempt >= attempts:
                    return response
                reason = f"Server error {response.status_code}"

            delay = 2 ** (attempt - 1)
            logger.debug("%s, retrying in %ss (retry %d/%d)", reason, delay, attempt, attempts - 1)
            time.sleep(delay)
            attempt += 1

    def _describe(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, Any],
        json_body: Any,
        data: Optional[dict[str, Any]],
    ) -> httpx.Response:
        """Print what would be sent and return a stand-in 200 response."""
        url = f"{self._base_url}{path}"
        lines = [f"[dry-run] {method} {url}"]
        lines += [f"  Header: {name}: {value}" for name, value in headers.items()]
        lines += [f"  Param: {name}={value}" for name, value in params.items()]
        if data is not None:
            lines.append(f"  Body (form): {json.dumps(data, indent=2, default=str)}")
        elif json_body is not None:
            lines.append(f"  Body (JSON): {json.dumps(json_body, indent=2, default=str)}")
        for line in lines:
            info(line)

        return httpx.Response(
            200,
            json={"dry_run": True, "message": "Request was not sent"},
            request=httpx.Request(method, url),
        )


def _body_options(json_body: Any, data: Optional[dict[str, Any]], files: Optional[dict[str, Any]]) -> dict[str, Any]:
    if files:
        return {"files": files, "data": data or {}}
    if data is not None:
        return {"data": data}
    if json_body is not None:
        return {"json": json_body}
    return {}
