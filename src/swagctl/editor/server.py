"""Browser-based spec editor served with FastAPI and uvicorn.

The editor is a single page: a text area holding the spec on the left and
the rendered reference documentation on the right, refreshed as you type.
The page talks to a small JSON/HTML API:

* ``GET /`` -- the editor page.
* ``GET /spec`` -- the spec file's current text (empty without a file).
* ``PUT /spec`` -- save the posted text to the spec file.
* ``POST /render`` -- posted spec text in, HTML documentation out.
* ``POST /validate`` -- posted spec text in, validation errors out.

``swagctl edit`` does not build the app itself. It exports
``SWAGGER_API_FILE`` and ``SWAGGER_LOAD_EDITOR`` and points uvicorn at
:func:`create_app_from_env`, so the reloader can rebuild the app in a fresh
process whenever the spec file changes.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

from swagctl import __version__
from swagctl.config import API_FILE_ENV, LOAD_EDITOR_ENV, atomic_write
from swagctl.docs import render_html
from swagctl.exceptions import InvalidUsageError, SpecParseError
from swagctl.parser import detect_spec_version, extract_spec, parse_spec_text
from swagctl.parser.validator import validate_spec

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

DEFAULT_LISTEN = "http://127.0.0.1:3000"


def create_app(spec_file: Optional[str] = None) -> FastAPI:
    """Build the editor application for *spec_file*.

    Args:
        spec_file: The file to load and save. ``None`` (or empty) starts
            the editor with an empty document and disables saving.
    """
    spec_path = Path(spec_file) if spec_file else None
    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

    app = FastAPI(
        title="swagctl editor",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get("/", response_class=HTMLResponse)
    async def editor_page(request: Request) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "editor.html",
            {
                "spec_file": str(spec_path) if spec_path else None,
                "version": __version__,
            },
        )

    @app.get("/spec", response_class=PlainTextResponse)
    def read_spec() -> str:
        if spec_path is None or not spec_path.is_file():
            return ""
        return spec_path.read_text(encoding="utf-8")

    @app.put("/spec")
    async def save_spec(request: Request) -> dict:
        if spec_path is None:
            raise HTTPException(status_code=409, detail="The editor was started without a spec file")
        text = await _body_text(request)
        try:
            parse_spec_text(text, hint=_hint_for(spec_path))
        except SpecParseError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        await run_in_threadpool(atomic_write, spec_path, text)
        logger.info("Saved %s (%d bytes)", spec_path, len(text))
        return {"saved": str(spec_path), "bytes": len(text.encode("utf-8"))}

    @app.post("/render", response_class=HTMLResponse)
    async def render_spec(request: Request) -> str:
        text = await _body_text(request)
        try:
            raw = parse_spec_text(text)
            spec = extract_spec(raw, detect_spec_version(raw), source=str(spec_path) if spec_path else None)
        except SpecParseError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return render_html(spec)

    @app.post("/validate")
    async def validate_text(request: Request) -> dict:
        text = await _body_text(request)
        try:
            errors = validate_spec(parse_spec_text(text))
        except SpecParseError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"valid": not errors, "errors": errors}

    return app


def create_app_from_env() -> FastAPI:
    """App factory for uvicorn: reads the spec file from ``SWAGGER_API_FILE``."""
    return create_app(os.environ.get(API_FILE_ENV) or None)


def parse_listen(listen: str) -> tuple[str, int]:
    """Turn a morbo-style listen URL into a ``(host, port)`` pair.

    ``*`` (and an empty host) means all interfaces. The port defaults to 3000.

    Example::

        >>> parse_listen("http://*:5000")
        ('0.0.0.0', 5000)

    Raises:
        InvalidUsageError: For non-HTTP schemes or an invalid port.
    """
    if "://" not in listen:
        listen = f"http://{listen}"
    # urlparse rejects '*' as a hostname, so swap it out first.
    parsed = urlparse(listen.replace("://*", "://0.0.0.0", 1))
    if parsed.scheme != "http":
        raise InvalidUsageError(f"Unsupported listen URL: {listen} (only http:// is supported)")
    try:
        port = parsed.port or 3000
    except ValueError as exc:
        raise InvalidUsageError(f"Invalid port in listen URL: {listen}") from exc
    return parsed.hostname or "0.0.0.0", port


def run_editor(
    spec_file: Optional[str],
    listen: str = DEFAULT_LISTEN,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """Serve the editor until interrupted.

    With *reload*, uvicorn restarts the app whenever the spec file (or any
    JSON/YAML file next to it) changes.
    """
    host, port = parse_listen(listen)
    os.environ[API_FILE_ENV] = spec_file or ""
    os.environ[LOAD_EDITOR_ENV] = "1"

    kwargs: dict = {}
    if reload:
        watch_dir = str(Path(spec_file).resolve().parent) if spec_file else os.getcwd()
        kwargs = {
            "reload": True,
            "reload_dirs": [watch_dir],
            "reload_includes": ["*.json", "*.yaml", "*.yml"],
        }

    logger.debug("Starting editor on %s:%d for %s", host, port, spec_file or "<new document>")
    uvicorn.run(
        "swagctl.editor.server:create_app_from_env",
        factory=True,
        host=host,
        port=port,
        log_level=log_level,
        **kwargs,
    )


async def _body_text(request: Request) -> str:
    try:
        return (await request.body()).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"Request body is not UTF-8 text: {exc}") from exc


def _hint_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return ""
