"""Browser-based spec editor (``swagctl edit``)."""

from swagctl.editor.server import create_app, create_app_from_env, parse_listen, run_editor

__all__ = ["create_app", "create_app_from_env", "parse_listen", "run_editor"]
