"""Documentation rendering -- Markdown and HTML references from a parsed spec.

Exports:
    render_markdown: Full Markdown reference (``swagctl doc``/``view``).
    render_operation_markdown: One method (``swagctl client ... help``).
    render_html: HTML fragment for the editor preview.
"""

from swagctl.docs.renderer import render_html, render_markdown, render_operation_markdown

__all__ = ["render_html", "render_markdown", "render_operation_markdown"]
