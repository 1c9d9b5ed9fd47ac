"""swagctl -- a command-line front-end for Swagger 2.0 and OpenAPI 3.x specs.

A single ``swagctl`` command dispatches to one of five actions::

    swagctl client path/to/spec.json <method> [args]   # call an operation
    swagctl edit path/to/spec.json                     # browser editor
    swagctl doc path/to/spec.json                      # Markdown reference
    swagctl view path/to/spec.json                     # reference in a pager
    swagctl validate path/to/spec.json                 # list spec errors

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
