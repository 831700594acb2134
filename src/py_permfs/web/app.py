"""Flask application factory for the PyPermFS web UI.

The ``create_app`` function creates a file system and a shell, and
returns a Flask app with three endpoints:

- ``POST /api/execute`` — execute a shell command and return JSON.
- ``GET /api/status`` — return the current user and tree statistics.
- ``GET /api/ls`` — return a structured directory listing.
"""

from __future__ import annotations

from flask import Flask, Response, jsonify, request

from py_permfs.errors import FileSystemError, PathNotFoundError, PermissionDeniedError
from py_permfs.fs.filesystem import FileSystem
from py_permfs.shell import Shell

_HTTP_BAD_REQUEST = 400
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404


def _error_status(error: FileSystemError) -> int:
    """Map a file system error kind onto an HTTP status code."""
    if isinstance(error, PathNotFoundError):
        return _HTTP_NOT_FOUND
    if isinstance(error, PermissionDeniedError):
        return _HTTP_FORBIDDEN
    return _HTTP_BAD_REQUEST


def create_app(filesystem: FileSystem | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        filesystem: The tree to serve (a fresh one by default).

    Returns:
        A configured Flask application ready to serve.

    """
    shell = Shell(filesystem=filesystem)
    fs = shell.filesystem

    app = Flask(__name__)

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a shell command and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output`` and ``halted`` fields.

        """
        data = request.get_json(silent=True)
        if data is None or "command" not in data:
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        command: str = data["command"]
        result = shell.execute(command)
        if result == Shell.EXIT_SENTINEL:
            return jsonify({"output": "Session closed.", "halted": True})
        return jsonify({"output": result, "halted": False})

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the current user plus node and user counts."""
        return jsonify(
            {
                "user": shell.current_user,
                "nodes": fs.node_count,
                "users": len(fs.users),
            }
        )

    @app.route("/api/ls")
    def ls() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return the listing of ``?path=`` as JSON (``?recursive=1`` to recurse)."""
        path = request.args.get("path", "/")
        recursive = request.args.get("recursive", "0") not in ("", "0", "false")
        try:
            listings = list(fs.walk(path, shell.current_user, recursive=recursive))
        except FileSystemError as e:
            return jsonify({"error": str(e)}), _error_status(e)
        return jsonify(
            [
                {
                    "path": listing.path,
                    "entries": [
                        {
                            "name": entry.name,
                            "kind": entry.kind.value,
                            "capabilities": entry.capabilities,
                            "owner": entry.owner,
                            "size": entry.size,
                        }
                        for entry in listing.entries
                    ],
                }
                for listing in listings
            ]
        )

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``py-permfs-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
