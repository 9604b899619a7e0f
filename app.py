"""Flask web front end for the Name Prefix Tree.

Clients post a menu choice and an optional name to `/execute` and get the
session's response back as JSON. The tree listing can also be requested as
an HTML page.
"""

import threading
from html import escape
from pathlib import Path
from typing import Any, Optional

from flask import Flask, jsonify, request

from src.server.session import (
    MENU_LABELS,
    NAME_COMMANDS,
    Command,
    NameTreeSession,
    RequestParsingError,
)

NAMES_PATH = Path("npt_output.txt")

TREE_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Name Prefix Tree (NPT)</title>
</head>
<body>
    <pre>{tree}</pre>
</body>
</html>
"""


def create_app(
    names_path: Optional[Path] = NAMES_PATH,
    load_names: bool = True,
) -> Flask:
    """Create the web application around a fresh session.

    Args:
        names_path (Optional[Path]): File the names are loaded from and
        saved to.
        load_names (bool): Whether to load `names_path` on start.

    Returns:
        Flask: The configured application.

    """
    app = Flask(__name__)
    session = NameTreeSession(names_path)
    if load_names:
        session.load()
    # Flask may serve requests from several threads
    session_lock = threading.Lock()
    app.config["NPT_SESSION"] = session

    @app.route("/")
    def index() -> Any:
        """Return the available menu choices."""
        return jsonify(
            {
                "choices": {
                    str(command.value): label
                    for command, label in MENU_LABELS.items()
                    if command != Command.EXIT
                },
            },
        )

    @app.route("/execute", methods=["POST"])
    def execute() -> Any:
        """Run one menu choice against the session."""
        payload = request.get_json(silent=True) or {}
        choice = payload.get("choice")
        name = payload.get("name")

        try:
            command = Command(choice)
        except ValueError:
            return jsonify({"error": "Invalid choice."}), 400
        if command == Command.EXIT:
            return jsonify({"error": "Invalid choice."}), 400
        if command in NAME_COMMANDS and not isinstance(name, str):
            return jsonify({"error": "A name is required."}), 400

        try:
            with session_lock:
                output = session.execute(command, name)
        except RequestParsingError as e:
            return jsonify({"error": str(e)}), 400

        accept_header = request.headers.get("Accept", "")
        if command == Command.PRINT and "text/html" in accept_header:
            return TREE_PAGE.format(tree=escape(output))

        return jsonify({"output": output})

    return app


if __name__ == "__main__":
    """Run the Flask application."""
    create_app().run(debug=True)
