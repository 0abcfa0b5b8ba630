"""Flask application factory for the bank-os web UI.

The ``create_app`` function builds a banking system, creates a shell,
and returns a Flask app with three endpoints:

- ``GET /`` - render the terminal HTML page.
- ``POST /api/execute`` - execute a command and return JSON.
- ``GET /api/status`` - return the process table and IPC status.
"""

from __future__ import annotations

from flask import Flask, Response, jsonify, render_template, request

from bank_os.shell import Shell
from bank_os.system import BankingSystem, SystemState

_HTTP_BAD_REQUEST = 400


def create_app(system: BankingSystem | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        system: The system to serve, or None to build a default one.

    Returns:
        A configured Flask application ready to serve.

    """
    system = system if system is not None else BankingSystem()
    shell = Shell(system=system)

    app = Flask(__name__)

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the terminal HTML page."""
        return render_template("index.html", commands=shell.commands)

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a shell command and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output`` and ``halted`` fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "command" not in data:
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST
        command = data["command"]  # pyright: ignore[reportUnknownVariableType]
        if not isinstance(command, str):
            return jsonify({"error": "'command' must be a string"}), _HTTP_BAD_REQUEST

        if system.state is not SystemState.RUNNING:
            return jsonify({"output": "System halted.", "halted": True})

        result = shell.execute(command)
        if result == Shell.EXIT_SENTINEL:
            return jsonify({"output": "System halted.", "halted": True})
        return jsonify({"output": result, "halted": False})

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the process table and IPC queue depths.

        Returns:
            JSON with ``running``, ``processes`` and ``ipc`` fields.

        """
        ipc = system.ipc.status()
        processes = [
            {
                "pid": p.pid,
                "transaction_id": p.transaction_id,
                "status": str(p.status),
                "waiting_time": p.waiting_time,
                "turnaround_time": p.turnaround_time,
            }
            for p in system.registry.list_processes()
        ]
        return jsonify(
            {
                "running": system.state is SystemState.RUNNING,
                "processes": processes,
                "ipc": {
                    "global_queue_depth": ipc.global_queue_depth,
                    "mailboxes": {str(pid): depth for pid, depth in ipc.mailboxes.items()},
                },
            }
        )

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``bank-os-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
