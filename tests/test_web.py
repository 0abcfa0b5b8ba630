"""Tests for the browser-based web UI.

Tests use ``pytest.importorskip`` so they are skipped gracefully when
Flask is not installed.
"""

from __future__ import annotations

from typing import Any

import pytest

flask = pytest.importorskip("flask")

from bank_os.config import SystemConfig  # noqa: E402
from bank_os.system import BankingSystem  # noqa: E402
from bank_os.web.app import create_app  # noqa: E402

HTTP_OK = 200
HTTP_BAD_REQUEST = 400


def _create_client(system: BankingSystem | None = None) -> Any:
    """Create a test client from a fresh app."""
    app = create_app(system or BankingSystem(SystemConfig(sync_ack_delay=0)))
    app.config["TESTING"] = True
    return app.test_client()


class TestAppCreation:
    """Verify app factory and landing page."""

    def test_create_app_returns_flask(self) -> None:
        """create_app should return a Flask application."""
        assert isinstance(create_app(), flask.Flask)

    def test_index_returns_html(self) -> None:
        """GET / should return the terminal page."""
        response = _create_client().get("/")
        assert response.status_code == HTTP_OK
        assert b"bank-os" in response.data
        assert "text/html" in response.content_type


class TestExecuteEndpoint:
    """Verify the /api/execute POST endpoint."""

    def test_command_output(self) -> None:
        """A command returns its output."""
        client = _create_client()
        client.post("/api/execute", json={"command": "create A1 50"})
        response = client.post("/api/execute", json={"command": "balance A1"})
        assert response.status_code == HTTP_OK
        assert response.get_json() == {
            "output": "Balance for account A1: 50.0",
            "halted": False,
        }

    def test_missing_command(self) -> None:
        """A body without a command is rejected."""
        response = _create_client().post("/api/execute", json={})
        assert response.status_code == HTTP_BAD_REQUEST
        assert "error" in response.get_json()

    def test_non_json_body(self) -> None:
        """A non-JSON body is rejected."""
        response = _create_client().post("/api/execute", data="help")
        assert response.status_code == HTTP_BAD_REQUEST

    @pytest.mark.parametrize("body", [{"command": 5}, {"command": None}, ["help"], "help"])
    def test_malformed_body(self, body: object) -> None:
        """Non-object bodies and non-string commands are rejected."""
        response = _create_client().post("/api/execute", json=body)
        assert response.status_code == HTTP_BAD_REQUEST
        assert "error" in response.get_json()

    def test_exit_halts(self) -> None:
        """Exit halts the system and later commands say so."""
        client = _create_client()
        first = client.post("/api/execute", json={"command": "exit"}).get_json()
        assert first["halted"] is True
        second = client.post("/api/execute", json={"command": "help"}).get_json()
        assert second == {"output": "System halted.", "halted": True}


class TestStatusEndpoint:
    """Verify the /api/status GET endpoint."""

    def test_status_lists_processes_and_ipc(self) -> None:
        """Status reports processes and queue depths."""
        system = BankingSystem(SystemConfig(sync_ack_delay=0))
        client = _create_client(system)
        client.post("/api/execute", json={"command": "run T1 balance A1"})
        client.post("/api/execute", json={"command": "send 1 2 hi"})
        data = client.get("/api/status").get_json()
        assert data["running"] is True
        assert data["processes"][0]["transaction_id"] == "T1"
        assert data["processes"][0]["status"] == "completed"
        assert data["ipc"]["mailboxes"] == {"2": 1}
        assert data["ipc"]["global_queue_depth"] == 0
