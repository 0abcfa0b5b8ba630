"""Browser-based web UI for bank-os.

This package provides a Flask application that exposes the shell
through a web browser.  It is an **optional** extra - install with::

    pip install bank-os[web]

The ``create_app`` factory in ``app.py`` builds a banking system,
creates a shell, and serves three endpoints:

- ``GET /`` - HTML terminal page.
- ``POST /api/execute`` - execute a shell command and return JSON.
- ``GET /api/status`` - process table and IPC queue depths as JSON.
"""
