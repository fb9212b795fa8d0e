"""WSGI entry point for the task tracker API."""

import os

from tasktracker import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
