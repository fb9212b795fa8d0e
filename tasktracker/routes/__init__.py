"""
Routes package for the task tracker API.

This package contains route blueprints, both mounted under ``/api``:
- auth: ping, registration, login and profile
- tasks: per-user task CRUD and batch delete
"""
