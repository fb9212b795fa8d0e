"""
Test suite for the task tracker.

This package contains:
- unit/: models, tokens, request parsing, config and the client package
- integration/: API endpoints and client flows through the Flask test client
- security/: token handling, tenant isolation and mass assignment
"""
