"""
HomeServices Test Suite

Tests are organized into:
- unit/: Validators, models and security helpers
- integration/: HTTP API against an in-memory database
"""
