"""
Core application utilities for settings, logging, errors and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Logging with correlation and user context
- Domain exceptions and the retry-with-backoff wrapper
- Dependency helpers (data client, current user, role checks)
"""
