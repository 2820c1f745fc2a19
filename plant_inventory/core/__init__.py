"""
Core application utilities for settings, logging, security and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Logging configuration with correlation and user context
- Password hashing and JWT helpers
- Dependency helpers (DB session, current user, role checks)
"""
