"""
Core application utilities.

This package provides:
- Application-level settings (separate from DB settings)
- Logging configuration with request context
- Password hashing and token helpers
- Result/Error values and the business error catalogue
- FastAPI dependencies (current user, client info)
"""
