"""
API route modules.

This package contains subrouters for:
- Auth: register, login, refresh, logout and password changes
- Users: current user profile and sessions
- Vehicles, energy entries, service records and statistics
- Reports: CSV/XLSX/PDF exports

Routers are included from src.api.main (under the /api/v1 prefix).
"""
