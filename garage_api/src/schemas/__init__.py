"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by domain module (vehicles, energy entries, service
records, etc.) and also include common reusable models such as the paged
response and standard error envelope.
"""

from .common import MessageResponse  # noqa: F401
