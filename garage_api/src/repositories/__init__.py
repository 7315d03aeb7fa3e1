"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each domain area and share the
AsyncSession handed out by src.db.session.get_async_session. Ownership checks
live in the services, not here.
"""
