"""
Service layer.

Pure domain services (statistics, filters, validators, compatibility) work on
plain values or SQLAlchemy statements; application services orchestrate
repositories inside one AsyncSession and return Result values.
"""
