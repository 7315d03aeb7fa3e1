"""
ORM models for users, vehicles, energy entries and maintenance history.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .enums import (  # noqa: F401
    EnergyType,
    EnergyUnit,
    EngineType,
    ServiceItemType,
    VehicleType,
)
from .security import (  # noqa: F401
    User,
    RefreshToken,
)
from .vehicles import (  # noqa: F401
    Vehicle,
    VehicleEnergyType,
)
from .energy import (  # noqa: F401
    EnergyEntry,
)
from .maintenance import (  # noqa: F401
    ServiceType,
    ServiceRecord,
    ServiceItem,
)
