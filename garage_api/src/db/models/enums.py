"""Enumerations shared by ORM models, schemas and domain services."""
from __future__ import annotations

from enum import Enum


class EngineType(str, Enum):
    Fuel = "Fuel"
    Hybrid = "Hybrid"
    PlugInHybrid = "PlugInHybrid"
    Electric = "Electric"
    Hydrogen = "Hydrogen"


class EnergyType(str, Enum):
    Gasoline = "Gasoline"
    Diesel = "Diesel"
    LPG = "LPG"
    CNG = "CNG"
    Ethanol = "Ethanol"
    Biofuel = "Biofuel"
    Electric = "Electric"
    Hydrogen = "Hydrogen"


class EnergyUnit(str, Enum):
    Liter = "Liter"
    Gallon = "Gallon"
    CubicMeter = "CubicMeter"
    kWh = "kWh"


class VehicleType(str, Enum):
    Bus = "Bus"
    Car = "Car"
    Motorbike = "Motorbike"
    Truck = "Truck"


class ServiceItemType(str, Enum):
    Part = "Part"
    Labor = "Labor"
    Tax = "Tax"
    Other = "Other"
