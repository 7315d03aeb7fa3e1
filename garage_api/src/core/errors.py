"""Catalogue of business errors returned inside Result values."""
from __future__ import annotations

from typing import Iterable
from uuid import UUID

from src.core.result import Error

_NOT_AUTHORIZED = "You are not authorized to perform this action."


def _names(values: Iterable) -> str:
    return ", ".join(getattr(v, "value", str(v)) for v in values)


class AuthErrors:
    CredentialsInvalid = Error.unauthorized("Auth.CredentialsInvalid", "Invalid email or password.")
    PasswordInvalid = Error.validation("Auth.PasswordInvalid", "Password is invalid.")
    TokenInvalid = Error.unauthorized("Auth.TokenInvalid", "Token is invalid.")
    TokenRevoked = Error.unauthorized("Auth.TokenRevoked", "Token has been revoked.")
    TokenExpired = Error.unauthorized("Auth.TokenExpired", "Token has expired.")


class UserErrors:
    EmailNotUnique = Error.conflict("User.EmailNotUnique", "This email is already in use.")
    NotFound = Error.not_found("User.NotFound", "User was not found.")
    PasswordSameAsOld = Error.validation(
        "User.PasswordSameAsOld", "New password must be different from current password."
    )
    UpdateFailed = Error.problem("User.UpdateFailed", "Update user failed")
    Unauthorized = Error.unauthorized("User.Unauthorized", _NOT_AUTHORIZED)
    DeleteCurrentSession = Error.problem("User.SessionsDelete", "Cannot delete current session.")
    SessionNotFound = Error.not_found("User.SessionNotFound", "Session not found")

    @staticmethod
    def PasswordTooShort(min_length: int) -> Error:
        return Error.validation(
            "User.PasswordTooShort", f"Password must be at least {min_length} characters long."
        )


class VehicleErrors:
    Unauthorized = Error.unauthorized("Vehicles.Unauthorized", _NOT_AUTHORIZED)
    CreateFailed = Error.failure("Vehicles.CreateFailed", "Failed to create vehicle")

    @staticmethod
    def NotFound(vehicle_id: UUID) -> Error:
        return Error.not_found("Vehicles.NotFound", f"Not found vehicle with Id = '{vehicle_id}'")

    @staticmethod
    def UpdateFailed(vehicle_id: UUID) -> Error:
        return Error.failure("Vehicles.UpdateFailed", f"Failed to update vehicle with Id = '{vehicle_id}'")

    @staticmethod
    def DeleteFailed(vehicle_id: UUID) -> Error:
        return Error.failure("Vehicles.DeleteFailed", f"Failed to delete vehicle with Id = '{vehicle_id}'")

    @staticmethod
    def CannotRemoveEnergyTypes(energy_types: Iterable, entries_count: int) -> Error:
        return Error.conflict(
            "Vehicles.CannotRemoveEnergyTypes",
            f"Cannot remove energy types [{_names(energy_types)}] because "
            f"{entries_count} energy entries use them.",
        )


class EnergyEntryErrors:
    Unauthorized = Error.unauthorized("EnergyEntries.Unauthorized", _NOT_AUTHORIZED)
    IncorrectMileage = Error.validation(
        "EnergyEntries.IncorrectMileage",
        "Mileage must not decrease over time: it conflicts with another entry of this vehicle.",
    )
    CreateFailed = Error.failure("EnergyEntries.CreateFailed", "Failed to create energy entry.")

    @staticmethod
    def UpdateFailed(entry_id: UUID) -> Error:
        return Error.failure("EnergyEntries.UpdateFailed", f"Failed to update energy entry with Id = '{entry_id}'.")

    @staticmethod
    def DeleteFailed(entry_id: UUID) -> Error:
        return Error.failure("EnergyEntries.DeleteFailed", f"Failed to delete energy entry with Id = '{entry_id}'.")

    @staticmethod
    def NotFound(entry_id: UUID) -> Error:
        return Error.not_found("EnergyEntries.NotFound", f"Energy entry with Id = '{entry_id}' was not found.")

    @staticmethod
    def IncompatibleEnergyType(energy_type) -> Error:
        return Error.validation(
            "EnergyEntries.IncompatibleEnergyType",
            f"Energy type '{_names([energy_type])}' is not configured for this vehicle.",
        )


class ServiceRecordErrors:
    Unauthorized = Error.unauthorized("ServiceRecords.Unauthorized", _NOT_AUTHORIZED)
    CreateFailed = Error.failure("ServiceRecords.CreateFailed", "Failed to create service record.")

    @staticmethod
    def NotFound(record_id: UUID) -> Error:
        return Error.not_found("ServiceRecords.NotFound", f"Service record with Id = '{record_id}' was not found.")

    @staticmethod
    def ServiceTypeNotFound(type_id: UUID) -> Error:
        return Error.not_found(
            "ServiceRecords.ServiceTypeNotFound", f"Service Type with Id = '{type_id}' was not found."
        )

    @staticmethod
    def UpdateFailed(record_id: UUID) -> Error:
        return Error.failure(
            "ServiceRecords.UpdateFailed", f"Failed to update service record with Id = '{record_id}'."
        )

    @staticmethod
    def DeleteFailed(record_id: UUID) -> Error:
        return Error.failure("ServiceRecords.DeleteFailed", "Failed to delete service record.")


class ServiceItemErrors:
    Unauthorized = Error.unauthorized("ServiceItems.Unauthorized", _NOT_AUTHORIZED)
    CreateFailed = Error.failure("ServiceItems.CreateFailed", "Failed to create service item.")

    @staticmethod
    def NotFound(item_id: UUID) -> Error:
        return Error.not_found("ServiceItems.NotFound", f"Service Item with Id = '{item_id}' was not found.")

    @staticmethod
    def UpdateFailed(item_id: UUID) -> Error:
        return Error.failure("ServiceItems.UpdateFailed", f"Failed to update service item with Id = '{item_id}'.")

    @staticmethod
    def DeleteFailed(item_id: UUID) -> Error:
        return Error.failure("ServiceItems.DeleteFailed", f"Failed to delete service item with Id = '{item_id}'.")


class VehicleEnergyTypeErrors:
    @staticmethod
    def AlreadyExists(vehicle_id: UUID, energy_type) -> Error:
        return Error.conflict(
            "VehicleEnergyType.AlreadyExists",
            f"Vehicle energy type with VehicleId = '{vehicle_id}' and "
            f"EnergyType = '{_names([energy_type])}' already exists",
        )

    @staticmethod
    def IncompatibleWithEngine(energy_type, engine_type) -> Error:
        return Error.validation(
            "VehicleEnergyType.IncompatibleWithEngine",
            f"EnergyType '{_names([energy_type])}' is incompatible with EngineType '{_names([engine_type])}'",
        )

    @staticmethod
    def NotFound(vehicle_id: UUID, energy_type) -> Error:
        return Error.not_found(
            "VehicleEnergyType.NotFound",
            f"Vehicle with Id = '{vehicle_id}' has no energy type '{_names([energy_type])}'",
        )

    @staticmethod
    def DeleteFailedEntriesExists(energy_type) -> Error:
        return Error.conflict(
            "VehicleEnergyType.DeleteFailedEntriesExists",
            f"Failed to delete energy type '{_names([energy_type])}'. "
            "There are energy entries that need to be deleted first.",
        )
