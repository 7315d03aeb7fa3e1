from __future__ import annotations

import io
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

import pandas as pd
from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.results import unwrap
from src.core.deps import CurrentUser, get_current_user
from src.db.models.vehicles import Vehicle
from src.db.session import get_async_session
from src.repositories.energy import EnergyEntryRepository
from src.repositories.maintenance import ServiceRecordRepository
from src.repositories.vehicles import VehicleRepository
from src.services.vehicles import load_owned_vehicle

# PUBLIC_INTERFACE
router = APIRouter(prefix="/reports", tags=["Reports"])

ENERGY_ENTRY_COLUMNS = ["date", "mileage", "type", "energy_unit", "volume", "price_per_unit", "cost"]
SERVICE_RECORD_COLUMNS = ["service_date", "title", "type", "mileage", "items", "total_cost", "notes"]


class ExportFormat(str, Enum):
    csv = "csv"
    xlsx = "xlsx"
    pdf = "pdf"


def _pdf_bytes(df: pd.DataFrame, title: str) -> io.BytesIO:
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import landscape, letter
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
    )
    generated = datetime.now(tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    elements: list = [Paragraph(f"{title} ({generated})", getSampleStyleSheet()["Title"])]

    table = Table([list(df.columns)] + df.astype(str).values.tolist(), repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    elements.append(table)
    doc.build(elements)
    buffer.seek(0)
    return buffer


# PUBLIC_INTERFACE
def export_dataframe(df: pd.DataFrame, filename_base: str, title: str, export_format: ExportFormat) -> StreamingResponse:
    """
    Stream a DataFrame as an attachment.

    csv is written with pandas, xlsx through the openpyxl engine and pdf as a
    single reportlab table.
    """
    headers = {"Content-Disposition": f'attachment; filename="{filename_base}.{export_format.value}"'}

    if export_format == ExportFormat.xlsx:
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        buffer.seek(0)
        return StreamingResponse(
            buffer,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers=headers,
        )

    if export_format == ExportFormat.pdf:
        return StreamingResponse(_pdf_bytes(df, title), media_type="application/pdf", headers=headers)

    text = io.StringIO()
    df.to_csv(text, index=False)
    text.seek(0)
    return StreamingResponse(text, media_type="text/csv", headers=headers)


def _slug(vehicle: Vehicle) -> str:
    return f"{vehicle.brand}_{vehicle.model}".replace(" ", "_").lower()


# PUBLIC_INTERFACE
@router.get(
    "/vehicles/{vehicle_id}/energy-entries",
    summary="Energy entries report",
    description="Exports the vehicle's energy entries ordered by date.",
    response_description="File stream (CSV/XLSX/PDF)",
)
async def energy_entries_report(
    vehicle_id: UUID = Path(...),
    format: ExportFormat = Query(ExportFormat.csv, description="Export format: csv | xlsx | pdf"),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> StreamingResponse:
    vehicle = unwrap(await load_owned_vehicle(VehicleRepository(session), vehicle_id, current.id))
    entries = await EnergyEntryRepository(session).list_for_vehicle(vehicle.id)

    data = [
        {
            "date": e.date,
            "mileage": e.mileage,
            "type": e.type.value,
            "energy_unit": e.energy_unit.value,
            "volume": e.volume,
            "price_per_unit": e.price_per_unit,
            "cost": e.cost,
        }
        for e in sorted(entries, key=lambda e: (e.date, e.mileage))
    ]
    df = pd.DataFrame(data, columns=ENERGY_ENTRY_COLUMNS)
    return export_dataframe(
        df, f"{_slug(vehicle)}_energy_entries", f"{vehicle.brand} {vehicle.model} energy entries", format
    )


# PUBLIC_INTERFACE
@router.get(
    "/vehicles/{vehicle_id}/service-records",
    summary="Service records report",
    description="Exports the vehicle's service history, newest first, with its total costs.",
    response_description="File stream (CSV/XLSX/PDF)",
)
async def service_records_report(
    vehicle_id: UUID = Path(...),
    format: ExportFormat = Query(ExportFormat.csv, description="Export format: csv | xlsx | pdf"),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> StreamingResponse:
    vehicle = unwrap(await load_owned_vehicle(VehicleRepository(session), vehicle_id, current.id))
    records = await ServiceRecordRepository(session).list_for_vehicle(vehicle.id)

    data = [
        {
            "service_date": r.service_date,
            "title": r.title,
            "type": r.type.name if r.type else None,
            "mileage": r.mileage,
            "items": len(r.items),
            "total_cost": round(r.total_cost, 2),
            "notes": r.notes,
        }
        for r in sorted(records, key=lambda r: r.service_date, reverse=True)
    ]
    df = pd.DataFrame(data, columns=SERVICE_RECORD_COLUMNS)
    # Excel cannot store tz-aware datetimes.
    if not df.empty:
        df["service_date"] = pd.to_datetime(df["service_date"], utc=True).dt.tz_localize(None)
    return export_dataframe(
        df, f"{_slug(vehicle)}_service_records", f"{vehicle.brand} {vehicle.model} service records", format
    )
