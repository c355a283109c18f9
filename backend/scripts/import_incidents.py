#!/usr/bin/env python3
"""
CSV import script for ResQLink incidents.

Every row goes through IncidentService.create, so imported records get the
same validation and defaults as citizen reports. Geocoding is disabled;
rows without a location label get the coordinate fallback.

Expected columns: title, category, severity, description, location, lat,
lng, reporter_name, reporter_phone, reporter_email.
"""

import asyncio
import csv
import sys
from pathlib import Path

from pydantic import ValidationError as SchemaError

from resqlink.database import async_session_maker, engine
from resqlink.errors import ServiceError
from resqlink.schemas import IncidentCreate
from resqlink.services import IncidentService

REPORT_INTERVAL = 500


def log(msg):
    """Print with flush for immediate output."""
    print(msg, flush=True)


def transform_row(row: dict) -> IncidentCreate:
    """Turn a CSV row into a report payload; blank cells are treated as missing."""
    values = {key.strip(): value for key, value in row.items() if key and value not in (None, "")}
    return IncidentCreate.model_validate(values)


async def import_csv(csv_path: str):
    imported = 0
    skipped = 0

    log(f"Reading CSV: {csv_path}")
    async with async_session_maker() as session:
        service = IncidentService(session, geocoder=None)

        with open(csv_path, "r", encoding="utf-8") as f:
            reader = csv.DictReader(f)

            for line, row in enumerate(reader, start=2):
                try:
                    await service.create(transform_row(row))
                except (SchemaError, ServiceError) as e:
                    skipped += 1
                    log(f"  Skipping line {line}: {e}")
                    continue

                imported += 1
                if imported % REPORT_INTERVAL == 0:
                    log(f"Progress: {imported:,} imported")

    log("\nImport complete!")
    log(f"  Imported: {imported:,}")
    log(f"  Skipped (invalid): {skipped:,}")

    await engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        log("Usage: python scripts/import_incidents.py <incidents.csv>")
        sys.exit(1)

    csv_path = sys.argv[1]
    if not Path(csv_path).exists():
        log(f"Error: CSV file not found: {csv_path}")
        sys.exit(1)

    asyncio.run(import_csv(csv_path))
