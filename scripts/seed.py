"""Seed script — load the historical experiments bank into the AquaLab database.

Loads either:
1. A CSV export of the bank (columns: Date, Time, Longitude, Latitude,
   Turbidity, TDS, pH; blank cells mean "not recorded"), or
2. A small built-in demo bank when no path is given.

Idempotent: skips if the bank already holds samples.

Usage:
    python -m scripts.seed                  # demo bank, DATABASE_URL from .env
    python -m scripts.seed path/to/bank.csv
    pytest tests/scripts/test_seed.py       # against aiosqlite in-memory
"""

import asyncio
import csv
import datetime as dt
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from src.repositories.experiments import ExperimentBankRepository

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Demo bank: a few geographically spread samples
# ---------------------------------------------------------------------------

DEMO_BANK_SAMPLES: list[dict] = [
    {"date": dt.date(2023, 3, 14), "time": dt.time(9, 30), "longitude": 120.9842,
     "latitude": 14.5995, "turbidity": 4.2, "tds": 310.0, "ph": 7.1},
    {"date": dt.date(2023, 5, 2), "time": dt.time(14, 5), "longitude": 36.8219,
     "latitude": -1.2921, "turbidity": 12.8, "tds": 540.0, "ph": 6.4},
    {"date": dt.date(2023, 7, 21), "time": dt.time(11, 0), "longitude": 77.209,
     "latitude": 28.6139, "turbidity": 25.0, "tds": 880.0, "ph": 8.3},
    {"date": dt.date(2023, 9, 9), "time": dt.time(16, 45), "longitude": -47.8825,
     "latitude": -15.7942, "turbidity": 1.1, "tds": 95.0, "ph": 6.9},
    {"date": dt.date(2024, 1, 18), "time": dt.time(8, 15), "longitude": 13.405,
     "latitude": 52.52, "turbidity": 0.4, "tds": 210.0, "ph": 7.6},
]

# CSV header -> column name
_CSV_COLUMNS: dict[str, str] = {
    "Date": "date",
    "Time": "time",
    "Longitude": "longitude",
    "Latitude": "latitude",
    "Turbidity": "turbidity",
    "TDS": "tds",
    "pH": "ph",
}

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%m/%d/%Y")
_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


# ---------------------------------------------------------------------------
# CSV parsing
# ---------------------------------------------------------------------------


@dataclass
class BankFile:
    """Parsed CSV: rows ready for insertion plus rejected line numbers."""

    rows: list[dict] = field(default_factory=list)
    skipped_lines: list[int] = field(default_factory=list)


def _parse_date(value: str) -> dt.date:
    for fmt in _DATE_FORMATS:
        try:
            return dt.datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {value!r}")


def _parse_time(value: str) -> dt.time:
    for fmt in _TIME_FORMATS:
        try:
            return dt.datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized time: {value!r}")


def parse_bank_row(raw: dict[str, str | None]) -> dict:
    """Convert one CSV record to repository keyword arguments.

    Blank cells become None. Raises ValueError on unparseable values.
    """
    row: dict = {}
    for header, column in _CSV_COLUMNS.items():
        cell = (raw.get(header) or "").strip()
        if not cell:
            row[column] = None
        elif column == "date":
            row[column] = _parse_date(cell)
        elif column == "time":
            row[column] = _parse_time(cell)
        else:
            row[column] = float(cell)
    return row


def load_bank_csv(path: Path) -> BankFile:
    """Read a bank CSV, skipping (and recording) rows that fail to parse."""
    result = BankFile()
    with path.open(newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        missing = set(_CSV_COLUMNS) - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"Bank CSV missing columns: {sorted(missing)}")
        # Line 1 is the header.
        for line_no, raw in enumerate(reader, start=2):
            try:
                result.rows.append(parse_bank_row(raw))
            except ValueError as exc:
                logger.warning("Skipping bank CSV line %d: %s", line_no, exc)
                result.skipped_lines.append(line_no)
    return result


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


async def seed_bank(session: AsyncSession, rows: list[dict]) -> dict:
    """Insert bank samples unless the bank already has data.

    Returns dict with keys: created (bool), inserted (int), existing (int).
    """
    repo = ExperimentBankRepository(session)
    existing = await repo.count()
    if existing:
        return {"created": False, "inserted": 0, "existing": existing}

    for row in rows:
        await repo.create(**row)
    return {"created": True, "inserted": len(rows), "existing": 0}


async def _run_seed(csv_path: Path | None = None) -> None:
    """Entry point for `python -m scripts.seed`."""
    from src.db.session import async_session_factory

    skipped: list[int] = []
    if csv_path is None:
        rows = DEMO_BANK_SAMPLES
    else:
        parsed = load_bank_csv(csv_path)
        rows, skipped = parsed.rows, parsed.skipped_lines

    async with async_session_factory() as session:
        result = await seed_bank(session, rows)
        if not result["created"]:
            print(f"Bank already seeded ({result['existing']} samples). Skipping.")
            return
        await session.commit()

    print("Seed complete.")
    print(f"  Samples inserted: {result['inserted']}")
    if skipped:
        print(f"  Lines skipped:    {len(skipped)} ({', '.join(map(str, skipped[:10]))})")


if __name__ == "__main__":
    asyncio.run(_run_seed(Path(sys.argv[1]) if len(sys.argv) > 1 else None))
