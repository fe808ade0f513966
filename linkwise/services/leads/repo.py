"""Persistence for lead records: the local JSON snapshot and the durable lead store.

Error handling contract:
- write_snapshot raises on failure. The snapshot is the durability fallback,
  so a run that cannot write it must not pretend to have succeeded.
- LeadStore.ensure_table and insert_leads wrap any database failure in
  LeadStoreError. The pipeline treats that as best-effort and only logs it.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Sequence

from loguru import logger
from pydantic import ValidationError

from linkwise.db.db import Database
from .exceptions import InputError, LeadStoreError
from .models import NAME_NOT_FOUND, LeadInput, LeadRecord

LEAD_COLUMNS = (
    "name",
    "bio",
    "url",
    "email",
    "platform",
    "angelScore",
    "icpScore",
    "finalScore",
    "tags",
    "meeting_scheduled",
    "meeting_time",
    "created_at",
)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _quote(identifier: str) -> str:
    if not _IDENTIFIER.match(identifier):
        raise ValueError(f"Invalid SQL identifier: {identifier!r}")
    return f'"{identifier}"'


def create_table_sql(table: str = "leads") -> str:
    return f"""
        CREATE TABLE IF NOT EXISTS {_quote(table)} (
            id BIGSERIAL PRIMARY KEY,
            "name" TEXT NOT NULL,
            "bio" TEXT,
            "url" TEXT NOT NULL,
            "email" TEXT,
            "platform" TEXT NOT NULL DEFAULT 'LinkedIn',
            "angelScore" DOUBLE PRECISION NOT NULL,
            "icpScore" DOUBLE PRECISION NOT NULL,
            "finalScore" DOUBLE PRECISION NOT NULL,
            "tags" TEXT,
            "meeting_scheduled" BOOLEAN NOT NULL DEFAULT FALSE,
            "meeting_time" TIMESTAMPTZ,
            "created_at" TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """


def insert_leads_sql(table: str = "leads") -> str:
    columns = ", ".join(_quote(column) for column in LEAD_COLUMNS)
    placeholders = ", ".join(f"${i}" for i in range(1, len(LEAD_COLUMNS) + 1))
    return f"INSERT INTO {_quote(table)} ({columns}) VALUES ({placeholders})"


def lead_row_values(record: LeadRecord) -> tuple:
    row = record.model_dump(by_alias=True)
    return tuple(row[column] for column in LEAD_COLUMNS)


def is_storable(record: LeadRecord) -> bool:
    """Records worth pushing to the store: named, with a URL and a non-zero score"""
    return bool(record.name) and record.name != NAME_NOT_FOUND and bool(record.url) and record.final_score > 0


class LeadStore:
    def __init__(self, database: Database, table: str = "leads"):
        self.database = database
        self.table = table
        self._insert_sql = insert_leads_sql(table)

    async def ensure_table(self) -> None:
        """Create the lead table when it does not exist yet; existing tables are untouched"""
        try:
            await self.database.execute(create_table_sql(self.table))
        except Exception as e:
            logger.error(f"Could not ensure table {self.table}: {e}")
            raise LeadStoreError(f"Failed to prepare table {self.table}: {e}") from e

    async def insert_leads(self, records: Sequence[LeadRecord]) -> int:
        """
        Batch-insert lead records in one transaction.

        Returns:
            Number of rows inserted

        Raises:
            LeadStoreError: When the insert fails; nothing is committed
        """
        if not records:
            logger.warning("No valid leads to push to the lead store")
            return 0

        try:
            await self.database.executemany(
                self._insert_sql, [lead_row_values(record) for record in records]
            )
        except Exception as e:
            logger.error(f"Lead store insert failed: {e}")
            raise LeadStoreError(f"Failed to insert {len(records)} leads: {e}") from e

        logger.info(f"Inserted {len(records)} leads into {self.table}")
        return len(records)


def write_snapshot(path: str | Path, records: Sequence[LeadRecord]) -> Path:
    """
    Write records as a JSON array, replacing any previous snapshot atomically.

    The file is written to a temporary sibling and renamed into place, so
    readers never observe a half-written snapshot.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(
        [record.to_row() for record in records], indent=2, ensure_ascii=False
    )

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Wrote {len(records)} leads to {path}")
    return path


def load_lead_inputs(path: str | Path) -> list[LeadInput]:
    """
    Read the JSON array of profiles to process.

    Raises:
        InputError: When the file is missing, is not a JSON array, or an entry
            has no usable url
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InputError(f"Error reading {path}: {e}") from e

    if not isinstance(data, list):
        raise InputError(f"{path} must contain a JSON array of profiles")

    leads = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise InputError(f"Entry {index} in {path} is not an object")
        try:
            leads.append(LeadInput(**entry))
        except ValidationError as e:
            raise InputError(f"Entry {index} in {path} is invalid: {e}") from e

    logger.info(f"Loaded {len(leads)} profiles from {path}")
    return leads
