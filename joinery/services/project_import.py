# joinery/services/project_import.py
"""
Bulk-load projects from a spreadsheet export (CSV with a header row).

Rows are upserted by project_number, so re-running an import refreshes
existing projects instead of duplicating them. Blank cells fall back to
the model defaults.
"""
from __future__ import annotations

import csv
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, TextIO

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from joinery.core.logging import get_logger
from joinery.crud.project import upsert_project
from joinery.schemas.project import ProjectCreate

logger = get_logger(__name__)


@dataclass
class ImportReport:
    created: int = 0
    updated: int = 0
    errors: List[str] = field(default_factory=list)


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


def row_to_project(row: Dict[str, Any]) -> ProjectCreate:
    """Map one CSV row onto ProjectCreate. Raises ValidationError on bad data."""
    values: Dict[str, Any] = {k: _blank_to_none(v) if isinstance(v, str) else v for k, v in row.items() if k}
    budget = values.get("overall_project_budget")
    if isinstance(budget, str):
        values["overall_project_budget"] = budget.replace("$", "").replace(",", "")
    start = values.get("install_commencement_date")
    if isinstance(start, str):
        values["install_commencement_date"] = date.fromisoformat(start)
    if values.get("project_address") is None:
        values["project_address"] = values.get("project_name") or ""
    return ProjectCreate(**{k: v for k, v in values.items() if v is not None})


async def import_rows(db: AsyncSession, rows: Iterable[Dict[str, Any]]) -> ImportReport:
    report = ImportReport()
    for line_no, row in enumerate(rows, start=2):  # header is line 1
        try:
            data = row_to_project(row)
        except (ValidationError, ValueError) as e:
            report.errors.append(f"line {line_no}: {e}")
            logger.warning("project_import_row_rejected", line=line_no, error=str(e))
            continue
        _, created = await upsert_project(db, data)
        if created:
            report.created += 1
        else:
            report.updated += 1
    logger.info("project_import_done", created=report.created, updated=report.updated,
                errors=len(report.errors))
    return report


async def import_csv(db: AsyncSession, fh: TextIO) -> ImportReport:
    return await import_rows(db, csv.DictReader(fh))
