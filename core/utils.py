# core/utils.py

import re
from datetime import datetime, timezone
from typing import Any, Optional

from core.logging_config import logger

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def sanitize(data: dict) -> dict:
    """
    Sanitize payload data before it is written to Supabase:
    - Empty strings → None
    - Strip string whitespace
    - Everything else unchanged (phone numbers and codes stay strings)
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped or None
            continue

        clean[k] = v

    return clean


def slugify(value: Optional[str]) -> str:
    """
    "Gulf Fresh Co." → "gulf-fresh-co"
    Returns "" when nothing usable remains.
    """
    if not value:
        return ""
    return _SLUG_INVALID.sub("-", value.strip().lower()).strip("-")


def ok(data: Any = None, **extra) -> dict:
    """Standard success envelope: {"success": true, "data": ...}."""
    body = {"success": True, "data": data}
    body.update(extra)
    return body


def next_document_number(
    client,
    table: str,
    column: str,
    prefix: str,
    company_id: str,
    year: Optional[int] = None,
) -> str:
    """
    "<PREFIX>-<year>-<seq>" continuing the company's highest number for the
    year; sequence zero-padded to three digits. Lookup errors restart at 001.
    """
    year = year or datetime.now(timezone.utc).year
    stem = f"{prefix}-{year}-"

    sequence = 1
    try:
        latest = (
            client.table(table)
            .select(column)
            .eq("company_id", company_id)
            .like(column, f"{stem}%")
            .order(column, desc=True)
            .limit(1)
            .execute()
        )
        if latest.data:
            parts = (latest.data[0].get(column) or "").split("-")
            if len(parts) == 3 and parts[2].isdigit():
                sequence = int(parts[2]) + 1
    except Exception as e:
        logger.error(f"Error fetching latest {column} from {table}: {e}")

    return f"{stem}{sequence:03d}"
