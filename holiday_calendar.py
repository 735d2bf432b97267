import logging
import re
from datetime import date

import psycopg

from business_days import parse_calendar_date

logger = logging.getLogger(__name__)

SEPARATOR_RE = re.compile(r"[,\s]+")


def parse_holiday_list(raw: str | None) -> frozenset[date]:
    # e.g. "2025-12-05, 2025-12-10"
    out = set()
    for item in SEPARATOR_RE.split(raw or ""):
        if not item:
            continue
        d = parse_calendar_date(item)
        if d is None:
            logger.warning("Ignoring invalid holiday %r (expected YYYY-MM-DD)", item)
            continue
        out.add(d)
    return frozenset(out)


def ensure_schema(con: psycopg.Connection) -> None:
    con.execute(
        """
        CREATE TABLE IF NOT EXISTS holidays (
          day DATE PRIMARY KEY,
          name TEXT
        );
        """
    )


def load_db_holidays(database_url: str) -> frozenset[date]:
    try:
        with psycopg.connect(database_url) as con:
            ensure_schema(con)
            rows = con.execute("SELECT day FROM holidays ORDER BY day").fetchall()
    except psycopg.Error:
        logger.exception("Could not load holidays from database; continuing without them")
        return frozenset()
    return frozenset(r[0] for r in rows)


def load_holidays(raw: str | None, database_url: str | None = None) -> frozenset[date]:
    """Union of the HOLIDAYS env list and the optional `holidays` table."""
    days = parse_holiday_list(raw)
    if database_url:
        days |= load_db_holidays(database_url)
    return days
