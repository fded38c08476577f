from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from app.db.base import Base
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "teachers": {"id", "name", "email"},
    "subjects": {"id", "name"},
    "schedule_slots": {"id", "teacher_id", "subject_id", "weekday", "start_time", "end_time"},
}


def is_managed_object(obj, name, type_, reflected, compare_to) -> bool:
    """Alembic ``include_object`` hook: only the schedule tables are migrated."""
    if type_ == "table":
        return name in REQUIRED_COLUMNS
    table = getattr(obj, "table", None)
    return table is None or table.name in REQUIRED_COLUMNS


def inspect_schema(engine: Engine) -> tuple[list[str], dict[str, list[str]]]:
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, columns in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                missing_tables.append(table_name)
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(columns - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_schema(engine: Engine, *, create: bool) -> None:
    if create:
        Base.metadata.create_all(bind=engine)

    missing_tables, missing_columns = inspect_schema(engine)
    if missing_tables:
        logger.warning("Database is missing tables: %s (run `alembic upgrade head`)", ", ".join(missing_tables))
    for table_name, columns in missing_columns.items():
        logger.warning("Table %s is missing columns: %s", table_name, ", ".join(columns))
    if not missing_tables and not missing_columns:
        logger.info("Database schema check passed")
