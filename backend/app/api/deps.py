from collections.abc import Generator

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.services.slot_locks import SlotWriteGuard, get_slot_write_guard


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_write_guard() -> SlotWriteGuard:
    return get_slot_write_guard()
