import threading

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import ResourceNotFoundError, ScheduleConflictError
from app.db.base import Base
from app.models.schedule import ScheduleSlot, Weekday
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.schemas.schedule import ScheduleCreate, ScheduleUpdate
from app.services import schedule_service
from app.services.slot_locks import SlotWriteGuard


def _seed_references(factory) -> tuple[str, str, str]:
    with factory() as db:
        teacher = Teacher(name="Ana Souza", email="ana@escola.example.com")
        subject = Subject(name="Mathematics")
        physics = Subject(name="Physics")
        db.add_all([teacher, subject, physics])
        db.commit()
        return teacher.id, subject.id, physics.id


@pytest.fixture()
def file_session_factory(tmp_path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'schedules.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def test_concurrent_creates_of_same_slot_store_exactly_one(file_session_factory):
    teacher_id, subject_id, _ = _seed_references(file_session_factory)
    payload = ScheduleCreate(
        teacherId=teacher_id,
        subjectId=subject_id,
        weekday=Weekday.MONDAY,
        startTime="08:00",
        endTime="09:00",
    )
    guard = SlotWriteGuard()
    workers = 8
    barrier = threading.Barrier(workers)
    outcomes: list[str] = []

    def create() -> None:
        db = file_session_factory()
        try:
            barrier.wait(timeout=10)
            schedule_service.create_schedule(db, payload, guard)
            outcomes.append("created")
        except ScheduleConflictError:
            outcomes.append("conflict")
        except Exception as exc:  # surfaced through the assertion below
            outcomes.append(repr(exc))
        finally:
            db.close()

    threads = [threading.Thread(target=create) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes) == ["conflict"] * (workers - 1) + ["created"]
    with file_session_factory() as db:
        assert db.execute(select(func.count()).select_from(ScheduleSlot)).scalar_one() == 1


def test_update_keeps_changes_committed_by_another_session(session_factory):
    teacher_id, subject_id, physics_id = _seed_references(session_factory)
    guard = SlotWriteGuard()
    with session_factory() as db:
        slot_id = schedule_service.create_schedule(
            db,
            ScheduleCreate(
                teacherId=teacher_id,
                subjectId=subject_id,
                weekday=Weekday.MONDAY,
                startTime="08:00",
                endTime="09:00",
            ),
            guard,
        ).id

    stale_db = session_factory()
    try:
        stale = stale_db.get(ScheduleSlot, slot_id)
        assert stale.start_time == "08:00"

        with session_factory() as other_db:
            schedule_service.update_schedule(
                other_db, slot_id, ScheduleUpdate(startTime="10:00", endTime="11:00"), guard
            )

        updated = schedule_service.update_schedule(stale_db, slot_id, ScheduleUpdate(subjectId=physics_id), guard)
        assert (updated.start_time, updated.end_time) == ("10:00", "11:00")
        assert updated.subject_id == physics_id
    finally:
        stale_db.close()


def test_update_of_slot_deleted_meanwhile_returns_not_found(session_factory):
    teacher_id, subject_id, _ = _seed_references(session_factory)
    guard = SlotWriteGuard()
    with session_factory() as db:
        slot_id = schedule_service.create_schedule(
            db,
            ScheduleCreate(
                teacherId=teacher_id,
                subjectId=subject_id,
                weekday=Weekday.TUESDAY,
                startTime="08:00",
                endTime="09:00",
            ),
            guard,
        ).id

    stale_db = session_factory()
    try:
        stale_db.get(ScheduleSlot, slot_id)
        with session_factory() as other_db:
            schedule_service.delete_schedule(other_db, slot_id, guard)

        with pytest.raises(ResourceNotFoundError):
            schedule_service.update_schedule(stale_db, slot_id, ScheduleUpdate(startTime="08:30"), guard)
    finally:
        stale_db.close()
