"""Seed demo teachers, subjects and a weekly timetable.

Run:
  PYTHONPATH=backend python scripts/seed_demo_schedule.py
"""

from __future__ import annotations

import os

from sqlalchemy import func, select

from app.core.exceptions import ScheduleConflictError
from app.db.bootstrap import ensure_schema
from app.db.session import SessionLocal, engine
from app.models.schedule import ScheduleSlot, Weekday
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.schemas.schedule import ScheduleCreate
from app.services.schedule_service import create_schedule
from app.services.slot_locks import get_slot_write_guard

EMAIL_DOMAIN = os.getenv("SEED_EMAIL_DOMAIN", "escola.example.com").strip().lower() or "escola.example.com"

TEACHERS = [
    {"key": "ana", "name": "Ana Souza", "qualification": "MSc Mathematics"},
    {"key": "bruno", "name": "Bruno Lima", "qualification": "BSc Physics"},
    {"key": "carla", "name": "Carla Dias", "qualification": "MA History"},
]

SUBJECTS = {
    "math": ("Mathematics", "Algebra, geometry and arithmetic"),
    "physics": ("Physics", "Mechanics and introductory electricity"),
    "history": ("History", "World and national history"),
}

# teacher key, subject key, weekday, start, end
WEEKLY_SLOTS = [
    ("ana", "math", Weekday.MONDAY, "07:30", "08:20"),
    ("ana", "math", Weekday.MONDAY, "08:20", "09:10"),
    ("ana", "math", Weekday.WEDNESDAY, "10:00", "11:40"),
    ("ana", "math", Weekday.FRIDAY, "07:30", "09:10"),
    ("bruno", "physics", Weekday.TUESDAY, "07:30", "09:10"),
    ("bruno", "physics", Weekday.THURSDAY, "13:00", "14:40"),
    ("bruno", "math", Weekday.SATURDAY, "08:00", "10:00"),
    ("carla", "history", Weekday.MONDAY, "07:30", "09:10"),
    ("carla", "history", Weekday.WEDNESDAY, "07:30", "08:20"),
    ("carla", "history", Weekday.FRIDAY, "10:00", "11:40"),
]


def upsert_teachers(session) -> dict[str, Teacher]:
    teachers: dict[str, Teacher] = {}
    for profile in TEACHERS:
        email = f"{profile['key']}@{EMAIL_DOMAIN}"
        teacher = session.execute(select(Teacher).where(Teacher.email == email)).scalar_one_or_none()
        if teacher is None:
            teacher = Teacher(name=profile["name"], email=email)
            session.add(teacher)
        teacher.qualification = profile["qualification"]
        teachers[profile["key"]] = teacher
    session.commit()
    return teachers


def upsert_subjects(session) -> dict[str, Subject]:
    subjects: dict[str, Subject] = {}
    for key, (name, description) in SUBJECTS.items():
        subject = session.execute(select(Subject).where(Subject.name == name)).scalar_one_or_none()
        if subject is None:
            subject = Subject(name=name)
            session.add(subject)
        subject.description = description
        subjects[key] = subject
    session.commit()
    return subjects


def seed_slots(session, teachers: dict[str, Teacher], subjects: dict[str, Subject]) -> tuple[int, int]:
    guard = get_slot_write_guard()
    created = skipped = 0
    for teacher_key, subject_key, weekday, start, end in WEEKLY_SLOTS:
        payload = ScheduleCreate(
            teacherId=teachers[teacher_key].id,
            subjectId=subjects[subject_key].id,
            weekday=weekday,
            startTime=start,
            endTime=end,
        )
        try:
            create_schedule(session, payload, guard)
        except ScheduleConflictError:
            # Already seeded on a previous run.
            skipped += 1
            continue
        created += 1
    return created, skipped


def main() -> None:
    ensure_schema(engine, create=True)
    with SessionLocal() as session:
        teachers = upsert_teachers(session)
        subjects = upsert_subjects(session)
        created, skipped = seed_slots(session, teachers, subjects)
        slot_count = session.execute(select(func.count(ScheduleSlot.id))).scalar_one()

    print("Demo schedule seeded successfully.")
    print(f"Teachers: {len(teachers)}")
    print(f"Subjects: {len(subjects)}")
    print(f"Slots created: {created} (skipped {skipped} already present)")
    print(f"Slots in database: {slot_count}")


if __name__ == "__main__":
    main()
