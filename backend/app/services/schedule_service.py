from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    InvalidReferenceError,
    ResourceNotFoundError,
    ScheduleConflictError,
    ScheduleValidationError,
)
from app.models.schedule import WEEKDAY_ORDER, ScheduleSlot, Weekday
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.schemas.schedule import (
    ConflictCheckOut,
    ScheduleCreate,
    ScheduleOut,
    ScheduleUpdate,
    SubjectSummary,
    TeacherSummary,
    WeeklyScheduleDay,
    WeeklyScheduleOut,
)
from app.services.schedule_conflicts import RejectReason, SlotCandidate, SlotVerdict, TimeInterval, validate_slot
from app.services.schedule_time import normalize_time
from app.services.slot_locks import SlotWriteGuard

logger = logging.getLogger(__name__)

TIMING_FIELDS = {"teacherId", "weekday", "startTime", "endTime"}


@dataclass(frozen=True)
class ScheduleFilter:
    teacher_id: str | None = None
    weekday: Weekday | None = None
    subject_id: str | None = None

    def clauses(self) -> list:
        clauses = []
        if self.teacher_id:
            clauses.append(ScheduleSlot.teacher_id == self.teacher_id)
        if self.weekday is not None:
            clauses.append(ScheduleSlot.weekday == self.weekday)
        if self.subject_id:
            clauses.append(ScheduleSlot.subject_id == self.subject_id)
        return clauses


def _weekly_order(slot: ScheduleSlot) -> tuple[int, str, str]:
    return WEEKDAY_ORDER[Weekday(slot.weekday)], slot.start_time, slot.id


def schedule_to_out(slot: ScheduleSlot) -> ScheduleOut:
    return ScheduleOut(
        id=slot.id,
        teacherId=slot.teacher_id,
        subjectId=slot.subject_id,
        weekday=slot.weekday,
        startTime=slot.start_time,
        endTime=slot.end_time,
        createdAt=slot.created_at,
        updatedAt=slot.updated_at,
        teacher=TeacherSummary(id=slot.teacher.id, name=slot.teacher.name, email=slot.teacher.email)
        if slot.teacher is not None
        else None,
        subject=SubjectSummary(id=slot.subject.id, name=slot.subject.name) if slot.subject is not None else None,
    )


def list_schedules(db: Session, filters: ScheduleFilter | None = None) -> list[ScheduleSlot]:
    query = select(ScheduleSlot)
    clauses = filters.clauses() if filters is not None else []
    if clauses:
        query = query.where(*clauses)
    slots = list(db.execute(query).unique().scalars())
    return sorted(slots, key=_weekly_order)


def get_schedule(db: Session, schedule_id: str) -> ScheduleSlot:
    slot = db.get(ScheduleSlot, schedule_id)
    if slot is None:
        raise ResourceNotFoundError("Schedule", schedule_id)
    return slot


def get_teacher(db: Session, teacher_id: str) -> Teacher:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return teacher


def _require_reference(db: Session, model: type, resource_type: str, resource_id: str):
    item = db.get(model, resource_id)
    if item is None:
        raise InvalidReferenceError(resource_type, resource_id)
    return item


def _day_slots(db: Session, teacher_id: str, weekday: Weekday) -> list[ScheduleSlot]:
    query = (
        select(ScheduleSlot)
        .where(ScheduleSlot.teacher_id == teacher_id, ScheduleSlot.weekday == weekday)
        .order_by(ScheduleSlot.start_time, ScheduleSlot.id)
    )
    return list(db.execute(query).unique().scalars())


def _raise_for_verdict(verdict: SlotVerdict, candidate: SlotCandidate) -> None:
    if verdict.accepted:
        return
    logger.info(
        "Rejected slot for teacher %s on %s %s-%s: %s",
        candidate.teacher_id,
        Weekday(candidate.weekday).value,
        candidate.start_time,
        candidate.end_time,
        verdict.error_kind.value if verdict.error_kind else verdict.reason.value,
    )
    if verdict.reason == RejectReason.invalid_range:
        raise ScheduleValidationError(verdict.message, kind=verdict.error_kind, field=verdict.error_field)
    conflicts = [schedule_to_out(slot).model_dump(mode="json") for slot in verdict.conflicts]
    raise ScheduleConflictError("Teacher already has a lesson overlapping this time on that weekday", conflicts)


def create_schedule(db: Session, payload: ScheduleCreate, guard: SlotWriteGuard) -> ScheduleSlot:
    _require_reference(db, Teacher, "Teacher", payload.teacherId)
    _require_reference(db, Subject, "Subject", payload.subjectId)

    candidate = SlotCandidate(payload.teacherId, payload.weekday, payload.startTime, payload.endTime)
    with guard.hold([(payload.teacherId, payload.weekday)]):
        existing = _day_slots(db, payload.teacherId, payload.weekday)
        _raise_for_verdict(validate_slot(candidate, None, existing), candidate)

        slot = ScheduleSlot(
            teacher_id=payload.teacherId,
            subject_id=payload.subjectId,
            weekday=payload.weekday,
            start_time=normalize_time(payload.startTime),
            end_time=normalize_time(payload.endTime),
        )
        db.add(slot)
        db.commit()
    db.refresh(slot)
    logger.info(
        "Created schedule slot %s for teacher %s on %s %s-%s",
        slot.id,
        slot.teacher_id,
        slot.weekday.value,
        slot.start_time,
        slot.end_time,
    )
    return slot


def _update_candidate(slot: ScheduleSlot, data: dict) -> SlotCandidate:
    return SlotCandidate(
        teacher_id=data.get("teacherId", slot.teacher_id),
        weekday=Weekday(data.get("weekday", slot.weekday)),
        start_time=data.get("startTime", slot.start_time),
        end_time=data.get("endTime", slot.end_time),
    )


def _update_keys(slot: ScheduleSlot, data: dict) -> set[tuple[str, Weekday]]:
    candidate = _update_candidate(slot, data)
    return {(slot.teacher_id, Weekday(slot.weekday)), (candidate.teacher_id, candidate.weekday)}


def _refresh_or_404(db: Session, slot: ScheduleSlot, schedule_id: str) -> None:
    try:
        db.refresh(slot)
    except InvalidRequestError as exc:
        raise ResourceNotFoundError("Schedule", schedule_id) from exc


def update_schedule(db: Session, schedule_id: str, payload: ScheduleUpdate, guard: SlotWriteGuard) -> ScheduleSlot:
    slot = get_schedule(db, schedule_id)
    data = payload.model_dump(exclude_unset=True)

    if "teacherId" in data:
        _require_reference(db, Teacher, "Teacher", data["teacherId"])
    if "subjectId" in data:
        _require_reference(db, Subject, "Subject", data["subjectId"])

    timing_changed = bool(TIMING_FIELDS & data.keys())

    while True:
        keys = _update_keys(slot, data)
        with guard.hold(keys):
            # Pick up writes committed while this request waited for the lock.
            _refresh_or_404(db, slot, schedule_id)
            if not _update_keys(slot, data) <= keys:
                # The slot was moved to a day this request does not hold; retry.
                continue
            candidate = _update_candidate(slot, data)
            # Subject-only edits skip the overlap scan but still get the range check.
            existing = _day_slots(db, candidate.teacher_id, candidate.weekday) if timing_changed else []
            _raise_for_verdict(validate_slot(candidate, slot.id, existing), candidate)

            slot.teacher_id = candidate.teacher_id
            slot.weekday = candidate.weekday
            slot.start_time = normalize_time(candidate.start_time)
            slot.end_time = normalize_time(candidate.end_time)
            if "subjectId" in data:
                slot.subject_id = data["subjectId"]
            db.commit()
            break
    db.refresh(slot)
    logger.info("Updated schedule slot %s (%s)", slot.id, ", ".join(sorted(data)) or "no changes")
    return slot


def delete_schedule(db: Session, schedule_id: str, guard: SlotWriteGuard) -> None:
    slot = get_schedule(db, schedule_id)
    with guard.hold([(slot.teacher_id, slot.weekday)]):
        db.delete(slot)
        db.commit()
    logger.info("Deleted schedule slot %s", schedule_id)


def check_conflicts(
    db: Session,
    teacher_id: str,
    weekday: Weekday,
    start_time: str,
    end_time: str,
) -> ConflictCheckOut:
    get_teacher(db, teacher_id)
    candidate = SlotCandidate(teacher_id, weekday, start_time, end_time)
    verdict = validate_slot(candidate, None, _day_slots(db, teacher_id, weekday))
    if verdict.reason == RejectReason.invalid_range:
        raise ScheduleValidationError(verdict.message, kind=verdict.error_kind, field=verdict.error_field)
    return ConflictCheckOut(
        hasConflicts=verdict.has_conflicts,
        conflicts=[schedule_to_out(slot) for slot in verdict.conflicts],
    )


def weekly_schedule(db: Session, teacher_id: str) -> WeeklyScheduleOut:
    teacher = get_teacher(db, teacher_id)
    slots = list_schedules(db, ScheduleFilter(teacher_id=teacher_id))

    days: list[WeeklyScheduleDay] = []
    total = 0
    for weekday in Weekday:
        day_slots = [slot for slot in slots if slot.weekday == weekday]
        minutes = 0
        for slot in day_slots:
            interval = TimeInterval.from_strings(slot.start_time, slot.end_time)
            minutes += interval.end - interval.start
        total += minutes
        days.append(
            WeeklyScheduleDay(
                weekday=weekday,
                slots=[schedule_to_out(slot) for slot in day_slots],
                teachingMinutes=minutes,
            )
        )
    return WeeklyScheduleOut(
        teacher=TeacherSummary(id=teacher.id, name=teacher.name, email=teacher.email),
        days=days,
        totalTeachingMinutes=total,
    )
