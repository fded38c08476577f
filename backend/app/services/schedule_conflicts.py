"""Conflict detection for a teacher's weekly lesson slots.

Everything here is pure: callers hand in the candidate slot and a snapshot of
stored slots, and get back either the overlapping slots or a verdict. Reading
the snapshot and writing the accepted slot is the job of
``app.services.schedule_service``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Protocol, Sequence

from app.core.exceptions import ScheduleValidationError, ValidationKind
from app.services.schedule_time import is_valid_range, parse_time


class SlotLike(Protocol):
    id: str
    teacher_id: str
    weekday: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class TimeInterval:
    """Half-open ``[start, end)`` interval in minutes since midnight."""

    start: int
    end: int

    @classmethod
    def from_strings(cls, start_time: str, end_time: str) -> "TimeInterval":
        return cls(parse_time(start_time, field="startTime"), parse_time(end_time, field="endTime"))


@dataclass(frozen=True)
class SlotCandidate:
    teacher_id: str
    weekday: str
    start_time: str
    end_time: str

    def interval(self) -> TimeInterval:
        return TimeInterval.from_strings(self.start_time, self.end_time)


class RejectReason(str, Enum):
    invalid_range = "invalid_range"
    conflict = "conflict"


@dataclass
class SlotVerdict:
    accepted: bool
    reason: RejectReason | None = None
    conflicts: list[Any] = field(default_factory=list)
    error_kind: ValidationKind | None = None
    message: str | None = None
    error_field: str | None = None

    @classmethod
    def accept(cls) -> "SlotVerdict":
        return cls(accepted=True)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


def overlaps(candidate: TimeInterval, existing: TimeInterval) -> bool:
    # Touching endpoints ([8:00, 9:00) and [9:00, 10:00)) do not overlap.
    return candidate.start < existing.end and existing.start < candidate.end


def find_conflicts(
    candidate: SlotCandidate,
    exclude_slot_id: str | None,
    existing_slots: Iterable[SlotLike],
) -> list[SlotLike]:
    """Return the stored slots that clash with ``candidate``, in input order.

    Slots of other teachers or other weekdays are ignored even if the caller
    already scoped its query, and ``exclude_slot_id`` drops the slot being
    updated so it never conflicts with itself.
    """
    window = candidate.interval()
    conflicts: list[SlotLike] = []
    for slot in existing_slots:
        if slot.teacher_id != candidate.teacher_id or slot.weekday != candidate.weekday:
            continue
        if exclude_slot_id is not None and slot.id == exclude_slot_id:
            continue
        if overlaps(window, TimeInterval.from_strings(slot.start_time, slot.end_time)):
            conflicts.append(slot)
    return conflicts


def validate_slot(
    candidate: SlotCandidate,
    exclude_slot_id: str | None,
    existing_slots: Sequence[SlotLike],
) -> SlotVerdict:
    try:
        valid_range = is_valid_range(candidate.start_time, candidate.end_time)
    except ScheduleValidationError as exc:
        return SlotVerdict(
            accepted=False,
            reason=RejectReason.invalid_range,
            error_kind=exc.kind,
            message=exc.message,
            error_field=exc.field,
        )
    if not valid_range:
        return SlotVerdict(
            accepted=False,
            reason=RejectReason.invalid_range,
            error_kind=ValidationKind.invalid_range,
            message="End time must be after start time",
            error_field="endTime",
        )

    conflicts = find_conflicts(candidate, exclude_slot_id, existing_slots)
    if conflicts:
        return SlotVerdict(accepted=False, reason=RejectReason.conflict, conflicts=conflicts)
    return SlotVerdict.accept()
