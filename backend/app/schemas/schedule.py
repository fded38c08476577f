from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from app.models.schedule import Weekday

# Any JSON scalar is let through: format, length and ordering are checked by
# app.services.schedule_time so that bad times answer 400, not 422.
TimeValue = str | int | float | bool


class ScheduleCreate(BaseModel):
    teacherId: str = Field(min_length=1, max_length=36)
    subjectId: str = Field(min_length=1, max_length=36)
    weekday: Weekday
    startTime: TimeValue
    endTime: TimeValue


class ScheduleUpdate(BaseModel):
    teacherId: str | None = Field(default=None, min_length=1, max_length=36)
    subjectId: str | None = Field(default=None, min_length=1, max_length=36)
    weekday: Weekday | None = None
    startTime: TimeValue | None = None
    endTime: TimeValue | None = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "ScheduleUpdate":
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class TeacherSummary(BaseModel):
    id: str
    name: str
    email: str


class SubjectSummary(BaseModel):
    id: str
    name: str


class ScheduleOut(BaseModel):
    id: str
    teacherId: str
    subjectId: str
    weekday: Weekday
    startTime: str
    endTime: str
    createdAt: datetime | None = None
    updatedAt: datetime | None = None
    teacher: TeacherSummary | None = None
    subject: SubjectSummary | None = None


class ConflictCheckOut(BaseModel):
    hasConflicts: bool
    conflicts: list[ScheduleOut] = Field(default_factory=list)


class WeeklyScheduleDay(BaseModel):
    weekday: Weekday
    slots: list[ScheduleOut] = Field(default_factory=list)
    teachingMinutes: int = 0


class WeeklyScheduleOut(BaseModel):
    teacher: TeacherSummary
    days: list[WeeklyScheduleDay] = Field(default_factory=list)
    totalTeachingMinutes: int = 0
