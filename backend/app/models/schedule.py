import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.subject import Subject
from app.models.teacher import Teacher


class Weekday(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"


WEEKDAY_ORDER: dict[Weekday, int] = {day: index for index, day in enumerate(Weekday)}


class ScheduleSlot(Base):
    __tablename__ = "schedule_slots"
    __table_args__ = (Index("ix_schedule_slots_teacher_weekday", "teacher_id", "weekday"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    teacher_id: Mapped[str] = mapped_column(ForeignKey("teachers.id", ondelete="RESTRICT"), nullable=False)
    subject_id: Mapped[str] = mapped_column(ForeignKey("subjects.id", ondelete="RESTRICT"), index=True, nullable=False)
    weekday: Mapped[Weekday] = mapped_column(SAEnum(Weekday, name="weekday"), nullable=False)
    # Canonical zero-padded HH:MM, so string order equals time order.
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    teacher: Mapped[Teacher] = relationship(lazy="joined")
    subject: Mapped[Subject] = relationship(lazy="joined")
