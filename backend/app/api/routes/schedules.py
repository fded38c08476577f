from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_write_guard
from app.models.schedule import Weekday
from app.schemas.schedule import ConflictCheckOut, ScheduleCreate, ScheduleOut, ScheduleUpdate, WeeklyScheduleOut
from app.services import schedule_service
from app.services.schedule_service import ScheduleFilter, schedule_to_out
from app.services.slot_locks import SlotWriteGuard

router = APIRouter()


@router.post("", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    db: Session = Depends(get_db),
    guard: SlotWriteGuard = Depends(get_write_guard),
) -> ScheduleOut:
    return schedule_to_out(schedule_service.create_schedule(db, payload, guard))


@router.get("", response_model=list[ScheduleOut])
def list_schedules(
    teacher_id: str | None = Query(default=None, alias="teacherId"),
    weekday: Weekday | None = Query(default=None),
    subject_id: str | None = Query(default=None, alias="subjectId"),
    db: Session = Depends(get_db),
) -> list[ScheduleOut]:
    filters = ScheduleFilter(teacher_id=teacher_id, weekday=weekday, subject_id=subject_id)
    return [schedule_to_out(slot) for slot in schedule_service.list_schedules(db, filters)]


@router.get("/conflicts/{teacher_id}", response_model=ConflictCheckOut)
def check_conflicts(
    teacher_id: str,
    weekday: Weekday = Query(...),
    start_time: str = Query(..., alias="startTime"),
    end_time: str = Query(..., alias="endTime"),
    db: Session = Depends(get_db),
) -> ConflictCheckOut:
    return schedule_service.check_conflicts(db, teacher_id, weekday, start_time, end_time)


@router.get("/teacher/{teacher_id}", response_model=list[ScheduleOut])
def list_teacher_schedules(teacher_id: str, db: Session = Depends(get_db)) -> list[ScheduleOut]:
    schedule_service.get_teacher(db, teacher_id)
    filters = ScheduleFilter(teacher_id=teacher_id)
    return [schedule_to_out(slot) for slot in schedule_service.list_schedules(db, filters)]


@router.get("/teacher/{teacher_id}/weekly", response_model=WeeklyScheduleOut)
def get_teacher_weekly_schedule(teacher_id: str, db: Session = Depends(get_db)) -> WeeklyScheduleOut:
    return schedule_service.weekly_schedule(db, teacher_id)


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(schedule_id: str, db: Session = Depends(get_db)) -> ScheduleOut:
    return schedule_to_out(schedule_service.get_schedule(db, schedule_id))


@router.patch("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    db: Session = Depends(get_db),
    guard: SlotWriteGuard = Depends(get_write_guard),
) -> ScheduleOut:
    return schedule_to_out(schedule_service.update_schedule(db, schedule_id, payload, guard))


@router.delete("/{schedule_id}")
def delete_schedule(
    schedule_id: str,
    db: Session = Depends(get_db),
    guard: SlotWriteGuard = Depends(get_write_guard),
) -> dict:
    schedule_service.delete_schedule(db, schedule_id, guard)
    return {"success": True}
