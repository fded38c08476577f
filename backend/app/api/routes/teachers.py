import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_write_guard
from app.models.schedule import ScheduleSlot
from app.models.teacher import Teacher
from app.schemas.teacher import TeacherCreate, TeacherOut, TeacherUpdate
from app.services.slot_locks import SlotWriteGuard

router = APIRouter()
logger = logging.getLogger(__name__)


def _email_taken(db: Session, email: str, exclude_id: str | None = None) -> bool:
    query = select(Teacher).where(func.lower(Teacher.email) == email.strip().lower())
    if exclude_id is not None:
        query = query.where(Teacher.id != exclude_id)
    return db.execute(query).scalar_one_or_none() is not None


@router.get("", response_model=list[TeacherOut])
def list_teachers(db: Session = Depends(get_db)) -> list[TeacherOut]:
    return list(db.execute(select(Teacher).order_by(Teacher.name)).scalars())


@router.get("/{teacher_id}", response_model=TeacherOut)
def get_teacher(teacher_id: str, db: Session = Depends(get_db)) -> TeacherOut:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return teacher


@router.post("", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(payload: TeacherCreate, db: Session = Depends(get_db)) -> TeacherOut:
    if _email_taken(db, payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher email already exists")
    teacher = Teacher(**payload.model_dump())
    db.add(teacher)
    db.commit()
    db.refresh(teacher)
    logger.info("Created teacher %s (%s)", teacher.id, teacher.email)
    return teacher


@router.patch("/{teacher_id}", response_model=TeacherOut)
def update_teacher(teacher_id: str, payload: TeacherUpdate, db: Session = Depends(get_db)) -> TeacherOut:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")

    data = payload.model_dump(exclude_unset=True)
    if data.get("email") and _email_taken(db, data["email"], exclude_id=teacher_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher email already exists")
    for key in ("name", "email"):
        if key in data and data[key] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{key} cannot be null")

    for key, value in data.items():
        setattr(teacher, key, value)
    db.commit()
    db.refresh(teacher)
    return teacher


@router.delete("/{teacher_id}")
def delete_teacher(
    teacher_id: str,
    db: Session = Depends(get_db),
    guard: SlotWriteGuard = Depends(get_write_guard),
) -> dict:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    slot_count = db.execute(
        select(func.count()).select_from(ScheduleSlot).where(ScheduleSlot.teacher_id == teacher_id)
    ).scalar_one()
    if slot_count:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Teacher still has {slot_count} scheduled slot(s); remove them first",
        )
    db.delete(teacher)
    db.commit()
    guard.discard_teacher(teacher_id)
    logger.info("Deleted teacher %s", teacher_id)
    return {"success": True}
