from app.models.schedule import ScheduleSlot, Weekday  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
