from enum import Enum


class ValidationKind(str, Enum):
    malformed_time = "malformed_time"
    invalid_range = "invalid_range"


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ScheduleValidationError(AppError):
    """Raised when a slot time is malformed or the range has no positive length."""
    def __init__(self, message: str, kind: ValidationKind, field: str | None = None):
        self.kind = kind
        self.field = field
        details = {"kind": kind.value}
        if field:
            details["field"] = field
        super().__init__(message, status_code=400, details=details)


class ScheduleConflictError(AppError):
    """Raised when a slot overlaps another slot of the same teacher on the same weekday."""
    def __init__(self, message: str, conflicts: list[dict]):
        self.conflicts = conflicts
        super().__init__(message, status_code=409, details={"kind": "conflict", "conflicts": conflicts})


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)


class InvalidReferenceError(AppError):
    """Raised when a request body points at a teacher or subject that does not exist."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} does not exist",
            status_code=400,
            details={"field": f"{resource_type.lower()}Id"},
        )

