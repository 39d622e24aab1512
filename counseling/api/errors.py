from fastapi import HTTPException, status

from counseling.core.config import settings
from counseling.services.availability import ConflictReason

_MESSAGES = {
    ConflictReason.date_blocked: "This date is not open for booking.",
    ConflictReason.slot_not_configured: "This time slot is not available.",
    ConflictReason.mode_not_supported: "This time slot does not offer the selected consultation mode.",
    ConflictReason.slot_taken: "This time slot has already been booked, please choose another time.",
    ConflictReason.deadline_passed: (
        f"Changes are only accepted until {settings.modification_cutoff_hour}:00 on the day before the session."
    ),
    ConflictReason.unauthorized: "Email verification failed for this record.",
}

_STATUS = {
    ConflictReason.deadline_passed: status.HTTP_403_FORBIDDEN,
    ConflictReason.unauthorized: status.HTTP_403_FORBIDDEN,
}


def conflict_exception(reason: ConflictReason) -> HTTPException:
    """Business outcome -> HTTP error: 403 for permission/deadline, 409 for slot conflicts."""
    return HTTPException(
        status_code=_STATUS.get(reason, status.HTTP_409_CONFLICT),
        detail={"code": reason.value, "message": _MESSAGES[reason]},
    )
