"""Custom exceptions for attendances"""
from datetime import date
from fastapi import HTTPException, status


class AttendanceNotFoundException(HTTPException):
    """Raised when an attendance is not found"""
    def __init__(self, attendance_id: int = None):
        detail = "Attendance not found"
        if attendance_id is not None:
            detail = f"Attendance {attendance_id} not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AttendanceNotCancellableException(HTTPException):
    """Raised when cancelling an attendance that already left the scheduled column"""
    def __init__(self, attendance_id: int, current_status: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot cancel attendance {attendance_id} with status: {current_status}"
        )


class InvalidDateException(HTTPException):
    """Raised when a date parameter is not an ISO calendar date"""
    def __init__(self, value: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date '{value}'. Expected YYYY-MM-DD"
        )


class StatusSyncFailedException(HTTPException):
    """Raised when a status change could not be persisted; nothing was saved"""
    def __init__(self, attendance_ids: list):
        ids = ", ".join(str(i) for i in attendance_ids)
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Could not save status change for attendance(s) {ids}; no changes were applied"
        )


class DayNotClosableException(HTTPException):
    """Raised when closing a day that still has visits in progress"""
    def __init__(self, day: date, pending: int):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Day {day.isoformat()} has {pending} attendance(s) not completed"
        )


class AbsenceJustificationRequiredException(HTTPException):
    """Raised when scheduled absences are left without an operator decision"""
    def __init__(self, attendance_ids: list):
        ids = ", ".join(str(i) for i in attendance_ids)
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Confirm absence for attendance(s) {ids} before closing the day"
        )


class DayAlreadyClosedException(HTTPException):
    """Raised when closing a day twice"""
    def __init__(self, day: date):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Day {day.isoformat()} is already closed"
        )

