from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.postgres import get_db
from app.attendances.repository import AttendanceRepository
from app.attendances.service import AttendanceService
from app.attendances.schemas import (
    CloseDayRequest,
    DayAttendanceSet,
    DayClosureResponse,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    EndOfDayResponse,
    GroupedDayResponse,
    TransitionRequest,
)
from app.attendances.validators import parse_day

router = APIRouter(
    prefix="/attendances",
    tags=["attendances"],
)


def get_attendance_service(db: AsyncSession = Depends(get_db)) -> AttendanceService:
    return AttendanceService(AttendanceRepository(db))


@router.get("/day/{day}", response_model=DayAttendanceSet)
async def get_day_attendances(
    day: str,
    service: AttendanceService = Depends(get_attendance_service),
):
    """
    Get the attendance board of a day.

    Checked-in columns are ordered by priority, then check-in time.
    """
    return await service.get_day(parse_day(day))


@router.get("/day/{day}/grouped", response_model=GroupedDayResponse)
async def get_grouped_day(
    day: str,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Get the board with each patient's lightBath and rod attendances merged."""
    return await service.get_grouped_day(parse_day(day))


@router.post("/day/{day}/transition", response_model=DayAttendanceSet)
async def transition_attendance(
    day: str,
    request: TransitionRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    """
    Move a card to the next status column.

    Workflow:
    1. Re-locates the card by type, status and patient at drop time
    2. Moves every part of a combined lightBath + rod card together
    3. Saves all parts in one transaction

    A card that is no longer where the selector says returns the current
    board unchanged; the client should re-render from it.
    """
    return await service.move(parse_day(day), request.selector, request.target_status)


@router.delete("/{attendance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_attendance(
    attendance_id: int,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Cancel an attendance that is still scheduled."""
    await service.cancel(attendance_id)


@router.get("/day/{day}/end-of-day", response_model=EndOfDayResponse)
async def get_end_of_day_status(
    day: str,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Classify whether the day can be closed."""
    return await service.get_end_of_day(parse_day(day))


@router.post("/day/{day}/close", response_model=DayClosureResponse)
async def close_day(
    day: str,
    request: CloseDayRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    """
    Finalize the day.

    Scheduled patients who never arrived must each come with an absence
    decision; they are recorded as missed.
    """
    return await service.close_day(parse_day(day), request.absence_justifications)


@router.post("/day/{day}/duplicate-check", response_model=DuplicateCheckResponse)
async def check_duplicate_attendance(
    day: str,
    request: DuplicateCheckRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Check whether a patient is already booked that day for the given modalities."""
    return await service.check_duplicates(parse_day(day), request)
