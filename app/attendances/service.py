import logging
from datetime import date
from typing import List
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from app.attendances.repository import AttendanceRepository
from app.attendances.schemas import (
    AbsenceJustification,
    AttendanceStatus,
    DayAttendanceSet,
    DayClosureResponse,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    EndOfDayResponse,
    GroupedDayResponse,
    TransitionSelector,
)
from app.attendances.grouping import group_day
from app.attendances.transitions import TIMESTAMP_FIELDS, plan_transition, with_priority_queues
from app.attendances.end_of_day import check_end_of_day_status, summarize_day
from app.attendances.validators import find_duplicate_attendances, validate_absence_justifications
from app.attendances.exceptions import (
    AttendanceNotCancellableException,
    AttendanceNotFoundException,
    DayAlreadyClosedException,
    DayNotClosableException,
    StatusSyncFailedException,
)

logger = logging.getLogger(__name__)


class AttendanceService:
    """Service layer for the attendance board and day closure"""

    def __init__(self, repository: AttendanceRepository):
        self.repository = repository

    async def get_day(self, day: date) -> DayAttendanceSet:
        """Day set with checked-in queues in priority order"""
        day_set = await self.repository.fetch_day_attendances(day)
        return with_priority_queues(day_set)

    async def get_grouped_day(self, day: date) -> GroupedDayResponse:
        day_set = await self.get_day(day)
        return group_day(day_set)

    async def move(
        self,
        day: date,
        selector: TransitionSelector,
        target_status: AttendanceStatus,
    ) -> DayAttendanceSet:
        """
        Move a card to another status column and persist it.

        Steps:
        1. Re-fetch the day, ordered as served, so the selector resolves
           against current data and the positions the operator saw
        2. Plan the transition (no-op when the card is gone or the move is invalid)
        3. Stage every moved attendance and commit them together
        4. On any failure roll back the whole group and raise 502
        """
        day_set = await self.get_day(day)
        result = plan_transition(day_set, selector, target_status)
        if not result.moved:
            return day_set

        attendance_ids = [r.attendance_id for r in result.moved if r.attendance_id is not None]
        try:
            for record in result.moved:
                if record.attendance_id is None:
                    continue
                timestamp = getattr(record, TIMESTAMP_FIELDS[record.status])
                saved = await self.repository.persist_status_change(
                    record.attendance_id, record.status, timestamp
                )
                if not saved:
                    raise StatusSyncFailedException(attendance_ids)
        except (SQLAlchemyError, StatusSyncFailedException) as e:
            logger.warning(f"Rolling back status change for attendances {attendance_ids}: {e}")
            await self.repository.rollback()
            raise StatusSyncFailedException(attendance_ids)

        await self.repository.commit()
        return with_priority_queues(result.day_set)

    async def cancel(self, attendance_id: int) -> None:
        """Cancel an attendance that is still scheduled"""
        record = await self.repository.get_record(attendance_id)
        if record is None:
            raise AttendanceNotFoundException(attendance_id)

        if record.status != AttendanceStatus.SCHEDULED:
            raise AttendanceNotCancellableException(attendance_id, record.status.value)

        if not await self.repository.cancel_scheduled_attendance(attendance_id):
            await self.repository.rollback()
            raise AttendanceNotFoundException(attendance_id)

        await self.repository.commit()
        logger.info(f"Cancelled scheduled attendance {attendance_id}")

    async def get_end_of_day(self, day: date) -> EndOfDayResponse:
        day_set = await self.repository.fetch_day_attendances(day)
        return EndOfDayResponse(
            result=check_end_of_day_status(day_set),
            summary=summarize_day(day_set),
            day_closed=await self.repository.is_day_closed(day),
        )

    async def close_day(
        self,
        day: date,
        justifications: List[AbsenceJustification],
    ) -> DayClosureResponse:
        """
        Finalize a clinic day.

        Business rules:
        - A day is closed once
        - Visits still checked in or in progress block the closure
        - Every scheduled absence needs an operator decision and is marked missed
        - Everything is committed together or not at all
        """
        if await self.repository.is_day_closed(day):
            raise DayAlreadyClosedException(day)

        day_set = await self.repository.fetch_day_attendances(day)
        status = check_end_of_day_status(day_set)
        if status.type == "incomplete":
            raise DayNotClosableException(day, len(status.incomplete_attendances))

        summary = summarize_day(day_set)
        missed_ids = []
        try:
            if status.type == "scheduled_absences":
                decisions = validate_absence_justifications(status.scheduled_absences, justifications)
                for absence in status.scheduled_absences:
                    if absence.attendance_id is None:
                        continue
                    decision = decisions[absence.attendance_id]
                    if not await self.repository.mark_missed(
                        absence.attendance_id, decision.justified, decision.notes
                    ):
                        raise StatusSyncFailedException([absence.attendance_id])
                    missed_ids.append(absence.attendance_id)

                remaining = check_end_of_day_status(await self.repository.fetch_day_attendances(day))
                if remaining.type != "completed":
                    raise DayNotClosableException(
                        day, len(remaining.incomplete_attendances) + len(remaining.scheduled_absences)
                    )

            if not await self.repository.persist_day_closure(day, summary):
                raise DayAlreadyClosedException(day)
        except (HTTPException, SQLAlchemyError):
            await self.repository.rollback()
            raise

        await self.repository.commit()
        logger.info(
            f"Closed day {day.isoformat()}: {summary.completed_patients}/{summary.total_patients} "
            f"patients completed, {len(missed_ids)} absence(s) recorded"
        )
        return DayClosureResponse(date=day, summary=summary, missed_attendance_ids=missed_ids)

    async def check_duplicates(self, day: date, request: DuplicateCheckRequest) -> DuplicateCheckResponse:
        day_set = await self.repository.fetch_day_attendances(day)
        duplicates = find_duplicate_attendances(
            day_set,
            request.modalities,
            patient_id=request.patient_id,
            patient_name=request.patient_name,
        )
        return DuplicateCheckResponse(is_duplicate=bool(duplicates), duplicates=duplicates)
