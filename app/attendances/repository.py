"""Attendance Repository Layer"""
from datetime import date, datetime
from typing import List, Optional, Tuple
from sqlalchemy import select
from app.db.models import Attendance, DayClosure
from app.db.repository import BaseRepository
from app.attendances.schemas import (
    AttendanceRecord,
    AttendanceStatus,
    DayAttendanceSet,
    DayCompletionSummary,
    Modality,
)
from app.utils.timezone import convert_to_clinic, convert_to_utc

# Stored vocabulary <-> engine vocabulary
API_TO_MODALITY = {
    "spiritual": Modality.SPIRITUAL,
    "light_bath": Modality.LIGHT_BATH,
    "rod": Modality.ROD,
}
MODALITY_TO_API = {v: k for k, v in API_TO_MODALITY.items()}

API_TO_STATUS = {
    "scheduled": AttendanceStatus.SCHEDULED,
    "checked_in": AttendanceStatus.CHECKED_IN,
    "in_progress": AttendanceStatus.ON_GOING,
    "completed": AttendanceStatus.COMPLETED,
}
STATUS_TO_API = {v: k for k, v in API_TO_STATUS.items()}

TIMESTAMP_COLUMNS = {
    AttendanceStatus.CHECKED_IN: "checked_in_at",
    AttendanceStatus.ON_GOING: "started_at",
    AttendanceStatus.COMPLETED: "completed_at",
}

# Rows in these states never appear on the board
CLOSED_OUT_STATUSES = ("cancelled", "missed")


def to_record(row: Attendance) -> AttendanceRecord:
    """Convert an Attendance row to the engine record."""
    patient = row.patient
    return AttendanceRecord(
        attendance_id=row.id,
        patient_id=row.patient_id,
        patient_name=patient.name if patient else "",
        priority=patient.priority if patient else "3",
        modality=API_TO_MODALITY[row.type],
        status=API_TO_STATUS[row.status],
        checked_in_time=convert_to_clinic(row.checked_in_at),
        on_going_time=convert_to_clinic(row.started_at),
        completed_time=convert_to_clinic(row.completed_at),
    )


class AttendanceRepository(BaseRepository):
    """Repository for attendance database operations"""

    async def get_by_id(self, attendance_id: int) -> Optional[Attendance]:
        """Get attendance by ID"""
        stmt = select(Attendance).where(Attendance.id == attendance_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_record(self, attendance_id: int) -> Optional[AttendanceRecord]:
        """Get one attendance as an engine record, None when missing or closed out"""
        row = await self.get_by_id(attendance_id)
        if row is None or row.status in CLOSED_OUT_STATUSES:
            return None
        return to_record(row)

    async def fetch_day_attendances(self, day: date) -> DayAttendanceSet:
        """Build the day's attendance set from stored rows"""
        stmt = select(Attendance).where(
            Attendance.scheduled_date == day,
            Attendance.status.notin_(CLOSED_OUT_STATUSES),
        ).order_by(Attendance.id)
        result = await self.db.execute(stmt)
        return DayAttendanceSet.from_records(day, [to_record(row) for row in result.scalars().all()])

    async def fetch_agenda(self, from_date: date) -> List[Tuple[date, AttendanceRecord]]:
        """Scheduled attendances on or after a date, ordered by date"""
        stmt = select(Attendance).where(
            Attendance.scheduled_date >= from_date,
            Attendance.status == "scheduled",
        ).order_by(Attendance.scheduled_date, Attendance.id)
        result = await self.db.execute(stmt)
        return [(row.scheduled_date, to_record(row)) for row in result.scalars().all()]

    async def persist_status_change(
        self,
        attendance_id: int,
        new_status: AttendanceStatus,
        timestamp: datetime,
    ) -> bool:
        """Stage a status change; the caller commits or rolls back"""
        row = await self.get_by_id(attendance_id)
        if row is None or row.status in CLOSED_OUT_STATUSES:
            return False

        new_status = AttendanceStatus(new_status)
        row.status = STATUS_TO_API[new_status]
        column = TIMESTAMP_COLUMNS.get(new_status)
        if column:
            setattr(row, column, convert_to_utc(timestamp))
        row.updated_at = datetime.utcnow()
        await self.db.flush()
        return True

    async def cancel_scheduled_attendance(self, attendance_id: int) -> bool:
        """Stage the cancellation of a scheduled attendance"""
        row = await self.get_by_id(attendance_id)
        if row is None or row.status != "scheduled":
            return False

        row.status = "cancelled"
        row.cancelled_at = datetime.utcnow()
        row.updated_at = datetime.utcnow()
        await self.db.flush()
        return True

    async def mark_missed(self, attendance_id: int, justified: bool, notes: str) -> bool:
        """Stage a scheduled attendance as missed with the operator's justification"""
        row = await self.get_by_id(attendance_id)
        if row is None or row.status != "scheduled":
            return False

        row.status = "missed"
        row.absence_justified = justified
        row.absence_notes = notes or None
        row.updated_at = datetime.utcnow()
        await self.db.flush()
        return True

    async def is_day_closed(self, day: date) -> bool:
        stmt = select(DayClosure.id).where(DayClosure.closure_date == day)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def persist_day_closure(self, day: date, summary: DayCompletionSummary) -> bool:
        """Stage the closure record of a day"""
        if await self.is_day_closed(day):
            return False

        self.db.add(DayClosure(
            closure_date=day,
            total_patients=summary.total_patients,
            completed_patients=summary.completed_patients,
            missed_patients=summary.missed_patients,
            closed_at=convert_to_utc(summary.completion_time),
        ))
        await self.db.flush()
        return True
