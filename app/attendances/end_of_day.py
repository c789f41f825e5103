"""End-of-day closability"""
from datetime import datetime
from typing import List, Optional
from app.attendances.schemas import (
    AttendanceRecord,
    AttendanceStatus,
    DayAttendanceSet,
    DayCompletionSummary,
    EndOfDayResult,
    MODALITIES,
)
from app.utils.timezone import clinic_now

PENDING_STATUSES = [
    AttendanceStatus.SCHEDULED,
    AttendanceStatus.CHECKED_IN,
    AttendanceStatus.ON_GOING,
]


def _collect(day_set: DayAttendanceSet, statuses: List[AttendanceStatus]) -> List[AttendanceRecord]:
    return [
        record
        for modality in MODALITIES
        for status in statuses
        for record in day_set.column(modality, status)
    ]


def get_incomplete_attendances(day_set: Optional[DayAttendanceSet]) -> List[AttendanceRecord]:
    """Attendances that arrived but have not finished (checkedIn and onGoing)."""
    if day_set is None:
        return []
    return _collect(day_set, [AttendanceStatus.CHECKED_IN, AttendanceStatus.ON_GOING])


def get_scheduled_absences(day_set: Optional[DayAttendanceSet]) -> List[AttendanceRecord]:
    """Attendances whose patient never checked in."""
    if day_set is None:
        return []
    return _collect(day_set, [AttendanceStatus.SCHEDULED])


def get_completed_attendances(day_set: Optional[DayAttendanceSet]) -> List[AttendanceRecord]:
    if day_set is None:
        return []
    return _collect(day_set, [AttendanceStatus.COMPLETED])


def check_end_of_day_status(day_set: Optional[DayAttendanceSet]) -> EndOfDayResult:
    """
    Classify whether a day can be closed.

    Evaluated in order, first match wins:
    1. No data: incomplete, with nothing listed
    2. Nothing pending in any modality: completed
    3. Scheduled patients left: scheduled_absences (operator confirms each)
    4. Otherwise visits are still checked in or in progress: incomplete

    Pure; calling it repeatedly on the same snapshot gives the same result.
    """
    if day_set is None:
        return EndOfDayResult(type="incomplete", incomplete_attendances=[])

    pending = _collect(day_set, PENDING_STATUSES)
    if not pending:
        return EndOfDayResult(type="completed")

    scheduled = get_scheduled_absences(day_set)
    if scheduled:
        return EndOfDayResult(type="scheduled_absences", scheduled_absences=scheduled)

    return EndOfDayResult(type="incomplete", incomplete_attendances=pending)


def summarize_day(
    day_set: Optional[DayAttendanceSet],
    now: Optional[datetime] = None,
) -> DayCompletionSummary:
    """
    Count distinct patients of the day.

    A patient is completed when every one of their attendances is completed,
    and missed when none of them got past scheduled.
    """
    now = now or clinic_now()
    if day_set is None:
        return DayCompletionSummary(
            total_patients=0, completed_patients=0, missed_patients=0, completion_time=now
        )

    statuses_by_patient = {}
    for position, record in enumerate(day_set.all_records()):
        if record.patient_id is not None:
            key = record.patient_id
        elif record.attendance_id is not None:
            key = ("attendance", record.attendance_id)
        else:
            # Unsaved walk-in: counts as its own patient
            key = ("record", position)
        statuses_by_patient.setdefault(key, set()).add(record.status)

    completed = sum(1 for s in statuses_by_patient.values() if s == {AttendanceStatus.COMPLETED})
    missed = sum(1 for s in statuses_by_patient.values() if s == {AttendanceStatus.SCHEDULED})

    return DayCompletionSummary(
        total_patients=len(statuses_by_patient),
        completed_patients=completed,
        missed_patients=missed,
        completion_time=now,
    )
