"""Validation logic for attendances"""
from datetime import date
from typing import Iterable, List, Optional
from app.attendances.schemas import (
    AbsenceJustification,
    AttendanceRecord,
    DayAttendanceSet,
    Modality,
    STATUSES,
)
from app.attendances.exceptions import (
    AbsenceJustificationRequiredException,
    InvalidDateException,
)


def parse_day(value: str) -> date:
    """Parse a YYYY-MM-DD path parameter or raise 400"""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidDateException(value)


def find_duplicate_attendances(
    day_set: Optional[DayAttendanceSet],
    modalities: Iterable[Modality],
    patient_id: Optional[int] = None,
    patient_name: Optional[str] = None,
) -> List[AttendanceRecord]:
    """
    Attendances of the day that already book the patient for any of the modalities.

    Every status column counts, completed included. A record matches on
    patient_id, or on case-insensitive name when no id is given. The check
    applies to any date, not only today.
    """
    if day_set is None or (patient_id is None and not patient_name):
        return []

    name = (patient_name or "").strip().lower()
    duplicates = []
    for modality in modalities:
        for status in STATUSES:
            for record in day_set.column(modality, status):
                if patient_id is not None:
                    if record.patient_id == patient_id:
                        duplicates.append(record)
                elif record.patient_name.strip().lower() == name:
                    duplicates.append(record)
    return duplicates


def validate_absence_justifications(
    absences: List[AttendanceRecord],
    justifications: List[AbsenceJustification],
) -> dict:
    """
    Match every scheduled absence with an operator decision.

    Returns the decisions keyed by attendance_id. Absences that were never
    persisted have no id and need no decision.
    """
    by_id = {j.attendance_id: j for j in justifications}
    missing = [
        a.attendance_id for a in absences
        if a.attendance_id is not None and a.attendance_id not in by_id
    ]
    if missing:
        raise AbsenceJustificationRequiredException(missing)
    return by_id
