"""Agenda window selection"""
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union
from app.agenda.schemas import AgendaEntry, AgendaPatient
from app.attendances.schemas import AttendanceRecord, Modality
from app.utils.timezone import clinic_today

# Distinct upcoming dates shown when the "all future" toggle is off
AGENDA_WINDOW_SIZE = 5

DateLike = Union[date, datetime, str, None]


def as_calendar_date(value: DateLike) -> Optional[date]:
    """Calendar date of a date, datetime or ISO string; time of day is ignored."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def filter_agenda_window(
    entries: List[AgendaEntry],
    selected_date: DateLike,
    show_all_future: bool,
    today: Optional[date] = None,
) -> List[AgendaEntry]:
    """
    Keep the agenda entries inside the visible window.

    The window starts at selected_date (today when empty), inclusive. With
    show_all_future off it spans the next AGENDA_WINDOW_SIZE distinct dates
    that have entries; with it on, every date from the start onwards. Whole
    entries are kept or dropped and input order is preserved.
    """
    reference = as_calendar_date(selected_date) or today or clinic_today()

    upcoming = sorted({
        entry_date
        for entry_date in (as_calendar_date(e.date) for e in entries)
        if entry_date >= reference
    })
    if not show_all_future:
        upcoming = upcoming[:AGENDA_WINDOW_SIZE]

    window = set(upcoming)
    return [e for e in entries if as_calendar_date(e.date) in window]


def build_agenda(rows: List[Tuple[date, AttendanceRecord]]) -> List[AgendaEntry]:
    """Group scheduled attendances into one entry per date and modality."""
    entries: Dict[Tuple[date, Modality], AgendaEntry] = {}
    for day, record in rows:
        key = (day, record.modality)
        entry = entries.get(key)
        if entry is None:
            entry = entries[key] = AgendaEntry(date=day, modality=record.modality)
        entry.patients.append(AgendaPatient(
            attendance_id=record.attendance_id,
            patient_id=record.patient_id,
            patient_name=record.patient_name,
            priority=record.priority,
        ))
    return list(entries.values())
