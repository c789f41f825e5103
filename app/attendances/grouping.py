"""Merge a patient's same-day lightBath and rod attendances into one unit"""
import logging
from typing import Dict, Iterable, List
from app.attendances.schemas import (
    AttendanceRecord,
    AttendanceStatus,
    CombinedType,
    DayAttendanceSet,
    GroupedDayResponse,
    GroupedPatientUnit,
    GroupedStatusColumns,
    Modality,
    STATUSES,
)

logger = logging.getLogger(__name__)


def get_combined_type(treatment_types: Iterable[Modality]) -> CombinedType:
    """
    Classify a set of treatment types for display.

    Spiritual never takes part in the classification. Input with neither
    lightBath nor rod falls back to lightBath.
    """
    types = set(treatment_types)
    has_light_bath = Modality.LIGHT_BATH in types
    has_rod = Modality.ROD in types

    if has_light_bath and has_rod:
        return CombinedType.COMBINED
    if has_rod:
        return CombinedType.ROD
    return CombinedType.LIGHT_BATH


def get_combined_label(treatment_types: Iterable[Modality]) -> str:
    """Operator-facing label for a unit's treatments."""
    types = set(treatment_types)
    has_light_bath = Modality.LIGHT_BATH in types
    has_rod = Modality.ROD in types

    if has_light_bath and has_rod:
        return "Light Bath + Rod"
    if has_light_bath:
        return "Light Bath"
    if has_rod:
        return "Rod"
    return ""


def _fold(
    units: Dict[int, GroupedPatientUnit],
    records: List[AttendanceRecord],
    modality: Modality,
) -> None:
    for record in records:
        if not record.patient_id:
            logger.warning(
                f"Dropping {modality.value} attendance {record.attendance_id} from grouping: no patient linked"
            )
            continue

        unit = units.get(record.patient_id)
        if unit is None:
            units[record.patient_id] = GroupedPatientUnit(
                patient_id=record.patient_id,
                patient_name=record.patient_name,
                priority=record.priority,
                attendance_id=record.attendance_id,
                status=record.status,
                original_type=modality,
                treatment_types=[modality],
                combined_type=get_combined_type([modality]),
                attendance_ids=[record.attendance_id] if record.attendance_id is not None else [],
                label=get_combined_label([modality]),
            )
            continue

        unit.treatment_types.append(modality)
        if record.attendance_id is not None:
            unit.attendance_ids.append(record.attendance_id)
        unit.combined_type = get_combined_type(unit.treatment_types)
        unit.label = get_combined_label(unit.treatment_types)


def group_patients(
    light_bath_records: List[AttendanceRecord],
    rod_records: List[AttendanceRecord],
) -> Dict[int, GroupedPatientUnit]:
    """
    Group one day's lightBath and rod attendances by patient.

    LightBath records are folded before rod records, so a patient booked for
    both always gets treatment_types [lightBath, rod] and original_type
    lightBath. The returned dict keeps first-appearance order.
    """
    units: Dict[int, GroupedPatientUnit] = {}
    _fold(units, light_bath_records, Modality.LIGHT_BATH)
    _fold(units, rod_records, Modality.ROD)
    return units


def group_day(day_set: DayAttendanceSet) -> GroupedDayResponse:
    """Build the board view of a day: spiritual as-is, lightBath/rod grouped per status."""
    grouped = {}
    for status in STATUSES:
        units = group_patients(
            day_set.column(Modality.LIGHT_BATH, status),
            day_set.column(Modality.ROD, status),
        )
        grouped[AttendanceStatus(status).value] = list(units.values())

    return GroupedDayResponse(
        date=day_set.date,
        spiritual=day_set.spiritual,
        grouped=GroupedStatusColumns(**grouped),
    )
