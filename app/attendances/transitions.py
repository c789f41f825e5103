"""Status transitions for a day's attendances"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from app.attendances.schemas import (
    AttendanceRecord,
    AttendanceStatus,
    DayAttendanceSet,
    Modality,
    MODALITIES,
    STATUSES,
    TransitionSelector,
)
from app.utils.timezone import clinic_now

logger = logging.getLogger(__name__)

STATUS_RANK = {status: rank for rank, status in enumerate(STATUSES)}

TIMESTAMP_FIELDS = {
    AttendanceStatus.CHECKED_IN: "checked_in_time",
    AttendanceStatus.ON_GOING: "on_going_time",
    AttendanceStatus.COMPLETED: "completed_time",
}

GROUPABLE = (Modality.LIGHT_BATH, Modality.ROD)


@dataclass
class TransitionResult:
    day_set: DayAttendanceSet
    moved: List[AttendanceRecord] = field(default_factory=list)


def is_valid_transition(from_status: AttendanceStatus, to_status: AttendanceStatus) -> bool:
    """Only a single step forward is allowed; completed is terminal."""
    return STATUS_RANK[AttendanceStatus(to_status)] == STATUS_RANK[AttendanceStatus(from_status)] + 1


def _has_patient(records: List[AttendanceRecord], patient_id: int) -> bool:
    return any(r.patient_id == patient_id for r in records)


def _origin_modalities(day_set: DayAttendanceSet, selector: TransitionSelector) -> List[Modality]:
    if selector.type == "combined":
        return list(GROUPABLE)

    modality = Modality(selector.type)
    if modality in GROUPABLE and all(
        _has_patient(day_set.column(m, selector.status), selector.patient_id) for m in GROUPABLE
    ):
        return list(GROUPABLE)
    return [modality]


def resolve_records(day_set: DayAttendanceSet, selector: TransitionSelector) -> List[AttendanceRecord]:
    """
    Locate the records a selector points at in the given snapshot.

    Selectors carrying a patient_id are resolved by (type, status, patient_id)
    and every matching record of a combined unit is returned. The positional
    index is only consulted when no patient_id is known.
    """
    if selector.patient_id is None:
        if selector.type == "combined":
            return []
        column = day_set.column(Modality(selector.type), selector.status)
        if 0 <= selector.index < len(column):
            return [column[selector.index]]
        return []

    return [
        record
        for modality in _origin_modalities(day_set, selector)
        for record in day_set.column(modality, selector.status)
        if record.patient_id == selector.patient_id
    ]


def stamp(record: AttendanceRecord, status: AttendanceStatus, now: datetime) -> AttendanceRecord:
    """Copy of the record in the new status with that status's timestamp set."""
    update = {"status": status}
    timestamp_field = TIMESTAMP_FIELDS.get(status)
    if timestamp_field:
        update[timestamp_field] = now
    return record.model_copy(update=update)


def plan_transition(
    day_set: DayAttendanceSet,
    selector: TransitionSelector,
    target_status: AttendanceStatus,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Compute the day set after moving the selected card to target_status.

    The input set is left untouched. When the move is not a valid step or the
    selector no longer resolves (the card was moved or removed meanwhile), the
    original set is returned with nothing moved.
    """
    target_status = AttendanceStatus(target_status)
    if not is_valid_transition(selector.status, target_status):
        logger.warning(
            f"Rejected move of {selector.type} card for patient {selector.patient_id} "
            f"from {selector.status.value} to {target_status.value}"
        )
        return TransitionResult(day_set)

    targets = resolve_records(day_set, selector)
    if not targets:
        logger.warning(
            f"No {selector.type} card for patient {selector.patient_id} in {selector.status.value}; "
            f"nothing moved"
        )
        return TransitionResult(day_set)

    now = now or clinic_now()
    target_keys = {id(record) for record in targets}
    updates = {}
    moved: List[AttendanceRecord] = []

    for modality in MODALITIES:
        columns = day_set.columns(modality)
        origin = columns.get(selector.status)
        leaving = [r for r in origin if id(r) in target_keys]
        if not leaving:
            continue

        arriving = [stamp(r, target_status, now) for r in leaving]
        moved.extend(arriving)
        updates[modality.value] = columns.model_copy(update={
            selector.status.value: [r for r in origin if id(r) not in target_keys],
            target_status.value: columns.get(target_status) + arriving,
        })

    logger.info(
        f"Moved {len(moved)} attendance(s) of patient {selector.patient_id} "
        f"from {selector.status.value} to {target_status.value}"
    )
    return TransitionResult(day_set.model_copy(update=updates), moved)


def transition(
    day_set: DayAttendanceSet,
    selector: TransitionSelector,
    target_status: AttendanceStatus,
    now: Optional[datetime] = None,
) -> DayAttendanceSet:
    """Move the selected card and return the resulting day set."""
    return plan_transition(day_set, selector, target_status, now).day_set


def remove_scheduled(day_set: DayAttendanceSet, attendance_id: int) -> DayAttendanceSet:
    """Drop a cancelled scheduled attendance from the set."""
    updates = {}
    for modality in MODALITIES:
        columns = day_set.columns(modality)
        remaining = [r for r in columns.scheduled if r.attendance_id != attendance_id]
        if len(remaining) != len(columns.scheduled):
            updates[modality.value] = columns.model_copy(update={"scheduled": remaining})

    if not updates:
        return day_set
    return day_set.model_copy(update=updates)


def _priority_rank(record: AttendanceRecord) -> int:
    try:
        return int(record.priority)
    except (TypeError, ValueError):
        return 3


def sort_by_priority(records: List[AttendanceRecord]) -> List[AttendanceRecord]:
    """
    Order a checked-in queue: priority 1 first, then earlier check-in time.

    Records without a check-in time go after timed ones of the same priority
    and otherwise keep their relative order.
    """
    return sorted(
        records,
        key=lambda r: (
            _priority_rank(r),
            r.checked_in_time is None,
            r.checked_in_time or datetime.min,
        ),
    )


def with_priority_queues(day_set: DayAttendanceSet) -> DayAttendanceSet:
    """Copy of the set with every checked-in column in priority order."""
    return day_set.model_copy(update={
        modality.value: day_set.columns(modality).model_copy(
            update={"checkedIn": sort_by_priority(day_set.columns(modality).checkedIn)}
        )
        for modality in MODALITIES
    })


def next_to_attend(day_set: DayAttendanceSet, modality: Modality) -> Optional[AttendanceRecord]:
    """Head of the checked-in queue for a modality."""
    queue = sort_by_priority(day_set.column(modality, AttendanceStatus.CHECKED_IN))
    return queue[0] if queue else None
