"""In-memory attendance board driven by operator actions"""
from datetime import datetime
from typing import Optional
from app.attendances.schemas import (
    AttendanceStatus,
    DayAttendanceSet,
    EndOfDayResult,
    GroupedDayResponse,
    TransitionSelector,
)
from app.attendances.grouping import group_day
from app.attendances.transitions import plan_transition, remove_scheduled, TransitionResult
from app.attendances.end_of_day import check_end_of_day_status


class AttendanceBoard:
    """
    Holds one day's snapshot and the card currently being dragged.

    Every action goes through the pure engine functions and replaces the
    snapshot with the returned set. Drag start only remembers the selector;
    the records are looked up again on drop, so a card moved or removed in
    between is simply not found.
    """

    def __init__(self, day_set: DayAttendanceSet):
        self.day_set = day_set
        self.dragged: Optional[TransitionSelector] = None

    def refresh(self, day_set: DayAttendanceSet) -> None:
        """Swap in a newer snapshot, e.g. after a re-fetch."""
        self.day_set = day_set

    def begin_drag(self, selector: TransitionSelector) -> None:
        self.dragged = selector

    def cancel_drag(self) -> None:
        self.dragged = None

    def drop(self, target_status: AttendanceStatus, now: Optional[datetime] = None) -> TransitionResult:
        """Apply the pending drag; without one, nothing moves."""
        selector, self.dragged = self.dragged, None
        if selector is None:
            return TransitionResult(self.day_set)

        result = plan_transition(self.day_set, selector, target_status, now)
        self.day_set = result.day_set
        return result

    def cancel_scheduled(self, attendance_id: int) -> None:
        self.day_set = remove_scheduled(self.day_set, attendance_id)

    def grouped(self) -> GroupedDayResponse:
        return group_day(self.day_set)

    def end_of_day_status(self) -> EndOfDayResult:
        return check_end_of_day_status(self.day_set)
