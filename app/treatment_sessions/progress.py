"""Treatment plan progress and projections"""
import math
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional
from app.attendances.schemas import Modality
from app.utils.timezone import convert_to_clinic
from app.treatment_sessions.schemas import (
    SessionEvent,
    TreatmentProgress,
    TreatmentSession,
    TreatmentStatistics,
    UpcomingSession,
)

# Sessions are assumed to repeat weekly from the start date
SESSION_INTERVAL = timedelta(weeks=1)

MODALITY_LABELS = {
    Modality.SPIRITUAL: "Spiritual",
    Modality.LIGHT_BATH: "Light Bath",
    Modality.ROD: "Rod",
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_counts(planned: int, completed: int) -> tuple:
    """
    Clamp plan counters into a usable range.

    Args:
        planned: Planned session count (values below 1 become 1)
        completed: Completed session count

    Returns:
        (planned, completed) with 0 <= completed <= planned
    """
    planned = max(int(planned or 0), 1)
    completed = min(max(int(completed or 0), 0), planned)
    return planned, completed


def _event_key(event: SessionEvent) -> datetime:
    if event.end_time is None:
        return datetime.combine(event.scheduled_date, time.min)
    # Naive end times are already clinic-local
    if event.end_time.tzinfo is None:
        return event.end_time
    return convert_to_clinic(event.end_time)


def last_completed_date(events: List[SessionEvent]):
    """Date of the latest completed event, by end time falling back to scheduled date."""
    completed = [e for e in events if e.status == "completed"]
    if not completed:
        return None
    return _event_key(max(completed, key=_event_key)).date()


def compute_progress(session: TreatmentSession, events: Optional[List[SessionEvent]] = None) -> TreatmentProgress:
    """
    Compute progress for a single treatment plan.

    Args:
        session: Treatment plan
        events: Session records belonging to this plan

    Returns:
        TreatmentProgress; next and estimated dates are only set while the
        plan is not completed
    """
    planned, completed = normalize_counts(session.planned_sessions, session.completed_sessions)

    if completed == 0:
        status = "not_started"
    elif completed == planned:
        status = "completed"
    else:
        status = "in_progress"

    next_session_date = None
    estimated_completion_date = None
    if status != "completed":
        next_session_date = session.start_date + completed * SESSION_INTERVAL
        # The start date itself is the first session
        estimated_completion_date = session.start_date + (planned - 1) * SESSION_INTERVAL

    return TreatmentProgress(
        treatment_session_id=session.id,
        treatment_type=session.treatment_type,
        current_session=min(completed + 1, planned),
        total_sessions=planned,
        completed_sessions=completed,
        progress_percentage=round_half_up(100 * completed / planned),
        status=status,
        next_session_date=next_session_date,
        last_completed_date=last_completed_date(events or []) if completed else None,
        estimated_completion_date=estimated_completion_date,
    )


def compute_session_progress(
    sessions: List[TreatmentSession],
    events: Optional[List[SessionEvent]] = None,
    modality_filter: Optional[Modality] = None,
) -> List[TreatmentProgress]:
    """
    Compute progress for each of a patient's treatment plans.

    Args:
        sessions: Treatment plans, in display order
        events: Session records of any of the plans (matched by treatment_session_id)
        modality_filter: Only include plans of this treatment type

    Returns:
        One TreatmentProgress per included plan, in input order
    """
    events_by_session: Dict[int, List[SessionEvent]] = {}
    for event in events or []:
        events_by_session.setdefault(event.treatment_session_id, []).append(event)

    return [
        compute_progress(session, events_by_session.get(session.id, []))
        for session in sessions
        if modality_filter is None or session.treatment_type == modality_filter
    ]


def compute_statistics(progress: List[TreatmentProgress]) -> TreatmentStatistics:
    """
    Aggregate progress over all plans.

    Metrics computed:
    - total/active/completed plan counts
    - upcoming_sessions: sessions still to be done across all plans
    - overall_progress: unweighted mean of plan percentages (0 when empty)
    """
    total = len(progress)
    if not total:
        return TreatmentStatistics(
            total_treatments=0,
            active_treatments=0,
            completed_treatments=0,
            upcoming_sessions=0,
            overall_progress=0,
        )

    return TreatmentStatistics(
        total_treatments=total,
        active_treatments=sum(1 for p in progress if p.status == "in_progress"),
        completed_treatments=sum(1 for p in progress if p.status == "completed"),
        upcoming_sessions=sum(p.total_sessions - p.completed_sessions for p in progress),
        overall_progress=round_half_up(sum(p.progress_percentage for p in progress) / total),
    )


def next_upcoming_session(progress: List[TreatmentProgress]) -> Optional[UpcomingSession]:
    """Nearest projected session date across plans that are not completed."""
    upcoming = [p for p in progress if p.next_session_date and p.status != "completed"]
    if not upcoming:
        return None

    nearest = min(upcoming, key=lambda p: p.next_session_date)
    return UpcomingSession(date=nearest.next_session_date, type=MODALITY_LABELS[nearest.treatment_type])


def get_progress_by_type(progress: List[TreatmentProgress], modality: Modality) -> Optional[TreatmentProgress]:
    return next((p for p in progress if p.treatment_type == modality), None)


def has_active_treatments(progress: List[TreatmentProgress]) -> bool:
    return any(p.status in ("in_progress", "not_started") for p in progress)
