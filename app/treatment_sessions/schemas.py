from typing import List, Literal, Optional
from datetime import date, datetime
from pydantic import BaseModel
from app.attendances.schemas import Modality


class TreatmentSession(BaseModel):
    """Multi-visit treatment plan for one patient and modality"""
    id: Optional[int] = None
    patient_id: int
    treatment_type: Modality
    planned_sessions: int
    completed_sessions: int = 0
    start_date: date
    status: str = "active"  # active | completed | suspended | cancelled
    body_location: Optional[str] = None


class SessionEvent(BaseModel):
    """One session record of a treatment plan"""
    id: Optional[int] = None
    treatment_session_id: int
    session_number: int = 1
    scheduled_date: date
    end_time: Optional[datetime] = None
    status: Literal["scheduled", "completed", "missed", "cancelled"] = "scheduled"


class TreatmentProgress(BaseModel):
    """Progress badge data for one treatment plan"""
    treatment_session_id: Optional[int] = None
    treatment_type: Modality
    current_session: int
    total_sessions: int
    completed_sessions: int
    progress_percentage: int
    status: Literal["not_started", "in_progress", "completed"]
    next_session_date: Optional[date] = None
    last_completed_date: Optional[date] = None
    estimated_completion_date: Optional[date] = None


class TreatmentStatistics(BaseModel):
    """Aggregate progress over a patient's plans"""
    total_treatments: int
    active_treatments: int
    completed_treatments: int
    upcoming_sessions: int
    overall_progress: int


class UpcomingSession(BaseModel):
    """Nearest projected session across open plans"""
    date: date
    type: str


class PatientProgressResponse(BaseModel):
    """Everything the patient progress panel shows"""
    patient_id: int
    progress: List[TreatmentProgress]
    statistics: TreatmentStatistics
    next_upcoming_session: Optional[UpcomingSession] = None
    has_active_treatments: bool
