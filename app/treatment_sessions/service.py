from typing import Optional
from app.attendances.schemas import Modality
from app.treatment_sessions.repository import TreatmentSessionRepository
from app.treatment_sessions.schemas import PatientProgressResponse
from app.treatment_sessions.progress import (
    compute_session_progress,
    compute_statistics,
    has_active_treatments,
    next_upcoming_session,
)


class TreatmentProgressService:
    """Service for patient treatment progress"""

    def __init__(self, repository: TreatmentSessionRepository):
        self.repository = repository

    async def get_patient_progress(
        self,
        patient_id: int,
        modality: Optional[Modality] = None,
    ) -> PatientProgressResponse:
        """Progress of every plan of a patient, with aggregate statistics"""
        sessions = await self.repository.fetch_patient_sessions(patient_id)
        events = await self.repository.fetch_session_events(patient_id)
        progress = compute_session_progress(sessions, events, modality)

        return PatientProgressResponse(
            patient_id=patient_id,
            progress=progress,
            statistics=compute_statistics(progress),
            next_upcoming_session=next_upcoming_session(progress),
            has_active_treatments=has_active_treatments(progress),
        )
