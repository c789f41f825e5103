"""Treatment Session Repository Layer"""
from typing import List
from sqlalchemy import select
from app.db.models import TreatmentSession as TreatmentSessionRow, TreatmentSessionRecord
from app.db.repository import BaseRepository
from app.attendances.repository import API_TO_MODALITY
from app.treatment_sessions.schemas import SessionEvent, TreatmentSession
from app.utils.timezone import convert_to_clinic


class TreatmentSessionRepository(BaseRepository):
    """Repository for treatment plan reads"""

    async def fetch_patient_sessions(self, patient_id: int) -> List[TreatmentSession]:
        """Get a patient's treatment plans, oldest first"""
        stmt = select(TreatmentSessionRow).where(
            TreatmentSessionRow.patient_id == patient_id
        ).order_by(TreatmentSessionRow.start_date, TreatmentSessionRow.id)
        result = await self.db.execute(stmt)
        return [
            TreatmentSession(
                id=row.id,
                patient_id=row.patient_id,
                treatment_type=API_TO_MODALITY[row.treatment_type],
                planned_sessions=row.planned_sessions,
                completed_sessions=row.completed_sessions,
                start_date=row.start_date,
                status=row.status,
                body_location=row.body_location,
            )
            for row in result.scalars().all()
        ]

    async def fetch_session_events(self, patient_id: int) -> List[SessionEvent]:
        """Get the session records of all of a patient's plans"""
        stmt = select(TreatmentSessionRecord).join(
            TreatmentSessionRow,
            TreatmentSessionRecord.treatment_session_id == TreatmentSessionRow.id,
        ).where(
            TreatmentSessionRow.patient_id == patient_id
        ).order_by(TreatmentSessionRecord.treatment_session_id, TreatmentSessionRecord.session_number)
        result = await self.db.execute(stmt)
        return [
            SessionEvent(
                id=row.id,
                treatment_session_id=row.treatment_session_id,
                session_number=row.session_number,
                scheduled_date=row.scheduled_date,
                end_time=convert_to_clinic(row.end_time),
                status=row.status,
            )
            for row in result.scalars().all()
        ]
