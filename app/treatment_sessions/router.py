from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.postgres import get_db
from app.attendances.schemas import Modality
from app.treatment_sessions.repository import TreatmentSessionRepository
from app.treatment_sessions.service import TreatmentProgressService
from app.treatment_sessions.schemas import PatientProgressResponse

router = APIRouter(
    prefix="/treatment-sessions",
    tags=["treatment-sessions"],
)


def get_progress_service(db: AsyncSession = Depends(get_db)) -> TreatmentProgressService:
    return TreatmentProgressService(TreatmentSessionRepository(db))


@router.get("/patient/{patient_id}/progress", response_model=PatientProgressResponse)
async def get_patient_progress(
    patient_id: int,
    modality: Optional[Modality] = Query(None),
    service: TreatmentProgressService = Depends(get_progress_service),
):
    """
    Get progress badges for a patient's treatment plans.

    Optional modality filter: spiritual | lightBath | rod
    """
    return await service.get_patient_progress(patient_id, modality)
