from app.treatment_sessions.repository import TreatmentSessionRepository
from app.treatment_sessions.service import TreatmentProgressService

__all__ = ["TreatmentSessionRepository", "TreatmentProgressService"]
