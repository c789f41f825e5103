from typing import List, Optional
from datetime import date
from pydantic import BaseModel
from app.attendances.schemas import Modality


class AgendaPatient(BaseModel):
    """Patient booked on an agenda date"""
    attendance_id: Optional[int] = None
    patient_id: Optional[int] = None
    patient_name: str
    priority: str = "3"


class AgendaEntry(BaseModel):
    """Scheduled patients of one modality on one date"""
    date: date
    modality: Modality
    patients: List[AgendaPatient] = []


class AgendaResponse(BaseModel):
    """Agenda window shown to the operator"""
    selected_date: date
    show_all_future: bool
    entries: List[AgendaEntry]
