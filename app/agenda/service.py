from datetime import date
from typing import Optional
from app.attendances.repository import AttendanceRepository
from app.agenda.schemas import AgendaResponse
from app.agenda.window import build_agenda, filter_agenda_window
from app.utils.timezone import clinic_today


class AgendaService:
    """Service for the upcoming-dates agenda"""

    def __init__(self, repository: AttendanceRepository):
        self.repository = repository

    async def get_agenda(self, selected_date: Optional[date], show_all_future: bool) -> AgendaResponse:
        """Scheduled attendances in the agenda window starting at selected_date (default today)"""
        reference = selected_date or clinic_today()
        rows = await self.repository.fetch_agenda(reference)
        entries = filter_agenda_window(build_agenda(rows), reference, show_all_future)
        return AgendaResponse(
            selected_date=reference,
            show_all_future=show_all_future,
            entries=entries,
        )
