from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.postgres import get_db
from app.attendances.repository import AttendanceRepository
from app.attendances.validators import parse_day
from app.agenda.service import AgendaService
from app.agenda.schemas import AgendaResponse

router = APIRouter(
    prefix="/agenda",
    tags=["agenda"],
)


def get_agenda_service(db: AsyncSession = Depends(get_db)) -> AgendaService:
    return AgendaService(AttendanceRepository(db))


@router.get("", response_model=AgendaResponse)
async def get_agenda(
    selected_date: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    show_all_future: bool = Query(False),
    service: AgendaService = Depends(get_agenda_service),
):
    """
    Get upcoming scheduled attendances.

    By default only the next 5 dates with bookings are returned; set
    show_all_future to list every date from selected_date onwards.
    """
    day = parse_day(selected_date) if selected_date else None
    return await service.get_agenda(day, show_all_future)
