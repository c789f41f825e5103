from app.attendances.repository import AttendanceRepository
from app.attendances.service import AttendanceService

__all__ = ["AttendanceRepository", "AttendanceService"]
