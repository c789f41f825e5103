import copy
import pytest
from datetime import date, datetime
from typing import Dict, List, Optional
from httpx import AsyncClient, ASGITransport
from app.main import app
from app.attendances.router import get_attendance_service
from app.attendances.service import AttendanceService
from app.attendances.schemas import (
    AttendanceRecord,
    AttendanceStatus,
    DayAttendanceSet,
    DayCompletionSummary,
    Modality,
)
from app.agenda.router import get_agenda_service
from app.agenda.service import AgendaService
from app.treatment_sessions.router import get_progress_service
from app.treatment_sessions.service import TreatmentProgressService
from app.treatment_sessions.schemas import SessionEvent, TreatmentSession


class FakeAttendanceRepository:
    """In-memory stand-in for AttendanceRepository with commit/rollback staging."""

    def __init__(self):
        self.rows: Dict[int, dict] = {}
        self.closures: Dict[date, DayCompletionSummary] = {}
        self.fail_on: set = set()
        self.commits = 0
        self.rollbacks = 0
        self._committed = ({}, {})

    def add(self, day: date, record: AttendanceRecord) -> AttendanceRecord:
        self.rows[record.attendance_id] = {"day": day, "record": record, "state": "active"}
        self._committed = copy.deepcopy((self.rows, self.closures))
        return record

    def state_of(self, attendance_id: int) -> str:
        row = self.rows[attendance_id]
        return row["state"] if row["state"] != "active" else row["record"].status.value

    async def commit(self):
        self.commits += 1
        self._committed = copy.deepcopy((self.rows, self.closures))

    async def rollback(self):
        self.rollbacks += 1
        self.rows, self.closures = copy.deepcopy(self._committed)

    async def get_record(self, attendance_id: int) -> Optional[AttendanceRecord]:
        row = self.rows.get(attendance_id)
        if row is None or row["state"] != "active":
            return None
        return row["record"]

    async def fetch_day_attendances(self, day: date) -> DayAttendanceSet:
        records = [
            row["record"] for _, row in sorted(self.rows.items())
            if row["day"] == day and row["state"] == "active"
        ]
        return DayAttendanceSet.from_records(day, records)

    async def fetch_agenda(self, from_date: date):
        rows = [
            (row["day"], row["record"]) for _, row in sorted(self.rows.items())
            if row["day"] >= from_date
            and row["state"] == "active"
            and row["record"].status == AttendanceStatus.SCHEDULED
        ]
        return sorted(rows, key=lambda r: r[0])

    async def persist_status_change(self, attendance_id, new_status, timestamp) -> bool:
        if attendance_id in self.fail_on:
            return False
        row = self.rows.get(attendance_id)
        if row is None or row["state"] != "active":
            return False
        row["record"] = row["record"].model_copy(update={"status": new_status})
        return True

    async def cancel_scheduled_attendance(self, attendance_id: int) -> bool:
        row = self.rows.get(attendance_id)
        if row is None or row["record"].status != AttendanceStatus.SCHEDULED:
            return False
        row["state"] = "cancelled"
        return True

    async def mark_missed(self, attendance_id: int, justified: bool, notes: str) -> bool:
        if attendance_id in self.fail_on:
            return False
        row = self.rows.get(attendance_id)
        if row is None or row["record"].status != AttendanceStatus.SCHEDULED:
            return False
        row["state"] = "missed"
        row["justified"] = justified
        row["notes"] = notes
        return True

    async def is_day_closed(self, day: date) -> bool:
        return day in self.closures

    async def persist_day_closure(self, day: date, summary: DayCompletionSummary) -> bool:
        if day in self.closures:
            return False
        self.closures[day] = summary
        return True


class FakeTreatmentSessionRepository:
    """In-memory stand-in for TreatmentSessionRepository."""

    def __init__(self):
        self.sessions: List[TreatmentSession] = []
        self.events: List[SessionEvent] = []

    async def fetch_patient_sessions(self, patient_id: int) -> List[TreatmentSession]:
        return [s for s in self.sessions if s.patient_id == patient_id]

    async def fetch_session_events(self, patient_id: int) -> List[SessionEvent]:
        ids = {s.id for s in self.sessions if s.patient_id == patient_id}
        return [e for e in self.events if e.treatment_session_id in ids]


@pytest.fixture
def make_record():
    """Factory for attendance records with sensible defaults."""
    def _make(
        attendance_id: Optional[int],
        patient_id: Optional[int],
        modality: Modality = Modality.SPIRITUAL,
        status: AttendanceStatus = AttendanceStatus.SCHEDULED,
        name: Optional[str] = None,
        priority: str = "3",
        checked_in_time: Optional[datetime] = None,
    ) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=attendance_id,
            patient_id=patient_id,
            patient_name=name or f"Patient {patient_id}",
            priority=priority,
            modality=modality,
            status=status,
            checked_in_time=checked_in_time,
        )
    return _make


@pytest.fixture
def attendance_repository():
    return FakeAttendanceRepository()


@pytest.fixture
def session_repository():
    return FakeTreatmentSessionRepository()


@pytest.fixture(scope="function")
async def client(attendance_repository, session_repository):
    """Create a test client with the services wired to in-memory repositories."""
    app.dependency_overrides[get_attendance_service] = lambda: AttendanceService(attendance_repository)
    app.dependency_overrides[get_agenda_service] = lambda: AgendaService(attendance_repository)
    app.dependency_overrides[get_progress_service] = lambda: TreatmentProgressService(session_repository)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
