from enum import Enum
from typing import Iterable, List, Literal, Optional
from datetime import date, datetime
from pydantic import BaseModel, Field


class Modality(str, Enum):
    """Treatment types offered at the clinic"""
    SPIRITUAL = "spiritual"
    LIGHT_BATH = "lightBath"
    ROD = "rod"


class AttendanceStatus(str, Enum):
    """Lifecycle states of a single attendance"""
    SCHEDULED = "scheduled"
    CHECKED_IN = "checkedIn"
    ON_GOING = "onGoing"
    COMPLETED = "completed"


class CombinedType(str, Enum):
    """Display classification of a grouped lightBath/rod unit"""
    LIGHT_BATH = "lightBath"
    ROD = "rod"
    COMBINED = "combined"


MODALITIES = [Modality.SPIRITUAL, Modality.LIGHT_BATH, Modality.ROD]
STATUSES = [
    AttendanceStatus.SCHEDULED,
    AttendanceStatus.CHECKED_IN,
    AttendanceStatus.ON_GOING,
    AttendanceStatus.COMPLETED,
]


class AttendanceRecord(BaseModel):
    """One scheduled visit of one patient, one modality, one calendar day"""
    attendance_id: Optional[int] = None
    patient_id: Optional[int] = None
    patient_name: str = ""
    priority: str = "3"  # 1 (emergency) | 2 (elderly/children) | 3 (normal)
    modality: Modality
    status: AttendanceStatus = AttendanceStatus.SCHEDULED
    checked_in_time: Optional[datetime] = None
    on_going_time: Optional[datetime] = None
    completed_time: Optional[datetime] = None


class StatusColumns(BaseModel):
    """Ordered attendance lists for one modality, one list per status"""
    scheduled: List[AttendanceRecord] = []
    checkedIn: List[AttendanceRecord] = []
    onGoing: List[AttendanceRecord] = []
    completed: List[AttendanceRecord] = []

    def get(self, status: AttendanceStatus) -> List[AttendanceRecord]:
        return getattr(self, AttendanceStatus(status).value)


class DayAttendanceSet(BaseModel):
    """All attendances of one calendar day, by modality and status"""
    date: date
    spiritual: StatusColumns = Field(default_factory=StatusColumns)
    lightBath: StatusColumns = Field(default_factory=StatusColumns)
    rod: StatusColumns = Field(default_factory=StatusColumns)

    def columns(self, modality: Modality) -> StatusColumns:
        return getattr(self, Modality(modality).value)

    def column(self, modality: Modality, status: AttendanceStatus) -> List[AttendanceRecord]:
        return self.columns(modality).get(status)

    def all_records(self) -> List[AttendanceRecord]:
        """Every record of the day, modality by modality, status by status."""
        return [
            record
            for modality in MODALITIES
            for status in STATUSES
            for record in self.column(modality, status)
        ]

    @classmethod
    def from_records(cls, day: date, records: Iterable[AttendanceRecord]) -> "DayAttendanceSet":
        """Partition a flat record list, keeping the incoming order within each column."""
        buckets = {
            modality.value: {status.value: [] for status in STATUSES}
            for modality in MODALITIES
        }
        for record in records:
            buckets[record.modality.value][record.status.value].append(record)
        return cls(
            date=day,
            **{name: StatusColumns(**columns) for name, columns in buckets.items()},
        )


class GroupedPatientUnit(BaseModel):
    """A patient's same-day lightBath and rod attendances merged into one card"""
    patient_id: int
    patient_name: str
    priority: str
    attendance_id: Optional[int] = None
    status: AttendanceStatus
    original_type: Modality
    treatment_types: List[Modality]
    combined_type: CombinedType
    attendance_ids: List[int] = []
    label: str = ""


class GroupedStatusColumns(BaseModel):
    """Grouped lightBath/rod units for one day, one list per status"""
    scheduled: List[GroupedPatientUnit] = []
    checkedIn: List[GroupedPatientUnit] = []
    onGoing: List[GroupedPatientUnit] = []
    completed: List[GroupedPatientUnit] = []


class GroupedDayResponse(BaseModel):
    """Board view: spiritual records as-is plus grouped lightBath/rod units"""
    date: date
    spiritual: StatusColumns
    grouped: GroupedStatusColumns


class TransitionSelector(BaseModel):
    """Identifies the dragged card at drop time"""
    type: Literal["spiritual", "lightBath", "rod", "combined"]
    status: AttendanceStatus
    index: int = 0
    patient_id: Optional[int] = None


class TransitionRequest(BaseModel):
    """Request to move a card to another status column"""
    selector: TransitionSelector
    target_status: AttendanceStatus


class EndOfDayResult(BaseModel):
    """Closability classification of one day"""
    type: Literal["completed", "scheduled_absences", "incomplete"]
    incomplete_attendances: List[AttendanceRecord] = []
    scheduled_absences: List[AttendanceRecord] = []


class DayCompletionSummary(BaseModel):
    """Per-patient head count of a day"""
    total_patients: int
    completed_patients: int
    missed_patients: int
    completion_time: datetime


class EndOfDayResponse(BaseModel):
    """End-of-day classification with its summary"""
    result: EndOfDayResult
    summary: DayCompletionSummary
    day_closed: bool = False


class AbsenceJustification(BaseModel):
    """Operator decision for one scheduled patient who never arrived"""
    attendance_id: int
    justified: bool = False
    notes: str = ""


class CloseDayRequest(BaseModel):
    """Request to finalize a clinic day"""
    absence_justifications: List[AbsenceJustification] = []


class DayClosureResponse(BaseModel):
    """Outcome of a successful day closure"""
    date: date
    summary: DayCompletionSummary
    missed_attendance_ids: List[int] = []


class DuplicateCheckRequest(BaseModel):
    """Candidate booking to check against the day's attendances"""
    patient_id: Optional[int] = None
    patient_name: Optional[str] = None
    modalities: List[Modality]


class DuplicateCheckResponse(BaseModel):
    """Attendances that already book the candidate"""
    is_duplicate: bool
    duplicates: List[AttendanceRecord] = []
