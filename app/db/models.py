from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, Date, ForeignKey
from sqlalchemy.orm import relationship
from app.db.postgres import Base


class Patient(Base):
    """
    Patients table - owned by the patient registry.
    Defined here for read-only queries (names and priorities on the board).
    """
    __tablename__ = "patients"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    priority = Column(String(1), nullable=False, default="3")  # 1 | 2 | 3
    treatment_status = Column(String(1), nullable=False, default="N")  # N | T | A | F
    start_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Attendance(Base):
    """One scheduled visit of one patient for one modality on one day."""
    __tablename__ = "attendances"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=True, index=True)
    type = Column(String(20), nullable=False, index=True)  # spiritual | light_bath | rod
    status = Column(String(20), default="scheduled", nullable=False, index=True)  # scheduled | checked_in | in_progress | completed | cancelled | missed
    scheduled_date = Column(Date, nullable=False, index=True)
    checked_in_at = Column(DateTime, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    absence_justified = Column(Boolean, nullable=True)
    absence_notes = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    patient = relationship("Patient", lazy="joined")


class TreatmentSession(Base):
    """Multi-visit treatment plan for one patient and modality."""
    __tablename__ = "treatment_sessions"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    treatment_type = Column(String(20), nullable=False)  # light_bath | rod | spiritual
    body_location = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=False)
    planned_sessions = Column(Integer, nullable=False)
    completed_sessions = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")  # active | completed | suspended | cancelled
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class TreatmentSessionRecord(Base):
    """Single session event belonging to a treatment plan."""
    __tablename__ = "treatment_session_records"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True)
    treatment_session_id = Column(Integer, ForeignKey("treatment_sessions.id"), nullable=False, index=True)
    attendance_id = Column(Integer, ForeignKey("attendances.id"), nullable=True)
    session_number = Column(Integer, nullable=False)
    scheduled_date = Column(Date, nullable=False)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="scheduled")  # scheduled | completed | missed | cancelled
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class DayClosure(Base):
    """Record of a finalized clinic day."""
    __tablename__ = "day_closures"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True)
    closure_date = Column(Date, unique=True, nullable=False, index=True)
    total_patients = Column(Integer, nullable=False, default=0)
    completed_patients = Column(Integer, nullable=False, default=0)
    missed_patients = Column(Integer, nullable=False, default=0)
    closed_at = Column(DateTime, default=datetime.utcnow, nullable=False)
