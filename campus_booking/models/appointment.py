"""Appointment model definitions."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String
from campus_booking.database import Base


class Appointment(Base):
    """Represents a student's booking of an availability slot.

    ``professor_id``, ``date`` and ``time_slot`` are copied from the slot when
    it is booked and are never updated afterwards.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_student_schedule", "student_id", "date", "time_slot"),
        Index("idx_appointments_availability_status", "availability_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    professor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    # No FK constraint: a missing slot is tolerated on cancellation.
    availability_id = Column(Integer, nullable=False)
    date = Column(String, nullable=False)
    time_slot = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
