"""Snapshot records for the slot and appointment ledgers."""

from dataclasses import dataclass

from campus_booking.models.appointment import Appointment
from campus_booking.models.availability import Availability

PENDING_STATUS = "pending"
CANCELED_STATUS = "canceled"


@dataclass(frozen=True)
class SlotRecord:
    id: int
    professor_id: int
    date: str
    time_slot: str
    is_booked: bool
    professor_name: str | None = None

    @classmethod
    def from_row(cls, row: Availability, professor_name: str | None = None) -> "SlotRecord":
        return cls(
            id=row.id,
            professor_id=row.professor_id,
            date=row.date,
            time_slot=row.time_slot,
            is_booked=bool(row.is_booked),
            professor_name=professor_name,
        )


@dataclass(frozen=True)
class AppointmentRecord:
    id: int
    student_id: int
    professor_id: int
    slot_id: int
    date: str
    time_slot: str
    status: str
    professor_name: str | None = None

    @classmethod
    def from_row(cls, row: Appointment, professor_name: str | None = None) -> "AppointmentRecord":
        return cls(
            id=row.id,
            student_id=row.student_id,
            professor_id=row.professor_id,
            slot_id=row.availability_id,
            date=row.date,
            time_slot=row.time_slot,
            status=row.status,
            professor_name=professor_name,
        )

    @property
    def is_live(self) -> bool:
        return self.status != CANCELED_STATUS
