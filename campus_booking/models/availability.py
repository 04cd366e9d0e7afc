"""Availability model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String
from campus_booking.database import Base


class Availability(Base):
    """Represents a slot a professor has published for booking."""
    __tablename__ = "availability"
    __table_args__ = (
        Index("idx_availability_professor_booked", "professor_id", "is_booked"),
    )

    id = Column(Integer, primary_key=True)
    professor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(String, nullable=False)
    time_slot = Column(String, nullable=False)
    is_booked = Column(Boolean, nullable=False, default=False)
