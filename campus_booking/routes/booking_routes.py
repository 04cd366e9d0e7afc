from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from campus_booking.auth.dependencies import get_current_identity
from campus_booking.auth.identity import Identity
from campus_booking.booking.engine import BookingEngine

router = APIRouter(tags=['booking'])

CANCEL_CONFIRMATION = 'Appointment successfully canceled'


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class PublishSlotRequest(CamelModel):
    date: str
    time_slot: str

    @field_validator('date', 'time_slot')
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Date and time slot are required.')
        return normalized


class BookSlotRequest(CamelModel):
    slot_id: int


class SlotResponse(CamelModel):
    id: int
    professor_id: int
    date: str
    time_slot: str
    is_booked: bool
    professor_name: str | None = None


class AppointmentResponse(CamelModel):
    id: int
    student_id: int
    professor_id: int
    slot_id: int
    date: str
    time_slot: str
    status: str
    professor_name: str | None = None


class CancelAppointmentResponse(CamelModel):
    msg: str
    appointment: AppointmentResponse


def get_booking_engine(request: Request) -> BookingEngine:
    return request.app.state.booking_engine


@router.post(
    '/professors/{professor_id}/availability',
    response_model=SlotResponse,
    status_code=status.HTTP_201_CREATED,
)
def publish_slot(
    professor_id: int,
    data: PublishSlotRequest,
    identity: Identity = Depends(get_current_identity),
    engine: BookingEngine = Depends(get_booking_engine),
):
    slot = engine.publish_slot(identity, professor_id, data.date, data.time_slot)
    return SlotResponse.model_validate(slot)


@router.get('/professors/{professor_id}/availability', response_model=list[SlotResponse])
def list_free_slots(
    professor_id: int,
    identity: Identity = Depends(get_current_identity),
    engine: BookingEngine = Depends(get_booking_engine),
):
    del identity
    return [SlotResponse.model_validate(slot) for slot in engine.list_free_slots(professor_id)]


@router.post('/appointments', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_slot(
    data: BookSlotRequest,
    identity: Identity = Depends(get_current_identity),
    engine: BookingEngine = Depends(get_booking_engine),
):
    appointment = engine.book_slot(identity, data.slot_id)
    return AppointmentResponse.model_validate(appointment)


@router.put('/appointments/{appointment_id}/cancel', response_model=CancelAppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    engine: BookingEngine = Depends(get_booking_engine),
):
    appointment = engine.cancel_appointment(identity, appointment_id)
    return CancelAppointmentResponse(
        msg=CANCEL_CONFIRMATION,
        appointment=AppointmentResponse.model_validate(appointment),
    )


@router.get('/students/{student_id}/appointments', response_model=list[AppointmentResponse])
def list_student_appointments(
    student_id: int,
    identity: Identity = Depends(get_current_identity),
    engine: BookingEngine = Depends(get_booking_engine),
):
    return [
        AppointmentResponse.model_validate(appointment)
        for appointment in engine.list_student_appointments(identity, student_id)
    ]
