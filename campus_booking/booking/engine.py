"""Booking engine: the only writer of the slot and appointment ledgers.

A slot moves Free -> Booked when a student books it and Booked -> Free when the
owning appointment is canceled. Both transitions hold the slot's lock and run in
a single database transaction. Booking claims the slot and cancellation claims the
appointment with a conditional UPDATE, so a competing writer sees zero affected
rows even when it runs in another process.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from campus_booking.auth.identity import Identity
from campus_booking.booking.ledger import (
    CANCELED_STATUS,
    PENDING_STATUS,
    AppointmentRecord,
    SlotRecord,
)
from campus_booking.booking.locks import SlotLocks
from campus_booking.core.errors import (
    AppointmentNotFound,
    Forbidden,
    InternalFailure,
    SlotNotFound,
    SlotUnavailable,
    ValidationError,
)
from campus_booking.models.appointment import Appointment
from campus_booking.models.availability import Availability
from campus_booking.models.user import User

logger = logging.getLogger(__name__)


def _professor_name(db: Session, professor_id: int) -> str | None:
    return db.query(User.name).filter(User.id == professor_id).scalar()


class BookingEngine:
    def __init__(self, session_factory: sessionmaker, locks: SlotLocks | None = None) -> None:
        self._session_factory = session_factory
        self._locks = locks if locks is not None else SlotLocks()

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Storage failure while trying to %s.', action)
            raise InternalFailure() from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def publish_slot(self, actor: Identity, professor_id: int, date: str, time_slot: str) -> SlotRecord:
        if not actor.is_professor or actor.user_id != professor_id:
            raise Forbidden('You are not authorized to set this availability.')

        date = (date or '').strip()
        time_slot = (time_slot or '').strip()
        if not date or not time_slot:
            raise ValidationError('Date and time slot are required.')

        with self._transaction('publish slot') as db:
            duplicate = db.query(Availability.id).filter(
                Availability.professor_id == professor_id,
                Availability.date == date,
                Availability.time_slot == time_slot,
            ).first()
            if duplicate:
                logger.warning(
                    'Professor %s published a duplicate slot for %s %s (existing slot %s).',
                    professor_id, date, time_slot, duplicate.id,
                )

            slot = Availability(
                professor_id=professor_id,
                date=date,
                time_slot=time_slot,
                is_booked=False,
            )
            db.add(slot)
            db.flush()
            record = SlotRecord.from_row(slot, professor_name=_professor_name(db, professor_id))
            db.commit()

        logger.info('Professor %s published slot %s (%s %s).', professor_id, record.id, date, time_slot)
        return record

    def list_free_slots(self, professor_id: int) -> list[SlotRecord]:
        with self._transaction('list free slots') as db:
            rows = db.query(Availability, User.name).outerjoin(
                User, User.id == Availability.professor_id,
            ).filter(
                Availability.professor_id == professor_id,
                Availability.is_booked.is_(False),
            ).order_by(Availability.id.asc()).all()
            return [SlotRecord.from_row(slot, professor_name=name) for slot, name in rows]

    def _slot_exists(self, slot_id: int) -> bool:
        with self._transaction('look up slot') as db:
            return db.query(Availability.id).filter(Availability.id == slot_id).first() is not None

    def book_slot(self, actor: Identity, slot_id: int) -> AppointmentRecord:
        if not actor.is_student:
            raise Forbidden('Only students can book appointments.')

        # Slots are never deleted, so only ids that exist get a lock.
        if not self._slot_exists(slot_id):
            raise SlotNotFound()

        with self._locks.for_slot(slot_id), self._transaction('book slot') as db:
            claimed = db.execute(
                update(Availability)
                .where(Availability.id == slot_id, Availability.is_booked.is_(False))
                .values(is_booked=True)
                .execution_options(synchronize_session=False)
            ).rowcount

            if not claimed:
                exists = db.query(Availability.id).filter(Availability.id == slot_id).first()
                if exists is None:
                    raise SlotNotFound()
                logger.warning('Student %s tried to book slot %s which is already booked.', actor.user_id, slot_id)
                raise SlotUnavailable()

            slot = db.get(Availability, slot_id)
            appointment = Appointment(
                student_id=actor.user_id,
                professor_id=slot.professor_id,
                availability_id=slot.id,
                date=slot.date,
                time_slot=slot.time_slot,
                status=PENDING_STATUS,
            )
            db.add(appointment)
            db.flush()
            record = AppointmentRecord.from_row(
                appointment,
                professor_name=_professor_name(db, slot.professor_id),
            )
            db.commit()

        logger.info('Student %s booked slot %s as appointment %s.', actor.user_id, slot_id, record.id)
        return record

    def _get_live_appointment(self, appointment_id: int) -> AppointmentRecord:
        with self._transaction('look up appointment') as db:
            appointment = db.get(Appointment, appointment_id)
            if appointment is None or appointment.status == CANCELED_STATUS:
                raise AppointmentNotFound()
            return AppointmentRecord.from_row(appointment)

    def cancel_appointment(self, actor: Identity, appointment_id: int) -> AppointmentRecord:
        if not actor.is_professor:
            raise Forbidden('Only professors can cancel appointments.')

        snapshot = self._get_live_appointment(appointment_id)
        if snapshot.professor_id != actor.user_id:
            raise Forbidden('Only the professor who owns this appointment can cancel it.')

        with self._locks.for_slot(snapshot.slot_id), self._transaction('cancel appointment') as db:
            # Only the transaction that flips the status may free the slot.
            canceled = db.execute(
                update(Appointment)
                .where(Appointment.id == appointment_id, Appointment.status != CANCELED_STATUS)
                .values(status=CANCELED_STATUS)
                .execution_options(synchronize_session=False)
            ).rowcount
            if not canceled:
                raise AppointmentNotFound()

            released = db.execute(
                update(Availability)
                .where(Availability.id == snapshot.slot_id)
                .values(is_booked=False)
                .execution_options(synchronize_session=False)
            ).rowcount
            if not released:
                logger.warning(
                    'Appointment %s references missing slot %s; canceling anyway.',
                    appointment_id, snapshot.slot_id,
                )

            appointment = db.get(Appointment, appointment_id)
            record = AppointmentRecord.from_row(
                appointment,
                professor_name=_professor_name(db, appointment.professor_id),
            )
            db.commit()

        logger.info('Professor %s canceled appointment %s.', actor.user_id, appointment_id)
        return record

    def list_student_appointments(self, actor: Identity, student_id: int) -> list[AppointmentRecord]:
        if not actor.is_student or actor.user_id != student_id:
            raise Forbidden('You are not authorized to view these appointments.')

        with self._transaction('list student appointments') as db:
            rows = db.query(Appointment, User.name).outerjoin(
                User, User.id == Appointment.professor_id,
            ).filter(
                Appointment.student_id == student_id,
                Appointment.status != CANCELED_STATUS,
            ).order_by(
                Appointment.date.asc(),
                Appointment.time_slot.asc(),
                Appointment.id.asc(),
            ).all()
            return [
                AppointmentRecord.from_row(appointment, professor_name=name)
                for appointment, name in rows
            ]

    def find_inconsistent_slots(self) -> list[int]:
        """Return ids of slots whose booked flag disagrees with their live appointments.

        A slot is consistent when it is booked exactly when one non-canceled
        appointment references it.
        """
        with self._transaction('audit slots') as db:
            live_counts = dict(
                db.query(Appointment.availability_id, func.count(Appointment.id))
                .filter(Appointment.status != CANCELED_STATUS)
                .group_by(Appointment.availability_id)
                .all()
            )
            slots = db.query(Availability.id, Availability.is_booked).order_by(Availability.id.asc()).all()

        inconsistent: list[int] = []
        for slot_id, is_booked in slots:
            live = live_counts.get(slot_id, 0)
            if live > 1 or bool(is_booked) != (live == 1):
                inconsistent.append(slot_id)
        return inconsistent
