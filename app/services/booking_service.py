from typing import List, Optional

from app.core.config import settings
from app.core.exceptions import (
    DuplicateOwnBookingError,
    InvalidTimeError,
    InvalidStatusTransitionError,
    InvalidTimeSelectionError,
    NotFoundError,
    SlotTakenError,
    VerificationFailedError,
)
from app.core.logger import logger
from app.models.api_models import BookingRequest
from app.models.db_models import Booking, BookingStatus, Requester
from app.services.availability_service import resolve_rows
from app.services.db_service import db_service, utc_now_iso
from app.services.time_service import format_minutes, resolve_window

# Only these moves are defined; confirmed and cancelled are terminal
ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
}


class BookingService:
    def __init__(self, db=None):
        self.db = db or db_service

    async def create_booking(self, request: BookingRequest, requester: Requester) -> Booking:
        """
        The authoritative double-booking check, followed by the insert.

        The check and the insert are separate round trips, so two requests can
        both pass the check. The bookings_no_overlap exclusion constraint
        catches the loser, and db_service reports it as SlotTakenError too.
        """
        logger.info(f"📥 Booking request - facility {request.facility_id}, {request.date} {request.start_time} ({request.end_time}) by {requester.id}")

        # 1. Resolve the requested window
        try:
            window = resolve_window(request.start_time, request.end_time, settings.DEFAULT_DURATION_MINUTES)
        except InvalidTimeError as e:
            raise InvalidTimeSelectionError(
                "Invalid time selection. Please choose a valid start time and duration.",
                details={"start_time": request.start_time},
            ) from e
        if not window.is_bookable():
            raise InvalidTimeSelectionError(
                "Invalid time selection. The booking must end after it starts and before midnight.",
                details={"start": window.start, "end": window.end},
            )

        # 2. Fresh read at write time
        existing = await self.db.get_active_bookings(request.facility_id, request.date)

        # 3-4. First overlap decides the error kind
        for row, other in resolve_rows(existing):
            if window.overlaps(other):
                if str(row.get('user_id')) == requester.id:
                    logger.info(f"🚫 Duplicate own booking for {requester.id}: conflicts with {row.get('id')}")
                    raise DuplicateOwnBookingError(
                        "You already have a booking overlapping this time.",
                        details={"conflicting_booking_id": row.get('id')},
                    )
                logger.info(f"🚫 Slot taken: {request.facility_id} {request.date} {format_minutes(window.start)} conflicts with {row.get('id')}")
                raise SlotTakenError(
                    "This time slot has just been taken by another user.",
                    details={"conflicting_booking_id": row.get('id')},
                )

        # 5. Persist as pending with the resolved end time
        booking_data = {
            'facility_id': request.facility_id,
            'facility_name': request.facility_name,
            'user_id': requester.id,
            'user_email': requester.email or requester.display_name,
            'user_phone': requester.phone,
            'date': request.date,
            'start_time': format_minutes(window.start),
            'end_time': format_minutes(window.end),
            'status': BookingStatus.PENDING.value,
            'total_price': 0,
            'equipment_needed': request.equipment_needed or '',
            'medical_concerns': request.medical_concerns or '',
            'created_at': utc_now_iso(),
        }
        row = await self.db.insert_booking(booking_data)
        return Booking.from_row(row)

    async def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        """
        Moves a pending booking to confirmed or cancelled.
        The write only counts once an independent re-read shows the new status.
        """
        current = await self.db.get_booking(booking_id)
        if not current:
            raise NotFoundError(f"Booking {booking_id} not found.")

        current_status = BookingStatus.from_raw(current.get('status'))
        if status not in ALLOWED_TRANSITIONS.get(current_status, set()):
            raise InvalidStatusTransitionError(
                f"Cannot change a {current_status.value} booking to {status.value}.",
                details={"booking_id": booking_id, "from": current_status.value, "to": status.value},
            )

        updated = await self.db.update_booking_status(booking_id, status.value)
        if not updated:
            logger.error(f"❌ Status update for booking {booking_id} touched no rows")
            raise VerificationFailedError(
                "Update failed: the booking could not be found or you do not have permission to modify it.",
                details={"booking_id": booking_id},
            )

        verified = await self.db.get_booking(booking_id)
        verified_status = BookingStatus.from_raw(verified.get('status')) if verified else None
        if verified_status != status:
            logger.error(f"❌ Verification failed for booking {booking_id}: wanted {status.value}, store has {verified_status}")
            raise VerificationFailedError(
                "The status change could not be verified.",
                details={
                    "booking_id": booking_id,
                    "expected": status.value,
                    "actual": verified_status.value if verified_status else None,
                },
            )

        logger.info(f"✅ Booking {booking_id}: {current_status.value} -> {status.value}")
        return Booking.from_row(verified)

    async def approve(self, booking_id: str) -> Booking:
        return await self.update_status(booking_id, BookingStatus.CONFIRMED)

    async def reject(self, booking_id: str) -> Booking:
        return await self.update_status(booking_id, BookingStatus.CANCELLED)

    async def get_booking(self, booking_id: str) -> Booking:
        row = await self.db.get_booking(booking_id)
        if not row:
            raise NotFoundError(f"Booking {booking_id} not found.")
        return Booking.from_row(row)

    async def list_bookings(self, user_id: Optional[str] = None) -> List[Booking]:
        rows = await self.db.list_bookings(user_id)
        return [Booking.from_row(r) for r in rows]

