from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.core.config import settings
from app.core.exceptions import InvalidTimeError
from app.core.logger import logger
from app.models.db_models import AvailabilitySlot
from app.services.db_service import db_service
from app.services.time_service import (
    BookingWindow,
    format_minutes,
    resolve_window,
    slots_needed,
    to_minutes,
)


def resolve_rows(rows: Iterable[Dict[str, Any]]) -> List[Tuple[Dict[str, Any], BookingWindow]]:
    """
    Pairs stored bookings with their resolved windows.
    Rows with an unreadable start time are skipped so one bad record
    cannot block a facility for everyone else.
    """
    resolved = []
    for row in rows:
        try:
            window = resolve_window(
                row.get('start_time'),
                row.get('end_time'),
                settings.DEFAULT_DURATION_MINUTES,
            )
        except InvalidTimeError:
            logger.warning(f"⚠️ Skipping booking {row.get('id')} with unreadable time {row.get('start_time')!r}")
            continue
        resolved.append((row, window))
    return resolved


def compute_slots(
    rows: Iterable[Dict[str, Any]],
    open_start: int,
    open_end: int,
    slot_minutes: int = 60,
) -> List[AvailabilitySlot]:
    """
    Splits [open_start, open_end) into fixed-width slots, each flagged
    unavailable when it overlaps any existing booking window.
    """
    if slot_minutes <= 0:
        raise ValueError("slot_minutes must be positive")

    windows = [w for _, w in resolve_rows(rows)]
    slots = []
    for slot_start in range(open_start, open_end, slot_minutes):
        slot = BookingWindow(slot_start, slot_start + slot_minutes)
        blocked = any(slot.overlaps(w) for w in windows)
        slots.append(AvailabilitySlot(time=format_minutes(slot_start), available=not blocked))
    return slots


def selectable_starts(
    slots: List[AvailabilitySlot],
    duration_minutes: int,
    slot_minutes: int = 60,
) -> List[AvailabilitySlot]:
    """
    Display refinement on top of compute_slots(): a start is offered only
    when every grid slot the duration needs is present and available.
    Advisory only; the booking guard makes the real decision.
    """
    needed = slots_needed(duration_minutes, slot_minutes)
    refined = []
    for index, slot in enumerate(slots):
        run = slots[index:index + needed]
        ok = len(run) == needed and all(s.available for s in run)
        refined.append(AvailabilitySlot(time=slot.time, available=ok))
    return refined


class AvailabilityService:
    def __init__(self, db=None):
        self.db = db or db_service

    async def get_availability(
        self,
        facility_id: str,
        day: str,
        operating_hours: Optional[Dict[str, str]] = None,
    ) -> List[AvailabilitySlot]:
        """
        Availability grid for one facility and date.
        Re-reads bookings on every call; the result is advisory for the UI.
        """
        hours = operating_hours or {'start': settings.OPERATING_START, 'end': settings.OPERATING_END}
        open_start = to_minutes(hours['start'])
        open_end = to_minutes(hours['end'])

        rows = await self.db.get_active_bookings(facility_id, day)
        slots = compute_slots(rows, open_start, open_end, settings.SLOT_MINUTES)
        logger.info(f"📅 Availability {facility_id} {day}: {sum(s.available for s in slots)}/{len(slots)} slots free ({len(rows)} bookings)")
        return slots

    async def get_selectable_starts(
        self,
        facility_id: str,
        day: str,
        duration_minutes: int,
        operating_hours: Optional[Dict[str, str]] = None,
    ) -> List[AvailabilitySlot]:
        slots = await self.get_availability(facility_id, day, operating_hours)
        return selectable_starts(slots, duration_minutes, settings.SLOT_MINUTES)
