from typing import List

from app.core.exceptions import NotFoundError
from app.core.logger import logger
from app.models.api_models import EventCreateRequest, RsvpRequest
from app.models.db_models import Event, EventRsvp, Requester
from app.services.db_service import db_service, utc_now_iso


class EventService:
    def __init__(self, db=None):
        self.db = db or db_service

    async def list_events(self) -> List[Event]:
        rows = await self.db.list_rows('events', order='event_date', desc=False)
        return [Event.from_row(r) for r in rows]

    async def get_event(self, event_id: str) -> Event:
        row = await self.db.get_row('events', event_id)
        if not row:
            raise NotFoundError(f"Event {event_id} not found.")
        return Event.from_row(row)

    async def create_event(self, request: EventCreateRequest, creator: Requester) -> Event:
        """Admin-only; the caller is expected to have passed the admin policy."""
        payload = {
            'title': request.title,
            'description': request.description,
            'location': request.location,
            'category': request.category,
            'event_date': request.date,
            'event_time': request.time,
            'image_url': request.image,
            'highlights': request.highlights,
            'created_by': creator.id,
        }
        row = await self.db.insert_row('events', payload)
        logger.info(f"🆕 Event created: {request.title} on {request.date}")
        return Event.from_row(row)

    async def rsvp(self, event_id: str, request: RsvpRequest) -> EventRsvp:
        payload = {
            'event_id': event_id,
            'event_title': request.event_title,
            'name': request.name,
            'email': request.email,
            'phone': request.phone,
            'message': request.message,
            'created_at': utc_now_iso(),
        }
        row = await self.db.insert_row('event_rsvps', payload)
        logger.info(f"✉️ RSVP from {request.email} for event {event_id}")
        return EventRsvp.from_row(row)

    async def list_rsvps(self) -> List[EventRsvp]:
        rows = await self.db.list_rows('event_rsvps', order='created_at')
        return [EventRsvp.from_row(r) for r in rows]
