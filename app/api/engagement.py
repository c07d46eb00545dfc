from fastapi import APIRouter, Depends
from typing import List

from app.core.security import require_admin
from app.models.api_models import ContactRequest, EventCreateRequest, RsvpRequest
from app.models.db_models import ContactMessage, Event, EventRsvp, Requester
from app.services.contact_service import ContactService
from app.services.event_service import EventService

router = APIRouter()
event_service = EventService()
contact_service = ContactService()

@router.get("/events", response_model=List[Event])
async def list_events():
    return await event_service.list_events()

@router.get("/events/{event_id}", response_model=Event)
async def get_event(event_id: str):
    return await event_service.get_event(event_id)

@router.post("/events", response_model=Event, status_code=201)
async def create_event(req: EventCreateRequest, admin: Requester = Depends(require_admin)):
    return await event_service.create_event(req, admin)

@router.post("/events/{event_id}/rsvp", response_model=EventRsvp, status_code=201)
async def rsvp(event_id: str, req: RsvpRequest):
    return await event_service.rsvp(event_id, req)

@router.post("/contacts", response_model=ContactMessage, status_code=201)
async def submit_contact(req: ContactRequest):
    return await contact_service.submit(req)
