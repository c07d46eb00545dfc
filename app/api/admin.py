from fastapi import APIRouter, Depends
from typing import List

from app.core.security import require_admin
from app.models.api_models import AdminStats
from app.models.db_models import Booking, ContactMessage, EventRsvp
from app.services.admin_service import AdminService
from app.services.booking_service import BookingService
from app.services.contact_service import ContactService
from app.services.event_service import EventService

# Admin policy is checked once, here, for every route below
router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])

booking_service = BookingService()
admin_service = AdminService()
contact_service = ContactService()
event_service = EventService()

@router.get("/bookings", response_model=List[Booking])
async def list_bookings():
    return await booking_service.list_bookings()

@router.get("/bookings/{booking_id}", response_model=Booking)
async def get_booking(booking_id: str):
    return await booking_service.get_booking(booking_id)

@router.post("/bookings/{booking_id}/approve", response_model=Booking)
async def approve_booking(booking_id: str):
    return await booking_service.approve(booking_id)

@router.post("/bookings/{booking_id}/reject", response_model=Booking)
async def reject_booking(booking_id: str):
    return await booking_service.reject(booking_id)

@router.get("/stats", response_model=AdminStats)
async def get_stats():
    return await admin_service.get_stats()

@router.get("/contacts", response_model=List[ContactMessage])
async def list_contacts():
    return await contact_service.list_messages()

@router.get("/rsvps", response_model=List[EventRsvp])
async def list_rsvps():
    return await event_service.list_rsvps()
