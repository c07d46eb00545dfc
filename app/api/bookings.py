from fastapi import APIRouter, Depends
from typing import List

from app.core.security import get_current_requester
from app.models.api_models import BookingRequest
from app.models.db_models import Booking, Requester
from app.services.booking_service import BookingService

router = APIRouter()
booking_service = BookingService()

@router.post("/bookings", response_model=Booking, status_code=201)
async def create_booking(req: BookingRequest, requester: Requester = Depends(get_current_requester)):
    return await booking_service.create_booking(req, requester)

@router.get("/bookings/mine", response_model=List[Booking])
async def my_bookings(requester: Requester = Depends(get_current_requester)):
    return await booking_service.list_bookings(user_id=requester.id)
