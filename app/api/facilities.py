from fastapi import APIRouter, Query
from typing import List

from app.models.api_models import DATE_PATTERN
from app.models.db_models import AvailabilitySlot, Facility
from app.services.availability_service import AvailabilityService
from app.services.facility_service import FacilityService
from app.services.time_service import parse_duration

router = APIRouter()
facility_service = FacilityService()
availability_service = AvailabilityService()

@router.get("/facilities", response_model=List[Facility])
async def list_facilities():
    return facility_service.list_facilities()

@router.get("/facilities/{slug}", response_model=Facility)
async def get_facility(slug: str):
    return facility_service.get_by_slug(slug)

@router.get("/facilities/{facility_id}/availability", response_model=List[AvailabilitySlot])
async def get_availability(facility_id: str, day: str = Query(..., alias="date", pattern=DATE_PATTERN)):
    facility = facility_service.get_by_id(facility_id)
    return await availability_service.get_availability(
        facility.id, day, facility_service.operating_hours(facility)
    )

@router.get("/facilities/{facility_id}/availability/starts", response_model=List[AvailabilitySlot])
async def get_selectable_starts(
    facility_id: str,
    day: str = Query(..., alias="date", pattern=DATE_PATTERN),
    duration: str = Query("1h"),
):
    """Start slots that can hold the whole duration (display only)."""
    facility = facility_service.get_by_id(facility_id)
    return await availability_service.get_selectable_starts(
        facility.id, day, parse_duration(duration), facility_service.operating_hours(facility)
    )
