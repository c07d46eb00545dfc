from pydantic import BaseModel, Field
from typing import Optional, List

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

# --- Incoming Request Models ---

class BookingRequest(BaseModel):
    """
    A booking as submitted by the UI. `end_time` is either a clock time or a
    duration label ("1h", "1.5h", ...). Any `status` sent by the client is
    dropped with the other unknown fields.
    """
    facility_id: str
    facility_name: Optional[str] = None
    date: str = Field(..., pattern=DATE_PATTERN)
    start_time: str
    end_time: str
    equipment_needed: Optional[str] = None
    medical_concerns: Optional[str] = None

class EventCreateRequest(BaseModel):
    title: str
    description: str = ""
    location: str = ""
    category: str = ""
    date: str = Field(..., pattern=DATE_PATTERN)
    time: str = ""  # free text, e.g. "10:00 AM - 7:00 PM"
    image: Optional[str] = None
    highlights: List[str] = Field(default_factory=list)

class RsvpRequest(BaseModel):
    event_title: Optional[str] = None
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    message: Optional[str] = None

class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    message: str = Field(..., min_length=1)

# --- Outgoing Response Models ---

class ActivityEntry(BaseModel):
    user: str
    action: str = "booked"
    target: Optional[str] = None
    time: Optional[str] = None

class TrendPoint(BaseModel):
    date: str
    label: str
    count: int

class AdminStats(BaseModel):
    active_bookings: int
    pending_requests: int
    monthly_revenue: float
    recent_activity: List[ActivityEntry]
    booking_trends: List[TrendPoint]

