from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    @classmethod
    def from_raw(cls, value: Optional[str]) -> "BookingStatus":
        # Rows written by older clients may use any casing
        if not value:
            return cls.PENDING
        return cls(value.strip().lower())


def _str_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class Facility(BaseModel):
    id: str
    slug: str
    name: str
    description: str = ""
    image: Optional[str] = None
    capacity: int = 0
    features: List[str] = Field(default_factory=list)
    hourly_rate: float = 0
    operating_hours: Optional[Dict[str, str]] = None


class Booking(BaseModel):
    id: Optional[str] = None
    facility_id: str
    facility_name: Optional[str] = None
    user_id: str
    user_name: str = "User"
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    date: str
    start_time: str
    end_time: str
    status: BookingStatus = BookingStatus.PENDING
    total_price: float = 0
    equipment_needed: Optional[str] = None
    medical_concerns: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Booking":
        """Maps a `bookings` row as returned by Supabase."""
        email = row.get("user_email") or None
        return cls(
            id=_str_or_none(row.get("id")),
            facility_id=str(row.get("facility_id")),
            facility_name=row.get("facility_name"),
            user_id=str(row.get("user_id")),
            user_name=email or "User",
            user_email=email,
            user_phone=row.get("user_phone") or None,
            date=str(row.get("date")),
            start_time=str(row.get("start_time")),
            end_time=str(row.get("end_time")),
            status=BookingStatus.from_raw(row.get("status")),
            total_price=row.get("total_price") or 0,
            equipment_needed=row.get("equipment_needed") or None,
            medical_concerns=row.get("medical_concerns") or None,
            created_at=_str_or_none(row.get("created_at")),
        )


class AvailabilitySlot(BaseModel):
    time: str
    available: bool


class Requester(BaseModel):
    """The signed-in user as reported by the auth provider."""
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.email or "User"


class Event(BaseModel):
    id: str
    title: str
    description: str = ""
    location: str = ""
    category: str = ""
    date: str
    time: str = ""
    image: Optional[str] = None
    highlights: List[str] = Field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Event":
        return cls(
            id=str(row.get("id")),
            title=row.get("title") or "",
            description=row.get("description") or "",
            location=row.get("location") or "",
            category=row.get("category") or "",
            date=str(row.get("event_date")),
            time=row.get("event_time") or "",
            image=row.get("image_url"),
            highlights=row.get("highlights") or [],
        )


class EventRsvp(BaseModel):
    id: str
    event_id: str
    event_title: Optional[str] = None
    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "EventRsvp":
        return cls(
            id=str(row.get("id")),
            event_id=str(row.get("event_id")),
            event_title=row.get("event_title") or None,
            name=row.get("name") or "",
            email=row.get("email") or "",
            phone=row.get("phone") or None,
            message=row.get("message") or None,
            created_at=_str_or_none(row.get("created_at")),
        )


class ContactMessage(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ContactMessage":
        return cls(
            id=str(row.get("id")),
            name=row.get("name") or "",
            email=row.get("email") or "",
            phone=row.get("phone") or None,
            message=row.get("message") or "",
            created_at=_str_or_none(row.get("created_at")),
        )
