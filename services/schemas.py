# services/schemas.py
# Pydantic models: chat request/response bodies and typed arguments for each function.
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DATE_RE = r"^\d{4}-\d{2}-\d{2}$"
TIME_RE = r"^\d{2}:\d{2}$"
EMAIL_RE = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
ID_RE = r"^[A-Za-z0-9_-]+$"


class _CamelModel(BaseModel):
    # wire format is camelCase; python side uses snake_case
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


# -------------------- Function results --------------------

class FunctionResult(BaseModel):
    success: bool
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "FunctionResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str) -> "FunctionResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class FunctionCall(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class FunctionCallRecord(BaseModel):
    name: str
    arguments: Dict[str, Any]
    result: FunctionResult


# -------------------- Function arguments --------------------

class SearchVenuesArgs(_CamelModel):
    query: Optional[str] = None
    location: Optional[str] = None
    cuisine: Optional[str] = None
    price_range: Optional[Literal["$", "$$", "$$$", "$$$$"]] = Field(None, alias="priceRange")
    limit: int = Field(10, ge=1, le=50)


class CheckAvailabilityArgs(_CamelModel):
    venue_id: str = Field(..., alias="venueId", pattern=ID_RE)
    date: str = Field(..., pattern=DATE_RE)
    time: str = Field(..., pattern=TIME_RE)
    party_size: int = Field(..., alias="partySize", ge=1, le=20)


class CreateBookingArgs(CheckAvailabilityArgs):
    guest_name: str = Field(..., alias="guestName", min_length=1)
    guest_email: str = Field(..., alias="guestEmail", pattern=EMAIL_RE)
    guest_phone: Optional[str] = Field(None, alias="guestPhone")
    special_requests: Optional[str] = Field(None, alias="specialRequests")


class DateRange(_CamelModel):
    start: str = Field(..., pattern=DATE_RE)
    end: str = Field(..., pattern=DATE_RE)


class AnalyticsQueryArgs(_CamelModel):
    metric: Literal["bookings", "revenue", "occupancy", "popular_venues"]
    date_range: DateRange = Field(..., alias="dateRange")
    venue_id: Optional[str] = Field(None, alias="venueId")
    group_by: Optional[Literal["day", "week", "month"]] = Field(None, alias="groupBy")


class UserQueryArgs(_CamelModel):
    user_id: Optional[str] = Field(None, alias="userId")
    email: Optional[str] = Field(None, pattern=EMAIL_RE)
    include_bookings: bool = Field(False, alias="includeBookings")
    include_preferences: bool = Field(False, alias="includePreferences")


# -------------------- Chat API --------------------

class ChatRequest(BaseModel):
    """Body of POST /api/chat. Only `message` is required."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1)
    user_id: Optional[str] = Field(None, alias="userId")
    session_id: Optional[str] = Field(None, alias="sessionId")
    context: Optional[Dict[str, Any]] = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    function_calls: Optional[List[FunctionCallRecord]] = Field(None, alias="functionCalls")
    session_id: str = Field(..., alias="sessionId")
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
