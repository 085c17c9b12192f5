# services/tools.py
# Function handlers: one backend call each, always return a FunctionResult.
import logging
from urllib.parse import quote

from .booking_api import BACKEND_ERRORS, BackendError, BookingAPI, describe_error
from .redact import mask_email, redact_log
from .schemas import (
    AnalyticsQueryArgs,
    CheckAvailabilityArgs,
    CreateBookingArgs,
    FunctionResult,
    SearchVenuesArgs,
    UserQueryArgs,
)

log = logging.getLogger(__name__)


def _count_venues(payload) -> int:
    if isinstance(payload, list):
        return len(payload)
    if isinstance(payload, dict):
        for key in ("data", "venues", "items", "results"):
            if isinstance(payload.get(key), list):
                return len(payload[key])
    return 0


async def search_venues(api: BookingAPI, args: SearchVenuesArgs) -> FunctionResult:
    params = args.model_dump(by_alias=True, exclude_none=True)
    log.info("%s", redact_log("Searching venues", params))
    try:
        data = await api.get("/venues/search", params=params)
    except BACKEND_ERRORS as e:
        log.error("Error searching venues: %s", describe_error(e))
        return FunctionResult.fail("Failed to search venues. Please try again.")

    return FunctionResult.ok(
        data=data,
        message=f"Found {_count_venues(data)} venues matching your criteria.",
    )


async def check_availability(api: BookingAPI, args: CheckAvailabilityArgs) -> FunctionResult:
    log.info("Checking availability: venue=%s date=%s time=%s party=%s",
             args.venue_id, args.date, args.time, args.party_size)
    try:
        data = await api.post(f"/venues/{quote(args.venue_id, safe='')}/availability", json={
            "date": args.date,
            "time": args.time,
            "party_size": args.party_size,
        })
        if not isinstance(data, dict):
            raise BackendError(f"unexpected availability payload: {type(data).__name__}")
    except BACKEND_ERRORS as e:
        log.error("Error checking availability: %s", describe_error(e))
        return FunctionResult.fail("Failed to check availability. Please try again.")

    when = f"{args.party_size} people on {args.date} at {args.time}"
    if data.get("available"):
        message = f"Table is available for {when}."
    else:
        message = f"Unfortunately, no availability for {when}."
        alternatives = data.get("alternative_times") or []
        if alternatives:
            message += " Alternative times: " + ", ".join(str(t) for t in alternatives) + "."
    return FunctionResult.ok(data=data, message=message)


async def create_booking(api: BookingAPI, args: CreateBookingArgs) -> FunctionResult:
    payload = {
        "venue_id": args.venue_id,
        "date": args.date,
        "time": args.time,
        "party_size": args.party_size,
        "guest_name": args.guest_name,
        "guest_email": args.guest_email,
        "guest_phone": args.guest_phone,
        "special_requests": args.special_requests,
    }
    log.info("%s", redact_log("Creating booking", payload))
    try:
        data = await api.post("/bookings", json=payload)
        if not isinstance(data, dict) or data.get("id") is None:
            raise BackendError("booking response has no reservation id")
    except BACKEND_ERRORS as e:
        log.error("Error creating booking: %s", describe_error(e))
        return FunctionResult.fail(
            "Failed to create booking. Please try again or contact the restaurant directly."
        )

    return FunctionResult.ok(
        data=data,
        message=(
            f"Booking confirmed! Reservation ID: {data['id']}. "
            f"Confirmation details have been sent to {mask_email(args.guest_email)}."
        ),
    )


async def get_analytics(api: BookingAPI, args: AnalyticsQueryArgs) -> FunctionResult:
    start, end = args.date_range.start, args.date_range.end
    log.info("Fetching analytics: metric=%s %s..%s", args.metric, start, end)
    try:
        data = await api.get(f"/analytics/{args.metric}", params={
            "start_date": start,
            "end_date": end,
            "venue_id": args.venue_id,
            "group_by": args.group_by,
        })
    except BACKEND_ERRORS as e:
        log.error("Error fetching analytics: %s", describe_error(e))
        return FunctionResult.fail("Failed to retrieve analytics data. Please try again.")

    return FunctionResult.ok(
        data=data,
        message=f"Analytics data retrieved for {args.metric} from {start} to {end}.",
    )


async def get_user_info(api: BookingAPI, args: UserQueryArgs) -> FunctionResult:
    params = {
        "user_id": args.user_id,
        "email": args.email,
        "include_bookings": args.include_bookings,
        "include_preferences": args.include_preferences,
    }
    log.info("%s", redact_log("Fetching user info", params))
    try:
        data = await api.get("/users", params=params)
    except BACKEND_ERRORS as e:
        log.error("Error fetching user info: %s", describe_error(e))
        return FunctionResult.fail("Failed to retrieve user information. Please try again.")

    return FunctionResult.ok(data=data, message="User information retrieved successfully.")
