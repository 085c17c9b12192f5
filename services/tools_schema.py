# services/tools_schema.py
# JSON-schema definitions of the functions the LLM may call.
# Each proxies to one endpoint of the booking API.

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"

search_venues_tool = {
    "type": "function",
    "function": {
        "name": "search_venues",
        "description": "Search for venues/restaurants based on various criteria like location, cuisine, price range",
        "parameters": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "General search query (restaurant name, cuisine type, etc.)"},
                "location": {"type": "string", "description": "Location to search in (city, neighborhood, address)"},
                "cuisine": {"type": "string", "description": "Type of cuisine (Italian, Mexican, Asian, etc.)"},
                "priceRange": {"type": "string", "enum": ["$", "$$", "$$$", "$$$$"], "description": "Price range from $ (budget) to $$$$ (fine dining)"},
                "limit": {"type": "number", "minimum": 1, "maximum": 50, "default": 10, "description": "Maximum number of results to return (1-50)"},
            },
        },
    },
}

check_availability_tool = {
    "type": "function",
    "function": {
        "name": "check_availability",
        "description": "Check table availability for a specific venue, date, time, and party size",
        "parameters": {
            "type": "object",
            "properties": {
                "venueId": {"type": "string", "pattern": "^[A-Za-z0-9_-]+$", "description": "Unique identifier for the venue"},
                "date": {"type": "string", "pattern": DATE_PATTERN, "description": "Date in YYYY-MM-DD format"},
                "time": {"type": "string", "pattern": TIME_PATTERN, "description": "Time in HH:MM format (24-hour)"},
                "partySize": {"type": "number", "minimum": 1, "maximum": 20, "description": "Number of people in the party"},
            },
            "required": ["venueId", "date", "time", "partySize"],
        },
    },
}

create_booking_tool = {
    "type": "function",
    "function": {
        "name": "create_booking",
        "description": "Create a new restaurant reservation/booking",
        "parameters": {
            "type": "object",
            "properties": {
                "venueId": {"type": "string", "pattern": "^[A-Za-z0-9_-]+$", "description": "Unique identifier for the venue"},
                "date": {"type": "string", "pattern": DATE_PATTERN, "description": "Date in YYYY-MM-DD format"},
                "time": {"type": "string", "pattern": TIME_PATTERN, "description": "Time in HH:MM format (24-hour)"},
                "partySize": {"type": "number", "minimum": 1, "maximum": 20, "description": "Number of people in the party"},
                "guestName": {"type": "string", "description": "Full name of the primary guest"},
                "guestEmail": {"type": "string", "format": "email", "description": "Email address for confirmation"},
                "guestPhone": {"type": "string", "description": "Phone number (optional)"},
                "specialRequests": {"type": "string", "description": "Any special requests or dietary restrictions"},
            },
            "required": ["venueId", "date", "time", "partySize", "guestName", "guestEmail"],
        },
    },
}

get_analytics_tool = {
    "type": "function",
    "function": {
        "name": "get_analytics",
        "description": "Retrieve analytics data for bookings, revenue, occupancy, or popular venues",
        "parameters": {
            "type": "object",
            "properties": {
                "metric": {"type": "string", "enum": ["bookings", "revenue", "occupancy", "popular_venues"], "description": "Type of analytics data to retrieve"},
                "dateRange": {
                    "type": "object",
                    "properties": {
                        "start": {"type": "string", "pattern": DATE_PATTERN, "description": "Start date in YYYY-MM-DD format"},
                        "end": {"type": "string", "pattern": DATE_PATTERN, "description": "End date in YYYY-MM-DD format"},
                    },
                    "required": ["start", "end"],
                    "description": "Date range for analytics query",
                },
                "venueId": {"type": "string", "description": "Optional venue ID to filter analytics for specific venue"},
                "groupBy": {"type": "string", "enum": ["day", "week", "month"], "description": "How to group the analytics data"},
            },
            "required": ["metric", "dateRange"],
        },
    },
}

get_user_info_tool = {
    "type": "function",
    "function": {
        "name": "get_user_info",
        "description": "Retrieve user information including bookings and preferences",
        "parameters": {
            "type": "object",
            "properties": {
                "userId": {"type": "string", "description": "Unique user identifier"},
                "email": {"type": "string", "format": "email", "description": "User email address"},
                "includeBookings": {"type": "boolean", "default": False, "description": "Include user booking history"},
                "includePreferences": {"type": "boolean", "default": False, "description": "Include user dining preferences"},
            },
        },
    },
}

# registration order = order offered to the model
ALL_TOOLS = (
    search_venues_tool,
    check_availability_tool,
    create_booking_tool,
    get_analytics_tool,
    get_user_info_tool,
)


def tool_name(tool: dict) -> str:
    return tool["function"]["name"]


def required_fields(tool: dict) -> list:
    return list(tool["function"]["parameters"].get("required", []))
