# config.py
# Settings from ENV (.env locally, dashboard variables in deployment)
import os
from dotenv import load_dotenv

load_dotenv()

# --- OpenAI ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", "1500"))
OPENAI_TIMEOUT_SEC = float(os.getenv("OPENAI_TIMEOUT_SEC", "30"))

# --- Booking backend (Laravel API) ---
BOOKING_API_URL = os.getenv("BOOKING_API_URL", "").rstrip("/")
BOOKING_API_TOKEN = os.getenv("BOOKING_API_TOKEN", "")
BACKEND_TIMEOUT_SEC = float(os.getenv("BACKEND_TIMEOUT_SEC", "10"))
BACKEND_CONNECT_TIMEOUT_SEC = float(os.getenv("BACKEND_CONNECT_TIMEOUT_SEC", "4"))

# --- Service ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
