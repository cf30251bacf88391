import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Firestore Configuration
# Credentials come from Application Default Credentials (GOOGLE_APPLICATION_CREDENTIALS or gcloud)
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
FIRESTORE_DATABASE = os.getenv("FIRESTORE_DATABASE", "(default)")

# Local mirror (embedded SQLite cache of recent Firestore reads)
MIRROR_DATABASE_URL = os.getenv("MIRROR_DATABASE_URL", "sqlite:///./spa_mirror.db")
MIRROR_SCHEMA_VERSION = 4

# Freshness window for mirrored rows, in milliseconds (5 minutes)
CACHE_DURATION_MS = int(os.getenv("CACHE_DURATION_MS", str(5 * 60 * 1000)))

# List pagination
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# Public site base URL, used for booking status deep links and QR codes
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/")

# All JSON routes live under this prefix so the static bundle can own "/"
API_PREFIX = os.getenv("API_PREFIX", "/api")

# Built frontend bundle; unmatched paths fall back to its index.html
STATIC_DIR = os.getenv("STATIC_DIR")

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")

# Public booking form rate limit (per client IP)
BOOKING_RATE_LIMIT = int(os.getenv("BOOKING_RATE_LIMIT", "20"))
BOOKING_RATE_WINDOW = int(os.getenv("BOOKING_RATE_WINDOW", "3600"))

# Redis is optional; without it rate limiting counts in process memory
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"
