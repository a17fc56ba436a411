"""Application configuration loaded from the environment"""
import os
from typing import List

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _list_env(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS
CORS_ORIGIN = _list_env("CORS_ORIGIN", "http://localhost:3000")

# JWT
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_MINUTES = _int_env("JWT_EXPIRES_MINUTES", 15)
JWT_REFRESH_EXPIRES_DAYS = _int_env("JWT_REFRESH_EXPIRES_DAYS", 7)

# Google OAuth
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI", "http://localhost:3000/auth/callback")

# Gemini (read by langchain-google-genai from GOOGLE_API_KEY)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# Supabase storage
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
SUPABASE_STORAGE_BUCKET = os.getenv("SUPABASE_STORAGE_BUCKET", "documents")

# Uploads
MAX_FILE_SIZE = _int_env("MAX_FILE_SIZE", 10 * 1024 * 1024)
ALLOWED_MIME_TYPES = _list_env("ALLOWED_MIME_TYPES", "application/pdf,text/plain,text/markdown")

# Webhooks
WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10"))


def get_jwt_secret() -> str:
    """Get the access token signing secret"""
    secret = os.getenv("JWT_SECRET")
    if not secret or len(secret) < 32:
        raise ValueError("JWT_SECRET must be set and at least 32 characters long")
    return secret


def get_jwt_refresh_secret() -> str:
    """Get the refresh token signing secret"""
    secret = os.getenv("JWT_REFRESH_SECRET")
    if not secret or len(secret) < 32:
        raise ValueError("JWT_REFRESH_SECRET must be set and at least 32 characters long")
    return secret
