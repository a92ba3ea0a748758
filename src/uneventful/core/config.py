"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
DB_PATH = Path(os.environ.get("UNEVENTFUL_DB_PATH", PROJECT_ROOT / "data" / "db" / "uneventful.db"))

# =============================================================================
# GOOGLE OAUTH (from environment)
# =============================================================================

GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.environ.get("GOOGLE_CLIENT_SECRET", "")
GOOGLE_OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_OAUTH_REVOKE_URL = "https://oauth2.googleapis.com/revoke"
GOOGLE_CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"

# Refresh this many seconds before the provider's stated expiry
TOKEN_EXPIRY_MARGIN_SECONDS = 60
# Used when the token endpoint omits expires_in
DEFAULT_TOKEN_LIFETIME_SECONDS = 3600

# =============================================================================
# SESSIONS
# =============================================================================

SESSION_SECRET = os.environ.get("SESSION_SECRET", "")
# How long an expired session keeps its workspace waiting for re-authentication
SESSION_RESUME_MINUTES = int(os.environ.get("SESSION_RESUME_MINUTES", "15"))

# =============================================================================
# CALENDAR CONFIGURATION
# =============================================================================

EVENTS_PAGE_LIMIT = 100  # maxResults per calendar; a full page means "more may exist"
DEFAULT_WINDOW_DAYS = 14
DEFAULT_TIMEZONE = os.environ.get("DEFAULT_TIMEZONE", "UTC")

# =============================================================================
# API CONFIGURATION
# =============================================================================

API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
API_VERSION = "1.0.0"
