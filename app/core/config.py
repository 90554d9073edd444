# /marksheet-backend/app/core/config.py

"""
Runtime configuration for the marksheet backend.

Every value is read once from the environment (a local `.env` file is loaded
first for development) and exposed as a module-level constant.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# --- Persistence ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./marksheets.db")

# --- Authentication Gate ---
# Bearer token the admin UI must present on every /api request.
ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN")

# --- Marksheet Presentation ---
DEFAULT_PASSING_PERCENTAGE = float(os.getenv("DEFAULT_PASSING_PERCENTAGE", "33"))
MARKSHEET_ISSUE_PLACE = os.getenv("MARKSHEET_ISSUE_PLACE", "Samastipur")
COLLEGE_CODE = os.getenv("COLLEGE_CODE", "53010")

# --- Service ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ALLOW_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if origin.strip()]
