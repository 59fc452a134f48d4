"""Configuration module for the Fika quiz platform.

This module provides centralized configuration management, including directory
paths, API server settings, authentication settings, and the point economy.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/quiz_platform.db"
)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "5000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# Frontend base URL, used for post-login redirects
FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")

# --- Authentication Configuration ---

GOOGLE_CLIENT_ID: Optional[str] = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET: Optional[str] = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_CALLBACK_URL: str = os.getenv(
    "GOOGLE_CALLBACK_URL", "http://localhost:5000/auth/google/callback"
)
GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM = "HS256"

# Signs the Starlette session that carries OAuth state between redirects
SESSION_SECRET: str = os.getenv("SESSION_SECRET", "your-session-secret-change-in-production")
SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "fika_session")
SESSION_EXPIRE_MINUTES: int = int(os.getenv("SESSION_EXPIRE_MINUTES", str(60 * 24 * 7)))
# Set to "true" when served over HTTPS
SESSION_COOKIE_SECURE: bool = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Point Economy ---

# Starting balance for every new account
INITIAL_FIKA_POINTS: int = 100

# Extra starting balance when signing up with a referral code
REFERRAL_SIGNUP_BONUS: int = 50

# Credited to the referrer for each signup using their code
REFERRER_REWARD: int = 100

# Cost of unlocking one module
UNLOCK_COST: int = 10

# --- Question Catalog ---

# Number of questions per module
MODULE_SIZE: int = 10

# Largest value a stored integer column can hold
MAX_DB_INT: int = 2**63 - 1

# Upper bound on the question count of one submitted quiz
MAX_QUIZ_QUESTIONS: int = 1000

# --- Referral Codes ---

REFERRAL_CODE_LENGTH: int = 6
REFERRAL_CODE_ALPHABET: str = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
