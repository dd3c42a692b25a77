# /blog_auto/config.py

"""
Central place for environment-driven settings. Values are read once at import
time; a `.env` file in the working directory is honoured for local development.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./blog_auto.db")

# --- Claude CLI ---
CLAUDE_BIN = os.getenv("CLAUDE_BIN", "claude")

# --- Attached images ---
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads/images")

# --- Kling image generation ---
KLING_ACCESS_KEY = os.getenv("KLING_ACCESS_KEY", "")
KLING_SECRET_KEY = os.getenv("KLING_SECRET_KEY", "")
KLING_MODEL = os.getenv("KLING_MODEL", "kling-v2-1")
KLING_API_BASE = os.getenv("KLING_API_BASE", "https://api.klingai.com/v1")

# --- Generation pipeline ---
# Single-tenant deployment: one running job at a time.
MAX_CONCURRENT_GENERATIONS = int(os.getenv("MAX_CONCURRENT_GENERATIONS", "1"))
PROGRESS_TTL_SECONDS = float(os.getenv("PROGRESS_TTL_SECONDS", "300"))
PROGRESS_SWEEP_INTERVAL_SECONDS = float(os.getenv("PROGRESS_SWEEP_INTERVAL_SECONDS", "60"))

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
