"""Configuration module for EduHub.

This module provides centralized configuration management, including directory
paths, database settings, logging, and enrollment capacity limits.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.parent.resolve()

# Data directory (holds the default SQLite database)
DATA_DIR_NAME = os.getenv("EDUHUB_DATA_DIR", "data")
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "EDUHUB_DATABASE_URL", f"sqlite:///{DATA_DIR}/eduhub.db"
)

# Echo SQL statements (set to "true" when debugging queries)
DATABASE_ECHO: bool = os.getenv("EDUHUB_DATABASE_ECHO", "false").lower() == "true"

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Enrollment Configuration ---

# A student may hold at most this many IN_PROGRESS enrollments at once.
MAX_ENROLLMENTS_PER_STUDENT: int = int(os.getenv("MAX_ENROLLMENTS_PER_STUDENT", "4"))

# A module may hold at most this many distinct IN_PROGRESS students at once.
MAX_STUDENTS_PER_MODULE: int = int(os.getenv("MAX_STUDENTS_PER_MODULE", "10"))

# Teacher name shown for modules without an assigned teacher
UNASSIGNED_TEACHER_NAME: str = "Unassigned"
