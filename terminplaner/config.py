import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Storage backend: "local" (JSON file), "sql" (SQLAlchemy) or "remote" (hosted REST tables)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()

# Local file store
LOCAL_STORAGE_PATH = os.getenv("LOCAL_STORAGE_PATH", "./data/terminplaner.json")

# SQL store
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./terminplaner.db")

# Remote table store (PostgREST-style API, e.g. a hosted Postgres project)
REMOTE_URL = os.getenv("REMOTE_URL")
REMOTE_API_KEY = os.getenv("REMOTE_API_KEY")
REMOTE_TIMEOUT_SECONDS = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "10"))

# Overlap/ordering checks on edits: "skip" keeps edits unchecked, "enforce" validates them
APPOINTMENT_EDIT_CHECKS = os.getenv("APPOINTMENT_EDIT_CHECKS", "skip").lower()

# What to do when the overlap read fails: "propagate" the error or treat it as "permissive" (no overlap)
OVERLAP_READ_FAILURE = os.getenv("OVERLAP_READ_FAILURE", "propagate").lower()

# Frontend origins allowed by CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000"
).split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

VALID_BACKENDS = ("local", "sql", "remote")
VALID_EDIT_CHECKS = ("skip", "enforce")
VALID_READ_FAILURE_MODES = ("propagate", "permissive")

if STORAGE_BACKEND not in VALID_BACKENDS:
    import warnings

    warnings.warn(
        f"Unknown STORAGE_BACKEND '{STORAGE_BACKEND}', falling back to 'local'",
        RuntimeWarning,
        stacklevel=2,
    )
    STORAGE_BACKEND = "local"

if APPOINTMENT_EDIT_CHECKS not in VALID_EDIT_CHECKS:
    raise ValueError(
        f"APPOINTMENT_EDIT_CHECKS must be one of {VALID_EDIT_CHECKS}, got '{APPOINTMENT_EDIT_CHECKS}'"
    )

if OVERLAP_READ_FAILURE not in VALID_READ_FAILURE_MODES:
    raise ValueError(
        f"OVERLAP_READ_FAILURE must be one of {VALID_READ_FAILURE_MODES}, got '{OVERLAP_READ_FAILURE}'"
    )
