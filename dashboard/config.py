"""
Configuration for the department course dashboard.

Every value can be overridden from the environment (or a .env file in the
working directory). Departments and regulations are deployment data, not
business logic, so they live here rather than in the taxonomy.

Environment:
    COURSE_API_URL          base URL of the course API (default http://localhost:5000/api)
    REQUEST_TIMEOUT         seconds per HTTP request (default 15)
    REQUEST_RETRIES         attempts per fetch before giving up (default 3)
    DASHBOARD_DEPARTMENTS   comma-separated department names
    DASHBOARD_REGULATIONS   comma-separated regulation codes, oldest first
    API_HOST / API_PORT     bind address of the reference API
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

BASE_DIR     = Path(__file__).parent.parent
DATA_DIR     = BASE_DIR / "data"
COURSES_FILE = DATA_DIR / "courses.json"
LOG_DIR      = BASE_DIR / "logs"
LOG_FILE     = LOG_DIR / "app.log"


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

COURSE_API_URL  = os.getenv("COURSE_API_URL", "http://localhost:5000/api").rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))
REQUEST_RETRIES = int(os.getenv("REQUEST_RETRIES", "3"))

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "5000"))


# ---------------------------------------------------------------------------
# Departments + regulations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Department:
    id: int
    name: str


_DEFAULT_DEPARTMENTS = (
    "CSE", "IT", "AIDS", "AIML", "CyberSecurity", "CSBS", "MECH",
    "MCT", "ECE", "EEE", "VLSI", "BME", "ACT", "CIVIL",
)

# Chronological: the first entry is the default selection.
_DEFAULT_REGULATIONS = ("R21", "R22", "R22R", "R24")


def _split_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Read a comma-separated list from the environment, ignoring blanks."""
    raw = os.getenv(name)
    if not raw:
        return default
    values = tuple(v.strip() for v in raw.split(",") if v.strip())
    return values or default


DEPARTMENTS: tuple[Department, ...] = tuple(
    Department(id=i, name=name)
    for i, name in enumerate(_split_env("DASHBOARD_DEPARTMENTS", _DEFAULT_DEPARTMENTS), start=1)
)
DEPARTMENT_NAMES: tuple[str, ...] = tuple(d.name for d in DEPARTMENTS)

REGULATIONS: tuple[str, ...] = _split_env("DASHBOARD_REGULATIONS", _DEFAULT_REGULATIONS)
DEFAULT_REGULATION = REGULATIONS[0]
