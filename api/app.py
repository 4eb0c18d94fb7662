"""
FastAPI application: reference course API for the dashboard.

Run as a script:
    python api/app.py

Or as a module:
    uvicorn api.app:app --reload --port 5000

Serves course records from data/courses.json (build it with
`python etl/pipeline.py <export.csv>`).

Endpoints (all GET, under /api):
    /courses/semester?department=&regulation=   → {semester: [course, ...]}
    /courses/category?department=&regulation=   → {category: [course, ...]}
    /courses/category/all?department=           → {regulation: {category: [course, ...]}}
    /departments                                → [{"id": int, "name": str}, ...]
    /regulations                                → [str, ...]

Logs each request and wall-clock response time to stdout and logs/app.log
(rotating, 5 MB max, 3 backups).
"""

import logging
import logging.handlers
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Query
from pydantic import BaseModel

# Ensure project root is on sys.path when running as a script (python api/app.py)
sys.path.insert(0, str(Path(__file__).parent.parent))

from dashboard.config import (
    API_HOST,
    API_PORT,
    COURSES_FILE,
    DEPARTMENT_NAMES,
    DEPARTMENTS,
    LOG_DIR,
    LOG_FILE,
    REGULATIONS,
)
from etl.pipeline import group_all_regulations, group_by_category, group_by_semester, load


def _setup_logging() -> None:
    LOG_DIR.mkdir(exist_ok=True)
    fmt = logging.Formatter("%(asctime)s  %(levelname)s  %(message)s")

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(fmt)

    # Rotate at 5 MB, keep 3 backups
    rotating = logging.handlers.RotatingFileHandler(
        LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    rotating.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(stream)
    root.addHandler(rotating)


log = logging.getLogger("api")

Course = dict[str, Any]


# ---------------------------------------------------------------------------
# App + lifespan
# ---------------------------------------------------------------------------

_courses: list[Course] = []


@asynccontextmanager
async def lifespan(_: FastAPI):
    global _courses

    log.info("Loading course records from %s…", COURSES_FILE)
    _courses = load(COURSES_FILE)
    if not _courses:
        log.warning("  No course records found, every query will return empty data.")
    else:
        log.info("  %d courses loaded.", len(_courses))

    yield  # server runs here


app = FastAPI(title="Department Course Dashboard API", lifespan=lifespan)
router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class DepartmentOut(BaseModel):
    id: int
    name: str


CourseMap = dict[str, list[Course]]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _check_department(department: str) -> str:
    for name in DEPARTMENT_NAMES:
        if name.lower() == department.strip().lower():
            return name
    raise HTTPException(status_code=404, detail=f"Unknown department: {department}")


def _check_regulation(regulation: str) -> str:
    code = regulation.strip().upper()
    if code not in REGULATIONS:
        raise HTTPException(status_code=404, detail=f"Unknown regulation: {regulation}")
    return code


def _log_hits(endpoint: str, department: str, regulation: str | None, hits: int, t0: float) -> None:
    elapsed = time.perf_counter() - t0
    log.info("%s  dept=%r  reg=%r  hits=%d  %.3fs", endpoint, department, regulation, hits, elapsed)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/departments", response_model=list[DepartmentOut])
def departments() -> list[DepartmentOut]:
    return [DepartmentOut(id=d.id, name=d.name) for d in DEPARTMENTS]


@router.get("/regulations", response_model=list[str])
def regulations() -> list[str]:
    return list(REGULATIONS)


@router.get("/courses/semester")
def courses_by_semester(
    department: str = Query(..., min_length=1),
    regulation: str = Query(..., min_length=1),
) -> CourseMap:
    t0 = time.perf_counter()
    dept, reg = _check_department(department), _check_regulation(regulation)
    result = group_by_semester(_courses, dept, reg)
    _log_hits("semester", dept, reg, sum(map(len, result.values())), t0)
    return result


@router.get("/courses/category")
def courses_by_category(
    department: str = Query(..., min_length=1),
    regulation: str = Query(..., min_length=1),
) -> CourseMap:
    t0 = time.perf_counter()
    dept, reg = _check_department(department), _check_regulation(regulation)
    result = group_by_category(_courses, dept, reg)
    _log_hits("category", dept, reg, sum(map(len, result.values())), t0)
    return result


@router.get("/courses/category/all")
def courses_by_category_all(department: str = Query(..., min_length=1)) -> dict[str, CourseMap]:
    t0 = time.perf_counter()
    dept = _check_department(department)
    result = group_all_regulations(_courses, dept)
    hits = sum(len(courses) for cmap in result.values() for courses in cmap.values())
    _log_hits("category/all", dept, None, hits, t0)
    return result


app.include_router(router)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    _setup_logging()
    log.info("=== Department Course Dashboard API, starting on http://%s:%d ===", API_HOST, API_PORT)
    uvicorn.run(app, host=API_HOST, port=API_PORT, reload=False)
