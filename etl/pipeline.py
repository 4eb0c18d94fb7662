"""
Course data pipeline: loads curriculum course records, normalises them, and
groups them into the mappings the course API serves.

Record shape (data/courses.json):
    {"department": "CSE", "regulation": "R21", "semester": "1",
     "category": "BSC", "course_code": "MA1101", "course_title": "...",
     "credits": 4}

Grouping:
  - by category  → {category: [course, ...]}  for one department + regulation
  - by semester  → {semester: [course, ...]}  for one department + regulation
  - all regs     → {regulation: {category: [...]}} for one department

Category codes are passed through as found; deciding which ones count is the
dashboard's job, not the pipeline's.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any

from dashboard.config import COURSES_FILE, DATA_DIR, REGULATIONS

log = logging.getLogger(__name__)

Course = dict[str, Any]

CSV_FIELDS = ("department", "regulation", "semester", "category",
              "course_code", "course_title", "credits")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def load(path: Path = COURSES_FILE) -> list[Course]:
    """Load a JSON array of course records; return [] if the file doesn't exist."""
    if not path.exists():
        return []
    courses = json.loads(path.read_text(encoding="utf-8"))
    return [normalize_course(c) for c in courses]


def normalize_code(code: str) -> str:
    """Canonicalise course codes: 'CS 3391' and 'cs3391' → 'CS3391'."""
    return code.replace(" ", "").upper().strip()


def normalize_course(record: Course) -> Course:
    """Return a copy of record with its grouping keys canonicalised."""
    course = dict(record)
    course["course_code"] = normalize_code(str(record.get("course_code", "")))
    course["category"]    = str(record.get("category", "")).strip().upper()
    course["department"]  = str(record.get("department", "")).strip()
    course["regulation"]  = str(record.get("regulation", "")).strip().upper()
    course["semester"]    = str(record.get("semester", "")).strip()
    return course


def _select(courses: list[Course], department: str, regulation: str | None = None) -> list[Course]:
    return [
        c for c in courses
        if c["department"].lower() == department.lower()
        and (regulation is None or c["regulation"] == regulation.upper())
    ]


def _group(courses: list[Course], key: str) -> dict[str, list[Course]]:
    groups: dict[str, list[Course]] = {}
    for course in courses:
        if course[key]:
            groups.setdefault(course[key], []).append(course)
    return groups


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def group_by_category(courses: list[Course], department: str, regulation: str) -> dict[str, list[Course]]:
    return _group(_select(courses, department, regulation), "category")


def group_by_semester(courses: list[Course], department: str, regulation: str) -> dict[str, list[Course]]:
    return _group(_select(courses, department, regulation), "semester")


def group_all_regulations(
    courses: list[Course],
    department: str,
    regulations: tuple[str, ...] = REGULATIONS,
) -> dict[str, dict[str, list[Course]]]:
    """
    Category maps for every configured regulation of a department.

    Regulations with no courses are still present, as empty maps.
    """
    dept_courses = _select(courses, department)
    snapshot = {reg: {} for reg in regulations}
    for course in dept_courses:
        if not course["regulation"] or not course["category"]:
            continue
        by_category = snapshot.setdefault(course["regulation"], {})
        by_category.setdefault(course["category"], []).append(course)
    return snapshot


# ---------------------------------------------------------------------------
# Entry point (importable, not a CLI)
# ---------------------------------------------------------------------------

def _coerce_credits(value: str) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def read_csv(path: Path) -> list[Course]:
    """Read a curriculum CSV export (one row per course) into normalised records."""
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = [name for name in CSV_FIELDS if name not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"{path.name} is missing columns: {', '.join(missing)}")
        courses = []
        for row in reader:
            record = {name: row[name] for name in CSV_FIELDS}
            record["credits"] = _coerce_credits(row["credits"])
            courses.append(normalize_course(record))
    return courses


def run(source_csv: Path, output_file: Path = COURSES_FILE) -> list[Course]:
    """Convert a CSV export to courses.json, return the records written."""
    courses = read_csv(source_csv)

    output_file.parent.mkdir(exist_ok=True)
    output_file.write_text(
        json.dumps(courses, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    log.info("Saved %d courses → %s", len(courses), output_file)
    return courses


if __name__ == "__main__":
    import sys

    logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(message)s")
    if len(sys.argv) != 2:
        sys.exit("usage: python etl/pipeline.py <courses.csv>")
    run(Path(sys.argv[1]), DATA_DIR / "courses.json")
