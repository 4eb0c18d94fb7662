"""
Course API client.

Three read-only queries against the course API:

    GET {base}/courses/semester?department=&regulation=   → {semester: [course, ...]}
    GET {base}/courses/category?department=&regulation=   → {category: [course, ...]}
    GET {base}/courses/category/all?department=           → {regulation: {category: [course, ...]}}

Transport failures are retried with exponential backoff and then raised as
FetchError. Bodies that are not JSON, or not shaped like the mappings above,
raise MalformedResponseError straight away. Course objects are opaque and
pass through untouched.
"""

import logging
import time
from typing import Any, Protocol

import requests
from pydantic import TypeAdapter, ValidationError

from dashboard.config import COURSE_API_URL, REQUEST_RETRIES, REQUEST_TIMEOUT

log = logging.getLogger(__name__)

CourseList = list[Any]
SemesterMap = dict[str, CourseList]
CategoryMap = dict[str, CourseList]
RegulationCategorySnapshot = dict[str, CategoryMap]

_COURSE_MAP = TypeAdapter(dict[str, list[Any] | None])
_SNAPSHOT = TypeAdapter(dict[str, dict[str, list[Any] | None] | None])


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class FetchError(Exception):
    """The course API could not be reached or answered with an error."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class MalformedResponseError(FetchError):
    """The course API answered, but not with the expected mapping."""


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------

class DataFetcher(Protocol):
    def fetch_semester_data(self, department: str, regulation: str) -> SemesterMap: ...

    def fetch_category_data(self, department: str, regulation: str) -> CategoryMap: ...

    def fetch_all_regulations_category_data(self, department: str) -> RegulationCategorySnapshot: ...


# ---------------------------------------------------------------------------
# Payload validation
# ---------------------------------------------------------------------------

def _clean_course_map(raw: dict[str, list[Any] | None]) -> dict[str, CourseList]:
    # null lists are treated as empty
    return {key: list(courses or []) for key, courses in raw.items()}


def parse_course_map(payload: Any, path: str = "") -> dict[str, CourseList]:
    """Validate a {key: [course, ...]} payload."""
    try:
        raw = _COURSE_MAP.validate_python(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Expected a mapping of lists from {path or 'course API'}: "
            f"{exc.error_count()} validation error(s)",
            path,
        ) from exc
    return _clean_course_map(raw)


def parse_snapshot(payload: Any, path: str = "") -> RegulationCategorySnapshot:
    """Validate a {regulation: {category: [course, ...]}} payload."""
    try:
        raw = _SNAPSHOT.validate_python(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Expected a mapping of category maps from {path or 'course API'}: "
            f"{exc.error_count()} validation error(s)",
            path,
        ) from exc
    return {regulation: _clean_course_map(cmap or {}) for regulation, cmap in raw.items()}


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

class CourseApiClient:
    """DataFetcher backed by the course API over HTTP."""

    def __init__(
        self,
        base_url: str = COURSE_API_URL,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
        retries: int = REQUEST_RETRIES,
        backoff: float = 1.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session  = session or requests.Session()
        self.timeout  = timeout
        self.retries  = max(1, retries)
        self.backoff  = backoff

    def _get(self, path: str, params: dict[str, str]) -> Any:
        """GET a path with exponential-backoff retries; return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        last_exc: Exception | None = None

        for attempt in range(self.retries):
            try:
                resp = self.session.get(url, params=params, timeout=self.timeout)
                resp.raise_for_status()
                break
            except requests.RequestException as exc:
                last_exc = exc
                log.warning(
                    "Request failed (attempt %d/%d) %s %s: %s",
                    attempt + 1, self.retries, path, params, exc,
                )
                if attempt < self.retries - 1:
                    time.sleep(self.backoff * 2 ** attempt)
        else:
            raise FetchError(f"GET {path} failed after {self.retries} attempts: {last_exc}", path)

        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponseError(f"GET {path} returned a non-JSON body", path) from exc

    def fetch_semester_data(self, department: str, regulation: str) -> SemesterMap:
        path = "/courses/semester"
        payload = self._get(path, {"department": department, "regulation": regulation})
        return parse_course_map(payload, path)

    def fetch_category_data(self, department: str, regulation: str) -> CategoryMap:
        path = "/courses/category"
        payload = self._get(path, {"department": department, "regulation": regulation})
        return parse_course_map(payload, path)

    def fetch_all_regulations_category_data(self, department: str) -> RegulationCategorySnapshot:
        path = "/courses/category/all"
        payload = self._get(path, {"department": department})
        return parse_snapshot(payload, path)
