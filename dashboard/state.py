"""
Selection state machine for the dashboard.

The whole view state is one immutable ViewState record. Each user action is
a transition function that takes the current state and returns a Transition:
the next state plus the list of fetches that action requires. Nothing is
fetched here; the caller runs the requests (see resolve) and folds each
outcome back in with apply_result / apply_failure.

    select_department(d)   d empty  → clear all data, no fetch
                           d set    → all-regulations fetch, plus category +
                                      semester fetches for the current regulation
    select_regulation(r)   department set → category + semester fetches
    set_view_mode(m)       never fetches

Every request carries a generation number. A slot only accepts the outcome
of the request it is currently waiting for, so a slow response for an
earlier selection can never overwrite data for the current one.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from dashboard.config import DEFAULT_REGULATION, DEPARTMENT_NAMES, REGULATIONS
from dashboard.fetcher import DataFetcher, FetchError, MalformedResponseError

log = logging.getLogger(__name__)


class ViewMode(str, Enum):
    CHART = "chart"
    TABLE = "table"


class Slot(str, Enum):
    SEMESTER        = "semester"
    CATEGORY        = "category"
    ALL_REGULATIONS = "all_regulations"


@dataclass(frozen=True)
class FetchRequest:
    slot: Slot
    department: str
    regulation: str | None
    generation: int


@dataclass(frozen=True)
class ViewState:
    department: str | None = None
    regulation: str = DEFAULT_REGULATION
    view_mode: ViewMode = ViewMode.CHART
    semester_data: Mapping[str, list[Any]] = field(default_factory=dict)
    category_data: Mapping[str, list[Any]] = field(default_factory=dict)
    all_regulations_data: Mapping[str, Mapping[str, list[Any]]] = field(default_factory=dict)
    generation: int = 0
    pending: Mapping[Slot, int] = field(default_factory=dict)
    last_error: str | None = None

    @property
    def regulation_selector_visible(self) -> bool:
        return self.view_mode is ViewMode.TABLE

    @property
    def is_loading(self) -> bool:
        return bool(self.pending)


@dataclass(frozen=True)
class Transition:
    state: ViewState
    requests: list[FetchRequest]


_SLOT_FIELD = {
    Slot.SEMESTER:        "semester_data",
    Slot.CATEGORY:        "category_data",
    Slot.ALL_REGULATIONS: "all_regulations_data",
}


def _issue(state: ViewState, wanted: Iterable[tuple[Slot, str | None]]) -> Transition:
    """Stamp one request per (slot, regulation) and mark each slot as pending."""
    assert state.department, "fetches need a department"
    generation = state.generation
    pending = dict(state.pending)
    requests = []
    for slot, regulation in wanted:
        generation += 1
        pending[slot] = generation
        requests.append(FetchRequest(slot, state.department, regulation, generation))
    log.debug("Issuing %s", ", ".join(f"{r.slot.value}#{r.generation}" for r in requests))
    return Transition(replace(state, generation=generation, pending=pending), requests)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def select_department(state: ViewState, department: str | None) -> Transition:
    department = department or None
    if department is not None and department not in DEPARTMENT_NAMES:
        raise ValueError(f"Unknown department: {department!r}")

    if department is None:
        # In-flight requests become stale once pending is dropped.
        cleared = replace(
            state,
            department=None,
            semester_data={},
            category_data={},
            all_regulations_data={},
            pending={},
            last_error=None,
        )
        log.debug("Department cleared")
        return Transition(cleared, [])

    selected = replace(state, department=department, last_error=None)
    wanted: list[tuple[Slot, str | None]] = [(Slot.ALL_REGULATIONS, None)]
    if selected.regulation:
        wanted += [(Slot.SEMESTER, selected.regulation), (Slot.CATEGORY, selected.regulation)]
    return _issue(selected, wanted)


def select_regulation(state: ViewState, regulation: str) -> Transition:
    if regulation not in REGULATIONS:
        raise ValueError(f"Unknown regulation: {regulation!r}")

    selected = replace(state, regulation=regulation, last_error=None)
    if not selected.department:
        return Transition(selected, [])
    # The all-regulations snapshot is department-scoped and already covers r.
    return _issue(selected, [(Slot.SEMESTER, regulation), (Slot.CATEGORY, regulation)])


def set_view_mode(state: ViewState, mode: ViewMode | str) -> Transition:
    try:
        mode = ViewMode(mode)
    except ValueError:
        raise ValueError(f"Unknown view mode: {mode!r}") from None
    return Transition(replace(state, view_mode=mode), [])


# ---------------------------------------------------------------------------
# Fetch outcomes
# ---------------------------------------------------------------------------

def _is_current(state: ViewState, request: FetchRequest) -> bool:
    if state.pending.get(request.slot) == request.generation:
        return True
    log.info(
        "Discarding stale %s result #%d for %s",
        request.slot.value, request.generation, request.department,
    )
    return False


def _settle(state: ViewState, request: FetchRequest, value: Mapping, **changes: Any) -> ViewState:
    pending = {slot: gen for slot, gen in state.pending.items() if slot is not request.slot}
    return replace(state, pending=pending, **{_SLOT_FIELD[request.slot]: value}, **changes)


def apply_result(state: ViewState, request: FetchRequest, payload: Mapping) -> ViewState:
    """Store a fetched mapping in its slot, replacing whatever was there."""
    if not _is_current(state, request):
        return state
    return _settle(state, request, dict(payload))


def apply_failure(state: ViewState, request: FetchRequest, error: Exception) -> ViewState:
    """Empty the request's slot so stale data is never shown as current."""
    if not _is_current(state, request):
        return state
    log.warning(
        "Fetch %s for %s/%s failed, showing no data: %s",
        request.slot.value, request.department, request.regulation, error,
    )
    if isinstance(error, MalformedResponseError):
        message = "The course service returned data in an unexpected format."
    else:
        message = "The course service is unavailable right now."
    return _settle(state, request, {}, last_error=message)


def run_request(fetcher: DataFetcher, request: FetchRequest) -> Mapping:
    if request.slot is Slot.ALL_REGULATIONS:
        return fetcher.fetch_all_regulations_category_data(request.department)
    if request.slot is Slot.CATEGORY:
        return fetcher.fetch_category_data(request.department, request.regulation)
    return fetcher.fetch_semester_data(request.department, request.regulation)


def resolve(state: ViewState, requests: Iterable[FetchRequest], fetcher: DataFetcher) -> ViewState:
    """Run each request in order, folding results and failures into the state."""
    for request in requests:
        try:
            payload = run_request(fetcher, request)
        except FetchError as exc:
            state = apply_failure(state, request, exc)
        else:
            state = apply_result(state, request, payload)
    return state
