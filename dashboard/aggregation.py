"""
Category aggregation: course lists → percentage distributions.

A category map is {category_code: [course, ...]} for one department and
regulation. Only the number of courses per category matters here; the course
objects themselves are never inspected.

    total      = Σ len(map[c]) for c in taxonomy        (unknown codes excluded)
    percent[c] = len(map[c]) / total * 100               (taxonomy order)

A total of zero yields a vector of zeros, meaning "no data". Nothing is
rounded; three-decimal formatting is left to the renderer.

Public API:
    percentages_of(category_map)                   → list[float]
    is_empty(category_map)                          → bool
    regulation_panels(snapshot, selected)           → list[RegulationPanel]
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from dashboard.config import REGULATIONS
from dashboard.taxonomy import TAXONOMY, Taxonomy

CategoryMap = Mapping[str, Sequence[Any] | None]
RegulationCategorySnapshot = Mapping[str, CategoryMap]


def _count(category_map: CategoryMap, code: str) -> int:
    # Missing keys and null lists both count as empty.
    courses = category_map.get(code)
    return len(courses) if courses else 0


def course_counts(category_map: CategoryMap, taxonomy: Taxonomy = TAXONOMY) -> list[int]:
    """Number of courses per taxonomy category, in taxonomy order."""
    return [_count(category_map, code) for code in taxonomy.codes()]


def percentages_of(category_map: CategoryMap, taxonomy: Taxonomy = TAXONOMY) -> list[float]:
    """
    Share of courses in each taxonomy category, as percentages.

    Output length and order always follow the taxonomy, whatever keys the
    input has. Categories outside the taxonomy count towards nothing.
    """
    counts = course_counts(category_map, taxonomy)
    total = sum(counts)
    if total == 0:
        return [0.0] * len(taxonomy)
    return [count / total * 100 for count in counts]


def is_empty(category_map: CategoryMap, taxonomy: Taxonomy = TAXONOMY) -> bool:
    """True when no taxonomy category has any course."""
    return not any(course_counts(category_map, taxonomy))


# ---------------------------------------------------------------------------
# Chart view
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RegulationPanel:
    regulation: str
    percentages: list[float]
    highlighted: bool


def _regulation_order(snapshot: RegulationCategorySnapshot) -> list[str]:
    """Configured regulations oldest first, then any unknown codes in payload order."""
    known = [r for r in REGULATIONS if r in snapshot]
    extra = [r for r in snapshot if r not in REGULATIONS]
    return known + extra


def regulation_panels(
    snapshot: RegulationCategorySnapshot,
    selected_regulation: str | None = None,
    taxonomy: Taxonomy = TAXONOMY,
) -> list[RegulationPanel]:
    """
    One chart panel per regulation that has data.

    Regulations whose category map is empty are dropped so the renderer never
    receives a blank panel. The selected regulation's panel is highlighted.
    """
    panels = []
    for regulation in _regulation_order(snapshot):
        category_map = snapshot[regulation] or {}
        if is_empty(category_map, taxonomy):
            continue
        panels.append(
            RegulationPanel(
                regulation=regulation,
                percentages=percentages_of(category_map, taxonomy),
                highlighted=(regulation == selected_regulation),
            )
        )
    return panels
