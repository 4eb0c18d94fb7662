"""
Render helpers for the Streamlit dashboard.

Turns aggregation output into things Streamlit can draw: Altair pie charts
for the chart view, plain row dicts for st.dataframe in the table view.
Percentages are only rounded here, to three decimals, for display.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any

import altair as alt

from dashboard.aggregation import RegulationPanel, course_counts, percentages_of
from dashboard.taxonomy import TAXONOMY, Taxonomy

# One colour per taxonomy category, in taxonomy order.
CATEGORY_COLOURS = (
    "#FF6384", "#36A2EB", "#FFCE56", "#4BC0C0",
    "#9966FF", "#FF9F40", "#C9CBCF", "#8BC34A",
)
HIGHLIGHT_COLOUR = "#007bff"


def format_percentage(value: float) -> str | None:
    """'33.333%' for a positive share; None so empty slices stay unlabelled."""
    return f"{value:.3f}%" if value > 0 else None


def pie_rows(percentages: Sequence[float], taxonomy: Taxonomy = TAXONOMY) -> list[dict[str, Any]]:
    return [
        {
            "category": label,
            "share": value,
            "label": format_percentage(value) or "",
        }
        for (_, label), value in zip(taxonomy.labels(), percentages)
    ]


def pie_chart(panel: RegulationPanel, taxonomy: Taxonomy = TAXONOMY, size: int = 320) -> alt.LayerChart:
    """Pie chart of one regulation's category distribution."""
    data = alt.Data(values=pie_rows(panel.percentages, taxonomy))
    base = alt.Chart(data).encode(
        theta=alt.Theta("share:Q", stack=True),
        color=alt.Color(
            "category:N",
            sort=list(taxonomy.display_names()),
            scale=alt.Scale(domain=list(taxonomy.display_names()), range=list(CATEGORY_COLOURS)),
            legend=alt.Legend(title=None, orient="top", columns=2, labelLimit=320),
        ),
        tooltip=[alt.Tooltip("category:N"), alt.Tooltip("share:Q", format=".3f")],
    )
    arcs = base.mark_arc(
        outerRadius=size // 2 - 10,
        stroke=HIGHLIGHT_COLOUR if panel.highlighted else "#ffffff",
        strokeWidth=2 if panel.highlighted else 1,
    )
    text = base.mark_text(radius=size // 2 + 15, fontWeight="bold").encode(text="label:N")
    return (arcs + text).properties(title=panel.regulation, width=size, height=size)


# ---------------------------------------------------------------------------
# Table view
# ---------------------------------------------------------------------------

def _semester_key(semester: str) -> tuple[int, int, str]:
    """Natural order: 'Semester 2' before 'Semester 10'; non-numeric keys last."""
    match = re.search(r"\d+", semester)
    if match:
        return (0, int(match.group()), semester)
    return (1, 0, semester)


def _category_label(code: Any, taxonomy: Taxonomy) -> str:
    if code in taxonomy:
        return taxonomy.label_for(code)
    return str(code or "")


def semester_rows(semester_map: Mapping[str, Sequence[Any]], taxonomy: Taxonomy = TAXONOMY) -> list[dict[str, Any]]:
    """One row per course, semesters in natural order, courses in payload order."""
    rows = []
    for semester in sorted(semester_map, key=_semester_key):
        for course in semester_map[semester] or []:
            c = course if isinstance(course, Mapping) else {}
            rows.append({
                "Semester": semester,
                "Code": str(c.get("course_code", "")),
                "Title": str(c.get("course_title", "")),
                "Category": _category_label(c.get("category"), taxonomy),
                "Credits": c.get("credits", ""),
            })
    return rows


def category_summary(category_map: Mapping[str, Sequence[Any]], taxonomy: Taxonomy = TAXONOMY) -> list[dict[str, Any]]:
    """Per-category course count and share, in taxonomy order."""
    counts = course_counts(category_map, taxonomy)
    shares = percentages_of(category_map, taxonomy)
    return [
        {
            "Category": label,
            "Courses": count,
            "Share": f"{share:.3f}%",
        }
        for (_, label), count, share in zip(taxonomy.labels(), counts, shares)
    ]
