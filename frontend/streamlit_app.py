"""
Streamlit frontend for the department course dashboard.

    streamlit run frontend/streamlit_app.py

Pick a department to see one pie chart per regulation showing how its
courses split across the eight categories. Switch to the table view to pick
a regulation and see its courses by semester.

The course API must be running (python api/app.py); COURSE_API_URL points
the dashboard elsewhere.
"""

import logging
import sys
from pathlib import Path

import streamlit as st

# Ensure project root is on sys.path when launched via `streamlit run`
sys.path.insert(0, str(Path(__file__).parent.parent))

from dashboard.aggregation import regulation_panels
from dashboard.config import DEPARTMENT_NAMES, REGULATIONS
from dashboard.fetcher import CourseApiClient
from dashboard.state import (
    ViewMode,
    ViewState,
    resolve,
    select_department,
    select_regulation,
    set_view_mode,
)
from frontend.ui import category_summary, pie_chart, semester_rows

logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(message)s")

NO_DEPARTMENT = "Select a Department"

st.set_page_config(page_title="Department Courses Overview", layout="wide")
st.title("Department Courses Overview")


@st.cache_resource
def _client() -> CourseApiClient:
    return CourseApiClient()


if "view" not in st.session_state:
    st.session_state.view = ViewState()


def _apply(transition) -> None:
    st.session_state.view = resolve(transition.state, transition.requests, _client())


def _on_department() -> None:
    choice = st.session_state.department_choice
    _apply(select_department(st.session_state.view, None if choice == NO_DEPARTMENT else choice))


def _on_regulation() -> None:
    _apply(select_regulation(st.session_state.view, st.session_state.regulation_choice))


def _on_view(mode: ViewMode) -> None:
    _apply(set_view_mode(st.session_state.view, mode))


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------

view: ViewState = st.session_state.view
cols = st.columns(4)

with cols[0]:
    st.selectbox(
        "Department",
        (NO_DEPARTMENT, *DEPARTMENT_NAMES),
        index=(DEPARTMENT_NAMES.index(view.department) + 1) if view.department else 0,
        key="department_choice",
        on_change=_on_department,
        label_visibility="collapsed",
    )

with cols[1]:
    if view.regulation_selector_visible:
        st.selectbox(
            "Regulation",
            REGULATIONS,
            index=REGULATIONS.index(view.regulation),
            key="regulation_choice",
            on_change=_on_regulation,
            label_visibility="collapsed",
        )

with cols[2]:
    st.button(
        "View Chart",
        disabled=view.view_mode is ViewMode.CHART,
        on_click=_on_view,
        args=(ViewMode.CHART,),
        use_container_width=True,
    )

with cols[3]:
    st.button(
        "View Table",
        disabled=view.view_mode is ViewMode.TABLE,
        on_click=_on_view,
        args=(ViewMode.TABLE,),
        use_container_width=True,
    )

view = st.session_state.view
if view.last_error:
    st.warning(view.last_error)


# ---------------------------------------------------------------------------
# Chart view
# ---------------------------------------------------------------------------

if view.view_mode is ViewMode.CHART:
    if not view.department:
        st.info("Please select a department to view the chart.")
    else:
        panels = regulation_panels(view.all_regulations_data, view.regulation)
        if not panels:
            st.info(f"No course data for {view.department}.")
        grid = st.columns(2)
        for i, panel in enumerate(panels):
            with grid[i % 2]:
                st.altair_chart(pie_chart(panel), use_container_width=True)


# ---------------------------------------------------------------------------
# Table view
# ---------------------------------------------------------------------------

if view.view_mode is ViewMode.TABLE:
    if not view.department:
        st.info("Please select a department to view the table.")
    else:
        st.subheader(f"{view.department} — {view.regulation}")
        rows = semester_rows(view.semester_data)
        if rows:
            st.dataframe(rows, use_container_width=True, hide_index=True)
        else:
            st.info("No courses returned for this regulation.")

        st.subheader("Category distribution")
        st.dataframe(category_summary(view.category_data), use_container_width=True, hide_index=True)
