import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from evalboard.data import RECORD_COLUMNS, load_dashboard_data
from evalboard.filters import ALL, SCORE_RANGE_OPTIONS
from evalboard.views import PAGE_VIEWS, Dashboard


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(filters: Dict[str, str]) -> str:
    chips = [
        f"College: {filters['college']}",
        f"Semester: {filters['semester']}",
        f"Curriculum: {filters['curriculum']}",
        f"Content score: {filters['score_range']}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, filter_summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>Home / {title}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def render_table(table: Dict[str, Any], columns: Optional[List[str]] = None):
    if table["placeholder"]:
        st.info(table["placeholder"])
        return
    df = pd.DataFrame(table["rows"])
    if columns:
        df = df[[c for c in columns if c in df.columns]]
    st.dataframe(df, hide_index=True, use_container_width=True)


def render_chart(charts: Dict[str, Any], name: str, empty_message: str = "Not enough data for this chart."):
    spec = charts.get(name)
    if not spec:
        st.info(empty_message)
        return
    st.vega_lite_chart(spec, use_container_width=True)


def render_summary(summary: Dict[str, str]):
    cols = st.columns(4)
    cols[0].metric("Avg Content Score", summary["avg_content_score"])
    cols[1].metric("Avg Trainer Score", summary["avg_trainer_score"])
    cols[2].metric("Highest Score", summary["highest_score"])
    cols[3].metric("Lowest Score", summary["lowest_score"])


# ---------- UI setup ----------
st.set_page_config(page_title="Session Evaluation Dashboard", layout="wide")
inject_base_styles()
st.title("Session Evaluation Dashboard")
st.caption("Content and trainer scores across colleges, semesters and subjects.")

data_ctx = load_dashboard_data()
records: pd.DataFrame = data_ctx.get("records", pd.DataFrame(columns=RECORD_COLUMNS))
if records.empty:
    st.error("No session data found. Set EVALBOARD_DATA_PATH or place sessions.csv under data/.")
    st.stop()

with st.sidebar:
    st.markdown("### Navigate")
    current_page = st.radio("Navigate", list(PAGE_VIEWS), index=0)

    st.markdown("---")
    st.markdown("### Filters")
    college = st.selectbox("College", [ALL] + list(data_ctx.get("colleges", [])))
    semester = st.selectbox(
        "Semester",
        [ALL] + [str(s) for s in data_ctx.get("semesters", [])],
        format_func=lambda s: s if s == ALL else f"Semester {s}",
    )
    curriculum = st.selectbox("Curriculum", [ALL] + list(data_ctx.get("curricula", [])))
    score_range = st.selectbox("Content Score", SCORE_RANGE_OPTIONS)

    st.markdown("---")
    with st.expander("Advanced settings", expanded=False):
        max_table_rows = st.slider("Detail table rows", min_value=10, max_value=200, value=50, step=10)
        max_compare_groups = st.slider("Colleges in comparison", min_value=1, max_value=10, value=5)

filters = {
    "college": college,
    "semester": semester,
    "curriculum": curriculum,
    "score_range": score_range,
    "limits": {"max_table_rows": max_table_rows, "max_compare_groups": max_compare_groups},
}

# One dashboard (and so one set of view controllers) per page, kept across reruns
dashboards: Dict[str, Dashboard] = st.session_state.setdefault("_dashboards", {})
if current_page not in dashboards or dashboards[current_page].data_ctx is not data_ctx:
    dashboards[current_page] = Dashboard.for_page(data_ctx, current_page)
state = dashboards[current_page].update(filters)
filter_summary_html = format_filter_summary(filters)

DETAIL_COLUMNS = ["subject", "college", "semester", "content_score", "trainer_score", "curriculum"]


def render_overview_page(view: Dict[str, Any]):
    render_page_header("Overview", filter_summary_html, export_df=pd.DataFrame(view["table"]["rows"]), export_name="overview.csv")
    with card("Summary"):
        render_summary(view["summary"])
    chart_cols = st.columns(2)
    with chart_cols[0]:
        with card("College Comparison"):
            render_chart(view["charts"], "college_comparison")
    with chart_cols[1]:
        with card("Scores by Semester"):
            render_chart(view["charts"], "semester_bar")
    with card("Content Score by Subject"):
        render_chart(view["charts"], "subject_heatmap")
    with card("Priority Action Items"):
        render_table(view["action_items"], ["subject", "college", "action_items"])
    with card("Detailed Data"):
        render_table(view["table"], DETAIL_COLUMNS)


def render_colleges_page(view: Dict[str, Any]):
    render_page_header("Colleges", filter_summary_html, export_df=pd.DataFrame(view["colleges"]), export_name="colleges.csv")
    with card("Summary"):
        render_summary(view["summary"])
    with card("College Performance"):
        render_chart(view["charts"], "college_performance")
    with card("Detailed Data"):
        render_table(view["table"], DETAIL_COLUMNS)


def render_subjects_page(view: Dict[str, Any]):
    render_page_header("Subjects", filter_summary_html, export_df=pd.DataFrame(view["subjects"]), export_name="subjects.csv")
    with card("Subject Performance (by Average Content Score)"):
        render_chart(view["charts"], "subject_performance")
    with card("Detailed Data"):
        render_table(view["table"], DETAIL_COLUMNS)


def render_trainers_page(view: Dict[str, Any]):
    render_page_header("Trainers", filter_summary_html, export_df=pd.DataFrame(view["histogram"]), export_name="trainers.csv")
    with card("Number of Sessions by Trainer Score"):
        st.caption(f"{view['scored_sessions']} of {view['row_count']} sessions have a trainer score.")
        render_chart(view["charts"], "trainer_histogram")
    with card("Detailed Data"):
        render_table(view["table"], DETAIL_COLUMNS)


def render_debug_page(view: Dict[str, Any]):
    render_page_header("Data Quality", filter_summary_html)
    with card("Data Quality"):
        st.markdown("**Source files**")
        st.write(view["files"])
        st.markdown("**Row counts**")
        st.write(view["row_counts"])
        st.markdown("**Cleaning checks**")
        st.write(view["cleaning_checks"])
        if view["non_numeric_semesters"]:
            st.markdown("**Non-numeric semester values**")
            st.dataframe(pd.DataFrame(view["non_numeric_semesters"]), hide_index=True)
        st.markdown("**Sessions per college**")
        st.dataframe(pd.DataFrame(view["college_counts"]), hide_index=True)


if current_page == "Overview":
    render_overview_page(state["overview"])
elif current_page == "Colleges":
    render_colleges_page(state["colleges"])
elif current_page == "Subjects":
    render_subjects_page(state["subjects"])
elif current_page == "Trainers":
    render_trainers_page(state["trainers"])
else:
    render_debug_page(state["debug"])
