"""Streamlit UI for the Knowledge Debugger."""

from __future__ import annotations

import sys
import time
from pathlib import Path

import altair as alt
import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from knowledge_debugger.config import settings
from knowledge_debugger.models import FinalReport
from knowledge_debugger.services.llm import LLMService
from knowledge_debugger.services.report_store import ReportStore, summarize_reports
from knowledge_debugger.services.video import VideoInfoClient
from knowledge_debugger.session import AssessmentSession
from knowledge_debugger.ui_utils import (
    STATUS_LABELS,
    breakdown_chart_data,
    confidence_label,
    domain_card,
    domain_rows,
    store_next_question,
)

REPORT_STORE = ReportStore(ROOT_DIR / settings.REPORTS_PATH)


def init_state() -> None:
    """Initialize Streamlit session state keys."""
    st.session_state.setdefault("assessment", None)
    st.session_state.setdefault("question", None)
    st.session_state.setdefault("question_started", 0.0)
    st.session_state.setdefault("feedback", None)
    st.session_state.setdefault("error", None)
    st.session_state.setdefault("report", None)


def reset_state() -> None:
    for key in ("assessment", "question", "feedback", "error", "report"):
        st.session_state[key] = None


@st.cache_resource
def get_llm() -> LLMService:
    return LLMService(video=VideoInfoClient())


def load_next_question(session: AssessmentSession, index: int) -> bool:
    """Generate the next question for the active domain and start its clock."""
    record = session.record(index)
    with st.spinner("Generating new question..."):
        return store_next_question(
            st.session_state,
            lambda: get_llm().generate_question(
                record.domain_name,
                session.question_difficulty(index),
                record.knowledge_gaps,
                session.video_url,
            ),
        )


def render_start() -> None:
    st.subheader("Start an assessment")
    video_url = st.text_input("YouTube video URL", placeholder="https://www.youtube.com/watch?v=...")
    if st.button("Start assessment", disabled=not video_url.strip()):
        try:
            with st.spinner("Analyzing video and creating assessment..."):
                main_topic, domains = get_llm().generate_initial_assessment(video_url.strip())
        except RuntimeError as exc:
            st.error(f"Failed to start assessment: {exc}")
            return
        st.session_state["assessment"] = AssessmentSession(video_url.strip(), main_topic, domains)
        st.rerun()


def render_domain_list(session: AssessmentSession) -> None:
    st.subheader(f"Knowledge Domains: {session.main_topic}")
    for index, (domain, record) in enumerate(zip(session.domains, session.records())):
        with st.container(border=True):
            st.markdown(domain_card(domain, record))
            st.progress(int(record.progress))
            if session.can_start(index) and st.button("Start", key=f"start_{index}"):
                session.start_domain(index)
                load_next_question(session, index)
                st.rerun()


def render_question(session: AssessmentSession) -> None:
    index = session.current_domain_index
    question = st.session_state["question"]

    feedback = st.session_state.get("feedback")
    if feedback:
        (st.success if feedback["correct"] else st.error)(feedback["text"])
    if st.session_state.get("error"):
        st.error(st.session_state["error"])

    if index is None:
        if session.is_complete:
            st.info("All domains finished. Generate your report.")
            if st.button("Generate report", type="primary"):
                try:
                    with st.spinner("Generating final report..."):
                        report = get_llm().generate_report(
                            session.main_topic,
                            session.completed_records(),
                            session.elapsed_ms(),
                            session.video_url,
                        )
                except RuntimeError as exc:
                    st.error(f"Failed to generate summary: {exc}")
                    return
                REPORT_STORE.append(report, session.video_url)
                st.session_state["report"] = report
                st.rerun()
        else:
            st.info("Pick the next available domain to continue.")
        return

    if question is None:
        st.warning("No question loaded.")
        if st.button("Retry question generation"):
            load_next_question(session, index)
            st.rerun()
        return

    st.markdown(f"### {question.question}")
    choice = st.radio(
        "Options",
        list(range(len(question.options))),
        format_func=lambda i: question.options[i],
        index=None,
        key=f"choice_{session.total_questions}",
    )
    confidence = st.slider(
        "How confident are you in your answer?", 1, 100, 50, key=f"conf_{session.total_questions}"
    )
    st.caption(confidence_label(confidence / 100))

    if st.button("Submit answer", type="primary", disabled=choice is None):
        response_time = max(time.monotonic() - st.session_state["question_started"], 0.001)
        record = session.submit_answer(question, choice, confidence / 100, response_time)
        correct = choice == question.correct_answer_index
        st.session_state["feedback"] = {
            "correct": correct,
            "text": f"{'Correct!' if correct else 'Incorrect.'} {question.explanation}",
        }
        st.session_state["question"] = None
        if session.current_domain_index is not None:
            load_next_question(session, index)
        elif record.status.is_terminal:
            st.session_state["feedback"]["text"] += (
                f" Domain finished: {STATUS_LABELS[record.status]}"
            )
        st.rerun()


def render_assessment(session: AssessmentSession) -> None:
    left, right = st.columns([1, 2], gap="large")
    with left:
        render_domain_list(session)
    with right:
        render_question(session)
    with st.expander("Session details"):
        st.dataframe(domain_rows(session.snapshot()), hide_index=True, use_container_width=True)


def render_summary(report: FinalReport) -> None:
    st.subheader(report.title)
    cols = st.columns(3)
    cols[0].metric("Overall score", f"{report.overall_score:.1f}%")
    cols[1].metric("Knowledge level", report.knowledge_level.value)
    cols[2].metric("Time", f"{report.total_time_minutes:.1f} min")

    chart_data = breakdown_chart_data(report)
    if chart_data:
        chart = (
            alt.Chart(alt.Data(values=chart_data))
            .mark_bar()
            .encode(
                x=alt.X("score:Q", title="Score", scale=alt.Scale(domain=[0, 100])),
                y=alt.Y("domain:N", title="Domain", sort="-x"),
                color=alt.Color("status:N", title="Status"),
                tooltip=["domain:N", "score:Q", "status:N"],
            )
        )
        st.altair_chart(chart, use_container_width=True)

    strengths, gaps = st.columns(2)
    with strengths:
        st.markdown("**Strengths**")
        for item in report.strengths:
            st.markdown(f"- {item}")
    with gaps:
        st.markdown("**Areas for improvement**")
        for item in report.areas_for_improvement:
            st.markdown(f"- {item}")

    st.markdown("**Recommendations**")
    for item in report.recommendations:
        st.markdown(f"- {item}")

    for name, item in report.detailed_breakdown.items():
        with st.expander(f"{name}: {item.score:.0f}% ({item.status})"):
            if item.key_strengths:
                st.markdown("Strengths: " + ", ".join(item.key_strengths))
            if item.improvement_areas:
                st.markdown("Improve: " + ", ".join(item.improvement_areas))

    if st.button("Start a new assessment"):
        reset_state()
        st.rerun()


st.set_page_config(page_title="Knowledge Debugger", layout="wide")
init_state()

st.title("The Knowledge Debugger")
st.caption("Adaptive assessment of what you learned from a YouTube video.")

with st.sidebar:
    st.subheader("Configuration")
    st.write(f"Model: `{settings.OPENAI_MODEL}`")
    if get_llm().use_mock:
        st.warning("OPENAI_API_KEY not set. Using mock data.")
    st.write(f"Correct answers per domain: {settings.REQUIRED_QUESTIONS}")

    st.subheader("Past reports")
    summary = summarize_reports(REPORT_STORE.load())
    if summary["rows"]:
        st.dataframe(summary["rows"], hide_index=True, use_container_width=True)
        if summary["stats"]:
            st.caption(
                f"Best {summary['stats']['best']:.1f}% · "
                f"avg {summary['stats']['avg']:.1f}% · "
                f"trend {summary['stats']['trend']:+.1f}"
            )
    else:
        st.info("No reports yet.")

if st.session_state["report"] is not None:
    render_summary(st.session_state["report"])
elif st.session_state["assessment"] is not None:
    render_assessment(st.session_state["assessment"])
else:
    render_start()
