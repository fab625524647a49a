"""Tests for UI helper utilities."""

import pytest

from knowledge_debugger.models import AssessmentDomain, FinalReport, Question
from knowledge_debugger.session import AssessmentSession
from knowledge_debugger.ui_utils import (
    breakdown_chart_data,
    confidence_label,
    domain_card,
    domain_rows,
    format_report,
    store_next_question,
)


def make_report():
    return FinalReport(
        title="Knowledge Assessment Report: Widgets",
        overall_score=72.5,
        total_time_minutes=4.0,
        domains_assessed=2,
        knowledge_level="Advanced",
        strengths=["Basics"],
        areas_for_improvement=[],
        recommendations=["Rewatch the intro."],
        detailed_breakdown={
            "Basics": {"score": 90, "status": "Mastered"},
            "Advanced": {"score": 55.0, "status": "struggling", "improvement_areas": ["gears"]},
        },
    )


@pytest.mark.parametrize(
    "confidence, expected",
    [
        (0.0, "Guessing"),
        (0.2, "Guessing"),
        (0.21, "Unsure"),
        (0.5, "Somewhat Sure"),
        (0.75, "Confident"),
        (1.0, "Very Confident"),
    ],
)
def test_confidence_label_buckets(confidence, expected):
    assert confidence_label(confidence) == expected


def test_domain_rows_reflect_session_state():
    session = AssessmentSession(
        "https://youtu.be/x",
        "Widgets",
        [
            AssessmentDomain(domain_name="Basics", estimated_difficulty=20),
            AssessmentDomain(domain_name="Advanced", estimated_difficulty=70),
        ],
    )
    session.start_domain(0)
    question = Question(
        question="Q",
        options=["a", "b", "c", "d"],
        correct_answer_index=0,
        knowledge_tag="t",
        difficulty_level=20,
        estimated_time=30,
    )
    session.submit_answer(question, 0, 0.5, 20.0)

    rows = domain_rows(session.snapshot())

    assert rows[0]["Domain"] == "Basics"
    assert rows[0]["Status"] == "🔵 In Progress"
    assert rows[0]["Progress"] == 20
    assert rows[0]["Accuracy"] == "100%"
    assert rows[1]["Status"] == "⚪ Not Started"
    assert rows[1]["Accuracy"] == "—"
    assert rows[1]["Difficulty"] == 70


def test_breakdown_chart_data_lowercases_status():
    data = breakdown_chart_data(make_report())

    assert data == [
        {"domain": "Basics", "score": 90.0, "status": "mastered"},
        {"domain": "Advanced", "score": 55.0, "status": "struggling"},
    ]


def test_format_report_lists_sections():
    lines = format_report(make_report())

    assert lines[0] == "Knowledge Assessment Report: Widgets"
    assert lines[1] == "Overall score: 72.5% (Advanced)"
    assert "Strengths:" in lines
    assert "Areas for improvement:" not in lines
    assert "  - Rewatch the intro." in lines
    assert lines[-1] == "[Advanced] 55% struggling"


def test_domain_card_shows_description_and_difficulty():
    domain = AssessmentDomain(
        domain_name="Gears", description="How gears mesh.", estimated_difficulty=63.6
    )
    session = AssessmentSession("https://youtu.be/x", "Widgets", [domain])

    card = domain_card(domain, session.record(0))

    assert card.splitlines()[0] == "**Gears**  "
    assert "How gears mesh." in card
    assert "⚪ Not Started" in card
    assert "`Diff: 64`" in card


def test_domain_card_without_description():
    domain = AssessmentDomain(domain_name="Gears", estimated_difficulty=40)
    session = AssessmentSession("https://youtu.be/x", "Widgets", [domain])

    card = domain_card(domain, session.record(0))

    assert card == "**Gears**  \n⚪ Not Started | `Diff: 40`"


def test_store_next_question_keeps_failure_text():
    state = {"question": "stale", "error": None}

    def failing():
        raise RuntimeError("Received malformed question data from AI.")

    assert store_next_question(state, failing) is False
    assert state["question"] is None
    assert state["error"] == "Failed to generate question: Received malformed question data from AI."


def test_store_next_question_clears_previous_error():
    question = Question(
        question="Q",
        options=["a", "b", "c", "d"],
        correct_answer_index=0,
        knowledge_tag="t",
        difficulty_level=20,
        estimated_time=30,
    )
    state = {"question": None, "error": "Failed to generate question: boom"}

    assert store_next_question(state, lambda: question) is True
    assert state["question"] is question
    assert state["error"] is None
    assert state["question_started"] > 0
