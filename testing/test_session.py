"""Tests for session-level orchestration of domains."""

import pytest

from knowledge_debugger.models import AssessmentDomain, DomainStatus, Question
from knowledge_debugger.session import AssessmentSession


def make_domains(*difficulties):
    return [
        AssessmentDomain(domain_name=f"Domain {i}", description="d", estimated_difficulty=diff)
        for i, diff in enumerate(difficulties, 1)
    ]


def make_question(tag="tag", correct_index=2):
    return Question(
        question="What is the answer?",
        options=["a", "b", "c", "d"],
        correct_answer_index=correct_index,
        knowledge_tag=tag,
        explanation="Because.",
        difficulty_level=50,
        estimated_time=30,
    )


def make_session(*difficulties):
    return AssessmentSession(
        "https://youtu.be/abc", "Topic", make_domains(*(difficulties or (30, 60))), start_time=1_000
    )


def test_new_session_has_all_domains_not_started():
    session = make_session()

    records = session.records()
    assert [r.status for r in records] == [DomainStatus.NOT_STARTED] * 2
    assert [r.current_difficulty for r in records] == [30, 60]
    assert session.current_domain_index is None
    assert session.total_questions == 0


def test_missing_estimated_difficulty_uses_default():
    session = make_session(0, 70)

    assert session.record(0).current_difficulty == 50


def test_domains_unlock_in_order():
    session = make_session()

    assert session.can_start(0)
    assert not session.can_start(1)
    with pytest.raises(ValueError):
        session.start_domain(1)


def test_only_one_domain_active_at_a_time():
    session = make_session(30, 60, 80)
    session.start_domain(0)

    assert not session.can_start(0)
    with pytest.raises(ValueError):
        session.start_domain(0)


def test_start_domain_creates_engine_from_domain_difficulty():
    session = make_session()

    assert session.difficulty_state(0) is None
    record = session.start_domain(0)

    assert record.status is DomainStatus.IN_PROGRESS
    assert session.current_domain_index == 0
    assert session.difficulty_state(0).current_difficulty == 30


def test_submit_answer_updates_engine_tracker_and_totals():
    session = make_session()
    session.start_domain(0)

    record = session.submit_answer(make_question(tag="loops"), 2, 0.9, 10.0)

    assert record.questions_attempted == 1
    assert record.questions_correct == 1
    assert record.mastery_areas == ["loops"]
    assert record.current_difficulty == pytest.approx(40.8)
    assert session.difficulty_state(0).consecutive_correct == 1
    assert session.total_questions == 1
    assert session.total_correct == 1
    assert session.question_difficulty(0) == 41


def test_wrong_answer_is_recorded_as_gap():
    session = make_session()
    session.start_domain(0)

    record = session.submit_answer(make_question(tag="recursion"), 0, 0.2, 40.0)

    assert record.knowledge_gaps == ["recursion"]
    assert record.response_history[0].user_answer_index == 0
    assert session.total_correct == 0


def test_finishing_a_domain_unlocks_the_next():
    session = make_session()
    session.start_domain(0)

    for _ in range(5):
        record = session.submit_answer(make_question(), 2, 0.8, 10.0)

    assert record.status is DomainStatus.MASTERED
    assert session.current_domain_index is None
    assert session.can_start(1)
    assert [r.domain_name for r in session.completed_records()] == ["Domain 1"]
    assert not session.is_complete


def test_totals_match_domain_counts():
    session = make_session()
    outcomes = {0: [2, 0, 2, 2, 1, 2, 2], 1: [0, 0, 2, 2, 2, 2, 0, 2]}

    for index, answers in outcomes.items():
        session.start_domain(index)
        for answer in answers:
            session.submit_answer(make_question(), answer, 0.5, 20.0)

    records = session.records()
    assert session.total_questions == sum(r.questions_attempted for r in records)
    assert session.total_correct == sum(r.questions_correct for r in records)
    assert session.is_complete
    assert session.overall_accuracy == pytest.approx(10 / 15)


def test_submit_without_active_domain_is_rejected():
    session = make_session()

    with pytest.raises(ValueError):
        session.submit_answer(make_question(), 2, 0.5, 10.0)


def test_answer_index_out_of_range_is_rejected():
    session = make_session()
    session.start_domain(0)

    with pytest.raises(ValueError):
        session.submit_answer(make_question(), 4, 0.5, 10.0)
    assert session.total_questions == 0


def test_invalid_confidence_does_not_touch_state():
    session = make_session()
    session.start_domain(0)

    with pytest.raises(ValueError):
        session.submit_answer(make_question(), 2, 1.2, 10.0)
    assert session.total_questions == 0
    assert session.difficulty_state(0).recent_outcomes == []


def test_domains_do_not_share_state():
    session = make_session()
    session.start_domain(0)
    for _ in range(5):
        session.submit_answer(make_question(tag="first"), 2, 0.9, 5.0)
    session.start_domain(1)

    assert session.difficulty_state(1).recent_outcomes == []
    assert session.record(1).mastery_areas == []
    assert session.record(1).current_difficulty == 60


def test_elapsed_and_snapshot():
    session = make_session()
    session.start_domain(0)

    snapshot = session.snapshot()

    assert session.elapsed_ms(now_ms=61_000) == 60_000
    assert snapshot.main_topic == "Topic"
    assert snapshot.current_domain_index == 0
    assert [d.domain_name for d in snapshot.domain_list] == ["Domain 1", "Domain 2"]
    assert snapshot.domain_assessments[0].status is DomainStatus.IN_PROGRESS


def test_session_requires_unique_domains():
    with pytest.raises(ValueError):
        AssessmentSession("u", "t", [])
    with pytest.raises(ValueError):
        AssessmentSession(
            "u",
            "t",
            [AssessmentDomain(domain_name="Same"), AssessmentDomain(domain_name="Same")],
        )
