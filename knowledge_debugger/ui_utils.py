"""Display helpers shared by the terminal runner and the Streamlit UI."""

from __future__ import annotations

import time
from typing import Callable, MutableMapping

from knowledge_debugger.models import (
    AssessmentDomain,
    DomainRecord,
    DomainStatus,
    FinalReport,
    Question,
    SessionSnapshot,
)

CONFIDENCE_LABELS = ("Guessing", "Unsure", "Somewhat Sure", "Confident", "Very Confident")

STATUS_LABELS = {
    DomainStatus.NOT_STARTED: "⚪ Not Started",
    DomainStatus.IN_PROGRESS: "🔵 In Progress",
    DomainStatus.COMPLETED: "🟡 Completed",
    DomainStatus.MASTERED: "⭐ Mastered",
    DomainStatus.STRUGGLING: "🔴 Struggling",
}


def confidence_label(confidence: float) -> str:
    """Bucket a confidence in [0, 1] into one of five labels."""
    percent = round(confidence * 100)
    idx = max(0, min(len(CONFIDENCE_LABELS) - 1, (percent - 1) // 20))
    return CONFIDENCE_LABELS[idx]


def domain_rows(snapshot: SessionSnapshot) -> list[dict[str, object]]:
    """One table row per domain."""
    rows: list[dict[str, object]] = []
    for idx, record in enumerate(snapshot.domain_assessments):
        rows.append(
            {
                "#": idx + 1,
                "Domain": record.domain_name,
                "Status": STATUS_LABELS[record.status],
                "Progress": round(record.progress),
                "Accuracy": (
                    f"{record.accuracy:.0%}" if record.questions_attempted else "—"
                ),
                "Difficulty": round(record.current_difficulty),
            }
        )
    return rows


def domain_card(domain: AssessmentDomain, record: DomainRecord) -> str:
    """Markdown for a domain card: name, description, status and difficulty badge."""
    lines = [f"**{record.domain_name}**"]
    if domain.description:
        lines.append(domain.description)
    lines.append(
        f"{STATUS_LABELS[record.status]} | `Diff: {round(record.current_difficulty)}`"
    )
    return "  \n".join(lines)


def breakdown_chart_data(report: FinalReport) -> list[dict[str, object]]:
    """Per-domain scores for charting."""
    return [
        {"domain": name, "score": float(item.score), "status": item.status.lower()}
        for name, item in report.detailed_breakdown.items()
    ]


def format_report(report: FinalReport) -> list[str]:
    """Plain-text rendering of a report, one line per entry."""
    lines = [
        report.title,
        f"Overall score: {report.overall_score:.1f}% ({report.knowledge_level.value})",
        f"Domains assessed: {report.domains_assessed} in {report.total_time_minutes:.1f} min",
    ]
    for heading, items in (
        ("Strengths", report.strengths),
        ("Areas for improvement", report.areas_for_improvement),
        ("Recommendations", report.recommendations),
    ):
        if items:
            lines.append(f"{heading}:")
            lines.extend(f"  - {item}" for item in items)
    for name, item in report.detailed_breakdown.items():
        lines.append(f"[{name}] {item.score:.0f}% {item.status}")
    return lines


def store_next_question(
    state: MutableMapping[str, object], generate: Callable[[], Question]
) -> bool:
    """Put a freshly generated question into UI state and start its clock.

    A failed generation leaves no question and keeps the error text in
    ``state["error"]`` so it is still shown after the page reruns.
    """
    try:
        question = generate()
    except RuntimeError as exc:
        state["question"] = None
        state["error"] = f"Failed to generate question: {exc}"
        return False
    state["question"] = question
    state["question_started"] = time.monotonic()
    state["error"] = None
    return True
