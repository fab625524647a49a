#!/usr/bin/env python3
"""Knowledge Debugger - terminal runner.

Usage:
    python -m knowledge_debugger.main --url URL                # Full assessment
    python -m knowledge_debugger.main --url URL --mock         # Offline mock generator
    python -m knowledge_debugger.main --url URL --max-domains 2
    python -m knowledge_debugger.main --url URL --no-save      # Don't store the report
"""

import argparse
import logging
import time
from typing import Callable, Optional, Tuple, TypeVar

from knowledge_debugger.config import settings
from knowledge_debugger.models import FinalReport, Question
from knowledge_debugger.services.llm import LLMService
from knowledge_debugger.services.report_store import ReportStore
from knowledge_debugger.services.video import VideoInfoClient
from knowledge_debugger.session import AssessmentSession
from knowledge_debugger.ui_utils import confidence_label, format_report

logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s: %(message)s")
log = logging.getLogger(__name__)

# (answer_index, confidence in [0, 1], response_time in seconds)
AnswerFn = Callable[[Question], Tuple[int, float, float]]


T = TypeVar("T")


def with_retry(label: str, generate: Callable[[], T]) -> T:
    """Call a generator step, retrying malformed output GENERATION_RETRIES times."""
    retries = max(0, settings.GENERATION_RETRIES)
    attempt = 0
    while True:
        try:
            return generate()
        except RuntimeError as e:
            attempt += 1
            if attempt > retries:
                raise
            log.warning(f"[{label}] Generation failed ({e}), retry {attempt}")


def generate_question_with_retry(
    llm: LLMService, session: AssessmentSession, index: int
) -> Question:
    """Ask the generator for the next question of a domain."""
    record = session.record(index)
    return with_retry(
        record.domain_name,
        lambda: llm.generate_question(
            record.domain_name,
            session.question_difficulty(index),
            record.knowledge_gaps,
            session.video_url,
        ),
    )


def run_assessment(
    llm: LLMService,
    store: Optional[ReportStore],
    video_url: str,
    answer_fn: AnswerFn,
    max_domains: int = 0,
) -> FinalReport:
    """Run a whole assessment and return the final report."""
    main_topic, domains = llm.generate_initial_assessment(video_url)
    if max_domains > 0:
        domains = domains[:max_domains]
    session = AssessmentSession(video_url, main_topic, domains)
    log.info(f"Assessment: {main_topic} ({len(domains)} domains)")

    for index, domain in enumerate(session.domains):
        session.start_domain(index)
        log.info(f"=== Domain {index + 1}/{len(domains)}: {domain.domain_name} ===")

        while session.current_domain_index == index:
            question = generate_question_with_retry(llm, session, index)
            answer_index, confidence, response_time = answer_fn(question)
            record = session.submit_answer(question, answer_index, confidence, response_time)
            log.info(
                f"[{domain.domain_name}] Answer {answer_index} "
                f"({confidence_label(confidence)}, {response_time:.1f}s) "
                f"progress={record.progress:.0f}%"
            )

    records = session.completed_records()
    elapsed_ms = session.elapsed_ms()
    report = with_retry(
        "report",
        lambda: llm.generate_report(main_topic, records, elapsed_ms, video_url),
    )
    log.info(
        f"=== Assessment Complete: score={report.overall_score:.1f} "
        f"level={report.knowledge_level.value} ==="
    )

    if store is not None:
        store.append(report, video_url)
        log.info(f"Saved report to {store.path}")

    return report


def prompt_answer(question: Question) -> Tuple[int, float, float]:
    """Ask for an answer and a confidence on the terminal, timing the reply."""
    print(f"\n{question.question}")
    for idx, option in enumerate(question.options):
        print(f"  {idx + 1}. {option}")

    started = time.monotonic()
    while True:
        raw = input(f"Answer [1-{len(question.options)}]: ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(question.options):
            answer_index = int(raw) - 1
            break
        print("Please enter a valid option number.")
    response_time = max(time.monotonic() - started, 0.001)

    while True:
        raw = input("Confidence [0-100]: ").strip()
        if raw.isdigit() and 0 <= int(raw) <= 100:
            confidence = int(raw) / 100
            break
        print("Please enter a number between 0 and 100.")

    verdict = "Correct!" if answer_index == question.correct_answer_index else "Incorrect."
    print(f"{verdict} {question.explanation}")
    return answer_index, confidence, response_time


def main():
    parser = argparse.ArgumentParser(description="Knowledge Debugger")
    parser.add_argument("--url", type=str, required=True, help="YouTube video URL")
    parser.add_argument(
        "--mock", action="store_true", help="Use the offline mock generator"
    )
    parser.add_argument(
        "--max-domains",
        type=int,
        default=0,
        help="Limit assessed domains (0 = all)",
    )
    parser.add_argument(
        "--no-save", action="store_true", help="Do not store the final report"
    )
    args = parser.parse_args()

    log.info(
        f"Config: model={settings.OPENAI_MODEL}, mock={args.mock}, "
        f"required_questions={settings.REQUIRED_QUESTIONS}"
    )

    llm = LLMService(use_mock=True) if args.mock else LLMService(video=VideoInfoClient())
    store = None if args.no_save else ReportStore(settings.REPORTS_PATH)

    report = run_assessment(llm, store, args.url, prompt_answer, args.max_domains)
    print()
    for line in format_report(report):
        print(line)
    return report


if __name__ == "__main__":
    main()
