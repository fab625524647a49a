"""Assessment session: one DifficultyEngine + DomainProgressTracker per domain."""

from __future__ import annotations

import logging
import time
from typing import Optional

from knowledge_debugger.config import settings
from knowledge_debugger.engine import DifficultyEngine, DomainProgressTracker
from knowledge_debugger.models import (
    AnswerEvent,
    AssessmentDomain,
    AssessmentPolicy,
    DifficultyState,
    DomainRecord,
    DomainStatus,
    Question,
    SessionSnapshot,
)

log = logging.getLogger(__name__)


def policy_from_settings() -> AssessmentPolicy:
    return AssessmentPolicy(
        required_questions=settings.REQUIRED_QUESTIONS,
        mastered_threshold=settings.MASTERED_THRESHOLD,
        completed_threshold=settings.COMPLETED_THRESHOLD,
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


class AssessmentSession:
    """Sequential walk through the domains of one video.

    Domains are taken in order: a domain unlocks once the previous one has
    reached a final status, and only one domain is active at a time.
    """

    def __init__(
        self,
        video_url: str,
        main_topic: str,
        domains: list[AssessmentDomain],
        policy: AssessmentPolicy | None = None,
        start_time: int | None = None,
    ):
        if not domains:
            raise ValueError("An assessment needs at least one domain")
        names = [d.domain_name for d in domains]
        if len(set(names)) != len(names):
            raise ValueError("Domain names must be unique")

        self.video_url = video_url
        self.main_topic = main_topic
        self.domains = list(domains)
        self.policy = policy or policy_from_settings()
        self.start_time = start_time if start_time is not None else _now_ms()
        self.current_domain_index: Optional[int] = None
        self.total_questions = 0
        self.total_correct = 0

        self._trackers: dict[str, DomainProgressTracker] = {
            d.domain_name: DomainProgressTracker(
                d.domain_name,
                initial_difficulty=d.estimated_difficulty or settings.DEFAULT_DIFFICULTY,
                policy=self.policy,
            )
            for d in self.domains
        }
        # Created on start_domain, from the tracker's starting difficulty.
        self._engines: dict[str, DifficultyEngine] = {}

    def record(self, index: int) -> DomainRecord:
        return self._tracker(index).snapshot()

    def records(self) -> list[DomainRecord]:
        return [self._trackers[d.domain_name].snapshot() for d in self.domains]

    def difficulty_state(self, index: int) -> Optional[DifficultyState]:
        engine = self._engines.get(self.domains[index].domain_name)
        return engine.snapshot() if engine else None

    def question_difficulty(self, index: int) -> int:
        """Integer difficulty to request from the generator."""
        return round(self._tracker(index).record.current_difficulty)

    def can_start(self, index: int) -> bool:
        if self.current_domain_index is not None:
            return False
        if self._tracker(index).status is not DomainStatus.NOT_STARTED:
            return False
        if index == 0:
            return True
        return self._tracker(index - 1).status.is_terminal

    @property
    def is_complete(self) -> bool:
        return all(t.record.progress >= 100 for t in self._trackers.values())

    @property
    def overall_accuracy(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return self.total_correct / self.total_questions

    def completed_records(self) -> list[DomainRecord]:
        return [r for r in self.records() if r.status.is_terminal]

    def elapsed_ms(self, now_ms: int | None = None) -> int:
        return (now_ms if now_ms is not None else _now_ms()) - self.start_time

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            video_url=self.video_url,
            main_topic=self.main_topic,
            domain_list=[d.model_copy() for d in self.domains],
            domain_assessments=self.records(),
            current_domain_index=self.current_domain_index,
            start_time=self.start_time,
            total_questions=self.total_questions,
            total_correct=self.total_correct,
        )

    def start_domain(self, index: int) -> DomainRecord:
        if not self.can_start(index):
            raise ValueError(f"Domain {index} ({self.domains[index].domain_name}) is not available")
        tracker = self._tracker(index)
        record = tracker.start()
        self._engines[tracker.record.domain_name] = DifficultyEngine(record.current_difficulty)
        self.current_domain_index = index
        return record

    def submit_answer(
        self,
        question: Question,
        answer_index: int,
        confidence: float,
        response_time: float,
        timestamp_ms: int | None = None,
    ) -> DomainRecord:
        """Score an answer for the active domain and return its updated record."""
        index = self.current_domain_index
        if index is None:
            raise ValueError("No domain in progress")
        if not 0 <= answer_index < len(question.options):
            raise ValueError(f"Answer index out of range: {answer_index}")

        name = self.domains[index].domain_name
        event = AnswerEvent(
            is_correct=answer_index == question.correct_answer_index,
            response_time=response_time,
            confidence=confidence,
            estimated_time=question.estimated_time,
            knowledge_tag=question.knowledge_tag,
            question_id=question.question,
            user_answer_index=answer_index,
        )

        new_difficulty = self._engines[name].update(event)
        record = self._trackers[name].record_answer(event, new_difficulty, timestamp_ms)
        self.total_questions += 1
        if event.is_correct:
            self.total_correct += 1

        log.info(
            f"[{name}] {'correct' if event.is_correct else 'wrong'} "
            f"-> difficulty={new_difficulty:.1f} progress={record.progress:.0f}% "
            f"status={record.status.value}"
        )

        if record.status.is_terminal:
            self.current_domain_index = None
        return record

    def _tracker(self, index: int) -> DomainProgressTracker:
        return self._trackers[self.domains[index].domain_name]
