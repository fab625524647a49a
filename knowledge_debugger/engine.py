"""Adaptive assessment engine.

Two per-domain components:

- DifficultyEngine: keeps a rolling window of recent outcomes and moves a
  bounded difficulty score after every answer (base step, streak momentum,
  confidence, response time, all scaled by how stable recent results are).
- DomainProgressTracker: accumulates counts and knowledge tags for a domain
  and drives its status (NOT_STARTED -> IN_PROGRESS -> MASTERED/COMPLETED/STRUGGLING).

Both are synchronous and own their state; one pair exists per domain.
"""

import logging
import time
from collections import deque
from itertools import islice
from typing import Optional

from knowledge_debugger.models import (
    AnswerEvent,
    AssessmentPolicy,
    DifficultyState,
    DomainRecord,
    DomainStatus,
    QuestionResponse,
)

log = logging.getLogger(__name__)

MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 100.0
HISTORY_SIZE = 10

BASE_STEP_CORRECT = 5.0
BASE_STEP_INCORRECT = -7.0
STREAK_STEP = 1.5
STREAK_CAP = 10.0
CONFIDENCE_SCALE = 10.0

# Below this many outcomes the stability factor is fixed.
STABILITY_MIN_SAMPLES = 5
STABILITY_WARMUP = 0.8
STABILITY_ERRATIC = 0.7
STABILITY_STEADY = 1.2


def clamp_difficulty(value: float) -> float:
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, value))


class DifficultyEngine:
    """Per-domain difficulty controller."""

    def __init__(self, initial_difficulty: float):
        self.current_difficulty = clamp_difficulty(float(initial_difficulty))
        self.recent_outcomes: deque[bool] = deque(maxlen=HISTORY_SIZE)
        self.consecutive_correct = 0
        self.consecutive_incorrect = 0

    def update(self, event: AnswerEvent) -> float:
        """Apply one answer and return the new (clamped) difficulty.

        Not idempotent: every call pushes to the outcome history and the
        streak counters.
        """
        self._record_outcome(event.is_correct)

        base = BASE_STEP_CORRECT if event.is_correct else BASE_STEP_INCORRECT
        streak = self._streak_bonus(event.is_correct)
        confidence = self._confidence_adjustment(event.is_correct, event.confidence)
        timing = self._time_impact(event.is_correct, event.response_time, event.estimated_time)
        stability = self.stability_factor()

        adjustment = (base + streak + confidence + timing) * stability
        previous = self.current_difficulty
        self.current_difficulty = clamp_difficulty(previous + adjustment)

        log.debug(
            f"Difficulty {previous:.1f} -> {self.current_difficulty:.1f} "
            f"(base={base}, streak={streak:+.1f}, conf={confidence:+.1f}, "
            f"time={timing:+.0f}, stability={stability})"
        )
        return self.current_difficulty

    def snapshot(self) -> DifficultyState:
        return DifficultyState(
            current_difficulty=self.current_difficulty,
            recent_outcomes=list(self.recent_outcomes),
            consecutive_correct=self.consecutive_correct,
            consecutive_incorrect=self.consecutive_incorrect,
        )

    def _record_outcome(self, is_correct: bool) -> None:
        # deque(maxlen) drops the oldest entry on overflow
        self.recent_outcomes.append(is_correct)
        if is_correct:
            self.consecutive_correct += 1
            self.consecutive_incorrect = 0
        else:
            self.consecutive_incorrect += 1
            self.consecutive_correct = 0

    def _streak_bonus(self, is_correct: bool) -> float:
        if is_correct:
            return min(self.consecutive_correct * STREAK_STEP, STREAK_CAP)
        return -min(self.consecutive_incorrect * STREAK_STEP, STREAK_CAP)

    @staticmethod
    def _confidence_adjustment(is_correct: bool, confidence: float) -> float:
        # Confident and wrong drops harder; an admitted guess drops less.
        impact = (confidence - 0.5) * CONFIDENCE_SCALE
        return impact if is_correct else -impact

    @staticmethod
    def _time_impact(is_correct: bool, response_time: float, estimated_time: float) -> float:
        ratio = response_time / (estimated_time + 1)
        if is_correct:
            if ratio < 0.7:
                return 3.0
            if ratio > 1.5:
                return -2.0
        else:
            if ratio < 0.5:
                return -4.0
            if ratio > 1.2:
                return -1.0
        return 0.0

    def change_rate(self) -> float:
        """Share of adjacent outcome flips over the window length."""
        outcomes = self.recent_outcomes
        if not outcomes:
            return 0.0
        flips = sum(1 for prev, cur in zip(outcomes, islice(outcomes, 1, None)) if prev != cur)
        return flips / len(outcomes)

    def stability_factor(self) -> float:
        if len(self.recent_outcomes) < STABILITY_MIN_SAMPLES:
            return STABILITY_WARMUP
        rate = self.change_rate()
        if rate > 0.6:
            return STABILITY_ERRATIC
        if rate < 0.2:
            return STABILITY_STEADY
        return 1.0


def classify_status(accuracy: float, policy: AssessmentPolicy) -> DomainStatus:
    """Final status for a finished domain. Both thresholds are inclusive."""
    bands = (
        (policy.mastered_threshold, DomainStatus.MASTERED),
        (policy.completed_threshold, DomainStatus.COMPLETED),
        (float("-inf"), DomainStatus.STRUGGLING),
    )
    for lower_bound, status in bands:
        if accuracy >= lower_bound:
            return status
    raise ValueError(f"Accuracy out of range: {accuracy}")


class DomainProgressTracker:
    """Owns the DomainRecord of one domain and its status machine."""

    def __init__(
        self,
        domain_name: str,
        initial_difficulty: float = 50.0,
        policy: Optional[AssessmentPolicy] = None,
    ):
        self.policy = policy or AssessmentPolicy()
        self.record = DomainRecord(
            domain_name=domain_name,
            current_difficulty=clamp_difficulty(float(initial_difficulty)),
        )

    @property
    def status(self) -> DomainStatus:
        return self.record.status

    def start(self) -> DomainRecord:
        if self.record.status is not DomainStatus.NOT_STARTED:
            raise ValueError(
                f"Domain '{self.record.domain_name}' cannot start from {self.record.status.value}"
            )
        self.record.status = DomainStatus.IN_PROGRESS
        log.info(f"Domain started: {self.record.domain_name}")
        return self.snapshot()

    def record_answer(
        self,
        event: AnswerEvent,
        new_difficulty: float,
        timestamp_ms: Optional[int] = None,
    ) -> DomainRecord:
        """Fold one answer into the record and return an updated snapshot."""
        record = self.record
        if record.status is not DomainStatus.IN_PROGRESS:
            raise ValueError(
                f"Domain '{record.domain_name}' is {record.status.value}, not accepting answers"
            )
        if not MIN_DIFFICULTY <= new_difficulty <= MAX_DIFFICULTY:
            raise ValueError(f"Difficulty out of range: {new_difficulty}")

        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        record.response_history.append(
            QuestionResponse(
                question_id=event.question_id,
                user_answer_index=event.user_answer_index,
                is_correct=event.is_correct,
                response_time=event.response_time,
                confidence_level=event.confidence,
                knowledge_tag=event.knowledge_tag,
                timestamp=timestamp_ms,
            )
        )

        increment = 100 / self.policy.required_questions if event.is_correct else 0.0
        record.progress = min(100.0, record.progress + increment)

        record.questions_attempted += 1
        if event.is_correct:
            record.questions_correct += 1
            record.mastery_areas.append(event.knowledge_tag)
        else:
            record.knowledge_gaps.append(event.knowledge_tag)

        n = record.questions_attempted
        record.average_response_time += (event.response_time - record.average_response_time) / n
        record.confidence_score += (event.confidence - record.confidence_score) / n
        record.current_difficulty = new_difficulty

        # Float increments (e.g. 100/3) may land just below 100.
        if record.progress >= 100.0 - 1e-9:
            record.progress = 100.0
            record.status = classify_status(record.accuracy, self.policy)
            log.info(
                f"Domain finished: {record.domain_name} -> {record.status.value} "
                f"(accuracy={record.accuracy:.2f}, attempted={n})"
            )

        return self.snapshot()

    def snapshot(self) -> DomainRecord:
        return self.record.model_copy(deep=True)
