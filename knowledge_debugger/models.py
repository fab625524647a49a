"""Pydantic models for type safety."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class DomainStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    MASTERED = "MASTERED"
    STRUGGLING = "STRUGGLING"

    @property
    def is_terminal(self) -> bool:
        return self in (DomainStatus.COMPLETED, DomainStatus.MASTERED, DomainStatus.STRUGGLING)


class KnowledgeLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class AssessmentPolicy(BaseModel):
    """Product policy for finishing and grading a domain."""
    required_questions: int = Field(default=5, ge=1)
    mastered_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    completed_threshold: float = Field(default=0.6, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> "AssessmentPolicy":
        if self.completed_threshold > self.mastered_threshold:
            raise ValueError("completed_threshold must not exceed mastered_threshold")
        return self


class AssessmentDomain(BaseModel):
    """Generator output: one assessable slice of the video."""
    domain_name: str
    description: str = ""
    estimated_difficulty: float = 0


class Question(BaseModel):
    """Generator output: one multiple-choice question."""
    question: str
    options: List[str] = Field(min_length=4, max_length=4)
    correct_answer_index: int = Field(ge=0, le=3)
    knowledge_tag: str
    explanation: str = ""
    difficulty_level: int
    estimated_time: int = Field(ge=0)  # seconds


class AnswerEvent(BaseModel):
    """One answered question, as fed to the engine and the tracker."""
    is_correct: bool
    response_time: float = Field(gt=0)  # seconds
    confidence: float = Field(ge=0.0, le=1.0)
    estimated_time: float = Field(ge=0)  # seconds
    knowledge_tag: str
    question_id: str = ""
    user_answer_index: Optional[int] = None


class QuestionResponse(BaseModel):
    """Entry in a domain's response history."""
    question_id: str
    user_answer_index: Optional[int] = None
    is_correct: bool
    response_time: float
    confidence_level: float
    knowledge_tag: str
    timestamp: int  # epoch ms


class DifficultyState(BaseModel):
    """Read-only snapshot of a DifficultyEngine."""
    current_difficulty: float
    recent_outcomes: List[bool] = []
    consecutive_correct: int = 0
    consecutive_incorrect: int = 0


class DomainRecord(BaseModel):
    """Progress and status of one domain."""
    domain_name: str
    status: DomainStatus = DomainStatus.NOT_STARTED
    current_difficulty: float = 50.0
    questions_attempted: int = Field(default=0, ge=0)
    questions_correct: int = Field(default=0, ge=0)
    response_history: List[QuestionResponse] = []
    knowledge_gaps: List[str] = []
    mastery_areas: List[str] = []
    average_response_time: float = 0.0
    confidence_score: float = 0.0
    progress: float = Field(default=0.0, ge=0.0, le=100.0)

    @property
    def accuracy(self) -> float:
        if self.questions_attempted == 0:
            return 0.0
        return self.questions_correct / self.questions_attempted


class DomainBreakdown(BaseModel):
    score: float
    status: str
    key_strengths: List[str] = []
    improvement_areas: List[str] = []


class FinalReport(BaseModel):
    """Generator output: end-of-session report."""
    title: str
    overall_score: float = Field(ge=0, le=100)
    total_time_minutes: float
    domains_assessed: int
    knowledge_level: KnowledgeLevel
    strengths: List[str] = []
    areas_for_improvement: List[str] = []
    recommendations: List[str] = []
    detailed_breakdown: Dict[str, DomainBreakdown] = {}

    @field_validator("knowledge_level", mode="before")
    @classmethod
    def _normalize_level(cls, value):
        # Generators return "intermediate", "ADVANCED", ...
        if isinstance(value, str):
            return value.strip().title()
        return value


class SessionSnapshot(BaseModel):
    """Serializable view of a whole assessment session."""
    video_url: str
    main_topic: str
    domain_list: List[AssessmentDomain]
    domain_assessments: List[DomainRecord]
    current_domain_index: Optional[int] = None
    start_time: int  # epoch ms
    total_questions: int = 0
    total_correct: int = 0
