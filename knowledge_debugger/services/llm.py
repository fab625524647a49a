"""OpenAI-backed assessment generator (domains, questions, final report)."""

import json
import logging
import re
from typing import Any, Optional, Tuple

from openai import OpenAI
from pydantic import ValidationError

from knowledge_debugger.config import settings
from knowledge_debugger.models import (
    AssessmentDomain,
    DomainBreakdown,
    DomainRecord,
    FinalReport,
    KnowledgeLevel,
    Question,
)
from knowledge_debugger.prompts import DOMAINS, QUESTION, REPORT, format_gaps, format_title
from knowledge_debugger.services.video import VideoInfoClient

log = logging.getLogger(__name__)


def knowledge_level_for(score: float) -> KnowledgeLevel:
    """Map an overall score (0-100) onto the report's knowledge bands."""
    if score <= 40:
        return KnowledgeLevel.BEGINNER
    if score <= 70:
        return KnowledgeLevel.INTERMEDIATE
    if score <= 85:
        return KnowledgeLevel.ADVANCED
    return KnowledgeLevel.EXPERT


def parse_json_payload(raw_text: str) -> Any:
    """Parse model output as JSON, tolerating a markdown code fence around it."""
    try:
        return json.loads(raw_text)
    except json.JSONDecodeError:
        match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", raw_text)
        if not match:
            raise
        return json.loads(match.group(1))


class LLMService:
    def __init__(
        self,
        client: Optional[Any] = None,
        use_mock: Optional[bool] = None,
        video: Optional[VideoInfoClient] = None,
    ):
        if use_mock is None:
            use_mock = client is None and not settings.OPENAI_API_KEY
        self.use_mock = use_mock
        self.model = settings.OPENAI_MODEL
        self.video = video
        self.client = None
        if self.use_mock:
            log.warning("OPENAI_API_KEY not set. Using mock data.")
        else:
            self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)

    def _complete(self, prompt: str) -> str:
        response = self.client.responses.create(model=self.model, input=prompt)
        return response.output_text

    def _generate(self, prompt: str, what: str) -> Any:
        raw_text = self._complete(prompt)
        try:
            return parse_json_payload(raw_text.strip())
        except json.JSONDecodeError as e:
            log.error(f"Failed to parse {what}: {e}. Raw response: {raw_text[:500]}")
            raise RuntimeError(f"Received malformed {what} data from AI.") from e

    def generate_initial_assessment(self, video_url: str) -> Tuple[str, list[AssessmentDomain]]:
        """Infer the main topic and the assessable domains of a video."""
        if self.use_mock:
            return self._mock_initial_assessment(video_url)

        title = self.video.get_title(video_url) if self.video else None
        title_hint, title_line = format_title(title)
        prompt = DOMAINS.format(video_url=video_url, title_hint=title_hint, title_line=title_line)
        data = self._generate(prompt, "domain")
        try:
            main_topic = str(data["main_topic"])
            domains = [AssessmentDomain.model_validate(d) for d in data["domains"]]
        except (KeyError, TypeError, ValidationError) as e:
            log.error(f"Invalid domain payload: {e}")
            raise RuntimeError("Received malformed domain data from AI.") from e
        names = [d.domain_name for d in domains]
        if not domains or len(set(names)) != len(names):
            log.error(f"Invalid domain list: {names}")
            raise RuntimeError("Received malformed domain data from AI.")
        log.info(f"Topic '{main_topic}' with {len(domains)} domains")
        return main_topic, domains

    def generate_question(
        self,
        domain_name: str,
        difficulty: int,
        knowledge_gaps: list[str],
        video_url: str,
    ) -> Question:
        """Generate one question for a domain at the requested difficulty."""
        if self.use_mock:
            return self._mock_question(domain_name, difficulty, knowledge_gaps)

        prompt = QUESTION.format(
            video_url=video_url,
            domain=domain_name,
            difficulty=difficulty,
            knowledge_gaps=format_gaps(knowledge_gaps),
        )
        data = self._generate(prompt, "question")
        try:
            return Question.model_validate(data)
        except ValidationError as e:
            log.error(f"Invalid question payload: {e}")
            raise RuntimeError("Received malformed question data from AI.") from e

    def generate_report(
        self,
        main_topic: str,
        records: list[DomainRecord],
        elapsed_ms: int,
        video_url: str,
    ) -> FinalReport:
        """Summarize the finished domains into a FinalReport."""
        total_questions = sum(r.questions_attempted for r in records)
        total_correct = sum(r.questions_correct for r in records)
        overall_accuracy = total_correct / total_questions if total_questions else 0.0
        total_minutes = round(elapsed_ms / 60000, 1)

        if self.use_mock:
            return self._mock_report(main_topic, records, overall_accuracy, total_minutes)

        assessment_data = json.dumps(
            [
                {
                    "domain": r.domain_name,
                    "accuracy": round(r.accuracy, 2),
                    "status": r.status.value,
                    "knowledge_gaps": r.knowledge_gaps,
                    "mastery_areas": r.mastery_areas,
                }
                for r in records
            ],
            indent=2,
        )
        prompt = REPORT.format(
            video_url=video_url,
            main_topic=main_topic,
            assessment_data=assessment_data,
            total_minutes=total_minutes,
            overall_accuracy=f"{overall_accuracy:.2f}",
            overall_score=round(overall_accuracy * 100, 1),
            domains_assessed=len(records),
        )
        data = self._generate(prompt, "summary")
        try:
            return FinalReport.model_validate(data)
        except ValidationError as e:
            log.error(f"Invalid report payload: {e}")
            raise RuntimeError("Received malformed summary data from AI.") from e

    def _mock_initial_assessment(self, video_url: str) -> Tuple[str, list[AssessmentDomain]]:
        log.info(f"Generating MOCK initial assessment for {video_url}")
        domains = [
            AssessmentDomain(
                domain_name=f"Mock Domain {i} from Video",
                description=f"Mock description for domain {i}, derived from the video content.",
                estimated_difficulty=20 + i * 15,
            )
            for i in range(1, 5)
        ]
        return "Mock Video Topic", domains

    def _mock_question(self, domain_name: str, difficulty: int, knowledge_gaps: list[str]) -> Question:
        gaps = ", ".join(knowledge_gaps) or "None"
        return Question(
            question=(
                f'Mock question for "{domain_name}" at difficulty {difficulty}. '
                f"Which option is correct? Gaps to focus on: {gaps}"
            ),
            options=["Mock Option A", "Mock Option B (Correct)", "Mock Option C", "Mock Option D"],
            correct_answer_index=1,
            knowledge_tag="Mock Video Knowledge",
            explanation="Mock Option B is correct because it was designated as such.",
            difficulty_level=difficulty,
            estimated_time=30,
        )

    def _mock_report(
        self,
        main_topic: str,
        records: list[DomainRecord],
        overall_accuracy: float,
        total_minutes: float,
    ) -> FinalReport:
        breakdown = {
            r.domain_name: DomainBreakdown(
                score=round(r.accuracy * 100, 1),
                status=r.status.value.lower(),
                key_strengths=sorted(set(r.mastery_areas)),
                improvement_areas=sorted(set(r.knowledge_gaps)),
            )
            for r in records
        }
        score = round(overall_accuracy * 100, 1)
        strong = [r.domain_name for r in records if r.accuracy >= 0.8]
        weak = [r.domain_name for r in records if r.accuracy < 0.6]
        return FinalReport(
            title=f"Knowledge Assessment Report: {main_topic}",
            overall_score=score,
            total_time_minutes=total_minutes,
            domains_assessed=len(records),
            knowledge_level=knowledge_level_for(score),
            strengths=strong or ["Mock Strength: Core Concepts"],
            areas_for_improvement=weak or ["Mock Weakness: Advanced Topics"],
            recommendations=[
                "Rewatch the middle part of the video.",
                "Practice the main example shown in the video.",
            ],
            detailed_breakdown=breakdown,
        )
