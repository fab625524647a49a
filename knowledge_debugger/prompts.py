"""Prompts for the assessment generator."""

DOMAINS = """<task>
Break the content of a YouTube video into knowledge domains for an assessment.
Infer the video's main topic and key learning points from the URL{title_hint}.
Act as if you have watched the video.
</task>

<input>
Video URL: {video_url}
{title_line}
</input>

<constraints>
- 4-5 logical, assessable domains
- Each domain: a name and a short description of the knowledge it covers
- Estimate relative difficulty (1-100): introductions are easier, advanced applications harder
</constraints>

<output_format>
Return ONLY valid JSON:
{{
  "main_topic": "The inferred main topic of the video",
  "domains": [
    {{"domain_name": "Introduction to X", "description": "What this domain assesses", "estimated_difficulty": 20}},
    {{"domain_name": "Core Concept Y", "description": "What this domain assesses", "estimated_difficulty": 50}}
  ]
}}
</output_format>"""


QUESTION = """<task>
Create ONE multiple-choice question testing knowledge taught in a YouTube video.
The question must fit the given domain and precisely match the difficulty.
</task>

<context>
Video URL: {video_url}
Domain: {domain}
Difficulty: {difficulty} (1-100, where 1 = very basic, 100 = expert level)
Knowledge gaps: {knowledge_gaps}
</context>

<difficulty_guidelines>
1-20: Basic definitions and simple recall from the video
21-40: Understanding and simple application of concepts shown
41-60: Analysis and moderate application of video content
61-80: Synthesis and problem-solving using the video's methods
81-100: Expert-level evaluation of the video's advanced topics
</difficulty_guidelines>

<constraints>
- If knowledge gaps are listed, target those areas
- Exactly 4 options, exactly one correct
- Plausible distractors that reveal common misconceptions
- A specific knowledge tag and an explanation referencing the video
- Estimate the seconds a knowledgeable person needs to answer
</constraints>

<output_format>
Return ONLY valid JSON:
{{
  "question": "Question text",
  "options": ["Option A", "Option B", "Option C", "Option D"],
  "correct_answer_index": 1,
  "knowledge_tag": "Specific knowledge area",
  "explanation": "Why the correct answer is right and the others are wrong",
  "difficulty_level": {difficulty},
  "estimated_time": 30
}}
</output_format>"""


REPORT = """<task>
Analyze a learner's performance on an assessment of a YouTube video and write a report.
</task>

<context>
Video URL: {video_url}
Main topic: {main_topic}
Assessment data: {assessment_data}
Total time (minutes): {total_minutes}
Overall accuracy: {overall_accuracy}
</context>

<knowledge_levels>
Beginner (0-40% accuracy): basic understanding, should rewatch for foundational concepts
Intermediate (41-70%): solid grasp of fundamentals, ready for application
Advanced (71-85%): strong competency, handles complex scenarios
Expert (86-100%): mastery of the video's content
</knowledge_levels>

<constraints>
- Strengths: domains and mastery areas where the learner excelled
- Areas for improvement: domains and knowledge gaps needing attention
- 3-5 specific, actionable recommendations that reference parts of the video
- A breakdown entry for every assessed domain
</constraints>

<output_format>
Return ONLY valid JSON:
{{
  "title": "Knowledge Assessment Report: {main_topic}",
  "overall_score": {overall_score},
  "total_time_minutes": {total_minutes},
  "domains_assessed": {domains_assessed},
  "knowledge_level": "Beginner | Intermediate | Advanced | Expert",
  "strengths": ["..."],
  "areas_for_improvement": ["..."],
  "recommendations": ["..."],
  "detailed_breakdown": {{
    "<domain name>": {{
      "score": 85.5,
      "status": "mastered",
      "key_strengths": ["..."],
      "improvement_areas": ["..."]
    }}
  }}
}}
</output_format>"""


def format_gaps(knowledge_gaps: list[str]) -> str:
    if not knowledge_gaps:
        return "none"
    return ", ".join(f'"{gap}"' for gap in knowledge_gaps)


def format_title(title: str | None) -> tuple[str, str]:
    """Return (hint, line) fragments for DOMAINS when the video title is known."""
    if not title:
        return "", ""
    return " and title", f"Video title: {title}"
