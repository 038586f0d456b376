"""Transcript formatting and Gemini-backed interview scoring.

Dev notes:
- The category set is closed (``FEEDBACK_CATEGORIES``). The prompt tells the
  model not to add categories and ``ScoringResult`` rejects any reply that
  adds, drops or repeats one.
- Gemini is asked for JSON via ``response_schema``; the reply is still
  validated locally before anything is persisted.
"""

import json
import logging
from typing import Any, Iterable

from pydantic import ValidationError

from ...clients.gemini import get_gemini_client, structured_generation_config
from ...errors import ProviderError
from ...models import FEEDBACK_CATEGORIES, ScoringResult, TranscriptMessage

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a professional interviewer analyzing a mock interview. "
    "Your task is to evaluate the candidate based on structured categories"
)

_CATEGORY_RUBRIC = {
    "Communication Skills": "Clarity, articulation, structured responses.",
    "Technical Knowledge": "Understanding of key concepts for the role.",
    "Problem Solving": "Ability to analyze problems and propose solutions.",
    "Cultural Fit": "Alignment with company values and job role.",
    "Confidence and Clarity": "Confidence in responses, engagement, and clarity.",
}

_PROMPT_TEMPLATE = (
    "You are an AI interviewer analyzing a mock interview. Your task is to evaluate "
    "the candidate based on structured categories. Be thorough and detailed in your "
    "analysis. Don't be lenient with the candidate. If there are mistakes or areas "
    "for improvement, point them out.\n"
    "Transcript:\n"
    "{transcript}\n"
    "Please score the candidate from 0 to 100 in the following areas. "
    "Do not add categories other than the ones provided:\n"
    "{rubric}\n"
)

FEEDBACK_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "totalScore": {"type": "NUMBER"},
        "categoryScores": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "score": {"type": "NUMBER"},
                    "comment": {"type": "STRING"},
                },
                "required": ["name", "score", "comment"],
            },
        },
        "strengths": {"type": "ARRAY", "items": {"type": "STRING"}},
        "areasForImprovement": {"type": "ARRAY", "items": {"type": "STRING"}},
        "finalAssessment": {"type": "STRING"},
    },
    "required": [
        "totalScore",
        "categoryScores",
        "strengths",
        "areasForImprovement",
        "finalAssessment",
    ],
}


def format_transcript(transcript: Iterable[TranscriptMessage]) -> str:
    return "".join(f"- {message.role}: {message.content}\n" for message in transcript)


def build_feedback_prompt(formatted_transcript: str) -> str:
    rubric = "\n".join(f"- {name}: {_CATEGORY_RUBRIC[name]}" for name in FEEDBACK_CATEGORIES)
    return _PROMPT_TEMPLATE.format(transcript=formatted_transcript, rubric=rubric)


def parse_scoring_response(raw: str) -> ScoringResult:
    """Validate Gemini's JSON reply into a ``ScoringResult``."""
    text = (raw or "").strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProviderError("Scoring response was not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise ProviderError("Scoring response was not a JSON object")
    try:
        return ScoringResult.model_validate(parsed)
    except ValidationError as exc:
        raise ProviderError(f"Scoring response failed validation: {exc.error_count()} error(s)") from exc


async def score_transcript(prompt: str) -> ScoringResult:
    client = get_gemini_client(system_instruction=SYSTEM_INSTRUCTION)
    if client is None:
        raise ProviderError("Gemini client unavailable")

    try:
        response = await client.generate_content_async(
            prompt,
            generation_config=structured_generation_config(FEEDBACK_RESPONSE_SCHEMA),
        )
        raw = getattr(response, "text", "") or ""
    except Exception as exc:
        raise ProviderError("Gemini scoring request failed") from exc

    return parse_scoring_response(str(raw))
