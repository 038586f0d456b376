"""Feedback generation and lookup."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Sequence

from pydantic import ValidationError

from ...db.documents import DocumentStore
from ...models import ActionResult, Feedback, TranscriptMessage, from_snapshot
from .notifier import FeedbackEmailSummary, send_feedback_summary_email
from .scoring import build_feedback_prompt, format_transcript, score_transcript

logger = logging.getLogger(__name__)

FEEDBACK = "feedback"


async def create_feedback(
    store: DocumentStore,
    interview_id: str,
    user_id: str,
    transcript: Sequence[TranscriptMessage],
) -> ActionResult:
    """Score ``transcript``, store the feedback and email a summary.

    Returns ``success=False`` instead of raising when formatting, scoring or
    persistence fails. The email is sent after the write and cannot undo it.
    """
    try:
        formatted = format_transcript(transcript)
        logger.debug("Formatted transcript for interview=%s:\n%s", interview_id, formatted)

        scoring = await score_transcript(build_feedback_prompt(formatted))
        logger.info(
            "Generated feedback for interview=%s user=%s totalScore=%s",
            interview_id,
            user_id,
            scoring.totalScore,
        )

        feedback_id = await asyncio.to_thread(
            store.add,
            FEEDBACK,
            {
                "interviewId": interview_id,
                "userId": user_id,
                **scoring.model_dump(),
                "createdAt": datetime.now(timezone.utc).isoformat(),
            },
        )
    except Exception:
        logger.exception("Error generating feedback for interview=%s", interview_id)
        return ActionResult(success=False)

    await send_feedback_summary_email(
        store,
        FeedbackEmailSummary(
            user_id=user_id,
            interview_id=interview_id,
            feedback_id=feedback_id,
            total_score=scoring.totalScore,
            final_assessment=scoring.finalAssessment,
            category_scores=scoring.categoryScores,
        ),
    )

    return ActionResult(success=True, feedbackId=feedback_id)


async def get_feedback_by_interview_id(
    store: DocumentStore,
    interview_id: str,
    user_id: str,
) -> Feedback | None:
    try:
        matches = await asyncio.to_thread(
            store.query,
            FEEDBACK,
            [("interviewId", "==", interview_id), ("userId", "==", user_id)],
            limit=1,
        )
        if not matches:
            return None
        return from_snapshot(Feedback, matches[0].id, matches[0].data)
    except ValidationError:
        logger.warning("Malformed feedback document for interview=%s", interview_id)
        return None
    except Exception:
        logger.exception("Failed to load feedback for interview=%s", interview_id)
        return None
