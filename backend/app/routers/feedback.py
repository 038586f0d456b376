"""Feedback API router — generate and fetch interview feedback."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..db.documents import DocumentStore
from ..engines.feedback.workflow import create_feedback, get_feedback_by_interview_id
from ..models import ActionResult, Feedback, TranscriptMessage, User
from .deps import document_store, require_user

router = APIRouter(prefix="/interviews", tags=["feedback"])


class CreateFeedbackRequest(BaseModel):
    transcript: list[TranscriptMessage] = Field(default_factory=list)


@router.post(
    "/{interview_id}/feedback",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
async def create_feedback_route(
    interview_id: str,
    payload: CreateFeedbackRequest,
    user: User = Depends(require_user),
    store: DocumentStore = Depends(document_store),
):
    return await create_feedback(store, interview_id, user.id, payload.transcript)


@router.get("/{interview_id}/feedback", response_model=Feedback)
async def get_feedback(
    interview_id: str,
    user: User = Depends(require_user),
    store: DocumentStore = Depends(document_store),
):
    feedback = await get_feedback_by_interview_id(store, interview_id, user.id)
    if feedback is None:
        raise HTTPException(status_code=404, detail="Feedback not found")
    return feedback
