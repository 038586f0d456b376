"""Interview API router — list and fetch interviews for the signed-in user."""

from fastapi import APIRouter, Depends, HTTPException, Query

from ..db.documents import DocumentStore
from ..engines.interviews.queries import (
    DEFAULT_LATEST_LIMIT,
    get_interview_by_id,
    get_interviews_by_user_id,
    get_latest_interviews,
)
from ..models import Interview, User
from .deps import document_store, require_user

router = APIRouter(prefix="/interviews", tags=["interviews"])


@router.get("", response_model=list[Interview])
async def list_my_interviews(
    user: User = Depends(require_user),
    store: DocumentStore = Depends(document_store),
):
    return await get_interviews_by_user_id(store, user.id)


@router.get("/latest", response_model=list[Interview])
async def list_latest_interviews(
    limit: int = Query(default=DEFAULT_LATEST_LIMIT, ge=1, le=100),
    user: User = Depends(require_user),
    store: DocumentStore = Depends(document_store),
):
    return await get_latest_interviews(store, user.id, limit=limit)


@router.get("/{interview_id}", response_model=Interview)
async def get_interview(
    interview_id: str,
    _user: User = Depends(require_user),
    store: DocumentStore = Depends(document_store),
):
    interview = await get_interview_by_id(store, interview_id)
    if interview is None:
        raise HTTPException(status_code=404, detail="Interview not found")
    return interview
