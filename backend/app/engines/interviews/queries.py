import asyncio
import logging

from pydantic import ValidationError

from ...db.documents import DocumentSnapshot, DocumentStore
from ...models import Interview, from_snapshot

logger = logging.getLogger(__name__)

INTERVIEWS = "interviews"
DEFAULT_LATEST_LIMIT = 20


def _to_interviews(snapshots: list[DocumentSnapshot]) -> list[Interview]:
    interviews: list[Interview] = []
    for snapshot in snapshots:
        if not snapshot.exists:
            continue
        try:
            interviews.append(from_snapshot(Interview, snapshot.id, snapshot.data))
        except ValidationError:
            logger.warning("Skipping malformed interview document id=%s", snapshot.id)
    return interviews


async def get_interviews_by_user_id(store: DocumentStore, user_id: str) -> list[Interview]:
    """Return the user's own interviews, newest first."""
    try:
        snapshots = await asyncio.to_thread(
            store.query,
            INTERVIEWS,
            [("userId", "==", user_id)],
            order_by=("createdAt", "desc"),
        )
    except Exception:
        logger.exception("Failed to load interviews for user=%s", user_id)
        return []
    return _to_interviews(snapshots)


async def get_latest_interviews(
    store: DocumentStore,
    user_id: str,
    limit: int = DEFAULT_LATEST_LIMIT,
) -> list[Interview]:
    """Return finalized interviews created by other users, newest first."""
    try:
        snapshots = await asyncio.to_thread(
            store.query,
            INTERVIEWS,
            [("finalized", "==", True), ("userId", "!=", user_id)],
            order_by=("createdAt", "desc"),
            limit=limit,
        )
    except Exception:
        logger.exception("Failed to load latest interviews")
        return []
    return _to_interviews(snapshots)


async def get_interview_by_id(store: DocumentStore, interview_id: str) -> Interview | None:
    try:
        snapshot = await asyncio.to_thread(store.get, INTERVIEWS, interview_id)
    except Exception:
        logger.exception("Failed to load interview id=%s", interview_id)
        return None
    interviews = _to_interviews([snapshot])
    return interviews[0] if interviews else None
