import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response

from ..db.documents import DocumentStore
from .deps import document_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
def readiness_check(response: Response, store: DocumentStore = Depends(document_store)):
    try:
        store.query("users", limit=1)
        ready = True
    except Exception:
        logger.exception("Document store readiness query failed")
        ready = False
        response.status_code = 503
    return {"ready": ready, "version": "0.1.0", "documentStore": type(store).__name__}
