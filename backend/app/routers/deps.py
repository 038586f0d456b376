from fastapi import Cookie, Depends, HTTPException

from ..clients.identity import IdentityGateway, get_identity_gateway
from ..db.documents import DocumentStore, get_document_store
from ..engines.auth.workflow import get_current_user
from ..models import User


def document_store() -> DocumentStore:
    return get_document_store()


def identity_gateway() -> IdentityGateway:
    return get_identity_gateway()


async def current_user(
    session: str | None = Cookie(default=None),
    store: DocumentStore = Depends(document_store),
    gateway: IdentityGateway = Depends(identity_gateway),
) -> User | None:
    return await get_current_user(store, gateway, session)


async def require_user(user: User | None = Depends(current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
