"""Sign-up, sign-in and session handling.

All public coroutines here return an ``ActionResult`` (or ``None`` for the
current-user lookup) and never raise; provider failures are logged.
"""

import asyncio
import logging
import os
from datetime import timedelta

from fastapi import Response
from pydantic import ValidationError

from ...clients.identity import IdentityGateway
from ...db.documents import DocumentStore
from ...errors import AlreadyExistsError, NotFoundError, ProviderError
from ...models import ActionResult, User, from_snapshot

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session"
SESSION_LIFETIME = timedelta(days=7)
USERS = "users"


def is_production() -> bool:
    env = os.environ.get("APP_ENV") or os.environ.get("NODE_ENV") or ""
    return env.strip().lower() == "production"


async def sign_up(store: DocumentStore, uid: str, name: str, email: str) -> ActionResult:
    try:
        if (await asyncio.to_thread(store.get, USERS, uid)).exists:
            raise AlreadyExistsError(uid)

        await asyncio.to_thread(store.set, USERS, uid, {"name": name, "email": email})
        return ActionResult(success=True, message="Account created successfully")
    except AlreadyExistsError:
        return ActionResult(success=False, message="User already exists. Please sign in instead.")
    except Exception:
        logger.exception("Error creating user uid=%s", uid)
        return ActionResult(success=False, message="Failed to create account")


async def set_session_cookie(gateway: IdentityGateway, response: Response, id_token: str) -> None:
    """Exchange ``id_token`` for a 7-day session cookie and attach it to ``response``."""
    session_cookie = await asyncio.to_thread(
        gateway.create_session_cookie, id_token, expires_in=SESSION_LIFETIME
    )
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session_cookie,
        max_age=int(SESSION_LIFETIME.total_seconds()),
        httponly=True,
        secure=is_production(),
        path="/",
        samesite="lax",
    )


async def sign_in(
    store: DocumentStore,
    gateway: IdentityGateway,
    response: Response,
    email: str,
    id_token: str,
) -> ActionResult:
    try:
        if not await asyncio.to_thread(store.query, USERS, [("email", "==", email)], limit=1):
            raise NotFoundError(email)

        await set_session_cookie(gateway, response, id_token)
        return ActionResult(success=True, message="Signed in successfully")
    except NotFoundError:
        return ActionResult(success=False, message="User does not exist. Please sign up first.")
    except Exception:
        logger.exception("Error signing in email=%s", email)
        return ActionResult(success=False, message="Sign in failed")


def sign_out(response: Response) -> ActionResult:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/", httponly=True, samesite="lax")
    return ActionResult(success=True, message="Signed out")


async def get_current_user(
    store: DocumentStore,
    gateway: IdentityGateway,
    session_cookie: str | None,
) -> User | None:
    if not session_cookie:
        return None

    try:
        claims = await asyncio.to_thread(gateway.verify_session_cookie, session_cookie)
    except ProviderError:
        logger.info("Rejected session cookie")
        return None
    except Exception:
        logger.exception("Unexpected error verifying session cookie")
        return None

    uid = str(claims.get("uid") or claims.get("sub") or "").strip()
    if not uid:
        return None

    try:
        snapshot = await asyncio.to_thread(store.get, USERS, uid)
        if not snapshot.exists:
            return None
        return from_snapshot(User, uid, snapshot.data)
    except ValidationError:
        logger.warning("Malformed user document uid=%s", uid)
        return None
    except Exception:
        logger.exception("Failed to load current user uid=%s", uid)
        return None


async def is_authenticated(
    store: DocumentStore,
    gateway: IdentityGateway,
    session_cookie: str | None,
) -> bool:
    return await get_current_user(store, gateway, session_cookie) is not None
