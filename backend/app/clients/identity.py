"""Identity gateway: session-cookie minting and verification."""

import logging
from datetime import timedelta
from typing import Any, Protocol

from ..errors import ProviderError

logger = logging.getLogger(__name__)


class IdentityGateway(Protocol):
    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str: ...

    def verify_session_cookie(self, session_cookie: str) -> dict[str, Any]: ...


class FirebaseIdentityGateway:
    """Firebase Authentication via ``firebase_admin.auth``.

    Every SDK failure is re-raised as ``ProviderError``; the Firebase error
    code (e.g. ``INVALID_ID_TOKEN``) is kept on ``ProviderError.code``.
    """

    def __init__(self, app: Any = None):
        if app is None:
            from .firebase import get_firebase_app

            app = get_firebase_app()
        self._app = app

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        from firebase_admin import auth

        try:
            cookie = auth.create_session_cookie(id_token, expires_in=expires_in, app=self._app)
        except Exception as exc:
            raise ProviderError("Session cookie creation failed", code=_error_code(exc)) from exc
        return cookie.decode("utf-8") if isinstance(cookie, bytes) else cookie

    def verify_session_cookie(self, session_cookie: str) -> dict[str, Any]:
        from firebase_admin import auth

        try:
            return auth.verify_session_cookie(session_cookie, check_revoked=True, app=self._app)
        except Exception as exc:
            raise ProviderError("Session cookie verification failed", code=_error_code(exc)) from exc


def _error_code(exc: Exception) -> str | None:
    code = getattr(exc, "code", None)
    return str(code) if code else None


_gateway: IdentityGateway | None = None  # module-level cache


def get_identity_gateway() -> IdentityGateway:
    global _gateway  # noqa: PLW0603

    if _gateway is None:
        _gateway = FirebaseIdentityGateway()
        logger.info("Identity gateway initialised")
    return _gateway
