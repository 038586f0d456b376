"""Lazily initialised ``firebase_admin`` app shared by auth and Firestore."""

import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

_app = None  # module-level cache


def _resolve_credentials_path() -> str | None:
    for name in ("FIREBASE_CREDENTIALS", "GOOGLE_APPLICATION_CREDENTIALS"):
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


def get_firebase_app() -> Any:
    """Return the default Firebase app, initialising it on first call.

    Uses the service-account file named by ``FIREBASE_CREDENTIALS`` (or
    ``GOOGLE_APPLICATION_CREDENTIALS``); without one, falls back to
    application default credentials.
    """
    global _app  # noqa: PLW0603

    if _app is not None:
        return _app

    import firebase_admin
    from firebase_admin import credentials

    try:
        _app = firebase_admin.get_app()
        return _app
    except ValueError:
        pass

    creds_path = _resolve_credentials_path()
    cred = credentials.Certificate(creds_path) if creds_path else credentials.ApplicationDefault()
    options: dict[str, Any] = {}
    project_id = os.environ.get("FIREBASE_PROJECT_ID", "").strip()
    if project_id:
        options["projectId"] = project_id

    _app = firebase_admin.initialize_app(cred, options or None)
    logger.info("Firebase app initialised (project=%s)", project_id or "<from credentials>")
    return _app
