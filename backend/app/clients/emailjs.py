"""Minimal EmailJS REST client."""

import asyncio
import json
from typing import Any
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from ..errors import EmailDeliveryError


EMAILJS_ENDPOINT = "https://api.emailjs.com/api/v1.0/email/send"
REQUEST_TIMEOUT_SECONDS = 20


def _post_json(url: str, payload: dict[str, Any], headers: dict[str, str]) -> tuple[int, str]:
    request = Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers=headers,
        method="POST",
    )
    try:
        with urlopen(request, timeout=REQUEST_TIMEOUT_SECONDS) as response:  # noqa: S310
            return response.status, response.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        try:
            body = exc.read().decode("utf-8", errors="replace")
        except Exception:
            body = "Unknown error"
        return exc.code, body


async def send_template_email(
    service_id: str,
    template_id: str,
    public_key: str,
    private_key: str,
    template_params: dict[str, Any],
) -> None:
    """POST one templated email; raises ``EmailDeliveryError`` on a non-2xx reply."""
    payload = {
        "service_id": service_id,
        "template_id": template_id,
        "user_id": public_key,
        "template_params": template_params,
    }
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {private_key}",
    }
    status, body = await asyncio.to_thread(_post_json, EMAILJS_ENDPOINT, payload, headers)
    if not 200 <= status < 300:
        raise EmailDeliveryError(status, body or "Unknown error")
