"""Best-effort feedback summary email.

Nothing in here may fail the feedback workflow: missing configuration or a
missing recipient is a logged no-op, and delivery errors are logged only.
"""

import asyncio
import logging
import os
from dataclasses import dataclass

from ...clients import emailjs
from ...db.documents import DocumentStore
from ...models import CategoryScore

logger = logging.getLogger(__name__)

DEFAULT_APP_URL = "http://localhost:3000"
EMAILJS_ENV_VARS = (
    "EMAILJS_SERVICE_ID",
    "EMAILJS_TEMPLATE_ID",
    "EMAILJS_PUBLIC_KEY",
    "EMAILJS_PRIVATE_KEY",
)


@dataclass
class FeedbackEmailSummary:
    user_id: str
    interview_id: str
    feedback_id: str
    total_score: int | float
    final_assessment: str
    category_scores: list[CategoryScore]


def _resolve_app_url() -> str:
    value = os.environ.get("APP_URL") or os.environ.get("NEXT_PUBLIC_APP_URL") or DEFAULT_APP_URL
    return value.strip().rstrip("/") or DEFAULT_APP_URL


def _format_score(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value)


def format_category_breakdown(category_scores: list[CategoryScore]) -> str:
    return "\n".join(
        f"{category.name}: {_format_score(category.score)}/100 — {category.comment}"
        for category in category_scores
    )


async def send_feedback_summary_email(store: DocumentStore, summary: FeedbackEmailSummary) -> None:
    service_id, template_id, public_key, private_key = (
        os.environ.get(name, "").strip() for name in EMAILJS_ENV_VARS
    )
    if not (service_id and template_id and public_key and private_key):
        logger.warning("EmailJS environment variables are not fully configured. Skipping email send.")
        return

    try:
        snapshot = await asyncio.to_thread(store.get, "users", summary.user_id)
        user_data = snapshot.data or {}
        recipient = str(user_data.get("email") or "").strip()
        if not snapshot.exists or not recipient:
            logger.warning(
                "Unable to send email summary. User not found or email missing for userId=%s",
                summary.user_id,
            )
            return

        template_params = {
            "recipient_email": recipient,
            "recipient_name": str(user_data.get("name") or "").strip() or "there",
            "total_score": _format_score(summary.total_score),
            "final_assessment": summary.final_assessment,
            "category_breakdown": format_category_breakdown(summary.category_scores),
            "feedback_url": f"{_resolve_app_url()}/interview/{summary.interview_id}/feedback",
            "feedback_id": summary.feedback_id,
        }

        await emailjs.send_template_email(
            service_id,
            template_id,
            public_key,
            private_key,
            template_params,
        )
        logger.info("Feedback summary email sent to %s", recipient)
    except Exception:
        logger.exception("Failed to send feedback summary email")
