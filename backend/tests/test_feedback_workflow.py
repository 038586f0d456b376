import asyncio
import json
import sys
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.clients import emailjs
from app.db.documents import SQLiteDocumentStore
from app.engines.feedback import scoring
from app.engines.feedback import workflow as fw
from app.errors import ProviderError
from app.models import FEEDBACK_CATEGORIES, TranscriptMessage
from app.engines.feedback.notifier import EMAILJS_ENV_VARS


def _scoring_payload(total_score=72, categories=FEEDBACK_CATEGORIES) -> dict:
    return {
        "totalScore": total_score,
        "categoryScores": [
            {"name": name, "score": 70, "comment": f"{name} was solid."} for name in categories
        ],
        "strengths": ["Clear structure"],
        "areasForImprovement": ["More depth on trade-offs"],
        "finalAssessment": "A promising candidate.",
    }


class _DummyResponse:
    def __init__(self, text: str):
        self.text = text


class _DummyClient:
    def __init__(self, text: str):
        self._text = text
        self.prompts: list[str] = []
        self.generation_configs: list[dict] = []

    async def generate_content_async(self, prompt: str, generation_config=None):
        self.prompts.append(prompt)
        self.generation_configs.append(generation_config)
        return _DummyResponse(self._text)


class _FailingClient:
    async def generate_content_async(self, _prompt: str, generation_config=None):
        raise RuntimeError("quota exceeded")


@pytest.fixture
def store(tmp_path):
    return SQLiteDocumentStore(tmp_path / "hirewise.db")


@pytest.fixture
def sent_emails(monkeypatch):
    calls: list[tuple[str, dict, dict]] = []

    def _fake_post(url, payload, headers):
        calls.append((url, payload, headers))
        return 200, "OK"

    monkeypatch.setattr(emailjs, "_post_json", _fake_post)
    return calls


@pytest.fixture
def no_email_config(monkeypatch):
    for name in EMAILJS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _use_client(monkeypatch, client):
    monkeypatch.setattr(scoring, "get_gemini_client", lambda system_instruction=None: client)


def _feedback_docs(store) -> list:
    return store.query("feedback")


def test_format_transcript_one_line_per_turn_in_order():
    transcript = [
        TranscriptMessage(role="assistant", content="Tell me about yourself."),
        TranscriptMessage(role="user", content="I build APIs."),
        TranscriptMessage(role="assistant", content="Why this role?"),
    ]

    formatted = scoring.format_transcript(transcript)

    assert formatted.splitlines() == [
        "- assistant: Tell me about yourself.",
        "- user: I build APIs.",
        "- assistant: Why this role?",
    ]
    assert scoring.format_transcript([TranscriptMessage(role="user", content="Hi")]) == "- user: Hi\n"
    assert scoring.format_transcript([]) == ""


def test_prompt_embeds_transcript_and_closed_rubric():
    prompt = scoring.build_feedback_prompt("- user: Hi\n")

    assert prompt.count("- user: Hi\n") == 1
    for name in FEEDBACK_CATEGORIES:
        assert f"- {name}:" in prompt
    assert "Do not add categories other than the ones provided" in prompt


def test_parse_scoring_response_orders_categories_canonically():
    shuffled = _scoring_payload(categories=tuple(reversed(FEEDBACK_CATEGORIES)))

    result = scoring.parse_scoring_response("```json\n" + json.dumps(shuffled) + "\n```")

    assert [c.name for c in result.categoryScores] == list(FEEDBACK_CATEGORIES)


@pytest.mark.parametrize(
    "payload",
    [
        _scoring_payload(categories=FEEDBACK_CATEGORIES + ("Charisma",)),
        _scoring_payload(categories=FEEDBACK_CATEGORIES[:4]),
        _scoring_payload(categories=FEEDBACK_CATEGORIES[:4] + (FEEDBACK_CATEGORIES[0],)),
        _scoring_payload(total_score=140),
        {"totalScore": 50},
    ],
)
def test_parse_scoring_response_rejects_malformed_output(payload):
    with pytest.raises(ProviderError):
        scoring.parse_scoring_response(json.dumps(payload))


def test_parse_scoring_response_rejects_non_json():
    with pytest.raises(ProviderError):
        scoring.parse_scoring_response("Sure! Here is the feedback you asked for.")


def test_create_feedback_persists_scored_result(store, monkeypatch, no_email_config, sent_emails):
    client = _DummyClient(json.dumps(_scoring_payload(total_score=72)))
    _use_client(monkeypatch, client)

    result = asyncio.run(
        fw.create_feedback(store, "interview-1", "user-1", [TranscriptMessage(role="user", content="Hi")])
    )

    assert result.success is True
    assert result.feedbackId
    stored = store.get("feedback", result.feedbackId)
    assert stored.exists
    assert stored.data["totalScore"] == 72
    assert stored.data["interviewId"] == "interview-1"
    assert stored.data["userId"] == "user-1"
    assert stored.data["createdAt"]
    assert [c["name"] for c in stored.data["categoryScores"]] == list(FEEDBACK_CATEGORIES)

    assert "- user: Hi\n" in client.prompts[0]
    config = client.generation_configs[0]
    assert config["response_mime_type"] == "application/json"
    assert config["response_schema"] is scoring.FEEDBACK_RESPONSE_SCHEMA
    assert sent_emails == []


def test_create_feedback_scoring_failure_persists_nothing(store, monkeypatch, no_email_config):
    _use_client(monkeypatch, _FailingClient())

    result = asyncio.run(
        fw.create_feedback(store, "interview-1", "user-1", [TranscriptMessage(role="user", content="Hi")])
    )

    assert result.success is False
    assert result.feedbackId is None
    assert _feedback_docs(store) == []


def test_create_feedback_without_gemini_key_fails_cleanly(store, monkeypatch, no_email_config):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    result = asyncio.run(fw.create_feedback(store, "interview-1", "user-1", []))

    assert result.success is False
    assert _feedback_docs(store) == []


def test_create_feedback_rejects_invented_categories(store, monkeypatch, no_email_config):
    payload = _scoring_payload(categories=FEEDBACK_CATEGORIES + ("Charisma",))
    _use_client(monkeypatch, _DummyClient(json.dumps(payload)))

    result = asyncio.run(fw.create_feedback(store, "interview-1", "user-1", []))

    assert result.success is False
    assert _feedback_docs(store) == []


def test_get_feedback_by_interview_id_returns_none_without_match(store):
    assert asyncio.run(fw.get_feedback_by_interview_id(store, "interview-1", "user-1")) is None


def test_get_feedback_by_interview_id_returns_first_of_duplicates(store):
    base = {"interviewId": "interview-1", "userId": "user-1", "createdAt": "2024-01-01T00:00:00+00:00"}
    first_id = store.add("feedback", {**base, **_scoring_payload(total_score=60)})
    store.add("feedback", {**base, **_scoring_payload(total_score=90)})
    store.add("feedback", {**base, "userId": "user-2", **_scoring_payload(total_score=10)})

    feedback = asyncio.run(fw.get_feedback_by_interview_id(store, "interview-1", "user-1"))

    assert feedback is not None
    assert feedback.id == first_id
    assert feedback.totalScore == 60


def test_get_feedback_by_interview_id_rejects_malformed_document(store):
    store.add("feedback", {"interviewId": "interview-1", "userId": "user-1", "totalScore": "lots"})

    assert asyncio.run(fw.get_feedback_by_interview_id(store, "interview-1", "user-1")) is None
