"""Record types passed between the workflows and the HTTP layer.

Document snapshots and model output are validated into these at the workflow
boundary; anything that does not fit is rejected instead of forwarded.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

FEEDBACK_CATEGORIES = (
    "Communication Skills",
    "Technical Knowledge",
    "Problem Solving",
    "Cultural Fit",
    "Confidence and Clarity",
)


class ActionResult(BaseModel):
    success: bool
    message: str | None = None
    feedbackId: str | None = None


class User(BaseModel):
    id: str
    name: str
    email: str


class Interview(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    userId: str
    createdAt: str
    finalized: bool = False
    role: str = ""
    level: str = ""
    type: str = ""
    techstack: list[str] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)
    coverImage: str | None = None


class TranscriptMessage(BaseModel):
    role: str
    content: str


class CategoryScore(BaseModel):
    name: str
    score: int | float = Field(ge=0, le=100)
    comment: str

    @field_validator("name")
    @classmethod
    def _known_category(cls, value: str) -> str:
        cleaned = value.strip()
        if cleaned not in FEEDBACK_CATEGORIES:
            raise ValueError(f"unknown category {value!r}")
        return cleaned


class ScoringResult(BaseModel):
    totalScore: int | float = Field(ge=0, le=100)
    categoryScores: list[CategoryScore]
    strengths: list[str]
    areasForImprovement: list[str]
    finalAssessment: str

    @field_validator("categoryScores")
    @classmethod
    def _closed_category_set(cls, value: list[CategoryScore]) -> list[CategoryScore]:
        by_name: dict[str, CategoryScore] = {}
        for item in value:
            if item.name in by_name:
                raise ValueError(f"duplicate category {item.name!r}")
            by_name[item.name] = item
        missing = [name for name in FEEDBACK_CATEGORIES if name not in by_name]
        if missing:
            raise ValueError(f"missing categories: {', '.join(missing)}")
        return [by_name[name] for name in FEEDBACK_CATEGORIES]


class Feedback(ScoringResult):
    id: str
    interviewId: str
    userId: str
    createdAt: str


def from_snapshot(model: type[BaseModel], doc_id: str, data: dict[str, Any]) -> Any:
    """Validate a stored document into ``model`` with the document id merged in."""
    return model.model_validate({**data, "id": doc_id})
