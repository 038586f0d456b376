"""Auth API router — sign up, sign in, sign out and current user."""

import re

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field, field_validator

from ..clients.identity import IdentityGateway
from ..db.documents import DocumentStore
from ..engines.auth.workflow import sign_in, sign_out, sign_up
from ..models import ActionResult, User
from .deps import document_store, identity_gateway, require_user

router = APIRouter(prefix="/auth", tags=["auth"])

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalise_email(value: str) -> str:
    cleaned = value.strip()
    if not _EMAIL_RE.match(cleaned):
        raise ValueError("invalid email address")
    return cleaned


class SignUpRequest(BaseModel):
    uid: str = Field(min_length=1)
    name: str = Field(min_length=3)
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _normalise_email(value)


class SignInRequest(BaseModel):
    email: str
    idToken: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _normalise_email(value)


@router.post("/sign-up", response_model=ActionResult, response_model_exclude_none=True)
async def sign_up_route(payload: SignUpRequest, store: DocumentStore = Depends(document_store)):
    return await sign_up(store, payload.uid, payload.name.strip(), payload.email)


@router.post("/sign-in", response_model=ActionResult, response_model_exclude_none=True)
async def sign_in_route(
    payload: SignInRequest,
    response: Response,
    store: DocumentStore = Depends(document_store),
    gateway: IdentityGateway = Depends(identity_gateway),
):
    return await sign_in(store, gateway, response, payload.email, payload.idToken)


@router.post("/sign-out", response_model=ActionResult, response_model_exclude_none=True)
def sign_out_route(response: Response):
    return sign_out(response)


@router.get("/me", response_model=User)
async def me(user: User = Depends(require_user)):
    return user
