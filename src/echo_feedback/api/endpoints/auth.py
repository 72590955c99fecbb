"""Authentication endpoints: registration, login and account lookup."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, status

from echo_feedback.api.dependencies import SessionDep
from echo_feedback.core.security import create_access_token
from echo_feedback.schemas import (
    Envelope,
    LoginData,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from echo_feedback.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post(
    "/register",
    response_model=Envelope[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(payload: RegisterRequest, db: SessionDep) -> Envelope[UserResponse]:
    """Create a new account."""
    user = auth_service.register_user(
        db,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
    )
    logger.info("Registered user %s", user.user_id)
    return Envelope(
        data=UserResponse.model_validate(user),
        message="Registration successful",
    )


@router.post("/login", response_model=Envelope[LoginData])
async def login(payload: LoginRequest, db: SessionDep) -> Envelope[LoginData]:
    """Exchange credentials for a bearer access token."""
    user = auth_service.authenticate(db, payload.email, payload.password)
    token = create_access_token(user.user_id, is_admin=user.is_admin)
    return Envelope(
        data=LoginData(user=UserResponse.model_validate(user), access_token=token),
        message="Login successful",
    )


@router.get("/user", response_model=Envelope[UserResponse])
async def get_user_by_email(
    db: SessionDep,
    email: str | None = Query(None),
) -> Envelope[UserResponse]:
    """Look up an account by email address."""
    user = auth_service.get_user_by_email(db, email)
    return Envelope(data=UserResponse.model_validate(user))
