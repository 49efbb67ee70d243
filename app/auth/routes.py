from time import time

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.auth.models import Token, UserLogin, UserSignUp
from app.auth.service import AuthService, EmailAlreadyRegistered
from app.db_models import User
from app.dependencies import CurrentUser
from app.logger import logger
from app.utils.db import get_session
from app.utils.responses import ResponseSchema

auth_router = APIRouter(tags=["Auth"])

_login_attempts: dict[str, list[float]] = {}
_LOGIN_WINDOW_SEC = 60
_LOGIN_MAX_ATTEMPTS = 5


@auth_router.post("/sign-up")
def register(body: UserSignUp, session: Session = Depends(get_session)):
    try:
        created = AuthService(session).create_user(body.email, body.username, body.password)
    except EmailAlreadyRegistered:
        return ResponseSchema.conflict(
            message="Email already registered", error="EMAIL_EXISTS"
        )
    logger.bind(user_id=str(created.id)).info("User registered")
    return ResponseSchema.created(
        data={"user_id": str(created.id)},
        message="Account created successfully",
    )


@auth_router.post("/login")
def login(
    body: UserLogin,
    request: Request,
    session: Session = Depends(get_session),
):
    # Rate limiting per IP
    ip = request.client.host if request.client else "unknown"
    now = time()
    window = [t for t in _login_attempts.get(ip, []) if now - t < _LOGIN_WINDOW_SEC]
    if len(window) >= _LOGIN_MAX_ATTEMPTS:
        logger.bind(ip=ip).warning("Login rate limit hit")
        return ResponseSchema.too_many_requests(
            message="Too many login attempts. Please try again later.",
            error="RATE_LIMITED",
        )
    window.append(now)
    _login_attempts[ip] = window

    auth_service = AuthService(session)
    user = auth_service.authenticate_user(body.email, body.password)
    if not user:
        return ResponseSchema.unauthorized(
            message="Invalid credentials", error="INVALID_CREDENTIALS"
        )

    access_token = auth_service.create_access_token(
        data={"sub": str(user.id), "email": user.email}
    )
    token = Token(access_token=access_token, user_id=str(user.id))
    return ResponseSchema.success(data=token.model_dump(), message="Login successful")


@auth_router.get("/me")
def read_me(current_user: CurrentUser, session: Session = Depends(get_session)):
    user = session.get(User, current_user.id)
    if not user:
        return ResponseSchema.not_found("User not found")
    return ResponseSchema.success(
        data={
            "user_id": str(user.id),
            "email": user.email,
            "username": user.username,
            "created_at": user.created_at.isoformat(),
        }
    )
