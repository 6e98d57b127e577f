# Filename: cloudnest/routers/auth.py
import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..auth import (
    ACCESS,
    ACTIVATION,
    RESET,
    create_token,
    decode_token,
    get_password_hash,
    get_user_by_email,
    verify_password,
)
from ..config import settings
from ..db import get_session
from ..dependencies import get_mailer
from ..mailer import Mailer
from ..models import User
from ..schemas import (
    ForgotPasswordRequest,
    LoginOut,
    LoginRequest,
    MessageOut,
    RegisterRequest,
    ResetPasswordRequest,
    UserOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, session: Session = Depends(get_session), mailer: Mailer = Depends(get_mailer)):
    email = data.email.lower()
    if get_user_by_email(session, email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    user = User(
        first_name=data.first_name,
        last_name=data.last_name,
        email=email,
        hashed_password=get_password_hash(data.password),
        is_active=False,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")
    session.refresh(user)
    logger.info("User registered: ID=%d", user.id)

    token = create_token(user.id, ACTIVATION)
    mailer.send_activation(email, user.first_name, f"{settings.client_url}/verify/{token}")

    return MessageOut(message="Registration successful. Please check your email to activate.")


@router.get("/verify/{token}")
def verify_account(token: str, session: Session = Depends(get_session)):
    login_url = f"{settings.client_url}/login"
    try:
        user_id = decode_token(token, ACTIVATION)
    except JWTError:
        return RedirectResponse(f"{login_url}?error=invalid-link")

    user = session.get(User, user_id)
    if user is None:
        return RedirectResponse(f"{login_url}?error=user-not-found")

    if not user.is_active:
        user.is_active = True
        session.add(user)
        session.commit()
        logger.info("User activated: ID=%d", user.id)
    return RedirectResponse(f"{login_url}?success=activated")


@router.post("/login", response_model=LoginOut)
def login(data: LoginRequest, session: Session = Depends(get_session)):
    user = get_user_by_email(session, data.email)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Please activate your account first.")
    if not verify_password(data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = create_token(user.id, ACCESS)
    return LoginOut(message="Login successful", token=token, user=UserOut.model_validate(user))


@router.post("/forgot-password", response_model=MessageOut)
def forgot_password(data: ForgotPasswordRequest, session: Session = Depends(get_session), mailer: Mailer = Depends(get_mailer)):
    user = get_user_by_email(session, data.email)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    token = create_token(user.id, RESET)
    user.reset_password_token = token
    user.reset_password_expires = datetime.now(timezone.utc) + timedelta(minutes=settings.reset_token_expire_minutes)
    session.add(user)
    session.commit()

    mailer.send_password_reset(user.email, f"{settings.client_url}/reset-password/{token}")
    return MessageOut(message="Password reset link sent to your email")


@router.post("/reset-password/{token}", response_model=MessageOut)
def reset_password(token: str, data: ResetPasswordRequest, session: Session = Depends(get_session)):
    invalid = HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")
    try:
        user_id = decode_token(token, RESET)
    except JWTError:
        raise invalid

    statement = select(User).where(
        User.id == user_id,
        User.reset_password_token == token,
        User.reset_password_expires > datetime.now(timezone.utc),
    )
    user = session.exec(statement).first()
    if not user:
        raise invalid

    user.hashed_password = get_password_hash(data.password)
    user.reset_password_token = None
    user.reset_password_expires = None
    session.add(user)
    session.commit()
    logger.info("Password reset: ID=%d", user.id)
    return MessageOut(message="Password reset successful! You can now login.")
