# Filename: cloudnest/auth.py
from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from fastapi import Depends, HTTPException, status, Request
from typing import Optional
from sqlmodel import Session, select

from .config import settings
from .models import User
from .db import get_session

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = settings.jwt_algorithm
SECRET_KEY = settings.secret_key

# token kinds, carried in the "type" claim
ACCESS = "access"
ACTIVATION = "activation"
RESET = "reset"

_LIFETIMES = {
    ACCESS: settings.access_token_expire_minutes,
    ACTIVATION: settings.activation_token_expire_minutes,
    RESET: settings.reset_token_expire_minutes,
}


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_token(user_id: int, token_type: str = ACCESS, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta else timedelta(minutes=_LIFETIMES[token_type]))
    to_encode = {
        "sub": str(user_id),
        "type": token_type,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str, token_type: str) -> int:
    """Return the user id carried by ``token``.

    Raises JWTError if the token is malformed, expired, or of another kind.
    """
    payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    if payload.get("type") != token_type:
        raise JWTError("Unexpected token type")
    subject = payload.get("sub")
    if not subject or not str(subject).isdigit():
        raise JWTError("Token has no subject")
    return int(subject)


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    statement = select(User).where(User.email == email.strip().lower())
    return session.exec(statement).first()


def _get_token_from_header_or_cookie(request: Request) -> Optional[str]:
    """
    If Authorization header present: return token (raw token or "Bearer ...")
    Else if cookie "access_token" present: return that (we support both raw token or "Bearer ...")
    """
    auth_header = request.headers.get("authorization")
    if auth_header:
        return auth_header
    cookie = request.cookies.get("access_token")
    if cookie:
        return cookie
    return None


def get_current_user(request: Request, session: Session = Depends(get_session)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token_raw = _get_token_from_header_or_cookie(request)
    if not token_raw:
        raise credentials_exception

    # token may be "Bearer <token>" or just "<token>"
    if token_raw.lower().startswith("bearer "):
        token = token_raw.split(" ", 1)[1]
    else:
        token = token_raw

    try:
        user_id = decode_token(token, ACCESS)
    except JWTError:
        raise credentials_exception

    user = session.get(User, user_id)
    if user is None or not user.is_active:
        raise credentials_exception
    return user
