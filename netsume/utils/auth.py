import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from passlib.hash import pbkdf2_sha256
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from netsume.utils.context import AppContext, get_context

logger = logging.getLogger("uvicorn.error")

PBKDF2_ROUNDS = 260_000
MIN_PASSWORD_LENGTH = 6

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    uid: str
    jti: str
    expires_at: datetime

    def seconds_left(self) -> int:
        return int((self.expires_at - datetime.now(timezone.utc)).total_seconds())


def hash_password(password: str) -> str:
    return pbkdf2_sha256.using(rounds=PBKDF2_ROUNDS).hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pbkdf2_sha256.verify(password, password_hash)
    except ValueError:
        # Not a pbkdf2_sha256 hash
        return False


def create_access_token(uid: str, settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": uid,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session expired. Please sign in again.")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected access token: {e}")
        raise HTTPException(status_code=401, detail="Invalid session token.")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ctx: AppContext = Depends(get_context),
) -> CurrentUser:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated.")

    payload = decode_access_token(credentials.credentials, ctx.settings)
    jti = payload.get("jti")
    if not payload.get("sub") or not jti:
        raise HTTPException(status_code=401, detail="Invalid session token.")
    if ctx.cache.is_token_revoked(jti):
        raise HTTPException(status_code=401, detail="Session has been signed out.")

    return CurrentUser(
        uid=payload["sub"],
        jti=jti,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def is_admin(uid: str, settings) -> bool:
    return uid in settings.ADMIN_UIDS


def require_admin(
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> CurrentUser:
    if not is_admin(user.uid, ctx.settings):
        raise HTTPException(status_code=403, detail="Admin access required.")
    return user
