"""Bearer token verification for SmartBill.

Identity is issued by the hosted auth provider as HS256 JWTs whose ``sub``
claim is the user id. This module only validates those tokens;
``create_access_token`` mints compatible tokens for tests and local tooling.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.app.core.errors import Unauthorized
from backend.app.core.settings import get_settings
from backend.app.schemas.user import CurrentUser

security_scheme = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, email: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    expire_delta = timedelta(
        minutes=expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    expire = datetime.now(timezone.utc) + expire_delta
    payload: Dict[str, Any] = {"sub": str(user_id), "exp": expire}
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def decode_access_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"], options={"verify_aud": False})
    except jwt.ExpiredSignatureError as exc:
        raise ValueError("Expired token") from exc
    except jwt.InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> CurrentUser:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except ValueError:
        raise Unauthorized("Could not validate credentials")
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Could not validate credentials")
    return CurrentUser(id=str(user_id), email=payload.get("email"))
