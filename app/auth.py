# app/auth.py
"""
JWT 인증 경계 - 토큰에서 사용자 id/role만 꺼낸다
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from app.config import settings

security = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    id: str
    role: str = "staff"


def create_access_token(user_id, role: str = "staff", expires_hours: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(hours=expires_hours or settings.access_token_expire_hours)
    payload = {"id": str(user_id), "role": role, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    # Authorization 헤더 우선, 없으면 token 쿠키
    token = credentials.credentials if credentials else request.cookies.get("token")
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(token)
    user_id = (payload or {}).get("id") or (payload or {}).get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentUser(id=str(user_id), role=payload.get("role", "staff"))
