"""JWT helpers and requester dependencies."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from epr.core.config import get_settings
from epr.domain.access import Requester, Role
from epr.infrastructure.database.repositories.user_repository import SqlUserRepository
from epr.interfaces.http.deps.database import get_db_session

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    user_id: str
    role: str


def create_access_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire_delta = expires_delta or timedelta(minutes=settings.security.access_token_expire_minutes)
    payload = {
        "sub": user_id,
        "role": role,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc

    user_id = payload.get("sub")
    role = payload.get("role")
    if not all([user_id, role]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")
    return TokenData(user_id=user_id, role=role)


async def _load_requester(token: str, db: AsyncSession) -> Requester:
    token_data = decode_access_token(token)
    user = await SqlUserRepository(db).get_by_id(token_data.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account not found or disabled")
    # the stored role wins over the token claim
    return Requester(id=user.id, role=Role.parse(user.role), organization_name=user.organization_name)


async def get_current_requester(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db_session),
) -> Requester:
    return await _load_requester(credentials.credentials, db)


async def get_optional_requester(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[Requester]:
    if credentials is None:
        return None
    return await _load_requester(credentials.credentials, db)
