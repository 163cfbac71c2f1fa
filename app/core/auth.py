# app/core/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.database import get_db
from app.models.user import User
from app.config import settings
from app.utils.dates import as_utc, utcnow

reusable_oauth2 = HTTPBearer()

ADMIN_ROLES = {"admin", "super_admin"}


def is_suspended(user: User) -> bool:
    if not user.suspended:
        return False
    # suspended_until = None means until an admin lifts it
    return user.suspended_until is None or as_utc(user.suspended_until) > utcnow()


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        user_id: str = payload.get("sub")
        if user_id is None or payload.get("type") != "access":
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        raise credentials_exception
    if is_suspended(user):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Account suspended")
    return user


async def get_current_admin(
    current_user = Depends(get_current_user)
):
    if current_user.role not in ADMIN_ROLES:
        raise HTTPException(403, "Admin access required")
    return current_user
