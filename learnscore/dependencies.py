"""FastAPI dependencies for route handlers."""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.database import get_db
from learnscore.models.user import User
from learnscore.services.auth import (
    ADMIN_ROLE,
    STUDENT_ROLE,
    TEACHER_ROLE,
    Caller,
    caller_from_user,
    get_user_by_email,
)


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    """Require an authenticated and registered user."""
    email = getattr(request.state, "user_email", None)
    if not email:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = await get_user_by_email(db, email)
    if user is None:
        raise HTTPException(status_code=403, detail="Not registered")
    return user


async def require_student(user: User = Depends(get_current_user)) -> User:
    """Require student or admin role."""
    if user.role.lower() not in (STUDENT_ROLE, ADMIN_ROLE):
        raise HTTPException(status_code=403, detail="Student access required")
    return user


async def require_teacher(user: User = Depends(get_current_user)) -> User:
    """Require teacher or admin role."""
    if user.role.lower() not in (TEACHER_ROLE, ADMIN_ROLE):
        raise HTTPException(status_code=403, detail="Teacher access required")
    return user


async def get_teacher_caller(user: User = Depends(require_teacher)) -> Caller:
    return caller_from_user(user)
