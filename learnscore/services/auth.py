"""Authentication service - proxy header parsing, user lookup, caller identity."""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.config import settings
from learnscore.models.user import User

STUDENT_ROLE = "student"
TEACHER_ROLE = "teacher"
ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Caller:
    """Identity of the user on whose behalf an engine operation runs."""

    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role.lower() == ADMIN_ROLE

    def owns(self, owner_id: int) -> bool:
        """True if the caller is *owner_id* or an admin."""
        return self.id == owner_id or self.is_admin


def caller_from_user(user: User) -> Caller:
    return Caller(id=user.id, role=user.role)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Look up a registered user by email, ignoring case."""
    result = await db.execute(
        select(User).where(func.lower(User.email) == email.lower())
    )
    return result.scalar_one_or_none()


def get_auth_email(headers) -> str | None:
    """Extract the authenticated email from the proxy header."""
    email = headers.get(settings.AUTH_HEADER)
    if email:
        return email.strip().lower()
    return None
