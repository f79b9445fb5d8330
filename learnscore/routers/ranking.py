"""Student ranking API routes."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.database import get_db
from learnscore.dependencies import get_current_user
from learnscore.models.user import User
from learnscore.services.ranking import get_student_ranking

router = APIRouter(prefix="/api/ranking", tags=["ranking"])


class RankingItem(BaseModel):
    id: int
    name: str
    email: str
    stars: int


@router.get("/students", response_model=list[RankingItem])
async def student_ranking(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Return all students ordered by stars."""
    entries = await get_student_ranking(db)
    return [RankingItem(**entry.to_dict()) for entry in entries]
