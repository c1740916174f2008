"""
Stats feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.database.engine import get_db
from shelterhub.features.shelters.models import Shelter
from shelterhub.features.users.models import User


router = APIRouter(tags=["stats"])


class GeneralStats(BaseModel):
    users_count: int
    shelters_count: int


@router.get("/general", response_model=GeneralStats)
async def get_general_stats(
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Number of registered users and shelters."""
    users_count = await db.scalar(select(func.count()).select_from(User))
    shelters_count = await db.scalar(select(func.count()).select_from(Shelter))
    return GeneralStats(users_count=users_count or 0, shelters_count=shelters_count or 0)
