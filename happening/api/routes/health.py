from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict

from happening.db.session import get_session

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=Dict[str, str])
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    Liveness probe.

    Runs a trivial query so an unreachable database surfaces as a 500
    rather than a healthy answer.
    """
    await session.execute(text("SELECT 1"))
    return {"status": "healthy"}
