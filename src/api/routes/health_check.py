import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.depends import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health():
    """Liveness, does not touch the database"""
    return {"ok": True, "service": ApplicationConfig.SERVICE_NAME}


@router.get("/db-health", status_code=status.HTTP_200_OK)
async def db_health(session: AsyncSession = Depends(get_session)):
    """Readiness, runs SELECT 1 against the database"""
    try:
        result = await session.execute(text("SELECT 1"))
        return {"ok": True, "db": result.scalar_one() == 1}
    except Exception as exc:
        logger.error(f"Database health check failed: {type(exc).__name__}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "db": False},
        )
