from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from prwarden.config.db import get_engine
from prwarden.utils.logger import logger

router = APIRouter()


@router.get("/")
async def welcome():
    return {"message": "The PR Warden API is live!"}


@router.get("/health")
async def health():
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503, content={"status": "unhealthy", "database": "unavailable"}
        )
    return {"status": "healthy", "database": "ok"}
