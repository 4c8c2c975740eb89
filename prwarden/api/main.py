from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from prwarden.api.routes import pr as pr_endpoints
from prwarden.api.routes import app as app_endpoints
from prwarden.api.routes import reviews as review_endpoints
from prwarden.api.handlers.exception_handlers import (
    review_error_handler,
    unprocessable_entity_exception_handler,
)
from prwarden.config.db import create_db_and_tables
from prwarden.review.errors import ReviewError
from prwarden.utils.logger import logger, setup_logger

setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Creates missing tables on startup; Alembic owns production schemas."""
    logger.info("Starting up...")
    create_db_and_tables()

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="PR Warden",
    description="Automated pull request review bot",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_exception_handler(RequestValidationError, unprocessable_entity_exception_handler)
app.add_exception_handler(ReviewError, review_error_handler)

app.include_router(app_endpoints.router, tags=["general"])
app.include_router(pr_endpoints.router, prefix="/api/prs", tags=["pull_requests"])
app.include_router(review_endpoints.router, prefix="/api/reviews", tags=["reviews"])
