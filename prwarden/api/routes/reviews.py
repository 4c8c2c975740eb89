from fastapi import APIRouter, BackgroundTasks, Depends, Query

from prwarden.api.security import get_api_key
from prwarden.controllers.review_controller import ReviewController
from prwarden.events.dispatcher import bg_tasks_cv

router = APIRouter(dependencies=[Depends(get_api_key)])


# Declared before /{pr_number} so the literal paths win.
@router.get("/stats")
async def review_stats(days: int = Query(30, ge=1)):
    return ReviewController.stats(days)


@router.get("/pending")
async def pending_reviews(limit: int = Query(10, ge=1, le=100)):
    return ReviewController.pending(limit)


@router.get("/{pr_number}")
async def get_review(pr_number: int, owner: str = Query(...), repo: str = Query(...)):
    return ReviewController.show(owner, repo, pr_number)


@router.post("/{pr_number}/retry")
async def retry_review(
    pr_number: int,
    background_tasks: BackgroundTasks,
    owner: str = Query(...),
    repo: str = Query(...),
):
    bg_tasks_cv.set(background_tasks)
    return ReviewController.retry(owner, repo, pr_number)
