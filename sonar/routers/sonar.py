"""
Sonar API endpoints: briefs, results and the search trigger.
"""
from typing import List, Optional
from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
import structlog

from ..auth import get_current_user, get_store
from ..config import settings
from ..database import User
from ..errors import BadRequestError, NotFoundError, RateLimitError
from ..models import (
    BriefCreate, BriefCriteria, BriefOut, BriefUpdate, ResultOut,
    ResultStatus, ResultStatusUpdate, SearchRequest, SearchResponse,
)
from ..pipeline import SonarPipeline
from ..rate_limit import FixedWindowRateLimiter, rate_limiter
from ..store import SonarStore

router = APIRouter()
logger = structlog.get_logger(__name__)


def get_rate_limiter() -> FixedWindowRateLimiter:
    return rate_limiter


def get_pipeline(store: SonarStore = Depends(get_store)) -> SonarPipeline:
    """Dependency building the production pipeline for this request."""
    return SonarPipeline.from_settings(store, settings)


def _brief_out(row) -> BriefOut:
    brief, total_results, new_results = row
    return BriefOut.model_validate(brief).model_copy(
        update={"total_results": total_results or 0, "new_results": new_results or 0}
    )


@router.post("/search")
async def run_search(
    payload: Optional[SearchRequest] = Body(None),
    user: User = Depends(get_current_user),
    store: SonarStore = Depends(get_store),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    pipeline: SonarPipeline = Depends(get_pipeline),
):
    """
    Search the web for candidates matching a brief.

    - **briefId**: Brief to search for (required)

    Returns the number of new candidates saved and profiles examined.
    """
    limit = limiter.check(
        f"sonar:search:{user.id}",
        settings.search_rate_limit,
        settings.search_rate_window_seconds,
    )
    if not limit.success:
        raise RateLimitError(retry_after=limit.retry_after(limiter.now()))

    brief_id = payload.brief_id if payload else None
    if not brief_id:
        raise BadRequestError("Brief ID required")

    brief = store.read_brief(brief_id, user.id)
    if not brief:
        raise NotFoundError("Brief not found")

    try:
        summary = await pipeline.run(brief.id, BriefCriteria.model_validate(brief))
    except Exception:
        logger.exception("sonar.search_failed", brief_id=brief_id)
        return JSONResponse(status_code=500, content={"error": "Search failed. Please try again."})

    return SearchResponse(
        new_candidates=summary.new_candidates_persisted,
        searched_profiles=summary.total_identifiers_examined,
    ).model_dump(by_alias=True)


@router.post("/briefs", status_code=201, response_model=BriefOut)
async def create_brief(
    brief: BriefCreate,
    user: User = Depends(get_current_user),
    store: SonarStore = Depends(get_store),
):
    """Create a new brief."""
    fields = brief.model_dump()
    fields["search_frequency"] = brief.search_frequency.value
    created = store.create_brief(user.id, fields)
    return _brief_out((created, 0, 0))


@router.get("/briefs", response_model=List[BriefOut])
async def list_briefs(
    user: User = Depends(get_current_user),
    store: SonarStore = Depends(get_store),
):
    """List the caller's briefs with result counts."""
    return [_brief_out(row) for row in store.list_briefs(user.id)]


@router.get("/briefs/{brief_id}", response_model=BriefOut)
async def get_brief(
    brief_id: str,
    user: User = Depends(get_current_user),
    store: SonarStore = Depends(get_store),
):
    row = store.get_brief_with_stats(brief_id, user.id)
    if not row:
        raise NotFoundError("Brief not found")
    return _brief_out(row)


@router.patch("/briefs/{brief_id}", response_model=BriefOut)
async def update_brief(
    brief_id: str,
    changes: BriefUpdate,
    user: User = Depends(get_current_user),
    store: SonarStore = Depends(get_store),
):
    """Update only the fields present in the request body."""
    fields = changes.model_dump(exclude_unset=True)
    if fields.get("search_frequency") is not None:
        fields["search_frequency"] = changes.search_frequency.value

    if not store.update_brief(brief_id, user.id, fields):
        raise NotFoundError("Brief not found")
    return _brief_out(store.get_brief_with_stats(brief_id, user.id))


@router.delete("/briefs/{brief_id}")
async def delete_brief(
    brief_id: str,
    user: User = Depends(get_current_user),
    store: SonarStore = Depends(get_store),
):
    if not store.delete_brief(brief_id, user.id):
        raise NotFoundError("Brief not found")
    return {"success": True}


@router.get("/briefs/{brief_id}/results", response_model=List[ResultOut])
async def list_results(
    brief_id: str,
    status: Optional[ResultStatus] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    store: SonarStore = Depends(get_store),
):
    """List results for a brief, best match first."""
    if not store.read_brief(brief_id, user.id):
        raise NotFoundError("Brief not found")
    return store.list_results(
        brief_id,
        status=status.value if status else None,
        limit=limit,
        offset=offset,
    )


@router.patch("/results/{result_id}", response_model=ResultOut)
async def update_result_status(
    result_id: str,
    update: ResultStatusUpdate,
    user: User = Depends(get_current_user),
    store: SonarStore = Depends(get_store),
):
    """Set the review status (and optional notes) of a result."""
    result = store.get_owned_result(result_id, user.id)
    if not result:
        raise NotFoundError("Result not found")
    return store.update_result_status(result, update.status, update.notes)
