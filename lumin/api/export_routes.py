"""Data export routes: entries and goals as JSON or CSV downloads"""
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from lumin.api.dependencies import get_current_user_id, services
from lumin.api.middleware import limiter
from lumin.api.responses import success
from lumin.config import DEFAULT_RATE_LIMIT
from lumin.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/export", tags=["export"])


def _csv_download(content: str, name: str, container: ServiceContainer) -> StreamingResponse:
    stamp = container.clock.now().strftime("%Y%m%d-%H%M%S")
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="lumin-{name}-{stamp}.csv"'},
    )


@router.get("/entries/json")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def export_entries_json(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.export_service.export_entries(user_id))


@router.get("/entries/csv")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def export_entries_csv(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    content = await container.export_service.entries_csv(user_id)
    return _csv_download(content, "entries", container)


@router.get("/goals/json")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def export_goals_json(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.export_service.export_goals(user_id))


@router.get("/goals/csv")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def export_goals_csv(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    content = await container.export_service.goals_csv(user_id)
    return _csv_download(content, "goals", container)


@router.get("/all")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def export_all(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    """Profile summary with every entry and goal in one document"""
    return success(await container.export_service.export_all(user_id))
