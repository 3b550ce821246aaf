"""Journal entry routes"""
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status

from lumin.api.dependencies import get_current_user_id, services
from lumin.api.middleware import limiter
from lumin.api.responses import success
from lumin.config import DEFAULT_RATE_LIMIT
from lumin.models.entry import Category, EntryCreate, EntryFilters, EntryUpdate, Mood
from lumin.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/entries", tags=["entries"])


@router.get("/today")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def get_today_entry(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.entry_service.get_today_entry(user_id))


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(DEFAULT_RATE_LIMIT)
async def create_entry(
    request: Request,
    body: EntryCreate,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    """
    Create today's entry

    Returns the entry with the rewards it triggered (XP, streak, badges,
    challenges, level). A second entry on the same day is a 409.
    """
    result = await container.entry_service.create_entry(user_id, body)
    return success(result, "Entry created successfully")


@router.get("")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def list_entries(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    mood: Optional[Mood] = None,
    category: Optional[Category] = None,
    tags: Optional[str] = Query(default=None, description="Comma-separated tags"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    filters = EntryFilters(
        mood=mood,
        category=category,
        tags=[t.strip().lower() for t in tags.split(",") if t.strip()] if tags else [],
        start_date=start_date,
        end_date=end_date,
    )
    result = await container.entry_service.list_entries(user_id, filters, page=page, limit=limit)
    return success(result)


@router.get("/{entry_id}")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def get_entry(
    request: Request,
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    return success(await container.entry_service.get_entry(user_id, entry_id))


@router.put("/{entry_id}")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def update_entry(
    request: Request,
    entry_id: str,
    body: EntryUpdate,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    result = await container.entry_service.update_entry(user_id, entry_id, body)
    return success(result, "Entry updated successfully")


@router.delete("/{entry_id}")
@limiter.limit(DEFAULT_RATE_LIMIT)
async def delete_entry(
    request: Request,
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(services)
):
    await container.entry_service.delete_entry(user_id, entry_id)
    return success(message="Entry deleted successfully")
