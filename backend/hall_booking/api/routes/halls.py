"""
Hall endpoints: listing (cached), details, the availability calendar,
and the two admin operations the booking flow depends on.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hall_booking.api.deps import get_today
from hall_booking.core.logging import get_logger
from hall_booking.core.security import Actor, require_admin
from hall_booking.db.session import get_db
from hall_booking.schemas.calendar import CalendarResponse
from hall_booking.schemas.hall import (
    HallAvailabilityUpdate, HallCreate, HallListResponse, HallResponse,
)
from hall_booking.services.cache_service import (
    get_cached_halls, invalidate_hall_cache, set_cached_halls,
)
from hall_booking.services.calendar_service import MAX_YEAR, MIN_YEAR, render_calendar
from hall_booking.services.hall_service import create_hall, get_hall, list_halls, set_availability

logger = get_logger(__name__)
router = APIRouter(prefix="/halls", tags=["Halls"])


@router.post("/", response_model=HallResponse, status_code=status.HTTP_201_CREATED)
async def create_hall_endpoint(
    hall_data: HallCreate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a hall. Admins only. The list cache is dropped once the hall is committed."""
    hall = await create_hall(db, hall_data, admin)
    await invalidate_hall_cache()
    return hall


@router.get("/", response_model=HallListResponse)
async def list_halls_endpoint(
    available_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """
    List halls with their booked dates.
    Cached in Redis; any booking write invalidates the cache.
    """
    cached = await get_cached_halls(available_only)
    if cached:
        logger.info("halls_list_cache_hit", available_only=available_only)
        cached["cached"] = True
        return HallListResponse(**cached)

    halls, total = await list_halls(db, available_only)
    response = HallListResponse(
        halls=[HallResponse.model_validate(h) for h in halls],
        total=total,
    )
    await set_cached_halls(available_only, response.model_dump(mode="json"))
    return response


@router.get("/{hall_id}", response_model=HallResponse)
async def get_hall_endpoint(hall_id: int, db: AsyncSession = Depends(get_db)):
    return await get_hall(db, hall_id)


@router.get("/{hall_id}/calendar", response_model=CalendarResponse)
async def hall_calendar(
    hall_id: int,
    year: Optional[int] = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
    month: Optional[int] = Query(None, ge=1, le=12),
    selected: Optional[date] = Query(None),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """
    Month grid (6 weeks, Sunday first) with each day classified as
    disabled, selected, today, or normal. Defaults to the current month.
    """
    if (year is None) != (month is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="year and month must be given together",
        )
    hall = await get_hall(db, hall_id)
    return render_calendar(
        hall_id=hall.id,
        is_available=hall.is_available,
        booked_dates=hall.booked_dates,
        today=today,
        year=year or today.year,
        month=month or today.month,
        selected=selected,
    )


@router.patch("/{hall_id}/availability", response_model=HallResponse)
async def set_hall_availability(
    hall_id: int,
    update: HallAvailabilityUpdate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Open or close a hall for new bookings. Admins only."""
    hall = await set_availability(db, hall_id, update.is_available, admin)
    await invalidate_hall_cache()
    return hall
