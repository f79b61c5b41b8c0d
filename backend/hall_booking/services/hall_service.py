"""
Hall service: create, read, list, and availability toggling.
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from hall_booking.core.security import Actor
from hall_booking.models.hall import Hall
from hall_booking.schemas.hall import HallCreate
from hall_booking.core.logging import get_logger

logger = get_logger(__name__)


async def create_hall(db: AsyncSession, hall_data: HallCreate, actor: Actor) -> Hall:
    """Create a hall with an empty booked-date set."""
    hall = Hall(
        name=hall_data.name,
        description=hall_data.description,
        capacity=hall_data.capacity,
        equipment_included=list(hall_data.equipment_included),
        images=list(hall_data.images),
        hourly_rate=hall_data.hourly_rate,
        is_available=hall_data.is_available,
        location=hall_data.location,
        rules=hall_data.rules,
    )
    db.add(hall)
    await db.flush()
    await db.refresh(hall)
    await db.commit()

    logger.info("hall_created", hall_id=hall.id, name=hall.name, admin_id=actor.id)
    return hall


async def get_hall(db: AsyncSession, hall_id: int) -> Hall:
    """
    Load a hall with its booked dates as they are in the store right now.
    populate_existing makes a hall already in the session re-read its dates.
    """
    result = await db.execute(
        select(Hall)
        .where(Hall.id == hall_id)
        .execution_options(populate_existing=True)
    )
    hall = result.scalar_one_or_none()

    if not hall:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Hall {hall_id} not found",
        )
    return hall


async def list_halls(db: AsyncSession, available_only: bool = False) -> tuple[list[Hall], int]:
    query = select(Hall)
    if available_only:
        query = query.where(Hall.is_available.is_(True))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()

    result = await db.execute(
        query.order_by(Hall.name.asc()).execution_options(populate_existing=True)
    )
    return list(result.scalars().all()), total



async def set_availability(db: AsyncSession, hall_id: int, is_available: bool, actor: Actor) -> Hall:
    hall = await get_hall(db, hall_id)
    previous = hall.is_available
    hall.is_available = is_available
    await db.flush()
    await db.refresh(hall)
    await db.commit()

    logger.info(
        "hall_availability_changed",
        hall_id=hall.id,
        previous=previous,
        is_available=is_available,
        admin_id=actor.id,
    )
    return hall
