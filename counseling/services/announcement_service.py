from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from counseling.models.announcement import Announcement, AnnouncementCreate, AnnouncementUpdate
from counseling.models.base import utc_naive_now


async def list_announcements(session: AsyncSession) -> list[Announcement]:
    """Pinned first, then newest first."""
    result = await session.execute(
        select(Announcement).order_by(
            Announcement.is_pinned.desc(),
            Announcement.created_at.desc(),
            Announcement.id.desc(),
        )
    )
    return list(result.scalars().all())


async def get_announcement(session: AsyncSession, announcement_id: int) -> Announcement | None:
    return await session.get(Announcement, announcement_id)


async def create_announcement(session: AsyncSession, data: AnnouncementCreate) -> Announcement:
    announcement = Announcement.model_validate(data)
    session.add(announcement)
    await session.flush()
    await session.refresh(announcement)
    return announcement


async def update_announcement(
    session: AsyncSession, announcement_id: int, data: AnnouncementUpdate
) -> Announcement | None:
    announcement = await session.get(Announcement, announcement_id)
    if not announcement:
        return None
    announcement.sqlmodel_update(data.model_dump(exclude_unset=True, exclude_none=True))
    announcement.updated_at = utc_naive_now()
    session.add(announcement)
    await session.flush()
    await session.refresh(announcement)
    return announcement


async def delete_announcement(session: AsyncSession, announcement_id: int) -> bool:
    announcement = await session.get(Announcement, announcement_id)
    if not announcement:
        return False
    await session.delete(announcement)
    await session.flush()
    return True
