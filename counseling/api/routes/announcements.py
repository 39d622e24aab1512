from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from counseling.api.deps import get_session, require_admin
from counseling.models.announcement import (
    AnnouncementCreate,
    AnnouncementPublic,
    AnnouncementUpdate,
)
from counseling.services import announcement_service

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.get("", response_model=list[AnnouncementPublic])
async def list_announcements(
    session: AsyncSession = Depends(get_session),
) -> list[AnnouncementPublic]:
    return await announcement_service.list_announcements(session)


@router.get("/{announcement_id}", response_model=AnnouncementPublic)
async def get_announcement(
    announcement_id: int,
    session: AsyncSession = Depends(get_session),
) -> AnnouncementPublic:
    announcement = await announcement_service.get_announcement(session, announcement_id)
    if not announcement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found")
    return announcement


@router.post(
    "",
    response_model=AnnouncementPublic,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_announcement(
    body: AnnouncementCreate,
    session: AsyncSession = Depends(get_session),
) -> AnnouncementPublic:
    return await announcement_service.create_announcement(session, body)


@router.patch(
    "/{announcement_id}",
    response_model=AnnouncementPublic,
    dependencies=[Depends(require_admin)],
)
async def update_announcement(
    announcement_id: int,
    body: AnnouncementUpdate,
    session: AsyncSession = Depends(get_session),
) -> AnnouncementPublic:
    announcement = await announcement_service.update_announcement(session, announcement_id, body)
    if not announcement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found")
    return announcement


@router.delete(
    "/{announcement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_announcement(
    announcement_id: int,
    session: AsyncSession = Depends(get_session),
) -> None:
    if not await announcement_service.delete_announcement(session, announcement_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found")
