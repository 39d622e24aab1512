from datetime import datetime

from sqlmodel import Field, SQLModel

from counseling.models.base import utc_naive_now


class AnnouncementBase(SQLModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    is_pinned: bool = False


class Announcement(AnnouncementBase, table=True):
    __tablename__ = "announcements"
    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class AnnouncementCreate(AnnouncementBase):
    pass


class AnnouncementUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1)
    content: str | None = Field(default=None, min_length=1)
    is_pinned: bool | None = None


class AnnouncementPublic(AnnouncementBase):
    id: int
    created_at: datetime
    updated_at: datetime
