from datetime import datetime

from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from counseling.models.base import utc_naive_now


class ConversationBase(SQLModel):
    visitor_name: str = Field(min_length=1)
    visitor_email: str = Field(unique=True, index=True)
    subject: str | None = None


class Conversation(ConversationBase, table=True):
    __tablename__ = "conversations"
    id: int | None = Field(default=None, primary_key=True)
    is_resolved: bool = False
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class ConversationCreate(ConversationBase):
    visitor_email: EmailStr


class MessageBase(SQLModel):
    sender_name: str = Field(min_length=1)
    sender_email: str | None = None
    content: str = Field(min_length=1)


class Message(MessageBase, table=True):
    __tablename__ = "messages"
    id: int | None = Field(default=None, primary_key=True)
    conversation_id: int = Field(foreign_key="conversations.id", index=True)
    is_from_admin: bool = False
    is_read: bool = False
    created_at: datetime = Field(default_factory=utc_naive_now)


class MessagePublic(MessageBase):
    id: int
    conversation_id: int
    is_from_admin: bool
    is_read: bool
    created_at: datetime


class ConversationPublic(ConversationBase):
    id: int
    is_resolved: bool
    created_at: datetime
    updated_at: datetime


class ConversationWithMessages(ConversationPublic):
    messages: list[MessagePublic] = []
