from enum import Enum

from pydantic import BaseModel, Field


class SenderType(str, Enum):
    admin = "admin"
    visitor = "visitor"


class SendMessageRequest(BaseModel):
    sender_type: SenderType = SenderType.visitor
    sender_name: str = Field(min_length=1)
    sender_email: str | None = None
    content: str = Field(min_length=1)
    verify_email: str | None = None
