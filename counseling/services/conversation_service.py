from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from counseling.models.base import utc_naive_now
from counseling.models.conversation import (
    Conversation,
    ConversationCreate,
    Message,
    MessageBase,
)


def is_visitor(conversation: Conversation, verify_email: str | None) -> bool:
    if not verify_email or not conversation.visitor_email:
        return False
    return verify_email.strip().lower() == conversation.visitor_email.strip().lower()


async def list_conversations(session: AsyncSession) -> list[Conversation]:
    result = await session.execute(
        select(Conversation).order_by(Conversation.updated_at.desc(), Conversation.id.desc())
    )
    return list(result.scalars().all())


async def get_conversation(session: AsyncSession, conversation_id: int) -> Conversation | None:
    return await session.get(Conversation, conversation_id)


async def get_conversation_by_email(session: AsyncSession, email: str) -> Conversation | None:
    result = await session.execute(
        select(Conversation).where(Conversation.visitor_email == email.strip())
    )
    return result.scalars().first()


async def create_conversation(
    session: AsyncSession, data: ConversationCreate
) -> tuple[Conversation, bool]:
    """Returns (conversation, created). One conversation per visitor email."""
    existing = await get_conversation_by_email(session, data.visitor_email)
    if existing:
        return existing, False
    conversation = Conversation.model_validate(data)
    session.add(conversation)
    await session.flush()
    await session.refresh(conversation)
    return conversation, True


async def list_messages(session: AsyncSession, conversation_id: int) -> list[Message]:
    result = await session.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at, Message.id)
    )
    return list(result.scalars().all())


async def add_message(
    session: AsyncSession,
    conversation: Conversation,
    data: MessageBase,
    is_from_admin: bool,
) -> Message:
    message = Message(
        conversation_id=conversation.id,
        sender_name=data.sender_name,
        sender_email=data.sender_email,
        content=data.content,
        is_from_admin=is_from_admin,
    )
    session.add(message)
    conversation.updated_at = utc_naive_now()
    session.add(conversation)
    await session.flush()
    await session.refresh(message)
    return message


async def mark_messages_read(session: AsyncSession, conversation_id: int) -> None:
    await session.execute(
        update(Message).where(Message.conversation_id == conversation_id).values(is_read=True)
    )
    await session.flush()


async def resolve_conversation(session: AsyncSession, conversation_id: int) -> Conversation | None:
    conversation = await session.get(Conversation, conversation_id)
    if not conversation:
        return None
    conversation.is_resolved = True
    conversation.updated_at = utc_naive_now()
    session.add(conversation)
    await session.flush()
    await session.refresh(conversation)
    return conversation
