import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from counseling.api.deps import get_is_admin, get_session, require_admin
from counseling.api.errors import conflict_exception
from counseling.api.schemas.conversation import SendMessageRequest, SenderType
from counseling.models.conversation import (
    Conversation,
    ConversationCreate,
    ConversationPublic,
    ConversationWithMessages,
    MessageBase,
    MessagePublic,
)
from counseling.services import conversation_service
from counseling.services.availability import ConflictReason

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/conversations", tags=["conversations"])


async def _load(session: AsyncSession, conversation_id: int) -> Conversation:
    conversation = await conversation_service.get_conversation(session, conversation_id)
    if not conversation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation


async def _with_messages(session: AsyncSession, conversation: Conversation) -> ConversationWithMessages:
    messages = await conversation_service.list_messages(session, conversation.id)
    return ConversationWithMessages(
        **ConversationPublic.model_validate(conversation).model_dump(),
        messages=[MessagePublic.model_validate(m) for m in messages],
    )


@router.get("", response_model=list[ConversationPublic], dependencies=[Depends(require_admin)])
async def list_conversations(
    session: AsyncSession = Depends(get_session),
) -> list[ConversationPublic]:
    return await conversation_service.list_conversations(session)


@router.post("", response_model=ConversationPublic, status_code=status.HTTP_201_CREATED)
async def start_conversation(
    body: ConversationCreate,
    session: AsyncSession = Depends(get_session),
) -> ConversationPublic:
    conversation, created = await conversation_service.create_conversation(session, body)
    if not created:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "A conversation already exists for this email",
                "existing_conversation_id": conversation.id,
            },
        )
    logger.info("Conversation %s started by %s", conversation.id, conversation.visitor_email)
    return conversation


@router.get("/by-email/{email}", response_model=ConversationWithMessages)
async def get_conversation_by_email(
    email: str,
    session: AsyncSession = Depends(get_session),
) -> ConversationWithMessages:
    conversation = await conversation_service.get_conversation_by_email(session, email)
    if not conversation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No conversation found for this email",
        )
    return await _with_messages(session, conversation)


@router.get("/{conversation_id}", response_model=ConversationWithMessages)
async def get_conversation(
    conversation_id: int,
    verify_email: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    is_admin: bool = Depends(get_is_admin),
) -> ConversationWithMessages:
    conversation = await _load(session, conversation_id)
    if not is_admin and not conversation_service.is_visitor(conversation, verify_email):
        raise conflict_exception(ConflictReason.unauthorized)
    return await _with_messages(session, conversation)


@router.post(
    "/{conversation_id}/messages",
    response_model=MessagePublic,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: int,
    body: SendMessageRequest,
    session: AsyncSession = Depends(get_session),
    is_admin: bool = Depends(get_is_admin),
) -> MessagePublic:
    conversation = await _load(session, conversation_id)
    if body.sender_type == SenderType.admin and not is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to send messages as the counselor",
        )
    if (
        body.sender_type == SenderType.visitor
        and not is_admin
        and not conversation_service.is_visitor(conversation, body.verify_email)
    ):
        raise conflict_exception(ConflictReason.unauthorized)
    data = MessageBase(
        sender_name=body.sender_name,
        sender_email=body.sender_email,
        content=body.content,
    )
    return await conversation_service.add_message(
        session, conversation, data, is_from_admin=body.sender_type == SenderType.admin
    )


@router.post("/{conversation_id}/read", dependencies=[Depends(require_admin)])
async def mark_read(
    conversation_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    await _load(session, conversation_id)
    await conversation_service.mark_messages_read(session, conversation_id)
    return {"success": True}


@router.post(
    "/{conversation_id}/resolve",
    response_model=ConversationPublic,
    dependencies=[Depends(require_admin)],
)
async def resolve_conversation(
    conversation_id: int,
    session: AsyncSession = Depends(get_session),
) -> ConversationPublic:
    conversation = await conversation_service.resolve_conversation(session, conversation_id)
    if not conversation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation
