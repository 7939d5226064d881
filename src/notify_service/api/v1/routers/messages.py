from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from notify_service.api.deps import CurrentPrincipal, PublisherDep, UoWDep
from notify_service.api.v1.schemas.message import (
    InboxResponse,
    MarkAllReadResponse,
    MessageResponse,
    ReplyRequest,
    SendMessageRequest,
    StatusUpdateRequest,
)
from notify_service.application.dto.message import InboxFilterDTO, NewMessageDTO
from notify_service.infrastructure.db.repositories._cursor import encode_cursor
from notify_service.services import message_service

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.get("", response_model=InboxResponse)
async def list_inbox(
    principal: CurrentPrincipal,
    uow: UoWDep,
    channel: str | None = Query(None),
    status: str | None = Query(None),
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> InboxResponse:
    filters = InboxFilterDTO(
        channel=channel or principal.subject_id,
        status=status,
        cursor=cursor,
        limit=limit,
    )
    messages = await message_service.list_inbox(filters, principal, uow)
    unread = await message_service.count_unread(filters.channel, principal, uow)
    next_cursor = None
    if len(messages) == limit:
        last = messages[-1]
        next_cursor = encode_cursor(last.created_at, last.id)
    return InboxResponse(
        items=[MessageResponse.model_validate(m, from_attributes=True) for m in messages],
        next_cursor=next_cursor,
        unread_count=unread,
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
    channel: str | None = Query(None),
) -> MarkAllReadResponse:
    marked = await message_service.mark_all_read(
        channel or principal.subject_id, principal, uow, publisher,
    )
    return MarkAllReadResponse(marked_count=len(marked))


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageResponse:
    data = NewMessageDTO(
        recipient_id=body.recipient_id,
        subject=body.subject,
        content=body.content,
        message_type=body.message_type,
        priority=body.priority,
        related_booking_id=body.related_booking_id,
        related_service_type=body.related_service_type,
    )
    msg = await message_service.send_message(data, principal, uow, publisher)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.get("/{message_id}", response_model=MessageResponse)
async def get_message(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg = await message_service.get_message(message_id, principal, uow)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.get("/{message_id}/reply", response_model=MessageResponse)
async def get_latest_reply(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg = await message_service.find_latest_reply(message_id, principal, uow)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.post("/{message_id}/read", response_model=MessageResponse)
async def mark_read(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageResponse:
    msg = await message_service.mark_read(message_id, principal, uow, publisher)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.post("/{message_id}/archive", response_model=MessageResponse)
async def archive_message(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageResponse:
    msg = await message_service.archive_message(message_id, principal, uow, publisher)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.patch("/{message_id}/status", response_model=MessageResponse)
async def set_status(
    message_id: UUID,
    body: StatusUpdateRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageResponse:
    msg = await message_service.set_status(message_id, body.status, principal, uow, publisher)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.post("/{message_id}/reply", response_model=MessageResponse, status_code=201)
async def reply_to_message(
    message_id: UUID,
    body: ReplyRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageResponse:
    msg = await message_service.reply_to_message(
        message_id, body.content, principal, uow, publisher,
    )
    return MessageResponse.model_validate(msg, from_attributes=True)
