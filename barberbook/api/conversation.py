# barberbook/api/conversation.py
"""
Conversation buffer for the SMS flow.

The automation platform stores every inbound text, then polls
process-message with the returned id until the burst is final.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barberbook.api.dependencies import phone_query
from barberbook.config.database import get_db
from barberbook.config.settings import get_settings
from barberbook.schemas.conversation_dto import PhoneRequest, ProcessMessageRequest, StoreMessageRequest
from barberbook.services.client.client_service import ClientService
from barberbook.services.conversation.conversation_service import ConversationService
from barberbook.services.conversation.message_batch_service import MessageBatchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversation", tags=["Conversation"])


@router.post("/store-message")
def store_message(payload: StoreMessageRequest, db: Session = Depends(get_db)):
    session = ConversationService.get_or_create_session(db, payload.phone_number)
    message = ConversationService.add_message(
        db,
        session_id=session.id,
        role=payload.role,
        content=payload.message,
        metadata=payload.metadata,
    )

    # Rolling history on the client record is a convenience copy
    try:
        ClientService.append_history(db, payload.phone_number, payload.role.value, payload.message)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Could not append client history for {payload.phone_number}: {e}")

    return {
        "success": True,
        "messageId": str(message.id),
        "sessionId": str(session.id),
        "createdAt": message.created_at.isoformat(),
    }


@router.get("/history")
def get_history(
        phone_number: str = Depends(phone_query),
        limit: Optional[int] = Query(None, ge=1, le=100),
        db: Session = Depends(get_db)
):
    """Latest messages for a phone, oldest first"""
    limit = limit or get_settings().CONVERSATION_HISTORY_LIMIT
    messages = ConversationService.get_conversation_history(db, phone_number, limit)
    return {
        "success": True,
        "phoneNumber": phone_number,
        "messages": [message.to_dict() for message in messages],
    }


@router.post("/clear")
def clear_history(payload: PhoneRequest, db: Session = Depends(get_db)):
    deleted = ConversationService.clear_session(db, payload.phone_number)
    return {"success": True, "deleted": deleted}


@router.post("/process-message")
def process_message(payload: ProcessMessageRequest, db: Session = Depends(get_db)):
    """Poll whether a stored message closes its burst"""
    result = MessageBatchService.check_batch(db, payload.message_id, window_seconds=payload.window_seconds)
    return {"success": True, **result.to_response()}
