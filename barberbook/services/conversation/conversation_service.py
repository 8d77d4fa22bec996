# ============================================================================
# barberbook/services/conversation/conversation_service.py
# ============================================================================
"""Service for managing conversation sessions and their messages"""
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, List, Union

from sqlalchemy.orm import Session

from barberbook.core.errors import NotFoundError
from barberbook.models.conversation import ConversationSession, ConversationMessage

logger = logging.getLogger(__name__)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ConversationService:
    """Handles conversation management operations"""

    @staticmethod
    def get_session(db: Session, phone_number: str) -> Optional[ConversationSession]:
        return db.query(ConversationSession).filter(
            ConversationSession.phone_number == phone_number
        ).first()

    @staticmethod
    def get_or_create_session(db: Session, phone_number: str) -> ConversationSession:
        """Find the phone's session or create one, marking it active now"""
        session = ConversationService.get_session(db, phone_number)

        if not session:
            session = ConversationSession(id=uuid.uuid4(), phone_number=phone_number)
            db.add(session)
            logger.info(f"Created conversation session for {phone_number}")

        session.last_active = datetime.now(timezone.utc)
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def add_message(
            db: Session,
            session_id: uuid.UUID,
            role: MessageRole,
            content: str,
            metadata: Optional[Dict] = None
    ) -> ConversationMessage:
        message = ConversationMessage(
            id=uuid.uuid4(),
            session_id=session_id,
            role=MessageRole(role).value,
            content=content,
            message_metadata=metadata,
            created_at=datetime.now(timezone.utc),
        )
        db.add(message)
        db.commit()
        db.refresh(message)
        return message

    @staticmethod
    def get_message(db: Session, message_id: Union[str, uuid.UUID]) -> ConversationMessage:
        if isinstance(message_id, str):
            try:
                message_id = uuid.UUID(message_id)
            except ValueError:
                raise NotFoundError(f"Message not found: {message_id}")

        message = db.query(ConversationMessage).filter(ConversationMessage.id == message_id).first()
        if not message:
            raise NotFoundError(f"Message not found: {message_id}")
        return message

    @staticmethod
    def get_session_messages(db: Session, session_id: uuid.UUID) -> List[ConversationMessage]:
        """All messages of a session, oldest first"""
        return db.query(ConversationMessage).filter(
            ConversationMessage.session_id == session_id
        ).order_by(ConversationMessage.created_at.asc()).all()

    @staticmethod
    def get_conversation_history(db: Session, phone_number: str, limit: int = 10) -> List[ConversationMessage]:
        """Latest `limit` messages in chronological order"""
        session = ConversationService.get_session(db, phone_number)
        if not session:
            return []

        latest = db.query(ConversationMessage).filter(
            ConversationMessage.session_id == session.id
        ).order_by(ConversationMessage.created_at.desc()).limit(limit).all()
        return list(reversed(latest))

    @staticmethod
    def annotate(db: Session, messages: List[ConversationMessage], **metadata) -> None:
        """Merge keys into message metadata; content is never touched"""
        for message in messages:
            message.message_metadata = {**(message.message_metadata or {}), **metadata}
        db.commit()

    @staticmethod
    def clear_session(db: Session, phone_number: str) -> int:
        session = ConversationService.get_session(db, phone_number)
        if not session:
            return 0

        deleted = db.query(ConversationMessage).filter(
            ConversationMessage.session_id == session.id
        ).delete(synchronize_session=False)
        db.commit()
        logger.info(f"Cleared {deleted} messages for {phone_number}")
        return deleted
