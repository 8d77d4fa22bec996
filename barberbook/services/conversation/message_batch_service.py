# ============================================================================
# barberbook/services/conversation/message_batch_service.py
# ============================================================================
"""
Debounced aggregation of rapid-fire inbound messages.

People often split one thought across several texts. After storing a message
the caller polls `check_batch` with that message's id: the poll for the last
message of a burst is the one that eventually comes back final, carrying every
unprocessed message of the burst joined into a single utterance. Polls for
earlier messages of the same burst come back superseded, so exactly one caller
hands the burst downstream. A message followed only by texts sent after the
window closes its own burst. Nothing here sleeps; the caller decides when to
poll again.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from barberbook.config.settings import get_settings
from barberbook.core.errors import ValidationError
from barberbook.models.conversation import ConversationMessage
from barberbook.services.conversation.conversation_service import ConversationService, MessageRole
from barberbook.utils.time_parser import ensure_utc

logger = logging.getLogger(__name__)


class BatchStatus(str, Enum):
    PENDING = "pending"
    SUPERSEDED = "superseded"
    ALREADY_PROCESSED = "already_processed"
    FINAL = "final"


@dataclass
class BatchResult:
    status: BatchStatus
    combined_message: Optional[str] = None
    message_ids: List[str] = field(default_factory=list)
    retry_after_seconds: Optional[float] = None

    @property
    def is_final(self) -> bool:
        return self.status == BatchStatus.FINAL

    def to_response(self) -> dict:
        return {
            "isFinal": self.is_final,
            "status": self.status.value,
            "combinedMessage": self.combined_message,
            "messageIds": self.message_ids,
            "retryAfterSeconds": self.retry_after_seconds,
        }


def _is_processed(message: ConversationMessage) -> bool:
    return bool((message.message_metadata or {}).get("processed"))


class MessageBatchService:

    @staticmethod
    def check_batch(
            db: Session,
            message_id: Union[str, uuid.UUID],
            window_seconds: Optional[float] = None,
            now: Optional[datetime] = None
    ) -> BatchResult:
        """Decide whether `message_id` closes its burst, and if so, consume the burst"""
        window = timedelta(
            seconds=window_seconds if window_seconds is not None
            else get_settings().MESSAGE_BATCH_WINDOW_SECONDS
        )
        now = ensure_utc(now or datetime.now(timezone.utc))

        message = ConversationService.get_message(db, message_id)
        if message.role != MessageRole.USER.value:
            raise ValidationError("Only user messages can close a batch")
        if _is_processed(message):
            return BatchResult(BatchStatus.ALREADY_PROCESSED)

        messages = ConversationService.get_session_messages(db, message.session_id)
        index = next(i for i, m in enumerate(messages) if m.id == message.id)

        # Only a follow-up close enough to pull this message into its own burst
        # takes the batch over; a later, separate message leaves this one to close itself.
        following = messages[index + 1] if index + 1 < len(messages) else None
        if (
                following is not None
                and following.role == MessageRole.USER.value
                and ensure_utc(following.created_at) - ensure_utc(message.created_at) <= window
        ):
            return BatchResult(BatchStatus.SUPERSEDED)

        elapsed = now - ensure_utc(message.created_at)
        if elapsed < window:
            return BatchResult(
                BatchStatus.PENDING,
                retry_after_seconds=round((window - elapsed).total_seconds(), 3),
            )

        burst = [message]
        for previous in reversed(messages[:index]):
            if previous.role != MessageRole.USER.value or _is_processed(previous):
                break
            if ensure_utc(burst[0].created_at) - ensure_utc(previous.created_at) > window:
                break
            burst.insert(0, previous)

        combined = " ".join(m.content.strip() for m in burst if m.content.strip())
        ConversationService.annotate(db, burst, processed=True, batch_size=len(burst))

        logger.info(f"Closed batch of {len(burst)} message(s) for session {message.session_id}")
        return BatchResult(
            BatchStatus.FINAL,
            combined_message=combined,
            message_ids=[str(m.id) for m in burst],
        )
