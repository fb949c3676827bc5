"""Conversation and message models as exchanged with the Minted API."""

import time
import uuid
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

PENDING_ID_PREFIX = "pending-"


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


class _APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Conversation(_APIModel):
    id: str
    title: str
    created_at: int
    last_modified: int

    def matches(self, search_text: str) -> bool:
        """Case-insensitive substring match on the title."""
        return search_text.casefold() in self.title.casefold()


class MessageState(str, Enum):
    PENDING = "pending"  # optimistic placeholder, temporary id
    CONFIRMED = "confirmed"  # returned by the server


class Message(_APIModel):
    id: str
    content: str
    is_from_user: bool
    conversation_id: str
    created_at: int
    last_modified: int

    state: MessageState = Field(default=MessageState.CONFIRMED, exclude=True)

    @classmethod
    def pending(cls, conversation_id: str, content: str) -> "Message":
        """Build the optimistic placeholder shown while a send is in flight."""
        timestamp = now_ms()
        return cls(
            id=f"{PENDING_ID_PREFIX}{uuid.uuid4()}",
            content=content,
            is_from_user=True,
            conversation_id=conversation_id,
            created_at=timestamp,
            last_modified=timestamp,
            state=MessageState.PENDING,
        )

    @property
    def is_pending(self) -> bool:
        return self.state is MessageState.PENDING


class APIEnvelope(BaseModel, Generic[T]):
    """Uniform `{data, error}` wrapper around every API response body."""

    data: Optional[T] = None
    error: Optional[str] = None


class MessageExchange(_APIModel):
    message: Message  # echoed user message
    response: Message  # generated counterpart


class TitleResult(_APIModel):
    title: str
