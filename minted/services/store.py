"""Chat state for a presentation layer - conversations, active messages, pending input.

The store is the only writer of its fields. All operations are coroutines
meant to run on one asyncio loop, so two mutations never interleave on the
same field between await points they do not own. Results of a network call
are only applied to `current_messages` if their conversation is still the
current one when they arrive.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable

from minted.models.conversation import Conversation, Message
from minted.models.suggestion import Suggestion
from minted.services.api_client import MintedAPIClient
from minted.services.errors import APIError

logger = logging.getLogger(__name__)


class StoreEvent(str, Enum):
    CONVERSATIONS_CHANGED = "conversations_changed"
    CURRENT_CONVERSATION_CHANGED = "current_conversation_changed"
    CONVERSATION_UPDATED = "conversation_updated"
    MESSAGES_CHANGED = "messages_changed"
    WAITING_CHANGED = "waiting_changed"
    ERROR_CHANGED = "error_changed"
    FOCUS_INPUT = "focus_input"
    LOADING_CHANGED = "loading_changed"


Subscriber = Callable[[StoreEvent, "ChatStore"], None]


class ChatStore:
    def __init__(self, api: MintedAPIClient) -> None:
        self._api = api
        self._subscribers: list[Subscriber] = []
        self._tasks: set[asyncio.Task] = set()

        self.conversations: list[Conversation] = []
        self.current_conversation: Conversation | None = None
        self.current_messages: list[Message] = []
        self.message_text: str = ""
        self.is_waiting_for_response: bool = False
        self.last_error_message: str | None = None
        self.should_focus_input: bool = False
        self.is_loading_conversations: bool = False
        self.is_loading_messages: bool = False

    # --- Subscriptions ---

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback. Returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, *events: StoreEvent) -> None:
        for event in events:
            for callback in list(self._subscribers):
                try:
                    callback(event, self)
                except Exception:
                    logger.exception("Store subscriber failed on %s", event.value)

    def _is_current(self, conversation_id: str) -> bool:
        return self.current_conversation is not None and self.current_conversation.id == conversation_id

    # --- Queries ---

    def filtered_conversations(self, search_text: str = "") -> list[Conversation]:
        """Conversations matching the search text, most recently modified first."""
        matching = [c for c in self.conversations if not search_text or c.matches(search_text)]
        return sorted(matching, key=lambda c: c.last_modified, reverse=True)

    # --- Loading ---

    async def load(self) -> None:
        """Fetch conversations and select the first one. Silently empty without a session."""
        if await self._api.auth.current_session() is None:
            logger.debug("No session, skipping conversation load")
            return

        self.is_loading_conversations = True
        self._notify(StoreEvent.LOADING_CHANGED)
        try:
            conversations = await self._api.list_conversations()
        except APIError as e:
            logger.error("Failed to load conversations: %s", e)
            return
        finally:
            self.is_loading_conversations = False
            self._notify(StoreEvent.LOADING_CHANGED)

        self.conversations = conversations
        self._notify(StoreEvent.CONVERSATIONS_CHANGED)
        logger.debug("Loaded %d conversations", len(conversations))

        if conversations:
            self.current_conversation = conversations[0]
            self._notify(StoreEvent.CURRENT_CONVERSATION_CHANGED)
            try:
                await self._load_messages(conversations[0].id)
            except APIError as e:
                logger.error("Failed to load messages for %s: %s", conversations[0].id, e)

    async def _load_messages(self, conversation_id: str) -> None:
        self.is_loading_messages = True
        self._notify(StoreEvent.LOADING_CHANGED)
        try:
            messages = await self._api.list_messages(conversation_id)
        finally:
            self.is_loading_messages = False
            self._notify(StoreEvent.LOADING_CHANGED)

        if not self._is_current(conversation_id):
            logger.debug("Dropping messages for %s, no longer current", conversation_id)
            return
        self.current_messages = messages
        self._notify(StoreEvent.MESSAGES_CHANGED)

    # --- Conversations ---

    async def create_new_conversation(self) -> Conversation:
        """Create a conversation on the server and make it current. Raises APIError on failure."""
        conversation = await self._api.create_conversation()
        self.conversations.append(conversation)
        self.current_conversation = conversation
        self.current_messages = []
        self.should_focus_input = True
        self._notify(
            StoreEvent.CONVERSATIONS_CHANGED,
            StoreEvent.CURRENT_CONVERSATION_CHANGED,
            StoreEvent.MESSAGES_CHANGED,
            StoreEvent.FOCUS_INPUT,
        )
        logger.info("Created conversation %s", conversation.id)
        return conversation

    async def switch_to_conversation(self, conversation: Conversation) -> None:
        """Select a conversation and fetch its messages.

        On failure the error is logged and re-raised; `current_messages` keeps its prior value.
        """
        self.current_conversation = conversation
        self._notify(StoreEvent.CURRENT_CONVERSATION_CHANGED)
        try:
            await self._load_messages(conversation.id)
        except APIError as e:
            logger.error("Failed to load messages for %s: %s", conversation.id, e)
            raise

    async def delete_current_conversation(self) -> bool:
        conversation = self.current_conversation
        if conversation is None:
            return False

        try:
            await self._api.delete_conversation(conversation.id)
        except APIError as e:
            logger.error("Failed to delete conversation %s: %s", conversation.id, e)
            return False

        self.conversations = [c for c in self.conversations if c.id != conversation.id]
        self._notify(StoreEvent.CONVERSATIONS_CHANGED)
        logger.info("Deleted conversation %s", conversation.id)

        if not self._is_current(conversation.id):
            # Selection moved on while the delete was in flight
            return True

        if self.conversations:
            next_conversation = self.conversations[0]
            self.current_conversation = next_conversation
            self._notify(StoreEvent.CURRENT_CONVERSATION_CHANGED)
            try:
                await self._load_messages(next_conversation.id)
            except APIError as e:
                logger.error("Failed to load messages for %s: %s", next_conversation.id, e)
        else:
            self.current_conversation = None
            self.current_messages = []
            self._notify(StoreEvent.CURRENT_CONVERSATION_CHANGED, StoreEvent.MESSAGES_CHANGED)
        return True

    async def rename_current_conversation(self, title: str) -> bool:
        conversation = self.current_conversation
        if conversation is None:
            return False

        try:
            updated = await self._api.update_conversation(conversation.id, title)
        except APIError as e:
            logger.error("Failed to rename conversation %s: %s", conversation.id, e)
            return False

        self._apply_conversation_update(updated)
        return True

    def _apply_conversation_update(self, updated: Conversation) -> None:
        self.conversations = [updated if c.id == updated.id else c for c in self.conversations]
        if self._is_current(updated.id):
            self.current_conversation = updated
        self._notify(StoreEvent.CONVERSATIONS_CHANGED, StoreEvent.CONVERSATION_UPDATED)

    # --- Messages ---

    async def send_message(self) -> None:
        """Send the pending input as a user message in the current conversation.

        A placeholder is shown while the request is in flight and swapped for
        the server-confirmed pair on success, or removed on failure with
        `last_error_message` set.
        """
        text = self.message_text.strip()
        if not text:
            return

        conversation = self.current_conversation
        if conversation is None:
            try:
                conversation = await self.create_new_conversation()
            except APIError as e:
                logger.error("Failed to create conversation for message: %s", e)
                self.last_error_message = f"Could not start a conversation: {e}"
                self._notify(StoreEvent.ERROR_CHANGED)
                return

        first_exchange = not any(
            m.is_from_user and not m.is_pending and m.conversation_id == conversation.id
            for m in self.current_messages
        )
        placeholder = Message.pending(conversation.id, text)

        self.current_messages = [*self.current_messages, placeholder]
        self.is_waiting_for_response = True
        self.message_text = ""
        self.last_error_message = None
        self._notify(StoreEvent.MESSAGES_CHANGED, StoreEvent.WAITING_CHANGED, StoreEvent.ERROR_CHANGED)

        try:
            user_message, response = await self._api.send_message(conversation.id, text)
        except APIError as e:
            logger.error("Failed to send message in %s: %s", conversation.id, e)
            self.current_messages = [m for m in self.current_messages if m.id != placeholder.id]
            self.is_waiting_for_response = False
            self.last_error_message = f"Failed to send message: {e}"
            self._notify(StoreEvent.MESSAGES_CHANGED, StoreEvent.WAITING_CHANGED, StoreEvent.ERROR_CHANGED)
            return

        self.is_waiting_for_response = False
        remaining = [m for m in self.current_messages if m.id != placeholder.id]
        if self._is_current(conversation.id):
            self.current_messages = [*remaining, user_message, response]
        else:
            # The reply belongs to a conversation the user left; it is fetched again on return
            logger.debug("Reply for %s arrived after switching away", conversation.id)
            self.current_messages = remaining
        self._notify(StoreEvent.MESSAGES_CHANGED, StoreEvent.WAITING_CHANGED)

        if first_exchange:
            self._spawn(self._generate_title(conversation.id, text))

    async def send_suggestion(self, suggestion: Suggestion) -> None:
        self.message_text = suggestion.prompt
        await self.send_message()

    async def _generate_title(self, conversation_id: str, content: str) -> None:
        try:
            updated = await self._api.generate_title(conversation_id, content)
        except APIError as e:
            logger.warning("Title generation failed for %s: %s", conversation_id, e)
            return
        logger.debug("Conversation %s titled %r", conversation_id, updated.title)
        self._apply_conversation_update(updated)

    # --- Session ---

    async def sign_out(self) -> None:
        await self._api.auth.sign_out()
        self.conversations = []
        self.current_conversation = None
        self.current_messages = []
        self.message_text = ""
        self.is_waiting_for_response = False
        self.last_error_message = None
        self._notify(
            StoreEvent.CONVERSATIONS_CHANGED,
            StoreEvent.CURRENT_CONVERSATION_CHANGED,
            StoreEvent.MESSAGES_CHANGED,
        )

    # --- Background work ---

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task %s failed: %s", task.get_name(), exc, exc_info=exc)

    async def wait_for_background_tasks(self) -> None:
        # Failures are already logged by _task_done
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
