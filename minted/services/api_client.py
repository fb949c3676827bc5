"""Minted REST API client - conversations, messages and title generation.

Every call asks the auth collaborator for a bearer token first and fails with
NoActiveSession before touching the network when there is none. Responses are
wrapped in a `{data, error}` envelope; each operation has exactly one success
status code and every other code maps to a typed APIError.
"""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from minted.core.config import settings
from minted.models.conversation import (
    APIEnvelope,
    Conversation,
    Message,
    MessageExchange,
    TitleResult,
    now_ms,
)
from minted.services.auth import AuthProvider
from minted.services.errors import (
    APIError,
    BadRequest,
    DecodingError,
    InvalidResponse,
    NoActiveSession,
    ServerError,
    TransportError,
    Unauthorized,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def error_for_status(status_code: int) -> APIError:
    """Map a non-success HTTP status code to the matching APIError."""
    if status_code == 400:
        return BadRequest()
    if status_code == 401:
        return Unauthorized()
    if status_code == 404:
        return ServerError("Conversation not found", status_code)
    if status_code == 500:
        return ServerError("Internal server error", status_code)
    return ServerError(f"Unexpected status code: {status_code}", status_code)


class MintedAPIClient:
    """Client for the Minted conversations API, authenticated through an AuthProvider."""

    def __init__(
        self,
        auth: AuthProvider,
        base_url: str | None = None,
        *,
        api_host: str | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.auth = auth
        self._base_url = (base_url or settings.base_url).rstrip("/")
        self._api_host = api_host or settings.api_host
        self._user_agent = user_agent or settings.user_agent
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _token(self) -> str:
        if not self.auth.is_loaded:
            raise NoActiveSession("Auth provider is not loaded yet.")
        session = await self.auth.current_session()
        if session is None:
            raise NoActiveSession()
        token = await session.get_token()
        if not token:
            raise NoActiveSession()
        return token

    def _headers(self, token: str) -> dict[str, str]:
        origin = f"https://{self._api_host}"
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "Host": self._api_host,
            "Origin": origin,
            "Referer": origin,
            "Sec-Fetch-Dest": "empty",
            "User-Agent": self._user_agent,
            "X-Forwarded-Host": self._api_host,
            "X-Forwarded-Proto": "https",
        }

    async def _request(
        self, method: str, path: str, *, expected: int, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        token = await self._token()
        url = f"{self._base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.request(method, url, headers=self._headers(token), json=json)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise TransportError(e) from e

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        if resp.status_code != expected:
            raise error_for_status(resp.status_code)
        return resp

    @staticmethod
    def _decode(resp: httpx.Response, data_type: type[T]) -> APIEnvelope[T]:
        try:
            return APIEnvelope[data_type].model_validate_json(resp.content)  # type: ignore[valid-type]
        except ValidationError as e:
            raise DecodingError(e) from e

    @staticmethod
    def _require_data(envelope: APIEnvelope[T]) -> T:
        if envelope.data is None:
            raise InvalidResponse(envelope.error or "Response envelope carried no data")
        return envelope.data

    # --- Conversations ---

    async def list_conversations(self) -> list[Conversation]:
        resp = await self._request("GET", "/conversations", expected=200)
        return self._decode(resp, list[Conversation]).data or []

    async def create_conversation(self, title: str | None = None) -> Conversation:
        payload: dict[str, Any] = {}
        if title is not None:
            payload["title"] = title

        resp = await self._request("POST", "/conversations", expected=201, json=payload)
        return self._require_data(self._decode(resp, Conversation))

    async def update_conversation(self, conversation_id: str, title: str) -> Conversation:
        resp = await self._request(
            "PUT", f"/conversations/{conversation_id}", expected=200, json={"title": title}
        )
        return self._require_data(self._decode(resp, Conversation))

    async def delete_conversation(self, conversation_id: str) -> None:
        resp = await self._request("DELETE", f"/conversations/{conversation_id}", expected=200)
        envelope = self._decode(resp, dict[str, Any])
        if envelope.error is not None:
            raise ServerError(envelope.error, resp.status_code)

    # --- Messages ---

    async def list_messages(self, conversation_id: str) -> list[Message]:
        resp = await self._request("GET", f"/conversations/{conversation_id}/messages", expected=200)
        return self._decode(resp, list[Message]).data or []

    async def create_message(self, conversation_id: str, content: str) -> tuple[Message, Message]:
        """Post a user message; returns the stored message and the generated response."""
        resp = await self._request(
            "POST",
            f"/conversations/{conversation_id}/messages",
            expected=201,
            json={"content": content},
        )
        exchange = self._require_data(self._decode(resp, MessageExchange))
        return exchange.message, exchange.response

    async def send_message(self, conversation_id: str, content: str) -> tuple[Message, Message]:
        """Send a message and get the reply. Same endpoint and contract as create_message."""
        return await self.create_message(conversation_id, content)

    async def generate_title(self, conversation_id: str, content: str) -> Conversation:
        """Ask the server to title a conversation from its first message.

        The endpoint only returns the title, so the conversation is re-fetched
        and returned with the new title applied.
        """
        resp = await self._request(
            "POST",
            f"/conversations/{conversation_id}/title",
            expected=200,
            json={"content": content},
        )
        title = self._require_data(self._decode(resp, TitleResult)).title

        conversations = await self.list_conversations()
        current = next((c for c in conversations if c.id == conversation_id), None)
        if current is None:
            raise ServerError("Conversation not found")

        return current.model_copy(
            update={"title": title, "last_modified": max(now_ms(), current.last_modified)}
        )
