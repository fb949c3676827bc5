"""Auth collaborator interface. The hosted identity SDK is consumed through this surface only."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class AuthSession(ABC):
    @abstractmethod
    async def get_token(self) -> str | None:
        """Return a bearer token for API calls, or None if none can be issued."""
        ...


class AuthProvider(ABC):
    @property
    @abstractmethod
    def is_loaded(self) -> bool:
        """Whether the provider finished initializing. Nothing else is usable before that."""
        ...

    @abstractmethod
    async def load(self) -> None:
        ...

    @abstractmethod
    async def current_session(self) -> AuthSession | None:
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        ...


class _TokenSession(AuthSession):
    def __init__(self, token: str) -> None:
        self._token = token

    async def get_token(self) -> str | None:
        return self._token or None


class StaticTokenAuth(AuthProvider):
    """Auth provider backed by a pre-issued session token (e.g. MINTED_SESSION_TOKEN)."""

    def __init__(self, token: str = "") -> None:
        self._token = token
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def load(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        logger.debug("Static token auth loaded (session present: %s)", bool(self._token))

    async def current_session(self) -> AuthSession | None:
        if not self._loaded or not self._token:
            return None
        return _TokenSession(self._token)

    async def sign_out(self) -> None:
        self._token = ""
        logger.info("Signed out")
