"""Service factories wired from settings."""

from minted.core.config import Settings, settings as default_settings
from minted.services.api_client import MintedAPIClient
from minted.services.auth import AuthProvider, StaticTokenAuth
from minted.services.store import ChatStore


def get_auth_provider(config: Settings | None = None) -> AuthProvider:
    """Returns the auth provider for the configured session token."""
    config = config or default_settings
    return StaticTokenAuth(config.session_token)


def get_api_client(auth: AuthProvider, config: Settings | None = None) -> MintedAPIClient:
    config = config or default_settings
    return MintedAPIClient(
        auth,
        config.base_url,
        api_host=config.api_host,
        user_agent=config.user_agent,
    )


def get_chat_store(api: MintedAPIClient) -> ChatStore:
    return ChatStore(api)
