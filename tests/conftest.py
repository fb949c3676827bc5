"""Shared test fixtures: a fake Minted backend reached through httpx's ASGI transport."""

import asyncio

import httpx
import pytest

from minted.services.api_client import MintedAPIClient
from minted.services.auth import StaticTokenAuth
from minted.services.store import ChatStore
from tests.fake_api import TEST_TOKEN, FakeBackend, create_fake_api

BASE_URL = "http://testserver/api"


def make_client(backend: FakeBackend, token: str = TEST_TOKEN, loaded: bool = True) -> MintedAPIClient:
    auth = StaticTokenAuth(token)
    if loaded:
        asyncio.run(auth.load())
    transport = httpx.ASGITransport(app=create_fake_api(backend))
    return MintedAPIClient(auth, BASE_URL, transport=transport)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api(backend):
    return make_client(backend)


@pytest.fixture
def store(api):
    return ChatStore(api)


@pytest.fixture
def events(store):
    """Record every event the store emits."""
    received = []
    store.subscribe(lambda event, _store: received.append(event))
    return received
