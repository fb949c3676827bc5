"""Tests for the terminal front-end."""

from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner

from minted.cli import cli
from minted.services.api_client import MintedAPIClient
from tests.conftest import BASE_URL
from tests.fake_api import create_fake_api


@pytest.fixture
def run(backend):
    """Invoke the CLI with its API client pointed at the fake backend."""
    app = create_fake_api(backend)

    def fake_client(auth, config=None):
        return MintedAPIClient(auth, BASE_URL, transport=httpx.ASGITransport(app=app))

    def invoke(*args, input=None, token="test-token"):
        argv = (["--token", token] if token else []) + list(args)
        with patch("minted.cli.get_api_client", fake_client):
            return CliRunner().invoke(cli, argv, input=input, env={"MINTED_SESSION_TOKEN": None})

    return invoke


def test_conversations_most_recent_first(run, backend):
    backend.add_conversation("Older", last_modified=1_700_000_000_000)
    backend.add_conversation("Newer", last_modified=1_700_000_500_000)
    result = run("conversations")
    assert result.exit_code == 0
    assert result.output.index("Newer") < result.output.index("Older")


def test_conversations_search(run, backend):
    backend.add_conversation("Birthday card")
    backend.add_conversation("Wedding invite")
    result = run("conversations", "--search", "wedding")
    assert "Wedding invite" in result.output
    assert "Birthday card" not in result.output

    result = run("conversations", "--search", "graduation")
    assert "No chats found" in result.output


def test_conversations_empty(run):
    result = run("conversations")
    assert result.exit_code == 0
    assert "No chats yet" in result.output


def test_new_conversation(run, backend):
    result = run("new", "--title", "Holiday cards")
    assert result.exit_code == 0
    assert "Created Holiday cards" in result.output
    assert [c["title"] for c in backend.conversations.values()] == ["Holiday cards"]


def test_rename_and_delete(run, backend):
    cid = backend.add_conversation("Old title")
    result = run("rename", cid, "New title")
    assert result.exit_code == 0
    assert backend.conversations[cid]["title"] == "New title"

    result = run("delete", cid, "--yes")
    assert result.exit_code == 0
    assert cid not in backend.conversations


def test_delete_asks_for_confirmation(run, backend):
    cid = backend.add_conversation()
    result = run("delete", cid, input="n\n")
    assert result.exit_code == 1
    assert cid in backend.conversations


def test_messages(run, backend):
    cid = backend.add_conversation(messages=[(True, "hello"), (False, "hi there")])
    result = run("messages", cid)
    assert result.exit_code == 0
    assert "you: hello" in result.output
    assert "minted: hi there" in result.output


def test_api_error_exits_with_message(run, backend):
    result = run("conversations", token="expired")
    assert result.exit_code == 1
    assert "Error: Unauthorized" in result.output


def test_missing_token_is_no_active_session(run):
    result = run("conversations", token=None)
    assert result.exit_code == 1
    assert "No active session" in result.output


def test_suggestions(run):
    result = run("suggestions")
    assert result.exit_code == 0
    assert "1. Mother's Day - Heartfelt appreciation cards" in result.output
    assert "7. Anniversary" in result.output


def test_chat_sends_messages_and_titles_conversation(run, backend):
    result = run("chat", input="Design a birthday card\n/quit\n")
    assert result.exit_code == 0, result.output
    assert "minted: Reply to: Design a birthday card" in result.output
    (conversation,) = backend.conversations.values()
    assert conversation["title"] == "Generated title"


def test_chat_commands(run, backend):
    backend.add_conversation("First", messages=[(True, "one")])
    backend.add_conversation("Second", messages=[(True, "two")])
    result = run("chat", input="/list\n/switch 2\n/rename Renamed\n/delete\n/quit\n")
    assert result.exit_code == 0, result.output
    assert "you: one" in result.output
    assert "Renamed to Renamed" in result.output
    assert "Deleted" in result.output
    assert len(backend.conversations) == 1


def test_chat_send_suggestion(run, backend):
    result = run("chat", input="/suggest 3\n/quit\n")
    assert result.exit_code == 0, result.output
    (cid,) = backend.conversations
    assert backend.messages[cid][0]["content"].startswith("Design a birthday card")


def test_chat_requires_session(run):
    result = run("chat", input="/quit\n", token=None)
    assert result.exit_code == 1
    assert "Not signed in" in result.output
