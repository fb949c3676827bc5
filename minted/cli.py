"""Terminal front-end for Minted."""

from __future__ import annotations

import asyncio
import sys
from datetime import datetime

import click

from minted import __version__
from minted.core.config import settings
from minted.core.logging import configure_logging
from minted.models.conversation import Conversation, Message
from minted.models.suggestion import SUGGESTIONS
from minted.services import get_api_client, get_auth_provider, get_chat_store
from minted.services.api_client import MintedAPIClient
from minted.services.errors import APIError
from minted.services.store import ChatStore, StoreEvent

CHAT_HELP = """Commands:
  /new            start a new conversation
  /list           list conversations
  /switch N       switch to conversation N from /list
  /rename TITLE   rename the current conversation
  /delete         delete the current conversation
  /suggest [N]    show suggestions, or send suggestion N
  /quit           leave
Anything else is sent as a message."""


def _format_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M")


def _echo_conversations(conversations: list[Conversation], current_id: str | None = None) -> None:
    if not conversations:
        click.echo("No chats yet")
        return
    for i, c in enumerate(conversations, 1):
        marker = "*" if c.id == current_id else " "
        click.echo(f"{marker}{i:>3}. {c.title}  [{c.id}]  {_format_time(c.last_modified)}")


def _echo_message(message: Message) -> None:
    speaker = "you" if message.is_from_user else "minted"
    suffix = " (sending...)" if message.is_pending else ""
    click.echo(f"{speaker}: {message.content}{suffix}")


async def _open_client(ctx: click.Context) -> MintedAPIClient:
    config = ctx.obj["settings"]
    auth = get_auth_provider(config)
    await auth.load()
    return get_api_client(auth, config)


def _run(coro) -> None:
    """Run a command coroutine, turning API failures into a clean exit."""
    try:
        asyncio.run(coro)
    except APIError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="minted")
@click.option("--debug", is_flag=True, help="Verbose logging, including every request")
@click.option("--token", envvar="MINTED_SESSION_TOKEN", help="Session token used as bearer auth")
@click.option("--base-url", help="API base URL (defaults to the configured environment)")
@click.pass_context
def cli(ctx: click.Context, debug: bool, token: str | None, base_url: str | None):
    """Minted - design cards and gifts by chatting."""
    update: dict = {}
    if debug:
        update["debug"] = True
    if token:
        update["session_token"] = token
    if base_url:
        update["api_base_url"] = base_url
    config = settings.model_copy(update=update)

    configure_logging(config.debug)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = config


@cli.command()
@click.option("--search", default="", help="Only show conversations whose title contains TEXT")
@click.pass_context
def conversations(ctx: click.Context, search: str):
    """List conversations, most recent first."""

    async def _list():
        client = await _open_client(ctx)
        store = get_chat_store(client)
        store.conversations = await client.list_conversations()
        results = store.filtered_conversations(search)
        if not results and search:
            click.echo("No chats found")
            return
        _echo_conversations(results)

    _run(_list())


@cli.command()
@click.option("--title", default=None, help="Title for the new conversation")
@click.pass_context
def new(ctx: click.Context, title: str | None):
    """Create a new conversation."""

    async def _create():
        client = await _open_client(ctx)
        conversation = await client.create_conversation(title)
        click.echo(f"Created {conversation.title} [{conversation.id}]")

    _run(_create())


@cli.command()
@click.argument("conversation_id")
@click.argument("title")
@click.pass_context
def rename(ctx: click.Context, conversation_id: str, title: str):
    """Rename a conversation."""

    async def _rename():
        client = await _open_client(ctx)
        conversation = await client.update_conversation(conversation_id, title)
        click.echo(f"Renamed {conversation.id} to {conversation.title}")

    _run(_rename())


@cli.command()
@click.argument("conversation_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, conversation_id: str, yes: bool):
    """Delete a conversation. This cannot be undone."""
    if not yes:
        click.confirm("Are you sure you want to delete this chat?", abort=True)

    async def _delete():
        client = await _open_client(ctx)
        await client.delete_conversation(conversation_id)
        click.echo(f"Deleted {conversation_id}")

    _run(_delete())


@cli.command()
@click.argument("conversation_id")
@click.pass_context
def messages(ctx: click.Context, conversation_id: str):
    """Print the messages of a conversation."""

    async def _messages():
        client = await _open_client(ctx)
        for message in await client.list_messages(conversation_id):
            _echo_message(message)

    _run(_messages())


@cli.command()
def suggestions():
    """Show the prompt suggestions."""
    for i, s in enumerate(SUGGESTIONS, 1):
        click.echo(f"{i}. {s.title} - {s.description}")


@cli.command()
@click.option("--conversation", "conversation_id", default=None, help="Conversation to open")
@click.pass_context
def chat(ctx: click.Context, conversation_id: str | None):
    """Interactive chat session."""

    async def _chat():
        client = await _open_client(ctx)
        store = get_chat_store(client)
        store.subscribe(_print_events)

        if await client.auth.current_session() is None:
            raise click.ClickException("Not signed in. Pass --token or set MINTED_SESSION_TOKEN.")
        await store.load()

        if conversation_id:
            match = next((c for c in store.conversations if c.id == conversation_id), None)
            if match is None:
                raise click.ClickException(f"Conversation {conversation_id} not found")
            await store.switch_to_conversation(match)

        _print_transcript(store)
        click.echo("Type /help for commands.")
        await _chat_loop(store)
        await store.wait_for_background_tasks()

    _run(_chat())


def _print_transcript(store: ChatStore) -> None:
    if store.current_conversation is not None:
        click.echo(f"== {store.current_conversation.title}")
    for message in store.current_messages:
        _echo_message(message)


def _print_events(event: StoreEvent, store: ChatStore) -> None:
    if event is StoreEvent.ERROR_CHANGED and store.last_error_message:
        click.echo(f"Error: {store.last_error_message}", err=True)
    elif event is StoreEvent.CONVERSATION_UPDATED and store.current_conversation is not None:
        click.echo(f"== {store.current_conversation.title}")


async def _chat_loop(store: ChatStore) -> None:
    listed: list[Conversation] = []
    while True:
        await asyncio.sleep(0)  # let pending title updates land before prompting
        try:
            line = await asyncio.to_thread(click.prompt, "you", prompt_suffix="> ", default="", show_default=False)
        except (click.Abort, EOFError):
            break

        line = line.strip()
        if not line:
            continue
        command, _, arg = line.partition(" ")
        arg = arg.strip()

        try:
            if command in ("/quit", "/exit"):
                break
            elif command == "/help":
                click.echo(CHAT_HELP)
            elif command == "/new":
                conversation = await store.create_new_conversation()
                click.echo(f"== {conversation.title}")
            elif command == "/list":
                listed = store.filtered_conversations(arg)
                _echo_conversations(
                    listed, store.current_conversation.id if store.current_conversation else None
                )
            elif command == "/switch":
                if not arg.isdigit() or not 0 < int(arg) <= len(listed):
                    click.echo("Use /list first, then /switch N")
                    continue
                await store.switch_to_conversation(listed[int(arg) - 1])
                _print_transcript(store)
            elif command == "/rename":
                if not arg:
                    click.echo("Usage: /rename TITLE")
                elif await store.rename_current_conversation(arg):
                    click.echo(f"Renamed to {arg}")
                else:
                    click.echo("Could not rename the conversation")
            elif command == "/delete":
                if await store.delete_current_conversation():
                    click.echo("Deleted")
                    _print_transcript(store)
                else:
                    click.echo("Could not delete the conversation")
            elif command == "/suggest":
                if not arg:
                    for i, s in enumerate(SUGGESTIONS, 1):
                        click.echo(f"{i}. {s.title} - {s.description}")
                elif arg.isdigit() and 0 < int(arg) <= len(SUGGESTIONS):
                    await _send_and_print(store, lambda: store.send_suggestion(SUGGESTIONS[int(arg) - 1]))
                else:
                    click.echo(f"Pick a suggestion between 1 and {len(SUGGESTIONS)}")
            elif command.startswith("/"):
                click.echo(f"Unknown command {command}. Type /help for commands.")
            else:
                store.message_text = line
                await _send_and_print(store, store.send_message)
        except APIError as e:
            click.echo(f"Error: {e}", err=True)


async def _send_and_print(store: ChatStore, send) -> None:
    before = len(store.current_messages)
    await send()
    if store.last_error_message is None:
        for message in store.current_messages[before:]:
            if not message.is_from_user:
                _echo_message(message)


def main():
    cli()


if __name__ == "__main__":
    main()
