"""Fakes for discord.Message / discord.Interaction used by the Context tests."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from discord_context.config import ContextConfig

GUILD_ID = 10
CHANNEL_ID = 100
AUTHOR_ID = 1234
BOT_USER_ID = 999


class FakeInteractionResponse:
    """Tracks its own state the way discord.InteractionResponse does."""

    def __init__(self):
        self._type = None
        self.calls = []

    def is_done(self) -> bool:
        return self._type is not None

    @property
    def type(self):
        return self._type

    async def defer(self, **kwargs):
        self.calls.append(("defer", kwargs))
        self._type = discord.InteractionResponseType.deferred_channel_message

    async def send_message(self, content=None, **kwargs):
        self.calls.append(("send_message", content, kwargs))
        self._type = discord.InteractionResponseType.channel_message

    async def send_modal(self, modal):
        self.calls.append(("send_modal", modal))
        self._type = discord.InteractionResponseType.modal


def _permissions(**flags) -> discord.Permissions:
    return discord.Permissions(**flags)


def make_message(
    content: str = "!ping",
    *,
    in_guild: bool = True,
    bot_permissions: discord.Permissions = None,
    author_is_bot: bool = False,
) -> MagicMock:
    """Create a fake discord.Message whose reply() hands back fresh fake replies."""
    msg = MagicMock(spec=discord.Message)
    msg.id = 1000
    msg.content = content
    msg.clean_content = content
    msg.type = discord.MessageType.default
    msg.application_id = None
    msg.webhook_id = None
    msg.attachments = []
    msg.embeds = []
    msg.components = []
    msg.reactions = []
    msg.stickers = []
    msg.mentions = []
    msg.role_mentions = []
    msg.channel_mentions = []
    msg.mention_everyone = False
    msg.pinned = False
    msg.tts = False
    msg.nonce = None
    msg.reference = None
    msg.flags = discord.MessageFlags()
    msg.is_system = MagicMock(return_value=False)
    for name in ("pin", "unpin", "add_reaction", "delete", "edit", "publish", "create_thread"):
        setattr(msg, name, AsyncMock())

    channel = MagicMock(spec=discord.TextChannel)
    channel.id = CHANNEL_ID
    channel.typing = AsyncMock()
    channel.fetch_message = AsyncMock()
    channel.is_news = MagicMock(return_value=False)
    msg.channel = channel

    client = MagicMock()
    client.user.id = BOT_USER_ID
    client.fetch_channel = AsyncMock()
    client.fetch_webhook = AsyncMock()
    msg._state = MagicMock()
    msg._state._get_client.return_value = client

    author = MagicMock(spec=discord.Member if in_guild else discord.User)
    author.id = BOT_USER_ID if author_is_bot else AUTHOR_ID
    msg.author = author

    if in_guild:
        guild = MagicMock(spec=discord.Guild)
        guild.id = GUILD_ID
        guild.me = MagicMock(spec=discord.Member)
        guild.preferred_locale = discord.Locale.american_english
        msg.guild = guild
        perms = bot_permissions if bot_permissions is not None else _permissions(send_messages=True)
        channel.permissions_for = MagicMock(return_value=perms)
    else:
        msg.guild = None

    sent = []

    async def _reply(content=None, **kwargs):
        reply = MagicMock(spec=discord.Message)
        reply.id = 5000 + len(sent)
        reply.content = content
        reply.edit = AsyncMock()
        reply.delete = AsyncMock()
        sent.append(reply)
        return reply

    msg.reply = AsyncMock(side_effect=_reply)
    msg.sent_replies = sent
    return msg


def make_interaction(
    *,
    interaction_type: discord.InteractionType = discord.InteractionType.application_command,
    data: dict = None,
) -> MagicMock:
    """Create a fake discord.Interaction for a `/ping` chat input command by default."""
    inter = MagicMock(spec=discord.Interaction)
    inter.id = 2000
    inter.type = interaction_type
    inter.data = data if data is not None else {"id": "42", "name": "ping", "type": 1}
    inter.channel_id = CHANNEL_ID
    inter.guild_id = GUILD_ID
    inter.application_id = 77
    inter.token = "interaction-token"
    inter.version = 1
    inter.locale = discord.Locale.british_english
    inter.guild_locale = discord.Locale.german
    inter.app_permissions = _permissions(send_messages=True)
    inter.permissions = _permissions(administrator=True)
    inter.user = MagicMock(spec=discord.Member)
    inter.user.id = AUTHOR_ID
    inter.namespace = SimpleNamespace()
    inter.response = FakeInteractionResponse()
    inter.followup = MagicMock()
    inter.followup.send = AsyncMock(return_value=MagicMock(spec=discord.WebhookMessage))
    inter.edit_original_response = AsyncMock()
    inter.delete_original_response = AsyncMock()
    inter.original_response = AsyncMock()
    return inter


@pytest.fixture
def config():
    return ContextConfig(mention_author=False, log_lifecycle=False)


@pytest.fixture
def message():
    return make_message()


@pytest.fixture
def interaction():
    return make_interaction()


@pytest.fixture
def message_factory():
    return make_message


@pytest.fixture
def interaction_factory():
    return make_interaction
