"""Lookups over discord.py objects that Context needs but neither origin exposes directly."""

from typing import Any, Dict, List, Optional

import discord

from discord_context.domain.commands import format_command, hoist_options
from discord_context.domain.errors import InvalidOrigin
from discord_context.domain.models import CommandOption, Mentions
from discord_context.ports.inbound import OriginKind

_DEFERRED_RESPONSE_TYPES = (
    discord.InteractionResponseType.deferred_channel_message,
    discord.InteractionResponseType.deferred_message_update,
)

_SELECT_COMPONENT_TYPES = frozenset(
    t.value
    for t in (
        discord.ComponentType.string_select,
        discord.ComponentType.user_select,
        discord.ComponentType.role_select,
        discord.ComponentType.mentionable_select,
        discord.ComponentType.channel_select,
    )
)

_CONTEXT_MENU_COMMAND_TYPES = frozenset(
    (discord.AppCommandType.user.value, discord.AppCommandType.message.value)
)

_PLAIN_MESSAGE_TYPES = (discord.MessageType.default, discord.MessageType.reply)


# -- origin ----------------------------------------------------------------


def origin_kind(origin: Any) -> OriginKind:
    """Tag an origin once so the facade never has to re-inspect its class."""
    is_message = isinstance(origin, discord.Message)
    is_interaction = isinstance(origin, discord.Interaction)
    if is_message == is_interaction:
        raise InvalidOrigin(origin)
    return OriginKind.MESSAGE if is_message else OriginKind.INTERACTION


def message_client(message: discord.Message) -> discord.Client:
    # Message has no public client attribute; every discord.py model reaches it this way
    return message._state._get_client()


async def resolve_channel(client: discord.Client, channel: Any, channel_id: Optional[int]):
    """Return `channel`, or look it up through the client when it is not resolved."""
    if channel is not None:
        return channel
    if channel_id is None:
        return None
    return client.get_channel(channel_id) or await client.fetch_channel(channel_id)


# -- message ---------------------------------------------------------------


def _client_user_id(message: discord.Message) -> Optional[int]:
    user = message_client(message).user
    return user.id if user else None


def authored_by_client(message: discord.Message) -> bool:
    client_user_id = _client_user_id(message)
    return client_user_id is not None and message.author.id == client_user_id


def bot_permissions(message: discord.Message) -> Optional[discord.Permissions]:
    """Permissions of the bot's own member in the message channel, if both resolve."""
    me = message.guild.me if message.guild is not None else None
    channel = message.channel
    if me is None or channel is None:
        return None
    return channel.permissions_for(me)


def author_permissions(message: discord.Message) -> Optional[discord.Permissions]:
    """Permissions of the author in the message channel; guild-wide if the channel cannot say."""
    member = message.author if isinstance(message.author, discord.Member) else None
    if member is None:
        return None
    channel = message.channel
    if isinstance(channel, (discord.abc.GuildChannel, discord.Thread)):
        return channel.permissions_for(member)
    return member.guild_permissions


def can_manage_messages(message: discord.Message) -> bool:
    perms = bot_permissions(message)
    return bool(perms and perms.manage_messages)


def is_plain_message(message: discord.Message) -> bool:
    return message.type in _PLAIN_MESSAGE_TYPES


def message_mentions(message: discord.Message) -> Mentions:
    return Mentions(
        users=list(message.mentions),
        roles=list(message.role_mentions),
        channels=list(message.channel_mentions),
        everyone=bool(message.mention_everyone),
    )


def same_message(a: discord.Message, b: discord.Message) -> bool:
    """Field-wise comparison; discord.Message.__eq__ only looks at the id."""
    return (
        a.id == b.id
        and a.author.id == b.author.id
        and a.content == b.content
        and a.tts == b.tts
        and a.nonce == b.nonce
        and len(a.embeds) == len(b.embeds)
        and len(a.attachments) == len(b.attachments)
    )


def find_component(components: List[Any], custom_id: str) -> Optional[Any]:
    """First component (top-level or inside an action row) with `custom_id`."""
    for row in components:
        if getattr(row, "custom_id", None) == custom_id:
            return row
        for child in getattr(row, "children", ()):
            if getattr(child, "custom_id", None) == custom_id:
                return child
    return None


# -- interaction -----------------------------------------------------------


def interaction_data(interaction: discord.Interaction) -> Dict[str, Any]:
    return interaction.data or {}


def interaction_deferred(interaction: discord.Interaction) -> bool:
    return interaction.response.type in _DEFERRED_RESPONSE_TYPES


def interaction_replied(interaction: discord.Interaction) -> bool:
    return interaction.response.is_done() and not interaction_deferred(interaction)


_COMMAND_INTERACTION_TYPES = (
    discord.InteractionType.application_command,
    discord.InteractionType.autocomplete,
)


def command_type(interaction: discord.Interaction) -> int:
    if interaction.type not in _COMMAND_INTERACTION_TYPES:
        return 0
    return interaction_data(interaction).get("type", discord.AppCommandType.chat_input.value)


def component_type(interaction: discord.Interaction) -> Optional[int]:
    if interaction.type is not discord.InteractionType.component:
        return None
    return interaction_data(interaction).get("component_type")


def is_select_component(interaction: discord.Interaction) -> bool:
    return component_type(interaction) in _SELECT_COMPONENT_TYPES


def is_context_menu(interaction: discord.Interaction) -> bool:
    return (
        interaction.type is discord.InteractionType.application_command
        and command_type(interaction) in _CONTEXT_MENU_COMMAND_TYPES
    )


def interaction_options(interaction: discord.Interaction) -> List[CommandOption]:
    return hoist_options(interaction_data(interaction).get("options") or [])


def command_string(interaction: discord.Interaction) -> str:
    data = interaction_data(interaction)
    return format_command(data.get("name", ""), data.get("options") or [])


def attachment_options(interaction: discord.Interaction) -> Dict[str, Optional[discord.Attachment]]:
    """Attachment-typed options keyed by option name.

    The command tree's namespace already holds resolved attachments; without a
    tree the namespace is empty, so the raw `resolved` payload is used instead.
    """
    data = interaction_data(interaction)
    resolved = (data.get("resolved") or {}).get("attachments") or {}
    attachments: Dict[str, Optional[discord.Attachment]] = {}
    for option in interaction_options(interaction):
        if not option.is_attachment:
            continue
        attachment = getattr(interaction.namespace, option.name, None)
        if attachment is None:
            payload = resolved.get(str(option.value))
            if payload is not None:
                attachment = discord.Attachment(data=payload, state=interaction._state)
        attachments[option.name] = attachment
    return attachments
