"""Context — one surface over a received message or a command interaction.

Command handlers take a Context instead of branching on discord.Message vs
discord.Interaction. Each member maps to the native equivalent when the origin
has one and to a neutral value (False, None, "", 0, empty collection) when the
concept does not exist for that origin.

Reply lifecycle:
- Interaction origins keep their own deferred/replied state in
  `interaction.response`.
- Message origins defer by sending a typing indicator and reply with inline
  replies; the first reply sent is "the reply" for edit/delete/fetch.

A Context belongs to one handler for one event. Calling two lifecycle methods
concurrently on the same instance is not supported.
"""

import asyncio
import sys
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import discord

from discord_context.adapters.discord import resolvers
from discord_context.config import CONFIG, ContextConfig
from discord_context.domain.errors import EphemeralReply
from discord_context.domain.lifecycle import ReplyTracker, ensure_fresh, ensure_handled, state_of
from discord_context.domain.models import CommandOption, Mentions, ReplyState
from discord_context.ports.inbound import OriginKind
from discord_context.ports.outbound import ReplyMessage

Origin = Union[discord.Message, discord.Interaction]

# Accepted by InteractionResponse but not by Message.reply
_INTERACTION_ONLY_KWARGS = ("ephemeral", "thinking")


def _log(msg: str):
    print(msg, file=sys.stderr)


class Context:
    """Uniform view of one inbound message or command interaction."""

    def __init__(self, origin: Origin, *, config: Optional[ContextConfig] = None):
        self._kind = resolvers.origin_kind(origin)
        self._origin = origin
        self._config = config or ContextConfig(**CONFIG)
        self._tracker = ReplyTracker()
        # discord.py does not expose whether an interaction response is ephemeral
        self._ephemeral = False
        # edit_original_response leaves response.type at the deferred value
        self._finalized = False

    def __repr__(self) -> str:
        return f"<Context kind={self._kind.value} id={self.id} state={self.state.value}>"

    def __str__(self) -> str:
        return self.content

    @property
    def _is_message(self) -> bool:
        return self._kind is OriginKind.MESSAGE

    def _trace(self, msg: str):
        if self._config.log_lifecycle:
            _log(f"[context:{self._kind.value}:{self.id}] {msg}")

    def _drop_interaction_kwargs(self, kwargs: Dict[str, Any]) -> None:
        dropped = [key for key in _INTERACTION_ONLY_KWARGS if key in kwargs]
        for key in dropped:
            kwargs.pop(key)
        if dropped:
            _log(f"[context:{self._kind.value}:{self.id}] ignoring {', '.join(dropped)} for message origin")

    # -- shared fields -------------------------------------------------------

    @property
    def origin(self) -> Origin:
        return self._origin

    @property
    def kind(self) -> OriginKind:
        return self._kind

    @property
    def id(self) -> int:
        return self._origin.id

    @property
    def channel(self):
        return self._origin.channel

    @property
    def channel_id(self) -> Optional[int]:
        if self._is_message:
            channel = self._origin.channel
            return channel.id if channel is not None else None
        return self._origin.channel_id

    @property
    def guild(self) -> Optional[discord.Guild]:
        return self._origin.guild

    @property
    def guild_id(self) -> Optional[int]:
        if self._is_message:
            guild = self._origin.guild
            return guild.id if guild is not None else None
        return self._origin.guild_id

    @property
    def created_at(self) -> datetime:
        return self._origin.created_at

    @property
    def created_timestamp(self) -> float:
        return self.created_at.timestamp()

    @property
    def type(self) -> Union[discord.MessageType, discord.InteractionType]:
        return self._origin.type

    @property
    def client(self) -> discord.Client:
        if self._is_message:
            return resolvers.message_client(self._origin)
        return self._origin.client

    @property
    def application_id(self) -> Optional[int]:
        return self._origin.application_id

    @property
    def author(self) -> Union[discord.User, discord.Member]:
        if self._is_message:
            return self._origin.author
        return self._origin.user

    @property
    def user(self) -> Union[discord.User, discord.Member]:
        return self.author

    @property
    def member(self) -> Optional[discord.Member]:
        author = self.author
        return author if isinstance(author, discord.Member) else None

    @property
    def content(self) -> str:
        """Message content, or the invocation rendered as `/name sub option:value`."""
        if self._is_message:
            return self._origin.content
        return resolvers.command_string(self._origin)

    @property
    def clean_content(self) -> str:
        if self._is_message:
            return self._origin.clean_content
        return resolvers.command_string(self._origin)

    @property
    def attachments(self) -> Dict[Any, Optional[discord.Attachment]]:
        """Message attachments keyed by id; interaction attachment options keyed by option name."""
        if self._is_message:
            return {attachment.id: attachment for attachment in self._origin.attachments}
        return resolvers.attachment_options(self._origin)

    @property
    def mentions(self) -> Mentions:
        if self._is_message:
            return resolvers.message_mentions(self._origin)
        return Mentions()

    # -- permissions ---------------------------------------------------------

    @property
    def app_permissions(self) -> Optional[discord.Permissions]:
        """What the bot may do in this channel."""
        if self._is_message:
            return resolvers.bot_permissions(self._origin)
        return self._origin.app_permissions

    @property
    def member_permissions(self) -> Optional[discord.Permissions]:
        """What the invoking member may do in this channel, if there is a member."""
        if self._is_message:
            return resolvers.author_permissions(self._origin)
        return self._origin.permissions

    # -- message-only fields -------------------------------------------------

    @property
    def activity(self) -> Optional[Dict[str, Any]]:
        return self._origin.activity if self._is_message else None

    @property
    def group_activity_application(self):
        return self._origin.application if self._is_message else None

    @property
    def components(self) -> List[Any]:
        return list(self._origin.components) if self._is_message else []

    @property
    def embeds(self) -> List[discord.Embed]:
        return list(self._origin.embeds) if self._is_message else []

    @property
    def reactions(self) -> List[discord.Reaction]:
        return list(self._origin.reactions) if self._is_message else []

    @property
    def stickers(self) -> List[discord.StickerItem]:
        return list(self._origin.stickers) if self._is_message else []

    @property
    def flags(self) -> discord.MessageFlags:
        return self._origin.flags if self._is_message else discord.MessageFlags()

    @property
    def edited_at(self) -> Optional[datetime]:
        return self._origin.edited_at if self._is_message else None

    @property
    def edited_timestamp(self) -> Optional[float]:
        edited_at = self.edited_at
        return edited_at.timestamp() if edited_at is not None else None

    @property
    def has_thread(self) -> bool:
        return bool(self._origin.flags.has_thread) if self._is_message else False

    @property
    def thread(self) -> Optional[discord.Thread]:
        return self._origin.thread if self._is_message else None

    @property
    def nonce(self) -> Optional[Union[int, str]]:
        return self._origin.nonce if self._is_message else None

    @property
    def pinned(self) -> bool:
        return bool(self._origin.pinned) if self._is_message else False

    @property
    def tts(self) -> bool:
        return bool(self._origin.tts) if self._is_message else False

    @property
    def system(self) -> bool:
        """Whether Discord itself sent the message (pins, joins, boosts...)."""
        return self._origin.is_system() if self._is_message else False

    @property
    def reference(self) -> Optional[discord.MessageReference]:
        return self._origin.reference if self._is_message else None

    @property
    def url(self) -> str:
        return self._origin.jump_url if self._is_message else ""

    @property
    def webhook_id(self) -> Optional[int]:
        return self._origin.webhook_id if self._is_message else None

    @property
    def editable(self) -> bool:
        if not self._is_message:
            return False
        return resolvers.authored_by_client(self._origin)

    @property
    def deletable(self) -> bool:
        if not self._is_message:
            return False
        message = self._origin
        return resolvers.authored_by_client(message) or (
            message.guild is not None and resolvers.can_manage_messages(message)
        )

    @property
    def pinnable(self) -> bool:
        if not self._is_message:
            return False
        message = self._origin
        if message.is_system():
            return False
        return message.guild is None or resolvers.can_manage_messages(message)

    @property
    def crosspostable(self) -> bool:
        if not self._is_message:
            return False
        message = self._origin
        if not isinstance(message.channel, discord.TextChannel) or not message.channel.is_news():
            return False
        if message.flags.crossposted or not resolvers.is_plain_message(message):
            return False
        return resolvers.authored_by_client(message) or resolvers.can_manage_messages(message)

    # -- interaction-only fields ---------------------------------------------

    @property
    def interaction(self):
        """The interaction itself, or the metadata of the interaction a message answers."""
        if self._is_message:
            return self._origin.interaction_metadata
        return self._origin

    @property
    def command(self):
        return None if self._is_message else self._origin.command

    @property
    def command_id(self) -> str:
        if self._is_message:
            return ""
        return str(resolvers.interaction_data(self._origin).get("id", ""))

    @property
    def command_name(self) -> str:
        if self._is_message:
            return ""
        return resolvers.interaction_data(self._origin).get("name", "")

    @property
    def command_type(self) -> int:
        return 0 if self._is_message else resolvers.command_type(self._origin)

    @property
    def options(self) -> List[CommandOption]:
        return [] if self._is_message else resolvers.interaction_options(self._origin)

    @property
    def locale(self) -> Optional[discord.Locale]:
        return None if self._is_message else self._origin.locale

    @property
    def guild_locale(self) -> Optional[discord.Locale]:
        if self._is_message:
            guild = self._origin.guild
            return guild.preferred_locale if guild is not None else None
        return self._origin.guild_locale

    @property
    def token(self) -> str:
        return "" if self._is_message else self._origin.token

    @property
    def version(self) -> int:
        return 0 if self._is_message else self._origin.version

    @property
    def webhook(self) -> Optional[discord.Webhook]:
        return None if self._is_message else self._origin.followup

    @property
    def ephemeral(self) -> bool:
        return False if self._is_message else self._ephemeral

    # -- reply state ---------------------------------------------------------

    @property
    def deferred(self) -> bool:
        """Interaction: reply deferred. Message: typing was sent to the channel."""
        if self._is_message:
            return self._tracker.deferred
        return resolvers.interaction_deferred(self._origin)

    @property
    def replied(self) -> bool:
        if self._is_message:
            return self._tracker.replied
        return resolvers.interaction_replied(self._origin) or self._finalized

    @property
    def state(self) -> ReplyState:
        return state_of(self.deferred, self.replied)

    @property
    def replies(self) -> List[ReplyMessage]:
        """Replies this context sent to a message origin, oldest first."""
        return [reply for _, reply in self._tracker]

    # -- reply lifecycle -----------------------------------------------------

    async def defer(self, **kwargs) -> None:
        """Interaction: defer the response. Message: show typing in the channel."""
        ensure_fresh(self.deferred, self.replied)
        if self._is_message:
            self._drop_interaction_kwargs(kwargs)
            await self._origin.channel.typing()
            self._tracker.mark_deferred()
            self._trace("deferred (typing)")
            return None

        await self._origin.response.defer(**kwargs)
        if kwargs.get("ephemeral"):
            self._ephemeral = True
        self._trace("deferred")
        return None

    async def reply(self, content: Optional[str] = None, **kwargs):
        """Interaction: send the initial response. Message: send an inline reply."""
        ensure_fresh(self.deferred, self.replied)
        if self._is_message:
            return await self._send_tracked_reply(content, **kwargs)

        result = await self._origin.response.send_message(content, **kwargs)
        if kwargs.get("ephemeral"):
            self._ephemeral = True
        self._trace("replied")
        return result

    async def follow_up(self, content: Optional[str] = None, **kwargs):
        """Send an additional reply after the first one was sent or deferred."""
        ensure_handled(self.deferred, self.replied)
        if self._is_message:
            return await self._send_tracked_reply(content, **kwargs)

        if content is not None:
            kwargs["content"] = content
        kwargs.setdefault("wait", True)
        message = await self._origin.followup.send(**kwargs)
        self._trace("followed up")
        return message

    async def edit_reply(self, content: Optional[str] = None, **kwargs):
        """Edit the first reply. A message that was only deferred gets its first reply instead."""
        ensure_handled(self.deferred, self.replied)
        if self._is_message:
            first = self._tracker.first()
            if first is None:
                return await self._send_tracked_reply(content, **kwargs)
            reply_id, reply = first
            if reply is None:
                return None
            if content is not None:
                kwargs["content"] = content
            self._drop_interaction_kwargs(kwargs)
            edited = await reply.edit(**kwargs)
            self._trace(f"edited reply {reply_id}")
            return edited

        if content is not None:
            kwargs["content"] = content
        message = await self._origin.edit_original_response(**kwargs)
        self._finalized = True
        self._trace("edited original response")
        return message

    async def delete_reply(self) -> None:
        """Delete the first reply. Does nothing for a message that was only deferred."""
        ensure_handled(self.deferred, self.replied)
        if self.ephemeral:
            raise EphemeralReply("Ephemeral responses cannot be deleted.")

        if self._is_message:
            first = self._tracker.first()
            if first is None or first[1] is None:
                return None
            reply_id, reply = first
            await reply.delete()
            self._trace(f"deleted reply {reply_id}")
            return None

        await self._origin.delete_original_response()
        self._trace("deleted original response")
        return None

    async def fetch_reply(self):
        """Fetch the first reply fresh from the API; None for a message that was only deferred."""
        ensure_handled(self.deferred, self.replied)
        if self._is_message:
            first = self._tracker.first()
            if first is None:
                return None
            reply_id, _ = first
            channel = await resolvers.resolve_channel(self.client, self._origin.channel, self.channel_id)
            if channel is None:
                return None
            return await channel.fetch_message(reply_id)

        return await self._origin.original_response()

    async def _send_tracked_reply(self, content: Optional[str], **kwargs) -> ReplyMessage:
        self._drop_interaction_kwargs(kwargs)
        kwargs.setdefault("mention_author", self._config.mention_author)
        reply = await self._origin.reply(content, **kwargs)
        # Record only once the send went through
        self._tracker.record(reply.id, reply)
        self._trace(f"tracked reply {reply.id} ({len(self._tracker)} total)")
        return reply

    # -- capability probes ---------------------------------------------------

    def is_button(self) -> bool:
        if self._is_message:
            return False
        return resolvers.component_type(self._origin) == discord.ComponentType.button.value

    def is_select_menu(self) -> bool:
        if self._is_message:
            return False
        return resolvers.is_select_component(self._origin)

    def is_chat_input_command(self) -> bool:
        if self._is_message:
            return False
        return (
            self._origin.type is discord.InteractionType.application_command
            and resolvers.command_type(self._origin) == discord.AppCommandType.chat_input.value
        )

    def is_context_menu_command(self) -> bool:
        if self._is_message:
            return False
        return resolvers.is_context_menu(self._origin)

    def is_message_context_menu_command(self) -> bool:
        if self._is_message:
            return False
        return (
            resolvers.is_context_menu(self._origin)
            and resolvers.command_type(self._origin) == discord.AppCommandType.message.value
        )

    def is_user_context_menu_command(self) -> bool:
        if self._is_message:
            return False
        return (
            resolvers.is_context_menu(self._origin)
            and resolvers.command_type(self._origin) == discord.AppCommandType.user.value
        )

    def is_autocomplete(self) -> bool:
        if self._is_message:
            return False
        return self._origin.type is discord.InteractionType.autocomplete

    def is_modal_submit(self) -> bool:
        if self._is_message:
            return False
        return self._origin.type is discord.InteractionType.modal_submit

    def is_repliable(self) -> bool:
        """Interaction: not a ping or autocomplete. Message: the bot may speak in the channel."""
        if self._is_message:
            perms = resolvers.bot_permissions(self._origin)
            return True if perms is None else bool(perms.send_messages)
        return self._origin.type not in (
            discord.InteractionType.ping,
            discord.InteractionType.autocomplete,
        )

    def in_guild(self) -> bool:
        return self.guild_id is not None

    def in_cached_guild(self) -> bool:
        return self.in_guild() and self.guild is not None

    def in_raw_guild(self) -> bool:
        return self.guild_id is not None and self.guild is None and self.member is not None

    # -- message-only operations ---------------------------------------------

    async def pin(self, reason: Optional[str] = None) -> bool:
        if not self._is_message:
            return False
        await self._origin.pin(reason=reason)
        return True

    async def unpin(self, reason: Optional[str] = None) -> bool:
        if not self._is_message:
            return False
        await self._origin.unpin(reason=reason)
        return True

    async def react(self, emoji) -> bool:
        if not self._is_message:
            return False
        await self._origin.add_reaction(emoji)
        return True

    async def delete(self, delay: Optional[float] = None) -> bool:
        """Delete the origin message. Interactions have nothing to delete."""
        if not self._is_message:
            return False
        await self._origin.delete(delay=delay)
        return True

    async def edit(self, **kwargs) -> Optional[discord.Message]:
        if not self._is_message:
            return None
        return await self._origin.edit(**kwargs)

    async def remove_attachments(self) -> Optional[discord.Message]:
        if not self._is_message:
            return None
        return await self._origin.edit(attachments=[])

    async def suppress_embeds(self, suppress: bool = True) -> Optional[discord.Message]:
        if not self._is_message:
            return None
        return await self._origin.edit(suppress=suppress)

    async def crosspost(self) -> Optional[discord.Message]:
        """Publish a message in an announcement channel to its followers."""
        if not self._is_message:
            return None
        await self._origin.publish()
        return self._origin

    async def fetch(self) -> Optional[discord.Message]:
        if not self._is_message:
            return None
        return await self._origin.channel.fetch_message(self._origin.id)

    async def fetch_reference(self) -> Optional[discord.Message]:
        """The message this one replies to, crossposts or announces a pin of."""
        if not self._is_message:
            return None
        ref = self._origin.reference
        if ref is None or ref.message_id is None:
            return None
        if isinstance(ref.resolved, discord.Message):
            return ref.resolved
        channel = await resolvers.resolve_channel(
            self.client, self.client.get_channel(ref.channel_id), ref.channel_id
        )
        return await channel.fetch_message(ref.message_id)

    async def fetch_webhook(self) -> Optional[discord.Webhook]:
        if not self._is_message:
            return self._origin.followup
        if self._origin.webhook_id is None:
            return None
        return await self.client.fetch_webhook(self._origin.webhook_id)

    def resolve_component(self, custom_id: str):
        if not self._is_message:
            return None
        return resolvers.find_component(self._origin.components, custom_id)

    async def start_thread(self, name: str, **kwargs) -> Optional[discord.Thread]:
        """Message: thread from the message. Interaction: public thread in the text channel."""
        if self._is_message:
            return await self._origin.create_thread(name=name, **kwargs)
        channel = self._origin.channel
        if not isinstance(channel, discord.TextChannel):
            return None
        kwargs.setdefault("type", discord.ChannelType.public_thread)
        return await channel.create_thread(name=name, **kwargs)

    async def show_modal(self, modal: discord.ui.Modal) -> None:
        if self._is_message:
            return None
        await self._origin.response.send_modal(modal)
        return None

    # -- waiting for follow-up events ----------------------------------------

    async def await_message_component(
        self,
        *,
        check: Optional[Callable[[discord.Interaction], bool]] = None,
        timeout: Optional[float] = None,
    ) -> Optional[discord.Interaction]:
        """Wait for the next component interaction on this message.

        Raises asyncio.TimeoutError when `timeout` passes. Interactions return None.
        """
        if not self._is_message:
            return None

        def _on_this_message(interaction: discord.Interaction) -> bool:
            message = interaction.message
            return (
                interaction.type is discord.InteractionType.component
                and message is not None
                and message.id == self.id
                and (check is None or check(interaction))
            )

        return await self.client.wait_for("interaction", check=_on_this_message, timeout=timeout)

    async def await_reactions(
        self,
        *,
        check: Optional[Callable[[discord.Reaction, discord.abc.User], bool]] = None,
        limit: int = 1,
        timeout: Optional[float] = None,
    ) -> Optional[List[Tuple[discord.Reaction, discord.abc.User]]]:
        """Collect up to `limit` reactions added to this message within `timeout` seconds.

        Whatever was collected when the time runs out is returned. Interactions return None.
        """
        if not self._is_message:
            return None

        def _on_this_message(reaction: discord.Reaction, user: discord.abc.User) -> bool:
            return reaction.message.id == self.id and (check is None or check(reaction, user))

        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        collected: List[Tuple[discord.Reaction, discord.abc.User]] = []
        while len(collected) < limit:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                break
            try:
                pair = await self.client.wait_for("reaction_add", check=_on_this_message, timeout=remaining)
            except asyncio.TimeoutError:
                break
            collected.append(pair)
        self._trace(f"collected {len(collected)} reaction(s)")
        return collected

    async def await_modal_submit(
        self,
        *,
        check: Optional[Callable[[discord.Interaction], bool]] = None,
        timeout: Optional[float] = None,
    ) -> Optional[discord.Interaction]:
        """Wait for the invoking user to submit a modal.

        Raises asyncio.TimeoutError when `timeout` passes. Messages return None.
        """
        if self._is_message:
            return None

        def _from_invoker(interaction: discord.Interaction) -> bool:
            return (
                interaction.type is discord.InteractionType.modal_submit
                and interaction.user.id == self.author.id
                and (check is None or check(interaction))
            )

        return await self.client.wait_for("interaction", check=_from_invoker, timeout=timeout)

    # -- equality ------------------------------------------------------------

    def equals(self, other: Union["Context", discord.Message]) -> bool:
        """True only when both sides are messages with the same id, author and content.

        `==` keeps identity semantics so contexts stay hashable.
        """
        if not self._is_message:
            return False
        if isinstance(other, Context):
            return other._is_message and resolvers.same_message(self._origin, other._origin)
        if isinstance(other, discord.Message):
            return resolvers.same_message(self._origin, other)
        return False
