"""discord-context — one handler-facing surface for messages and command interactions."""

from discord_context.config import CONFIG, ContextConfig, __version__
from discord_context.adapters.discord.context import Context, Origin
from discord_context.domain.errors import (
    AlreadyHandled,
    ContextError,
    EphemeralReply,
    InvalidOrigin,
    NotHandled,
)
from discord_context.domain.models import CommandOption, Mentions, OptionType, ReplyState
from discord_context.ports.inbound import CommandContext, OriginKind

__all__ = [
    "__version__",
    "CONFIG",
    "ContextConfig",
    "Context",
    "Origin",
    "AlreadyHandled",
    "ContextError",
    "EphemeralReply",
    "InvalidOrigin",
    "NotHandled",
    "CommandOption",
    "Mentions",
    "OptionType",
    "ReplyState",
    "CommandContext",
    "OriginKind",
]
