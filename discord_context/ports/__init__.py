"""Port interfaces (Hexagonal Architecture)."""

from discord_context.ports.inbound import CommandContext, OriginKind
from discord_context.ports.outbound import ReplyMessage

__all__ = [
    "CommandContext",
    "OriginKind",
    "ReplyMessage",
]
