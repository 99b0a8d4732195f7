"""Domain layer — pure Python, no framework dependencies."""

from discord_context.domain.commands import format_command, hoist_options, subcommand_path
from discord_context.domain.errors import (
    AlreadyHandled,
    ContextError,
    EphemeralReply,
    InvalidOrigin,
    NotHandled,
)
from discord_context.domain.lifecycle import ReplyTracker, ensure_fresh, ensure_handled, state_of
from discord_context.domain.models import CommandOption, Mentions, OptionType, ReplyState

__all__ = [
    "AlreadyHandled",
    "CommandOption",
    "ContextError",
    "EphemeralReply",
    "InvalidOrigin",
    "Mentions",
    "NotHandled",
    "OptionType",
    "ReplyState",
    "ReplyTracker",
    "ensure_fresh",
    "ensure_handled",
    "format_command",
    "hoist_options",
    "state_of",
    "subcommand_path",
]
