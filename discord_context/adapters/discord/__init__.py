"""Discord adapter — Context over discord.Message / discord.Interaction."""

from discord_context.adapters.discord.context import Context, Origin

__all__ = ["Context", "Origin"]
