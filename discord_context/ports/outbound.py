"""Outbound ports — shapes the facade needs from the objects it sends."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ReplyMessage(Protocol):
    """A sent reply the facade can later edit or delete (discord.Message fits)."""

    id: int

    async def edit(self, **kwargs) -> Any: ...
    async def delete(self, *, delay: Any = None) -> None: ...
