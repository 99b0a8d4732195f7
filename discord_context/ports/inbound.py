"""Inbound port — the surface command handlers program against."""

from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

from discord_context.domain.models import ReplyState


class OriginKind(Enum):
    """Which inbound event a context adapts."""

    MESSAGE = "message"
    INTERACTION = "interaction"


@runtime_checkable
class CommandContext(Protocol):
    """Origin-agnostic view of one inbound message or command invocation."""

    @property
    def kind(self) -> OriginKind: ...

    @property
    def id(self) -> int: ...

    @property
    def author(self) -> Any: ...

    @property
    def channel_id(self) -> Optional[int]: ...

    @property
    def guild_id(self) -> Optional[int]: ...

    @property
    def content(self) -> str: ...

    @property
    def deferred(self) -> bool: ...

    @property
    def replied(self) -> bool: ...

    @property
    def ephemeral(self) -> bool: ...

    @property
    def state(self) -> ReplyState: ...

    async def defer(self, **kwargs) -> Any: ...
    async def reply(self, content: Optional[str] = None, **kwargs) -> Any: ...
    async def follow_up(self, content: Optional[str] = None, **kwargs) -> Any: ...
    async def edit_reply(self, content: Optional[str] = None, **kwargs) -> Any: ...
    async def delete_reply(self) -> None: ...
    async def fetch_reply(self) -> Any: ...
