"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, List


class ReplyState(Enum):
    """Where a context is in its reply lifecycle."""

    FRESH = "fresh"
    DEFERRED = "deferred"
    REPLIED = "replied"


class OptionType(IntEnum):
    """Application command option types as sent in interaction payloads."""

    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


@dataclass(frozen=True)
class CommandOption:
    """A leaf option of an invoked command (subcommands already unwrapped)."""

    name: str
    type: int
    value: Any = None
    focused: bool = False

    @property
    def is_attachment(self) -> bool:
        return self.type == OptionType.ATTACHMENT


def _ids(items) -> set:
    return {getattr(item, "id", item) for item in items}


@dataclass
class Mentions:
    """Mentions carried by an origin.

    Messages fill it from their mention lists. Interactions carry no mention
    data, so they get an empty instance with the same lookup methods.
    """

    users: List[Any] = field(default_factory=list)
    roles: List[Any] = field(default_factory=list)
    channels: List[Any] = field(default_factory=list)
    everyone: bool = False

    def has_user(self, user, *, ignore_everyone: bool = False) -> bool:
        """Whether `user` (object or id) is mentioned, counting @everyone unless told not to."""
        if self.everyone and not ignore_everyone:
            return True
        return getattr(user, "id", user) in _ids(self.users)

    def has_role(self, role) -> bool:
        return getattr(role, "id", role) in _ids(self.roles)

    def has_channel(self, channel) -> bool:
        return getattr(channel, "id", channel) in _ids(self.channels)

    def __len__(self) -> int:
        return len(self.users) + len(self.roles) + len(self.channels)

    def __bool__(self) -> bool:
        return self.everyone or len(self) > 0
