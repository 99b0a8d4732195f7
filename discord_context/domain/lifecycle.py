"""Reply lifecycle bookkeeping.

Message origins have no native notion of a deferred or tracked reply, so the
facade keeps one here. Interaction origins report the same two booleans from
discord.py and only go through the guard functions.

    FRESH ──defer──▶ DEFERRED ──edit_reply──▶ REPLIED
      └──────────────reply─────────────────────┘
"""

from collections import OrderedDict
from typing import Any, Optional, Tuple

from discord_context.domain.errors import AlreadyHandled, NotHandled
from discord_context.domain.models import ReplyState


def state_of(deferred: bool, replied: bool) -> ReplyState:
    if replied:
        return ReplyState.REPLIED
    if deferred:
        return ReplyState.DEFERRED
    return ReplyState.FRESH


def ensure_fresh(deferred: bool, replied: bool) -> None:
    """Guard for defer/reply."""
    if deferred or replied:
        raise AlreadyHandled("The reply to this context has already been sent or deferred.")


def ensure_handled(deferred: bool, replied: bool) -> None:
    """Guard for follow_up/edit_reply/delete_reply/fetch_reply."""
    if not deferred and not replied:
        raise NotHandled("The reply to this context has not been sent or deferred.")


class ReplyTracker:
    """Deferred flag plus an append-only log of replies sent for one message."""

    def __init__(self):
        self._deferred = False
        self._replies: "OrderedDict[int, Any]" = OrderedDict()

    @property
    def deferred(self) -> bool:
        return self._deferred

    @property
    def replied(self) -> bool:
        # Derived so the two can never disagree
        return bool(self._replies)

    @property
    def state(self) -> ReplyState:
        return state_of(self._deferred, self.replied)

    def mark_deferred(self) -> None:
        self._deferred = True

    def record(self, reply_id: int, reply: Any) -> None:
        """Append a sent reply. Re-recording an id keeps its original position."""
        self._replies.setdefault(reply_id, reply)

    def first(self) -> Optional[Tuple[int, Any]]:
        """The earliest tracked (id, reply), or None before the first reply."""
        for reply_id, reply in self._replies.items():
            return reply_id, reply
        return None

    def ids(self) -> list:
        return list(self._replies)

    def __len__(self) -> int:
        return len(self._replies)

    def __iter__(self):
        return iter(self._replies.items())
