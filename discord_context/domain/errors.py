"""Errors raised by Context."""


class ContextError(Exception):
    """Base class for reply-lifecycle and construction errors."""


class InvalidOrigin(ContextError, TypeError):
    """Raised when a Context is built from something other than one Message or one Interaction."""

    def __init__(self, origin: object):
        super().__init__(
            f"origin must be a discord.Message or a discord.Interaction, got {type(origin).__name__}"
        )
        self.origin = origin


class AlreadyHandled(ContextError):
    """Raised by defer/reply once the reply has been sent or deferred."""


class NotHandled(ContextError):
    """Raised by follow_up/edit_reply/delete_reply/fetch_reply before any defer or reply."""


class EphemeralReply(ContextError):
    """Raised by delete_reply when the reply is ephemeral."""
