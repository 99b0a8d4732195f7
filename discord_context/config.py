"""Configuration and shared state."""

__version__ = "0.1.0"

import os
from dataclasses import asdict, dataclass

from dotenv import load_dotenv

load_dotenv()

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@dataclass
class ContextConfig:
    """Typed configuration for Context instances."""

    # Message-origin replies ping the author unless the caller says otherwise
    mention_author: bool = True
    # Print defer/reply/edit/delete transitions to stderr
    log_lifecycle: bool = False

    @classmethod
    def from_env(cls) -> "ContextConfig":
        """Create ContextConfig from environment variables."""
        return cls(
            mention_author=_env_flag("DISCORD_CONTEXT_MENTION_AUTHOR", "true"),
            log_lifecycle=_env_flag("DISCORD_CONTEXT_LOG_LIFECYCLE", "false"),
        )


# Read once at import; Context falls back to it when no config is passed
CONFIG = asdict(ContextConfig.from_env())
