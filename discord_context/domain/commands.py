"""Helpers over raw application command option payloads.

Interaction payloads nest leaf options under subcommand and subcommand-group
entries. These helpers unwrap that nesting without touching discord.py.
"""

from typing import Any, Dict, List

from discord_context.domain.models import CommandOption, OptionType

_NESTING_TYPES = (OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP)


def _is_nesting(option: Dict[str, Any]) -> bool:
    return option.get("type") in _NESTING_TYPES


def subcommand_path(options: List[Dict[str, Any]]) -> List[str]:
    """Names of the subcommand group / subcommand that were invoked, outermost first."""
    path: List[str] = []
    current = options or []
    while current and _is_nesting(current[0]):
        path.append(current[0]["name"])
        current = current[0].get("options") or []
    return path


def hoist_options(options: List[Dict[str, Any]]) -> List[CommandOption]:
    """Flatten the leaf options of the invoked (sub)command."""
    current = options or []
    while current and _is_nesting(current[0]):
        current = current[0].get("options") or []
    return [
        CommandOption(
            name=opt["name"],
            type=opt.get("type", 0),
            value=opt.get("value"),
            focused=bool(opt.get("focused", False)),
        )
        for opt in current
    ]


def format_command(name: str, options: List[Dict[str, Any]]) -> str:
    """Render an invocation the way a user would type it, e.g. `/tag get name:faq`."""
    if not name:
        return ""
    parts = [f"/{name}", *subcommand_path(options)]
    parts.extend(f"{opt.name}:{opt.value}" for opt in hoist_options(options))
    return " ".join(parts)
