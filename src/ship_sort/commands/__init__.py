"""Chat-style player commands."""

from .sort_commands import (
    AutoSortToggleCommand,
    Command,
    CommandContext,
    CommandRegistry,
    CommandResult,
    PrintItemNamesCommand,
    SetItemPositionCommand,
    SortItemsCommand,
    default_commands,
)

__all__ = [
    "AutoSortToggleCommand",
    "Command",
    "CommandContext",
    "CommandRegistry",
    "CommandResult",
    "PrintItemNamesCommand",
    "SetItemPositionCommand",
    "SortItemsCommand",
    "default_commands",
]
