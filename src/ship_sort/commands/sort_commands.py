"""Player commands: sort, put, itemnames and autosort."""

from __future__ import annotations

import argparse
import logging
import shlex
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ship_sort.constants import PUT_TARGET_LIFT
from ship_sort.models.placement import PlacementSpec
from ship_sort.models.scene import GrabbableItem, Vector3
from ship_sort.services.config_store import ConfigurationStore
from ship_sort.services.position_formatter import format_location
from ship_sort.services.sorter import ItemSorter, PlannedMove, SortOptions, SortReport
from ship_sort.services.world import PlayerView

log = logging.getLogger(__name__)

PUT_MODES = {
    "once": "once",
    "now": "once",
    "game": "game",
    "round": "game",
    "always": "always",
    "save": "always",
}


class CommandError(Exception):
    """Raised for malformed command lines."""


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    message: str


@dataclass
class CommandContext:
    """Services and callback hooks required by the commands."""

    store: ConfigurationStore
    sorter: ItemSorter
    player: PlayerView
    items: Callable[[], Iterable[GrabbableItem]]
    in_orbit: Callable[[], bool]
    run_sort: Callable[[List[PlannedMove], int], Optional[SortReport]]


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise CommandError(f"{self.prog}: {message}")


class Command:
    """Base class for one named command."""

    name = ""
    usage = ""
    requires_orbit = False

    def __init__(self, context: CommandContext) -> None:
        self._context = context

    def build_parser(self) -> argparse.ArgumentParser:
        return _ArgumentParser(prog=self.name, add_help=False)

    def execute(self, args: Sequence[str]) -> CommandResult:
        if self.requires_orbit and not self._context.in_orbit():
            return CommandResult(False, "The ship must be in orbit")
        try:
            parsed = self.build_parser().parse_args(list(args))
        except CommandError as exc:
            return CommandResult(False, f"{exc}\nUsage: {self.usage}")
        return self.run(parsed)

    def run(self, args: argparse.Namespace) -> CommandResult:
        raise NotImplementedError

    def _report(self, report: Optional[SortReport], count: int) -> CommandResult:
        if report is None:
            return CommandResult(True, f"Sorting {count} items")
        if report.ok:
            return CommandResult(True, f"Sorted {report.moved} items")
        return CommandResult(False, report.summary)


class SortItemsCommand(Command):
    """Sort every item on the ship."""

    name = "sort"
    usage = "sort [-a|--all] [-A|--force]"
    requires_orbit = True

    def build_parser(self) -> argparse.ArgumentParser:
        parser = super().build_parser()
        parser.add_argument("-a", "--all", dest="include_cruiser", action="store_true")
        parser.add_argument("-A", "--force", action="store_true")
        return parser

    def run(self, args: argparse.Namespace) -> CommandResult:
        options = SortOptions(include_cruiser=args.include_cruiser, force=args.force)
        moves, skipped = self._context.sorter.plan(options)
        if not moves:
            return CommandResult(True, "Nothing to sort")
        return self._report(self._context.run_sort(moves, skipped), len(moves))


class SetItemPositionCommand(Command):
    """Move every item of a type to where the player stands or looks."""

    name = "put"
    usage = 'put "<item>" {here|there} [once|game|always]'
    requires_orbit = True

    def build_parser(self) -> argparse.ArgumentParser:
        parser = super().build_parser()
        parser.add_argument("item")
        parser.add_argument("target", choices=("here", "there"))
        parser.add_argument("mode", nargs="?", default="once", choices=sorted(PUT_MODES))
        return parser

    def run(self, args: argparse.Namespace) -> CommandResult:
        context = self._context
        item_key = self._item_key(args.item)
        if item_key is None:
            return CommandResult(False, f"Unknown item: {args.item}")

        hit = context.player.standing_on() if args.target == "here" else context.player.looking_at()
        if hit is None:
            return CommandResult(False, "Couldn't find a surface to put the item on")

        collider = hit.collider
        local = collider.inverse_transform_point(hit.point + Vector3(0.0, PUT_TARGET_LIFT, 0.0))
        mode = PUT_MODES[args.mode]

        if mode == "game":
            context.store.set_round_override(item_key, local, collider)
        elif mode == "always":
            text = format_location(collider.path, local)
            if not context.store.set_item_position(item_key, text):
                context.store.set_custom_position(item_key, text)
            log.info("Saved position for %s: %s", item_key, text)

        spec = PlacementSpec(position=local, anchor=collider)
        moves = [(item, spec) for item in context.sorter.sortable_items(item_key)]
        if not moves:
            return CommandResult(True, f"Position for {item_key} set; no items to move")
        return self._report(context.run_sort(moves, 0), len(moves))

    def _item_key(self, name: str) -> Optional[str]:
        internal = self._context.store.lookup_internal_name(name)
        if internal is not None:
            return internal
        wanted = name.casefold()
        for item in self._context.items():
            if item.key.casefold() == wanted:
                return item.key
        return None


class PrintItemNamesCommand(Command):
    """List the item names found on the ship."""

    name = "itemnames"
    usage = "itemnames [-a|--all]"

    def build_parser(self) -> argparse.ArgumentParser:
        parser = super().build_parser()
        parser.add_argument("-a", "--all", dest="show_all", action="store_true")
        return parser

    def run(self, args: argparse.Namespace) -> CommandResult:
        store = self._context.store
        names = sorted(
            {
                item.key
                for item in self._context.items()
                if not item.is_body
                and (args.show_all or store.lookup_internal_name(item.key) is None)
            },
            key=str.casefold,
        )
        if not names:
            return CommandResult(True, "No items found" if args.show_all else "No unknown items found")
        return CommandResult(True, "\n".join(names))


class AutoSortToggleCommand(Command):
    """Enable, disable or flip automatic sorting before landing."""

    name = "autosort"
    usage = "autosort [on|off]"

    def build_parser(self) -> argparse.ArgumentParser:
        parser = super().build_parser()
        parser.add_argument("state", nargs="?", choices=("on", "off"))
        return parser

    def run(self, args: argparse.Namespace) -> CommandResult:
        entry = self._context.store.auto_sort
        if args.state is None:
            entry.value = not bool(entry.value)
        else:
            entry.value = args.state == "on"
        return CommandResult(True, f"Automatic sorting {'enabled' if entry.value else 'disabled'}")


class CommandRegistry:
    """Dispatch command lines to registered commands."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}

    def register(self, command: Command) -> None:
        self._commands[command.name] = command

    @property
    def names(self) -> List[str]:
        return sorted(self._commands)

    def execute(self, line: str) -> CommandResult:
        try:
            words = shlex.split(line)
        except ValueError as exc:
            return CommandResult(False, f"Invalid command line: {exc}")
        if not words:
            return CommandResult(False, "Empty command")
        command = self._commands.get(words[0].lower())
        if command is None:
            return CommandResult(False, f"Unknown command: {words[0]}")
        log.debug("Running command %s %s", command.name, words[1:])
        return command.execute(words[1:])


def default_commands(context: CommandContext) -> CommandRegistry:
    registry = CommandRegistry()
    for command_type in (
        SortItemsCommand,
        SetItemPositionCommand,
        PrintItemNamesCommand,
        AutoSortToggleCommand,
    ):
        registry.register(command_type(context))
    return registry


__all__ = [
    "AutoSortToggleCommand",
    "Command",
    "CommandContext",
    "CommandError",
    "CommandRegistry",
    "CommandResult",
    "PrintItemNamesCommand",
    "SetItemPositionCommand",
    "SortItemsCommand",
    "default_commands",
]
