"""Sort passes over the items on the ship.

A pass is planned up front (item + resolved spec, scrap before tools) and then
either executed in one batch or handed to a :class:`SortJob` that moves one
item per delay. Only one job runs at a time; starting a new one abandons the
rest of the previous job.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterable, List, Optional, Tuple

from ship_sort.models.placement import ItemCategory, PlacementSpec
from ship_sort.models.scene import GrabbableItem
from ship_sort.services.placement_engine import PlacementEngine, PlacementOutcome, SortSession
from ship_sort.services.resolver import PositionResolver
from ship_sort.services.world import PlacementSinkError

log = logging.getLogger(__name__)

PlannedMove = Tuple[GrabbableItem, PlacementSpec]


@dataclass(frozen=True)
class SortOptions:
    """Which flag-based filters a pass honours."""

    include_cruiser: bool = False  # -a: also sort items kept on a vehicle
    force: bool = False  # -A: sort everything, even ignored items
    automatic: bool = False  # triggered by the game rather than a player


@dataclass
class SortReport:
    """Tally of one sort pass."""

    moved: int = 0
    skipped: int = 0
    scrap_failed: int = 0
    tools_failed: int = 0

    @property
    def failed(self) -> int:
        return self.scrap_failed + self.tools_failed

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def summary(self) -> str:
        return failure_summary(self.scrap_failed, self.tools_failed)


def failure_summary(scrap_failed: int, tools_failed: int) -> str:
    """User-facing message naming how many items of each kind failed."""
    parts = []
    if scrap_failed > 0:
        parts.append(f"{scrap_failed} scrap items")
    if tools_failed > 0:
        parts.append(f"{tools_failed} tool items")
    if not parts:
        return "All items were sorted"
    return " and ".join(parts) + " couldn't be sorted"


def should_sort(item: GrabbableItem, spec: PlacementSpec, options: SortOptions) -> bool:
    flags = spec.flags
    if options.force:
        return True
    if flags.ignore:
        return False
    if options.automatic and flags.no_auto_sort:
        return False
    if flags.keep_on_cruiser and item.on_vehicle and not options.include_cruiser:
        return False
    return True


class ItemSorter:
    """Plan and execute sort passes."""

    def __init__(
        self,
        resolver: PositionResolver,
        engine: PlacementEngine,
        items: Callable[[], Iterable[GrabbableItem]],
    ) -> None:
        self.resolver = resolver
        self.engine = engine
        self._items = items

    def sortable_items(self, item_key: Optional[str] = None) -> List[GrabbableItem]:
        """Items nobody holds, optionally limited to one item type."""
        wanted = item_key.casefold() if item_key is not None else None
        return [
            item
            for item in self._items()
            if not item.held
            and not item.is_body
            and (wanted is None or item.key.casefold() == wanted)
        ]

    def plan(self, options: SortOptions) -> Tuple[List[PlannedMove], int]:
        """Resolve every sortable item; returns the moves and the number skipped."""
        items = self.sortable_items()
        ordered = [item for item in items if item.is_scrap] + [
            item for item in items if not item.is_scrap
        ]
        moves: List[PlannedMove] = []
        skipped = 0
        for item in ordered:
            spec = self.resolver.resolve(item.key, ItemCategory.of(item))
            if should_sort(item, spec, options):
                moves.append((item, spec))
            else:
                log.debug("Skipping %s (flags %s)", item.key, spec.flags)
                skipped += 1
        return moves, skipped

    def move(self, item: GrabbableItem, spec: PlacementSpec, session: SortSession, report: SortReport) -> None:
        """Move one item and record the outcome in ``report``."""
        try:
            outcome = self.engine.place(item, spec, session)
        except (PlacementSinkError, ValueError) as exc:
            log.error("Error while moving %s: %s", item.key, exc)
            outcome = None

        if outcome is PlacementOutcome.SUCCESS:
            report.moved += 1
        elif item.is_scrap:
            report.scrap_failed += 1
        else:
            report.tools_failed += 1

    def sort_now(self, moves: Iterable[PlannedMove], skipped: int = 0) -> SortReport:
        """Execute every move in one batch with a fresh session."""
        session = SortSession()
        report = SortReport(skipped=skipped)
        for item, spec in moves:
            self.move(item, spec, session, report)
        return report


class SortJob:
    """Throttled sort pass that moves one item per ``delay_ms``."""

    def __init__(
        self,
        sorter: ItemSorter,
        moves: Iterable[PlannedMove],
        delay_ms: int,
        skipped: int = 0,
        on_finished: Optional[Callable[[SortReport], None]] = None,
    ) -> None:
        self.sorter = sorter
        self.delay_ms = delay_ms
        self.session = SortSession()
        self.report = SortReport(skipped=skipped)
        self.cancelled = False
        self._pending: Deque[PlannedMove] = deque(moves)
        self._next_due: Optional[float] = None
        self._on_finished = on_finished

    @property
    def remaining(self) -> int:
        return len(self._pending)

    @property
    def next_due(self) -> Optional[float]:
        return self._next_due

    @property
    def done(self) -> bool:
        return self.cancelled or not self._pending

    def cancel(self) -> None:
        if not self.done:
            log.info("Sort job cancelled with %d items left", len(self._pending))
        self.cancelled = True

    def advance(self, now: float) -> bool:
        """Move the next item if its delay has elapsed; returns False once finished.

        ``now`` is a monotonic time in seconds.
        """
        if self.done:
            return False
        if self._next_due is not None and now < self._next_due:
            return True

        item, spec = self._pending.popleft()
        self.sorter.move(item, spec, self.session, self.report)
        self._next_due = now + self.delay_ms / 1000.0

        if not self._pending:
            if self._on_finished is not None:
                self._on_finished(self.report)
            return False
        return True


class SortScheduler:
    """Keeps at most one throttled sort job alive."""

    def __init__(self) -> None:
        self.active: Optional[SortJob] = None

    def start(self, job: SortJob) -> SortJob:
        if self.active is not None and not self.active.done:
            self.active.cancel()
        self.active = job
        return job

    def cancel(self) -> None:
        if self.active is not None:
            self.active.cancel()
        self.active = None

    def update(self, now: float) -> None:
        """Drive the active job; call once per game update."""
        if self.active is None:
            return
        if not self.active.advance(now):
            self.active = None

    @property
    def busy(self) -> bool:
        return self.active is not None and not self.active.done


__all__ = [
    "ItemSorter",
    "PlannedMove",
    "SortJob",
    "SortOptions",
    "SortReport",
    "SortScheduler",
    "failure_summary",
    "should_sort",
]
