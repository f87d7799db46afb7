"""Process-wide owner of configuration, sorting services and commands."""

from __future__ import annotations

import logging
import random
import time
from functools import partial
from pathlib import Path
from typing import Callable, List, Optional

from ship_sort.commands import CommandRegistry, CommandResult, default_commands
from ship_sort.commands.sort_commands import CommandContext
from ship_sort.constants import MIN_THROTTLED_DELAY_MS
from ship_sort.services.config_file import ConfigFile
from ship_sort.services.config_store import ConfigurationStore
from ship_sort.services.placement_engine import PlacementEngine
from ship_sort.services.resolver import PositionResolver
from ship_sort.services.sorter import (
    ItemSorter,
    PlannedMove,
    SortJob,
    SortOptions,
    SortReport,
    SortScheduler,
)
from ship_sort.services.world import Scene

log = logging.getLogger(__name__)


class ShipSortPlugin:
    """Wires the sorting services to one scene and reacts to game events."""

    def __init__(
        self,
        scene: Scene,
        config_path: Optional[Path] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.scene = scene
        self.config = ConfigFile(config_path)
        self.store = ConfigurationStore(self.config, anchors=scene)
        self.resolver = PositionResolver(self.store)
        self.engine = PlacementEngine(scene, scene, scene, rng=rng)
        self.sorter = ItemSorter(self.resolver, self.engine, lambda: scene.items)
        self.scheduler = SortScheduler()
        self.messages: List[str] = []
        self._clock = clock

        self.commands: CommandRegistry = default_commands(
            CommandContext(
                store=self.store,
                sorter=self.sorter,
                player=scene,
                items=lambda: scene.items,
                in_orbit=lambda: scene.in_orbit,
                run_sort=self.run_sort,
            )
        )

    def run_sort(
        self, moves: List[PlannedMove], skipped: int = 0, failure_prefix: str = ""
    ) -> Optional[SortReport]:
        """Sort ``moves`` now, or start a throttled job and return None."""
        delay = self.store.sort_delay_ms
        if delay < MIN_THROTTLED_DELAY_MS:
            self.scheduler.cancel()
            return self.sorter.sort_now(moves, skipped)
        job = SortJob(
            self.sorter,
            moves,
            delay,
            skipped=skipped,
            on_finished=partial(self._job_finished, failure_prefix),
        )
        self.scheduler.start(job)
        self.scheduler.update(self._clock())
        return None

    def execute(self, line: str) -> CommandResult:
        result = self.commands.execute(line)
        self.messages.append(result.message)
        return result

    def update(self) -> None:
        """Advance the active sort job; call once per game update."""
        self.scheduler.update(self._clock())

    def drain(self) -> None:
        """Run the active sort job to completion, honouring its delays."""
        while self.scheduler.busy:
            job = self.scheduler.active
            assert job is not None
            if job.next_due is not None:
                wait = job.next_due - self._clock()
                if wait > 0:
                    time.sleep(wait)
            self.update()

    # ------------------------------------------------------------------
    # Game events

    def on_session_started(self) -> None:
        """A new game session: forget per-round positions."""
        self.store.clear_round_overrides()

    def on_ship_ready_to_land(self) -> Optional[SortReport]:
        if not self.store.auto_sort_enabled or not self.scene.player.is_host:
            return None
        log.info("Sorting items before landing")
        moves, skipped = self.sorter.plan(SortOptions(automatic=True))
        if not moves:
            return None
        report = self.run_sort(moves, skipped, failure_prefix="Automatic sorting failed: ")
        if report is not None and not report.ok:
            self._notify(f"Automatic sorting failed: {report.summary}")
        return report

    def _job_finished(self, failure_prefix: str, report: SortReport) -> None:
        if report.ok:
            log.info("Sorted %d items", report.moved)
        else:
            self._notify(failure_prefix + report.summary)

    def _notify(self, message: str) -> None:
        log.warning(message)
        self.messages.append(message)


__all__ = ["ShipSortPlugin"]
