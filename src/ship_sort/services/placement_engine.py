"""Turn resolved placement specs into item moves."""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Dict, Optional

from ship_sort.constants import (
    AUTO_ROTATION,
    CLOSET_SURFACE_MASK,
    PARENT_SURFACE_SINK,
    RAYCAST_DISTANCE,
    SHIP_PATH,
    SHIP_SURFACE_MASK,
)
from ship_sort.models.placement import PlacementSpec
from ship_sort.models.scene import GrabbableItem, SceneObject, Vector3
from ship_sort.services.world import AnchorResolver, PlacementSink, WorldQuery

log = logging.getLogger(__name__)


class PlacementOutcome(Enum):
    SUCCESS = "success"
    RAYCAST_FAILED = "raycast failed"
    ANCHOR_MISSING = "anchor missing"


class SortSession:
    """Per-invocation count of placements per item key."""

    def __init__(self) -> None:
        self.counts: Dict[str, int] = {}

    def count(self, item_key: str) -> int:
        return self.counts.get(item_key, 0)

    def increment(self, item_key: str) -> int:
        self.counts[item_key] = self.count(item_key) + 1
        return self.counts[item_key]


def randomize(
    point: Vector3, radius: Optional[float] = None, rng: Optional[random.Random] = None
) -> Vector3:
    """Jitter X and Z independently by up to ``radius``."""
    if radius is not None and radius < 0:
        raise ValueError(f"Invalid random offset {radius} (must be positive)")
    if radius is None or abs(radius) < 1e-9:
        return point
    rng = rng or random.Random()
    return Vector3(
        point.x + rng.uniform(-radius, radius),
        point.y,
        point.z + rng.uniform(-radius, radius),
    )


def effective_position(spec: PlacementSpec, repetition: int) -> Vector3:
    if spec.position is None:
        raise ValueError("Placement spec has no position")
    if spec.position_offset is None:
        return spec.position
    return spec.position + spec.position_offset.scaled(repetition)


def effective_rotation(spec: PlacementSpec, repetition: int) -> int:
    """Base yaw (or the auto sentinel) plus the wrapped per-repetition offset."""
    base = spec.floor_rotation if spec.floor_rotation is not None else AUTO_ROTATION
    return base + ((spec.rotation_offset or 0) * repetition) % 360


class PlacementEngine:
    """Compute target transforms and hand them to the placement sink."""

    def __init__(
        self,
        anchors: AnchorResolver,
        world: WorldQuery,
        sink: PlacementSink,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.anchors = anchors
        self.world = world
        self.sink = sink
        self.rng = rng or random.Random()

    def place(self, item: GrabbableItem, spec: PlacementSpec, session: SortSession) -> PlacementOutcome:
        """Move ``item`` according to ``spec``; the repetition count comes from ``session``."""
        repetition = session.count(item.key)
        position = effective_position(spec, repetition)
        rotation = effective_rotation(spec, repetition)

        if spec.flags.parent and spec.anchor is not None:
            outcome = self._place_in_parent(item, position, spec.anchor, rotation, spec)
        else:
            outcome = self._place_relative(item, position, spec.anchor, rotation, spec)

        if outcome is PlacementOutcome.SUCCESS:
            session.increment(item.key)
        return outcome

    def _place_in_parent(
        self,
        item: GrabbableItem,
        position: Vector3,
        parent: SceneObject,
        rotation: int,
        spec: PlacementSpec,
    ) -> PlacementOutcome:
        log.info(">> Moving item %s to position %s in %s", item.key, position, parent.name)
        if not self._is_present(parent):
            log.warning("   Couldn't find %s", parent.path)
            return PlacementOutcome.ANCHOR_MISSING

        lift = Vector3(0.0, item.vertical_offset - PARENT_SURFACE_SINK, 0.0)
        if spec.flags.exact:
            local = randomize(position + lift, spec.random_offset, self.rng)
        else:
            hit = self.world.raycast_down(
                parent.transform_point(position), RAYCAST_DISTANCE, CLOSET_SURFACE_MASK
            )
            if hit is None:
                log.warning("   Raycast unsuccessful")
                return PlacementOutcome.RAYCAST_FAILED
            local = parent.inverse_transform_point(
                randomize(hit.point + lift, spec.random_offset, self.rng)
            )

        self.sink.place(item, local, rotation, parent)
        return PlacementOutcome.SUCCESS

    def _place_relative(
        self,
        item: GrabbableItem,
        position: Vector3,
        relative_to: Optional[SceneObject],
        rotation: int,
        spec: PlacementSpec,
    ) -> PlacementOutcome:
        log.info(
            ">> Moving item %s to position %s relative to %s",
            item.key,
            position,
            "ship" if relative_to is None else relative_to.name,
        )
        ship = self.anchors.find(SHIP_PATH)
        if ship is None:
            log.warning("   Couldn't find ship")
            return PlacementOutcome.ANCHOR_MISSING
        if relative_to is None:
            relative_to = ship
        elif not self._is_present(relative_to):
            log.warning("   Couldn't find %s", relative_to.path)
            return PlacementOutcome.ANCHOR_MISSING

        lift = Vector3(0.0, item.vertical_offset, 0.0)
        if spec.flags.exact:
            local = randomize(position + lift, spec.random_offset, self.rng)
        else:
            hit = self.world.raycast_down(
                relative_to.transform_point(position), RAYCAST_DISTANCE, SHIP_SURFACE_MASK
            )
            if hit is None:
                log.warning("   Raycast unsuccessful")
                return PlacementOutcome.RAYCAST_FAILED
            local = randomize(
                ship.inverse_transform_point(hit.point + lift), spec.random_offset, self.rng
            )

        self.sink.place(item, local, rotation, None)
        return PlacementOutcome.SUCCESS

    def _is_present(self, node: SceneObject) -> bool:
        return self.anchors.find(node.path) is node


__all__ = [
    "PlacementEngine",
    "PlacementOutcome",
    "SortSession",
    "effective_position",
    "effective_rotation",
    "randomize",
]
