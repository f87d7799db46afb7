"""World access boundary and an in-memory scene implementing it."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol

from ship_sort.constants import AUTO_ROTATION, RAYCAST_DISTANCE, SHIP_PATH, SHIP_SURFACE_MASK
from ship_sort.models.scene import GrabbableItem, RaycastHit, SceneObject, Surface, Vector3


class PlacementSinkError(RuntimeError):
    """Raised when the host refuses to move an item."""


class AnchorResolver(Protocol):
    def find(self, path: str) -> Optional[SceneObject]:
        """Return the object at ``path`` or None."""


class WorldQuery(Protocol):
    def raycast(
        self, origin: Vector3, direction: Vector3, max_distance: float, layer_mask: int
    ) -> Optional[RaycastHit]:
        """Cast a ray and return the closest hit."""

    def raycast_down(
        self, origin: Vector3, max_distance: float, layer_mask: int
    ) -> Optional[RaycastHit]:
        """Cast a ray straight down and return the closest hit."""


class PlacementSink(Protocol):
    def place(
        self,
        item: GrabbableItem,
        local_position: Vector3,
        rotation: int,
        parent: Optional[SceneObject],
    ) -> None:
        """Drop ``item`` at ``local_position`` (ship-local, or parent-local when parented)."""


class PlayerView(Protocol):
    def standing_on(self) -> Optional[RaycastHit]:
        """Surface directly below the local player."""

    def looking_at(self) -> Optional[RaycastHit]:
        """Surface the local player is looking at."""


@dataclass
class Player:
    """Local player state used by the put command."""

    position: Vector3 = field(default_factory=Vector3.zero)
    look_direction: Vector3 = field(default_factory=lambda: Vector3(0.0, 0.0, 1.0))
    eye_height: float = 1.6
    is_host: bool = True


@dataclass
class Scene:
    """In-memory scene graph with horizontal colliders and items.

    Implements :class:`AnchorResolver`, :class:`WorldQuery`,
    :class:`PlacementSink` and :class:`PlayerView`.
    """

    roots: List[SceneObject] = field(default_factory=list)
    surfaces: List[Surface] = field(default_factory=list)
    items: List[GrabbableItem] = field(default_factory=list)
    player: Player = field(default_factory=Player)
    ship_path: str = SHIP_PATH
    in_orbit: bool = True

    def add_object(
        self,
        path: str,
        local_position: Optional[Vector3] = None,
        yaw: float = 0.0,
        is_vehicle: bool = False,
    ) -> SceneObject:
        """Create an object at ``path``; missing intermediate nodes are created at the origin."""
        names = _split_path(path)
        if not names:
            raise ValueError("Object path must not be empty")
        parent: Optional[SceneObject] = None
        for depth, name in enumerate(names):
            siblings = self.roots if parent is None else parent.children
            existing = next((child for child in siblings if child.name == name), None)
            is_leaf = depth == len(names) - 1
            if existing is not None and not is_leaf:
                parent = existing
                continue
            if existing is not None:
                existing.local_position = local_position or existing.local_position
                existing.yaw = yaw
                existing.is_vehicle = is_vehicle
                return existing
            node = SceneObject(
                name=name,
                local_position=(local_position or Vector3.zero()) if is_leaf else Vector3.zero(),
                yaw=yaw if is_leaf else 0.0,
                parent=parent,
                is_vehicle=is_vehicle and is_leaf,
            )
            if parent is None:
                self.roots.append(node)
            parent = node
        assert parent is not None
        return parent

    def remove_object(self, path: str) -> None:
        node = self.find(path)
        if node is None:
            return
        siblings = self.roots if node.parent is None else node.parent.children
        siblings.remove(node)
        self.surfaces = [s for s in self.surfaces if not _is_descendant(s.collider, node)]

    def add_surface(
        self,
        collider: SceneObject,
        min_x: float,
        max_x: float,
        min_z: float,
        max_z: float,
        height: float,
        layer: int = 0,
    ) -> Surface:
        surface = Surface(collider, min_x, max_x, min_z, max_z, height, layer)
        self.surfaces.append(surface)
        return surface

    def objects(self) -> Iterable[SceneObject]:
        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @property
    def ship(self) -> Optional[SceneObject]:
        return self.find(self.ship_path)

    @property
    def vehicles(self) -> List[SceneObject]:
        return [node for node in self.objects() if node.is_vehicle]

    # ------------------------------------------------------------------
    # AnchorResolver

    def find(self, path: str) -> Optional[SceneObject]:
        names = _split_path(path)
        if not names:
            return None
        candidates = self.roots
        node: Optional[SceneObject] = None
        for name in names:
            node = next((child for child in candidates if child.name == name), None)
            if node is None:
                return None
            candidates = node.children
        return node

    # ------------------------------------------------------------------
    # WorldQuery

    def raycast(
        self, origin: Vector3, direction: Vector3, max_distance: float, layer_mask: int
    ) -> Optional[RaycastHit]:
        length = math.sqrt(direction.x ** 2 + direction.y ** 2 + direction.z ** 2)
        if length == 0 or direction.y == 0:
            # Only horizontal colliders exist, so level rays never hit.
            return None
        unit = direction.scaled(1.0 / length)
        best: Optional[RaycastHit] = None
        for surface in self.surfaces:
            if not (layer_mask >> surface.layer) & 1:
                continue
            distance = (surface.height - origin.y) / unit.y
            if distance < 0 or distance > max_distance:
                continue
            point = origin + unit.scaled(distance)
            if not surface.contains(point.x, point.z):
                continue
            if best is None or distance < best.distance:
                best = RaycastHit(point=point, collider=surface.collider, distance=distance)
        return best

    def raycast_down(
        self, origin: Vector3, max_distance: float, layer_mask: int
    ) -> Optional[RaycastHit]:
        return self.raycast(origin, Vector3.down(), max_distance, layer_mask)

    # ------------------------------------------------------------------
    # PlacementSink

    def place(
        self,
        item: GrabbableItem,
        local_position: Vector3,
        rotation: int,
        parent: Optional[SceneObject],
    ) -> None:
        if item not in self.items:
            raise PlacementSinkError(f"Item {item.name} is not part of the scene")
        if item.held:
            raise PlacementSinkError(f"Item {item.name} is held by a player")
        item.parent = parent if parent is not None else self.ship
        item.position = local_position
        if rotation != AUTO_ROTATION:
            item.rotation = rotation % 360

    # ------------------------------------------------------------------
    # PlayerView

    def standing_on(self) -> Optional[RaycastHit]:
        return self.raycast_down(self.player.position, RAYCAST_DISTANCE, SHIP_SURFACE_MASK)

    def looking_at(self) -> Optional[RaycastHit]:
        eye = self.player.position + Vector3(0.0, self.player.eye_height, 0.0)
        return self.raycast(eye, self.player.look_direction, RAYCAST_DISTANCE, SHIP_SURFACE_MASK)


def _split_path(path: str) -> List[str]:
    return [name for name in path.replace("\\", "/").split("/") if name]


def _is_descendant(node: SceneObject, ancestor: SceneObject) -> bool:
    current: Optional[SceneObject] = node
    while current is not None:
        if current is ancestor:
            return True
        current = current.parent
    return False


__all__ = [
    "AnchorResolver",
    "WorldQuery",
    "PlacementSink",
    "PlacementSinkError",
    "PlayerView",
    "Player",
    "Scene",
]
