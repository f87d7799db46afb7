"""Scene data structures: vectors, scene objects, surfaces and items."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ship_sort.constants import CLONE_SUFFIX


@dataclass(frozen=True)
class Vector3:
    """Point or direction in scene coordinates (meters)."""

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> "Vector3":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def up(cls) -> "Vector3":
        return cls(0.0, 1.0, 0.0)

    @classmethod
    def down(cls) -> "Vector3":
        return cls(0.0, -1.0, 0.0)

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scaled(self, factor: float) -> "Vector3":
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    def rotated_yaw(self, degrees: float) -> "Vector3":
        """Rotate around the vertical axis (clockwise seen from above)."""
        if not degrees:
            return self
        radians = math.radians(degrees)
        cos_a = math.cos(radians)
        sin_a = math.sin(radians)
        return Vector3(
            self.x * cos_a + self.z * sin_a,
            self.y,
            -self.x * sin_a + self.z * cos_a,
        )

    def is_close(self, other: "Vector3", tolerance: float = 1e-6) -> bool:
        return (
            abs(self.x - other.x) <= tolerance
            and abs(self.y - other.y) <= tolerance
            and abs(self.z - other.z) <= tolerance
        )

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"


@dataclass(eq=False)
class SceneObject:
    """Named node in the scene hierarchy with a translation and a yaw."""

    name: str
    local_position: Vector3 = field(default_factory=Vector3.zero)
    yaw: float = 0.0
    parent: Optional["SceneObject"] = None
    children: List["SceneObject"] = field(default_factory=list, repr=False)
    is_vehicle: bool = False

    def __post_init__(self) -> None:
        if self.parent is not None:
            self.parent.children.append(self)

    @property
    def path(self) -> str:
        """Root-to-leaf path, '/'-joined."""
        names = [self.name]
        node = self.parent
        while node is not None:
            names.append(node.name)
            node = node.parent
        return "/".join(reversed(names))

    def transform_point(self, local: Vector3) -> Vector3:
        """Convert a point from this object's local frame to world space."""
        point = self.local_position + local.rotated_yaw(self.yaw)
        if self.parent is not None:
            return self.parent.transform_point(point)
        return point

    def inverse_transform_point(self, world: Vector3) -> Vector3:
        """Convert a world-space point into this object's local frame."""
        point = world
        if self.parent is not None:
            point = self.parent.inverse_transform_point(world)
        return (point - self.local_position).rotated_yaw(-self.yaw)

    def __repr__(self) -> str:
        return f"SceneObject({self.path!r})"


@dataclass(frozen=True)
class Surface:
    """Horizontal, axis-aligned collider rectangle in world space."""

    collider: SceneObject
    min_x: float
    max_x: float
    min_z: float
    max_z: float
    height: float
    layer: int = 0

    def contains(self, x: float, z: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_z <= z <= self.max_z


@dataclass(frozen=True)
class RaycastHit:
    """Result of a successful raycast."""

    point: Vector3
    collider: SceneObject
    distance: float


@dataclass(eq=False)
class GrabbableItem:
    """An item that can be picked up and sorted."""

    name: str
    item_name: Optional[str] = None
    is_scrap: bool = True
    two_handed: bool = False
    vertical_offset: float = 0.0
    position: Vector3 = field(default_factory=Vector3.zero)
    rotation: int = 0
    parent: Optional[SceneObject] = None
    held: bool = False
    is_body: bool = False

    @property
    def key(self) -> str:
        """Item type name without the instantiation suffix."""
        return remove_clone(self.name)

    @property
    def on_vehicle(self) -> bool:
        return self.parent is not None and self.parent.is_vehicle


def remove_clone(name: str) -> str:
    return name[: -len(CLONE_SUFFIX)] if name.endswith(CLONE_SUFFIX) else name


__all__ = [
    "Vector3",
    "SceneObject",
    "Surface",
    "RaycastHit",
    "GrabbableItem",
    "remove_clone",
]
