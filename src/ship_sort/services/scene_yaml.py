"""YAML loading and serialization for in-memory scenes."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ship_sort.constants import SHIP_PATH
from ship_sort.models.scene import GrabbableItem, SceneObject, Vector3
from ship_sort.services.world import Player, Scene


class SceneYamlError(Exception):
    """Raised when a scene YAML document fails validation."""


def load_scene_yaml(yaml_path: Path) -> Scene:
    """Load and validate a scene YAML file."""
    if not yaml_path.exists():
        raise SceneYamlError(f"Scene file does not exist: {yaml_path}")

    with yaml_path.open("r", encoding="utf-8") as handle:
        parsed = yaml.safe_load(handle)

    return scene_from_dict(parsed)


def scene_from_dict(parsed: Any) -> Scene:
    if not isinstance(parsed, dict):
        raise SceneYamlError("Scene YAML must be a mapping at the top level")

    scene = Scene(
        ship_path=_expect_str(parsed, "ship", default=SHIP_PATH),
        in_orbit=_expect_bool(parsed, "in_orbit", default=True),
    )

    for entry in _expect_list(parsed, "objects"):
        path = _expect_str(entry, "path")
        scene.add_object(
            path,
            local_position=_expect_vector(entry, "position", default=Vector3.zero()),
            yaw=_expect_float(entry, "yaw", default=0.0),
            is_vehicle=_expect_bool(entry, "vehicle", default=False),
        )

    for entry in _expect_list(parsed, "surfaces"):
        collider = _expect_object(scene, entry, "collider")
        min_x, max_x = _expect_range(entry, "x")
        min_z, max_z = _expect_range(entry, "z")
        scene.add_surface(
            collider,
            min_x,
            max_x,
            min_z,
            max_z,
            height=_expect_float(entry, "height"),
            layer=_expect_int(entry, "layer", default=0),
        )

    for entry in _expect_list(parsed, "items"):
        parent = _expect_object(scene, entry, "parent") if "parent" in entry else None
        scene.items.append(
            GrabbableItem(
                name=_expect_str(entry, "name"),
                item_name=_expect_str(entry, "display_name", default="") or None,
                is_scrap=_expect_bool(entry, "scrap", default=True),
                two_handed=_expect_bool(entry, "two_handed", default=False),
                vertical_offset=_expect_float(entry, "vertical_offset", default=0.0),
                position=_expect_vector(entry, "position", default=Vector3.zero()),
                rotation=_expect_int(entry, "rotation", default=0),
                parent=parent,
                held=_expect_bool(entry, "held", default=False),
                is_body=_expect_bool(entry, "body", default=False),
            )
        )

    player_raw = parsed.get("player")
    if player_raw is not None:
        if not isinstance(player_raw, dict):
            raise SceneYamlError("Field 'player' must be a mapping")
        scene.player = Player(
            position=_expect_vector(player_raw, "position", default=Vector3.zero()),
            look_direction=_expect_vector(player_raw, "look", default=Vector3(0.0, 0.0, 1.0)),
            eye_height=_expect_float(player_raw, "eye_height", default=1.6),
            is_host=_expect_bool(player_raw, "host", default=True),
        )

    return scene


def scene_to_dict(scene: Scene) -> Dict[str, Any]:
    """Convert a scene into a serializable mapping."""
    data: Dict[str, Any] = {"ship": scene.ship_path, "in_orbit": scene.in_orbit}
    data["objects"] = [
        {
            "path": node.path,
            "position": _vector_to_list(node.local_position),
            "yaw": node.yaw,
            "vehicle": node.is_vehicle,
        }
        for node in scene.objects()
    ]
    data["surfaces"] = [
        {
            "collider": surface.collider.path,
            "x": [surface.min_x, surface.max_x],
            "z": [surface.min_z, surface.max_z],
            "height": surface.height,
            "layer": surface.layer,
        }
        for surface in scene.surfaces
    ]
    items: List[Dict[str, Any]] = []
    for item in scene.items:
        entry: Dict[str, Any] = {
            "name": item.name,
            "scrap": item.is_scrap,
            "two_handed": item.two_handed,
            "vertical_offset": item.vertical_offset,
            "position": _vector_to_list(item.position),
            "rotation": item.rotation,
            "held": item.held,
            "body": item.is_body,
        }
        if item.item_name:
            entry["display_name"] = item.item_name
        if item.parent is not None:
            entry["parent"] = item.parent.path
        items.append(entry)
    data["items"] = items
    data["player"] = {
        "position": _vector_to_list(scene.player.position),
        "look": _vector_to_list(scene.player.look_direction),
        "eye_height": scene.player.eye_height,
        "host": scene.player.is_host,
    }
    return data


def dump_scene_yaml(scene: Scene, destination: Optional[Path] = None) -> str:
    """Serialize the scene to YAML, optionally writing to disk."""
    yaml_text = yaml.safe_dump(scene_to_dict(scene), sort_keys=False)

    if destination is not None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(yaml_text, encoding="utf-8")

    return yaml_text


def _vector_to_list(vector: Vector3) -> List[float]:
    return [vector.x, vector.y, vector.z]


def _expect_list(mapping: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = mapping.get(key) or []
    if not isinstance(value, list):
        raise SceneYamlError(f"Field '{key}' must be a list")
    for entry in value:
        if not isinstance(entry, dict):
            raise SceneYamlError(f"Each entry of '{key}' must be a mapping")
    return value


def _expect_str(mapping: Dict[str, Any], key: str, default: Optional[str] = None) -> str:
    if key not in mapping:
        if default is None:
            raise SceneYamlError(f"Missing required field: {key}")
        return default
    value = mapping[key]
    if not isinstance(value, str):
        raise SceneYamlError(f"Field '{key}' must be a string")
    return value


def _expect_float(mapping: Dict[str, Any], key: str, default: Optional[float] = None) -> float:
    if key not in mapping:
        if default is None:
            raise SceneYamlError(f"Missing required field: {key}")
        return float(default)
    value = mapping[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SceneYamlError(f"Field '{key}' must be a number")
    return float(value)


def _expect_int(mapping: Dict[str, Any], key: str, default: int) -> int:
    value = mapping.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SceneYamlError(f"Field '{key}' must be an integer")
    return value


def _expect_bool(mapping: Dict[str, Any], key: str, default: bool) -> bool:
    value = mapping.get(key, default)
    if not isinstance(value, bool):
        raise SceneYamlError(f"Field '{key}' must be a boolean")
    return value


def _expect_vector(mapping: Dict[str, Any], key: str, default: Vector3) -> Vector3:
    if key not in mapping:
        return default
    value = mapping[key]
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise SceneYamlError(f"Field '{key}' must be a list of three numbers")
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in value):
        raise SceneYamlError(f"Field '{key}' must be a list of three numbers")
    return Vector3(float(value[0]), float(value[1]), float(value[2]))


def _expect_range(mapping: Dict[str, Any], key: str) -> tuple[float, float]:
    value = mapping.get(key)
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise SceneYamlError(f"Field '{key}' must be a [min, max] pair")
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in value):
        raise SceneYamlError(f"Field '{key}' must be a [min, max] pair of numbers")
    low, high = float(value[0]), float(value[1])
    if low > high:
        raise SceneYamlError(f"Field '{key}' must be ordered as [min, max]")
    return low, high


def _expect_object(scene: Scene, mapping: Dict[str, Any], key: str) -> SceneObject:
    path = _expect_str(mapping, key)
    node = scene.find(path)
    if node is None:
        raise SceneYamlError(f"Field '{key}' refers to unknown object {path}")
    return node


__all__ = [
    "SceneYamlError",
    "dump_scene_yaml",
    "load_scene_yaml",
    "scene_from_dict",
    "scene_to_dict",
]
