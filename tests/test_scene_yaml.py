"""Scene YAML save/load round trip and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import add_item
from ship_sort.constants import CLOSET_PATH, SHIP_PATH
from ship_sort.models.scene import Vector3
from ship_sort.services.scene_yaml import (
    SceneYamlError,
    dump_scene_yaml,
    load_scene_yaml,
    scene_from_dict,
)


def test_save_then_load_preserves_scene(tmp_path: Path, scene):
    scene.add_object("Environment/CompanyCruiser", Vector3(30.0, 0.0, 0.0), yaw=45.0, is_vehicle=True)
    add_item(scene, "Mug(Clone)", vertical_offset=0.1, rotation=15)
    add_item(scene, "Shovel", is_scrap=False, held=True).parent = scene.find(CLOSET_PATH)
    scene.player.position = Vector3(1.0, 0.0, 2.0)
    scene.in_orbit = False

    yaml_path = tmp_path / "scene.yaml"
    dump_scene_yaml(scene, destination=yaml_path)
    loaded = load_scene_yaml(yaml_path)

    assert [node.path for node in loaded.objects()] == [node.path for node in scene.objects()]
    assert loaded.find("Environment/CompanyCruiser").is_vehicle
    assert loaded.find("Environment/CompanyCruiser").yaw == 45.0
    assert loaded.find(CLOSET_PATH).local_position == Vector3(-3.0, 0.0, -4.0)
    assert len(loaded.surfaces) == 2
    assert loaded.surfaces[1].collider is loaded.find(CLOSET_PATH)
    assert loaded.surfaces[1].layer == 8

    mug, shovel = loaded.items
    assert mug.name == "Mug(Clone)"
    assert mug.vertical_offset == 0.1
    assert mug.rotation == 15
    assert mug.parent is loaded.find(SHIP_PATH)
    assert shovel.held and not shovel.is_scrap
    assert shovel.parent is loaded.find(CLOSET_PATH)

    assert loaded.player.position == Vector3(1.0, 0.0, 2.0)
    assert loaded.in_orbit is False


def test_minimal_document_uses_defaults():
    scene = scene_from_dict({"objects": [{"path": SHIP_PATH}]})

    assert scene.ship is not None
    assert scene.in_orbit
    assert scene.items == []


@pytest.mark.parametrize(
    "document, message",
    [
        ([], "mapping"),
        ({"objects": [{"position": [0, 0, 0]}]}, "path"),
        ({"objects": [{"path": "A", "position": [0, 0]}]}, "position"),
        ({"surfaces": [{"collider": "Missing", "x": [0, 1], "z": [0, 1], "height": 0}]}, "collider"),
        ({"objects": [{"path": "A"}], "surfaces": [{"collider": "A", "x": [1, 0], "z": [0, 1], "height": 0}]}, "x"),
        ({"objects": [{"path": "A"}], "surfaces": [{"collider": "A", "x": [0, 1], "z": ["a", 1], "height": 0}]}, "z"),
        ({"items": [{"name": "Mug", "scrap": "yes"}]}, "scrap"),
        ({"player": [1, 2, 3]}, "player"),
    ],
)
def test_invalid_documents_are_rejected(document, message):
    with pytest.raises(SceneYamlError, match=message):
        scene_from_dict(document)


def test_missing_file(tmp_path: Path):
    with pytest.raises(SceneYamlError):
        load_scene_yaml(tmp_path / "nope.yaml")
