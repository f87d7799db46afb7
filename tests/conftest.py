"""Shared fixtures: a small ship scene with a floor and a closet shelf."""

from __future__ import annotations

import pytest

from ship_sort.constants import BUNKBEDS_PATH, CLOSET_PATH, FILE_CABINET_PATH, SHIP_PATH
from ship_sort.models.scene import GrabbableItem, Vector3
from ship_sort.services.config_file import ConfigFile
from ship_sort.services.config_store import ConfigurationStore
from ship_sort.services.world import Scene

SHIP_FLOOR_LAYER = 0  # included in the ship surface mask
CLOSET_SHELF_LAYER = 8  # included in the closet surface mask only


def build_ship_scene() -> Scene:
    scene = Scene()
    ship = scene.add_object(SHIP_PATH)
    closet = scene.add_object(CLOSET_PATH, Vector3(-3.0, 0.0, -4.0))
    scene.add_object(FILE_CABINET_PATH, Vector3(2.0, 0.0, -6.0))
    scene.add_object(BUNKBEDS_PATH, Vector3(5.0, 0.0, -6.0))
    scene.add_surface(ship, -20.0, 20.0, -20.0, 20.0, height=0.0, layer=SHIP_FLOOR_LAYER)
    scene.add_surface(closet, -4.0, -2.0, -5.0, -3.0, height=1.5, layer=CLOSET_SHELF_LAYER)
    return scene


def add_item(scene: Scene, name: str, **kwargs) -> GrabbableItem:
    item = GrabbableItem(name=name, parent=scene.ship, **kwargs)
    scene.items.append(item)
    return item


@pytest.fixture
def scene() -> Scene:
    return build_ship_scene()


@pytest.fixture
def store(scene: Scene) -> ConfigurationStore:
    return ConfigurationStore(ConfigFile(), anchors=scene)
