"""Integration tests for the plugin, its commands and game events."""

from __future__ import annotations

import random
from pathlib import Path

import pytest

from conftest import add_item
from ship_sort.constants import CLOSET_PATH
from ship_sort.models.scene import Vector3
from ship_sort.plugin import ShipSortPlugin
from ship_sort.services.config_file import load_config_yaml


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def plugin(scene, clock) -> ShipSortPlugin:
    return ShipSortPlugin(scene, rng=random.Random(1), clock=clock)


def test_sort_moves_items_to_their_positions(scene, plugin):
    mug = add_item(scene, "Mug(Clone)")
    shovel = add_item(scene, "Shovel(Clone)", is_scrap=False, vertical_offset=0.2)

    result = plugin.execute("sort")

    assert result.ok
    assert result.message == "Sorted 2 items"
    assert mug.position.is_close(Vector3(-2.45, 0.0, -6.87))
    assert shovel.parent is scene.find(CLOSET_PATH)
    assert shovel.rotation == 90


def test_sort_requires_orbit(scene, plugin):
    add_item(scene, "Mug")
    scene.in_orbit = False

    result = plugin.execute("sort")

    assert not result.ok
    assert "orbit" in result.message


def test_sort_reports_failures(scene, plugin):
    plugin.store.set_custom_mapping("Lost:100,2,100")
    add_item(scene, "Lost")

    result = plugin.execute("sort -a")

    assert not result.ok
    assert result.message == "1 scrap items couldn't be sorted"


def test_sort_rejects_unknown_options(plugin):
    result = plugin.execute("sort --sideways")

    assert not result.ok
    assert "Usage: sort" in result.message


def test_sort_with_nothing_to_do(plugin):
    assert plugin.execute("sort").message == "Nothing to sort"


def test_force_sorts_ignored_items(scene, plugin):
    plugin.store.set_custom_mapping("Toy:1,2,3:N")
    toy = add_item(scene, "Toy", position=Vector3(9.0, 9.0, 9.0))

    assert plugin.execute("sort").message == "Nothing to sort"
    assert toy.position == Vector3(9.0, 9.0, 9.0)

    assert plugin.execute("sort -A").ok
    assert toy.position.is_close(Vector3(1.0, 0.0, 3.0))


def test_put_here_always_persists_the_position(tmp_path: Path, scene, clock):
    config_path = tmp_path / "ship_sort.yaml"
    plugin = ShipSortPlugin(scene, config_path=config_path, clock=clock)
    scene.player.position = Vector3(1.0, 0.0, 2.0)
    mug = add_item(scene, "Mug(Clone)")

    result = plugin.execute('put "coffee mug" here always')

    assert result.ok
    assert mug.position.is_close(Vector3(1.0, 0.0, 2.0))
    saved = load_config_yaml(config_path)
    assert saved["Items"]["Mug"] == "Environment/HangarShip:1,0.2,2"


def test_put_always_for_unregistered_item_uses_custom_mapping(scene, plugin):
    scene.player.position = Vector3(1.0, 0.0, 2.0)
    add_item(scene, "Banana(Clone)")

    assert plugin.execute("put banana here save").ok

    assert plugin.store.custom_item_positions.value == "Banana:Environment/HangarShip:1,0.2,2"
    assert plugin.store.custom_positions.lookup("banana").anchor is scene.ship


def test_put_there_game_sets_a_round_override(scene, plugin):
    scene.player.position = Vector3(0.0, 0.0, 0.0)
    scene.player.look_direction = Vector3(0.0, -1.0, 1.0)
    mug = add_item(scene, "Mug")

    result = plugin.execute("put Mug there game")

    assert result.ok
    override = plugin.store.round_overrides.lookup("mug")
    assert override.anchor is scene.ship
    assert override.position.is_close(Vector3(0.0, 0.2, 1.6))
    assert mug.position.is_close(Vector3(0.0, 0.0, 1.6))

    plugin.on_session_started()
    assert plugin.store.round_overrides.lookup("mug") is None


def test_put_always_after_game_moves_to_the_new_spot(scene, plugin):
    mug = add_item(scene, "Mug")
    scene.player.position = Vector3(1.0, 0.0, 1.0)
    assert plugin.execute("put Mug here game").ok

    scene.player.position = Vector3(5.0, 0.0, 5.0)
    result = plugin.execute("put Mug here always")

    assert result.message == "Sorted 1 items"
    assert mug.position.is_close(Vector3(5.0, 0.0, 5.0))
    assert plugin.store.known_items.entry("Mug").value == "Environment/HangarShip:5,0.2,5"


def test_put_once_does_not_store_anything(scene, plugin):
    scene.player.position = Vector3(1.0, 0.0, 2.0)
    mug = add_item(scene, "Mug")

    assert plugin.execute("put Mug here").ok

    assert mug.position.is_close(Vector3(1.0, 0.0, 2.0))
    assert len(plugin.store.round_overrides) == 0
    assert plugin.store.known_items.entry("Mug").value == plugin.store.known_items.entry("Mug").default


def test_put_errors(scene, plugin):
    assert not plugin.execute("put Nothing here").ok
    assert "Usage" in plugin.execute("put Mug sideways").message

    scene.player.position = Vector3(100.0, 0.0, 100.0)
    assert not plugin.execute("put Mug here").ok


def test_itemnames_lists_unknown_items_unless_all(scene, plugin):
    add_item(scene, "Mug(Clone)")
    add_item(scene, "MysteryBox(Clone)")
    add_item(scene, "MysteryBox(Clone)")

    assert plugin.execute("itemnames").message == "MysteryBox"
    assert plugin.execute("itemnames -a").message == "Mug\nMysteryBox"


def test_autosort_toggle(plugin):
    assert plugin.execute("autosort").message == "Automatic sorting enabled"
    assert plugin.store.auto_sort_enabled
    assert plugin.execute("autosort off").message == "Automatic sorting disabled"
    assert plugin.execute("autosort on").ok
    assert plugin.store.auto_sort_enabled


def test_unknown_and_empty_commands(plugin):
    assert not plugin.execute("dance").ok
    assert not plugin.execute("").ok
    assert not plugin.execute('put "Mug here').ok


def test_auto_sort_before_landing(scene, plugin):
    plugin.store.set_custom_mapping("Toy:1,2,3:A")
    toy = add_item(scene, "Toy", position=Vector3(9.0, 9.0, 9.0))
    mug = add_item(scene, "Mug")

    assert plugin.on_ship_ready_to_land() is None

    plugin.store.auto_sort.value = True
    report = plugin.on_ship_ready_to_land()

    assert report.moved == 1
    assert report.skipped == 1
    assert toy.position == Vector3(9.0, 9.0, 9.0)
    assert mug.position.is_close(Vector3(-2.45, 0.0, -6.87))


def test_auto_sort_failure_is_announced(scene, plugin):
    plugin.store.auto_sort.value = True
    plugin.store.set_custom_mapping("Lost:100,2,100")
    add_item(scene, "Lost")

    plugin.on_ship_ready_to_land()

    assert plugin.messages[-1] == "Automatic sorting failed: 1 scrap items couldn't be sorted"


def test_auto_sort_only_runs_on_the_host(scene, plugin):
    plugin.store.auto_sort.value = True
    scene.player.is_host = False
    add_item(scene, "Mug")

    assert plugin.on_ship_ready_to_land() is None


def test_throttled_sort_runs_through_updates(scene, plugin, clock):
    plugin.store.sort_delay.value = 100
    first = add_item(scene, "Mug")
    second = add_item(scene, "Mug")
    start = Vector3(9.0, 9.0, 9.0)
    second.position = start

    result = plugin.execute("sort")

    assert result.message == "Sorting 2 items"
    assert first.position.is_close(Vector3(-2.45, 0.0, -6.87))
    assert second.position == start

    clock.now = 0.05
    plugin.update()
    assert second.position == start

    clock.now = 0.1
    plugin.update()
    assert second.position.is_close(Vector3(-2.45, 0.0, -6.87))
    assert not plugin.scheduler.busy


def test_new_sort_cancels_running_job(scene, plugin):
    plugin.store.sort_delay.value = 100
    items = [add_item(scene, "Mug", position=Vector3(9.0, 9.0, 9.0)) for _ in range(3)]
    plugin.execute("sort")
    first_job = plugin.scheduler.active

    plugin.store.sort_delay.value = 0
    assert plugin.execute("sort").ok

    assert first_job.cancelled
    assert plugin.scheduler.active is None
    assert all(item.position.is_close(Vector3(-2.45, 0.0, -6.87)) for item in items)
