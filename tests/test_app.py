"""End-to-end test of the command-line runner."""

from __future__ import annotations

from pathlib import Path

from conftest import add_item, build_ship_scene
from ship_sort.app import main
from ship_sort.models.scene import Vector3
from ship_sort.services.config_file import load_config_yaml
from ship_sort.services.scene_yaml import dump_scene_yaml, load_scene_yaml


def _write_scene(path: Path) -> None:
    scene = build_ship_scene()
    add_item(scene, "Mug(Clone)", position=Vector3(5.0, 3.0, 5.0))
    add_item(scene, "MysteryBox(Clone)", position=Vector3(5.0, 3.0, 5.0))
    scene.player.position = Vector3(2.0, 0.0, 1.0)
    dump_scene_yaml(scene, destination=path)


def test_cli_runs_commands_and_writes_results(tmp_path: Path, capsys):
    scene_path = tmp_path / "scene.yaml"
    config_path = tmp_path / "config.yaml"
    output_path = tmp_path / "sorted.yaml"
    _write_scene(scene_path)

    status = main(
        [
            "--scene",
            str(scene_path),
            "--config",
            str(config_path),
            "--output",
            str(output_path),
            'put "MysteryBox" here always',
            "sort",
            "itemnames",
        ]
    )

    assert status == 0
    out = capsys.readouterr().out
    assert "Sorted 2 items" in out
    assert "MysteryBox" in out

    sorted_scene = load_scene_yaml(output_path)
    mug, box = sorted_scene.items
    assert mug.position.is_close(Vector3(-2.45, 0.0, -6.87))
    assert box.position.is_close(Vector3(2.0, 0.0, 1.0))
    assert load_config_yaml(config_path)["General"]["custom_item_positions"] == (
        "MysteryBox:Environment/HangarShip:2,0.2,1"
    )


def test_cli_reports_failing_commands(tmp_path: Path, capsys):
    scene_path = tmp_path / "scene.yaml"
    _write_scene(scene_path)

    status = main(["--scene", str(scene_path), "dance"])

    assert status == 1
    assert "Unknown command: dance" in capsys.readouterr().out


def test_cli_rejects_missing_scene(tmp_path: Path, capsys):
    status = main(["--scene", str(tmp_path / "missing.yaml")])

    assert status == 1
    assert "Loading failed" in capsys.readouterr().err


def test_cli_rejects_malformed_surface(tmp_path: Path, capsys):
    scene_path = tmp_path / "scene.yaml"
    scene_path.write_text(
        "objects:\n"
        "  - path: Environment/HangarShip\n"
        "surfaces:\n"
        "  - collider: Environment/HangarShip\n"
        "    x: [low, 1]\n"
        "    z: [0, 1]\n"
        "    height: 0\n",
        encoding="utf-8",
    )

    status = main(["--scene", str(scene_path)])

    assert status == 1
    assert "Loading failed" in capsys.readouterr().err
