"""Command-line entry point: run sort commands against a scene file."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from ship_sort.plugin import ShipSortPlugin
from ship_sort.services.config_file import ConfigYamlError
from ship_sort.services.config_store import ConfigurationIntegrityError
from ship_sort.services.scene_yaml import SceneYamlError, dump_scene_yaml, load_scene_yaml

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ship-sort",
        description="Sort the items of a ship scene with chat-style commands.",
    )
    parser.add_argument("--scene", type=Path, required=True, help="Scene YAML path.")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration YAML path (created on first change).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the resulting scene to this YAML path.",
    )
    parser.add_argument(
        "--land",
        action="store_true",
        help="Fire the ship-ready-to-land event after the commands.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "commands",
        nargs="*",
        help='Command lines, e.g. "sort -a" or "put Mug here always".',
    )
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        scene = load_scene_yaml(args.scene)
        plugin = ShipSortPlugin(scene, config_path=args.config)
    except (SceneYamlError, ConfigYamlError) as exc:
        print(f"Loading failed: {exc}", file=sys.stderr)
        return 1

    status = 0
    plugin.on_session_started()
    try:
        for line in args.commands:
            result = plugin.execute(line)
            plugin.drain()
            print(result.message)
            if not result.ok:
                status = 1
        if args.land:
            report = plugin.on_ship_ready_to_land()
            plugin.drain()
            if report is not None and not report.ok:
                status = 1
    except ConfigurationIntegrityError as exc:
        log.error("%s", exc)
        return 2

    if args.output is not None:
        dump_scene_yaml(scene, destination=args.output)
        print(f"Saved scene: {args.output}")
    return status


if __name__ == "__main__":
    raise SystemExit(main())
