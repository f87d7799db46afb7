"""Serialize placement specs back to the position language."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from ship_sort.models.placement import PlacementSpec
from ship_sort.models.scene import Vector3


def format_position(spec: PlacementSpec) -> str:
    """Return the canonical text for ``spec``.

    ``parse_position(format_position(spec))`` reproduces every field present in
    ``spec``. A missing rotation is written as ``,0`` unless a random offset
    follows, so it reads back as an explicit zero rotation.
    """
    flags = str(spec.flags)
    if spec.position is None:
        return flags

    parts: List[str] = []
    if spec.anchor is not None:
        parts.append(spec.anchor.path + ":")

    offset = spec.position_offset
    parts.append(
        ",".join(
            [
                _format_coordinate(spec.position.x, offset.x if offset else None),
                _format_coordinate(spec.position.y, offset.y if offset else None),
                _format_coordinate(spec.position.z, offset.z if offset else None),
            ]
        )
    )

    if spec.floor_rotation is not None:
        parts.append(f",{spec.floor_rotation}")
    elif spec.random_offset is None or spec.rotation_offset:
        parts.append(",0")

    if spec.rotation_offset:
        sign = "-" if spec.rotation_offset < 0 else "+"
        parts.append(f"{sign}{abs(spec.rotation_offset)}")

    if spec.random_offset is not None:
        random_text = _format_number(spec.random_offset)
        if "." not in random_text:
            random_text += ".0"
        parts.append(f",{random_text}")

    if flags:
        parts.append(f":{flags}")
    return "".join(parts)


def format_location(anchor_path: str, position: Vector3) -> str:
    """Return ``anchor_path:x,y,z`` with no rotation, leaving the item's own rotation alone."""
    return "{}:{},{},{}".format(
        anchor_path,
        _format_number(position.x),
        _format_number(position.y),
        _format_number(position.z),
    )


def _format_coordinate(value: float, offset: Optional[float]) -> str:
    text = _format_number(value)
    if offset:
        sign = "-" if offset < 0 else "+"
        text += sign + _format_number(abs(offset))
    return text


def _format_number(value: float) -> str:
    # shortest round-trip digits, never in exponent notation
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


__all__ = ["format_location", "format_position"]
