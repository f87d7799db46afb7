"""Placement specification data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ship_sort.models.scene import GrabbableItem, SceneObject, Vector3


class ParseError(ValueError):
    """Base class for position specification errors."""


class InvalidFormatError(ParseError):
    """Text matches neither the full grammar nor the flags-only grammar."""

    def __init__(self, text: str, detail: str = "") -> None:
        self.text = text
        self.detail = detail
        message = f"Invalid format ({text})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class InvalidNumberError(ParseError):
    """A numeric token failed to convert."""

    def __init__(self, field_name: str, value: str) -> None:
        self.field = field_name
        self.value = value
        super().__init__(f"Invalid {field_name} value ({value})")


class UnknownAnchorError(ParseError):
    """Anchor path does not resolve to an object."""

    def __init__(self, anchor: str) -> None:
        self.anchor = anchor
        super().__init__(f"Invalid parent object ({anchor})")


class AnchorNotFoundError(UnknownAnchorError):
    """Anchor keyword is known but its object is missing from the scene."""

    def __init__(self, anchor: str, path: str) -> None:
        super().__init__(anchor)
        self.path = path
        self.args = (f"{anchor} not found ({path})",)


class UnknownFlagError(ParseError):
    """A flag letter is not one of the reserved letters."""

    def __init__(self, letter: str) -> None:
        self.letter = letter
        super().__init__(f"Unknown flag ({letter})")


@dataclass(frozen=True)
class FlagSet:
    """Behavioral modifiers attached to a placement spec."""

    no_auto_sort: bool = False
    keep_on_cruiser: bool = False
    ignore: bool = False
    parent: bool = False
    exact: bool = False

    NO_AUTO_SORT = "A"
    KEEP_ON_CRUISER = "C"
    IGNORE = "N"
    PARENT = "P"
    EXACT = "X"

    @classmethod
    def parse(cls, letters: str) -> "FlagSet":
        """Build a flag set from a run of flag letters (any order, duplicates allowed)."""
        values = {}
        for letter in letters:
            attribute = _LETTER_TO_FIELD.get(letter)
            if attribute is None:
                raise UnknownFlagError(letter)
            values[attribute] = True
        return cls(**values)

    def __or__(self, other: "FlagSet") -> "FlagSet":
        return FlagSet(
            no_auto_sort=self.no_auto_sort or other.no_auto_sort,
            keep_on_cruiser=self.keep_on_cruiser or other.keep_on_cruiser,
            ignore=self.ignore or other.ignore,
            parent=self.parent or other.parent,
            exact=self.exact or other.exact,
        )

    def __and__(self, other: "FlagSet") -> "FlagSet":
        return FlagSet(
            no_auto_sort=self.no_auto_sort and other.no_auto_sort,
            keep_on_cruiser=self.keep_on_cruiser and other.keep_on_cruiser,
            ignore=self.ignore and other.ignore,
            parent=self.parent and other.parent,
            exact=self.exact and other.exact,
        )

    def position_related(self) -> "FlagSet":
        """Keep only flags that change where an item lands."""
        return self & POSITION_FLAGS

    def filtering_related(self) -> "FlagSet":
        """Keep only flags that decide whether an item is sorted at all."""
        return self & FILTERING_FLAGS

    def __bool__(self) -> bool:
        return any(getattr(self, attribute) for attribute in _LETTER_TO_FIELD.values())

    def __str__(self) -> str:
        return "".join(
            letter for letter, attribute in _LETTER_TO_FIELD.items() if getattr(self, attribute)
        )


# Canonical output order
_LETTER_TO_FIELD = {
    FlagSet.NO_AUTO_SORT: "no_auto_sort",
    FlagSet.KEEP_ON_CRUISER: "keep_on_cruiser",
    FlagSet.IGNORE: "ignore",
    FlagSet.PARENT: "parent",
    FlagSet.EXACT: "exact",
}

POSITION_FLAGS = FlagSet(parent=True, exact=True)
FILTERING_FLAGS = FlagSet(no_auto_sort=True, keep_on_cruiser=True, ignore=True)


@dataclass(frozen=True)
class PlacementSpec:
    """Parsed form of one position specification string."""

    position: Optional[Vector3] = None
    position_offset: Optional[Vector3] = None
    anchor: Optional[SceneObject] = None
    floor_rotation: Optional[int] = None
    rotation_offset: Optional[int] = None
    random_offset: Optional[float] = None
    flags: FlagSet = field(default_factory=FlagSet)

    @property
    def is_flags_only(self) -> bool:
        return self.position is None


class ItemCategory(Enum):
    """Fallback bucket an item belongs to."""

    ONE_HANDED = "one_handed"
    TWO_HANDED = "two_handed"
    TOOL = "tools"

    @classmethod
    def of(cls, item: GrabbableItem) -> "ItemCategory":
        if not item.is_scrap:
            return cls.TOOL
        return cls.TWO_HANDED if item.two_handed else cls.ONE_HANDED


__all__ = [
    "ParseError",
    "InvalidFormatError",
    "InvalidNumberError",
    "UnknownAnchorError",
    "AnchorNotFoundError",
    "UnknownFlagError",
    "FlagSet",
    "POSITION_FLAGS",
    "FILTERING_FLAGS",
    "PlacementSpec",
    "ItemCategory",
]
