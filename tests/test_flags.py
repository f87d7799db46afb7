"""Unit tests for placement flag sets."""

from __future__ import annotations

import pytest

from ship_sort.models.placement import FlagSet, UnknownFlagError


def test_parse_any_order_with_duplicates():
    flags = FlagSet.parse("XPAXA")

    assert flags == FlagSet(no_auto_sort=True, parent=True, exact=True)
    assert str(flags) == "APX"


def test_empty_flag_set_is_falsy():
    assert not FlagSet()
    assert str(FlagSet()) == ""
    assert FlagSet.parse("N")


@pytest.mark.parametrize("letters", ["B", "a", "A1", "AN Q"])
def test_unknown_letters_are_rejected(letters):
    with pytest.raises(UnknownFlagError):
        FlagSet.parse(letters)


def test_position_and_filtering_partitions():
    flags = FlagSet.parse("ACNPX")

    assert str(flags.position_related()) == "PX"
    assert str(flags.filtering_related()) == "ACN"
    assert flags.position_related() | flags.filtering_related() == flags


def test_union_and_intersection():
    left = FlagSet.parse("AP")
    right = FlagSet.parse("PX")

    assert str(left | right) == "APX"
    assert str(left & right) == "P"
