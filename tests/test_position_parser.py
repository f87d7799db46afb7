"""Unit tests for the item position language parser."""

from __future__ import annotations

import pytest

from ship_sort.constants import CLOSET_PATH, FILE_CABINET_PATH
from ship_sort.models.placement import (
    AnchorNotFoundError,
    FlagSet,
    InvalidFormatError,
    InvalidNumberError,
    UnknownAnchorError,
    UnknownFlagError,
)
from ship_sort.models.scene import Vector3
from ship_sort.services.position_parser import TokenKind, parse_position, tokenize


def test_parse_plain_coordinates():
    result = parse_position("1,2,3")

    assert result.ok
    spec = result.spec
    assert spec.position == Vector3(1.0, 2.0, 3.0)
    assert spec.anchor is None
    assert spec.floor_rotation is None
    assert spec.rotation_offset is None
    assert spec.random_offset is None
    assert spec.position_offset is None
    assert not spec.flags


def test_parse_full_specification(scene):
    spec = parse_position("closet:-0.3+0.12,2.5,0.3,90+45,0.5:CPX", scene).unwrap()

    assert spec.anchor is scene.find(CLOSET_PATH)
    assert spec.position == Vector3(-0.3, 2.5, 0.3)
    assert spec.position_offset == Vector3(0.12, 0.0, 0.0)
    assert spec.floor_rotation == 90
    assert spec.rotation_offset == 45
    assert spec.random_offset == 0.5
    assert spec.flags == FlagSet(keep_on_cruiser=True, parent=True, exact=True)


def test_negative_rotation_and_offsets():
    spec = parse_position("-1,2-0.5,-3,-90-45").unwrap()

    assert spec.position == Vector3(-1.0, 2.0, -3.0)
    assert spec.position_offset == Vector3(0.0, -0.5, 0.0)
    assert spec.floor_rotation == -90
    assert spec.rotation_offset == -45


def test_fourth_element_with_decimal_point_is_random_offset():
    spec = parse_position("1,2,3,0.25").unwrap()

    assert spec.floor_rotation is None
    assert spec.random_offset == 0.25


def test_fourth_element_integer_is_rotation():
    spec = parse_position("1,2,3,90,0.5").unwrap()

    assert spec.floor_rotation == 90
    assert spec.random_offset == 0.5


def test_zero_rotation_offset_is_normalised_to_none():
    spec = parse_position("1,2,3,90+0").unwrap()

    assert spec.floor_rotation == 90
    assert spec.rotation_offset is None


def test_surrounding_whitespace_is_ignored():
    assert parse_position("  1,2,3  ").ok


def test_anchor_keywords_are_case_insensitive_and_trim_slashes(scene):
    a = parse_position("Cupboard/:1,2,3", scene).unwrap()
    b = parse_position("CLOSET:1,2,3", scene).unwrap()

    assert a.anchor is not None
    assert a.anchor is b.anchor
    assert a == b


def test_ship_anchor_means_ship_root(scene):
    assert parse_position("ship:1,2,3", scene).unwrap().anchor is None


def test_literal_anchor_path(scene):
    spec = parse_position(f"{FILE_CABINET_PATH}:0,1,0", scene).unwrap()

    assert spec.anchor is scene.find(FILE_CABINET_PATH)


def test_unknown_anchor(scene):
    result = parse_position("Nowhere:1,2,3", scene)

    assert not result.ok
    assert isinstance(result.error, UnknownAnchorError)
    assert not isinstance(result.error, AnchorNotFoundError)
    assert result.error.anchor == "Nowhere"


def test_keyword_anchor_missing_from_scene(scene):
    scene.remove_object(FILE_CABINET_PATH)

    result = parse_position("cabinets:1,2,3", scene)

    assert isinstance(result.error, AnchorNotFoundError)
    assert isinstance(result.error, UnknownAnchorError)


def test_keyword_anchor_without_resolver():
    result = parse_position("closet:1,2,3")

    assert isinstance(result.error, AnchorNotFoundError)


@pytest.mark.parametrize("text", ["AN", ":AN", "NA", "AAN"])
def test_flags_only_fragment(text):
    spec = parse_position(text).unwrap()

    assert spec.is_flags_only
    assert spec.position is None
    assert spec.flags == FlagSet(no_auto_sort=True, ignore=True)


def test_flags_only_with_unknown_letter():
    result = parse_position("ANQ")

    assert isinstance(result.error, UnknownFlagError)
    assert result.error.letter == "Q"


def test_unknown_flag_after_coordinates():
    result = parse_position("1,2,3:Q")

    assert isinstance(result.error, UnknownFlagError)


def test_invalid_coordinate_names_the_field():
    result = parse_position("x,2,3")

    assert isinstance(result.error, InvalidNumberError)
    assert result.error.field == "x"


@pytest.mark.parametrize("text", ["١,2,3", "１,2,3"])
def test_non_ascii_digits_are_rejected(text):
    result = parse_position(text)

    assert isinstance(result.error, InvalidNumberError)
    assert result.error.field == "x"


def test_invalid_rotation_offset_names_the_field():
    result = parse_position("1,2,3,90+4.5")

    assert isinstance(result.error, InvalidNumberError)
    assert result.error.field == "rotation_offset"


def test_negative_random_offset_is_rejected():
    result = parse_position("1,2,3,-0.5")

    assert isinstance(result.error, InvalidNumberError)
    assert result.error.field == "random_offset"


@pytest.mark.parametrize("text", ["", "1,2", "1,2,3,", "1;2;3", "1,2,3,90,0.5,7"])
def test_malformed_text_is_invalid_format(text):
    result = parse_position(text)

    assert not result.ok
    assert isinstance(result.error, InvalidFormatError)


def test_parse_never_raises_but_unwrap_does():
    result = parse_position("not a position")

    assert not result.ok
    with pytest.raises(InvalidFormatError):
        result.unwrap()


def test_tokenize_marks_punctuation_and_end():
    kinds = [token.kind for token in tokenize("a:1+2,3")]

    assert kinds == [
        TokenKind.ATOM,
        TokenKind.COLON,
        TokenKind.ATOM,
        TokenKind.PLUS,
        TokenKind.ATOM,
        TokenKind.COMMA,
        TokenKind.ATOM,
        TokenKind.END,
    ]


def test_flag_order_and_duplicates_do_not_matter():
    specs = [parse_position(text).unwrap() for text in ("0,0,0:CA", "0,0,0:AC", "0,0,0:AAC")]

    assert specs[0].flags == specs[1].flags == specs[2].flags
    assert str(specs[0].flags) == "AC"
