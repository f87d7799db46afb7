"""Parser for the single-line item position language.

A position specification looks like::

    [anchor:]x[+dx],y[+dy],z[+dz][,rotation[+offset]][,random][:FLAGS]

for example ``closet:-0.3+0.12,2.5,0.3,90:CPX``. A text made only of flag
letters (``AN``) is a flags-only fragment that inherits its position from the
category default.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ship_sort.constants import (
    BUNKBEDS_PATH,
    CLOSET_PATH,
    ENVIRONMENT_PATH,
    FILE_CABINET_PATH,
)
from ship_sort.models.placement import (
    AnchorNotFoundError,
    FlagSet,
    InvalidFormatError,
    InvalidNumberError,
    ParseError,
    PlacementSpec,
    UnknownAnchorError,
)
from ship_sort.models.scene import SceneObject, Vector3
from ship_sort.services.world import AnchorResolver

log = logging.getLogger(__name__)

_NUMBER = re.compile(r"[0-9]+(?:\.[0-9]+)?")
_INTEGER = re.compile(r"[0-9]+")
_FLAGS_ONLY = re.compile(r":?([A-Z]+)")
_ATOM_EXTRA_CHARS = "_./\\"

# keyword -> scene path; None means "relative to the ship root"
ANCHOR_KEYWORDS = {
    "cupboard": CLOSET_PATH,
    "closet": CLOSET_PATH,
    "storage": CLOSET_PATH,
    "storagecloset": CLOSET_PATH,
    "file": FILE_CABINET_PATH,
    "filecabinet": FILE_CABINET_PATH,
    "filecabinets": FILE_CABINET_PATH,
    "file_cabinet": FILE_CABINET_PATH,
    "file_cabinets": FILE_CABINET_PATH,
    "cabinet": FILE_CABINET_PATH,
    "cabinets": FILE_CABINET_PATH,
    "bunkbed": BUNKBEDS_PATH,
    "bunkbeds": BUNKBEDS_PATH,
    "ship": None,
    "environment": ENVIRONMENT_PATH,
    "none": ENVIRONMENT_PATH,
}


class TokenKind(Enum):
    ATOM = "atom"
    COLON = ":"
    COMMA = ","
    PLUS = "+"
    MINUS = "-"
    END = "end"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    offset: int


_PUNCTUATION = {
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
}


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one position string: either a spec or an error."""

    text: str
    spec: Optional[PlacementSpec] = None
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.spec is not None

    def unwrap(self) -> PlacementSpec:
        """Return the spec, raising the parse error when there is none."""
        if self.error is not None:
            raise self.error
        assert self.spec is not None
        return self.spec


def tokenize(text: str) -> List[Token]:
    """Split a position string into tokens, ending with an END token."""
    tokens: List[Token] = []
    index = 0
    while index < len(text):
        char = text[index]
        kind = _PUNCTUATION.get(char)
        if kind is not None:
            tokens.append(Token(kind, char, index))
            index += 1
            continue
        if not _is_atom_char(char):
            raise InvalidFormatError(text, f"unexpected character {char!r} at {index}")
        start = index
        while index < len(text) and _is_atom_char(text[index]):
            index += 1
        tokens.append(Token(TokenKind.ATOM, text[start:index], start))
    tokens.append(Token(TokenKind.END, "", len(text)))
    return tokens


def _is_atom_char(char: str) -> bool:
    return char.isalnum() or char in _ATOM_EXTRA_CHARS


def parse_position(text: str, anchors: Optional[AnchorResolver] = None) -> ParseResult:
    """Parse a position specification string.

    Anchor names are resolved through ``anchors``; without a resolver only the
    ``ship`` anchor is accepted. Errors are returned in the result, never raised.
    """
    stripped = text.strip()
    try:
        spec = _PositionParser(stripped, anchors).parse()
    except ParseError as exc:
        flags_match = _FLAGS_ONLY.fullmatch(stripped)
        if flags_match is None:
            return ParseResult(text=text, error=exc)
        try:
            flags = FlagSet.parse(flags_match.group(1))
        except ParseError as flag_exc:
            return ParseResult(text=text, error=flag_exc)
        log.debug('>> position "%s" is flags-only: %s', text, flags)
        return ParseResult(text=text, spec=PlacementSpec(flags=flags))

    log.debug(
        '>> position "%s"\n   position %s offset %s\n   rotation %s%+d random %s\n'
        "   flags %s\n   parent %s",
        text,
        spec.position,
        spec.position_offset,
        spec.floor_rotation,
        spec.rotation_offset or 0,
        spec.random_offset,
        spec.flags or "none",
        spec.anchor.path if spec.anchor is not None else "ship",
    )
    return ParseResult(text=text, spec=spec)


def resolve_anchor(name: str, anchors: Optional[AnchorResolver]) -> Optional[SceneObject]:
    """Resolve an anchor keyword or scene path to an object.

    Returns None for the ship root.
    """
    keyword = name.lower().strip("/\\")
    if keyword in ANCHOR_KEYWORDS:
        path = ANCHOR_KEYWORDS[keyword]
        if path is None:
            return None
        found = anchors.find(path) if anchors is not None else None
        if found is None:
            raise AnchorNotFoundError(name, path)
        return found

    found = anchors.find(name) if anchors is not None else None
    if found is None:
        raise UnknownAnchorError(name)
    return found


class _PositionParser:
    """Recursive-descent parser over the token stream of one position string."""

    def __init__(self, text: str, anchors: Optional[AnchorResolver]) -> None:
        self._text = text
        self._anchors = anchors
        self._tokens = tokenize(text)
        self._index = 0

    def parse(self) -> PlacementSpec:
        anchor_name = self._anchor_prefix()

        x, x_offset = self._coordinate("x")
        self._expect(TokenKind.COMMA)
        y, y_offset = self._coordinate("y")
        self._expect(TokenKind.COMMA)
        z, z_offset = self._coordinate("z")

        rotation: Optional[int] = None
        rotation_offset: Optional[int] = None
        random_offset: Optional[float] = None
        if self._accept(TokenKind.COMMA):
            if self._at_integer():
                rotation = self._signed_integer("rotation")
                rotation_offset = self._rotation_offset()
                if self._accept(TokenKind.COMMA):
                    random_offset = self._random_offset()
            else:
                random_offset = self._random_offset()

        flags = FlagSet()
        if self._accept(TokenKind.COLON):
            flags = self._flags()
        self._expect(TokenKind.END)

        position_offset = None
        if x_offset is not None or y_offset is not None or z_offset is not None:
            position_offset = Vector3(x_offset or 0.0, y_offset or 0.0, z_offset or 0.0)

        anchor = resolve_anchor(anchor_name, self._anchors) if anchor_name is not None else None

        return PlacementSpec(
            position=Vector3(x, y, z),
            position_offset=position_offset,
            anchor=anchor,
            floor_rotation=rotation,
            rotation_offset=rotation_offset,
            random_offset=random_offset,
            flags=flags,
        )

    # ------------------------------------------------------------------
    # Productions

    def _anchor_prefix(self) -> Optional[str]:
        if self._peek().kind is TokenKind.ATOM and self._peek(1).kind is TokenKind.COLON:
            name = self._advance().text
            self._advance()
            return name
        return None

    def _coordinate(self, field_name: str) -> Tuple[float, Optional[float]]:
        value = self._signed_float(field_name)
        offset = None
        if self._peek().kind in (TokenKind.PLUS, TokenKind.MINUS):
            sign = -1.0 if self._advance().kind is TokenKind.MINUS else 1.0
            offset = sign * self._number(f"{field_name}_offset")
        return value, offset

    def _rotation_offset(self) -> Optional[int]:
        if self._peek().kind not in (TokenKind.PLUS, TokenKind.MINUS):
            return None
        sign = -1 if self._advance().kind is TokenKind.MINUS else 1
        value = sign * self._integer("rotation_offset")
        return value or None

    def _random_offset(self) -> float:
        if self._peek().kind is TokenKind.MINUS:
            self._advance()
            raise InvalidNumberError("random_offset", "-" + self._peek().text)
        return self._number("random_offset")

    def _flags(self) -> FlagSet:
        token = self._expect(TokenKind.ATOM)
        return FlagSet.parse(token.text)

    # ------------------------------------------------------------------
    # Terminals

    def _signed_float(self, field_name: str) -> float:
        negative = self._accept(TokenKind.MINUS)
        value = self._number(field_name)
        return -value if negative else value

    def _signed_integer(self, field_name: str) -> int:
        negative = self._accept(TokenKind.MINUS)
        value = self._integer(field_name)
        return -value if negative else value

    def _number(self, field_name: str) -> float:
        token = self._expect_value(field_name)
        if not _NUMBER.fullmatch(token.text):
            raise InvalidNumberError(field_name, token.text)
        return float(token.text)

    def _integer(self, field_name: str) -> int:
        token = self._expect_value(field_name)
        if not _INTEGER.fullmatch(token.text):
            raise InvalidNumberError(field_name, token.text)
        return int(token.text, 10)

    def _at_integer(self) -> bool:
        token = self._peek()
        if token.kind is TokenKind.MINUS:
            token = self._peek(1)
        return token.kind is TokenKind.ATOM and _INTEGER.fullmatch(token.text) is not None

    # ------------------------------------------------------------------
    # Token stream helpers

    def _peek(self, ahead: int = 0) -> Token:
        index = min(self._index + ahead, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind is not TokenKind.END:
            self._index += 1
        return token

    def _accept(self, kind: TokenKind) -> bool:
        if self._peek().kind is kind:
            self._advance()
            return True
        return False

    def _expect(self, kind: TokenKind) -> Token:
        token = self._peek()
        if token.kind is not kind:
            expected = "end of text" if kind is TokenKind.END else repr(kind.value)
            raise InvalidFormatError(self._text, f"expected {expected} at {token.offset}")
        return self._advance()

    def _expect_value(self, field_name: str) -> Token:
        token = self._peek()
        if token.kind is not TokenKind.ATOM:
            if not self._text:
                raise InvalidFormatError(self._text, "empty position")
            raise InvalidFormatError(self._text, f"missing {field_name} at {token.offset}")
        return self._advance()


__all__ = [
    "ANCHOR_KEYWORDS",
    "ParseResult",
    "Token",
    "TokenKind",
    "parse_position",
    "resolve_anchor",
    "tokenize",
]
