"""Decoding of strings produced by the vis encoder."""

from __future__ import annotations

from contextlib import suppress
from enum import IntEnum
from typing import Optional, Tuple, Union

from elkit.flags import UnvisResult, VisFlag

__all__ = ["UnvisError", "UnvisDecoder", "strunvis", "strnunvis"]


class UnvisError(ValueError):
    """Raised on an unrecognised escape sequence."""


class _State(IntEnum):
    GROUND = 0
    START = 1
    META = 2
    META1 = 3
    CTRL = 4
    OCTAL2 = 5
    OCTAL3 = 6
    HEX = 7
    HEX1 = 8
    HEX2 = 9
    MIME1 = 10
    MIME2 = 11
    EATCRNL = 12
    AMP = 13
    NUMBER = 14
    STRING = 15


# Named character references (RFC 1866); order matters for prefix matching.
_ENTITIES: Tuple[Tuple[str, int], ...] = (
    ("AElig", 198), ("Aacute", 193), ("Acirc", 194), ("Agrave", 192),
    ("Aring", 197), ("Atilde", 195), ("Auml", 196), ("Ccedil", 199),
    ("ETH", 208), ("Eacute", 201), ("Ecirc", 202), ("Egrave", 200),
    ("Euml", 203), ("Iacute", 205), ("Icirc", 206), ("Igrave", 204),
    ("Iuml", 207), ("Ntilde", 209), ("Oacute", 211), ("Ocirc", 212),
    ("Ograve", 210), ("Oslash", 216), ("Otilde", 213), ("Ouml", 214),
    ("THORN", 222), ("Uacute", 218), ("Ucirc", 219), ("Ugrave", 217),
    ("Uuml", 220), ("Yacute", 221), ("aacute", 225), ("acirc", 226),
    ("acute", 180), ("aelig", 230), ("agrave", 224), ("amp", 38),
    ("aring", 229), ("atilde", 227), ("auml", 228), ("brvbar", 166),
    ("ccedil", 231), ("cedil", 184), ("cent", 162), ("copy", 169),
    ("curren", 164), ("deg", 176), ("divide", 247), ("eacute", 233),
    ("ecirc", 234), ("egrave", 232), ("eth", 240), ("euml", 235),
    ("frac12", 189), ("frac14", 188), ("frac34", 190), ("gt", 62),
    ("iacute", 237), ("icirc", 238), ("iexcl", 161), ("igrave", 236),
    ("iquest", 191), ("iuml", 239), ("laquo", 171), ("lt", 60),
    ("macr", 175), ("micro", 181), ("middot", 183), ("nbsp", 160),
    ("not", 172), ("ntilde", 241), ("oacute", 243), ("ocirc", 244),
    ("ograve", 242), ("ordf", 170), ("ordm", 186), ("oslash", 248),
    ("otilde", 245), ("ouml", 246), ("para", 182), ("plusmn", 177),
    ("pound", 163), ("quot", 34), ("raquo", 187), ("reg", 174),
    ("sect", 167), ("shy", 173), ("sup1", 185), ("sup2", 178),
    ("sup3", 179), ("szlig", 223), ("thorn", 254), ("times", 215),
    ("uacute", 250), ("ucirc", 251), ("ugrave", 249), ("uml", 168),
    ("uuml", 252), ("yacute", 253), ("yen", 165), ("yuml", 255),
)

_CSTYLE = {
    ord("n"): ord("\n"),
    ord("r"): ord("\r"),
    ord("b"): ord("\b"),
    ord("a"): 0o007,
    ord("v"): ord("\v"),
    ord("t"): ord("\t"),
    ord("f"): ord("\f"),
    ord("s"): ord(" "),
    ord("E"): 0o033,
}

_HEXDIGITS = frozenset(b"0123456789abcdefABCDEF")

Step = Tuple[UnvisResult, Optional[int]]


def _is_digit(c: int) -> bool:
    return 0x30 <= c <= 0x39


def _is_octal(c: int) -> bool:
    return 0x30 <= c <= 0x37


def _is_upper(c: int) -> bool:
    return 0x41 <= c <= 0x5A


def _is_graph(c: int) -> bool:
    return 0x21 <= c <= 0x7E


def _xtod(c: int) -> int:
    if _is_digit(c):
        return c - 0x30
    return (c | 0x20) - ord("a") + 10


def _upper_xtod(c: int) -> int:
    return c - 0x30 if _is_digit(c) else c - ord("A") + 10


def _is_mime_digit(c: int) -> bool:
    return c in _HEXDIGITS and (_is_digit(c) or _is_upper(c))


def _name_char(index: int, pos: int) -> int:
    name = _ENTITIES[index][0]
    return ord(name[pos]) if pos < len(name) else 0


def _as_byte(c: Union[int, str, bytes]) -> int:
    if isinstance(c, (str, bytes)):
        if len(c) != 1:
            raise ValueError("expected a single character")
        c = ord(c)
    if not 0 <= c <= 0xFF:
        raise ValueError(f"character value {c} is not a byte")
    return c


class UnvisDecoder:
    """Incremental decoder that turns escape sequences back into bytes."""

    def __init__(self, flags: Union[int, VisFlag] = 0) -> None:
        self.flags = VisFlag(int(flags) & ~VisFlag.END)
        self._state = _State.GROUND
        self._value = 0
        self._pos = 0

    def reset(self) -> None:
        """Return to the initial state."""
        self._state = _State.GROUND
        self._value = 0
        self._pos = 0

    def _to(self, state: _State) -> None:
        self._state = state
        self._pos = 0

    def _valid(self) -> Step:
        return UnvisResult.VALID, self._value

    def _push(self) -> Step:
        return UnvisResult.VALIDPUSH, self._value

    @staticmethod
    def _nochar() -> Step:
        return UnvisResult.NOCHAR, None

    def _bad(self, c: int) -> UnvisError:
        self._to(_State.GROUND)
        return UnvisError(f"unrecognised escape sequence at {chr(c)!r}")

    def feed(self, c: Union[int, str, bytes]) -> Step:
        """Feed one character; return the outcome and the decoded byte, if any.

        On ``VALIDPUSH`` the byte is complete and ``c`` must be fed again.
        """
        c = _as_byte(c)
        state = self._state

        if state is _State.GROUND:
            self._value = 0
            if not self.flags & VisFlag.NOESCAPE and c == ord("\\"):
                self._to(_State.START)
                return self._nochar()
            if self.flags & VisFlag.HTTP1808 and c == ord("%"):
                self._to(_State.HEX1)
                return self._nochar()
            if self.flags & VisFlag.HTTP1866 and c == ord("&"):
                self._to(_State.AMP)
                return self._nochar()
            if self.flags & VisFlag.MIMESTYLE and c == ord("="):
                self._to(_State.MIME1)
                return self._nochar()
            self._value = c
            return self._valid()

        if state is _State.START:
            return self._start(c)

        if state is _State.META:
            if c == ord("-"):
                self._to(_State.META1)
            elif c == ord("^"):
                self._to(_State.CTRL)
            else:
                raise self._bad(c)
            return self._nochar()

        if state is _State.META1:
            self._to(_State.GROUND)
            self._value |= c
            return self._valid()

        if state is _State.CTRL:
            self._value |= 0o177 if c == ord("?") else c & 0o37
            self._to(_State.GROUND)
            return self._valid()

        if state is _State.OCTAL2:
            if _is_octal(c):
                self._value = ((self._value << 3) + c - 0x30) & 0xFF
                self._to(_State.OCTAL3)
                return self._nochar()
            self._to(_State.GROUND)
            return self._push()

        if state is _State.OCTAL3:
            self._to(_State.GROUND)
            if _is_octal(c):
                self._value = ((self._value << 3) + c - 0x30) & 0xFF
                return self._valid()
            return self._push()

        if state in (_State.HEX, _State.HEX1):
            if state is _State.HEX and c not in _HEXDIGITS:
                raise self._bad(c)
            if c in _HEXDIGITS:
                self._value = _xtod(c)
                self._to(_State.HEX2)
                return self._nochar()
            self._to(_State.GROUND)
            return self._push()

        if state is _State.HEX2:
            self._to(_State.GROUND)
            if c in _HEXDIGITS:
                self._value = (_xtod(c) | (self._value << 4)) & 0xFF
                return self._valid()
            return self._push()

        if state is _State.MIME1:
            if c in (ord("\n"), ord("\r")):
                self._to(_State.EATCRNL)
                return self._nochar()
            if _is_mime_digit(c):
                self._value = _upper_xtod(c)
                self._to(_State.MIME2)
                return self._nochar()
            raise self._bad(c)

        if state is _State.MIME2:
            if _is_mime_digit(c):
                self._to(_State.GROUND)
                self._value = (_upper_xtod(c) | (self._value << 4)) & 0xFF
                return self._valid()
            raise self._bad(c)

        if state is _State.EATCRNL:
            if c in (ord("\r"), ord("\n")):
                return self._nochar()
            if c == ord("="):
                self._to(_State.MIME1)
                return self._nochar()
            self._value = c
            self._to(_State.GROUND)
            return self._valid()

        if state is _State.AMP:
            self._value = 0
            if c == ord("#"):
                self._to(_State.NUMBER)
                return self._nochar()
            self._to(_State.STRING)
            return self._entity(c)

        if state is _State.STRING:
            return self._entity(c)

        if state is _State.NUMBER:
            if c == ord(";"):
                return self._valid()
            if not _is_digit(c):
                raise self._bad(c)
            self._value = (self._value + self._value * 10 + c - 0x30) & 0xFF
            return self._nochar()

        raise self._bad(c)

    def _start(self, c: int) -> Step:
        if c == ord("\\"):
            self._value = c
            self._to(_State.GROUND)
            return self._valid()
        if _is_octal(c):
            self._value = c - 0x30
            self._to(_State.OCTAL2)
            return self._nochar()
        if c == ord("M"):
            self._value = 0o200
            self._to(_State.META)
            return self._nochar()
        if c == ord("^"):
            self._to(_State.CTRL)
            return self._nochar()
        if c in _CSTYLE:
            self._value = _CSTYLE[c]
            self._to(_State.GROUND)
            return self._valid()
        if c == ord("x"):
            self._to(_State.HEX)
            return self._nochar()
        if c in (ord("\n"), ord("$")):
            # hidden newline or marker
            self._to(_State.GROUND)
            return self._nochar()
        if _is_graph(c):
            self._value = c
            self._to(_State.GROUND)
            return self._valid()
        raise self._bad(c)

    def _entity(self, c: int) -> Step:
        start = self._value
        pos = self._pos
        last = _name_char(start, pos - 1) if pos else 0
        if c == ord(";"):
            c = 0
        for index in range(start, len(_ENTITIES)):
            if pos and _name_char(index, pos - 1) != last:
                raise self._bad(c)
            if _name_char(index, pos) == c:
                break
        else:
            raise self._bad(c)
        if c:
            self._value = index
            self._state = _State.STRING
            self._pos = pos + 1
            return self._nochar()
        self._value = _ENTITIES[index][1]
        self._to(_State.GROUND)
        return self._valid()

    def end(self) -> Step:
        """Signal the end of input and flush any pending character."""
        if self._state in (_State.OCTAL2, _State.OCTAL3, _State.HEX2):
            self._to(_State.GROUND)
            return self._valid()
        if self._state is _State.GROUND:
            return self._nochar()
        raise UnvisError("input ends inside an escape sequence")


def _decode(src: Union[str, bytes, bytearray], flags: int, limit: Optional[int]) -> bytes:
    data = src.encode("utf-8") if isinstance(src, str) else bytes(src)
    decoder = UnvisDecoder(flags)
    out = bytearray()

    def emit(value: int) -> None:
        if limit is not None and len(out) >= limit:
            raise OverflowError(f"decoded output does not fit in {limit} bytes")
        out.append(value)

    for offset, c in enumerate(data):
        while True:
            try:
                result, value = decoder.feed(c)
            except UnvisError as exc:
                raise UnvisError(f"{exc} (offset {offset})") from None
            if result.produces_char:
                emit(value)
            if result is not UnvisResult.VALIDPUSH:
                break

    # An unfinished sequence at the end of input is silently dropped.
    with suppress(UnvisError):
        result, value = decoder.end()
        if result is UnvisResult.VALID:
            emit(value)

    if limit is not None and len(out) >= limit:
        raise OverflowError(f"decoded output does not fit in {limit} bytes")
    return bytes(out)


def strunvis(src: Union[str, bytes, bytearray], flags: Union[int, VisFlag] = 0) -> bytes:
    """Decode a whole encoded string."""
    return _decode(src, int(flags), None)


def strnunvis(
    src: Union[str, bytes, bytearray], limit: int, flags: Union[int, VisFlag] = 0
) -> bytes:
    """Decode ``src`` into at most ``limit`` bytes, counting a terminating NUL.

    Raises OverflowError when the result does not fit.
    """
    if limit < 0:
        raise ValueError("limit must not be negative")
    return _decode(src, int(flags), limit)