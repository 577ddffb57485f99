"""Visual encoding of strings so that unprintable characters become escapes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Tuple, Union

from elkit.flags import VisFlag

__all__ = ["VisResult", "vis", "strvis", "strnvis", "strenvis"]

Source = Union[str, bytes, bytearray, memoryview]
Char = Union[int, str, bytes]

_SHELL_CHARS = "'`\";&<>()|{}]\\$!^~"
_GLOB_CHARS = "*?[#"
_MIME_SPECIAL = frozenset(ord(ch) for ch in "#$@[\\]^`{|}~")
_WHITE = frozenset((0x20, 0x09, 0x0A))
_SAFE = frozenset((0x08, 0x07, 0x0D))
_LOWER_HEX = "0123456789abcdef"
_UPPER_HEX = "0123456789ABCDEF"
_CSTYLE_OUT = {
    0x0A: "n",
    0x0D: "r",
    0x08: "b",
    0x07: "a",
    0x0B: "v",
    0x09: "t",
    0x0C: "f",
    0x20: "s",
}
# Characters that carry a meaning after a backslash in C style.
_CSTYLE_RESERVED = frozenset(ord(ch) for ch in "nrbavtfs0M^$")
_NO_BREAK_SPACES = frozenset((0xA0, 0x2007, 0x202F))


@dataclass(frozen=True)
class VisResult:
    """Encoded output and the byte-mode flag handed back to the caller.

    ``byte_mode`` reports whether conversion fell back to single bytes; it is
    only updated when ``VisFlag.NOLOCALE`` is set, otherwise it echoes the
    value passed in.
    """

    encoded: bytes
    byte_mode: bool

    def __bytes__(self) -> bytes:
        return self.encoded

    def __len__(self) -> int:
        return len(self.encoded)


def _is_octal(c: int) -> bool:
    return 0x30 <= (c & 0xFF) <= 0x37


def _is_graph(flags: int, c: int) -> bool:
    if flags & VisFlag.NOLOCALE:
        return 0x21 <= c <= 0x7E
    if c > 0x10FFFF or 0xD800 <= c <= 0xDFFF:
        return False
    ch = chr(c)
    return ch.isprintable() and not ch.isspace()


def _is_space(c: int) -> bool:
    if c < 0x80:
        return c in (0x20, 0x09, 0x0A, 0x0B, 0x0C, 0x0D)
    if c in _NO_BREAK_SPACES or c > 0x10FFFF:
        return False
    return chr(c).isspace()


def _is_alnum(c: int) -> bool:
    if c > 0x10FFFF or 0xD800 <= c <= 0xDFFF:
        return False
    return chr(c).isalnum()


def _split_bytes(value: int) -> bytes:
    """Bytes of ``value`` from the highest non-zero one down, at least one."""
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def _mbyte(c: int, flags: int, nextc: int, is_extra: bool) -> str:
    """Encode one byte of a character."""
    if flags & VisFlag.CSTYLE:
        if c in _CSTYLE_OUT:
            return "\\" + _CSTYLE_OUT[c]
        if c == 0:
            return "\\000" if _is_octal(nextc) else "\\0"
        if c not in _CSTYLE_RESERVED and _is_graph(flags, c) and not _is_octal(c):
            return "\\" + chr(c)
    if is_extra or (c & 0o177) == 0x20 or flags & VisFlag.OCTAL:
        return "\\" + "".join(
            chr(digit + 0x30) for digit in ((c >> 6) & 0o3, (c >> 3) & 0o7, c & 0o7)
        )
    out = "" if flags & VisFlag.NOSLASH else "\\"
    if c & 0o200:
        c &= 0o177
        out += "M"
    if c < 0x20 or c == 0x7F:
        out += "^" + ("?" if c == 0x7F else chr(c + 0x40))
    else:
        out += "-" + chr(c)
    return out


def _svis(c: int, flags: int, nextc: int, extra: FrozenSet[int]) -> str:
    is_extra = c == 0 or c in extra
    if not is_extra and (
        _is_graph(flags, c)
        or c in _WHITE
        or (flags & VisFlag.SAFE and c in _SAFE)
    ):
        return chr(c)
    return "".join(_mbyte(b, flags, nextc, is_extra) for b in _split_bytes(c))


def _hvis(c: int, flags: int, nextc: int, extra: FrozenSet[int]) -> str:
    if _is_alnum(c) or chr(c) in "$-_.+!*'(),":
        return _svis(c, flags, nextc, extra)
    return "%" + _LOWER_HEX[(c >> 4) & 0xF] + _LOWER_HEX[c & 0xF]


def _mvis(c: int, flags: int, nextc: int, extra: FrozenSet[int]) -> str:
    space = _is_space(c)
    if c != 0x0A and (
        (space and nextc in (0x0D, 0x0A))
        or (not space and (c < 33 or c == 61 or c > 126))
        or c in _MIME_SPECIAL
    ):
        return "=" + _UPPER_HEX[(c >> 4) & 0xF] + _UPPER_HEX[c & 0xF]
    return _svis(c, flags, nextc, extra)


def _encoder(flags: int) -> Callable[[int, int, int, FrozenSet[int]], str]:
    if flags & VisFlag.HTTPSTYLE:
        return _hvis
    if flags & VisFlag.MIMESTYLE:
        return _mvis
    return _svis


def _decode_one(data: bytes, i: int) -> Optional[Tuple[int, int]]:
    """Decode one UTF-8 character at ``i``; None when the bytes are invalid."""
    lead = data[i]
    if lead < 0x80:
        size = 1
    elif 0xC2 <= lead <= 0xDF:
        size = 2
    elif 0xE0 <= lead <= 0xEF:
        size = 3
    elif 0xF0 <= lead <= 0xF4:
        size = 4
    else:
        return None
    try:
        text = data[i:i + size].decode("utf-8")
    except UnicodeDecodeError:
        return None
    if len(text) != 1:
        return None
    return ord(text), size


def _to_points(data: bytes, byte_mode: bool) -> Tuple[List[int], bool]:
    """Split ``data`` into characters, falling back to bytes after an error."""
    points: List[int] = []
    i = 0
    while i < len(data):
        if not byte_mode:
            decoded = _decode_one(data, i)
            if decoded is not None:
                points.append(decoded[0])
                i += decoded[1]
                continue
            byte_mode = True
        points.append(data[i])
        i += 1
    return points, byte_mode


def _as_bytes(src: Source) -> bytes:
    if isinstance(src, str):
        return src.encode("utf-8", "surrogatepass")
    return bytes(src)


def _extra_set(flags: int, extra: Source) -> FrozenSet[int]:
    data = _as_bytes(extra)
    if flags & VisFlag.NOLOCALE:
        points = list(data)
    else:
        try:
            points = [ord(ch) for ch in data.decode("utf-8")]
        except UnicodeDecodeError:
            points = list(data)
    chars = set(points)
    if flags & VisFlag.GLOB:
        chars.update(ord(ch) for ch in _GLOB_CHARS)
    if flags & VisFlag.SHELL:
        chars.update(ord(ch) for ch in _SHELL_CHARS)
    if flags & VisFlag.SP:
        chars.add(0x20)
    if flags & VisFlag.TAB:
        chars.add(0x09)
    if flags & VisFlag.NL:
        chars.add(0x0A)
    if flags & VisFlag.DQ:
        chars.add(ord('"'))
    if not flags & VisFlag.NOSLASH:
        chars.add(ord("\\"))
    return frozenset(chars)


def _encode(
    data: bytes,
    count_of: Optional[bytes],
    limit: Optional[int],
    flags: Union[int, VisFlag],
    extra: Source,
    byte_mode: bool,
) -> VisResult:
    flags = int(flags)
    if limit is not None and limit < 0:
        raise ValueError("limit must not be negative")
    start_mode = bool(flags & VisFlag.NOLOCALE) or bool(byte_mode)
    points, cerr = _to_points(data, start_mode)
    if count_of is None:
        count = len(points)
    else:
        count = min(len(points), len(_to_points(count_of, start_mode)[0]))

    extras = _extra_set(flags, extra)
    encode = _encoder(flags)
    wide = "".join(
        encode(c, flags, points[i + 1] if i + 1 < len(points) else 0, extras)
        for i, c in enumerate(points[:count])
    )

    out = bytearray()
    for ch in wide:
        chunk: Optional[bytes] = None
        if not cerr:
            try:
                chunk = ch.encode("utf-8")
            except UnicodeEncodeError:
                chunk = None
        if chunk is None:
            chunk = _split_bytes(ord(ch))
            cerr = True
        if limit is not None and len(out) + len(chunk) > limit:
            break
        out += chunk

    mode = cerr if flags & VisFlag.NOLOCALE else bool(byte_mode)
    return VisResult(bytes(out), mode)


def _char_bytes(c: Char) -> bytes:
    if isinstance(c, int):
        if not 0 <= c <= 0xFF:
            raise ValueError(f"character value {c} is not a byte")
        return bytes((c,))
    if len(c) != 1:
        raise ValueError("expected a single character")
    return _as_bytes(c)


def vis(
    c: Char,
    flags: Union[int, VisFlag] = 0,
    nextc: Char = 0,
    extra: Source = "",
) -> bytes:
    """Encode one character; ``nextc`` is the character that follows it.

    Characters in ``extra`` are always encoded.
    """
    head = _char_bytes(c)
    data = head + _char_bytes(nextc)
    return _encode(data, head, None, flags, extra, False).encoded


def strvis(src: Source, flags: Union[int, VisFlag] = 0, extra: Source = "") -> bytes:
    """Encode a whole string."""
    return _encode(_as_bytes(src), None, None, flags, extra, False).encoded


def strnvis(
    src: Source, limit: int, flags: Union[int, VisFlag] = 0, extra: Source = ""
) -> bytes:
    """Encode ``src``, stopping before output would exceed ``limit`` bytes."""
    return _encode(_as_bytes(src), None, limit, flags, extra, False).encoded


def strenvis(
    src: Source,
    limit: Optional[int] = None,
    flags: Union[int, VisFlag] = 0,
    extra: Source = "",
    byte_mode: bool = False,
) -> VisResult:
    """Encode ``src``, starting in byte mode when ``byte_mode`` is true."""
    return _encode(_as_bytes(src), None, limit, flags, extra, byte_mode)