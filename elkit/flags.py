"""Flag and result values shared by the vis encoder and the unvis decoder."""

from __future__ import annotations

from enum import IntEnum, IntFlag


class VisFlag(IntFlag):
    """Options that select an encoding style or widen the set of encoded characters."""

    OCTAL = 0x0001
    CSTYLE = 0x0002
    SP = 0x0004
    TAB = 0x0008
    NL = 0x0010
    WHITE = SP | TAB | NL
    SAFE = 0x0020
    DQ = 0x8000
    NOSLASH = 0x0040
    HTTP1808 = 0x0080
    HTTPSTYLE = 0x0080
    MIMESTYLE = 0x0100
    HTTP1866 = 0x0200
    NOESCAPE = 0x0400
    END = 0x0800
    GLOB = 0x1000
    SHELL = 0x2000
    META = WHITE | GLOB | SHELL
    NOLOCALE = 0x4000


class UnvisResult(IntEnum):
    """Outcome of feeding one character to the decoder."""

    VALID = 1
    VALIDPUSH = 2
    NOCHAR = 3
    SYNBAD = -1
    ERROR = -2

    @property
    def produces_char(self) -> bool:
        """True when a decoded character is available."""
        return self in (UnvisResult.VALID, UnvisResult.VALIDPUSH)

    @property
    def is_error(self) -> bool:
        """True for the error outcomes."""
        return self.value < 0