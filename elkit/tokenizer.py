"""Bourne-shell-like splitting of a line into words."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

__all__ = [
    "Quote",
    "TokenizeStatus",
    "IncompleteLineError",
    "TokenizedLine",
    "Tokenizer",
    "split",
]

IFS = "\t \n"


class Quote(Enum):
    """Quoting state carried between characters and between lines."""

    NONE = "none"
    SINGLE = "single"
    DOUBLE = "double"
    ONE = "one"
    DOUBLEONE = "doubleone"


class TokenizeStatus(IntEnum):
    """Outcome of tokenizing a line."""

    OK = 0
    UNMATCHED_SINGLE_QUOTE = 1
    UNMATCHED_DOUBLE_QUOTE = 2
    QUOTED_RETURN = 3


class IncompleteLineError(ValueError):
    """The line ends inside a quote or after an escaped newline.

    The tokenizer keeps its state, so feeding the next line continues the
    unfinished word.
    """

    def __init__(self, status: TokenizeStatus) -> None:
        messages = {
            TokenizeStatus.UNMATCHED_SINGLE_QUOTE: "unmatched single quote",
            TokenizeStatus.UNMATCHED_DOUBLE_QUOTE: "unmatched double quote",
            TokenizeStatus.QUOTED_RETURN: "line continues after escaped newline",
        }
        super().__init__(messages[status])
        self.status = status


@dataclass(frozen=True)
class TokenizedLine:
    """Words found so far, and where the cursor lies among them."""

    argv: Tuple[str, ...]
    cursor_word: int
    cursor_offset: int


class Tokenizer:
    """Splits lines into words using simplified sh(1) quoting rules.

    Words accumulate across calls until :meth:`reset` is called.
    """

    def __init__(self, ifs: Optional[str] = None) -> None:
        self.ifs = IFS if ifs is None else ifs
        self.reset()

    def reset(self) -> None:
        """Forget all words and any pending quoting state."""
        self._argv: List[str] = []
        self._word: List[str] = []
        self._quote = Quote.NONE
        self._keep = False
        self._eat = False

    @property
    def quote(self) -> Quote:
        """The current quoting state."""
        return self._quote

    @property
    def argv(self) -> Tuple[str, ...]:
        """Words completed so far."""
        return tuple(self._argv)

    def _finish(self) -> None:
        if self._keep or self._word:
            self._argv.append("".join(self._word))
            self._word = []
        self._keep = False

    def _single_quote(self, ch: str) -> None:
        self._keep = True
        self._eat = False
        q = self._quote
        if q is Quote.NONE:
            self._quote = Quote.SINGLE
        elif q is Quote.SINGLE:
            self._quote = Quote.NONE
        elif q is Quote.ONE:
            self._quote = Quote.NONE
            self._word.append(ch)
        elif q is Quote.DOUBLE:
            self._word.append(ch)
        else:
            self._quote = Quote.DOUBLE
            self._word.append(ch)

    def _double_quote(self, ch: str) -> None:
        self._keep = True
        self._eat = False
        q = self._quote
        if q is Quote.NONE:
            self._quote = Quote.DOUBLE
        elif q is Quote.DOUBLE:
            self._quote = Quote.NONE
        elif q is Quote.ONE:
            self._quote = Quote.NONE
            self._word.append(ch)
        elif q is Quote.SINGLE:
            self._word.append(ch)
        else:
            self._quote = Quote.DOUBLE
            self._word.append(ch)

    def _backslash(self, ch: str) -> None:
        self._keep = True
        self._eat = False
        q = self._quote
        if q is Quote.NONE:
            self._quote = Quote.ONE
        elif q is Quote.DOUBLE:
            self._quote = Quote.DOUBLEONE
        elif q is Quote.ONE:
            self._word.append(ch)
            self._quote = Quote.NONE
        elif q is Quote.SINGLE:
            self._word.append(ch)
        else:
            self._quote = Quote.DOUBLE
            self._word.append(ch)

    def _newline(self, ch: str) -> bool:
        """Handle a newline; return True when the line is complete."""
        self._eat = False
        q = self._quote
        if q is Quote.NONE:
            return True
        if q in (Quote.SINGLE, Quote.DOUBLE):
            self._word.append(ch)
        elif q is Quote.DOUBLEONE:
            self._eat = True
            self._quote = Quote.DOUBLE
        else:
            self._eat = True
            self._quote = Quote.NONE
        return False

    def _end(self) -> bool:
        """Handle the end of input; return True when the line is complete."""
        q = self._quote
        if q is Quote.NONE:
            if self._eat:
                self._eat = False
                raise IncompleteLineError(TokenizeStatus.QUOTED_RETURN)
            return True
        if q is Quote.SINGLE:
            raise IncompleteLineError(TokenizeStatus.UNMATCHED_SINGLE_QUOTE)
        if q is Quote.DOUBLE:
            raise IncompleteLineError(TokenizeStatus.UNMATCHED_DOUBLE_QUOTE)
        # A trailing backslash quotes the end of input and is dropped.
        self._quote = Quote.DOUBLE if q is Quote.DOUBLEONE else Quote.NONE
        return False

    def _ordinary(self, ch: str) -> None:
        self._eat = False
        q = self._quote
        if q is Quote.NONE:
            if ch in self.ifs:
                self._finish()
            else:
                self._word.append(ch)
        elif q in (Quote.SINGLE, Quote.DOUBLE):
            self._word.append(ch)
        elif q is Quote.DOUBLEONE:
            self._word.append("\\")
            self._quote = Quote.DOUBLE
            self._word.append(ch)
        else:
            self._quote = Quote.NONE
            self._word.append(ch)

    def tokenize_line(self, buffer: str, cursor: Optional[int] = None) -> TokenizedLine:
        """Tokenize ``buffer`` and report which word and offset hold ``cursor``.

        ``cursor`` is an index into ``buffer``; it defaults to the end.
        Text after an unquoted newline or a NUL is ignored.
        Raises IncompleteLineError when the line is unfinished.
        """
        length = len(buffer)
        if cursor is None:
            cursor = length
        if not 0 <= cursor <= length:
            raise ValueError(f"cursor {cursor} is outside the line")

        cursor_pos: Optional[Tuple[int, int]] = None
        i = 0
        while True:
            ch = buffer[i] if i < length else "\0"
            if i == cursor and i < length:
                cursor_pos = (len(self._argv), len(self._word))
            if ch == "'":
                self._single_quote(ch)
            elif ch == '"':
                self._double_quote(ch)
            elif ch == "\\":
                self._backslash(ch)
            elif ch == "\n":
                if self._newline(ch):
                    break
            elif ch == "\0":
                if self._end():
                    break
            else:
                self._ordinary(ch)
            i += 1

        if cursor_pos is None:
            cursor_pos = (len(self._argv), len(self._word))
        self._finish()
        return TokenizedLine(tuple(self._argv), cursor_pos[0], cursor_pos[1])

    def tokenize(self, text: str) -> Tuple[str, ...]:
        """Tokenize ``text`` and return the words, ignoring the cursor."""
        return self.tokenize_line(text).argv


def split(text: str, ifs: Optional[str] = None) -> List[str]:
    """Split one complete line into words with a fresh tokenizer."""
    return list(Tokenizer(ifs).tokenize(text))