# elkit

Small, dependency-free helpers for command lines and control characters:

- **`elkit.tokenizer`** splits a line into words with simplified
  Bourne-shell quoting rules (single quotes, double quotes, backslash
  escapes). It reports which word, and which offset inside it, holds the
  cursor, and tells you when a line is unfinished.
- **`elkit.vis`** encodes strings "visually", so that control and
  non-printable characters become readable escape sequences
  (`\^A`, `\M-a`, C-style `\n`, octal `\011`, HTTP `%xx` or MIME `=XX`).
- **`elkit.unvis`** decodes such sequences back to bytes, all at once or
  one character at a time.
- **`elkit.flags`** holds `VisFlag`, the options shared by both
  directions, and `UnvisResult`, the outcomes reported by the streaming
  decoder.

Python 3.10 or later is required. There are no runtime dependencies.

## Tokenizing

```python
from elkit.tokenizer import Tokenizer, IncompleteLineError, split

split("ls -l 'My Documents'")
# ['ls', '-l', 'My Documents']

tok = Tokenizer(None)            # None: separators are tab, space and newline
line = tok.tokenize_line("echo hello world", 7)
# TokenizedLine(argv=('echo', 'hello', 'world'), cursor_word=1, cursor_offset=2)

try:
    Tokenizer(None).tokenize('echo "unterminated')
except IncompleteLineError as exc:
    print(exc.status)            # TokenizeStatus.UNMATCHED_DOUBLE_QUOTE
```

`tokenize_line(buffer, cursor)` takes the cursor as an index into the
buffer (the end by default) and raises `ValueError` if it lies outside.
Text after an unquoted newline is ignored.

An unfinished line raises `IncompleteLineError`; its `status` is one of
`TokenizeStatus.UNMATCHED_SINGLE_QUOTE`, `UNMATCHED_DOUBLE_QUOTE` or
`QUOTED_RETURN` (an escaped newline at the end). A `Tokenizer` keeps its
words and quoting state between calls, so continuation lines can be fed
to it; `quote` and `argv` show that state, and `reset()` starts afresh.
`split(text, ifs)` uses a fresh tokenizer each time.

## Visual encoding

```python
from elkit.flags import VisFlag
from elkit.vis import vis, strvis, strnvis, strenvis

strvis("tab\there\x01", VisFlag.TAB, "")
# b'tab\\011here\\^A'
strvis("a b\n", VisFlag.CSTYLE | VisFlag.WHITE, "")
strvis("rm *; ls", VisFlag.GLOB | VisFlag.SHELL, "")
```

All functions return `bytes`; text input is taken as UTF-8. Characters
in `extra` are always encoded, as are those selected by flags such as
`SP`, `TAB`, `NL`, `DQ`, `GLOB` and `SHELL`. `HTTPSTYLE` and `MIMESTYLE`
select the `%xx` and `=XX` styles.

- `vis(c, flags, nextc, extra)` encodes one character, given the one that
  follows it.
- `strnvis(src, limit, flags, extra)` stops before the output would
  exceed `limit` bytes; the result is truncated, not an error.
- `strenvis(src, limit, flags, extra, byte_mode)` returns a `VisResult`
  with the `encoded` bytes and a `byte_mode` flag. Input that is not
  valid UTF-8, or `byte_mode=True`, makes the rest be handled byte by
  byte; the flag reports this back only when `VisFlag.NOLOCALE` is set.

## Decoding

```python
from elkit.flags import UnvisResult, VisFlag
from elkit.unvis import UnvisDecoder, UnvisError, strunvis, strnunvis

strunvis(r"\^A\M-a\n", VisFlag(0))          # b'\x01\xe1\n'
strunvis("caf%C3%A9", VisFlag.HTTPSTYLE)    # b'caf\xc3\xa9'

decoder = UnvisDecoder(VisFlag(0))
decoder.feed("a")        # (UnvisResult.VALID, 97)
decoder.feed("\\")       # (UnvisResult.NOCHAR, None)
decoder.feed("1")        # (UnvisResult.NOCHAR, None)
decoder.end()            # (UnvisResult.VALID, 1): flushes the pending octal
```

`feed` returns the outcome and the decoded byte, if any. On
`UnvisResult.VALIDPUSH` the byte is complete and the same character must
be fed again. An unrecognised escape raises `UnvisError`, and so does
`end()` inside an unfinished sequence.

`strunvis(src, flags)` decodes a whole string; an unfinished sequence at
the very end is dropped. `strnunvis(src, limit, flags)` does the same but
raises `OverflowError` if the result, plus a terminating NUL, would not
fit in `limit` bytes.

## What elkit does not do

elkit is only these building blocks. It has no interactive line editor,
no key bindings, no history list and no terminal handling; it reads
nothing from a keyboard and runs no commands.

## Running the tests

```
pip install -e ".[test]"
pytest
```