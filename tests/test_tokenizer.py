import pytest
from hypothesis import given
from hypothesis import strategies as st

from elkit.tokenizer import (
    IncompleteLineError,
    Quote,
    TokenizedLine,
    Tokenizer,
    TokenizeStatus,
    split,
)


def _sh_quote(word):
    return "'" + word.replace("'", "'\\''") + "'"


def test_plain_words_split_on_whitespace():
    assert split("ls  -l\t/tmp") == ["ls", "-l", "/tmp"]


def test_empty_quotes_make_empty_word():
    assert split("a '' b") == ["a", "", "b"]


def test_single_quotes_keep_everything_literal():
    assert split("'a \"b\" \\c'") == ['a "b" \\c']


def test_backslash_in_double_quotes_before_plain_char_is_kept():
    assert split('"a\\b"') == ["a\\b"]


def test_backslash_in_double_quotes_escapes_quote():
    assert split('"a\\"b"') == ['a"b']


def test_unquoted_newline_ends_line():
    assert split("a b\nc d") == ["a", "b"]


def test_trailing_backslash_is_dropped():
    assert split("abc\\") == ["abc"]


def test_custom_ifs():
    assert split("a:b c", ifs=":") == ["a", "b c"]


@pytest.mark.parametrize(
    "text,status",
    [
        ("echo 'abc", TokenizeStatus.UNMATCHED_SINGLE_QUOTE),
        ('echo "abc', TokenizeStatus.UNMATCHED_DOUBLE_QUOTE),
        ("echo \\\n", TokenizeStatus.QUOTED_RETURN),
    ],
)
def test_incomplete_lines_raise(text, status):
    with pytest.raises(IncompleteLineError) as info:
        split(text)
    assert info.value.status is status
    assert isinstance(info.value, ValueError)


def test_continuation_after_unmatched_quote():
    tok = Tokenizer()
    with pytest.raises(IncompleteLineError):
        tok.tokenize("echo 'ab")
    assert tok.quote is Quote.SINGLE
    assert tok.tokenize("cd'") == ("echo", "abcd")


def test_continuation_after_quoted_return():
    tok = Tokenizer()
    with pytest.raises(IncompleteLineError):
        tok.tokenize("foo \\\n")
    assert tok.tokenize("bar") == ("foo", "bar")


def test_reset_clears_words_and_quote():
    tok = Tokenizer()
    tok.tokenize("one two")
    with pytest.raises(IncompleteLineError):
        tok.tokenize('"x')
    tok.reset()
    assert tok.quote is Quote.NONE
    assert tok.argv == ()
    assert tok.tokenize("three") == ("three",)


def test_words_accumulate_without_reset():
    tok = Tokenizer()
    tok.tokenize("a")
    assert tok.tokenize("b") == ("a", "b")


def test_cursor_inside_second_word():
    result = Tokenizer().tokenize_line("ab cd", cursor=4)
    assert result == TokenizedLine(("ab", "cd"), 1, 1)


def test_cursor_defaults_to_end():
    result = Tokenizer().tokenize_line("ab cd")
    assert (result.cursor_word, result.cursor_offset) == (1, 2)


def test_cursor_out_of_range():
    with pytest.raises(ValueError):
        Tokenizer().tokenize_line("ab", cursor=3)


safe_words = st.lists(
    st.text(alphabet="abcxyz0123-_./", min_size=1, max_size=8), max_size=6
)


@given(safe_words)
def test_plain_words_match_str_split(words):
    line = " ".join(words)
    assert split(line) == line.split()


@given(st.lists(st.text(alphabet=st.characters(blacklist_characters="\0"), max_size=8), max_size=5))
def test_single_quote_round_trip(words):
    line = " ".join(_sh_quote(w) for w in words)
    assert split(line) == words


@given(safe_words, st.data())
def test_cursor_points_into_reported_word(words, data):
    line = " ".join(words)
    cursor = data.draw(st.integers(min_value=0, max_value=len(line)))
    result = Tokenizer().tokenize_line(line, cursor)
    if result.cursor_word < len(result.argv):
        assert result.cursor_offset <= len(result.argv[result.cursor_word])
    else:
        assert result.cursor_offset == 0