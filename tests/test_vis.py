import pytest
from hypothesis import given
from hypothesis import strategies as st

from elkit.flags import VisFlag
from elkit.unvis import strunvis
from elkit.vis import VisResult, strenvis, strnvis, strvis, vis

NOLOCALE = VisFlag.NOLOCALE


def test_control_character_uses_caret():
    assert strvis(b"\x01") == b"\\^A"


def test_nul_is_octal():
    assert strvis(b"\x00") == b"\\000"


def test_cstyle_newline():
    assert strvis(b"\n", VisFlag.CSTYLE | VisFlag.NL) == b"\\n"


def test_http_style_escapes_space():
    assert strvis(b"a b", VisFlag.HTTPSTYLE) == b"a%20b"


def test_mime_style_escapes_equals():
    assert strvis(b"a=b", VisFlag.MIMESTYLE) == b"a=3Db"


def test_noslash_drops_backslash():
    assert strvis(b"\x01", VisFlag.NOSLASH) == b"^A"


def test_meta_control_nolocale():
    assert strvis(b"\x81", NOLOCALE) == b"\\M^A"


def test_delete_round_trip():
    out = vis(0x7F)
    assert out.startswith(b"\\")
    assert strunvis(out) == b"\x7f"


def test_white_space_passes_through():
    assert strvis(b"a b\tc\nd") == b"a b\tc\nd"


def test_safe_characters_pass_through():
    assert strvis(b"\b\a\r", VisFlag.SAFE) == b"\b\a\r"


def test_noslash_keeps_backslash():
    assert strvis(b"a\\b", VisFlag.NOSLASH) == b"a\\b"


def test_extra_characters_are_encoded():
    out = strvis(b"abc", extra="b")
    assert b"b" not in out
    assert strunvis(out) == b"abc"


@pytest.mark.parametrize("ch", list("*?[#"))
def test_glob_characters(ch):
    out = vis(ch, VisFlag.GLOB)
    assert out.startswith(b"\\")
    assert strunvis(out) == ch.encode()


@pytest.mark.parametrize("ch", list("'`\";&<>()|{}]$!^~"))
def test_shell_characters(ch):
    out = vis(ch, VisFlag.SHELL)
    assert out != ch.encode()
    assert strunvis(out) == ch.encode()


def test_sp_flag_encodes_space():
    out = strvis(b"a b", VisFlag.SP)
    assert b" " not in out
    assert strunvis(out) == b"a b"


def test_cstyle_nul_depends_on_next_char():
    before_digit = vis(0, VisFlag.CSTYLE, "1")
    before_letter = vis(0, VisFlag.CSTYLE, "a")
    assert len(before_digit) > len(before_letter)
    assert strunvis(before_digit + b"1") == b"\x001"
    assert strunvis(before_letter + b"a") == b"\x00a"


def test_mime_trailing_space_before_newline():
    out = strvis(b"a \n", VisFlag.MIMESTYLE)
    assert b" " not in out
    assert strunvis(out, VisFlag.MIMESTYLE) == b"a \n"


def test_utf8_text_passes_through():
    assert strvis("héllo") == "héllo".encode()


def test_utf8_text_round_trip_with_controls():
    text = "héllo\x01wörld\x7f"
    assert strunvis(strvis(text)) == text.encode()


def test_vis_rejects_large_int():
    with pytest.raises(ValueError):
        vis(300)


def test_vis_rejects_long_string():
    with pytest.raises(ValueError):
        vis("ab")


def test_negative_limit_rejected():
    with pytest.raises(ValueError):
        strnvis(b"abc", -1)


def test_limit_does_not_split_escape():
    full = strvis(b"\x01\x02")
    out = strnvis(b"\x01\x02", len(full) - 1)
    assert full.startswith(out)
    assert strunvis(out) == b"\x01"


def test_strenvis_nolocale_reports_byte_mode():
    result = strenvis(b"\xff", flags=NOLOCALE)
    assert isinstance(result, VisResult)
    assert result.byte_mode is True
    assert strunvis(result.encoded) == b"\xff"


def test_strenvis_locale_keeps_caller_flag():
    result = strenvis(b"\xff")
    assert result.byte_mode is False
    assert bytes(result) == b"\xff"


def test_strenvis_byte_mode_processes_bytes():
    data = "é".encode()
    result = strenvis(data, byte_mode=True)
    assert result.byte_mode is True
    assert result.encoded == data


@given(st.binary())
def test_round_trip_nolocale(data):
    assert strunvis(strvis(data, NOLOCALE)) == data


@given(st.binary())
def test_round_trip_cstyle(data):
    assert strunvis(strvis(data, VisFlag.CSTYLE | NOLOCALE)) == data


@given(st.binary())
def test_round_trip_octal(data):
    assert strunvis(strvis(data, VisFlag.OCTAL | NOLOCALE)) == data


@given(st.binary())
def test_round_trip_http(data):
    encoded = strvis(data, VisFlag.HTTPSTYLE | NOLOCALE)
    assert strunvis(encoded, VisFlag.HTTP1808) == data


@given(st.binary())
def test_nolocale_output_is_printable_ascii(data):
    out = strvis(data, NOLOCALE | VisFlag.WHITE)
    assert all(0x21 <= b <= 0x7E for b in out)


@given(st.text(alphabet=st.characters(min_codepoint=0x21, max_codepoint=0x7E,
                                      blacklist_characters="\\")))
def test_graphic_ascii_unchanged(text):
    assert strvis(text) == text.encode()


@given(st.binary(), st.integers(min_value=0, max_value=64))
def test_limit_gives_prefix(data, limit):
    full = strvis(data, NOLOCALE)
    out = strnvis(data, limit, NOLOCALE)
    assert len(out) <= limit
    assert full.startswith(out)


@given(st.binary())
def test_strenvis_matches_strvis(data):
    result = strenvis(data, flags=NOLOCALE)
    assert result.encoded == strvis(data, NOLOCALE)
    assert len(result) == len(result.encoded)