import pytest

from elkit.flags import UnvisResult, VisFlag


def test_white_is_union_of_space_tab_newline():
    assert VisFlag(0x0004 | 0x0008 | 0x0010) == VisFlag.WHITE
    assert VisFlag.WHITE == VisFlag(0x0004) | VisFlag(0x0008) | VisFlag(0x0010)


def test_meta_contains_white_glob_and_shell():
    meta = VisFlag(0x0004 | 0x0008 | 0x0010 | 0x1000 | 0x2000)
    assert meta == VisFlag.META
    for member in (VisFlag.SP, VisFlag.TAB, VisFlag.NL, VisFlag.GLOB, VisFlag.SHELL):
        assert member in meta
    assert VisFlag(0x0001) not in meta


def test_httpstyle_is_alias_of_http1808():
    assert VisFlag(0x0080) is VisFlag.HTTP1808
    assert VisFlag(0x0080) is VisFlag.HTTPSTYLE


def test_flag_value_decomposes_into_members():
    combined = VisFlag(0x2004)
    assert VisFlag.SHELL in combined
    assert VisFlag.SP in combined
    assert VisFlag.GLOB not in combined


@pytest.mark.parametrize(
    "value, member",
    [(0x8000, "DQ"), (0x4000, "NOLOCALE"), (0x0800, "END")],
)
def test_source_flag_values(value, member):
    assert VisFlag(value) is VisFlag[member]


@pytest.mark.parametrize(
    "value, produces",
    [(1, True), (2, True), (3, False), (-1, False), (-2, False)],
)
def test_produces_char(value, produces):
    assert UnvisResult(value).produces_char is produces


@pytest.mark.parametrize(
    "value, error",
    [(1, False), (2, False), (3, False), (-1, True), (-2, True)],
)
def test_is_error(value, error):
    assert UnvisResult(value).is_error is error


def test_unknown_result_value_rejected():
    with pytest.raises(ValueError):
        UnvisResult(7)