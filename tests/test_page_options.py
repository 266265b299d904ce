from __future__ import annotations

import dataclasses

import pytest

from page_options import (
    AbsolutePathRequired,
    ExcessArguments,
    HelpRequested,
    MissingOptionValue,
    MissingSource,
    Omit,
    UnknownOption,
    base_name,
    decode_omissions,
    parse_mask,
    resolve,
)

FIELDS = {
    Omit.DOCTYPE: "include_doctype",
    Omit.TITLE: "include_title",
    Omit.DATETIME: "include_datetime",
    Omit.AUTHOR: "include_author",
}


def test_decode_omissions_each_bit_independent():
    for mask in range(0x200):
        flags = decode_omissions(mask)
        for bit, field in FIELDS.items():
            assert flags[field] == (not mask & bit), (mask, field)
        assert decode_omissions(mask) == flags


def test_decode_omissions_ignores_unknown_bits():
    assert decode_omissions(0xF0) == decode_omissions(0)
    assert all(decode_omissions(0).values())
    assert not any(decode_omissions(0x0F).values())


def test_decode_omissions_negative_mask_sets_everything():
    assert not any(decode_omissions(-1).values())


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0x0A", 0x0A),
        ("0X05", 5),
        ("c", 12),
        ("  0x04", 4),
        ("1g", 1),
        ("0x", 0),
        ("zz", 0),
        ("", 0),
        ("-1", -1),
    ],
)
def test_parse_mask_reads_hex_leniently(text, expected):
    assert parse_mask(text) == expected


@pytest.mark.parametrize(
    "source, expected",
    [
        ("page.md", "page"),
        ("archive.tar.gz", "archive.tar"),
        ("README", "README"),
        ("notes.d/page", "page"),
        ("sub/dir/page.md", "page"),
        (".profile", ".profile"),
    ],
)
def test_base_name_strips_final_extension(source, expected):
    assert base_name(source) == expected


def test_resolve_defaults():
    config = resolve(["page.md"])
    assert config.source == "page.md"
    assert config.source_base_name == "page"
    assert config.include_doctype and config.include_title
    assert config.include_datetime and config.include_author
    assert config.stylesheet_root is None
    assert config.navigation is None
    assert not config.verbose and not config.extended
    assert config.webpage_filename == "page.html"
    assert config.txt_filename == "page.txt"


def test_resolve_all_options():
    config = resolve(["-v", "-f", "0x0C", "-c", "/srv/site", "-n", "<nav>x</nav>", "-x", "page.md"])
    assert config.verbose and config.extended
    assert config.include_doctype and config.include_title
    assert not config.include_datetime and not config.include_author
    assert config.stylesheet_root == "/srv/site"
    assert config.navigation == "<nav>x</nav>"


def test_resolve_getopt_syntax():
    config = resolve(["-vx", "-f0x01", "page.md", "-c/srv"])
    assert config.verbose and config.extended
    assert not config.include_doctype
    assert config.stylesheet_root == "/srv"


def test_resolve_double_dash_ends_options():
    config = resolve(["--", "-odd.md"])
    assert config.source == "-odd.md"
    assert config.source_base_name == "-odd"


def test_resolve_repeated_flags_accumulate():
    config = resolve(["-f", "1", "-f", "8", "page.md"])
    assert not config.include_doctype and not config.include_author
    assert config.include_title and config.include_datetime


def test_configuration_is_frozen():
    config = resolve(["page.md"])
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.include_title = False


@pytest.mark.parametrize(
    "argv, error, exit_code",
    [
        ([], MissingSource, 1),
        (["-v"], MissingSource, 1),
        (["page.md", "-c"], MissingOptionValue, 2),
        (["-q", "page.md"], UnknownOption, 3),
        (["-c", "site/root", "page.md"], AbsolutePathRequired, 5),
        (["one.md", "two.md"], ExcessArguments, 7),
    ],
)
def test_resolve_errors(argv, error, exit_code):
    with pytest.raises(error) as excinfo:
        resolve(argv)
    assert excinfo.value.exit_code == exit_code


def test_resolve_help():
    with pytest.raises(HelpRequested):
        resolve(["-h", "page.md"])


def test_resolve_mask_0x0a_drops_title_and_author():
    config = resolve(["-f", "0x0A", "page.md"])
    assert config.include_doctype and config.include_datetime
    assert not config.include_title and not config.include_author


def test_resolve_help_wins_over_later_bad_option():
    with pytest.raises(HelpRequested):
        resolve(["-h", "-q", "page.md"])


def test_resolve_earlier_error_wins():
    with pytest.raises(AbsolutePathRequired):
        resolve(["-c", "relative", "-q", "page.md"])
    with pytest.raises(UnknownOption):
        resolve(["-q", "-c", "relative", "page.md"])
