from __future__ import annotations

import pytest

from flakepatch import parse_source
from flakepatch.attrpath import find_first, literal_text
from flakepatch.edits import (
    attr_name,
    escape_indented,
    escape_string,
    is_identifier,
    newline_of,
    splice,
    url_declaration,
)


def test_splice_replaces_a_range() -> None:
    assert splice("abcdef", 2, 4, "XY") == "abXYef"
    assert splice("abc", 3, 3, "d") == "abcd"


def test_splice_rejects_a_bad_range() -> None:
    with pytest.raises(ValueError):
        splice("abc", 2, 1, "x")
    with pytest.raises(ValueError):
        splice("abc", 0, 4, "x")


def test_newline_of() -> None:
    assert newline_of("a\r\nb") == "\r\n"
    assert newline_of("a\nb") == "\n"
    assert newline_of("") == "\n"


def test_escape_string() -> None:
    assert escape_string('a"b') == 'a\\"b'
    assert escape_string("a\\b") == "a\\\\b"
    assert escape_string("x${y}") == "x\\${y}"


def test_escape_indented() -> None:
    assert escape_indented("a''b") == "a'''b"
    assert escape_indented("x${y}") == "x''${y}"


def test_identifiers() -> None:
    assert is_identifier("nixpkgs")
    assert is_identifier("nixpkgs-unstable")
    assert is_identifier("home_manager'")
    assert not is_identifier("1password")
    assert not is_identifier("my.input")
    assert not is_identifier("let")
    assert attr_name("nixpkgs") == "nixpkgs"
    assert attr_name("or") == "or"
    assert attr_name("my.input") == '"my.input"'


def test_url_declaration() -> None:
    assert url_declaration("a", "github:x/y", qualified=False) == 'a.url = "github:x/y";'
    assert url_declaration("a", "github:x/y", qualified=True) == 'inputs.a.url = "github:x/y";'


def test_escaped_declaration_reads_back_verbatim() -> None:
    url = 'https://example.org/"quoted"/${not-interpolated}'
    src = "{ " + url_declaration("odd", url, qualified=True) + " }"
    found = find_first(parse_source(src), ["inputs", "odd", "url"])
    assert found is not None
    # parts hold the raw source, escapes included
    assert literal_text(found.value) == escape_string(url)
    assert len(found.value.parts) == 1
