from __future__ import annotations

import re

from .tokens import KEYWORDS


_ATTR_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_'\-]*")


def splice(text: str, start: int, end: int, replacement: str) -> str:
    """Replace ``text[start:end]`` with ``replacement``."""
    if not 0 <= start <= end <= len(text):
        raise ValueError(f"invalid splice range {start}..{end} for text of length {len(text)}")
    return text[:start] + replacement + text[end:]


def newline_of(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def escape_string(value: str) -> str:
    """Escape ``value`` for use between double quotes."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("${", "\\${")


def escape_indented(value: str) -> str:
    """Escape ``value`` for use between '' delimiters."""
    return value.replace("''", "'''").replace("${", "''${")


def nix_string(value: str) -> str:
    return '"' + escape_string(value) + '"'


def is_identifier(name: str) -> bool:
    return _ATTR_NAME_RE.fullmatch(name) is not None and name not in KEYWORDS


def attr_name(name: str) -> str:
    """``name`` as an attribute key, quoted when it is not a plain identifier."""
    if is_identifier(name) or name == "or":
        return name
    return nix_string(name)


def url_declaration(input_name: str, input_url: str, *, qualified: bool) -> str:
    """``[inputs.]<name>.url = "<url>";``"""
    prefix = "inputs." if qualified else ""
    return f"{prefix}{attr_name(input_name)}.url = {nix_string(input_url)};"
