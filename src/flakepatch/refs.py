from __future__ import annotations

import re
from urllib.parse import urlsplit

from .errors import RefError


FLAKEHUB_BASE_URL = "https://flakehub.com"

_COMPARATOR = (
    r"(?:[~^]|[<>]=?|=)?\s*"
    r"(?:[0-9]+|[*xX])(?:\.(?:[0-9]+|[*xX])){0,2}"
    r"(?:-[0-9A-Za-z.\-]+)?(?:\+[0-9A-Za-z.\-]+)?"
)
# one comparator, or several joined by commas: `>=1.0, <2`
_VERSION_REQ_RE = re.compile(rf"{_COMPARATOR}(?:\s*,\s*{_COMPARATOR})*")


def infer_input(
    ref: str,
    input_name: str | None = None,
    *,
    flakehub_base_url: str = FLAKEHUB_BASE_URL,
) -> tuple[str, str]:
    """Return ``(name, url)`` for an input reference.

    ``github:NixOS/nixpkgs`` keeps the url and takes the repository as the
    name. A url with a host (``https://...``) needs an explicit name.
    ``NixOS/nixpkgs`` and ``NixOS/nixpkgs/0.2405.*`` are FlakeHub flakes.
    """
    ref = ref.strip().rstrip("/")
    if not ref:
        raise RefError("empty input reference")

    parts = urlsplit(ref)

    if parts.scheme and not parts.netloc and "://" not in ref:
        # github:NixOS/nixpkgs
        if input_name:
            return input_name, ref
        segments = parts.path.lstrip("/").split("/")
        if len(segments) >= 2 and segments[1]:
            return segments[1], ref
        raise RefError(
            f"cannot infer an input name for `{ref}`; please specify one with the `--input-name` flag"
        )

    if parts.scheme:
        # https://flakehub.com/f/NixOS/nixpkgs/*
        if input_name:
            return input_name, ref
        raise RefError(
            f"cannot infer an input name for `{ref}`; please specify one with the `--input-name` flag"
        )

    return _flakehub_input(ref, input_name, flakehub_base_url)


def _flakehub_input(ref: str, input_name: str | None, base_url: str) -> tuple[str, str]:
    segments = ref.split("/")
    if len(segments) == 2:
        org, project = segments
        version = "*"
    elif len(segments) == 3:
        org, project, version = segments
        version = version.removesuffix(".tar.gz").removeprefix("v")
        if not _VERSION_REQ_RE.fullmatch(version):
            raise RefError(f"version '{version}' was not a valid SemVer version requirement")
    else:
        raise RefError(
            "flakehub input did not match the expected format of `org/project` or `org/project/version`"
        )

    if not org or not project:
        raise RefError(
            "flakehub input did not match the expected format of `org/project` or `org/project/version`"
        )

    url = f"{base_url.rstrip('/')}/f/{org}/{project}/{version}"
    return (input_name or project), url
