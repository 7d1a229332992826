from __future__ import annotations

import pytest

from flakepatch import RefError, infer_input


@pytest.mark.parametrize(
    "ref, expected",
    [
        ("github:NixOS/nixpkgs", ("nixpkgs", "github:NixOS/nixpkgs")),
        ("github:NixOS/nixpkgs/nixos-23.05", ("nixpkgs", "github:NixOS/nixpkgs/nixos-23.05")),
        ("github:numtide/flake-utils/", ("flake-utils", "github:numtide/flake-utils")),
        ("gitlab:foo/bar?dir=sub", ("bar", "gitlab:foo/bar?dir=sub")),
        ("NixOS/nixpkgs", ("nixpkgs", "https://flakehub.com/f/NixOS/nixpkgs/*")),
        ("NixOS/nixpkgs/0.2305.*", ("nixpkgs", "https://flakehub.com/f/NixOS/nixpkgs/0.2305.*")),
        ("NixOS/nixpkgs/v0.2305.0.tar.gz", ("nixpkgs", "https://flakehub.com/f/NixOS/nixpkgs/0.2305.0")),
        ("DeterminateSystems/fh/~0.1", ("fh", "https://flakehub.com/f/DeterminateSystems/fh/~0.1")),
    ],
)
def test_infer_input(ref: str, expected: tuple[str, str]) -> None:
    assert infer_input(ref) == expected


def test_explicit_name_wins() -> None:
    assert infer_input("github:NixOS/nixpkgs", "pkgs") == ("pkgs", "github:NixOS/nixpkgs")
    assert infer_input("NixOS/nixpkgs", "pkgs") == ("pkgs", "https://flakehub.com/f/NixOS/nixpkgs/*")


def test_url_with_a_host_needs_a_name() -> None:
    with pytest.raises(RefError) as e:
        infer_input("https://example.com/flake.tar.gz")
    assert "--input-name" in str(e.value)
    assert infer_input("https://example.com/flake.tar.gz", "ex") == ("ex", "https://example.com/flake.tar.gz")
    assert infer_input("git+https://github.com/wez/wezterm.git", "wezterm")[0] == "wezterm"


def test_flakehub_base_url_is_configurable() -> None:
    assert infer_input("a/b", flakehub_base_url="http://localhost:8080/") == ("b", "http://localhost:8080/f/a/b/*")


@pytest.mark.parametrize(
    "ref",
    [
        "",
        "nixpkgs",
        "flake:nixpkgs",
        "a/b/c/d",
        "/b",
        "NixOS/nixpkgs/not-a-version",
        "NixOS/nixpkgs/>=1.0,",
    ],
)
def test_bad_references(ref: str) -> None:
    with pytest.raises(RefError):
        infer_input(ref)


@pytest.mark.parametrize("version", [">=1.0, <2", ">=0.2305.0,<0.2311", "~1.2 , ^1.2.3"])
def test_several_version_requirements(version: str) -> None:
    assert infer_input(f"NixOS/nixpkgs/{version}") == (
        "nixpkgs",
        f"https://flakehub.com/f/NixOS/nixpkgs/{version}",
    )
