from __future__ import annotations

import json
from pathlib import Path

import pytest

from flakepatch import FALLBACK_FLAKE_CONTENTS
from flakepatch.cli import main


FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def flake(tmp_path: Path) -> Path:
    p = tmp_path / "flake.nix"
    p.write_text((FIXTURES / "flake2.nix").read_text(encoding="utf-8"), encoding="utf-8")
    return p


def test_add_writes_the_file(flake: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["add", "--flake-path", str(flake), "github:numtide/flake-utils"])
    assert rc == 0
    text = flake.read_text(encoding="utf-8")
    assert '  inputs.flake-utils.url = "github:numtide/flake-utils";\n  inputs.nixpkgs.url' in text
    assert capsys.readouterr().out == ""


def test_add_dry_run_prints_and_leaves_the_file_alone(flake: Path, capsys: pytest.CaptureFixture[str]) -> None:
    before = flake.read_text(encoding="utf-8")
    rc = main(["add", "--flake-path", str(flake), "--dry-run", "NixOS/nixpkgs/0.2405.*"])
    assert rc == 0
    assert flake.read_text(encoding="utf-8") == before
    out = capsys.readouterr().out
    assert 'inputs.nixpkgs.url = "https://flakehub.com/f/NixOS/nixpkgs/0.2405.*";' in out


def test_add_bottom_with_explicit_name(flake: Path) -> None:
    rc = main(
        [
            "add",
            "--flake-path",
            str(flake),
            "--input-name",
            "wez",
            "--insertion-location",
            "bottom",
            "git+https://github.com/wez/wezterm.git",
        ]
    )
    assert rc == 0
    lines = flake.read_text(encoding="utf-8").splitlines()
    idx = next(i for i, line in enumerate(lines) if "inputs.wez.url" in line)
    assert lines[idx - 1].strip() == 'inputs.agenix.url = "github:ryantm/agenix";'


def test_add_bootstraps_a_missing_flake(tmp_path: Path) -> None:
    p = tmp_path / "flake.nix"
    assert main(["add", "--flake-path", str(p), "github:NixOS/nixpkgs"]) == 0
    assert p.read_text(encoding="utf-8") == (
        "{\n"
        '  description = "My new flake.";\n'
        "\n"
        '  inputs.nixpkgs.url = "github:NixOS/nixpkgs";\n'
        "\n"
        "  outputs = { nixpkgs, ... } @ inputs: { };\n"
        "}\n"
    )


@pytest.mark.parametrize("contents", ["", "  \n", "{ }\n"])
def test_add_bootstraps_an_empty_flake(tmp_path: Path, contents: str) -> None:
    p = tmp_path / "flake.nix"
    p.write_text(contents, encoding="utf-8")
    assert main(["add", "--flake-path", str(p), "github:NixOS/nixpkgs"]) == 0
    text = p.read_text(encoding="utf-8")
    assert text.startswith(FALLBACK_FLAKE_CONTENTS.split("outputs")[0])
    assert 'inputs.nixpkgs.url = "github:NixOS/nixpkgs";' in text


def test_add_without_a_name_for_a_url_fails(flake: Path, capsys: pytest.CaptureFixture[str]) -> None:
    before = flake.read_text(encoding="utf-8")
    rc = main(["add", "--flake-path", str(flake), "https://example.com/flake.tar.gz"])
    assert rc == 1
    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "--input-name" in err
    assert flake.read_text(encoding="utf-8") == before


def test_add_to_an_unparseable_flake_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "flake.nix"
    p.write_text('{ inputs.a.url = "x" }\n', encoding="utf-8")
    rc = main(["add", "--flake-path", str(p), "github:NixOS/nixpkgs"])
    assert rc == 1
    assert "error: " in capsys.readouterr().err
    assert p.read_text(encoding="utf-8") == '{ inputs.a.url = "x" }\n'


def test_add_refused_edit_leaves_the_file_alone(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "flake.nix"
    src = '{\n  inputs.a.url = "x";\n  outputs = { }: { };\n}\n'
    p.write_text(src, encoding="utf-8")
    rc = main(["add", "--flake-path", str(p), "github:NixOS/nixpkgs"])
    assert rc == 1
    assert "doesn't take any arguments" in capsys.readouterr().err
    assert p.read_text(encoding="utf-8") == src


def test_list(flake: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["list", "--flake-path", str(flake)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "nixpkgs\tgithub:nixos/nixpkgs/nixos-unstable",
        "agenix-cli\tgithub:cole-h/agenix-cli",
        "agenix\tgithub:ryantm/agenix",
    ]


def test_list_json(flake: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-v", "list", "--flake-path", str(flake), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "agenix": "github:ryantm/agenix",
        "agenix-cli": "github:cole-h/agenix-cli",
        "nixpkgs": "github:nixos/nixpkgs/nixos-unstable",
    }


def test_unknown_insertion_location_is_a_usage_error(flake: Path) -> None:
    with pytest.raises(SystemExit) as e:
        main(["add", "--flake-path", str(flake), "--insertion-location", "middle", "a/b"])
    assert e.value.code == 2
