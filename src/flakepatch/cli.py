from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .api import load_manifest
from .attrpath import list_inputs
from .errors import FlakePatchError, ParseError
from .insertion import InsertionLocation
from .refs import infer_input
from .upsert import input_url_path, upsert_input


logger = logging.getLogger(__name__)

LOG_ENV = "FLAKEPATCH_LOG"


def _configure_logging(verbose: int) -> None:
    if verbose >= 2:
        level: int | str = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = os.environ.get(LOG_ENV, "WARNING").strip().upper() or "WARNING"
        if not isinstance(logging.getLevelName(level), int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _cmd_add(args: argparse.Namespace) -> int:
    input_name, input_url = infer_input(args.input_ref, args.input_name)
    logger.info("adding input %s = %s", input_name, input_url)

    path = Path(args.flake_path)
    text, tree = load_manifest(path)
    new_text = upsert_input(
        tree,
        input_name,
        input_url,
        text,
        input_url_path(input_name),
        args.insertion_location,
    )

    if args.dry_run:
        sys.stdout.write(new_text)
        return 0

    path.write_text(new_text, encoding="utf-8")
    logger.info("wrote %s", path)
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    _, tree = load_manifest(Path(args.flake_path))
    entries = list_inputs(tree)
    if args.json:
        payload = {e.name: e.url for e in entries}
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        for e in entries:
            print(f"{e.name}\t{e.url if e.url is not None else '-'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="flakepatch", description="Edit the inputs of a flake.nix in place")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More logging (repeatable)")
    sub = ap.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Add or update a flake input")
    add.add_argument("input_ref", metavar="INPUT_REF", help="Flake reference, e.g. github:NixOS/nixpkgs or NixOS/nixpkgs/0.2405.*")
    add.add_argument("--flake-path", default="./flake.nix", help="Path to the flake.nix to edit")
    add.add_argument("--input-name", default=None, help="Name of the input (inferred from INPUT_REF when possible)")
    add.add_argument(
        "--insertion-location",
        type=InsertionLocation.parse,
        default=InsertionLocation.TOP,
        choices=list(InsertionLocation),
        help="Where a new input goes among the existing ones",
    )
    add.add_argument("--dry-run", action="store_true", help="Print the new flake.nix instead of writing it")
    add.set_defaults(func=_cmd_add)

    ls = sub.add_parser("list", help="List the inputs of a flake")
    ls.add_argument("--flake-path", default="./flake.nix", help="Path to the flake.nix to read")
    ls.add_argument("--json", action="store_true", help="Print inputs as JSON")
    ls.set_defaults(func=_cmd_list)

    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        return args.func(args)
    except (FlakePatchError, ParseError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
