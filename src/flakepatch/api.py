from __future__ import annotations

import logging
from pathlib import Path

from . import ast as A
from .insertion import InsertionLocation
from .lexer import tokenize
from .parser import parse_tokens
from .upsert import input_url_path, upsert_input


logger = logging.getLogger(__name__)

FALLBACK_FLAKE_CONTENTS = """{
  description = "My new flake.";

  outputs = { ... } @ inputs: { };
}
"""


def parse_source(src: str, *, file: str = "<memory>") -> A.Expression:
    return parse_tokens(tokenize(src, file=file))


def parse_file(path: str | Path) -> A.Expression:
    p = Path(path).expanduser().resolve()
    src = p.read_text(encoding="utf-8")
    return parse_source(src, file=str(p))


def load_manifest(path: str | Path) -> tuple[str, A.Expression]:
    """Read and parse a flake.nix, bootstrapping one when there is nothing to edit.

    A missing file, a blank file, and a file holding only `{ }` all yield the
    fallback flake, which has an `outputs` function ready to receive inputs.
    """
    p = Path(path).expanduser()
    try:
        contents = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("%s does not exist, starting from an empty flake", p)
        contents = FALLBACK_FLAKE_CONTENTS

    if not contents.strip():
        logger.info("%s is empty, starting from an empty flake", p)
        contents = FALLBACK_FLAKE_CONTENTS

    tree = parse_source(contents, file=str(p))
    if isinstance(tree, A.Map) and not tree.bindings:
        logger.info("%s has no attributes, starting from an empty flake", p)
        contents = FALLBACK_FLAKE_CONTENTS
        tree = parse_source(contents, file=str(p))

    return contents, tree


def add_input(
    text: str,
    input_name: str,
    input_url: str,
    *,
    insertion_location: InsertionLocation = InsertionLocation.TOP,
    file: str = "<memory>",
) -> str:
    """Parse ``text`` and upsert ``inputs.<input_name>.url``."""
    tree = parse_source(text, file=file)
    return upsert_input(
        tree,
        input_name,
        input_url,
        text,
        input_url_path(input_name),
        insertion_location,
    )
