from __future__ import annotations

from .api import FALLBACK_FLAKE_CONTENTS, add_input, load_manifest, parse_file, parse_source
from .attrpath import InputEntry, find_all, find_first, list_inputs
from .errors import (
    AmbiguousOrUnknownValueShape,
    EmptyParameterListUnsupported,
    FlakePatchError,
    FormalNotFound,
    InheritNotSupported,
    MissingInputs,
    MissingInputsAndOutputs,
    MissingOutputs,
    MultiPartValueUnsupported,
    ParseError,
    PositionNotFound,
    RefError,
    UnsupportedExpressionKind,
    UnsupportedValueKind,
)
from .insertion import InsertionLocation
from .positions import position_to_offset
from .refs import infer_input
from .upsert import upsert_input

__all__ = [
    "FALLBACK_FLAKE_CONTENTS",
    "AmbiguousOrUnknownValueShape",
    "EmptyParameterListUnsupported",
    "FlakePatchError",
    "FormalNotFound",
    "InheritNotSupported",
    "InputEntry",
    "InsertionLocation",
    "MissingInputs",
    "MissingInputsAndOutputs",
    "MissingOutputs",
    "MultiPartValueUnsupported",
    "ParseError",
    "PositionNotFound",
    "RefError",
    "UnsupportedExpressionKind",
    "UnsupportedValueKind",
    "add_input",
    "find_all",
    "find_first",
    "infer_input",
    "list_inputs",
    "load_manifest",
    "parse_file",
    "parse_source",
    "position_to_offset",
    "upsert_input",
]
