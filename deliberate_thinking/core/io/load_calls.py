from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import yaml

from deliberate_thinking.core.errors import CallLoadError


_PARSERS: dict[str, tuple[str, Callable[[str], Any]]] = {
    ".yaml": ("E_YAML_PARSE", yaml.safe_load),
    ".yml": ("E_YAML_PARSE", yaml.safe_load),
    ".json": ("E_JSON_PARSE", json.loads),
}


def load_calls(path: str) -> list[Any]:
    """Load a call script for replay or checking.

    A script is either a bare list of call payloads or a mapping whose ``calls``
    key holds that list. Individual calls are returned untouched; the validator
    owns their shape.
    """

    script = Path(path)
    file = str(script)

    parser = _PARSERS.get(script.suffix.lower())
    if parser is None:
        raise CallLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message=f"call scripts must be one of {sorted(_PARSERS)}, got '{script.suffix or '<none>'}'",
            file=file,
        )
    if not script.is_file():
        raise CallLoadError(
            code="E_FILE_NOT_FOUND",
            message="call script does not exist",
            file=file,
        )

    parse_code, parse = parser
    try:
        document = parse(script.read_text(encoding="utf-8"))
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise CallLoadError(code=parse_code, message=str(e), file=file) from e

    if isinstance(document, dict):
        if "calls" not in document:
            raise CallLoadError(
                code="E_INVALID_TOP_LEVEL",
                message="mapping scripts must hold their calls under a 'calls' key",
                file=file,
                path="calls",
            )
        document = document["calls"]
        where = "calls"
    else:
        where = "<document>"

    if not isinstance(document, list):
        raise CallLoadError(
            code="E_INVALID_TOP_LEVEL",
            message=f"expected a list of calls, got {type(document).__name__}",
            file=file,
            path=where,
        )
    return document
