# Fichier : app/utils/json_utils.py

from __future__ import annotations
import json
import re
from typing import Any, Optional

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?")


def strip_code_fences(raw: str) -> str:
    """Remove every ```/```json marker, wherever the provider put them."""
    return _FENCE_RE.sub("", raw).strip()


def extract_balanced_json(text: str) -> Optional[str]:
    """
    Return the first balanced JSON object/array embedded in ``text``.

    Braces inside string literals are ignored. Returns None if no complete
    block is found.
    """
    start = next((i for i, ch in enumerate(text) if ch in "{["), None)
    if start is None:
        return None

    opener = text[start]
    closer = "}" if opener == "{" else "]"
    depth = 0
    in_string = False
    escape = False

    for i in range(start, len(text)):
        c = text[i]
        if escape:
            escape = False
        elif in_string:
            if c == "\\":
                escape = True
            elif c == '"':
                in_string = False
        elif c == '"':
            in_string = True
        elif c == opener:
            depth += 1
        elif c == closer:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def safe_json_loads(raw: Optional[str]) -> Any:
    """
    Parse a provider response that should contain a single JSON payload.

    The payload may be wrapped in prose or code fences. Tries, in order:
      1) json.loads on the fence-stripped text
      2) json.loads on the first balanced object/array found in it
    Raises ValueError when nothing parses.
    """
    if raw is None:
        raise ValueError("safe_json_loads: input is None")

    text = strip_code_fences(str(raw))
    if not text:
        raise ValueError("safe_json_loads: empty payload")

    try:
        return json.loads(text)
    except json.JSONDecodeError as first_exc:
        candidate = extract_balanced_json(text)
        if candidate is None:
            raise ValueError(f"safe_json_loads: no JSON payload found ({first_exc})") from first_exc
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as exc:
            raise ValueError(f"safe_json_loads: malformed JSON payload ({exc})") from exc


def loads_or_default(raw: Optional[str], default: Any, expected_type: type) -> Any:
    """Like :func:`safe_json_loads` but returns ``default`` on failure or type mismatch."""
    try:
        data = safe_json_loads(raw)
    except ValueError:
        return default
    return data if isinstance(data, expected_type) else default
