"""
Recover a JSON value from free-form model output.

Models wrap JSON in markdown fences or surround it with prose. extract_json
peels that away without ever raising; decoding failures are left to callers,
which map them onto their own Malformed* errors.
"""

import json
from typing import Any

FENCE = "```"

_OPENERS = "{["
_CLOSERS = "}]"


def strip_code_fences(text: str) -> str:
    """
    Remove a leading fence line and a trailing fence marker.

    Example:
        >>> strip_code_fences('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    s = text.strip()
    if s.startswith(FENCE):
        newline = s.find("\n")
        s = s[newline + 1:] if newline != -1 else ""
    if s.endswith(FENCE):
        s = s[:-len(FENCE)]
    return s.strip()


def extract_json(text: str) -> str:
    """
    Return the balanced top-level JSON object or array found in ``text``.

    The first ``{`` is preferred over the first ``[``. Depth is tracked over
    both bracket kinds and the candidate ends at the last position where depth
    returns to zero, so trailing prose is cut away. When there is no opening
    bracket, or the brackets never balance, the fence-stripped text is
    returned unchanged.

    Example:
        >>> extract_json('```json\\n{"a":1}\\n```')
        '{"a":1}'
        >>> extract_json('Sure! ["x", "y"] Hope this helps.')
        '["x", "y"]'
    """
    s = strip_code_fences(text or "")

    start = s.find("{")
    if start == -1:
        start = s.find("[")
    if start == -1:
        return s

    depth = 0
    end = -1
    for index in range(start, len(s)):
        char = s[index]
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                end = index

    if end == -1:
        return s
    return s[start:end + 1].strip()


def decode_json(text: str) -> Any:
    """Extract and decode JSON from model output. Raises ValueError on failure."""
    return json.loads(extract_json(text))
