"""
Text reporting helpers shared by the filter, label and test diffs.
"""

import difflib
import json
from typing import Any


def unified_diff(
    old: list[str],
    new: list[str],
    fromfile: str = "Current",
    tofile: str = "TO BE APPLIED",
    context: int = 3,
) -> str:
    """
    Return the unified diff between two lists of lines.

    Lines are expected to keep their line terminator. An empty string is
    returned when the two lists are equal.
    """
    return "".join(difflib.unified_diff(old, new, fromfile=fromfile, tofile=tofile, n=context))


def prettify(obj: Any) -> str:
    """Render a JSON-friendly object with stable key order and indentation."""
    return json.dumps(obj, sort_keys=True, indent=2, ensure_ascii=False) + "\n"
