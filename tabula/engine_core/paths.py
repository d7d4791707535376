"""
Path navigation over plain value trees.

Paths are dot-separated: "matchResult.result", "cards.0.cardId".
Integer segments index lists. "" or "$" addresses the whole value.
"""

from __future__ import annotations
from typing import Any

WHOLE_VALUE = ("", "$")


class PathError(LookupError):
    """A path segment does not exist in the value being navigated."""

    def __init__(self, path: str, segment: str, reason: str):
        super().__init__(f"{path}: {reason} at '{segment}'")
        self.path = path
        self.segment = segment
        self.reason = reason


def split_path(path: str) -> list[str]:
    if path in WHOLE_VALUE:
        return []
    return path.split(".")


def lookup(value: Any, path: str) -> Any:
    """
    Resolve a path in a value tree.

    Raises PathError if any segment is missing. A present key holding None
    resolves to None.
    """
    obj = value
    for part in split_path(path):
        if isinstance(obj, dict):
            if part not in obj:
                raise PathError(path, part, "missing key")
            obj = obj[part]
        elif isinstance(obj, (list, tuple)):
            try:
                index = int(part)
            except ValueError:
                raise PathError(path, part, "non-integer index into a list") from None
            if not -len(obj) <= index < len(obj):
                raise PathError(path, part, "index out of range")
            obj = obj[index]
        else:
            raise PathError(path, part, f"cannot descend into {type(obj).__name__}")
    return obj
