"""
Data access for the renderer.

The renderer never assumes concrete container types. It asks this module
whether a value is a mapping, a sequence or a lambda, looks keys up through
``ContextStack.resolve`` and turns values into text with ``to_text``.
"""
from __future__ import annotations

import enum
import inspect
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Hashable, List


class _Missing:
    """Sentinel for a key that is not present in the data."""

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


class KeyType(enum.Enum):
    STRING = "string"
    BYTES = "bytes"


@dataclass(frozen=True)
class Options:
    # How keys in the data are typed; template keys are always text.
    key_type: KeyType = KeyType.STRING


# -----------------------------
# Escaping / conversion
# -----------------------------
def html_escape(s: str) -> str:
    # Apostrophes are left alone.
    return (
        s.replace("&", "&amp;")
         .replace("<", "&lt;")
         .replace(">", "&gt;")
         .replace('"', "&quot;")
    )


def to_text(value: Any) -> str:
    if value is MISSING or value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)


# -----------------------------
# Capabilities
# -----------------------------
def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_lambda(value: Any) -> bool:
    """A lambda takes (section source, render callback)."""
    if not callable(value) or is_mapping(value):
        return False
    try:
        inspect.signature(value).bind(None, None)
    except (TypeError, ValueError):
        return False
    return True


def is_falsy(value: Any) -> bool:
    """False, None, missing, empty text or an empty sequence.

    Sections skip their children on these values; inverted sections render
    them exactly then.
    """
    if value is MISSING or value is None or value is False:
        return True
    if isinstance(value, (str, bytes, bytearray)) and not value:
        return True
    return is_sequence(value) and len(value) == 0


def convert_key(key: str, options: Options) -> Hashable:
    if options.key_type is KeyType.BYTES:
        return key.encode("utf-8")
    return key


def lookup(data: Any, key: Hashable) -> Any:
    """Single level lookup; anything that is not a mapping has no keys."""
    if not is_mapping(data):
        return MISSING
    try:
        return data.get(key, MISSING)
    except TypeError:
        return MISSING


# -----------------------------
# Context stack
# -----------------------------
class ContextStack:
    """Data values entered by sections, innermost last.

    Lookups only consult the innermost value. A dotted name such as
    ``a.b.c`` resolves ``a`` there and each following segment inside the
    previous result; the first missing segment ends the lookup with MISSING
    and outer contexts are not searched.
    """

    def __init__(self, data: Any):
        self._stack: List[Any] = [data]

    @property
    def top(self) -> Any:
        return self._stack[-1] if self._stack else MISSING

    def push(self, value: Any) -> None:
        self._stack.append(value)

    def pop(self) -> Any:
        return self._stack.pop()

    def resolve(self, name: str, options: Options) -> Any:
        if name == ".":
            return self.top
        current = self.top
        for part in name.split("."):
            current = lookup(current, convert_key(part, options))
            if current is MISSING:
                return MISSING
        return current

    def __len__(self) -> int:
        return len(self._stack)
