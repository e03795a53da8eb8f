"""
Exceptions raised while parsing and loading templates.

Rendering itself does not raise for missing keys or odd data; those degrade
to empty output. Only malformed templates and missing files are fatal.
"""
from __future__ import annotations

from typing import Optional


class MustacheError(Exception):
    pass


class MalformedTemplate(MustacheError):
    """The template text could not be parsed.

    ``reason`` is a short identifier (e.g. ``section_is_incorrect``) and
    ``tag`` the offending tag name or body when there is one.
    """

    def __init__(self, reason: str, tag: Optional[str] = None):
        self.reason = reason
        self.tag = tag
        msg = reason if tag is None else f"{reason}: {tag!r}"
        super().__init__(msg)


class TemplateNotFound(MustacheError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"template not found: {path}")
