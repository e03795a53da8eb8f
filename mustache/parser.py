"""
Mustache parser.

Turns template text into a tree of tokens (see ``nodes``). The text is
scanned for the current start delimiter; each tag is classified by its first
character, sections are parsed recursively until their close tag, and
structural tags that sit alone on a line have that line elided.

Supported tags:
- Variables: {{name}} (escaped), {{{name}}} and {{&name}} (unescaped)
- Sections: {{#name}} ... {{/name}}, inverted: {{^name}} ... {{/name}}
- Comments: {{! comment }}
- Partials: {{> name}}
- Delimiter changes: {{=<% %>=}}
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from .errors import MalformedTemplate
from .nodes import (
    DEFAULT_DELIMITERS,
    InvertedNode,
    PartialNode,
    RawVarNode,
    SectionNode,
    TextNode,
    Token,
    VarNode,
)

logger = logging.getLogger(__name__)

# Tags that may stand alone on a line and take the line with them.
_STANDALONE_TYPES = {"#", "^", "/", "!", ">", "="}


@dataclass
class ParserState:
    dirname: str = ""
    start: str = DEFAULT_DELIMITERS[0]
    stop: str = DEFAULT_DELIMITERS[1]
    # Partial names referenced so far; the loader resolves them.
    partials: List[str] = field(default_factory=list)


@dataclass
class _EndTag:
    name: str
    start: int


# -----------------------------
# Tag classification
# -----------------------------
def _split_tag(body: str) -> Tuple[str, str]:
    head = body.lstrip(" ")
    if not head:
        return ("", "")
    t = head[0]
    if t in "&{":
        return ("&", head[1:].strip())
    if t in "#^/!>":
        return (t, head[1:].strip())
    if t == "=":
        return ("=", head[1:])
    return ("", head.strip())


def _parse_delimiters(body: str) -> Tuple[str, str]:
    tag = body.rstrip(" ")
    if not tag.endswith("="):
        raise MalformedTemplate("unsupported_tag", "=" + body)
    inner = tag[:-1]
    if "=" in inner:
        raise MalformedTemplate("delimiters_may_not_contain_equals", inner)
    parts = inner.split()
    if len(parts) != 2:
        raise MalformedTemplate("delimiters_may_not_contain_whitespaces", inner)
    return parts[0], parts[1]


# -----------------------------
# Standalone lines
# -----------------------------
def _is_blank(s: str) -> bool:
    return all(c in " \t" for c in s)


def _find_line_bounds(tmpl: str, start: int, end: int) -> Tuple[int, int]:
    line_start = tmpl.rfind("\n", 0, start) + 1
    line_end = tmpl.find("\n", end)
    if line_end == -1:
        line_end = len(tmpl)
    return line_start, line_end


def _standalone_trim(tmpl: str, start: int, end: int, tag_type: str) -> Optional[Tuple[int, int]]:
    """Return the span to drop if the tag at ``start:end`` is alone on its line.

    The span runs from the start of the line to just past its newline (or to
    the end of the text).
    """
    if tag_type not in _STANDALONE_TYPES:
        return None
    line_start, line_end = _find_line_bounds(tmpl, start, end)
    left = tmpl[line_start:start]
    right = tmpl[end:line_end]
    if right.endswith("\r"):
        right = right[:-1]
    if not (_is_blank(left) and _is_blank(right)):
        return None
    trim_end = line_end + 1 if line_end < len(tmpl) else line_end
    return line_start, trim_end


# -----------------------------
# Parser
# -----------------------------
class _Parser:
    def __init__(self, text: str, state: ParserState):
        self.text = text
        self.state = state
        self.pos = 0

    def _read_tag(self, tag_start: int) -> Tuple[str, int]:
        """Split off the tag body; returns (body, offset just past the tag)."""
        body_start = tag_start + len(self.state.start)
        stop = self.state.stop
        if self.text.startswith("{", body_start):
            stop = "}" + stop
        body_end = self.text.find(stop, body_start)
        if body_end == -1:
            raise MalformedTemplate("unclosed_tag", self.text[tag_start:tag_start + 40])
        return self.text[body_start:body_end], body_end + len(stop)

    @staticmethod
    def _add_text(tokens: List[Token], text: str) -> None:
        if not text:
            return
        if tokens and isinstance(tokens[-1], TextNode):
            tokens[-1].text += text
        else:
            tokens.append(TextNode(text))

    def parse_block(self, section: Optional[str]) -> Tuple[List[Token], Optional[_EndTag]]:
        """Parse until end of input, or until a close tag when inside a section."""
        tokens: List[Token] = []
        text = self.text
        lit_start = self.pos
        while True:
            tag_start = text.find(self.state.start, self.pos)
            if tag_start == -1:
                self._add_text(tokens, text[lit_start:])
                self.pos = len(text)
                if section is not None:
                    raise MalformedTemplate("section_end_tag_not_found", "/" + section)
                return tokens, None

            body, tag_end = self._read_tag(tag_start)
            tag_type, name = _split_tag(body)

            if tag_type in ("", "&"):
                self._add_text(tokens, text[lit_start:tag_start])
                tokens.append(VarNode(name) if tag_type == "" else RawVarNode(name))
                self.pos = lit_start = tag_end
                continue

            trim = _standalone_trim(text, tag_start, tag_end, tag_type)
            if trim is not None:
                pre_end, post_start = max(trim[0], lit_start), trim[1]
            else:
                pre_end, post_start = tag_start, tag_end
            self._add_text(tokens, text[lit_start:pre_end])
            self.pos = post_start

            if tag_type == "/":
                if section is None:
                    raise MalformedTemplate("section_is_incorrect", name)
                return tokens, _EndTag(name, tag_start)
            elif tag_type in "#^":
                delimiters = (self.state.start, self.state.stop)
                children, end = self.parse_block(name)
                if end.name != name:
                    raise MalformedTemplate("section_is_incorrect", end.name)
                if tag_type == "#":
                    tokens.append(SectionNode(name, children, text[tag_end:end.start], delimiters))
                else:
                    tokens.append(InvertedNode(name, children))
            elif tag_type == ">":
                if name not in self.state.partials:
                    self.state.partials.append(name)
                tokens.append(PartialNode(name))
            elif tag_type == "=":
                self.state.start, self.state.stop = _parse_delimiters(name)
                logger.debug("delimiters changed to %r %r", self.state.start, self.state.stop)
            # "!" is a comment: nothing to emit.
            lit_start = self.pos


def parse(text: str, state: Optional[ParserState] = None) -> Tuple[List[Token], ParserState]:
    """Parse ``text`` into tokens.

    Returns the tokens and the final parser state, whose ``partials`` lists
    every partial name referenced so far (sorted, without duplicates).
    Delimiters in the returned state are reset to the defaults.

    Raises MalformedTemplate on unclosed tags, mismatched or missing section
    close tags and bad delimiter changes.
    """
    state = ParserState() if state is None else replace(state, partials=list(state.partials))
    tokens, _ = _Parser(text, state).parse_block(None)
    state.start, state.stop = DEFAULT_DELIMITERS
    state.partials = sorted(set(state.partials))
    return tokens, state
