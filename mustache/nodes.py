"""
Tag tree produced by the parser.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

from .context import Options

DEFAULT_DELIMITERS: Tuple[str, str] = ("{{", "}}")


@dataclass
class TextNode:
    text: str


@dataclass
class VarNode:
    name: str


@dataclass
class RawVarNode:
    name: str


@dataclass
class SectionNode:
    name: str
    children: List["Token"]
    # Verbatim template text between the open and close tags, handed to lambdas.
    source: str = ""
    delimiters: Tuple[str, str] = DEFAULT_DELIMITERS


@dataclass
class InvertedNode:
    name: str
    children: List["Token"]


@dataclass
class PartialNode:
    name: str


Token = Union[TextNode, VarNode, RawVarNode, SectionNode, InvertedNode, PartialNode]


@dataclass
class Template:
    """A parsed template plus the parsed partials it references.

    ``partials`` is filled in by the loader, once per name. Rendering only
    reads it, so a fully loaded Template can be shared between threads.
    """
    tokens: List[Token]
    partials: Dict[str, List[Token]] = field(default_factory=dict)
    options: Options = field(default_factory=Options)

    def missing_partials(self, names: List[str]) -> List[str]:
        return [n for n in names if n not in self.partials]
