"""
Loading templates and their partials.

``{{> name}}`` refers to the file ``name.mustache`` next to the template
being loaded (the current directory for templates given as text). Every
partial is read and parsed once per Template, including partials referenced
from other partials.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .context import Options
from .errors import MalformedTemplate, TemplateNotFound
from .nodes import PartialNode, Template
from .parser import ParserState, parse
from .renderer import render_template

logger = logging.getLogger(__name__)

TEMPLATE_EXT = ".mustache"

PathLike = Union[str, Path]


class FileSystemLoader:
    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def load(self, path: PathLike) -> str:
        try:
            return Path(path).read_text(encoding=self.encoding)
        except OSError as exc:
            raise TemplateNotFound(str(path)) from exc
        except UnicodeDecodeError as exc:
            raise MalformedTemplate("undecodable_template", str(path)) from exc


class DictLoader:
    """Serves templates from memory, keyed by their (posix) path."""

    def __init__(self, templates: Mapping[str, str]):
        self.templates = dict(templates)

    def load(self, path: PathLike) -> str:
        key = Path(path).as_posix()
        if key not in self.templates:
            raise TemplateNotFound(key)
        return self.templates[key]


def _load_partials(template: Template, state: ParserState, loader: Any) -> Template:
    pending = template.missing_partials(state.partials)
    while pending:
        name = pending.pop()
        if name in template.partials:
            continue
        path = Path(state.dirname) / f"{name}{TEMPLATE_EXT}"
        logger.debug("loading partial %r from %s", name, path)
        tokens, sub_state = parse(loader.load(path), ParserState(dirname=state.dirname))
        template.partials[name] = tokens
        pending.extend(template.missing_partials(sub_state.partials))
    return template


def parse_text(text: str, loader: Any = None, dirname: str = "",
               options: Optional[Options] = None) -> Template:
    """Parse template text and load the partials it references."""
    tokens, state = parse(text, ParserState(dirname=dirname))
    template = Template(tokens, options=options or Options())
    return _load_partials(template, state, loader or FileSystemLoader())


def parse_file(path: PathLike, loader: Any = None, options: Optional[Options] = None) -> Template:
    """Parse a template file.

    A ``.mustache`` file is treated as a partial of itself: the result
    renders that partial, and partials are looked up next to it. Other files
    are read and parsed directly.
    """
    path = Path(path)
    loader = loader or FileSystemLoader()
    dirname = str(path.parent)
    if path.suffix == TEMPLATE_EXT:
        name = path.stem
        template = Template([PartialNode(name)], options=options or Options())
        state = ParserState(dirname=dirname, partials=[name])
    else:
        logger.debug("loading template %s", path)
        tokens, state = parse(loader.load(path), ParserState(dirname=dirname))
        template = Template(tokens, options=options or Options())
    return _load_partials(template, state, loader)


def render(text: str, data: Any, options: Optional[Options] = None, loader: Any = None) -> str:
    """Parse ``text`` and render it with ``data`` in one go.

    >>> render("{{text}} {{{text}}}", {"text": "<>&"})
    '&lt;&gt;&amp; <>&'
    """
    return render_template(parse_text(text, loader=loader), data, options)
