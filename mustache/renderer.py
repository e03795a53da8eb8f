"""
Renders a parsed Template against data.

Missing keys and values of the wrong shape render as empty text; nothing in
here raises for data problems except a root value that is not a mapping.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .context import (
    ContextStack,
    Options,
    html_escape,
    is_falsy,
    is_lambda,
    is_mapping,
    is_sequence,
    to_text,
)
from .nodes import (
    InvertedNode,
    PartialNode,
    RawVarNode,
    SectionNode,
    Template,
    TextNode,
    Token,
    VarNode,
)
from .parser import ParserState, parse

logger = logging.getLogger(__name__)

Partials = Dict[str, List[Token]]


class Renderer:
    def __init__(self, options: Optional[Options] = None):
        self.options = options

    def render(self, template: Template, data: Any) -> str:
        if not is_mapping(data):
            raise TypeError(f"data must be a mapping, not {type(data).__name__}")
        options = self.options or template.options
        return self._render_tokens(template.tokens, ContextStack(data), template.partials, options)

    def _render_tokens(self, tokens: List[Token], ctx: ContextStack,
                       partials: Partials, options: Options) -> str:
        out: List[str] = []
        for tok in tokens:
            if isinstance(tok, TextNode):
                out.append(tok.text)
            elif isinstance(tok, VarNode):
                out.append(html_escape(to_text(ctx.resolve(tok.name, options))))
            elif isinstance(tok, RawVarNode):
                out.append(to_text(ctx.resolve(tok.name, options)))
            elif isinstance(tok, SectionNode):
                out.append(self._render_section(tok, ctx, partials, options))
            elif isinstance(tok, InvertedNode):
                if is_falsy(ctx.resolve(tok.name, options)):
                    out.append(self._render_tokens(tok.children, ctx, partials, options))
            elif isinstance(tok, PartialNode):
                partial = partials.get(tok.name)
                if partial is None:
                    logger.debug("partial %r is not loaded, rendering nothing", tok.name)
                else:
                    out.append(self._render_tokens(partial, ctx, partials, options))
        return "".join(out)

    def _render_section(self, tok: SectionNode, ctx: ContextStack,
                        partials: Partials, options: Options) -> str:
        val = ctx.resolve(tok.name, options)
        if is_lambda(val):
            return to_text(val(tok.source, self._lambda_render(tok, ctx, partials, options)))
        if is_mapping(val):
            return self._render_pushed(tok.children, val, ctx, partials, options)
        if is_falsy(val):
            return ""
        if is_sequence(val):
            return "".join(
                self._render_pushed(tok.children, item, ctx, partials, options) for item in val
            )
        # Truthy scalar: render once in the current context.
        return self._render_tokens(tok.children, ctx, partials, options)

    def _render_pushed(self, tokens: List[Token], value: Any, ctx: ContextStack,
                       partials: Partials, options: Options) -> str:
        ctx.push(value)
        try:
            return self._render_tokens(tokens, ctx, partials, options)
        finally:
            ctx.pop()

    def _lambda_render(self, tok: SectionNode, ctx: ContextStack,
                       partials: Partials, options: Options) -> Callable[[str], str]:
        start, stop = tok.delimiters
        data = ctx.top

        def render_text(text: str) -> str:
            tokens, _ = parse(text, ParserState(start=start, stop=stop))
            return self._render_tokens(tokens, ContextStack(data), partials, options)

        return render_text


def render_template(template: Template, data: Any, options: Optional[Options] = None) -> str:
    """Embed ``data`` in a parsed template.

    >>> from mustache import parse_text
    >>> render_template(parse_text("{{name}}"), {"name": "Alice"})
    'Alice'
    """
    return Renderer(options).render(template, data)
