"""
Mustache templates: parse once into a tag tree, render many times.

>>> render("Hello {{name}}!", {"name": "World"})
'Hello World!'
"""
from .context import KeyType, Options
from .errors import MalformedTemplate, MustacheError, TemplateNotFound
from .loader import DictLoader, FileSystemLoader, parse_file, parse_text, render
from .nodes import Template
from .parser import ParserState, parse
from .renderer import Renderer, render_template

__all__ = [
    "DictLoader",
    "FileSystemLoader",
    "KeyType",
    "MalformedTemplate",
    "MustacheError",
    "Options",
    "ParserState",
    "Renderer",
    "Template",
    "TemplateNotFound",
    "parse",
    "parse_file",
    "parse_text",
    "render",
    "render_template",
]
