"""
Render a Mustache template file with JSON data.

Usage:
  mustache-render --template page.html --data data.json --output page.out.html

Partials ({{> name}}) are read from ``name.mustache`` next to the template.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .context import KeyType, Options
from .errors import MustacheError
from .loader import parse_file
from .renderer import render_template

logger = logging.getLogger(__name__)


def _load_data(path: Optional[str], key_type: KeyType) -> Any:
    if path is None:
        return {}
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if key_type is KeyType.BYTES:
        data = _bytes_keys(data)
    return data


def _bytes_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {k.encode("utf-8"): _bytes_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_bytes_keys(v) for v in value]
    return value


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="mustache-render")
    ap.add_argument("--template", required=True, help="Path to the Mustache template")
    ap.add_argument("--data", default=None, help="Path to a JSON file with the data (default: {})")
    ap.add_argument("--output", default=None, help="Path to write the result (default: stdout)")
    ap.add_argument("--key-type", choices=[k.value for k in KeyType], default=KeyType.STRING.value,
                    help="Type of the keys in the data")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log template and partial loading")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    options = Options(key_type=KeyType(args.key_type))
    try:
        data = _load_data(args.data, options.key_type)
        template = parse_file(args.template, options=options)
        out = render_template(template, data)
    except (MustacheError, OSError, ValueError, TypeError) as exc:
        print(f"mustache-render: {exc}", file=sys.stderr)
        return 1

    if args.output:
        Path(args.output).write_text(out, encoding="utf-8")
        logger.info("wrote %s", args.output)
    else:
        sys.stdout.write(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
