"""Command line entry point: ``python -m expohtml TEMPLATE``."""

import argparse
import logging
import sys
from pathlib import Path

from .compiler import Template
from .errors import TemplateError
from .options import CompileOptions
from .serialize import to_test_format


def build_parser():
    parser = argparse.ArgumentParser(prog="expohtml", description="Compile a markup template to PHP")
    parser.add_argument("template", help="Template file to compile")
    parser.add_argument("--output", "-o", default=None, help="Write the compiled PHP here instead of stdout")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on unterminated tags, comments and raw-code blocks",
    )
    parser.add_argument("--no-assets", action="store_true", help="Skip <load> asset injection")
    parser.add_argument("--tokens", action="store_true", help="Print the token list and exit")
    parser.add_argument("--tree", action="store_true", help="Print the template tree and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging and diagnostics")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    opts = CompileOptions(
        strict=args.strict,
        collect_errors=args.verbose,
        inject_assets=not args.no_assets,
    )

    path = Path(args.template)
    try:
        source = path.read_text(encoding=opts.encoding)
        template = Template(source, opts=opts)
    except FileNotFoundError:
        print(f"error: template file not found: {path}", file=sys.stderr)
        return 1
    except TemplateError as exc:
        print(f"error: [{exc.code}] {exc.message}", file=sys.stderr)
        return 1

    for error in template.errors:
        print(f"warning: {error}", file=sys.stderr)

    if args.tokens:
        for token in template.tokens:
            print(repr(token))
        return 0
    if args.tree:
        print(to_test_format(template.root))
        return 0

    if args.output:
        Path(args.output).write_text(template.output, encoding=opts.encoding)
    else:
        sys.stdout.write(template.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
