from __future__ import annotations

"""Command-line interface for jsdebug-source.

A thin developer tool over the library: pretty-print minified files with a
reversed source map, inspect `sourceMappingURL` directives, try the snippet
rewrites, verify content hashes and resolve breakpoint positions.
"""

import argparse
import logging
import sys
from pathlib import Path

from .errors import SourceMapDecodeError
from .integrity import check_content_hash
from .pretty import pretty_print_as_source_map
from .resolve import get_optimal_compiled_position
from .rewrite import rewrite_top_level_await, wrap_object_literal
from .source_mapping_url import parse_source_mapping_url
from .sourcemap import SourceMap
from .syntax import get_syntax_error_in
from .types import SourceMapMetadata, UiLocation


def build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        description="Source rewriting and position mapping for JavaScript debugging",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    jsdebug-source pretty app.min.js -o app.pretty.js --map app.pretty.js.map
    jsdebug-source sourcemap-url dist/app.js
    jsdebug-source rewrite 'let x = await fetch(url); x'
    jsdebug-source check-hash src/app.js --hash 3f2a...
    jsdebug-source resolve dist/app.js.map src/app.ts 12 5
        """,
    )


def _read_code(value: str | None) -> str:
    return value if value is not None else sys.stdin.read()


def _cmd_pretty(args: argparse.Namespace) -> int:
    path = Path(args.file)
    minified = path.read_text(encoding="utf-8")
    name = args.name or f"{path.name}-pretty.js"

    source_map = pretty_print_as_source_map(name, minified, str(path), args.url or "")
    if source_map is None:
        print(f"Error: {path} is not valid JavaScript", file=sys.stderr)
        return 1

    pretty = source_map.source_content_for(name) or ""
    if args.output:
        Path(args.output).write_text(pretty, encoding="utf-8")
    else:
        sys.stdout.write(pretty)

    if args.map:
        Path(args.map).write_text(source_map.to_json(), encoding="utf-8")
    return 0


def _cmd_sourcemap_url(args: argparse.Namespace) -> int:
    url = parse_source_mapping_url(Path(args.file).read_text(encoding="utf-8", errors="replace"))
    if url is None:
        print("No sourceMappingURL found", file=sys.stderr)
        return 1
    print(url)
    return 0


def _cmd_rewrite(args: argparse.Namespace) -> int:
    code = _read_code(args.code)
    print(rewrite_top_level_await(code) or code)
    return 0


def _cmd_wrap(args: argparse.Namespace) -> int:
    print(wrap_object_literal(_read_code(args.code)))
    return 0


def _cmd_syntax_check(args: argparse.Namespace) -> int:
    error = get_syntax_error_in(Path(args.file).read_text(encoding="utf-8"))
    if error is None:
        return 0
    print(f"{args.file}:{error.line}:{error.column}: {error.message}", file=sys.stderr)
    return 1


def _cmd_check_hash(args: argparse.Namespace) -> int:
    path = check_content_hash(args.path, args.hash)
    if path is None:
        print(f"Untrusted: {args.path}", file=sys.stderr)
        return 1
    print(path)
    return 0


def _cmd_resolve(args: argparse.Namespace) -> int:
    map_path = Path(args.map)
    metadata = SourceMapMetadata(source_map_url=map_path.resolve().as_uri(), compiled_path=args.compiled or "")
    try:
        source_map = SourceMap.from_json(map_path.read_text(encoding="utf-8"), metadata)
    except SourceMapDecodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    position = get_optimal_compiled_position(args.source, UiLocation(args.line, args.column), source_map)
    if position.is_null:
        print("No generated position", file=sys.stderr)
        return 1
    # Report columns 1-based, like the input.
    print(f"{position.line}:{position.column + 1}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("pretty", help="Pretty-print minified JS with a reversed source map")
    p.add_argument("file", help="Minified JavaScript file")
    p.add_argument("-o", "--output", help="Write pretty text here instead of stdout")
    p.add_argument("--map", help="Write the source map JSON here")
    p.add_argument("--name", help="Source name for the pretty text")
    p.add_argument("--url", help="Source map URL to tag the map with")
    p.set_defaults(func=_cmd_pretty)

    p = sub.add_parser("sourcemap-url", help="Print the sourceMappingURL of a file")
    p.add_argument("file")
    p.set_defaults(func=_cmd_sourcemap_url)

    p = sub.add_parser("rewrite", help="Rewrite a snippet for top-level await")
    p.add_argument("code", nargs="?", help="Snippet (stdin when omitted)")
    p.set_defaults(func=_cmd_rewrite)

    p = sub.add_parser("wrap", help="Parenthesize object-literal snippets")
    p.add_argument("code", nargs="?", help="Snippet (stdin when omitted)")
    p.set_defaults(func=_cmd_wrap)

    p = sub.add_parser("syntax-check", help="Report the first syntax error in a file")
    p.add_argument("file")
    p.set_defaults(func=_cmd_syntax_check)

    p = sub.add_parser("check-hash", help="Check whether a file can back a mapping")
    p.add_argument("path")
    p.add_argument("--hash", help="Expected content hash")
    p.set_defaults(func=_cmd_check_hash)

    p = sub.add_parser("resolve", help="Resolve a UI location to a generated position")
    p.add_argument("map", help="Source map file")
    p.add_argument("source", help="Source name as listed in the map")
    p.add_argument("line", type=int, help="1-based line")
    p.add_argument("column", type=int, help="1-based column")
    p.add_argument("--compiled", help="Compiled file the map belongs to")
    p.set_defaults(func=_cmd_resolve)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(name)s: %(message)s")

    try:
        return args.func(args)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
