#!/usr/bin/env python3
"""
CLI for the scenelang interpreter.

Usage:
    python -m scenelang run FILE [--format json|yaml] [--config PATH]
    python -m scenelang check FILE
    python -m scenelang tokens FILE
    python -m scenelang ast FILE
    python -m scenelang config [--config PATH] [--init]

FILE may be '-' to read from standard input.

Examples:
    # Interpret a scene and print the output document
    python -m scenelang run examples/tiles.scene

    # Same, as YAML
    python -m scenelang run examples/tiles.scene --format yaml

    # Syntax check only
    python -m scenelang check examples/tiles.scene

    # Write the default options to ./scenelang.yaml
    python -m scenelang config --init
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple


def read_source(file_arg: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(source, None)`` or ``(None, error message)``."""
    if file_arg == '-':
        return sys.stdin.read(), None
    source_path = Path(file_arg)
    if not source_path.exists():
        return None, f"File not found: {source_path}"
    return source_path.read_text(encoding='utf-8'), None


def _load_options(args):
    from .config import load_options

    options = load_options(args.config)
    if getattr(args, 'format', None):
        options.output_format = args.format
    return options


def _front_end(source: str):
    """Tokenize and parse, printing the first diagnostic to stderr."""
    from . import tokenize, parse

    tokens, error = tokenize(source)
    if error is None:
        program, error = parse(tokens)
    if error is not None:
        print(error.with_source(source).format(), file=sys.stderr)
        return None
    return program


def cmd_run(args):
    """Interpret a scenelang file and print the output document."""
    from . import interpret
    from .scene import dump_document

    try:
        options = _load_options(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    source, problem = read_source(args.file)
    if problem:
        print(f"Error: {problem}", file=sys.stderr)
        return 1

    output = interpret(source)
    if not output.success:
        print(output.error.format(options.show_source), file=sys.stderr)
        return 1

    document = output.to_json(include_log=options.include_log)
    print(dump_document(document, options.output_format, options.indent))
    return 0


def cmd_check(args):
    """Check a scenelang file for lexical and syntax errors."""
    source, problem = read_source(args.file)
    if problem:
        print(f"Error: {problem}", file=sys.stderr)
        return 1

    program = _front_end(source)
    if program is None:
        return 1

    name = 'stdin' if args.file == '-' else Path(args.file).name
    print(f"OK: {name} - {len(program.statements)} statement(s), no errors")
    return 0


def cmd_tokens(args):
    """Print the token stream of a scenelang file."""
    from . import tokenize

    source, problem = read_source(args.file)
    if problem:
        print(f"Error: {problem}", file=sys.stderr)
        return 1

    tokens, error = tokenize(source)
    if error is not None:
        print(error.with_source(source).format(), file=sys.stderr)
        return 1

    for token in tokens:
        print(f"{token.location}\t{token}")
    return 0


def cmd_ast(args):
    """Print the syntax tree of a scenelang file."""
    from .ast import format_ast

    source, problem = read_source(args.file)
    if problem:
        print(f"Error: {problem}", file=sys.stderr)
        return 1

    program = _front_end(source)
    if program is None:
        return 1

    print(format_ast(program))
    return 0


def cmd_config(args):
    """Show the effective options, or write the defaults."""
    from .config import CONFIG_FILENAME, InterpreterOptions, save_options
    from .scene import dump_document

    if args.init:
        target = Path(args.config or CONFIG_FILENAME)
        if target.exists():
            print(f"Error: {target} already exists", file=sys.stderr)
            return 1
        save_options(InterpreterOptions(), target)
        print(f"Wrote default options to: {target}")
        return 0

    try:
        options = _load_options(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(dump_document(options.to_dict(), 'yaml'), end='')
    return 0


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        prog='python -m scenelang',
        description='scenelang interpreter',
    )

    subparsers = parser.add_subparsers(dest='action', required=True)

    # run command
    run_parser = subparsers.add_parser('run', help='Interpret a scenelang file')
    run_parser.add_argument('file', help="scenelang source file ('-' for stdin)")
    run_parser.add_argument('--format', choices=['json', 'yaml'],
                            help='Output document format (overrides config)')
    run_parser.add_argument('-c', '--config', metavar='PATH',
                            help='YAML options file (default: ./scenelang.yaml)')

    # check command
    check_parser = subparsers.add_parser('check', help='Check scenelang file for errors')
    check_parser.add_argument('file', help="scenelang source file ('-' for stdin)")

    # tokens command
    tokens_parser = subparsers.add_parser('tokens', help='Print the token stream')
    tokens_parser.add_argument('file', help="scenelang source file ('-' for stdin)")

    # ast command
    ast_parser = subparsers.add_parser('ast', help='Print the syntax tree')
    ast_parser.add_argument('file', help="scenelang source file ('-' for stdin)")

    # config command
    config_parser = subparsers.add_parser('config', help='Show or create the options file')
    config_parser.add_argument('-c', '--config', metavar='PATH',
                               help='YAML options file (default: ./scenelang.yaml)')
    config_parser.add_argument('--init', action='store_true',
                               help='Write the default options instead of showing them')

    args = parser.parse_args(argv)

    if args.action == 'run':
        return cmd_run(args)
    elif args.action == 'check':
        return cmd_check(args)
    elif args.action == 'tokens':
        return cmd_tokens(args)
    elif args.action == 'ast':
        return cmd_ast(args)
    elif args.action == 'config':
        return cmd_config(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
