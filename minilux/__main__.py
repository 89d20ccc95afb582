"""CLI entry point for the Minilux interpreter.

Usage:
    python -m minilux [-v|-vv|-vvv] [--recursion-limit N] <script.mi>
    python -m minilux [-v...] --emit-ast <script.mi>
    python -m minilux [-v...] --ast <ast_json_file>
    python -m minilux                      (interactive console)

Options:
  -v                 Increase debug verbosity (can be repeated)
  --emit-ast         Parse the given script and emit an AST JSON file
  --ast              Execute a previously emitted AST JSON file
  --recursion-limit  Host recursion limit for deeply recursive scripts

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Any lexing, parsing or runtime error is
reported on stderr and the process exits with status 1.
"""

import argparse
import json
import platform
import sys
from pathlib import Path
from .ast_json import ast_to_obj, ast_from_obj
from .errors import MiniluxError
from .interpreter import Interpreter
from .parser import parse_program

VERSION = '0.1.0'


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def run_repl(debug_level: int) -> None:
    print("Minilux Interpreter Console (REPL)")
    print(f"Version {VERSION} on {platform.system().lower()}/{platform.machine()} -- [Python]")
    print('Type "exit" to quit')
    print()
    with Interpreter(debug_level=debug_level) as interpreter:
        while True:
            try:
                line = input('> ')
            except EOFError:
                break
            line = line.strip()
            if line == 'exit':
                break
            if not line:
                continue
            try:
                interpreter.run(parse_program(line))
            except MiniluxError as e:
                print(f"Error: {e}", file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='minilux', description="Minilux language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--recursion-limit', type=int, default=10000, help='host recursion limit')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='SCRIPT', help='emit AST JSON for the given script')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Minilux script (.mi) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse_program(source)
        except MiniluxError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    if args.ast:
        ast_path = Path(args.ast)
        try:
            ast_program = ast_from_obj(json.loads(read_source(ast_path)))
        except MiniluxError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except (ValueError, KeyError, TypeError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
    elif args.program:
        try:
            ast_program = parse_program(read_source(Path(args.program)))
        except MiniluxError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        run_repl(args.v)
        return

    sys.setrecursionlimit(max(sys.getrecursionlimit(), args.recursion_limit))
    try:
        with Interpreter(debug_level=args.v) as interpreter:
            interpreter.run(ast_program)
    except MiniluxError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
