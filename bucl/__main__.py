"""CLI entry point for the BUCL interpreter.

Usage:
    python -m bucl [-v|-vv|-vvv] [<program_file>]
    python -m bucl [-v...] --emit-ast <program_file>
    python -m bucl [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .bucl file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a program file the source is read from standard input. User
functions are looked up in `functions/` next to the program, then in
`functions/` under the current directory. Debug information is written to
`debug.txt` in the current directory when verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .ast_json import ast_to_obj, ast_from_obj
from .errors import BuclError
from .interpreter import Interpreter, parse_program
from .namespace import FunctionNamespace


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def execute(ast_program, base_dir: Optional[Path], verbosity: int) -> None:
    interpreter = Interpreter(debug_level=verbosity, namespace=FunctionNamespace(base_dir=base_dir))
    try:
        interpreter.run(ast_program)
    except BuclError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="BUCL language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='BUCL_FILE', help='emit AST JSON for the given .bucl file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='BUCL program file (.bucl) to execute; stdin if omitted')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse_program(source)
        except BuclError as e:
            print(f"Parse error: {e}", file=sys.stderr)
            sys.exit(1)
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        execute(ast_from_obj(data), ast_path.resolve().parent, args.v)
        return

    # Default: execute source file, or standard input
    if args.program:
        program_file = Path(args.program)
        source = read_source(program_file)
        base_dir = program_file.resolve().parent
    else:
        source = sys.stdin.read()
        base_dir = None
    try:
        ast_program = parse_program(source)
    except BuclError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        sys.exit(1)
    execute(ast_program, base_dir, args.v)


if __name__ == '__main__':
    main()
