"""CLI entry point: run `luawalk <command> file.lua` or `python -m luawalk <command> file.lua`."""

import logging
import sys
from pathlib import Path
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    import argparse
    from .frontend.parser import Parser
    from .passes.alpha_rename import alpha_rename
    from .passes.bindings import find_bindings
    from .passes.free_variables import free_variables
    from .shared.errors import WalkError, describe, format_diagnostic
    from .shared.serialization import to_sexpr
    from .utils.config import DEFAULT_FILE_ENCODING, DEFAULT_PARSER_CACHE_FILE, LOG_FORMAT, LOGGER_ROOT

    parser = argparse.ArgumentParser(prog="luawalk", description="Inspect the scopes of a Lua source file.")
    parser.add_argument("command", choices=["dump", "free", "rename", "bindings"],
                        help="dump: print the AST; free: list free variables; "
                             "rename: alpha-rename and print the AST; bindings: list binders and references")
    parser.add_argument("file", type=Path, help="Path to .lua source file")
    parser.add_argument("--locations", action="store_true", help="Include source locations in dumps")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log walker activity to stderr")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
        logging.getLogger(LOGGER_ROOT).setLevel(logging.DEBUG)

    path = args.file
    if not path.exists():
        sys.stderr.write(f"luawalk: error: file not found: {path}\n")
        return 1
    if not path.is_file():
        sys.stderr.write(f"luawalk: error: not a file: {path}\n")
        return 1

    try:
        source = path.read_text(encoding=DEFAULT_FILE_ENCODING)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"luawalk: error: could not read file: {e}\n")
        return 1

    try:
        tree = Parser(cache_file=DEFAULT_PARSER_CACHE_FILE).parse(source, str(path))
        if args.command == "dump":
            print(to_sexpr(tree, include_location=args.locations))
        elif args.command == "free":
            for name in sorted(free_variables(tree)):
                print(name)
        elif args.command == "rename":
            alpha_rename(tree)
            print(to_sexpr(tree, include_location=args.locations))
        else:
            bindings = find_bindings(tree)
            for binder, identifiers in bindings.declared.items():
                names = ", ".join(i.name for i in identifiers)
                refs = len(bindings.references.get(binder, []))
                where = f" at {binder.location}" if binder.location else ""
                print(f"{describe(binder)}{where}: {names} ({refs} reference(s))")
            for name in sorted(bindings.free):
                print(f"free: {name} ({len(bindings.free[name])} occurrence(s))")
    except WalkError as e:
        sys.stderr.write(format_diagnostic(e, source) + "\n")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
