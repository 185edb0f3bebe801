import argparse
from pathlib import Path
from .parser import compile_source, ParseError
from runtime.vm import WeeVM, RunError
import sys


def main(argv=None):
    ap = argparse.ArgumentParser(prog="weebasic", description="WeeBASIC compiler/executor")
    ap.add_argument("source", type=Path, help="Source file")
    ap.add_argument("--dump", action="store_true", help="Print the compiled instructions instead of running them")
    ap.add_argument("-v", "--verbose", action="store_true", help="Report the size of the source file on stderr")
    args = ap.parse_args(argv)

    try:
        src_text = args.source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        print(f'failed to open source file "{args.source}"', file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        print(f"read {len(src_text.encode('utf-8'))} bytes", file=sys.stderr)

    try:
        program = compile_source(src_text)
    except ParseError as e:
        print(f"Syntax error at {args.source}:{e.line}:{e.col}: {e}", file=sys.stderr)
        sys.exit(1)

    if args.dump:
        print(program.disassemble())
        return

    try:
        WeeVM(program).run()
    except RunError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
