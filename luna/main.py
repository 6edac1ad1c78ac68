"""Runs .luna files, inline source, or the interactive shell. Also uses error handling context manager. Called from the
luna executable script.
"""

import argparse
import sys

from luna.lang.error import ErrorHandler
from luna.lang.session import Session
from luna.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="luna", description="luna interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-c", dest="source", metavar="SOURCE", help="run SOURCE instead of a file")
    parser.add_argument("--modules", metavar="PATH",
                        help=f"modules root checked by import (default: ${Session.MODULES_ENV} or "
                             f"{Session.MODULES_DIR}/ next to the script)")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree instead of running")
    parser.add_argument("--trace", action="store_true", help="report every executed statement")
    parser.add_argument("--no-color", action="store_true", help="disable colored diagnostics")
    return parser


def main(argv=None):
    """Runs luna interpreter. Returns the exit status; called from the luna executable script."""
    args = build_parser().parse_args(argv)

    with ErrorHandler(color=not args.no_color, verbose=args.trace) as error_handler:
        if args.source is not None:
            sess = Session.from_source(error_handler, args.source, modules_path=args.modules)
        elif args.file is not None:
            sess = Session(error_handler, args.file, args.modules, cmd_line=False)
        else:
            Shell(Session(error_handler, Session.SH_FILE, args.modules, cmd_line=True)).cmdloop()
            return 0

        if args.ast:
            while sess.pending:
                print(sess.parse(sess.pending.pop(0)).display())
        else:
            sess.run()

    return error_handler.status


if __name__ == "__main__":
    sys.exit(main())
