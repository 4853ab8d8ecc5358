"""Runs the jsi interpreter on a .js file, on a code string, or in command-line mode. Also uses the error handling
context manager. Called from the jsi console script and from `python -m jsi`.
"""

import argparse

from jsi.lang.error import ErrorHandler
from jsi.lang.session import Session
from jsi.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="jsi", description="Interpreter for the good parts of JavaScript.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-e", "--eval", dest="code", help="run CODE instead of a file")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree instead of running the program")
    return parser


def main(argv=None):
    """Runs jsi interpreter. Called from jsi executable script."""
    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)

        if args.code is not None or args.file is not None:
            if args.code is not None:
                sess = Session(error_handler, source=args.code)
            else:
                sess = Session(error_handler, args.file)

            if args.ast:
                for program in sess.to_run:
                    print(program.display())
            else:
                sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()
