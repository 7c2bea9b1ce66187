"""Command-line entry point for the SHEQ interpreter: evaluates the one expression given as an argument, or runs the
interactive shell. Also uses the error handling context manager. Installed as the `sheq` console script.

    $ sheq '{let {[x = 3] [y = 4]} in {+ x y} end}'
    7
"""

import argparse
import io
import sys

from sheq.lang.error import ErrorHandler
from sheq.lang.session import Session
from sheq.lang.shell import Shell


def main(argv=None):
    """Runs the SHEQ interpreter. The result goes to stdout; any failure is one diagnostic on stderr and exit code 1."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="sheq", description="Evaluate one SHEQ expression.")
        parser.add_argument("expr", help="source expression to evaluate", nargs="?")
        parser.add_argument("-i", "--interactive", action="store_true", help="start the interactive shell instead")
        parser.add_argument("--arena-size", type=int, default=Session.ARENA_CAPACITY, metavar="BYTES",
                            help="arena capacity per evaluation (default: %(default)s)")
        parser.add_argument("--recursion-limit", type=int, default=Session.RECURSION_LIMIT, metavar="N",
                            help="Python recursion limit while evaluating (default: %(default)s)")
        args = parser.parse_args(argv)

        if args.interactive and args.expr is not None:
            parser.error("an expression cannot be combined with --interactive")
        elif not args.interactive and args.expr is None:
            parser.error("exactly one expression is required")
        elif args.arena_size < 0:
            parser.error("--arena-size must be non-negative")

        sys.setrecursionlimit(max(sys.getrecursionlimit(), args.recursion_limit))
        sess = Session(error_handler, arena_capacity=args.arena_size)
        if isinstance(sys.stdout, io.TextIOWrapper):
            sys.stdout.reconfigure(errors="surrogateescape")  # undecodable argument bytes print back unchanged

        if args.interactive:
            Shell(sess).cmdloop()
        else:
            print(sess.run(args.expr))

    return 0


if __name__ == "__main__":
    sys.exit(main())
