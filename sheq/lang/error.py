"""Error handling for the SHEQ language. Only GenericExceptions should be encountered during a run: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Every failure is unrecoverable at the point it is raised. It propagates untouched to the ErrorHandler wrapped around
the run, which prints exactly one diagnostic to stderr.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a SHEQ error. exprs are formatted into msg and
    highlighted when the error is displayed. line/col locate the error in the source (1-based), if known.
    """
    kind = "error"

    def __init__(self, msg, exprs=None, line=None, col=None, width=1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = []
        if not isinstance(exprs, (list, tuple)):
            exprs = [exprs]

        self.template = msg
        self.exprs = [str(expr) for expr in exprs]
        self.msg = msg.format(*self.exprs)

        self.line = line
        self.col = col
        self.width = max(width, 1)  # needed for error display

        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)

    @property
    def located(self):
        return self.line is not None and self.col is not None

    def highlighted(self, color):
        """Returns msg with its expr snippets bolded."""
        return self.template.format(*(colored(expr, color, attrs=["bold"]) for expr in self.exprs))


class LexError(GenericException):
    kind = "lexical error"


class ParseError(GenericException):
    kind = "syntax error"


class UnboundError(GenericException):
    kind = "unbound identifier"


class TypeMismatch(GenericException):
    kind = "type error"


class ArityError(GenericException):
    kind = "arity mismatch"


class DomainError(GenericException):
    kind = "domain error"


class UserError(GenericException):
    kind = "user error"


class ArenaExhausted(GenericException):
    kind = "resource exhausted"


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report custom SHEQ errors instead."""
    ERROR = "red"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.source = None

    def register_source(self, source):
        """Registers the source text being run, so that located errors can be diagnosed. Call prior to a run."""
        self.source = source

    def remove_source(self):
        """Removes the registered source. Should be called after a successful run."""
        self.source = None

    def diagnose(self, error):
        """Returns the offending source line with the erroneous part highlighted and marked."""
        lines = self.source.split("\n")
        if not 0 < error.line <= len(lines):
            return None

        line = lines[error.line - 1]
        start = min(error.col - 1, len(line))
        end = min(start + error.width, len(line))

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Reports error, which must be a GenericException, as one diagnostic on stderr. Exits if fatal."""
        stream = self.stream if self.stream is not None else sys.stderr

        error_msg = ""
        if error.located:
            error_msg += colored(f"{error.line}:{error.col}: ", attrs=["bold"])
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"])
        if error.kind != GenericException.kind:
            error_msg += f"{error.kind}: "
        error_msg += error.highlighted(ErrorHandler.ERROR)

        if not error.internal and error.diagnosis and error.located and self.source is not None:
            diagnosis = self.diagnose(error)
            if diagnosis:
                error_msg += "\n" + diagnosis

        print(error_msg, file=stream)

        self.source = None  # if error occurred, reset source (no need if error is fatal)
        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(ArenaExhausted("maximum recursion depth exceeded (deep recursion is not tail-call optimized)"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
