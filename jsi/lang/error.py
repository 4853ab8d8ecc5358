"""Error handling for the jsi interpreter. Only GenericExceptions should be encountered while lexing, parsing or
running a program: if another type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an
internal issue.

None of these errors are recoverable from inside a script (there is no catch construct): each one aborts the current
run and is reported to whoever embeds the interpreter.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a jsi error. msg is a str.format template whose
    fields are filled with exprs (the offending snippets, bolded when displayed).
    """

    def __init__(self, msg, exprs=None, line=None, diagnosis=True, internal=False):
        """Parses args for GenericException."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.template = msg
        self.exprs = [str(expr) for expr in exprs]
        self.expr = self.exprs[0]  # exprs[0] should be the offending expr that caused the error
        self.line = line           # 1-based line in the source, if known

        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)

    @property
    def msg(self):
        """Plain message, without colors."""
        text = self.template.format(*self.exprs)
        if self.line is not None:
            text += f" at {self.line}"
        return text

    def colored_msg(self):
        """Message with expr snippets bolded."""
        text = self.template.format(*(colored(expr, attrs=["bold"]) for expr in self.exprs))
        if self.line is not None:
            text += f" at {self.line}"
        return text


class LexError(GenericException):
    """Raised when the source contains a character that no token matches."""


class ParseError(GenericException):
    """Raised on an unexpected token, a missing terminator or a premature end of stream."""


class RuntimeFault(GenericException):
    """Superclass for the structural errors detected while evaluating a program."""

    def __init__(self, msg, exprs=None, **kwargs):
        kwargs.setdefault("diagnosis", False)
        super().__init__(msg, exprs, **kwargs)


class UnknownNameError(RuntimeFault):
    """Assignment to a name that no enclosing environment declares."""

    def __init__(self, name):
        super().__init__("unknown name '{}'", name)
        self.name = name


class ReadOnlyNameError(RuntimeFault):
    """Assignment to a binding of the root environment (the host capabilities)."""

    def __init__(self, name):
        super().__init__("cannot assign to host binding '{}'", name)
        self.name = name


class NotCallableError(RuntimeFault):
    """Invocation of undefined, or of any other value that is not a function."""

    def __init__(self, what):
        super().__init__("TypeError: {} is not a function", what)


class UndefinedPropertyError(RuntimeFault):
    """Member read or write on undefined (or null)."""

    def __init__(self, key, what="undefined", write=False):
        verb = "set" if write else "read"
        super().__init__("TypeError: cannot " + verb + " property '{}' of {}", [key, what])
        self.key = key


class UserThrow(RuntimeFault):
    """Payload of a `throw` statement. value is the thrown value, untouched."""

    def __init__(self, value):
        from jsi.runtime.values import to_display

        super().__init__("uncaught exception: {}", to_display(value))
        self.value = value


class ErrorHandler:
    """Context manager that reports jsi errors (and unexpected Python ones) through out instead of a traceback."""
    ERROR = "red"

    def __init__(self, fatal=True, out=print):
        self.fatal = fatal
        self.out = out
        self.traceback = {}

    def register_file(self, path, source=None):
        """Registers path (and its source, used to quote the offending line) in traceback."""
        self.traceback[path] = source

    def remove_file(self, path):
        """Removes path from traceback. Should be called after a successful run."""
        self.traceback.pop(path, None)

    @staticmethod
    def diagnose(error, source_line):
        """Returns source_line with the offending part highlighted and a caret underneath it."""
        start = source_line.find(error.expr) if error.expr else -1
        if start == -1:
            start, end = 0, max(len(source_line.rstrip()), 1)
        else:
            end = start + max(len(error.expr), 1)

        diagnosis = "  " + source_line[:start]
        diagnosis += colored(source_line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += source_line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Reports error using self.traceback. error must be a GenericException; if it carries a line number, the
        offending line of the most recently registered source is quoted.
        """
        source_line = None
        error_msg = ""
        if self.traceback:
            path, source = list(self.traceback.items())[-1]
            if error.line is not None:
                error_msg += f"  File '{path}', line {error.line}:\n"
                if source is not None:
                    lines = source.split("\n")
                    if 0 < error.line <= len(lines):
                        source_line = lines[error.line - 1]
                        error_msg += f"    {source_line.strip()}\n"

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.colored_msg()
        self.out(error_msg)

        if not error.internal and error.diagnosis and source_line is not None:
            self.out(ErrorHandler.diagnose(error, source_line))

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is None:
            return True
        elif exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif issubclass(exc_type, GenericException):
            self.throw(exc_val)
        else:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
