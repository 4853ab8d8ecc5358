"""Session control for jsi. A Session owns the root environment (the host capabilities), one program scope under it
and an Evaluator, and runs source text through the whole pipeline: lex and parse everything first, then evaluate.
Used both for file interpretation and by the interactive shell.
"""

from jsi.grammar.parser import parse
from jsi.lang.error import ErrorHandler, GenericException
from jsi.runtime.evaluator import Evaluator
from jsi.runtime.host import make_root
from jsi.runtime.values import UNDEFINED


class Session:
    """Governs a jsi session. Programs added to the same session share one top-level scope."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path=SH_FILE, source=None, cmd_line=False, out=print, root=None):
        self.error_handler = error_handler

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.out = out            # where console output goes

        self.root = root if root is not None else make_root(out)
        self.scope = self.root.child()
        self.evaluator = Evaluator(self.root)

        self.to_run = []   # parsed programs waiting for run
        self.results = []  # completion value of every program run so far

        if self.cmd_line:
            self.error_handler.fatal = False

        if source is None and path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    source = file.read()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

        elif source is None and not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

        if source is not None:
            self.add(source)

    @staticmethod
    def is_complete(source):
        """Whether every bracket opened in source is closed. Used by the shell for line continuations."""
        depth = 0
        for char in source:
            if char in "([{":
                depth += 1
            elif char in ")]}":
                depth -= 1
        return depth <= 0

    def add(self, source):
        """Parses source and queues it. Nothing is evaluated until run is called; a lex or parse error is raised
        here, before any evaluation.
        """
        self.error_handler.register_file(self.path, source)
        self.to_run.append(parse(source))
        return self.to_run[-1]

    def run(self):
        """Runs every queued program in this session's scope. Returns the completion value of the last one. Errors
        propagate: the program that raised them is dropped from the queue.
        """
        result = UNDEFINED
        while self.to_run:
            program = self.to_run.pop(0)
            result = self.evaluator.run(program, self.scope)
            self.results.append(result)

        self.error_handler.remove_file(self.path)
        return result

    def pop(self):
        """Removes and returns the most recent result."""
        return self.results.pop()


def run(source, out=print):
    """Convenience wrapper: parses and runs source in a fresh session and returns its completion value. Errors are
    raised to the caller.
    """
    return Session(ErrorHandler(fatal=False), source=source, out=out).run()
