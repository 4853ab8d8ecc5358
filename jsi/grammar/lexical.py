r"""Lexical analysis for jsi. Source text is split into raw token strings by a single composite regular expression:

```
whitespace       \s+                            ; skipped
line comment     //.*$                          ; skipped
number           \d+(\.\d*)?([eE][-+]?\d+)?
word             \w+                            ; identifiers and keywords
string           '(\\.|[^'])*' | "(\\.|[^"])*"  ; escapes are kept as written
regular expr.    /(\\.|[^/])+/g?m?i?
operators        [!=]== | [<>]=?
syntax           [()\[\]{},;.:=+\-!*]
```

Alternatives are tried in that order. Anything else is an invalid character. Tokens are plain str slices of the
source: no token object survives consumption, only the current lookahead and its offset (for line numbers).
"""

import re

from jsi.lang.error import LexError, ParseError


class Lexer:
    """Lazy, restartable token stream with one token of lookahead."""
    PATTERN = re.compile(r"""
        \s+ | //.*$                                 # skipped
        | ( \d+(?:\.\d*)?(?:[eE][-+]?\d+)?          # number
          | \w+                                     # word
          | '(?:\\.|[^'])*' | "(?:\\.|[^"])*"       # string
          | /(?:\\.|[^/])+/g?m?i?                   # regular expression
          | [!=]== | [<>]=?                         # comparison operators
          | [()\[\]{},;.:=+\-!*]                    # single character operators and punctuation
          )
        | (.)                                       # anything else is invalid
        """, re.MULTILINE | re.VERBOSE)

    def __init__(self, source=None):
        self.source = ""
        self.current = None
        self.index = 0
        self._matches = iter(())
        if source is not None:
            self.initialize(source)

    def initialize(self, source):
        """Resets the stream to the start of source and loads the first lookahead."""
        self.source = source
        self.index = 0
        self._matches = Lexer.PATTERN.finditer(source)
        self.current = self.next()

    def next(self):
        """Returns the next token from the stream, or None at the end of the stream. Does not touch the lookahead."""
        for match in self._matches:
            if match.group(2) is not None:
                raise LexError("invalid character '{}'", match.group(2), line=self.line_at(match.start()))
            if match.group(1) is not None:
                self.index = match.start()
                return match.group(1)
        self.index = len(self.source)
        return None

    def at(self, token):
        """If the lookahead is token, consumes it and returns True; otherwise consumes nothing and returns False."""
        if self.current is None:
            raise ParseError("unexpected end of stream", line=self.line)
        if self.current == token:
            self.current = self.next()
            return True
        return False

    def consume(self):
        """Returns the lookahead and advances past it."""
        token = self.current
        self.current = self.next()
        return token

    def expect(self, token):
        """Consumes token, raising a ParseError if the lookahead is anything else."""
        if not self.at(token):
            raise ParseError("expected '{}' but found '{}'", [token, self.current], line=self.line)

    def line_at(self, offset):
        """1-based line number of offset in the source."""
        return self.source.count("\n", 0, offset) + 1

    @property
    def line(self):
        """1-based line number of the lookahead."""
        return self.line_at(self.index)

    def __iter__(self):
        """Iterates over the remaining tokens, lookahead included."""
        while self.current is not None:
            yield self.consume()


def tokenize(source):
    """Returns every token of source as a list."""
    return list(Lexer(source))
