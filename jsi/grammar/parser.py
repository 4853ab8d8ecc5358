"""Recursive-descent parser for jsi. Grammar, lowest precedence first:

```
<program>    ::= <stmt>*
<stmt>       ::= "var" <name> ["=" <expr>] ";"
               | "function" <name> "(" <params> ")" <block>     ; sugar for var <name> = function...
               | "if" "(" <expr> ")" <block> ["else" (<if> | <block>)]
               | "while" "(" <expr> ")" <block>
               | "break" ";" | "throw" <expr> ";" | "return" [<expr>] ";"
               | <expr> ["=" <expr>] ";"
<block>      ::= "{" <stmt>* "}"
<expr>       ::= <comparison> ["===" <comparison>]             ; not chainable
<comparison> ::= <term> ["<" <term>]                           ; not chainable
<term>       ::= <factor> ("+" <factor>)*
<factor>     ::= <unary> ("*" <unary>)*
<unary>      ::= ("-" | "!") <unary> | <postfix>
<postfix>    ::= <primary> ("." <name> | "[" <expr> "]" | "(" <args> ")")*
<primary>    ::= "(" <expr> ")" | "true" | "false" | "null" | <function> | <string> | <regexp> | <number>
               | <name> | "[" <args> "]" | "{" [<key> ":" <expr> ("," <key> ":" <expr>)*] "}"
```

`else if` is parsed as an else block holding a single if statement. The parser stops at the first error: there is no
recovery and no partial tree.
"""

import re

from jsi.grammar import nodes
from jsi.grammar.lexical import Lexer
from jsi.lang.error import ParseError
from jsi.runtime.values import JSRegExp


class Parser:
    """Builds an AST from a token stream, one token of lookahead at a time."""
    NAME = re.compile(r"[^\W\d]\w*$")
    REGEXP = re.compile(r"/(.*)/(g?m?i?)$", re.DOTALL)

    def __init__(self, source):
        self.source = source
        self.lexer = Lexer()

    @property
    def current(self):
        return self.lexer.current

    def error(self, msg, *exprs):
        return ParseError(msg, list(exprs) if exprs else self.current or "", line=self.lexer.line)

    def parse(self):
        """Parses the whole source and returns a Block."""
        self.lexer.initialize(self.source)
        stmts = []
        while self.current is not None:
            stmts.append(self.parse_statement())
        return nodes.Block(tuple(stmts))

    # ------------statements-----------------------------------------------------------------------------------------

    def parse_statement(self):
        at, expect = self.lexer.at, self.lexer.expect

        if at("var"):
            name = self.parse_name()
            expr = self.parse_expression() if at("=") else None
            expect(";")
            return nodes.Var(name, expr)

        if at("function"):
            func = self.parse_function()
            if func.name is None:
                raise self.error("function statement requires a name")
            return nodes.Var(func.name, func)

        if at("if"):
            return self.parse_if()

        if at("while"):
            expect("(")
            cond = self.parse_expression()
            expect(")")
            return nodes.While(cond, self.parse_block())

        if at("break"):
            expect(";")
            return nodes.Break()

        if at("throw"):
            expr = self.parse_expression()
            expect(";")
            return nodes.Throw(expr)

        if at("return"):
            expr = None
            if not at(";"):
                expr = self.parse_expression()
                expect(";")
            return nodes.Return(expr)

        line = self.lexer.line
        expr = self.parse_expression()
        if at("="):
            if not isinstance(expr, (nodes.Name, nodes.Ref)):
                raise ParseError("invalid assignment target", line=line)
            stmt = nodes.Set(expr, self.parse_expression())
        else:
            stmt = nodes.Stmt(expr)
        expect(";")
        return stmt

    def parse_if(self):
        expect = self.lexer.expect

        expect("(")
        cond = self.parse_expression()
        expect(")")
        then_body = self.parse_block()

        else_body = None
        if self.lexer.at("else"):
            if self.lexer.at("if"):
                else_body = nodes.Block((self.parse_if(),))
            else:
                else_body = self.parse_block()
        return nodes.If(cond, then_body, else_body)

    def parse_block(self):
        self.lexer.expect("{")
        stmts = []
        while not self.lexer.at("}"):
            stmts.append(self.parse_statement())
        return nodes.Block(tuple(stmts))

    # ------------expressions----------------------------------------------------------------------------------------

    def parse_expression(self):
        expr = self.parse_comparison()
        if self.lexer.at("==="):
            expr = nodes.Eq(expr, self.parse_comparison())
        return expr

    def parse_comparison(self):
        expr = self.parse_term()
        if self.lexer.at("<"):
            expr = nodes.Lt(expr, self.parse_term())
        return expr

    def parse_term(self):
        expr = self.parse_factor()
        while self.lexer.at("+"):
            expr = nodes.Add(expr, self.parse_factor())
        return expr

    def parse_factor(self):
        expr = self.parse_unary()
        while self.lexer.at("*"):
            expr = nodes.Mul(expr, self.parse_unary())
        return expr

    def parse_unary(self):
        if self.lexer.at("-"):
            return nodes.Neg(self.parse_unary())
        if self.lexer.at("!"):
            return nodes.Not(self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self):
        at = self.lexer.at

        expr = self.parse_primary()
        while True:
            if at("."):
                expr = nodes.Ref(expr, nodes.Lit(self.parse_name()))
            elif at("["):
                expr = nodes.Ref(expr, self.parse_expression())
                self.lexer.expect("]")
            elif at("("):
                expr = nodes.Inv(expr, self.parse_list(")"))
            else:
                return expr

    def parse_primary(self):
        at, token = self.lexer.at, self.current

        if at("("):
            expr = self.parse_expression()
            self.lexer.expect(")")
            return expr
        if at("true"):
            return nodes.Lit(True)
        if at("false"):
            return nodes.Lit(False)
        if at("null"):
            return nodes.Lit(None)
        if at("function"):
            return self.parse_function()
        if at("["):
            return nodes.Array(self.parse_list("]"))
        if at("{"):
            return self.parse_object()

        if token[0] in "'\"":
            return nodes.Lit(self.lexer.consume()[1:-1])
        if token[0] == "/":
            line = self.lexer.line
            return nodes.Lit(self.parse_regexp(self.lexer.consume(), line))
        if token[0].isdigit():
            return nodes.Lit(float(self.lexer.consume()))
        if Parser.NAME.match(token):
            return nodes.Name(self.lexer.consume())

        raise self.error("unknown primary '{}'", token)

    def parse_list(self, closing):
        """Comma-separated expressions up to closing (consumed)."""
        items = []
        if not self.lexer.at(closing):
            items.append(self.parse_expression())
            while self.lexer.at(","):
                items.append(self.parse_expression())
            self.lexer.expect(closing)
        return tuple(items)

    def parse_object(self):
        pairs = []
        if not self.lexer.at("}"):
            pairs.append(self.parse_pair())
            while self.lexer.at(","):
                pairs.append(self.parse_pair())
            self.lexer.expect("}")
        return nodes.Object(tuple(pairs))

    def parse_pair(self):
        key = self.parse_expression()
        if isinstance(key, nodes.Name):
            key = nodes.Lit(key.name)
        self.lexer.expect(":")
        return key, self.parse_expression()

    def parse_regexp(self, token, line):
        """Compiles a regular expression literal token (slashes and trailing flags included)."""
        source, flags = Parser.REGEXP.match(token).groups()
        try:
            return JSRegExp(source, flags)
        except (re.error, ValueError) as exc:
            raise ParseError("invalid regular expression '{}': {}", [token, exc], line=line)

    def parse_function(self):
        """Parses what follows the `function` keyword: optional name, parameters and body."""
        name = None
        params = []
        if not self.lexer.at("("):
            name = self.parse_name()
            self.lexer.expect("(")
        if not self.lexer.at(")"):
            params.append(self.parse_name())
            while self.lexer.at(","):
                params.append(self.parse_name())
            self.lexer.expect(")")
        return nodes.Function(name, tuple(params), self.parse_block())

    def parse_name(self):
        if self.current is not None and Parser.NAME.match(self.current):
            return self.lexer.consume()
        raise self.error("name expected, found '{}'", self.current or "end of stream")


def parse(source):
    """Parses source and returns its AST (a Block)."""
    return Parser(source).parse()
