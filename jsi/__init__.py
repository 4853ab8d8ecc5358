"""jsi: an interpreter for the good parts of JavaScript.

Basic program flow:
    1. Lexer (jsi/grammar/lexical.py): splits the source into raw token strings with a single regular expression,
       one token of lookahead at a time
    2. Parser (jsi/grammar/parser.py): recursive descent over the tokens, producing an AST of the immutable node
       classes in jsi/grammar/nodes.py
        - the whole source is parsed before anything runs; the first error aborts
    3. Evaluator (jsi/runtime/evaluator.py): walks the AST directly, no bytecode
        - one Environment per function call (jsi/runtime/scope.py)
        - values and operator semantics in jsi/runtime/values.py
        - the only bindings a program starts with are the host capabilities in jsi/runtime/host.py

jsi/lang holds the parts around the pipeline: errors, sessions and the interactive shell.
"""
