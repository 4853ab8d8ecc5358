import unittest

from jsi.grammar.lexical import Lexer, tokenize
from jsi.lang.error import LexError, ParseError

class LexerTestCase(unittest.TestCase):

    def test_tokenize(self):
        should_pass = {
            "": [],
            " \n\t ": [],
            "var x = 1;": ["var", "x", "=", "1", ";"],
            "a === b !== c": ["a", "===", "b", "!==", "c"],
            "a <= b >= c < d > e": ["a", "<=", "b", ">=", "c", "<", "d", ">", "e"],
            "1.5e-3 + 2. * 10": ["1.5e-3", "+", "2.", "*", "10"],
            "f(a,b)[0]*-2": ["f", "(", "a", ",", "b", ")", "[", "0", "]", "*", "-", "2"],
            "{a: 1}.a": ["{", "a", ":", "1", "}", ".", "a"],
            "x // comment\ny": ["x", "y"],
            "'it\\'s' + \"q\"": ["'it\\'s'", "+", "\"q\""],
            "/a\\/b/gi.test(s)": ["/a\\/b/gi", ".", "test", "(", "s", ")"],
            "1x": ["1", "x"],
        }
        for case, result in should_pass.items():
            self.assertEqual(result, tokenize(case), case)

    def test_invalid_character(self):
        should_fail = ["a @ b", "x % 2", "#", "a & b", "`x`", "\"open", "a - b ~"]
        for case in should_fail:
            self.assertRaises(LexError, tokenize, case)

        with self.assertRaises(LexError) as context:
            tokenize("a\n\nb @")
        self.assertEqual(3, context.exception.line)
        self.assertEqual("invalid character '@' at 3", context.exception.msg)

    def test_lexing_is_lazy(self):
        lexer = Lexer("a b @")
        self.assertEqual("a", lexer.consume())
        self.assertRaises(LexError, lexer.consume)

    def test_at_consume_expect(self):
        lexer = Lexer("var x;")
        self.assertEqual("var", lexer.current)
        self.assertFalse(lexer.at("x"))
        self.assertEqual("var", lexer.current)
        self.assertTrue(lexer.at("var"))
        self.assertEqual("x", lexer.consume())
        lexer.expect(";")
        self.assertIsNone(lexer.current)

        with self.assertRaises(ParseError) as context:
            lexer.at(";")
        self.assertIn("unexpected end of stream", context.exception.msg)

    def test_expect_mismatch(self):
        lexer = Lexer("a\nb")
        lexer.consume()
        with self.assertRaises(ParseError) as context:
            lexer.expect("c")
        self.assertEqual("expected 'c' but found 'b' at 2", context.exception.msg)

    def test_line(self):
        lexer = Lexer("a\nb\n\nc")
        lines = []
        while lexer.current is not None:
            lines.append(lexer.line)
            lexer.consume()
        self.assertEqual([1, 2, 4], lines)

    def test_initialize_restarts(self):
        lexer = Lexer("x y")
        lexer.consume()
        lexer.initialize("z")
        self.assertEqual(["z"], list(lexer))


if __name__ == '__main__':
    unittest.main()
