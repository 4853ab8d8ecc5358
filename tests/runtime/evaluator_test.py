import math
import unittest

from jsi.grammar import nodes
from jsi.grammar.parser import parse
from jsi.lang.error import (GenericException, NotCallableError, ReadOnlyNameError, UndefinedPropertyError,
                            UnknownNameError, UserThrow)
from jsi.runtime.evaluator import Completion, Evaluator, Signal, describe
from jsi.runtime.host import make_root
from jsi.runtime.values import UNDEFINED, JSArray, JSObject

class EvaluatorTestCase(unittest.TestCase):

    def setUp(self):
        self.output = []
        self.root = make_root(self.output.append)
        self.evaluator = Evaluator(self.root)
        self.scope = self.root.child()

    def run_js(self, source):
        return self.evaluator.run(parse(source), self.scope)

    def assertResults(self, should_pass):
        for case, result in should_pass.items():
            self.setUp()
            self.assertEqual(result, self.run_js(case), case)

    def test_completion_value(self):
        self.assertResults({
            "1 + 2 + 3;": 6.0,
            "'a' + 1;": "a1",
            "1 + 1;": 2.0,
            "2 * 3 * -1;": -6.0,
            "var x = 1; x = x + 1; x;": 2.0,
            "var x = 1;": UNDEFINED,
            "var y; y = 4;": 4.0,
            "": UNDEFINED,
            "return 5; 6;": 5.0,
            "nothing;": UNDEFINED,
        })

    def test_operators(self):
        self.assertResults({
            "1 === 1;": True,
            "1 === '1';": False,
            "null === null;": True,
            "[] === [];": False,
            "var a = []; a === a;": True,
            "'a' < 'b';": True,
            "2 < 10;": True,
            "'2' < '10';": False,
            "!0;": True,
            "!'x';": False,
            "!!{};": True,
            "-'3';": -3.0,
            "'3' * '4';": 12.0,
            "[1, 2] + '';": "1,2",
        })
        self.assertTrue(math.isnan(self.run_js("undefined * 2;")))

    def test_control_flow(self):
        self.assertResults({
            "if (0) { 1; } else { 2; }": 2.0,
            "if ('') { 1; }": UNDEFINED,
            "var x = 3; if (x === 1) { 'a'; } else if (x === 3) { 'c'; } else { 'z'; }": "c",
            "var i = 0; while (i < 5) { i = i + 1; } i;": 5.0,
            "var i = 0; while (true) { if (i === 3) { break; } i = i + 1; } i;": 3.0,
            "while (false) { throw 'never'; }": UNDEFINED,
        })

    def test_nested_break(self):
        source = """
        var log = [];
        var i = 0;
        while (i < 3) {
            var j = 0;
            while (true) {
                if (j === 2) {
                    break;
                }
                j = j + 1;
            }
            log.push(j);
            i = i + 1;
        }
        log;
        """
        self.assertEqual([2.0, 2.0, 2.0], self.run_js(source))

    def test_functions(self):
        self.assertResults({
            "function f(a, b) { return a + b; } f(1, 2);": 3.0,
            "function f(a, b) { return b; } f(1);": UNDEFINED,
            "function f() { return arguments[2]; } f(1, 2, 3);": 3.0,
            "function f(a) { return arguments.length; } f(1, 2, 3);": 3.0,
            "function f() { return; } f();": UNDEFINED,
            "function f() { 1; } f();": UNDEFINED,
            "function f() { break; return 1; } f();": UNDEFINED,
            "function f() { var i = 0; while (true) { if (i === 3) { return i; } i = i + 1; } } f();": 3.0,
            "function f() { if (true) { var x = 1; } return x; } f();": 1.0,
            "var x = 1; function f() { var x = 2; return x; } f() + x;": 3.0,
            "function fact(n) { if (n < 2) { return 1; } return n * fact(n + -1); } fact(5);": 120.0,
            "var sq = function (x) { return x * x; }; sq(7);": 49.0,
            "(function (x) { return x; })(8);": 8.0,
            "function f(a, b) { } f.length;": 2.0,
            "function named() { } named.name;": "named",
        })

    def test_closures(self):
        source = """
        function counter() {
            var count = 0;
            return function () {
                count = count + 1;
                return count;
            };
        }
        var c = counter();
        var d = counter();
        [c(), c(), d()];
        """
        self.assertEqual([1.0, 2.0, 1.0], self.run_js(source))

        self.setUp()
        self.assertEqual(5.0, self.run_js("var x = 1; function f() { x = 5; } f(); x;"))

    def test_this(self):
        self.assertResults({
            "var o = {n: 5, get: function () { return this.n; }}; o.get();": 5.0,
            "var o = {n: 5, get: function () { return this.n; }}; o['get']();": 5.0,
            "function f() { return this.n; } f.call({n: 2});": 2.0,
            "function f(a, b) { return this.n + a + b; } f.apply({n: 1}, [2, 3]);": 6.0,
        })
        self.setUp()
        self.assertIs(self.root.bindings, self.run_js("function f() { return this; } f();"))

    def test_objects_and_arrays(self):
        result = self.run_js("var o = {}; o.a = 1; o['b'] = 2; o['a' + 1] = 3; o;")
        self.assertEqual({"a": 1.0, "b": 2.0, "a1": 3.0}, result)
        self.assertIsInstance(result, JSObject)

        self.assertResults({
            "var a = [1, 2]; a[3] = 4; a;": [1.0, 2.0, UNDEFINED, 4.0],
            "var a = [1, 2, 3]; a.length;": 3.0,
            "var o = {}; o.a;": UNDEFINED,
            "({'x' + 1: 2}).x1;": 2.0,
            "var o = {1: 'one'}; o[1];": "one",
            "[1, 2].map(function (x) { return x * 10; });": [10.0, 20.0],
            "'a-b'.split('-').join('+');": "a+b",
            "var o = {a: {b: {c: 'deep'}}}; o.a.b.c;": "deep",
        })

    def test_console(self):
        self.run_js("console.log('a', 1, [1, 'b'], {k: true}); console.error('oops');")
        self.assertEqual(["a 1 [1, 'b'] {k: true}", "oops"], self.output)

    def test_unknown_name(self):
        self.assertRaises(UnknownNameError, self.run_js, "y = 1;")

        self.setUp()
        with self.assertRaises(UnknownNameError) as context:
            self.run_js("function f() { function g() { z = 1; } g(); } f();")
        self.assertEqual("z", context.exception.name)
        self.assertNotIn("z", self.scope)

    def test_not_callable(self):
        should_fail = ["var f; f();", "missing(1);", "var o = {}; o.m();", "1();", "'s'();"]
        for case in should_fail:
            self.setUp()
            self.assertRaises(NotCallableError, self.run_js, case)

        self.setUp()
        with self.assertRaises(NotCallableError) as context:
            self.run_js("var o = {}; o.m();")
        self.assertEqual("TypeError: o.m is not a function", context.exception.msg)

    def test_arguments_evaluated_before_call_fails(self):
        source = """
        var hits = [];
        function note(x) { hits.push(x); return x; }
        missing(note(1), note(2));
        """
        self.assertRaises(NotCallableError, self.run_js, source)
        self.assertEqual([1.0, 2.0], self.scope.lookup("hits"))

    def test_undefined_property(self):
        should_fail = ["var o; o.x;", "var o = {}; o.a.b;", "var o; o.x = 1;", "null.x;", "undefined[0];"]
        for case in should_fail:
            self.setUp()
            self.assertRaises(UndefinedPropertyError, self.run_js, case)

    def test_throw(self):
        with self.assertRaises(UserThrow) as context:
            self.run_js("throw 'boom';")
        self.assertEqual("boom", context.exception.value)
        self.assertEqual("uncaught exception: boom", context.exception.msg)

        self.setUp()
        with self.assertRaises(UserThrow) as context:
            self.run_js("var e = {code: 1}; function f() { throw e; } f();")
        self.assertIs(self.scope.lookup("e"), context.exception.value)

        self.setUp()
        self.assertRaises(UserThrow, self.run_js, "console.log('before'); throw 1; console.log('after');")
        self.assertEqual(["before"], self.output)

    def test_host_bindings_are_readonly(self):
        self.assertRaises(ReadOnlyNameError, self.run_js, "console = 1;")

        self.setUp()
        self.assertEqual(1.0, self.run_js("var console = 1; console;"))

    def test_host_objects_are_readonly(self):
        should_fail = [
            "function f() { this.console = 5; } f();",
            "function f() { this.x = 7; } f();",
            "function f() { this['__proto__'] = {}; } f();",
            "console.log = 1;",
            "Object.create = null;",
            "require('fs').readFileSync = 1;",
        ]
        for case in should_fail:
            self.setUp()
            self.assertRaises(ReadOnlyNameError, self.run_js, case)

        self.assertEqual({"require", "console", "RegExp", "parseFloat", "Object"}, set(self.root.bindings))
        self.assertIs(UNDEFINED, self.run_js("x;"))
        self.assertIsNone(self.root.bindings.proto)

    def test_deep_recursion(self):
        source = "function r(n) { if (n < 1) { return 0; } return 1 + r(n + -1); } r(1000);"
        self.assertEqual(1000.0, self.run_js(source))

    def test_programs_share_scope(self):
        self.run_js("var shared = 41;")
        self.assertEqual(42.0, self.run_js("shared + 1;"))
        self.assertIs(UNDEFINED, self.evaluator.run(parse("shared;")))

    def test_completion(self):
        self.assertFalse(Completion().abrupt)
        self.assertTrue(Completion(Signal.BREAK).abrupt)
        self.assertEqual(Completion(Signal.RETURN, 1.0), Completion(Signal.RETURN, 1.0))

    def test_describe(self):
        self.assertEqual("a.b(...)", describe(parse("a.b();").stmts[0].expr))
        self.assertEqual("a[...]", describe(parse("a[0];").stmts[0].expr))
        self.assertEqual("'s'", describe(nodes.Lit("s")))

    def test_internal_errors(self):
        self.assertRaises(GenericException, self.evaluator.execute, nodes.Name("x"), self.scope)
        self.assertRaises(GenericException, self.evaluator.evaluate, nodes.Break(), self.scope)


if __name__ == '__main__':
    unittest.main()
