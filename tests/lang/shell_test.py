import io
import re
import unittest

from jsi.lang.error import ErrorHandler
from jsi.lang.session import Session
from jsi.lang.shell import Shell

ANSI = re.compile(r"\x1b\[[0-9;]*m")

class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.output = []
        self.stdout = io.StringIO()
        sess = Session(ErrorHandler(out=self.output.append), cmd_line=True, out=self.output.append)
        self.shell = Shell(sess, stdout=self.stdout)

    def test_results(self):
        for line in ["var x = 2;", "x * 3;", "'text';", "[x, {a: null}];", "undefined;"]:
            self.shell.onecmd(line)
        self.assertEqual("6\n'text'\n[2, {a: null}]\n", self.stdout.getvalue())

    def test_continuation(self):
        self.shell.onecmd("function f() {")
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)
        self.shell.onecmd("")
        self.shell.onecmd("return 'inner';")
        self.shell.onecmd("}")
        self.assertEqual(Shell.prompt, self.shell.prompt)

        self.shell.onecmd("f();")
        self.assertEqual("'inner'\n", self.stdout.getvalue())

    def test_errors_are_not_fatal(self):
        self.shell.onecmd("y = 1;")
        self.shell.onecmd("var = ;")
        self.shell.onecmd("console.log('still here');")

        output = "\n".join(ANSI.sub("", line) for line in self.output)
        self.assertIn("error: unknown name 'y'", output)
        self.assertIn("error: name expected, found '=' at 1", output)
        self.assertEqual("still here", self.output[-1])

    def test_commands(self):
        self.shell.onecmd("help")
        self.assertIn("Welcome to the jsi interpreter!", self.stdout.getvalue())
        self.assertFalse(self.shell.onecmd(""))
        self.assertTrue(self.shell.onecmd("exit"))
        self.assertTrue(self.shell.onecmd("EOF"))

    def test_cmdloop(self):
        stdin = io.StringIO("var a = 5;\na + 1;\n")
        shell = Shell(self.shell.sess, stdin=stdin, stdout=self.stdout)
        shell.use_rawinput = False
        shell.cmdloop()
        self.assertIn("6\n", self.stdout.getvalue())


if __name__ == '__main__':
    unittest.main()
