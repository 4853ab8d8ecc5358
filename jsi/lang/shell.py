"""Interactive mode for the jsi interpreter, built on cmd. Every entry runs in the same program scope, so
declarations made at the prompt stay visible to later entries.
"""

import cmd

from jsi.runtime.values import UNDEFINED, to_display


class Shell(cmd.Cmd):
    """jsi read-eval-print loop."""
    intro = "jsi :: good parts JavaScript interpreter, Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # shown while brackets are still open
    main_prompt = "> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._pending = ""  # source typed so far for an unfinished entry

    def default(self, line):
        """Runs a complete entry, or buffers it until its brackets balance."""
        with self.sess.error_handler:  # cmd.Cmd would leave the loop on any exception
            source = self._pending + line + "\n"

            if not self.sess.is_complete(source):
                self._pending = source
                self.prompt = self.secondary_prompt
                return

            self._pending = ""
            self.prompt = self.main_prompt

            if not source.strip():
                return

            self.sess.add(source)
            self.sess.run()

            result = self.sess.pop()
            if result is not UNDEFINED:
                self.stdout.write(to_display(result, nested=True) + "\n")

    def onecmd(self, line):
        """Continuation lines go straight to default, so that `help` or `exit` inside a block are not commands."""
        if self._pending:
            return self.default(line)
        return super().onecmd(line)

    def do_help(self, arg):
        """Prints a short tour of the language."""
        self.stdout.write(
            "Welcome to the jsi interpreter!\n\n"
            "jsi runs a small subset of JavaScript: var, function, if/else, while, break,\n"
            "return and throw; ===, <, +, *, unary - and !; arrays, objects and regexps.\n"
            "Statements end with ';'. Unfinished brackets continue on the next line.\n\n"
            "Host bindings: require, console, RegExp, parseFloat and Object.\n"
            "Try 'var square = function (x) { return x * x; };' and then 'square(7);'.\n")

    def emptyline(self):
        """An empty entry does nothing (cmd would repeat the last one)."""
        return ""

    def do_EOF(self, arg):
        self.stdout.write("\n")
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Leaves the shell."""
        return True
