"""Handles interactive/command-line mode for the SHEQ interpreter. Uses cmd as backend."""

import cmd

from sheq.lang.session import Session


class Shell(cmd.Cmd):
    """SHEQ interpreter shell. Every complete line is one independent evaluation."""
    intro = "SHEQ interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.sess.error_handler.fatal = False  # errors are reported, but the shell keeps going

        self._tmp_line = ""

    def default(self, line):
        """Evaluates an arbitrary SHEQ expression."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = Session.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if line:
                self.sess.run(line)
                print(self.sess.pop(), file=self.stdout)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the SHEQ interpreter!\n\n"
              "SHEQ is a small Scheme-like expression language: numbers, strings, booleans,\n"
              "if, lambda and let, plus the primitives + - * / <= equal? substring strlen error.\n"
              "Each line is evaluated on its own; unclosed braces continue onto the next line.\n\n"
              "Try it out by typing '{+ 3 4}'. Next, try\n"
              "'{let {[double = {lambda (x) : {* 2 x}}]} in {double 21} end}'.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line. Inside an unfinished expression the empty line is kept."""
        if self._tmp_line:
            return self.default("")
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
