import io
import unittest

from sheq.lang.error import ErrorHandler
from sheq.lang.session import Session
from sheq.lang.shell import Shell


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.shell = Shell(Session(ErrorHandler(stream=self.err)), stdout=self.out)

    def test_not_fatal(self):
        self.assertFalse(self.shell.sess.error_handler.fatal)

    def test_results(self):
        cases = {
            "{+ 3 4}": "7\n",
            "{let {[x = 3] [y = 4]} in {* x y} end}": "12\n",
            "\"hi\"": "\"hi\"\n",
            "{lambda (x) : x}": "#<procedure>\n",
        }
        for case, expected in cases.items():
            self.out.seek(0)
            self.out.truncate()
            self.assertFalse(self.shell.onecmd(case))
            self.assertEqual(expected, self.out.getvalue(), case)
        self.assertEqual([], self.shell.sess.results)  # shown results are not kept

    def test_continuation(self):
        self.shell.onecmd("{let {[x = 3]}")
        self.assertEqual(". ", self.shell.prompt)
        self.shell.onecmd(" in {+ x 1}")
        self.assertEqual(". ", self.shell.prompt)
        self.assertEqual("", self.out.getvalue())

        self.shell.onecmd("end}")
        self.assertEqual("> ", self.shell.prompt)
        self.assertEqual("4\n", self.out.getvalue())

    def test_braces_in_strings(self):
        cases = {"{strlen \"{\"}": "1\n", "{strlen \"}\"}": "1\n", "{strlen \"{{\\\"\"}": "4\n"}
        for case, expected in cases.items():
            self.out.seek(0)
            self.out.truncate()
            self.shell.onecmd(case)
            self.assertEqual(expected, self.out.getvalue(), case)
            self.assertEqual("> ", self.shell.prompt, case)

    def test_multiline_string(self):
        self.shell.onecmd("{strlen \"a")
        self.assertEqual(". ", self.shell.prompt)
        self.shell.onecmd("")  # kept as part of the string
        self.assertEqual(". ", self.shell.prompt)

        self.shell.onecmd("b\"}")
        self.assertEqual("> ", self.shell.prompt)
        self.assertEqual("4\n", self.out.getvalue())

    def test_errors_do_not_exit(self):
        should_fail = ["{/ 5 0}", "nope", "{+ 1 2} 3", "{1 2}"]
        for case in should_fail:
            self.assertFalse(self.shell.onecmd(case))
        self.assertEqual("", self.out.getvalue())
        for fragment in ("division by zero", "is not bound", "after the end of the expression", "cannot apply"):
            self.assertIn(fragment, self.err.getvalue())

        self.shell.onecmd("{+ 1 1}")
        self.assertEqual("2\n", self.out.getvalue())

    def test_empty_line(self):
        self.assertFalse(self.shell.onecmd(""))
        self.assertEqual("", self.out.getvalue())
        self.assertEqual("", self.err.getvalue())

    def test_help(self):
        self.shell.onecmd("help")
        self.assertIn("Welcome", self.out.getvalue())

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))
        self.assertTrue(self.shell.onecmd("EOF"))

    def test_cmdloop(self):
        shell = Shell(Session(ErrorHandler(stream=self.err)), stdin=io.StringIO("{+ 3 4}\n{- 1\n2}\nexit\n"),
                      stdout=self.out)
        shell.use_rawinput = False
        shell.cmdloop(intro="")

        self.assertIn("7\n", self.out.getvalue())
        self.assertIn("-1\n", self.out.getvalue())


if __name__ == '__main__':
    unittest.main()
