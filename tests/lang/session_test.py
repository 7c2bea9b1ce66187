import io
import unittest

from sheq.lang.error import ArenaExhausted, DomainError, ErrorHandler, LexError, ParseError, UnboundError
from sheq.lang.session import Session


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.sess = Session(ErrorHandler(fatal=False, stream=io.StringIO()))

    def test_run(self):
        cases = {
            "{+ 3 4}": "7",
            "{<= 5 3}": "false",
            "{equal? \"a\" \"a\"}": "true",
            "{equal? 1 \"1\"}": "false",
            "{substring \"hello\" 1 3}": "\"el\"",
            "{{lambda (x) : {{lambda (x) : x} 9}} 1}": "9",
            "{/ 10 4}": "2.5",
            "{/ 1 3}": "0.333333333333333",
            "{* 100000000 100000000}": "1e+16",
            "{strlen \"hello\"}": "5",
            "{lambda (x) : x}": "#<procedure>",
            "+": "#<primop>",
            "true": "true",
            "{if {<= 1 2} \"yes\" \"no\"}": "\"yes\"",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.sess.run(case), case)

    def test_number_round_trip(self):
        should_pass = ["0", "1", "-1", "7", "3.5", "0.1", "-2.25", "42", "123456789", "123456789012345", "0.5"]
        for case in should_pass:
            self.assertEqual(case, self.sess.run(case), case)

        cases = {"5.": "5", "007": "7", "1.50": "1.5", "-0.0": "-0", "3.14159265358979323846": "3.14159265358979"}
        for case, expected in cases.items():
            self.assertEqual(expected, self.sess.run(case), case)

    def test_string_serialization(self):
        cases = {
            "\"\"": "\"\"",
            "\"plain\"": "\"plain\"",
            "\"two\nlines\"": "\"two\\nlines\"",
            r'"say \"hi\""': r'"say \\\"hi\\\""',
            r'"back\\slash"': r'"back\\\\slash"',
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.sess.run(case), case)

    def test_let_equivalence(self):
        pairs = [("1", "2"), ("3.5", "-1"), ("{* 2 3}", "{- 0 4}"), ("\"a\"", "\"b\"")]
        for a, b in pairs:
            let = f"{{let {{[x = {a}] [y = {b}]}} in {{equal? x y}} end}}"
            lam = f"{{{{lambda (x y) : {{equal? x y}}}} {a} {b}}}"
            self.assertEqual(self.sess.run(lam), self.sess.run(let), (a, b))

        for a, b in pairs[:3]:
            let = f"{{let {{[x={a}][y={b}]}} in {{+ x y}} end}}"
            lam = f"{{{{lambda (x y) : {{+ x y}}}} {a} {b}}}"
            self.assertEqual(self.sess.run(lam), self.sess.run(let), (a, b))

    def test_failures(self):
        cases = {
            "{+ 1 \"a": LexError,
            "{+ 1 2": ParseError,
            "{+ 1 2} 3": ParseError,
            "{/ 5 0}": DomainError,
            "{substring \"hello\" -1 3}": DomainError,
            "{substring \"hello\" 0 6}": DomainError,
            "{+ {* 2 3} nope}": UnboundError,
        }
        for case, error in cases.items():
            self.assertRaises(error, self.sess.run, case)
        self.assertEqual([], self.sess.results)  # no partial results

    def test_results(self):
        self.sess.run("1")
        self.sess.run("{+ 1 1}")
        self.assertEqual(["1", "2"], self.sess.results)

        self.assertEqual("2", self.sess.pop())
        self.assertEqual(["1"], self.sess.results)

    def test_fresh_arena_per_run(self):
        sess = Session(ErrorHandler(fatal=False, stream=io.StringIO()), arena_capacity=4096)
        for __ in range(200):
            self.assertEqual("7", sess.run("{+ 3 4}"))

    def test_arena_exhaustion(self):
        sess = Session(ErrorHandler(fatal=False, stream=io.StringIO()), arena_capacity=64)
        self.assertRaises(ArenaExhausted, sess.run, "{+ 3 4}")
        self.assertEqual([], sess.results)

    def test_source_registration(self):
        self.sess.run("1")
        self.assertIsNone(self.sess.error_handler.source)

        self.assertRaises(UnboundError, self.sess.run, "nope")
        self.assertEqual("nope", self.sess.error_handler.source)

    def test_preprocess_line(self):
        cases = [
            (("{+ 1", ""), ("{+ 1", True)),
            (("2}", "{+ 1"), ("{+ 1\n2}", False)),
            (("{+ 1 2}  ", ""), ("{+ 1 2}", False)),
            (("", ""), ("", False)),
            (("{let {[x = 1]}", ""), ("{let {[x = 1]}", False)),
            (("{let {[x = 1]", ""), ("{let {[x = 1]", True)),
            (("{strlen \"{\"}", ""), ("{strlen \"{\"}", False)),
            (("{+ 1 2}}", ""), ("{+ 1 2}}", False)),
            (("{strlen \"a  ", ""), ("{strlen \"a  ", True)),
            (("", "{strlen \"a"), ("{strlen \"a\n", True)),
            (("b\"}", "{strlen \"a\n"), ("{strlen \"a\n\nb\"}", False)),
        ]
        for args, expected in cases:
            self.assertEqual(expected, Session.preprocess_line(*args), args)

    def test_open_braces(self):
        cases = {
            "": (0, False),
            "{+ 1 {* 2": (2, False),
            "{strlen \"{\"}": (0, False),
            "{strlen \"}}\"": (1, False),
            r'{strlen "\"{"}': (0, False),
            r'{strlen "\\"}': (0, False),
            "{substring \"ab": (1, True),
            "}": (-1, False),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, Session.open_braces(case), case)

    def test_multiline_string(self):
        line, more = Session.preprocess_line("{strlen \"a  ")
        line, more = Session.preprocess_line("", line)
        self.assertTrue(more)
        line, more = Session.preprocess_line("b\"}", line)
        self.assertFalse(more)
        self.assertEqual("6", self.sess.run(line))  # "a", two spaces, two newlines and "b"

    def test_undecodable_bytes(self):
        cases = {
            "\"\udcff\"": "\"\udcff\"",
            "{strlen \"\udcff\"}": "1",
            "{substring \"h\udcffi\" 1 2}": "\"\udcff\"",
            "{equal? \"\udcff\" \"\udcfe\"}": "false",
            "{substring \"é\" 0 1}": "\"\udcc3\"",  # half of a two-byte character
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.sess.run(case), case)

        self.assertRaises(LexError, self.sess.run, "\"\ud800\"")


if __name__ == '__main__':
    unittest.main()
