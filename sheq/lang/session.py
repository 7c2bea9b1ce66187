"""Session control for SHEQ. Runs the whole pipeline (lex, parse, evaluate, serialize) on one source expression, either
from the command line or from each line of the interactive shell.
"""

from sheq.core.arena import Arena
from sheq.core.evaluator import interp
from sheq.core.lexer import tokenize
from sheq.core.parser import parse
from sheq.core.primitives import make_top_env
from sheq.core.values import serialize


class Session:
    """Governs SHEQ evaluations. Each run gets its own arena, so nothing is shared between runs."""
    ARENA_CAPACITY = Arena.DEFAULT_CAPACITY  # bytes per evaluation
    RECURSION_LIMIT = 10000                  # default for --recursion-limit

    def __init__(self, error_handler, arena_capacity=ARENA_CAPACITY):
        self.error_handler = error_handler
        self.arena_capacity = arena_capacity

        self.results = []  # serialized results of successful runs, oldest first

    @staticmethod
    def open_braces(source):
        """Returns how many braces are left open in source and whether source ends inside a string literal. Braces in
        string literals are not counted, and a backslash in a string skips the next character, as in the lexer.
        """
        depth = 0
        in_string = escaped = False
        for char in source:
            if escaped:
                escaped = False
            elif in_string:
                if char == "\\":
                    escaped = True
                elif char == "\"":
                    in_string = False
            elif char == "\"":
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
        return depth, in_string

    @staticmethod
    def preprocess_line(line, prev=""):
        """Joins line onto prev (an unfinished expression from earlier lines). Returns the joined text and whether the
        expression is still unfinished (unclosed braces or an open string), in which case more lines are needed before
        calling run.
        """
        line = prev + "\n" + line if prev else line

        depth, in_string = Session.open_braces(line)
        if in_string:
            return line, True  # trailing whitespace belongs to the string

        line = line.rstrip()
        return line, depth > 0

    def evaluate(self, source):
        """Evaluates source against a fresh arena and root environment. Returns the resulting Value. Raises a
        GenericException on any failure; the arena is released either way.
        """
        with Arena(self.arena_capacity) as arena:
            tokens = tokenize(arena, source)
            tree = parse(arena, tokens)
            return interp(tree, make_top_env(arena), arena)

    def run(self, source):
        """Evaluates and serializes source. The result is also kept in self.results."""
        self.error_handler.register_source(source)  # in case error is raised

        result = serialize(self.evaluate(source))
        self.results.append(result)

        self.error_handler.remove_source()  # error was not raised
        return result

    def pop(self):
        """Returns and forgets the most recent result."""
        return self.results.pop()
