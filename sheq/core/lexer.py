"""Lexical analysis for SHEQ: source text to an ordered stream of tokens, ending in an explicit EOF token.

Token classes can be loosely defined as follows:

```
<number>  ::= ["-"] <digit>+ ["." <digit>*]     ; "-" only counts when a digit follows it immediately
<string>  ::= '"' (<char> | "\\" <char>)* '"'     ; escapes are consumed, not interpreted
<punct>   ::= "{" | "}" | "(" | ")" | "[" | "]" | ":" | "="
<id>      ::= <id-start> <id-char>*             ; letters, "_" and + - * / < > ? ! (plus digits after the first)
                                                ; "=" continues an id only after "<", ">", "=" or a lone "!"
```

Keywords (if, lambda, let, in, end, true, false) are recognized once the <id> rule has matched. Any other character
aborts tokenization immediately.
"""

from dataclasses import dataclass
from enum import Enum
import string

from sheq.core.arena import TOKEN_SIZE
from sheq.lang.error import LexError


class TokenKind(Enum):
    NUMBER = "number"
    STRING = "string"
    ID = "identifier"

    IF = "if"
    LAMBDA = "lambda"
    LET = "let"
    IN = "in"
    END = "end"
    TRUE = "true"
    FALSE = "false"

    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COLON = ":"
    EQUALS = "="

    EOF = "end of input"


KEYWORDS = {kind.value: kind for kind in (TokenKind.IF, TokenKind.LAMBDA, TokenKind.LET, TokenKind.IN,
                                          TokenKind.END, TokenKind.TRUE, TokenKind.FALSE)}
PUNCTUATION = {kind.value: kind for kind in (TokenKind.LBRACE, TokenKind.RBRACE, TokenKind.LPAREN, TokenKind.RPAREN,
                                             TokenKind.LBRACKET, TokenKind.RBRACKET, TokenKind.COLON,
                                             TokenKind.EQUALS)}

DIGITS = frozenset(string.digits)
WHITESPACE = frozenset(" \t\n\v\f\r")
OPERATORS = frozenset("+-*/<>?!")
ID_START = frozenset(string.ascii_letters + "_") | OPERATORS
ID_CHARS = ID_START | DIGITS
EQUALS_AFTER = frozenset("<>=")  # "=" also continues a leading "!", as in "!="


def to_bytes(text):
    """Encodes source text as UTF-8. Bytes that were not valid UTF-8 on the command line reach Python surrogate-escaped
    and are restored unchanged here.
    """
    return text.encode("utf-8", errors="surrogateescape")


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    col: int

    @property
    def is_keyword(self):
        return self.kind in KEYWORDS.values()

    def describe(self):
        """Human-readable description of this token for error messages."""
        if self.kind is TokenKind.EOF:
            return self.kind.value
        return f"'{self.text}'"


class Lexer:
    """Single-pass tokenizer over one source string. Every token is charged against arena."""

    def __init__(self, arena, source):
        self.arena = arena
        self.source = source

        self.pos = 0
        self.line = 1
        self.col = 1

        self.tokens = []

    def _peek(self, ahead=0):
        pos = self.pos + ahead
        return self.source[pos] if pos < len(self.source) else ""

    def _skip_whitespace(self):
        while self._peek() in WHITESPACE:
            if self._peek() == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1
            self.pos += 1

    def _emit(self, kind, text, line, col):
        try:
            data = to_bytes(text)
        except UnicodeEncodeError as exc:
            raise LexError("cannot encode character {}", ascii(text[exc.start]), line=line, col=col, width=len(text))

        self.arena.allocate(TOKEN_SIZE)
        if data:
            self.arena.store(data)

        token = Token(kind, text, line, col)
        self.tokens.append(token)
        return token

    def _starts_number(self):
        char = self._peek()
        return char in DIGITS or (char == "-" and self._peek(1) in DIGITS)

    def _number(self):
        start = self.pos
        if self._peek() == "-":
            self.pos += 1
        while self._peek() in DIGITS:
            self.pos += 1
        if self._peek() == ".":
            self.pos += 1
            while self._peek() in DIGITS:
                self.pos += 1
        return self.source[start:self.pos]

    def _string(self, line, col):
        start = self.pos
        self.pos += 1  # opening quote

        end_line, end_col = self.line, self.col + 1
        while self._peek() != "\"":
            char = self._peek()
            if not char:
                raise LexError("unterminated string starting with {}", self.source[start:start + 10], line=line,
                               col=col, width=self.pos - start)
            if char == "\\" and self._peek(1):
                self.pos += 1
                end_col += 1
                char = self._peek()

            if char == "\n":
                end_line, end_col = end_line + 1, 1
            else:
                end_col += 1
            self.pos += 1

        self.pos += 1  # closing quote
        self.line, self.col = end_line, end_col + 1
        return self.source[start:self.pos]

    def _identifier(self):
        start = self.pos
        self.pos += 1
        while self._peek():
            char = self._peek()
            if char in ID_CHARS:
                self.pos += 1
            elif char == "=" and (self.source[self.pos - 1] in EQUALS_AFTER or self.source[start:self.pos] == "!"):
                self.pos += 1
            else:
                break
        return self.source[start:self.pos]

    def tokenize(self):
        """Returns the list of tokens in source, always terminated by an EOF token. Raises LexError on an unterminated
        string or an unrecognized character.
        """
        while True:
            self._skip_whitespace()
            if self.pos >= len(self.source):
                break

            line, col = self.line, self.col
            char = self._peek()

            if self._starts_number():
                text = self._number()
                self._emit(TokenKind.NUMBER, text, line, col)
                self.col += len(text)

            elif char == "\"":
                text = self._string(line, col)
                self._emit(TokenKind.STRING, text, line, col)

            elif char in PUNCTUATION:
                self.pos += 1
                self._emit(PUNCTUATION[char], char, line, col)
                self.col += 1

            # "-" not followed by a digit falls through to here, as do all other operators
            elif char in ID_START:
                text = self._identifier()
                self._emit(KEYWORDS.get(text, TokenKind.ID), text, line, col)
                self.col += len(text)

            else:
                raise LexError("unexpected character {}", repr(char), line=line, col=col)

        self._emit(TokenKind.EOF, "", self.line, self.col)
        return self.tokens


def tokenize(arena, source):
    """Tokenizes source, charging every token to arena."""
    return Lexer(arena, source).tokenize()
