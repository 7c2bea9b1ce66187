"""Recursive-descent parser for SHEQ, with single-token lookahead.

```
<program>     ::= <expr> EOF
<expr>        ::= NUMBER | STRING | ID | "true" | "false" | "{" <form> "}"
<form>        ::= <if> | <lambda> | <let> | <application>
<if>          ::= "if" <expr> <expr> <expr>
<lambda>      ::= "lambda" "(" ID* ")" ":" <expr>
<let>         ::= "let" "{" ("[" ID "=" <expr> "]")* "}" "in" <expr> "end"
<application> ::= <expr> <expr>*                 ; first <expr> is the callee, the rest are arguments
```

`let` never reaches the evaluator: it is desugared here into an immediately applied lambda, so
{let {[x = 1] [y = 2]} in {+ x y} end} builds exactly the same tree as {{lambda (x y) : {+ x y}} 1 2}.

The first unexpected or missing token aborts the whole parse with a ParseError; there is no recovery.
"""

from sheq.core.lexer import TokenKind, to_bytes
from sheq.core.tree import Application, Identifier, If, Lambda, Number, String
from sheq.lang.error import ParseError


class Parser:
    """Parses a token stream (as produced by the lexer) into a tree allocated in arena."""

    def __init__(self, arena, tokens):
        if not tokens or tokens[-1].kind is not TokenKind.EOF:
            raise ParseError("token stream must end with end of input", internal=True)

        self.arena = arena
        self.tokens = tokens
        self.current = 0

    def peek(self):
        return self.tokens[self.current]

    def advance(self):
        """Consumes and returns the current token. EOF is never consumed past."""
        token = self.tokens[self.current]
        if self.current < len(self.tokens) - 1:
            self.current += 1
        return token

    def match(self, kind):
        if self.peek().kind is kind:
            self.advance()
            return True
        return False

    def expect(self, kind, context):
        """Consumes a token of kind, or raises a ParseError located at the offending token."""
        token = self.peek()
        if token.kind is not kind:
            raise self.error(f"{context}: expected {{}}, got {{}}", token, f"'{kind.value}'")
        return self.advance()

    @staticmethod
    def error(msg, token, *exprs):
        """ParseError at token. The template's fields take exprs, then the description of token."""
        exprs = (*exprs, token.describe())
        return ParseError(msg, exprs, line=token.line, col=token.col, width=len(token.text))

    def parse(self):
        """Parses exactly one expression followed by the end of input."""
        node = self.parse_expr()

        token = self.peek()
        if token.kind is not TokenKind.EOF:
            raise self.error("unexpected {} after the end of the expression", token)
        return node

    def parse_expr(self):
        token = self.peek()

        if token.kind is TokenKind.LBRACE:
            return self._parse_braced()

        elif token.kind is TokenKind.NUMBER:
            self.advance()
            return Number.make(self.arena, float(token.text))

        elif token.kind is TokenKind.STRING:
            self.advance()
            return String.make(self.arena, to_bytes(token.text[1:-1]))  # strip surrounding quotes

        elif token.kind in (TokenKind.ID, TokenKind.TRUE, TokenKind.FALSE):
            self.advance()
            return Identifier.make(self.arena, token.text)

        raise self.error("unexpected {}", token)

    def _parse_braced(self):
        brace = self.expect(TokenKind.LBRACE, "expression")

        if self.match(TokenKind.IF):
            node = self._parse_if()
        elif self.match(TokenKind.LAMBDA):
            node = self._parse_lambda()
        elif self.match(TokenKind.LET):
            node = self._parse_let()
        else:
            node = self._parse_application()

        if self.peek().kind is not TokenKind.RBRACE:
            raise self.error(f"unexpected {{}} in form opened at {brace.line}:{brace.col}", self.peek())
        self.advance()
        return node

    def _parse_if(self):
        test = self.parse_expr()
        then = self.parse_expr()
        orelse = self.parse_expr()
        return If.make(self.arena, test, then, orelse)

    def _parse_name(self, seen, what):
        """Parses one binding name, which must be an identifier that is neither a keyword nor already in seen."""
        token = self.peek()
        if token.is_keyword:
            raise self.error(f"keyword {{}} cannot be a {what} name", token)
        elif token.kind is not TokenKind.ID:
            raise self.error(f"expected {what} name, got {{}}", token)
        elif token.text in seen:
            raise self.error(f"duplicate {what} {{}}", token)

        self.advance()
        seen.append(token.text)
        return token.text

    def _parse_lambda(self):
        self.expect(TokenKind.LPAREN, "lambda")

        params = []
        while not self.match(TokenKind.RPAREN):
            self._parse_name(params, "parameter")

        self.expect(TokenKind.COLON, "lambda")
        body = self.parse_expr()
        return Lambda.make(self.arena, tuple(params), body)

    def _parse_let(self):
        """Desugars {let {[name = val] ...} in body end} into {{lambda (name ...) : body} val ...}."""
        self.expect(TokenKind.LBRACE, "let")

        names = []
        vals = []
        while self.match(TokenKind.LBRACKET):
            self._parse_name(names, "binding")
            self.expect(TokenKind.EQUALS, "let binding")
            vals.append(self.parse_expr())
            self.expect(TokenKind.RBRACKET, "let binding")

        self.expect(TokenKind.RBRACE, "let")
        self.expect(TokenKind.IN, "let")
        body = self.parse_expr()
        self.expect(TokenKind.END, "let")

        func = Lambda.make(self.arena, tuple(names), body)
        return Application.make(self.arena, (func, *vals))

    def _parse_application(self):
        func = self.parse_expr()

        args = []
        while self.peek().kind not in (TokenKind.RBRACE, TokenKind.EOF):
            args.append(self.parse_expr())
        return Application.make(self.arena, (func, *args))


def parse(arena, tokens):
    """Parses tokens into a single expression tree, allocated in arena."""
    return Parser(arena, tokens).parse()
