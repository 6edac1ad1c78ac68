"""Lexical analysis for the luna language. Converts raw source text into an ordered sequence of tokens, one token at a
time, by advancing a cursor over the source.

Token rules can be loosely defined as follows:

```
<whitespace>  ::= " " | "\\t" | "\\r" | "\\n"            ; skipped
<comment>     ::= "//" <char>* "\\n"                    ; skipped
                | "/*" <char>* "*/"                     ; skipped, an unterminated block comment runs to end of input
<string>      ::= "'" <char>* "'" | '"' <char>* '"'     ; escapes: \\\\ \\' \\" \\n \\t
<number>      ::= <digit>+ ("." <digit>*)?              ; a second "." terminates the number
<identifier>  ::= (<letter> | "_") (<letter> | <digit> | "_")*
<symbol>      ::= "==" | "!=" | "<=" | ">=" | "&&" | "||" ; longest match first
                | "+" | "-" | "*" | "/" | "%" | "=" | "<" | ">" | "!" | ";" | "," | "." | "(" | ")"
                | "{" | "}" | "[" | "]" | ":"
```
"""

from dataclasses import dataclass
from enum import Enum

from luna.lang.error import LexError


class TokenKind(Enum):
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    STRING = "string"
    SYMBOL = "symbol"
    IMPORT = "import"
    END_OF_INPUT = "end of input"


@dataclass(frozen=True)
class Token:
    """Minimal lexical unit. position is the offset of the token's first character in the source text."""
    kind: TokenKind
    text: str
    position: int

    def is_(self, kind, text=None):
        """Whether or not this token is of kind (and has text, if given)."""
        return self.kind is kind and (text is None or self.text == text)

    def describe(self):
        """Human-readable form of this token, used in error messages."""
        if self.kind is TokenKind.END_OF_INPUT:
            return "end of input"
        if self.kind is TokenKind.STRING:
            return repr(self.text)
        return self.text

    def __repr__(self):
        return f"Token({self.kind.name}, {self.text!r}, {self.position})"


class Lexer:
    """Tokenizes luna source text on demand. The cursor only ever moves forward."""
    KEYWORDS = frozenset([
        "if", "while", "func", "return", "end", "true", "false", "null", "print", "input",
        "var", "let", "const", "break", "continue", "import", "export", "loop"
    ])
    MULTI_SYMBOLS = ("==", "!=", "<=", ">=", "&&", "||")  # matched before SYMBOLS
    SYMBOLS = "+-*/%=<>!;,.(){}[]:"
    QUOTES = "'\""
    ESCAPES = {"\\": "\\", "'": "'", "\"": "\"", "n": "\n", "t": "\t"}

    def __init__(self, source):
        self.source = source
        self.pos = 0

    @staticmethod
    def is_digit(char):
        """Whether or not char is an ASCII digit. Other unicode digits are not valid in numbers."""
        return "0" <= char <= "9" and len(char) == 1

    def peek(self, offset=0):
        """Returns the character offset characters past the cursor, or "" at end of input."""
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def advance(self, count=1):
        """Moves the cursor forward by count characters and returns the characters passed over."""
        chars = self.source[self.pos:self.pos + count]
        self.pos = min(self.pos + count, len(self.source))
        return chars

    def skip_ignored(self):
        """Skips whitespace, line comments and block comments until the next significant character."""
        while True:
            while self.peek().isspace():
                self.advance()

            if self.peek() == "/" and self.peek(1) == "/":
                end = self.source.find("\n", self.pos)
                self.pos = len(self.source) if end == -1 else end
            elif self.peek() == "/" and self.peek(1) == "*":
                end = self.source.find("*/", self.pos + 2)
                self.pos = len(self.source) if end == -1 else end + 2
            else:
                return

    def next_token(self):
        """Returns the next Token. Once the source is exhausted, every call returns an END_OF_INPUT token."""
        self.skip_ignored()

        start = self.pos
        char = self.peek()

        if not char:
            return Token(TokenKind.END_OF_INPUT, "", start)
        elif char in Lexer.QUOTES:
            return self._string(start)
        elif Lexer.is_digit(char):
            return self._number(start)
        elif char.isalpha() or char == "_":
            return self._word(start)

        for symbol in Lexer.MULTI_SYMBOLS:
            if self.source.startswith(symbol, start):
                return Token(TokenKind.SYMBOL, self.advance(len(symbol)), start)
        if char in Lexer.SYMBOLS:
            return Token(TokenKind.SYMBOL, self.advance(), start)

        raise LexError("unknown token '{}' at position {}", (char, str(start)), kind=LexError.Kind.UNKNOWN_TOKEN,
                       position=start, actual=char)

    def tokenize(self):
        """Drains the lexer. Returns a list of Tokens, always ending with an END_OF_INPUT token."""
        tokens = [self.next_token()]
        while not tokens[-1].is_(TokenKind.END_OF_INPUT):
            tokens.append(self.next_token())
        return tokens

    def _string(self, start):
        quote = self.advance()
        chars = []

        while True:
            char = self.advance()
            if not char:
                raise LexError("unterminated string starting at position {}", str(start),
                               kind=LexError.Kind.UNTERMINATED_STRING, position=start, actual=quote)
            elif char == quote:
                return Token(TokenKind.STRING, "".join(chars), start)
            elif char == "\\":
                escaped = self.advance()
                if not escaped:
                    continue  # next iteration reports the unterminated string
                chars.append(Lexer.ESCAPES.get(escaped, "\\" + escaped))
            else:
                chars.append(char)

    def _number(self, start):
        seen_point = False
        while True:
            char = self.peek()
            if Lexer.is_digit(char):
                self.advance()
            elif char == "." and not seen_point:
                seen_point = True
                self.advance()
            else:
                break
        return Token(TokenKind.NUMBER, self.source[start:self.pos], start)

    def _word(self, start):
        while self.peek().isalnum() or self.peek() == "_":
            self.advance()
        word = self.source[start:self.pos]

        if word == "import":
            return Token(TokenKind.IMPORT, word, start)
        elif word in Lexer.KEYWORDS:
            return Token(TokenKind.KEYWORD, word, start)
        return Token(TokenKind.IDENTIFIER, word, start)
