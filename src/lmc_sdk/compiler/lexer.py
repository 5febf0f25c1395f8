"""
Pseudocode Lexer (Tokenizer)
============================

This module implements the lexer for the LMC pseudocode language.
It converts source text into a stream of tokens for the parser.

The language is line oriented: every statement ends at a newline, so
unlike most lexers this one emits NEWLINE tokens rather than treating
line breaks as whitespace.

Token Categories
----------------
- Keywords: if, else, endif, while, endwhile, break, input, output,
  print, true
- Identifiers: variable names
- Numbers: decimal literals in the range 0-999
- Operators: + - = == != < > <= >=
- Delimiters: ( ) and NEWLINE

Comments
--------
- Single-line: // comment

Example Usage
-------------
>>> from lmc_sdk.compiler.lexer import Lexer
>>> for token in Lexer("input a\\nprint a + 1", "demo.lmc").tokenize():
...     print(token)
Token(INPUT, 'input', 1:1)
Token(IDENTIFIER, 'a', 1:7)
Token(NEWLINE, 1:8)
Token(OUTPUT, 'print', 2:1)
Token(IDENTIFIER, 'a', 2:7)
Token(PLUS, '+', 2:9)
Token(NUMBER, 1, 2:11)
Token(NEWLINE, 2:12)
Token(EOF, 2:12)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from lmc_sdk.errors import SourceLocation
from lmc_sdk.compiler.errors import InvalidCharacterError, NumberRangeError


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the pseudocode language."""

    # === Structural Tokens ===
    EOF = auto()
    NEWLINE = auto()        # Statement terminator

    # === Identifiers and Literals ===
    IDENTIFIER = auto()
    NUMBER = auto()

    # === Keywords ===
    IF = auto()
    ELSE = auto()
    ENDIF = auto()
    WHILE = auto()
    ENDWHILE = auto()
    BREAK = auto()
    INPUT = auto()
    OUTPUT = auto()         # output / print
    TRUE = auto()

    # === Arithmetic Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    ASSIGN = auto()         # =

    # === Comparison Operators ===
    EQ = auto()             # ==
    NE = auto()             # !=
    LT = auto()             # <
    GT = auto()             # >
    LE = auto()             # <=
    GE = auto()             # >=

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )


KEYWORDS: dict[str, TokenType] = {
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "endif": TokenType.ENDIF,
    "while": TokenType.WHILE,
    "endwhile": TokenType.ENDWHILE,
    "break": TokenType.BREAK,
    "input": TokenType.INPUT,
    "output": TokenType.OUTPUT,
    "print": TokenType.OUTPUT,
    "true": TokenType.TRUE,
}

COMPARISON_TOKENS = frozenset({
    TokenType.EQ,
    TokenType.NE,
    TokenType.LT,
    TokenType.GT,
    TokenType.LE,
    TokenType.GE,
})

# Largest value a mailbox can hold
MAX_VALUE = 999


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from pseudocode source.

    Attributes:
        type: The TokenType classification
        value: Token text, or the integer value for NUMBER tokens
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | None
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def describe(self) -> str:
        """Text shown for this token in error messages."""
        if self.type == TokenType.NEWLINE:
            return "end of line"
        if self.type == TokenType.EOF:
            return "end of file"
        return str(self.value)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes pseudocode source.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects, always ending with NEWLINE then EOF

        Raises:
            InvalidCharacterError: On a character no token can start with
            NumberRangeError: On a literal larger than 999
        """
        last_type: Optional[TokenType] = None

        while True:
            self._skip_blanks_and_comments()
            if self._at_end():
                break

            token = self._scan_token()
            last_type = token.type
            yield token

        # The final statement may lack a trailing newline
        if last_type not in (None, TokenType.NEWLINE):
            yield self._make_token(TokenType.NEWLINE, None)
        yield self._make_token(TokenType.EOF, None)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume the current character, keeping line/column up to date."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _match(self, expected: str) -> bool:
        if self._peek() == expected:
            self._advance()
            return True
        return False

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | None,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _current_line_text(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end].rstrip("\r")

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_blanks_and_comments(self) -> None:
        """Skip spaces, tabs and comments, but not newlines."""
        while not self._at_end():
            char = self._peek()

            if char in " \t\r":
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            break

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        start_line = self._line
        start_column = self._column
        char = self._peek()

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.NEWLINE, None, start_line, start_column)

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        self._advance()

        if char == "=":
            if self._match("="):
                return self._make_token(TokenType.EQ, "==", start_line, start_column)
            return self._make_token(TokenType.ASSIGN, "=", start_line, start_column)

        if char == "!" and self._match("="):
            return self._make_token(TokenType.NE, "!=", start_line, start_column)

        if char == "<":
            if self._match("="):
                return self._make_token(TokenType.LE, "<=", start_line, start_column)
            return self._make_token(TokenType.LT, "<", start_line, start_column)

        if char == ">":
            if self._match("="):
                return self._make_token(TokenType.GE, ">=", start_line, start_column)
            return self._make_token(TokenType.GT, ">", start_line, start_column)

        single_tokens = {
            "+": TokenType.PLUS,
            "-": TokenType.MINUS,
            "(": TokenType.LPAREN,
            ")": TokenType.RPAREN,
        }
        if char in single_tokens:
            return self._make_token(single_tokens[char], char, start_line, start_column)

        raise InvalidCharacterError(
            char,
            SourceLocation(self.filename, start_line, start_column),
            self._current_line_text(),
        )

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        digits = []
        while self._peek() and self._peek() in string.digits:
            digits.append(self._advance())

        value = int("".join(digits))
        if value > MAX_VALUE:
            raise NumberRangeError(
                value,
                SourceLocation(self.filename, start_line, start_column),
                self._current_line_text(),
            )
        return self._make_token(TokenType.NUMBER, value, start_line, start_column)

    def _scan_identifier(self, start_line: int, start_column: int) -> Token:
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        text = "".join(chars)
        token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)
        return self._make_token(token_type, text, start_line, start_column)


def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize source into a list (convenience wrapper)."""
    return list(Lexer(source, filename).tokenize())
