"""
BASIC Lexer (Tokenizer)
=======================

This module implements the lexer for the BASIC dialect accepted by
bb2web. It converts source text into a flat list of tokens terminated
by a single EOF token.

Token Categories
----------------
- Keywords: Global, Local, If, Then, While, For, Select, Function, ...
  (matched case-insensitively)
- Identifiers: variable, function and runtime command names
- Numbers: 42, 3.14, .5, 1e3, 2.5E-2
- Strings: "double quoted", backslash escapes the next character
- Operators: + - * / ^ = <> < > <= >= := ( ) , : [ ]
- Type suffixes: % (integer), # (float), $ (string), emitted as separate
  operator tokens right after an identifier
- Line breaks: significant, they separate statements

Comments
--------
- Line comment: ' to end of line
- Block comment: Rem ... End Rem (runs to end of input when unterminated)

Runtime command names (Graphics, Plot, Cls, ...) are NOT keywords. They
lex as ordinary identifiers and are only recognized by the emitter.

Example Usage
-------------
>>> from bb2web.transpiler.lexer import BasicLexer
>>> for token in BasicLexer('x% = 1', "demo.bb").tokenize():
...     print(token)
Token(IDENTIFIER, 'x', 1:1)
Token(OPERATOR, '%', 1:2)
Token(OPERATOR, '=', 1:4)
Token(NUMBER, '1', 1:6)
Token(EOF, 1:7)
"""

from dataclasses import dataclass
from enum import Enum, auto
import re
import string

from bb2web.errors import SourceLocation
from bb2web.transpiler.errors import InvalidCharacterError


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token kinds for the BASIC dialect.

    Keywords share one kind; the parser tells them apart by their
    upper-cased text, which keeps keyword matching case-insensitive.
    """
    IDENTIFIER = auto()     # Variable/function/command names
    NUMBER = auto()         # Numeric literals, raw text kept
    STRING = auto()         # String literals, escapes resolved
    KEYWORD = auto()        # Reserved words
    OPERATOR = auto()       # Operators, punctuation and type suffixes
    NEWLINE = auto()        # Statement separator
    EOF = auto()            # End of input


# Closed keyword set (upper case)
KEYWORDS = frozenset({
    "GLOBAL", "LOCAL", "CONST", "DIM",
    "IF", "THEN", "ELSE", "ELSEIF", "ENDIF",
    "WHILE", "WEND",
    "REPEAT", "UNTIL",
    "FOR", "TO", "STEP", "NEXT",
    "SELECT", "CASE", "DEFAULT",
    "END", "FUNCTION", "RETURN",
    "NOT", "AND", "OR", "MOD",
})

# Characters that may follow an identifier as its type suffix
TYPE_SUFFIXES = "%#$"


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class BasicToken:
    """
    A single token from BASIC source code.

    Attributes:
        type: The TokenType classification
        value: The token text (decoded contents for strings)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.type in (TokenType.EOF, TokenType.NEWLINE):
            return f"Token({self.type.name}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def upper(self) -> str:
        """Upper-cased text used for case-insensitive matching."""
        return self.value.upper()

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_keyword(self, *names: str) -> bool:
        """Return True if this is one of the given keywords."""
        return self.type == TokenType.KEYWORD and self.upper in names

    def is_operator(self, *symbols: str) -> bool:
        """Return True if this is one of the given operators."""
        return self.type == TokenType.OPERATOR and self.value in symbols


# =============================================================================
# Lexer Implementation
# =============================================================================

class BasicLexer:
    """
    Tokenizes BASIC source code.

    Usage:
        lexer = BasicLexer(source_text, filename)
        tokens = lexer.tokenize()

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    # Integer part, fraction or both, then an optional exponent
    NUMBER_PATTERN = re.compile(r"(?:[0-9]+\.[0-9]*|[0-9]*\.[0-9]+|[0-9]+)(?:[eE][+-]?[0-9]+)?")

    # Two-character operators are tried before single characters
    DOUBLE_OPERATORS = ("<>", "<=", ">=", ":=")
    SINGLE_OPERATORS = "+-*/^=(),:[]<>"

    BLOCK_COMMENT_END = re.compile(r"END REM", re.IGNORECASE)

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        # Current position in source
        self._pos = 0
        self._line = 1
        self._column = 1

        # Track line start position for error reporting
        self._line_start_pos = 0

        self._tokens: list[BasicToken] = []

    def tokenize(self) -> list[BasicToken]:
        """
        Split the whole source into tokens.

        Returns:
            List of tokens ending with exactly one EOF token

        Raises:
            InvalidCharacterError: On a character no token can start with
        """
        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0
        self._tokens = []

        while not self._at_end():
            char = self._peek()

            if self._at_block_comment():
                self._skip_block_comment()
            elif char == "'":
                self._skip_line_comment()
            elif char in " \t\r":
                self._advance()
            elif char == "\n":
                self._add_token(TokenType.NEWLINE, "\n", self._line, self._column)
                self._advance()
            else:
                self._scan_token()

        self._add_token(TokenType.EOF, "", self._line, self._column)
        return self._tokens

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Look ahead without consuming; empty string past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume one character, keeping line and column current."""
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

    def _advance_by(self, count: int) -> str:
        return "".join(self._advance() for _ in range(count))

    def _add_token(self, token_type: TokenType, value: str, line: int, column: int) -> None:
        self._tokens.append(BasicToken(token_type, value, line, column, self.filename))

    # =========================================================================
    # Comment Handling
    # =========================================================================

    def _at_block_comment(self) -> bool:
        """True when a standalone 'Rem' word starts here."""
        if self.source[self._pos:self._pos + 3].upper() != "REM":
            return False
        # Identifiers such as 'Remaining' are not comments
        if self._pos > 0 and self.source[self._pos - 1] in self.IDENT_CHARS:
            return False
        following = self._peek(3)
        return following == "" or following not in self.IDENT_CHARS

    def _skip_block_comment(self) -> None:
        """Skip 'Rem ... End Rem', or everything left if never closed."""
        self._advance_by(3)
        match = self.BLOCK_COMMENT_END.search(self.source, self._pos)
        if match is None:
            self._advance_by(len(self.source) - self._pos)
        else:
            self._advance_by(match.end() - self._pos)

    def _skip_line_comment(self) -> None:
        """Skip to the line break; the break itself is still tokenized."""
        while not self._at_end() and self._peek() != "\n":
            self._advance()

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> None:
        start_line = self._line
        start_column = self._column
        char = self._peek()

        if char == '"':
            self._scan_string(start_line, start_column)
            return

        match = self.NUMBER_PATTERN.match(self.source, self._pos)
        if match:
            self._add_token(TokenType.NUMBER, self._advance_by(len(match.group())),
                            start_line, start_column)
            return

        if char in self.IDENT_START:
            self._scan_identifier(start_line, start_column)
            return

        self._scan_operator(start_line, start_column)

    def _scan_string(self, start_line: int, start_column: int) -> None:
        """
        Scan a double-quoted string literal.

        A backslash makes the next character literal, so "\\n" decodes to
        "n". A string still open at end of input ends there silently.
        """
        self._advance()  # opening quote
        chars = []
        while not self._at_end():
            char = self._advance()
            if char == "\\":
                chars.append(self._advance())
            elif char == '"':
                break
            else:
                chars.append(char)

        self._add_token(TokenType.STRING, "".join(chars), start_line, start_column)

    def _scan_identifier(self, start_line: int, start_column: int) -> None:
        """
        Scan an identifier or keyword, plus its type suffix if present.

        The suffix becomes its own OPERATOR token; binding it to the name
        is left to the parser.
        """
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())
        name = "".join(chars)

        token_type = TokenType.KEYWORD if name.upper() in KEYWORDS else TokenType.IDENTIFIER
        self._add_token(token_type, name, start_line, start_column)

        if self._peek() and self._peek() in TYPE_SUFFIXES:
            suffix_column = self._column
            self._add_token(TokenType.OPERATOR, self._advance(), self._line, suffix_column)

    def _scan_operator(self, start_line: int, start_column: int) -> None:
        pair = self.source[self._pos:self._pos + 2]
        if pair in self.DOUBLE_OPERATORS:
            self._add_token(TokenType.OPERATOR, self._advance_by(2), start_line, start_column)
            return

        char = self._peek()
        if char in self.SINGLE_OPERATORS:
            self._add_token(TokenType.OPERATOR, self._advance(), start_line, start_column)
            return

        raise InvalidCharacterError(
            char,
            SourceLocation(self.filename, start_line, start_column),
            self._get_current_line(),
        )

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end].rstrip("\r")


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[BasicToken]:
    """Tokenize BASIC source text in one call."""
    return BasicLexer(source, filename).tokenize()


def format_tokens(tokens: list[BasicToken]) -> str:
    """Render a token list one per line, as printed by 'bb2web --tokens'."""
    return "\n".join(repr(token) for token in tokens)
