"""
Transpiler Error Hierarchy
==========================

This module defines the exceptions raised by the BASIC-to-web
transpiler. All of them inherit from TranspileError, which itself
inherits from Bb2WebError.

There is no error recovery: the first fault raised by any stage aborts
the compilation and propagates to the caller.

Exception Hierarchy
-------------------
TranspileError (base for all compiler faults)
├── LexicalError - tokenizer faults
│   └── InvalidCharacterError - character outside the language
├── BasicSyntaxError - parser faults
│   ├── UnexpectedTokenError - token does not fit the grammar here
│   ├── MissingTokenError - required token absent
│   ├── InvalidCallTargetError - call applied to a non-identifier
│   ├── InvalidAssignmentTargetError - assignment to a non-variable
│   └── UnterminatedBlockError - wrong keyword where a block closer belongs
├── ConstructionError - AST built in violation of its invariants
│   └── UnsupportedTargetError - emitter given an unusable assignment target
└── SemanticError - well-formed program the runtime cannot accept
    └── ArgumentCountError - runtime command called with wrong arity

Error Message Format
--------------------
    game.bb:3:9: error: unexpected token 'Then'
        If x = Then
                ^
    hint: expected expression
"""

from typing import Optional

from bb2web.errors import Bb2WebError, SourceLocation


# =============================================================================
# Base Transpiler Exception
# =============================================================================

class TranspileError(Bb2WebError):
    """
    Base exception for all transpiler faults.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            game.bb:2:5: error: unexpected character '@'
                x = @
                    ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Lexical Errors
# =============================================================================

class LexicalError(TranspileError):
    """Fault raised while splitting source text into tokens."""
    pass


class InvalidCharacterError(LexicalError):
    """
    Character that cannot start any token.

    Example:
        x = 3 @ 4      ' '@' is not part of the language
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"unexpected character '{char}'",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Syntax Errors
# =============================================================================

class BasicSyntaxError(TranspileError):
    """
    Syntax error in BASIC source code.

    Raised when the parser cannot match the token sequence against the
    grammar. Aborts parsing immediately; no partial AST is returned.
    """
    pass


class UnexpectedTokenError(BasicSyntaxError):
    """Token that does not fit the grammar at this position."""

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(BasicSyntaxError):
    """
    Required token is missing.

    Raised when a required token (like ')' or 'Then') is not found
    where expected.
    """

    def __init__(
        self,
        expected: str,
        found: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found

        message = f"expected {expected}"
        if found:
            message += f" but found '{found}'"

        super().__init__(
            message,
            location=location,
            source_line=source_line,
        )


class InvalidCallTargetError(BasicSyntaxError):
    """
    Argument list applied to something that is not a name.

    Example:
        x = (a + b)(1)
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "call target must be an identifier",
            location=location,
            source_line=source_line,
        )


class InvalidAssignmentTargetError(BasicSyntaxError):
    """
    Left-hand side of '=' is not assignable.

    Examples of invalid targets:
        - 42 = x
        - (a + b) = x
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "invalid assignment target",
            location=location,
            hint="left side of '=' must be a variable or an array element",
            source_line=source_line,
        )


class UnterminatedBlockError(BasicSyntaxError):
    """
    Block closed by the wrong keyword.

    End-of-input in place of a closing keyword is tolerated; any other
    token there lands here.
    """

    def __init__(
        self,
        block: str,
        closer: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.block = block
        self.closer = closer
        self.found = found
        super().__init__(
            f"unterminated {block} block: found '{found}'",
            location=location,
            hint=f"close the block with '{closer}'",
            source_line=source_line,
        )


# =============================================================================
# Construction Errors
# =============================================================================

class ConstructionError(TranspileError):
    """
    AST node built in violation of a structural invariant.

    Raised by node constructors (a call whose callee is not a variable
    reference, an If without branches) and by the emitter when it meets
    a tree shape it cannot translate.
    """
    pass


class UnsupportedTargetError(ConstructionError):
    """Assignment target shape the emitter cannot render."""

    def __init__(
        self,
        kind: str,
        location: Optional[SourceLocation] = None,
    ):
        self.kind = kind
        super().__init__(
            f"cannot assign to {kind}",
            location=location,
        )


# =============================================================================
# Semantic Errors
# =============================================================================

class SemanticError(TranspileError):
    """Syntactically valid program that cannot be translated."""
    pass


class ArgumentCountError(SemanticError):
    """
    Runtime command called with the wrong number of arguments.

    Example:
        Color 255, 0        ' Color takes three components
    """

    def __init__(
        self,
        command: str,
        expected: str,
        actual: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.command = command
        self.expected = expected
        self.actual = actual

        word = "argument" if expected == "1" else "arguments"
        super().__init__(
            f"'{command}' expects {expected} {word}, got {actual}",
            location=location,
            source_line=source_line,
        )
