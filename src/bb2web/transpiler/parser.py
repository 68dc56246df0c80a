"""
BASIC Recursive Descent Parser
==============================

This module implements the parser for the BASIC dialect. It takes the
token list produced by the lexer and builds a ProgramNode.

Statements use recursive descent; expressions use precedence climbing.
The first syntax error aborts parsing; there is no recovery.

Grammar (Simplified EBNF)
-------------------------
program         ::= { separator } { statement { separator } }
separator       ::= NEWLINE | ':'
statement       ::= declaration | dim | if | while | repeat | for
                  | select | function | return
                  | ident ( '=' | ':=' ) expr
                  | ident '(' args ')' ( '=' expr )?
                  | ident [ expr { ',' expr } ]             (bare call)
                  | expr [ '=' expr ]
declaration     ::= ( 'Global' | 'Local' | 'Const' ) ident [ '=' expr ]
dim             ::= 'Dim' ident '(' expr ')'
if              ::= 'If' expr 'Then' ( single_line | block_if )
single_line     ::= statement [ 'Else' [ statement ] ]
block_if        ::= block { 'ElseIf' expr 'Then' block } [ 'Else' block ]
                    ( 'End' [ 'If' ] | 'EndIf' )
while           ::= 'While' expr block 'Wend'
repeat          ::= 'Repeat' block 'Until' expr
for             ::= 'For' ident '=' expr 'To' expr [ 'Step' expr ] block
                    'Next' [ ident ]
select          ::= 'Select' expr { 'Case' expr { ',' expr } block }
                    [ 'Default' block ] 'End' 'Select'
function        ::= 'Function' ident '(' [ ident { ',' ident } ] ')' block
                    'End' 'Function'
return          ::= 'Return' [ expr ]
ident           ::= IDENTIFIER [ '%' | '#' | '$' ]

Every block form accepts end of input in place of its closing keyword.
A Repeat cut off before Until loops forever.

Expression Precedence (lowest to highest)
-----------------------------------------
1. Or
2. And
3. equality       = <>
4. comparison     < > <= >=
5. additive       + -
6. multiplicative * / Mod
7. power          ^ (right-associative)
8. unary          - Not
9. postfix        call '(' args ')'

Example Usage
-------------
>>> from bb2web.transpiler.parser import parse_source
>>> ast = parse_source('Graphics 320, 240')
>>> print(ast)
ProgramNode with 1 statement
"""

from enum import IntEnum
from typing import Optional

from bb2web.errors import SourceLocation
from bb2web.transpiler.lexer import BasicLexer, BasicToken, TokenType, TYPE_SUFFIXES
from bb2web.transpiler.ast import (
    ProgramNode,
    Statement,
    Expression,
    TypeSuffix,
    VariableReference,
    DeclarationScope,
    VariableDeclaration,
    ArrayDeclaration,
    AssignmentStatement,
    ExpressionStatement,
    IfBranch,
    IfStatement,
    WhileStatement,
    RepeatStatement,
    ForStatement,
    CaseClause,
    SelectStatement,
    FunctionDeclaration,
    ReturnStatement,
    BinaryExpression,
    UnaryExpression,
    CallExpression,
    GroupingExpression,
    NumberLiteral,
    StringLiteral,
    BooleanLiteral,
    NullLiteral,
    BinaryOperator,
    UnaryOperator,
)
from bb2web.transpiler.errors import (
    UnexpectedTokenError,
    MissingTokenError,
    InvalidCallTargetError,
    InvalidAssignmentTargetError,
    UnterminatedBlockError,
)


class Precedence(IntEnum):
    """Binding strength of binary operators."""
    OR = 1
    AND = 2
    EQUALITY = 3
    COMPARISON = 4
    ADDITIVE = 5
    MULTIPLICATIVE = 6
    POWER = 7


# Keyword operators, keyed by upper-cased text
_KEYWORD_OPERATORS: dict[str, tuple[BinaryOperator, Precedence]] = {
    "OR": (BinaryOperator.OR, Precedence.OR),
    "AND": (BinaryOperator.AND, Precedence.AND),
    "MOD": (BinaryOperator.MODULO, Precedence.MULTIPLICATIVE),
}

# Symbol operators
_SYMBOL_OPERATORS: dict[str, tuple[BinaryOperator, Precedence]] = {
    "=": (BinaryOperator.EQUAL, Precedence.EQUALITY),
    "<>": (BinaryOperator.NOT_EQUAL, Precedence.EQUALITY),
    "<": (BinaryOperator.LESS, Precedence.COMPARISON),
    ">": (BinaryOperator.GREATER, Precedence.COMPARISON),
    "<=": (BinaryOperator.LESS_EQ, Precedence.COMPARISON),
    ">=": (BinaryOperator.GREATER_EQ, Precedence.COMPARISON),
    "+": (BinaryOperator.ADD, Precedence.ADDITIVE),
    "-": (BinaryOperator.SUBTRACT, Precedence.ADDITIVE),
    "*": (BinaryOperator.MULTIPLY, Precedence.MULTIPLICATIVE),
    "/": (BinaryOperator.DIVIDE, Precedence.MULTIPLICATIVE),
    "^": (BinaryOperator.POWER, Precedence.POWER),
}

# Keywords that end a statement list
BLOCK_CLOSERS = frozenset({
    "END", "ENDIF", "ELSE", "ELSEIF", "WEND", "UNTIL", "NEXT", "CASE", "DEFAULT",
})

# Bare identifiers that read as literals
_LITERAL_NAMES = frozenset({"TRUE", "FALSE", "NULL"})


class BasicParser:
    """
    Recursive descent parser for the BASIC dialect.

    Attributes:
        tokens: List of tokens to parse (ending with EOF)
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        tokens: list[BasicToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer
            filename: Source filename for error messages
            source_lines: Original source lines for error context
        """
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []

        # Current position in token stream
        self._pos = 0

    def parse(self) -> ProgramNode:
        """
        Parse the token stream into an AST.

        Returns:
            ProgramNode containing all top-level statements

        Raises:
            BasicSyntaxError: On the first syntax error
        """
        self._pos = 0
        statements = []

        self._skip_separators()
        while not self._at_end():
            statements.append(self._parse_statement())
            self._skip_separators()

        return ProgramNode(
            location=SourceLocation(self.filename, 1, 1),
            statements=tuple(statements),
        )

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self, offset: int = 0) -> BasicToken:
        """Look at token at current position + offset."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> BasicToken:
        """Consume and return the current token."""
        if not self._at_end():
            token = self.tokens[self._pos]
            self._pos += 1
            return token
        return self.tokens[-1]

    def _check_keyword(self, *names: str) -> bool:
        return self._peek().is_keyword(*names)

    def _check_operator(self, *symbols: str) -> bool:
        return self._peek().is_operator(*symbols)

    def _match_keyword(self, *names: str) -> Optional[BasicToken]:
        if self._check_keyword(*names):
            return self._advance()
        return None

    def _match_operator(self, *symbols: str) -> Optional[BasicToken]:
        if self._check_operator(*symbols):
            return self._advance()
        return None

    def _expect_keyword(self, name: str) -> BasicToken:
        if self._check_keyword(name):
            return self._advance()
        raise self._missing(f"'{name.capitalize()}'")

    def _expect_operator(self, symbol: str) -> BasicToken:
        if self._check_operator(symbol):
            return self._advance()
        raise self._missing(f"'{symbol}'")

    def _missing(self, expected: str) -> MissingTokenError:
        current = self._peek()
        return MissingTokenError(
            expected,
            found=self._describe(current),
            location=current.location,
            source_line=self._get_source_line(current.line),
        )

    def _unexpected(self, token: BasicToken, expected: str) -> UnexpectedTokenError:
        return UnexpectedTokenError(
            self._describe(token),
            expected=expected,
            location=token.location,
            source_line=self._get_source_line(token.line),
        )

    @staticmethod
    def _describe(token: BasicToken) -> str:
        if token.type == TokenType.EOF:
            return "end of input"
        if token.type == TokenType.NEWLINE:
            return "end of line"
        return token.value

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Separators and Blocks
    # =========================================================================

    def _at_separator(self) -> bool:
        token = self._peek()
        return token.type == TokenType.NEWLINE or token.is_operator(":")

    def _at_separator_or_end(self) -> bool:
        return self._at_separator() or self._at_end()

    def _at_statement_end(self) -> bool:
        """Separator, end of input, or a keyword that closes a block."""
        return self._at_separator_or_end() or self._check_keyword(*BLOCK_CLOSERS)

    def _skip_separators(self) -> None:
        while self._at_separator():
            self._advance()

    def _parse_block(self) -> tuple[Statement, ...]:
        """
        Parse statements up to the next block-closing keyword or end of input.

        The closing keyword is left for the caller to check.
        """
        statements = []
        self._skip_separators()
        while not self._at_end() and not self._check_keyword(*BLOCK_CLOSERS):
            statements.append(self._parse_statement())
            self._skip_separators()
        return tuple(statements)

    def _unterminated(self, block: str, closer: str) -> UnterminatedBlockError:
        token = self._peek()
        return UnterminatedBlockError(
            block,
            closer,
            self._describe(token),
            location=token.location,
            source_line=self._get_source_line(token.line),
        )

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        """Parse any statement."""
        token = self._peek()

        if token.type == TokenType.IDENTIFIER:
            return self._parse_identifier_statement()

        if token.type == TokenType.KEYWORD:
            keyword = token.upper
            if keyword in ("GLOBAL", "LOCAL", "CONST"):
                return self._parse_declaration()
            if keyword == "DIM":
                return self._parse_dim()
            if keyword == "IF":
                return self._parse_if()
            if keyword == "WHILE":
                return self._parse_while()
            if keyword == "REPEAT":
                return self._parse_repeat()
            if keyword == "FOR":
                return self._parse_for()
            if keyword == "SELECT":
                return self._parse_select()
            if keyword == "FUNCTION":
                return self._parse_function()
            if keyword == "RETURN":
                return self._parse_return()
            if keyword != "NOT":
                raise self._unexpected(token, "statement")

        return self._parse_expression_statement()

    def _parse_identifier_statement(self) -> Statement:
        """
        Parse a statement that starts with a name.

        Disambiguates, by lookahead, between
            x = 1            assignment
            a(i) = 1         element assignment
            Foo(1, 2)        call with parenthesized arguments
            Plot 10, 20      bare call
            Flip             zero-argument bare call
        """
        target = self._parse_variable_reference()

        if self._match_operator("=", ":="):
            value = self._parse_expression()
            return AssignmentStatement(location=target.location, target=target, value=value)

        if self._check_operator("("):
            saved = self._pos
            arguments = self._parse_arguments()
            if self._match_operator("=", ":="):
                element = CallExpression(
                    location=target.location, callee=target, arguments=arguments,
                )
                value = self._parse_expression()
                return AssignmentStatement(location=target.location, target=element, value=value)
            if self._at_statement_end():
                call = CallExpression(
                    location=target.location, callee=target, arguments=arguments,
                )
                return ExpressionStatement(location=target.location, expression=call)
            # Something like `Plot (x), y`: reparse as a bare call
            self._pos = saved

        arguments = []
        if self._begins_expression(self._peek()):
            arguments.append(self._parse_expression())
            while self._match_operator(","):
                arguments.append(self._parse_expression())

        call = CallExpression(location=target.location, callee=target, arguments=tuple(arguments))
        return ExpressionStatement(location=target.location, expression=call)

    @staticmethod
    def _begins_expression(token: BasicToken) -> bool:
        """Can a bare-call argument start with this token?"""
        if token.type in (TokenType.NUMBER, TokenType.STRING, TokenType.IDENTIFIER):
            return True
        if token.is_operator("(", "-"):
            return True
        return token.is_keyword("NOT")

    def _parse_expression_statement(self) -> Statement:
        """Expression statement, or an assignment when '=' follows."""
        expr = self._parse_expression()
        if self._check_operator("=", ":="):
            if not isinstance(expr, (VariableReference, CallExpression)):
                raise InvalidAssignmentTargetError(
                    expr.location, self._get_source_line(expr.location.line),
                )
            self._advance()
            value = self._parse_expression()
            return AssignmentStatement(location=expr.location, target=expr, value=value)
        return ExpressionStatement(location=expr.location, expression=expr)

    def _parse_declaration(self) -> VariableDeclaration:
        """Parse `Global|Local|Const name [= value]`."""
        scope_token = self._advance()
        scope = DeclarationScope[scope_token.upper]
        target = self._parse_variable_reference()

        initializer = None
        if self._match_operator("=", ":="):
            initializer = self._parse_expression()

        return VariableDeclaration(
            location=scope_token.location,
            scope=scope,
            target=target,
            initializer=initializer,
        )

    def _parse_dim(self) -> ArrayDeclaration:
        """Parse `Dim name(size)`."""
        location = self._advance().location
        target = self._parse_variable_reference()
        self._expect_operator("(")
        size = self._parse_expression()
        self._expect_operator(")")
        return ArrayDeclaration(location=location, target=target, size=size)

    def _parse_if(self) -> IfStatement:
        """
        Parse an If statement in either form.

        A separator (or end of input) right after Then selects the block
        form; anything else is the single-line form.
        """
        location = self._advance().location
        test = self._parse_expression()
        self._expect_keyword("THEN")

        if not self._at_separator_or_end():
            return self._parse_single_line_if(location, test)

        branches = [IfBranch(location=location, test=test, body=self._parse_block())]

        while self._check_keyword("ELSEIF"):
            branch_location = self._advance().location
            branch_test = self._parse_expression()
            self._expect_keyword("THEN")
            branches.append(
                IfBranch(location=branch_location, test=branch_test, body=self._parse_block())
            )

        else_body = None
        if self._match_keyword("ELSE"):
            else_body = self._parse_block()

        if self._match_keyword("END"):
            self._match_keyword("IF")
        elif not self._match_keyword("ENDIF") and not self._at_end():
            raise self._unterminated("If", "End If")

        return IfStatement(location=location, branches=tuple(branches), else_body=else_body)

    def _parse_single_line_if(self, location: SourceLocation, test: Expression) -> IfStatement:
        """
        Parse `If c Then stmt [Else [stmt]]` on one line.

        Exactly one statement per part. Separators after it are left in
        place, so statements after a ':' always run.
        """
        consequent = self._parse_statement()

        else_body = None
        if self._match_keyword("ELSE"):
            if self._at_separator_or_end():
                else_body = ()
            else:
                else_body = (self._parse_statement(),)

        branch = IfBranch(location=location, test=test, body=(consequent,))
        return IfStatement(location=location, branches=(branch,), else_body=else_body)

    def _parse_while(self) -> WhileStatement:
        location = self._advance().location
        test = self._parse_expression()
        body = self._parse_block()

        if not self._match_keyword("WEND") and not self._at_end():
            raise self._unterminated("While", "Wend")

        return WhileStatement(location=location, test=test, body=body)

    def _parse_repeat(self) -> RepeatStatement:
        """Parse `Repeat ... Until cond`; no Until before end of input loops forever."""
        location = self._advance().location
        body = self._parse_block()

        until = None
        if self._match_keyword("UNTIL"):
            until = self._parse_expression()
        elif not self._at_end():
            raise self._unterminated("Repeat", "Until")

        return RepeatStatement(location=location, body=body, until=until)

    def _parse_for(self) -> ForStatement:
        location = self._advance().location
        counter = self._parse_variable_reference()
        self._expect_operator("=")
        start = self._parse_expression()
        self._expect_keyword("TO")
        bound = self._parse_expression()

        step = None
        if self._match_keyword("STEP"):
            step = self._parse_expression()

        body = self._parse_block()

        if self._match_keyword("NEXT"):
            self._skip_counter_name(counter)
        elif not self._at_end():
            raise self._unterminated("For", "Next")

        return ForStatement(
            location=location,
            counter=counter,
            start=start,
            bound=bound,
            step=step,
            body=body,
        )

    def _skip_counter_name(self, counter: VariableReference) -> None:
        """
        Consume the optional counter name after Next.

        Only the loop's own name (with its suffix, or none) is taken, so
        `Next Flip` leaves Flip as the next statement.
        """
        token = self._peek()
        if token.type != TokenType.IDENTIFIER or token.value != counter.name:
            return
        following = self._peek(1)
        if following.is_operator(*TYPE_SUFFIXES) and following.value != counter.suffix.marker:
            return
        self._parse_variable_reference()

    def _parse_select(self) -> SelectStatement:
        """Parse Select with its Case and Default clauses."""
        location = self._advance().location
        scrutinee = self._parse_expression()
        self._skip_separators()

        cases = []
        default_body = None

        while not self._at_end() and not self._check_keyword("END"):
            token = self._peek()
            if token.is_keyword("CASE"):
                self._advance()
                tests = [self._parse_expression()]
                while self._match_operator(","):
                    tests.append(self._parse_expression())
                cases.append(
                    CaseClause(location=token.location, tests=tuple(tests), body=self._parse_block())
                )
            elif token.is_keyword("DEFAULT"):
                if default_body is not None:
                    raise self._unexpected(token, "'Case' or 'End Select'")
                self._advance()
                default_body = self._parse_block()
            else:
                raise self._unexpected(token, "'Case', 'Default' or 'End Select'")

        if self._match_keyword("END"):
            self._expect_keyword("SELECT")

        return SelectStatement(
            location=location,
            scrutinee=scrutinee,
            cases=tuple(cases),
            default_body=default_body,
        )

    def _parse_function(self) -> FunctionDeclaration:
        location = self._advance().location
        name = self._parse_variable_reference()

        self._expect_operator("(")
        parameters = []
        if not self._check_operator(")"):
            parameters.append(self._parse_variable_reference())
            while self._match_operator(","):
                parameters.append(self._parse_variable_reference())
        self._expect_operator(")")

        body = self._parse_block()

        if self._match_keyword("END"):
            self._expect_keyword("FUNCTION")
        elif not self._at_end():
            raise self._unterminated("Function", "End Function")

        return FunctionDeclaration(
            location=location,
            name=name,
            parameters=tuple(parameters),
            body=body,
        )

    def _parse_return(self) -> ReturnStatement:
        location = self._advance().location
        value = None
        if not self._at_statement_end():
            value = self._parse_expression()
        return ReturnStatement(location=location, value=value)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self, min_precedence: int = Precedence.OR) -> Expression:
        """
        Parse a binary expression by precedence climbing.

        Operators bind left-to-right except '^', whose right operand is
        parsed at its own level so that 2^3^2 is 2^(3^2).
        """
        left = self._parse_unary()

        while True:
            entry = self._binary_operator(self._peek())
            if entry is None:
                break
            operator, precedence = entry
            if precedence < min_precedence:
                break

            self._advance()
            if operator == BinaryOperator.POWER:
                right = self._parse_expression(precedence)
            else:
                right = self._parse_expression(precedence + 1)

            left = BinaryExpression(
                location=left.location,
                operator=operator,
                left=left,
                right=right,
            )

        return left

    @staticmethod
    def _binary_operator(token: BasicToken) -> Optional[tuple[BinaryOperator, Precedence]]:
        if token.type == TokenType.KEYWORD:
            return _KEYWORD_OPERATORS.get(token.upper)
        if token.type == TokenType.OPERATOR:
            return _SYMBOL_OPERATORS.get(token.value)
        return None

    def _parse_unary(self) -> Expression:
        """Parse unary '-' and Not (right-associative)."""
        token = self._peek()

        if token.is_operator("-"):
            self._advance()
            return UnaryExpression(
                location=token.location,
                operator=UnaryOperator.NEGATE,
                operand=self._parse_unary(),
            )
        if token.is_keyword("NOT"):
            self._advance()
            return UnaryExpression(
                location=token.location,
                operator=UnaryOperator.NOT,
                operand=self._parse_unary(),
            )

        return self._parse_postfix()

    def _parse_postfix(self) -> Expression:
        """Parse a primary followed by any argument lists (calls)."""
        expr = self._parse_primary()

        while self._check_operator("("):
            if not isinstance(expr, VariableReference):
                raise InvalidCallTargetError(
                    expr.location, self._get_source_line(expr.location.line),
                )
            expr = CallExpression(
                location=expr.location,
                callee=expr,
                arguments=self._parse_arguments(),
            )

        return expr

    def _parse_arguments(self) -> tuple[Expression, ...]:
        """Parse '(' [expr {',' expr}] ')'."""
        self._expect_operator("(")
        arguments = []
        if not self._check_operator(")"):
            arguments.append(self._parse_expression())
            while self._match_operator(","):
                arguments.append(self._parse_expression())
        self._expect_operator(")")
        return tuple(arguments)

    def _parse_primary(self) -> Expression:
        """Parse literals, names and parenthesized expressions."""
        token = self._peek()

        if token.type == TokenType.NUMBER:
            self._advance()
            return NumberLiteral(
                location=token.location,
                value=self._number_value(token.value),
                text=token.value,
            )

        if token.type == TokenType.STRING:
            self._advance()
            return StringLiteral(location=token.location, value=token.value)

        if token.type == TokenType.IDENTIFIER:
            if token.upper in _LITERAL_NAMES and not self._peek(1).is_operator("(", *TYPE_SUFFIXES):
                self._advance()
                if token.upper == "NULL":
                    return NullLiteral(location=token.location)
                return BooleanLiteral(location=token.location, value=token.upper == "TRUE")
            return self._parse_variable_reference()

        if token.is_operator("("):
            self._advance()
            expr = self._parse_expression()
            self._expect_operator(")")
            return GroupingExpression(location=token.location, expression=expr)

        raise self._unexpected(token, "expression")

    @staticmethod
    def _number_value(text: str):
        if text.isdigit():
            return int(text)
        return float(text)

    def _parse_variable_reference(self) -> VariableReference:
        """Parse an identifier and bind a directly following type suffix."""
        token = self._peek()
        if token.type != TokenType.IDENTIFIER:
            raise self._missing("identifier")
        self._advance()

        suffix = TypeSuffix.NONE
        if self._check_operator(*TYPE_SUFFIXES):
            suffix = TypeSuffix.from_marker(self._advance().value)

        return VariableReference(location=token.location, name=token.value, suffix=suffix)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> ProgramNode:
    """
    Parse BASIC source code into an AST.

    This is a convenience function that combines lexing and parsing.

    Raises:
        LexicalError: On a character outside the language
        BasicSyntaxError: If parsing fails
    """
    tokens = BasicLexer(source, filename).tokenize()
    parser = BasicParser(tokens, filename, source.splitlines())
    return parser.parse()
