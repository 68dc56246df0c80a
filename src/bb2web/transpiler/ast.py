"""
BASIC Abstract Syntax Tree (AST) Definitions
============================================

This module defines the AST node types produced by the BASIC parser and
consumed by the emitter.

Node Hierarchy
--------------
ASTNode (base)
├── ProgramNode - root node, ordered top-level statements
├── Statements
│   ├── VariableDeclaration - Global / Local / Const
│   ├── ArrayDeclaration - Dim name(size)
│   ├── AssignmentStatement - target = value
│   ├── IfStatement - ordered If/ElseIf branches plus optional Else
│   ├── WhileStatement - While ... Wend
│   ├── RepeatStatement - Repeat ... Until
│   ├── ForStatement - For ... To ... Step ... Next
│   ├── SelectStatement - Select ... Case ... Default ... End Select
│   ├── FunctionDeclaration - Function ... End Function
│   ├── ReturnStatement - Return [value]
│   └── ExpressionStatement - expression (usually a call) as statement
└── Expressions
    ├── BinaryExpression - binary operators
    ├── UnaryExpression - negation and Not
    ├── CallExpression - callee(arguments), also array reads
    ├── VariableReference - name plus type suffix
    ├── GroupingExpression - parenthesized expression
    └── Literals - NumberLiteral, StringLiteral, BooleanLiteral, NullLiteral

Design Notes
------------
- All nodes are frozen dataclasses; the tree is strict, no sharing
- Each node stores its source location for error reporting
- Identifier identity is the pair (name, suffix); `x%` and `x#` are
  different variables
- Structural invariants are enforced when a node is constructed
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from bb2web.errors import SourceLocation
from bb2web.transpiler.errors import ConstructionError


# =============================================================================
# Type Suffixes
# =============================================================================

class TypeSuffix(Enum):
    """Trailing type marker of an identifier or literal."""
    NONE = ""
    INTEGER = "%"
    FLOAT = "#"
    STRING = "$"

    @property
    def marker(self) -> str:
        return self.value

    @classmethod
    def from_marker(cls, marker: Optional[str]) -> "TypeSuffix":
        """Map '%', '#', '$' (or nothing) to a suffix."""
        if not marker:
            return cls.NONE
        return cls(marker)


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears
    """
    location: SourceLocation

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}@{self.location.line}:{self.location.column}"


@dataclass(frozen=True, repr=False)
class Expression(ASTNode):
    """Base class for all expression nodes."""
    pass


@dataclass(frozen=True, repr=False)
class Statement(ASTNode):
    """Base class for all statement nodes."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

class BinaryOperator(Enum):
    """Binary operators, valued by their BASIC spelling."""
    OR = "OR"
    AND = "AND"
    EQUAL = "="
    NOT_EQUAL = "<>"
    LESS = "<"
    GREATER = ">"
    LESS_EQ = "<="
    GREATER_EQ = ">="
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "MOD"
    POWER = "^"


class UnaryOperator(Enum):
    """Unary operators."""
    NEGATE = "-"
    NOT = "NOT"


@dataclass(frozen=True, repr=False)
class VariableReference(Expression):
    """
    Reference to a variable, array, function or runtime command by name.

    Attributes:
        name: Identifier text without its suffix
        suffix: Type suffix written after the name
    """
    name: str = ""
    suffix: TypeSuffix = TypeSuffix.NONE

    @property
    def key(self) -> str:
        """Storage key: the name followed by its suffix marker."""
        return f"{self.name}{self.suffix.marker}"


@dataclass(frozen=True, repr=False)
class BinaryExpression(Expression):
    """
    Binary operation expression (a op b).

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


@dataclass(frozen=True, repr=False)
class UnaryExpression(Expression):
    operator: UnaryOperator = None
    operand: Expression = None


@dataclass(frozen=True, repr=False)
class CallExpression(Expression):
    """
    Call of a runtime command or user function, or an array element read.

    The callee must be a bare VariableReference.

    Attributes:
        callee: Name being called
        arguments: Argument expressions in source order
    """
    callee: VariableReference = None
    arguments: tuple[Expression, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.callee, VariableReference):
            raise ConstructionError(
                "call target must be a variable reference",
                location=self.location,
            )


@dataclass(frozen=True, repr=False)
class GroupingExpression(Expression):
    """Parenthesized expression, kept so emitted code mirrors the source."""
    expression: Expression = None


@dataclass(frozen=True, repr=False)
class Literal(Expression):
    """Base class for literals; each carries an optional type suffix."""
    suffix: TypeSuffix = TypeSuffix.NONE


@dataclass(frozen=True, repr=False)
class NumberLiteral(Literal):
    """
    Numeric literal.

    Attributes:
        value: Parsed numeric value
        text: Source spelling, e.g. "1.50" or "2e3"
    """
    value: Union[int, float] = 0
    text: str = "0"


@dataclass(frozen=True, repr=False)
class StringLiteral(Literal):
    suffix: TypeSuffix = TypeSuffix.STRING
    value: str = ""


@dataclass(frozen=True, repr=False)
class BooleanLiteral(Literal):
    value: bool = False


@dataclass(frozen=True, repr=False)
class NullLiteral(Literal):
    pass


# =============================================================================
# Statement Nodes
# =============================================================================

class DeclarationScope(Enum):
    """Scope keyword of a variable declaration."""
    GLOBAL = "Global"
    LOCAL = "Local"
    CONST = "Const"


@dataclass(frozen=True, repr=False)
class VariableDeclaration(Statement):
    """
    Global, Local or Const declaration.

    Attributes:
        scope: Declaring keyword
        target: Declared variable
        initializer: Initial value (None leaves the variable undefined)
    """
    scope: DeclarationScope = DeclarationScope.LOCAL
    target: VariableReference = None
    initializer: Optional[Expression] = None


@dataclass(frozen=True, repr=False)
class ArrayDeclaration(Statement):
    """Dim name(size): a zero-filled array of the given size."""
    target: VariableReference = None
    size: Expression = None


@dataclass(frozen=True, repr=False)
class AssignmentStatement(Statement):
    """
    Assignment to a variable or array element.

    Attributes:
        target: VariableReference, or CallExpression for `a(i) = v`
        value: Assigned expression
    """
    target: Expression = None
    value: Expression = None


@dataclass(frozen=True, repr=False)
class ExpressionStatement(Statement):
    expression: Expression = None


@dataclass(frozen=True, repr=False)
class IfBranch(ASTNode):
    """One `If`/`ElseIf` test with the statements it guards."""
    test: Expression = None
    body: tuple[Statement, ...] = field(default_factory=tuple)


@dataclass(frozen=True, repr=False)
class IfStatement(Statement):
    """
    If / ElseIf / Else chain.

    The If and every ElseIf form one ordered branch list rather than
    nested If nodes, so there is always at least one branch.

    Attributes:
        branches: Ordered test/body pairs
        else_body: Statements run when no test holds (None when absent)
    """
    branches: tuple[IfBranch, ...] = field(default_factory=tuple)
    else_body: Optional[tuple[Statement, ...]] = None

    def __post_init__(self):
        if not self.branches:
            raise ConstructionError(
                "if statement needs at least one branch",
                location=self.location,
            )


@dataclass(frozen=True, repr=False)
class WhileStatement(Statement):
    test: Expression = None
    body: tuple[Statement, ...] = field(default_factory=tuple)


@dataclass(frozen=True, repr=False)
class RepeatStatement(Statement):
    """
    Repeat ... Until loop; the body always runs at least once.

    Attributes:
        body: Loop body
        until: Exit condition, None when input ended before `Until`
    """
    body: tuple[Statement, ...] = field(default_factory=tuple)
    until: Optional[Expression] = None


@dataclass(frozen=True, repr=False)
class ForStatement(Statement):
    """
    Counted For loop.

    Attributes:
        counter: Loop variable
        start: Initial value
        bound: Inclusive limit
        step: Increment (None means 1); a negative constant counts down
        body: Loop body
    """
    counter: VariableReference = None
    start: Expression = None
    bound: Expression = None
    step: Optional[Expression] = None
    body: tuple[Statement, ...] = field(default_factory=tuple)


@dataclass(frozen=True, repr=False)
class CaseClause(ASTNode):
    """Case clause: runs when the scrutinee equals any of its tests."""
    tests: tuple[Expression, ...] = field(default_factory=tuple)
    body: tuple[Statement, ...] = field(default_factory=tuple)


@dataclass(frozen=True, repr=False)
class SelectStatement(Statement):
    """
    Select ... Case ... Default ... End Select.

    Attributes:
        scrutinee: Expression evaluated once and matched against each case
        cases: Ordered case clauses
        default_body: Statements of the Default clause (None when absent)
    """
    scrutinee: Expression = None
    cases: tuple[CaseClause, ...] = field(default_factory=tuple)
    default_body: Optional[tuple[Statement, ...]] = None


@dataclass(frozen=True, repr=False)
class FunctionDeclaration(Statement):
    """
    User function definition.

    Attributes:
        name: Function name with its suffix
        parameters: Ordered parameter variables
        body: Function body
    """
    name: VariableReference = None
    parameters: tuple[VariableReference, ...] = field(default_factory=tuple)
    body: tuple[Statement, ...] = field(default_factory=tuple)


@dataclass(frozen=True, repr=False)
class ReturnStatement(Statement):
    value: Optional[Expression] = None


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass(frozen=True, repr=False)
class ProgramNode(ASTNode):
    """
    Root node of the AST.

    Attributes:
        statements: Top-level statements in source order
    """
    statements: tuple[Statement, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        count = len(self.statements)
        word = "statement" if count == 1 else "statements"
        return f"ProgramNode with {count} {word}"


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; everything else falls through to generic_visit, which walks
    child nodes.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_CallExpression(self, node):
                self.count += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode):
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit every child node, including those held in tuples."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, tuple):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging (used by `bb2web --ast`).

    Usage:
        printer = ASTPrinter()
        print(printer.print(ast))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _block(self, title: str, body) -> None:
        self._emit(title)
        self.indent_level += 1
        for stmt in body:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_ProgramNode(self, node: ProgramNode):
        self._block("Program", node.statements)

    def visit_VariableDeclaration(self, node: VariableDeclaration):
        init = f" = {self._expr_str(node.initializer)}" if node.initializer else ""
        self._emit(f"{node.scope.value} {node.target.key}{init}")

    def visit_ArrayDeclaration(self, node: ArrayDeclaration):
        self._emit(f"Dim {node.target.key}({self._expr_str(node.size)})")

    def visit_AssignmentStatement(self, node: AssignmentStatement):
        self._emit(f"Assign {self._expr_str(node.target)} = {self._expr_str(node.value)}")

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit(f"Expr: {self._expr_str(node.expression)}")

    def visit_IfStatement(self, node: IfStatement):
        for index, branch in enumerate(node.branches):
            keyword = "If" if index == 0 else "ElseIf"
            self._block(f"{keyword} {self._expr_str(branch.test)}", branch.body)
        if node.else_body is not None:
            self._block("Else", node.else_body)

    def visit_WhileStatement(self, node: WhileStatement):
        self._block(f"While {self._expr_str(node.test)}", node.body)

    def visit_RepeatStatement(self, node: RepeatStatement):
        self._block("Repeat", node.body)
        if node.until is not None:
            self._emit(f"Until {self._expr_str(node.until)}")
        else:
            self._emit("Forever")

    def visit_ForStatement(self, node: ForStatement):
        step = f" Step {self._expr_str(node.step)}" if node.step else ""
        header = (
            f"For {node.counter.key} = {self._expr_str(node.start)}"
            f" To {self._expr_str(node.bound)}{step}"
        )
        self._block(header, node.body)

    def visit_SelectStatement(self, node: SelectStatement):
        self._emit(f"Select {self._expr_str(node.scrutinee)}")
        self.indent_level += 1
        for case in node.cases:
            tests = ", ".join(self._expr_str(t) for t in case.tests)
            self._block(f"Case {tests}", case.body)
        if node.default_body is not None:
            self._block("Default", node.default_body)
        self.indent_level -= 1

    def visit_FunctionDeclaration(self, node: FunctionDeclaration):
        params = ", ".join(p.key for p in node.parameters)
        self._block(f"Function {node.name.key}({params})", node.body)

    def visit_ReturnStatement(self, node: ReturnStatement):
        if node.value is not None:
            self._emit(f"Return {self._expr_str(node.value)}")
        else:
            self._emit("Return")

    def _expr_str(self, expr: Optional[Expression]) -> str:
        """Convert expression to string representation."""
        if expr is None:
            return ""
        if isinstance(expr, NumberLiteral):
            return expr.text
        if isinstance(expr, StringLiteral):
            return f'"{expr.value}"'
        if isinstance(expr, BooleanLiteral):
            return "True" if expr.value else "False"
        if isinstance(expr, NullLiteral):
            return "Null"
        if isinstance(expr, VariableReference):
            return expr.key
        if isinstance(expr, GroupingExpression):
            return f"({self._expr_str(expr.expression)})"
        if isinstance(expr, BinaryExpression):
            return (
                f"({self._expr_str(expr.left)} {expr.operator.value} "
                f"{self._expr_str(expr.right)})"
            )
        if isinstance(expr, UnaryExpression):
            if expr.operator == UnaryOperator.NOT:
                return f"(Not {self._expr_str(expr.operand)})"
            return f"(-{self._expr_str(expr.operand)})"
        if isinstance(expr, CallExpression):
            args = ", ".join(self._expr_str(a) for a in expr.arguments)
            return f"{expr.callee.key}({args})"
        return f"<{type(expr).__name__}>"
