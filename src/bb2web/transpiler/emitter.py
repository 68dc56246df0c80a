"""
TypeScript / JavaScript Emitter
===============================

This module turns a BASIC ProgramNode into TypeScript or JavaScript
source for the browser. It is the last stage of the pipeline:

    Source → Lexer → Parser → AST → Emitter → TypeScript / JavaScript

Generation Strategy
-------------------
The emitter makes a single depth-first pass over the tree and writes one
output line at a time. All per-compilation state lives on the emitter
instance and is reset by every generate() call, so output depends only
on the input tree.

Variables live in binding frames keyed by name plus suffix marker, so
`x%`, `x#` and `x` are three different slots:

    const G = Object.create(null);      // program-wide frame
    G["score%"] = 0;

    function bb_add$i(p0, p1) {
      const F = Object.create(G);       // activation record
      F["a%"] = p0;
      F["b%"] = p1;
      return (F["a%"]) + (F["b%"]);
    }

Reads inside a function go through F, whose prototype is G, so globals
stay visible. Writes go to F unless the name was declared Global (or
declared at top level with Global, Const or Dim) and not declared
locally in the function first.

Output Layout
-------------
    // Generated by bb2web 1.0.0
    import { rt } from "./bb_runtime";      (TypeScript)
    "use strict";                           (JavaScript)
    const { rt } = require("./bb_runtime");

    (function () {
      const G = Object.create(null);
      ...program...
    })();

The runtime object is bound once at the module boundary; generated code
only calls the members listed in bb2web.transpiler.commands.
"""

from enum import Enum
from typing import Optional
import json
import logging
import math
import re

from bb2web import __version__
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
    IfStatement,
    WhileStatement,
    RepeatStatement,
    ForStatement,
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
from bb2web.transpiler.commands import get_command
from bb2web.transpiler.errors import (
    ArgumentCountError,
    ConstructionError,
    UnsupportedTargetError,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Target Dialects
# =============================================================================

class TargetDialect(Enum):
    """Output language of the emitter."""
    TYPESCRIPT = "ts"
    JAVASCRIPT = "js"

    @classmethod
    def from_name(cls, name: str) -> "TargetDialect":
        """
        Resolve 'ts', 'js', 'typescript' or 'javascript' (any case).

        Raises:
            ValueError: For any other name
        """
        normalized = name.strip().lower()
        aliases = {
            "ts": cls.TYPESCRIPT,
            "typescript": cls.TYPESCRIPT,
            "js": cls.JAVASCRIPT,
            "javascript": cls.JAVASCRIPT,
        }
        if normalized not in aliases:
            raise ValueError(
                f"unknown target '{name}' (expected ts, js, typescript or javascript)"
            )
        return aliases[normalized]

    @property
    def extension(self) -> str:
        return f".{self.value}"


# Operator spellings in the target language
_BINARY_SYMBOLS = {
    BinaryOperator.OR: "||",
    BinaryOperator.AND: "&&",
    BinaryOperator.EQUAL: "===",
    BinaryOperator.NOT_EQUAL: "!==",
    BinaryOperator.LESS: "<",
    BinaryOperator.GREATER: ">",
    BinaryOperator.LESS_EQ: "<=",
    BinaryOperator.GREATER_EQ: ">=",
    BinaryOperator.ADD: "+",
    BinaryOperator.SUBTRACT: "-",
    BinaryOperator.MULTIPLY: "*",
    BinaryOperator.DIVIDE: "/",
    BinaryOperator.MODULO: "%",
}

_SUFFIX_CODES = {
    TypeSuffix.NONE: "",
    TypeSuffix.INTEGER: "$i",
    TypeSuffix.FLOAT: "$f",
    TypeSuffix.STRING: "$s",
}

GLOBAL_FRAME = "G"
LOCAL_FRAME = "F"

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class _FunctionScope:
    """Names a function body writes to its own frame or to the global one."""

    def __init__(self, parameters: tuple[VariableReference, ...]):
        self.local_keys: set[str] = {p.key for p in parameters}
        self.global_keys: set[str] = set()
        self.array_keys: set[str] = set()


# =============================================================================
# Code Emitter Class
# =============================================================================

class CodeEmitter:
    """
    Generates TypeScript or JavaScript from a BASIC AST.

    Example:
        emitter = CodeEmitter(target="js")
        code = emitter.generate(parse_source("Graphics 320, 240"))

    Attributes:
        target: Output dialect
        runtime_module: Module specifier the runtime is imported from
        runtime_name: Name the runtime object is bound to
        output_comments: Emit the banner and declaration comments
    """

    def __init__(
        self,
        target: str = "ts",
        runtime_module: str = "./bb_runtime",
        runtime_name: str = "rt",
        output_comments: bool = True,
        indent: str = "  ",
    ):
        if not _IDENTIFIER.match(runtime_name):
            raise ValueError(f"runtime name '{runtime_name}' is not a valid identifier")

        self.target = TargetDialect.from_name(target)
        self.runtime_module = runtime_module
        self.runtime_name = runtime_name
        self.output_comments = output_comments
        self.indent = indent

        self._output: list[str] = []
        self._indent_level = 0

        # Select temporaries: _sel1, _sel2, ...
        self._select_counter = 0

        # Keys that name program-wide variables and top-level Dim'd arrays
        self._global_keys: set[str] = set()
        self._array_keys: set[str] = set()

        # Innermost function being emitted (None at top level)
        self._function: Optional[_FunctionScope] = None

    def generate(self, program: ProgramNode) -> str:
        """
        Generate target code from an AST.

        Args:
            program: The root AST node

        Returns:
            Complete source text of one module

        Raises:
            ConstructionError: If the tree has a shape that cannot be emitted
            ArgumentCountError: If a runtime command has the wrong arity
        """
        self._output = []
        self._indent_level = 0
        self._select_counter = 0
        self._global_keys = set()
        self._array_keys = set()
        self._function = None

        logger.debug(
            f"Emitting {len(program.statements)} top-level statements "
            f"as {self.target.name.lower()}"
        )

        self._emit_header()

        self._emit("(function () {")
        self._indent_level += 1
        self._emit(f"const {GLOBAL_FRAME}{self._record_type()} = Object.create(null);")
        for stmt in program.statements:
            self._generate_statement(stmt)
        self._indent_level -= 1
        self._emit("})();")

        return "\n".join(self._output) + "\n"

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _emit(self, line: str = "") -> None:
        """Emit a line at the current indentation."""
        if line:
            self._output.append(f"{self.indent * self._indent_level}{line}")
        else:
            self._output.append("")

    def _emit_comment(self, comment: str) -> None:
        if self.output_comments:
            self._emit(f"// {comment}")

    def _emit_header(self) -> None:
        """Emit the banner and the runtime binding."""
        if self.output_comments:
            self._emit(f"// Generated by bb2web {__version__}")

        module = json.dumps(self.runtime_module)
        if self.target == TargetDialect.TYPESCRIPT:
            self._emit(f"import {{ {self.runtime_name} }} from {module};")
        else:
            self._emit('"use strict";')
            self._emit(f"const {{ {self.runtime_name} }} = require({module});")
        self._emit()

    def _emit_body(self, statements: tuple[Statement, ...]) -> None:
        self._indent_level += 1
        for stmt in statements:
            self._generate_statement(stmt)
        self._indent_level -= 1

    def _new_select_temp(self) -> str:
        self._select_counter += 1
        return f"_sel{self._select_counter}"

    def _record_type(self) -> str:
        return ": Record<string, any>" if self.target == TargetDialect.TYPESCRIPT else ""

    def _any_type(self) -> str:
        return ": any" if self.target == TargetDialect.TYPESCRIPT else ""

    # =========================================================================
    # Binding Frames
    # =========================================================================

    def _read_frame(self) -> str:
        return LOCAL_FRAME if self._function else GLOBAL_FRAME

    def _write_frame(self, key: str) -> str:
        """Frame an assignment to `key` writes to."""
        scope = self._function
        if scope is None:
            return GLOBAL_FRAME
        if key in scope.local_keys:
            return LOCAL_FRAME
        if key in scope.global_keys or key in self._global_keys:
            return GLOBAL_FRAME
        # Implicit local
        scope.local_keys.add(key)
        return LOCAL_FRAME

    def _declare(self, scope: DeclarationScope, key: str) -> str:
        """Record a declaration and return the frame it binds in."""
        if self._function is None:
            if scope != DeclarationScope.LOCAL:
                self._global_keys.add(key)
            return GLOBAL_FRAME
        if scope == DeclarationScope.GLOBAL:
            self._function.global_keys.add(key)
            self._function.local_keys.discard(key)
            self._global_keys.add(key)
            return GLOBAL_FRAME
        self._function.local_keys.add(key)
        return LOCAL_FRAME

    @staticmethod
    def _slot(frame: str, key: str) -> str:
        return f"{frame}[{json.dumps(key)}]"

    @staticmethod
    def function_name(ref: VariableReference) -> str:
        """Identifier a user function is emitted under, e.g. bb_score$i."""
        return f"bb_{ref.name}{_SUFFIX_CODES[ref.suffix]}"

    # =========================================================================
    # Statement Generation
    # =========================================================================

    def _generate_statement(self, stmt: Statement) -> None:
        """Generate code for any statement."""
        if isinstance(stmt, VariableDeclaration):
            self._generate_declaration(stmt)
        elif isinstance(stmt, ArrayDeclaration):
            self._generate_dim(stmt)
        elif isinstance(stmt, AssignmentStatement):
            self._generate_assignment(stmt)
        elif isinstance(stmt, ExpressionStatement):
            self._emit(f"{self._expr(stmt.expression)};")
        elif isinstance(stmt, IfStatement):
            self._generate_if(stmt)
        elif isinstance(stmt, WhileStatement):
            self._generate_while(stmt)
        elif isinstance(stmt, RepeatStatement):
            self._generate_repeat(stmt)
        elif isinstance(stmt, ForStatement):
            self._generate_for(stmt)
        elif isinstance(stmt, SelectStatement):
            self._generate_select(stmt)
        elif isinstance(stmt, FunctionDeclaration):
            self._generate_function(stmt)
        elif isinstance(stmt, ReturnStatement):
            self._generate_return(stmt)
        else:
            raise ConstructionError(
                f"cannot emit statement {type(stmt).__name__}",
                location=getattr(stmt, "location", None),
            )

    def _generate_declaration(self, stmt: VariableDeclaration) -> None:
        key = stmt.target.key
        self._emit_comment(f"{stmt.scope.value.lower()} {key}")
        # Initializer is evaluated before the name is bound
        value = self._expr(stmt.initializer) if stmt.initializer is not None else "undefined"
        frame = self._declare(stmt.scope, key)
        self._emit(f"{self._slot(frame, key)} = {value};")

    def _generate_dim(self, stmt: ArrayDeclaration) -> None:
        key = stmt.target.key
        size = self._expr(stmt.size)
        scope = DeclarationScope.CONST if self._function is None else DeclarationScope.LOCAL
        frame = self._declare(scope, key)
        if self._function is None:
            self._array_keys.add(key)
        else:
            self._function.array_keys.add(key)
        self._emit(f"{self._slot(frame, key)} = new Array({size}).fill(0);")

    def _generate_assignment(self, stmt: AssignmentStatement) -> None:
        value = self._expr(stmt.value)
        self._emit(f"{self._target(stmt.target)} = {value};")

    def _target(self, target: Expression) -> str:
        """Render an assignment target."""
        if isinstance(target, VariableReference):
            return self._slot(self._write_frame(target.key), target.key)
        if isinstance(target, CallExpression):
            # Element write: the array object itself is only read
            base = self._slot(self._read_frame(), target.callee.key)
            return base + "".join(f"[{self._expr(a)}]" for a in target.arguments)
        raise UnsupportedTargetError(type(target).__name__, target.location)

    def _generate_if(self, stmt: IfStatement) -> None:
        for index, branch in enumerate(stmt.branches):
            test = self._expr(branch.test)
            if index == 0:
                self._emit(f"if ({test}) {{")
            else:
                self._emit(f"}} else if ({test}) {{")
            self._emit_body(branch.body)

        if stmt.else_body is not None:
            self._emit("} else {")
            self._emit_body(stmt.else_body)
        self._emit("}")

    def _generate_while(self, stmt: WhileStatement) -> None:
        self._emit(f"while ({self._expr(stmt.test)}) {{")
        self._emit_body(stmt.body)
        self._emit("}")

    def _generate_repeat(self, stmt: RepeatStatement) -> None:
        """Repeat/Until becomes do/while on the negated exit condition."""
        self._emit("do {")
        self._emit_body(stmt.body)
        if stmt.until is None:
            self._emit("} while (true);")
        else:
            self._emit(f"}} while (!({self._expr(stmt.until)}));")

    def _generate_for(self, stmt: ForStatement) -> None:
        """
        Generate a counted loop.

        The bound is inclusive. The loop counts down (>=) only when the
        step is a negative constant; any other step counts up (<=).
        """
        counter = self._slot(self._write_frame(stmt.counter.key), stmt.counter.key)
        start = self._expr(stmt.start)
        bound = self._expr(stmt.bound)

        if stmt.step is None:
            comparison = "<="
            increment = "1"
        else:
            step_value = self._constant_value(stmt.step)
            comparison = ">=" if step_value is not None and step_value < 0 else "<="
            increment = f"({self._expr(stmt.step)})"

        self._emit(
            f"for ({counter} = {start}; {counter} {comparison} {bound}; "
            f"{counter} += {increment}) {{"
        )
        self._emit_body(stmt.body)
        self._emit("}")

    def _constant_value(self, expr: Expression) -> Optional[float]:
        """Fold a numeric literal, possibly negated or parenthesized."""
        if isinstance(expr, NumberLiteral):
            return expr.value
        if isinstance(expr, GroupingExpression):
            return self._constant_value(expr.expression)
        if isinstance(expr, UnaryExpression) and expr.operator == UnaryOperator.NEGATE:
            value = self._constant_value(expr.operand)
            return -value if value is not None else None
        return None

    def _generate_select(self, stmt: SelectStatement) -> None:
        """
        Generate Select as an if/else-if chain over a temporary.

        The scrutinee is evaluated exactly once; each Case matches by
        membership in the list of its test values.
        """
        temp = self._new_select_temp()
        self._emit(f"const {temp}{self._any_type()} = {self._expr(stmt.scrutinee)};")

        for index, case in enumerate(stmt.cases):
            tests = ",".join(self._expr(t) for t in case.tests)
            keyword = "if" if index == 0 else "} else if"
            self._emit(f"{keyword} ([{tests}].includes({temp})) {{")
            self._emit_body(case.body)

        if stmt.default_body is not None:
            self._emit("} else {" if stmt.cases else "{")
            self._emit_body(stmt.default_body)
            self._emit("}")
        elif stmt.cases:
            self._emit("}")

    def _generate_function(self, stmt: FunctionDeclaration) -> None:
        any_type = self._any_type()
        params = ", ".join(f"p{i}{any_type}" for i in range(len(stmt.parameters)))
        self._emit(f"function {self.function_name(stmt.name)}({params}){any_type} {{")

        outer = self._function
        self._function = _FunctionScope(stmt.parameters)
        self._indent_level += 1

        self._emit(f"const {LOCAL_FRAME}{self._record_type()} = Object.create({GLOBAL_FRAME});")
        for index, param in enumerate(stmt.parameters):
            self._emit(f"{self._slot(LOCAL_FRAME, param.key)} = p{index};")
        for body_stmt in stmt.body:
            self._generate_statement(body_stmt)

        self._indent_level -= 1
        self._function = outer
        self._emit("}")

    def _generate_return(self, stmt: ReturnStatement) -> None:
        if stmt.value is None:
            self._emit("return;")
        else:
            self._emit(f"return {self._expr(stmt.value)};")

    # =========================================================================
    # Expression Generation
    # =========================================================================

    def _expr(self, expr: Expression) -> str:
        """Translate an expression to target source text."""
        if isinstance(expr, NumberLiteral):
            return self._number(expr.value)
        if isinstance(expr, StringLiteral):
            return json.dumps(expr.value)
        if isinstance(expr, BooleanLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, NullLiteral):
            return "null"
        if isinstance(expr, VariableReference):
            return self._slot(self._read_frame(), expr.key)
        if isinstance(expr, GroupingExpression):
            return f"({self._expr(expr.expression)})"
        if isinstance(expr, UnaryExpression):
            symbol = "!" if expr.operator == UnaryOperator.NOT else "-"
            return f"{symbol}({self._expr(expr.operand)})"
        if isinstance(expr, BinaryExpression):
            return self._binary(expr)
        if isinstance(expr, CallExpression):
            return self._call(expr)
        raise ConstructionError(
            f"cannot emit expression {type(expr).__name__}",
            location=getattr(expr, "location", None),
        )

    @staticmethod
    def _number(value) -> str:
        if isinstance(value, float):
            if math.isinf(value):
                return "Infinity"
            if value.is_integer() and abs(value) < 1e16:
                return str(int(value))
            return repr(value)
        return str(value)

    def _binary(self, expr: BinaryExpression) -> str:
        left = self._expr(expr.left)
        right = self._expr(expr.right)
        if expr.operator == BinaryOperator.POWER:
            return f"Math.pow({left}, {right})"
        return f"({left}) {_BINARY_SYMBOLS[expr.operator]} ({right})"

    def _call(self, expr: CallExpression) -> str:
        """
        Translate a call.

        Runtime commands become runtime member calls, Dim'd arrays become
        element reads, and anything else calls a user function.
        """
        arguments = [self._expr(a) for a in expr.arguments]
        callee = expr.callee

        command = get_command(callee.name)
        if command is not None:
            if not command.accepts(len(arguments)):
                raise ArgumentCountError(
                    callee.name, command.arity, len(arguments), location=expr.location,
                )
            return f"{self.runtime_name}.{command.target}({','.join(arguments)})"

        if self._is_array(callee.key):
            base = self._slot(self._read_frame(), callee.key)
            return base + "".join(f"[{a}]" for a in arguments)

        return f"{self.function_name(callee)}({','.join(arguments)})"

    def _is_array(self, key: str) -> bool:
        """True if `key` names an array visible from the current body."""
        scope = self._function
        if scope is None:
            return key in self._array_keys
        if key in scope.array_keys:
            return True
        return key in self._array_keys and key not in scope.local_keys
