"""
BASIC to Web Transpiler
=======================

This package compiles a small Blitz-style BASIC dialect into a single
TypeScript or JavaScript module for the browser. It provides:

- A lexer (tokenizer) for BASIC source code
- A recursive descent parser producing an immutable AST
- An emitter writing TypeScript (ES module) or JavaScript (CommonJS)
- A table of the runtime commands generated code may call

Pipeline
--------
    BASIC Source → Lexer → Parser → AST → Emitter → TypeScript / JavaScript

Usage
-----
>>> from bb2web.transpiler import transpile
>>> source = '''
... Graphics 320,240
... For i% = 1 To 10
...     Plot i%, i%
... Next
... '''
>>> print(transpile(source, target="js"))

Language Subset
---------------
- Variables with type suffixes: x (untyped), x% (int), x# (float), x$ (string)
- Declarations: Global, Local, Const, Dim
- Control flow: If/ElseIf/Else (block and single-line), While/Wend,
  Repeat/Until, For/To/Step/Next, Select/Case/Default
- Functions with parameters and Return
- Comments: ' to end of line, Rem ... End Rem

Generated code does not touch the host directly; all drawing, timing,
input and random numbers go through the runtime object bound at the top
of the module (see bb2web.transpiler.commands).
"""

from bb2web.transpiler.compiler import (
    BasicCompiler,
    CompilerOptions,
    CompilerResult,
    transpile,
    compile_file,
)
from bb2web.transpiler.errors import (
    TranspileError,
    LexicalError,
    InvalidCharacterError,
    BasicSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
    InvalidCallTargetError,
    InvalidAssignmentTargetError,
    UnterminatedBlockError,
    ConstructionError,
    UnsupportedTargetError,
    SemanticError,
    ArgumentCountError,
)
from bb2web.transpiler.lexer import BasicLexer, BasicToken, TokenType, tokenize, format_tokens
from bb2web.transpiler.parser import BasicParser, parse_source
from bb2web.transpiler.emitter import CodeEmitter, TargetDialect
from bb2web.transpiler.commands import RuntimeCommand, CommandCategory, get_command
from bb2web.transpiler.ast import (
    ASTNode,
    ASTVisitor,
    ASTPrinter,
    ProgramNode,
    TypeSuffix,
    VariableReference,
    VariableDeclaration,
    ArrayDeclaration,
    AssignmentStatement,
    ExpressionStatement,
    IfStatement,
    IfBranch,
    WhileStatement,
    RepeatStatement,
    ForStatement,
    SelectStatement,
    CaseClause,
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
)

__all__ = [
    # Main API
    "BasicCompiler",
    "CompilerOptions",
    "CompilerResult",
    "transpile",
    "compile_file",
    # Errors
    "TranspileError",
    "LexicalError",
    "InvalidCharacterError",
    "BasicSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "InvalidCallTargetError",
    "InvalidAssignmentTargetError",
    "UnterminatedBlockError",
    "ConstructionError",
    "UnsupportedTargetError",
    "SemanticError",
    "ArgumentCountError",
    # Lexer
    "BasicLexer",
    "BasicToken",
    "TokenType",
    "tokenize",
    "format_tokens",
    # Parser
    "BasicParser",
    "parse_source",
    # Emitter
    "CodeEmitter",
    "TargetDialect",
    # Runtime commands
    "RuntimeCommand",
    "CommandCategory",
    "get_command",
    # AST
    "ASTNode",
    "ASTVisitor",
    "ASTPrinter",
    "ProgramNode",
    "TypeSuffix",
    "VariableReference",
    "VariableDeclaration",
    "ArrayDeclaration",
    "AssignmentStatement",
    "ExpressionStatement",
    "IfStatement",
    "IfBranch",
    "WhileStatement",
    "RepeatStatement",
    "ForStatement",
    "SelectStatement",
    "CaseClause",
    "FunctionDeclaration",
    "ReturnStatement",
    "BinaryExpression",
    "UnaryExpression",
    "CallExpression",
    "GroupingExpression",
    "NumberLiteral",
    "StringLiteral",
    "BooleanLiteral",
    "NullLiteral",
]
