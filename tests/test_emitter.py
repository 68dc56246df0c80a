# =============================================================================
# test_emitter.py - TypeScript / JavaScript Emitter Tests
# =============================================================================
# Tests for translating the BASIC AST into browser code.
#
# Test coverage includes:
#   - Module header and body wrapper for both dialects
#   - Binding frames: globals, function activation records, implicit locals
#   - Statement translation: If, loops, Select, functions, arrays
#   - Expression translation: operators, literals, calls
#   - Runtime command dispatch and arity validation
# =============================================================================

import pytest
from bb2web import __version__
from bb2web.errors import SourceLocation
from bb2web.transpiler.emitter import CodeEmitter, TargetDialect
from bb2web.transpiler.parser import parse_source
from bb2web.transpiler.ast import (
    ProgramNode,
    AssignmentStatement,
    NumberLiteral,
)
from bb2web.transpiler.errors import (
    ArgumentCountError,
    SemanticError,
    UnsupportedTargetError,
    ConstructionError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def emit(source: str, target: str = "js", **kwargs) -> str:
    """Emit code without comments so assertions stay short."""
    kwargs.setdefault("output_comments", False)
    emitter = CodeEmitter(target=target, **kwargs)
    return emitter.generate(parse_source(source))


def body(source: str, target: str = "js", **kwargs) -> list[str]:
    """Stripped lines between the frame setup and the wrapper close."""
    lines = [line.strip() for line in emit(source, target, **kwargs).splitlines()]
    start = next(i for i, line in enumerate(lines) if line.startswith("const G"))
    return lines[start + 1:-1]


# =============================================================================
# Target Dialect Tests
# =============================================================================

class TestTargetDialect:
    """Test dialect names."""

    @pytest.mark.parametrize("name,expected", [
        ("ts", TargetDialect.TYPESCRIPT),
        ("TypeScript", TargetDialect.TYPESCRIPT),
        ("js", TargetDialect.JAVASCRIPT),
        ("JAVASCRIPT", TargetDialect.JAVASCRIPT),
    ])
    def test_from_name(self, name, expected):
        assert TargetDialect.from_name(name) is expected

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            TargetDialect.from_name("python")

    def test_extension(self):
        assert TargetDialect.TYPESCRIPT.extension == ".ts"
        assert TargetDialect.JAVASCRIPT.extension == ".js"


# =============================================================================
# Module Layout Tests
# =============================================================================

class TestModuleLayout:
    """Test header, runtime binding and the body wrapper."""

    def test_javascript_module(self):
        assert emit("Graphics 320,240", "js") == (
            '"use strict";\n'
            'const { rt } = require("./bb_runtime");\n'
            "\n"
            "(function () {\n"
            "  const G = Object.create(null);\n"
            "  rt.Graphics(320,240);\n"
            "})();\n"
        )

    def test_typescript_module(self):
        assert emit("Cls", "ts") == (
            'import { rt } from "./bb_runtime";\n'
            "\n"
            "(function () {\n"
            "  const G: Record<string, any> = Object.create(null);\n"
            "  rt.Cls();\n"
            "})();\n"
        )

    def test_banner(self):
        code = emit("Flip", "ts", output_comments=True)
        assert code.splitlines()[0] == f"// Generated by bb2web {__version__}"

    def test_no_banner_without_comments(self):
        assert "//" not in emit("Flip")

    def test_custom_runtime_module_and_name(self):
        code = emit("Flip", "ts", runtime_module="../lib/gfx", runtime_name="gfx")
        assert 'import { gfx } from "../lib/gfx";' in code
        assert "gfx.Flip();" in code

    def test_invalid_runtime_name(self):
        with pytest.raises(ValueError):
            CodeEmitter(runtime_name="not valid")

    def test_custom_indent(self):
        code = emit("Flip", indent="\t")
        assert "\trt.Flip();" in code.splitlines()

    def test_empty_program(self):
        assert body("") == []

    def test_trailing_newline(self):
        assert emit("Flip").endswith("})();\n")


# =============================================================================
# Declaration and Assignment Tests
# =============================================================================

class TestDeclarations:
    """Test declarations, assignments and arrays at top level."""

    def test_local_at_top_level_uses_global_frame(self):
        assert body("Local x% = 1") == ['G["x%"] = 1;']

    def test_declaration_comment(self):
        lines = body("Global score% = 0", output_comments=True)
        assert lines == ["// global score%", 'G["score%"] = 0;']

    def test_declaration_without_initializer(self):
        assert body("Const name$") == ['G["name$"] = undefined;']

    def test_suffixes_are_separate_keys(self):
        assert body("x = 1\nx% = 2\nx# = 3\nx$ = \"s\"") == [
            'G["x"] = 1;',
            'G["x%"] = 2;',
            'G["x#"] = 3;',
            'G["x$"] = "s";',
        ]

    def test_dim_and_elements(self):
        assert body("Dim grid%(10)\ngrid%(3) = 7\ny = grid%(3)") == [
            'G["grid%"] = new Array(10).fill(0);',
            'G["grid%"][3] = 7;',
            'G["y"] = G["grid%"][3];',
        ]

    def test_multi_index_element(self):
        assert body("Dim m(9)\nm(1, 2) = m(2, 1)") == [
            'G["m"] = new Array(9).fill(0);',
            'G["m"][1][2] = G["m"][2][1];',
        ]

    def test_unsupported_target(self):
        loc = SourceLocation("<input>", 1, 1)
        literal = NumberLiteral(location=loc, value=1, text="1")
        program = ProgramNode(
            location=loc,
            statements=(AssignmentStatement(location=loc, target=literal, value=literal),),
        )
        with pytest.raises(UnsupportedTargetError) as exc_info:
            CodeEmitter().generate(program)
        assert isinstance(exc_info.value, ConstructionError)
        assert "NumberLiteral" in str(exc_info.value)


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """Test operator and literal rendering."""

    @pytest.mark.parametrize("source,expected", [
        ("a = b", '(G["a"]) === (G["b"])'),
        ("a <> b", '(G["a"]) !== (G["b"])'),
        ("a And b", '(G["a"]) && (G["b"])'),
        ("a Or b", '(G["a"]) || (G["b"])'),
        ("7 Mod 3", "(7) % (3)"),
        ("a <= 2", '(G["a"]) <= (2)'),
        ("1 + 2 * 3", "(1) + ((2) * (3))"),
        ("2 ^ 3", "Math.pow(2, 3)"),
        ("-a", '-(G["a"])'),
        ("Not a", '!(G["a"])'),
        ("(1 + 2)", "((1) + (2))"),
    ])
    def test_operators(self, source, expected):
        assert body(f"y = {source}") == [f'G["y"] = {expected};']

    @pytest.mark.parametrize("source,expected", [
        ("42", "42"),
        ("2.0", "2"),
        ("2.5", "2.5"),
        ("1e3", "1000"),
        (".5", "0.5"),
        ("True", "true"),
        ("False", "false"),
        ("Null", "null"),
        ('"Hi"', '"Hi"'),
    ])
    def test_literals(self, source, expected):
        assert body(f"y = {source}") == [f'G["y"] = {expected};']

    def test_string_escaping(self):
        assert body(r'Text 10, 20, "say \"hi\""') == [
            'rt.Text(10,20,"say \\"hi\\"");'
        ]

    def test_non_ascii_string(self):
        assert body('y = "café"') == ['G["y"] = "caf\\u00e9";']


# =============================================================================
# Call Dispatch Tests
# =============================================================================

class TestCalls:
    """Test runtime commands, arrays and user functions."""

    def test_runtime_command_case_insensitive(self):
        assert body("graphics 640, 480\nPLOT 1, 2") == [
            "rt.Graphics(640,480);",
            "rt.Plot(1,2);",
        ]

    def test_runtime_command_in_expression(self):
        assert body("t = MilliSecs()") == ['G["t"] = rt.MilliSecs();']

    def test_arguments_left_to_right(self):
        assert body("Rect x, y, 10, 20, 0") == ['rt.Rect(G["x"],G["y"],10,20,0);']

    def test_user_function_call(self):
        assert body("y = add%(1, 2)\nreset") == [
            'G["y"] = bb_add$i(1,2);',
            "bb_reset();",
        ]

    def test_function_name_suffixes(self):
        assert body("a#()\nb$()") == ["bb_a$f();", "bb_b$s();"]

    def test_suffixed_name_distinct_from_underscore_name(self):
        source = "Function f%()\nEnd Function\nFunction f_i()\nEnd Function"
        lines = body(source)
        assert lines.count("function bb_f$i() {") == 1
        assert lines.count("function bb_f_i() {") == 1

    def test_wrong_arity(self):
        with pytest.raises(ArgumentCountError) as exc_info:
            emit("Color 255, 0")
        error = exc_info.value
        assert error.expected == "3"
        assert error.actual == 2
        assert "'Color' expects 3 arguments, got 2" in str(error)
        assert error.location.line == 1

    def test_optional_argument_range(self):
        assert body("Oval 1, 2, 3, 4") == ["rt.Oval(1,2,3,4);"]
        with pytest.raises(SemanticError):
            emit("y = Rnd(1, 2, 3)")

    def test_arity_error_position(self):
        with pytest.raises(ArgumentCountError) as exc_info:
            emit("Cls\nFlip 1")
        assert exc_info.value.location.line == 2
        assert exc_info.value.location.column == 1


# =============================================================================
# Control Flow Tests
# =============================================================================

class TestControlFlow:
    """Test If, While, Repeat and For."""

    def test_if_chain(self):
        source = "If a Then\nCls\nElseIf b Then\nFlip\nElse\nPlot 1, 2\nEnd If"
        assert body(source) == [
            'if (G["a"]) {',
            "rt.Cls();",
            '} else if (G["b"]) {',
            "rt.Flip();",
            "} else {",
            "rt.Plot(1,2);",
            "}",
        ]

    def test_single_line_if_with_colon(self):
        assert body("If x Then y = 1 : z = 2") == [
            'if (G["x"]) {',
            'G["y"] = 1;',
            "}",
            'G["z"] = 2;',
        ]

    def test_while(self):
        assert body("While x < 10\nx = x + 1\nWend") == [
            'while ((G["x"]) < (10)) {',
            'G["x"] = (G["x"]) + (1);',
            "}",
        ]

    def test_repeat_until(self):
        assert body("Repeat\nFlip\nUntil KeyDown(27)") == [
            "do {",
            "rt.Flip();",
            "} while (!(rt.KeyDown(27)));",
        ]

    def test_repeat_forever(self):
        assert body("Repeat\nFlip") == ["do {", "rt.Flip();", "} while (true);"]

    def test_for_default_step(self):
        assert body("For i = 1 To 3\nNext") == [
            'for (G["i"] = 1; G["i"] <= 3; G["i"] += 1) {',
            "}",
        ]

    def test_for_negative_step(self):
        assert body("For i = 10 To 1 Step -1\nNext")[0] == (
            'for (G["i"] = 10; G["i"] >= 1; G["i"] += (-(1))) {'
        )

    def test_for_parenthesized_negative_step(self):
        assert ">=" in body("For i = 10 To 0 Step (-2)\nNext")[0]

    def test_for_positive_step(self):
        header = body("For i = 0 To 10 Step 2\nNext")[0]
        assert "<= 10" in header
        assert "+= (2)" in header

    def test_for_variable_step_counts_up(self):
        assert "<=" in body("For i = 0 To 10 Step s\nNext")[0]

    def test_indentation(self):
        code = emit("While True\nIf x Then Cls\nWend")
        assert "      rt.Cls();" in code.splitlines()


# =============================================================================
# Select Tests
# =============================================================================

class TestSelect:
    """Test Select translation and temporaries."""

    def test_select_with_default(self):
        source = "Select x\nCase 1, 2\nFlip\nCase 3\nDefault\nCls\nEnd Select"
        assert body(source) == [
            'const _sel1 = G["x"];',
            "if ([1,2].includes(_sel1)) {",
            "rt.Flip();",
            "} else if ([3].includes(_sel1)) {",
            "} else {",
            "rt.Cls();",
            "}",
        ]

    def test_select_typescript_temp(self):
        assert body("Select x\nCase 1\nFlip\nEnd Select", "ts")[0] == (
            'const _sel1: any = G["x"];'
        )

    def test_select_only_default(self):
        assert body("Select x\nDefault\nCls\nEnd Select") == [
            'const _sel1 = G["x"];',
            "{",
            "rt.Cls();",
            "}",
        ]

    def test_select_without_clauses(self):
        assert body("Select x\nEnd Select") == ['const _sel1 = G["x"];']

    def test_temporaries_are_numbered(self):
        source = "Select a\nCase 1\nEnd Select\nSelect b\nCase 2\nEnd Select"
        lines = body(source)
        assert 'const _sel1 = G["a"];' in lines
        assert 'const _sel2 = G["b"];' in lines

    def test_counter_resets_per_generate(self):
        emitter = CodeEmitter(target="js")
        program = parse_source("Select a\nCase 1\nEnd Select")
        first = emitter.generate(program)
        second = emitter.generate(program)
        assert first == second
        assert "_sel2" not in second


# =============================================================================
# Function and Scope Tests
# =============================================================================

class TestFunctions:
    """Test function emission and binding frames."""

    def test_typescript_function(self):
        source = "Function add%(a%, b%)\nReturn a% + b%\nEnd Function"
        assert body(source, "ts") == [
            "function bb_add$i(p0: any, p1: any): any {",
            "const F: Record<string, any> = Object.create(G);",
            'F["a%"] = p0;',
            'F["b%"] = p1;',
            'return (F["a%"]) + (F["b%"]);',
            "}",
        ]

    def test_javascript_function(self):
        assert body("Function tick()\nReturn\nEnd Function") == [
            "function bb_tick() {",
            "const F = Object.create(G);",
            "return;",
            "}",
        ]

    def test_global_written_through_global_frame(self):
        source = "Global score% = 0\nFunction bump()\nscore% = score% + 1\nEnd Function"
        assert body(source)[3] == 'G["score%"] = (F["score%"]) + (1);'

    def test_undeclared_name_is_implicit_local(self):
        source = "Function f()\ntmp = 5\ntmp = tmp + 1\nEnd Function"
        assert body(source)[2:4] == ['F["tmp"] = 5;', 'F["tmp"] = (F["tmp"]) + (1);']

    def test_global_declared_inside_function(self):
        source = "Function f()\nGlobal g = 1\ng = 2\nEnd Function\ng = 3"
        lines = body(source)
        assert 'G["g"] = 1;' in lines
        assert 'G["g"] = 2;' in lines
        assert lines[-1] == 'G["g"] = 3;'

    def test_local_shadows_global(self):
        source = "Global x = 1\nFunction f()\nLocal x = 2\nx = 3\nEnd Function"
        lines = body(source)
        assert lines[3:5] == ['F["x"] = 2;', 'F["x"] = 3;']

    def test_parameter_shadows_global(self):
        source = "Global n = 1\nFunction f(n)\nn = 2\nEnd Function"
        assert 'F["n"] = 2;' in body(source)

    def test_for_counter_in_function(self):
        source = "Function f()\nFor i = 1 To 2\nNext\nEnd Function"
        assert body(source)[2].startswith('for (F["i"] = 1; F["i"] <= 2;')

    def test_dim_in_function(self):
        source = "Function f()\nDim buf(4)\nbuf(0) = 1\nEnd Function"
        lines = body(source)
        assert 'F["buf"] = new Array(4).fill(0);' in lines
        assert 'F["buf"][0] = 1;' in lines

    def test_function_dim_stays_inside_function(self):
        source = (
            "Function init()\nDim buf(10)\ny = buf(0)\nEnd Function\n"
            "Function buf(i)\nReturn i\nEnd Function\n"
            "x = buf(3)"
        )
        lines = body(source)
        assert 'F["y"] = F["buf"][0];' in lines
        assert lines[-1] == 'G["x"] = bb_buf(3);'
        assert not any('G["buf"]' in line for line in lines)

    def test_top_level_dim_visible_in_function(self):
        source = "Dim grid(4)\nFunction f()\nv = grid(1)\nEnd Function"
        assert 'F["v"] = F["grid"][1];' in body(source)

    def test_scope_restored_after_function(self):
        source = "Function f()\nx = 1\nEnd Function\nx = 2"
        assert body(source)[-1] == 'G["x"] = 2;'

    def test_call_between_functions(self):
        source = (
            "Function sq#(v#)\nReturn v# * v#\nEnd Function\n"
            "Function len#(x#, y#)\nReturn sq#(x#) + sq#(y#)\nEnd Function"
        )
        assert "return (bb_sq$f(F[\"x#\"])) + (bb_sq$f(F[\"y#\"]));" in body(source)
