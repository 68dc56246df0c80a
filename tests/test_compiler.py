# =============================================================================
# test_compiler.py - Compiler Driver and End-to-End Tests
# =============================================================================
# Tests for BasicCompiler, CompilerOptions and the module-level helpers,
# plus whole-program scenarios run through the full pipeline.
# =============================================================================

import re

import pytest
import bb2web
from bb2web import (
    BasicCompiler,
    CompilerOptions,
    CompilerResult,
    Bb2WebError,
    TranspileError,
    LexicalError,
    BasicSyntaxError,
    transpile,
    compile_file,
)
from bb2web.transpiler.ast import ASTVisitor, ProgramNode
from bb2web.transpiler.commands import get_command
from bb2web.transpiler.parser import parse_source
from bb2web.transpiler.errors import UnterminatedBlockError, InvalidCharacterError


GAME = """\
' Bouncing dot
Graphics 320, 240
Global x# = 10
Global dx# = 2
"""

DEMO = """\
Graphics 320, 240
SeedRnd MilliSecs()

Global px% = 160
Global py% = 120
Dim trail%(16)

Function clamp%(v%, lo%, hi%)
    If v% < lo% Then Return lo%
    If v% > hi% Then Return hi%
    Return v%
End Function

Repeat
    Cls
    If KeyDown(37) Then px% = px% - 2
    If KeyDown(39) Then px% = px% + 2
    px% = clamp%(px%, 0, 319)
    For i% = 15 To 1 Step -1
        trail%(i%) = trail%(i% - 1)
    Next
    trail%(0) = px%
    Select Rnd(3)
    Case 0
        Color 255, 0, 0
    Case 1, 2
        Color 0, 255, 0
    Default
        Color 255, 255, 255
    End Select
    Oval px% - 4, py% - 4, 8, 8
    Text 4, 4, "x=" + px%
    Flip
Until KeyDown(27)
"""


# =============================================================================
# Options Tests
# =============================================================================

class TestCompilerOptions:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        options = CompilerOptions()
        assert options.target == "ts"
        assert options.runtime_module == "./bb_runtime"
        assert options.runtime_name == "rt"
        assert options.output_comments is True
        assert options.indent == "  "

    def test_target_normalized(self):
        assert CompilerOptions(target="JavaScript").target == "js"

    def test_invalid_target(self):
        with pytest.raises(ValueError):
            CompilerOptions(target="wasm")


# =============================================================================
# Compiler Tests
# =============================================================================

class TestBasicCompiler:
    """Test the compiler class."""

    def test_compile_source(self):
        result = BasicCompiler().compile_source("Graphics 320,240", "demo.bb")
        assert isinstance(result, CompilerResult)
        assert result.success
        assert result.filename == "demo.bb"
        assert result.target == "ts"
        assert isinstance(result.ast, ProgramNode)
        assert result.token_count == 5
        assert "rt.Graphics(320,240);" in result.code

    def test_options_reach_emitter(self):
        options = CompilerOptions(
            target="js", runtime_module="./gfx", output_comments=False, indent="    ",
        )
        code = BasicCompiler(options).compile_source("Flip").code
        assert code.startswith('"use strict";\nconst { rt } = require("./gfx");')
        assert "    rt.Flip();" in code.splitlines()

    def test_errors_propagate(self):
        with pytest.raises(BasicSyntaxError):
            BasicCompiler().compile_source("If x Then\nNext")

    def test_compile_file(self, tmp_path):
        source = tmp_path / "game.bb"
        source.write_text("Cls\nFlip\n")
        result = BasicCompiler().compile_file(str(source))
        assert result.filename == str(source)
        assert "rt.Cls();" in result.code

    def test_compile_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BasicCompiler().compile_file(str(tmp_path / "missing.bb"))

    def test_error_location_uses_filename(self, tmp_path):
        source = tmp_path / "bad.bb"
        source.write_text("x = 1\ny = #\n")
        with pytest.raises(LexicalError) as exc_info:
            BasicCompiler().compile_file(str(source))
        assert exc_info.value.location.filename == str(source)
        assert exc_info.value.location.line == 2


# =============================================================================
# Convenience Function Tests
# =============================================================================

class TestConvenienceFunctions:
    """Test transpile() and compile_file()."""

    def test_transpile_default_typescript(self):
        code = transpile("Flip")
        assert 'import { rt } from "./bb_runtime";' in code
        assert code.startswith(f"// Generated by bb2web {bb2web.__version__}\n")

    def test_transpile_javascript(self):
        code = transpile("Flip", target="javascript")
        assert 'const { rt } = require("./bb_runtime");' in code

    def test_transpile_invalid_target(self):
        with pytest.raises(ValueError):
            transpile("Flip", target="lua")

    def test_compile_file_writes_output(self, tmp_path):
        source = tmp_path / "game.bb"
        source.write_text(GAME)
        output = tmp_path / "game.js"
        code = compile_file(str(source), str(output), target="js")
        assert output.read_text() == code

    def test_compile_file_without_output(self, tmp_path):
        source = tmp_path / "game.bb"
        source.write_text("Cls")
        assert "rt.Cls();" in compile_file(str(source))
        assert list(tmp_path.iterdir()) == [source]

    def test_public_helpers(self):
        assert bb2web.tokenize("Cls")[0].value == "Cls"
        assert len(bb2web.parse_source("Cls : Flip").statements) == 2

    def test_error_hierarchy(self):
        with pytest.raises(Bb2WebError):
            transpile("x = @")
        with pytest.raises(TranspileError):
            transpile("Wend")


# =============================================================================
# End-to-End Scenarios
# =============================================================================

class TestScenarios:
    """Whole programs through the full pipeline."""

    def test_graphics_call(self):
        assert "rt.Graphics(320,240);" in transpile("Graphics 320,240", target="js")

    def test_local_and_single_line_if(self):
        code = transpile("Local x% = 1\nIf x% = 1 Then x% = x% + 1", target="js")
        lines = [line.strip() for line in code.splitlines()]
        assert 'G["x%"] = 1;' in lines
        assert 'if ((G["x%"]) === (1)) {' in lines
        assert 'G["x%"] = (G["x%"]) + (1);' in lines

    def test_for_counts_down(self):
        code = transpile("For i = 10 To 1 Step -1\nNext")
        assert 'G["i"] >= 1' in code
        assert "<=" not in code

    def test_select_evaluates_once(self):
        code = transpile("Select x\nCase 1\nFlip\nEnd Select", target="js")
        lines = [line.strip() for line in code.splitlines()]
        assert lines.count('const _sel1 = G["x"];') == 1
        assert code.count('G["x"]') == 1
        flip = lines.index("rt.Flip();")
        assert lines[flip - 1] == "if ([1].includes(_sel1)) {"

    def test_truncated_if(self):
        code = transpile("If x Then", target="js")
        assert 'if (G["x"]) {' in code

    def test_wrong_closer_position(self):
        with pytest.raises(UnterminatedBlockError) as exc_info:
            transpile("If x Then\n  Flip\n  Next")
        assert exc_info.value.location.line == 3
        assert exc_info.value.location.column == 3

    def test_invalid_character_position(self):
        with pytest.raises(InvalidCharacterError) as exc_info:
            transpile("Cls\n  y = 1 @ 2")
        assert exc_info.value.location.line == 2
        assert exc_info.value.location.column == 9

    def test_deterministic_output(self):
        assert transpile(DEMO) == transpile(DEMO)
        assert transpile(DEMO, target="js") == transpile(DEMO, target="js")

    def test_full_program(self):
        code = transpile(DEMO, target="js", filename="demo.bb")
        assert "rt.SeedRnd(rt.MilliSecs());" in code
        assert "function bb_clamp$i(p0, p1, p2) {" in code
        assert 'G["px%"] = bb_clamp$i(G["px%"],0,319);' in code
        assert 'G["trail%"][G["i%"]] = G["trail%"][(G["i%"]) - (1)];' in code
        assert "if ([1,2].includes(_sel1)) {" in code
        assert 'rt.Text(4,4,("x=") + (G["px%"]));' in code
        assert "} while (!(rt.KeyDown(27)));" in code

    def test_suffix_identity(self):
        code = transpile("n = 1\nn% = 2\nn$ = \"3\"", target="js")
        assert 'G["n"] = 1;' in code
        assert 'G["n%"] = 2;' in code
        assert 'G["n$"] = "3";' in code

    def test_runtime_calls_follow_source_order(self):
        source = 'Graphics 320, 240\nCls\nColor 255, 0, 0\nPlot 1, 2\nText 0, 0, "hi"\nFlip'

        class CommandCollector(ASTVisitor):
            def __init__(self):
                self.targets = []

            def visit_CallExpression(self, node):
                self.targets.append(get_command(node.callee.name).target)
                self.generic_visit(node)

        collector = CommandCollector()
        collector.visit(parse_source(source))
        emitted = re.findall(r"rt\.(\w+)\(", transpile(source, target="js"))
        assert collector.targets == ["Graphics", "Cls", "Color", "Plot", "Text", "Flip"]
        assert emitted == collector.targets
