# =============================================================================
# test_commands.py - Runtime Command Table Tests
# =============================================================================
# Tests for the table of runtime commands generated code may call.
# =============================================================================

import pytest
from bb2web.transpiler.commands import (
    RUNTIME_COMMANDS,
    CommandCategory,
    RuntimeCommand,
    get_command,
    is_runtime_command,
    get_commands_by_category,
    get_all_command_names,
)


class TestCommandLookup:
    """Test command lookup by name."""

    def test_lookup_case_insensitive(self):
        for name in ("plot", "PLOT", "Plot"):
            assert get_command(name).target == "Plot"

    def test_unknown_command(self):
        assert get_command("DrawImage") is None
        assert not is_runtime_command("DrawImage")

    def test_is_runtime_command(self):
        assert is_runtime_command("millisecs")

    def test_all_names(self):
        names = get_all_command_names()
        assert names == sorted(names)
        assert len(names) == 15
        assert "SEEDRND" in names

    def test_names_are_unique(self):
        assert len({c.name for c in RUNTIME_COMMANDS}) == len(RUNTIME_COMMANDS)

    def test_targets_match_basic_spelling(self):
        for command in RUNTIME_COMMANDS:
            assert command.target.upper() == command.name

    def test_by_category(self):
        names = [c.name for c in get_commands_by_category(CommandCategory.INPUT)]
        assert names == ["KEYDOWN", "MOUSEX", "MOUSEY"]


class TestArity:
    """Test argument count checks."""

    @pytest.mark.parametrize("name,arity", [
        ("GRAPHICS", "2-3"),
        ("CLS", "0"),
        ("COLOR", "3"),
        ("LINE", "4"),
        ("RECT", "4-5"),
        ("RND", "1-2"),
        ("KEYDOWN", "1"),
    ])
    def test_arity_text(self, name, arity):
        assert get_command(name).arity == arity

    def test_accepts(self):
        rect = get_command("Rect")
        assert not rect.accepts(3)
        assert rect.accepts(4)
        assert rect.accepts(5)
        assert not rect.accepts(6)

    def test_unbounded(self):
        command = RuntimeCommand("PRINT", "Print", 1, None, CommandCategory.DRAWING)
        assert command.accepts(12)
        assert command.arity == "1+"

    def test_table_is_immutable(self):
        with pytest.raises(AttributeError):
            get_command("Cls").target = "Clear"
