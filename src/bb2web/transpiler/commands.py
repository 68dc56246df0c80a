"""
Runtime Command Definitions
===========================

This module lists the built-in BASIC commands that the emitter maps onto
the browser runtime object (conventionally bound as `rt` in generated
code). Command names are not keywords: they lex and parse as ordinary
identifiers and are resolved here, by upper-cased name, when the emitter
translates a call.

Runtime Surface
---------------
| BASIC      | Runtime member | Arguments            |
|------------|----------------|----------------------|
| Graphics   | Graphics       | w, h [, depth]       |
| Cls        | Cls            | -                    |
| Color      | Color          | r, g, b              |
| Plot       | Plot           | x, y                 |
| Line       | Line           | x1, y1, x2, y2       |
| Rect       | Rect           | x, y, w, h [, solid] |
| Oval       | Oval           | x, y, w, h [, solid] |
| Text       | Text           | x, y, s              |
| Flip       | Flip           | -                    |
| MilliSecs  | MilliSecs      | -                    |
| KeyDown    | KeyDown        | code                 |
| MouseX     | MouseX         | -                    |
| MouseY     | MouseY         | -                    |
| Rnd        | Rnd            | a [, b]              |
| SeedRnd    | SeedRnd        | seed                 |

Any call whose name is not in this table is treated as an array read or
a user function call.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Command Categories
# =============================================================================

class CommandCategory(Enum):
    """Functional area of a runtime command."""
    GRAPHICS = auto()       # Surface setup and frame control
    DRAWING = auto()        # Primitives drawn with the current color
    TIMING = auto()         # Clock queries
    INPUT = auto()          # Keyboard and pointer state
    RANDOM = auto()         # Seeded random numbers


# =============================================================================
# Command Definition
# =============================================================================

@dataclass(frozen=True)
class RuntimeCommand:
    """
    Definition of one runtime command.

    Attributes:
        name: BASIC spelling (upper case)
        target: Member name on the runtime object
        min_args: Fewest arguments accepted
        max_args: Most arguments accepted (None for no limit)
        category: Functional category
        description: Brief description of what the runtime does

    Example:
        >>> RuntimeCommand("PLOT", "Plot", 2, 2, CommandCategory.DRAWING,
        ...                "Plot a single pixel")
    """
    name: str
    target: str
    min_args: int
    max_args: Optional[int]
    category: CommandCategory
    description: str = ""

    def accepts(self, count: int) -> bool:
        """Check whether a call with `count` arguments is valid."""
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

    @property
    def arity(self) -> str:
        """Human-readable argument count, e.g. '3' or '4-5'."""
        if self.max_args is None:
            return f"{self.min_args}+"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args}-{self.max_args}"


# =============================================================================
# Command Table
# =============================================================================

RUNTIME_COMMANDS: tuple[RuntimeCommand, ...] = (
    RuntimeCommand(
        "GRAPHICS", "Graphics", 2, 3, CommandCategory.GRAPHICS,
        "Initialize the drawing surface (width, height, optional depth)",
    ),
    RuntimeCommand(
        "CLS", "Cls", 0, 0, CommandCategory.GRAPHICS,
        "Clear the surface to black",
    ),
    RuntimeCommand(
        "COLOR", "Color", 3, 3, CommandCategory.GRAPHICS,
        "Set the draw color from 0-255 red, green, blue",
    ),
    RuntimeCommand(
        "PLOT", "Plot", 2, 2, CommandCategory.DRAWING,
        "Plot a single pixel",
    ),
    RuntimeCommand(
        "LINE", "Line", 4, 4, CommandCategory.DRAWING,
        "Draw a line between two points",
    ),
    RuntimeCommand(
        "RECT", "Rect", 4, 5, CommandCategory.DRAWING,
        "Draw a rectangle, filled unless solid is 0",
    ),
    RuntimeCommand(
        "OVAL", "Oval", 4, 5, CommandCategory.DRAWING,
        "Draw an ellipse bounded by a rectangle",
    ),
    RuntimeCommand(
        "TEXT", "Text", 3, 3, CommandCategory.DRAWING,
        "Draw text at a position",
    ),
    RuntimeCommand(
        "FLIP", "Flip", 0, 0, CommandCategory.GRAPHICS,
        "Mark the end of a frame",
    ),
    RuntimeCommand(
        "MILLISECS", "MilliSecs", 0, 0, CommandCategory.TIMING,
        "Milliseconds elapsed since the runtime started",
    ),
    RuntimeCommand(
        "KEYDOWN", "KeyDown", 1, 1, CommandCategory.INPUT,
        "Whether the key with the given code is held",
    ),
    RuntimeCommand(
        "MOUSEX", "MouseX", 0, 0, CommandCategory.INPUT,
        "Pointer x coordinate",
    ),
    RuntimeCommand(
        "MOUSEY", "MouseY", 0, 0, CommandCategory.INPUT,
        "Pointer y coordinate",
    ),
    RuntimeCommand(
        "RND", "Rnd", 1, 2, CommandCategory.RANDOM,
        "Random value in [0, a) or [a, b)",
    ),
    RuntimeCommand(
        "SEEDRND", "SeedRnd", 1, 1, CommandCategory.RANDOM,
        "Reseed the random generator",
    ),
)


# =============================================================================
# Command Lookup Functions
# =============================================================================

_COMMANDS_BY_NAME: dict[str, RuntimeCommand] = {
    command.name: command for command in RUNTIME_COMMANDS
}


def get_command(name: str) -> Optional[RuntimeCommand]:
    """
    Look up a runtime command by its BASIC name.

    Args:
        name: Command name, case-insensitive

    Returns:
        RuntimeCommand if found, None otherwise

    Example:
        >>> get_command("plot").target
        'Plot'
    """
    return _COMMANDS_BY_NAME.get(name.upper())


def is_runtime_command(name: str) -> bool:
    return name.upper() in _COMMANDS_BY_NAME


def get_commands_by_category(category: CommandCategory) -> list[RuntimeCommand]:
    """All commands in a category, in table order."""
    return [command for command in RUNTIME_COMMANDS if command.category == category]


def get_all_command_names() -> list[str]:
    """Sorted list of all command names."""
    return sorted(_COMMANDS_BY_NAME.keys())
