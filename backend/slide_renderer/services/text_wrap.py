"""
Greedy line wrapping and vertical placement of wrapped lines.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass(frozen=True)
class PlacedLine:
    text: str
    y: float


@dataclass
class LineBlock:
    """Lines of one text block with their draw positions."""
    lines: List[PlacedLine] = field(default_factory=list)
    next_y: float = 0
    dropped: int = 0


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """Wrap text to fit within max_width.

    Words are split on single spaces and packed greedily. A word that is
    wider than max_width on its own is never broken; it gets its own line.
    """
    lines = []
    current_line = ""

    for word in text.split(" "):
        test_line = f"{current_line} {word}" if current_line else word

        if measure(test_line) > max_width and current_line:
            lines.append(current_line)
            current_line = word
        else:
            current_line = test_line

    if current_line:
        lines.append(current_line)

    return lines


def place_lines(
    lines: List[str],
    start_y: float,
    line_height: float,
    limit_y: Optional[float] = None,
) -> LineBlock:
    """Assign a y position to each line, stopping before limit_y if given."""
    block = LineBlock(next_y=start_y)

    for index, line in enumerate(lines):
        if limit_y is not None and block.next_y + line_height > limit_y:
            block.dropped = len(lines) - index
            break
        block.lines.append(PlacedLine(line, block.next_y))
        block.next_y += line_height

    return block
