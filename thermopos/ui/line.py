"""
Horizontal rule component.

A Line repeats a pattern across the printable width. Its font, size and
justification overrides apply to the rule only: the printer's previous
values are sent again after it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

from thermopos.encoding import CharacterEncoder
from thermopos.errors import ValidationError
from thermopos.protocol.paper import feed
from thermopos.protocol.text import Font, JustifyMode, font, justify, text, text_size

if TYPE_CHECKING:
    from thermopos.options import PrinterOptions
    from thermopos.printer import Printer, PrinterStyleState

__all__ = ["LineStyle", "Line"]


class LineStyle(Enum):
    """Built-in patterns. Pass a plain string to Line for a custom one."""

    SIMPLE = "-"
    DOUBLE = "="
    DOTTED = "."
    DASHED = "- "


@dataclass(frozen=True)
class Line:
    """
    Rule description.

    Attributes:
        style: LineStyle or a custom pattern string.
        width: Pattern repetitions; None fills the line.
        offset: Blank columns, placed before the rule when left justified
            and after it otherwise.
        font: Font override.
        size: (width, height) text size override.
        justify: Justification override.

    Example:
        >>> Line(LineStyle.DOUBLE, width=16, offset=8, justify=JustifyMode.CENTER)
    """

    style: Union[LineStyle, str] = LineStyle.SIMPLE
    width: Optional[int] = None
    offset: int = 0
    font: Optional[Font] = None
    size: Optional[Tuple[int, int]] = None
    justify: Optional[JustifyMode] = None

    def __post_init__(self) -> None:
        if not isinstance(self.style, (LineStyle, str)):
            raise ValidationError("Line style must be a LineStyle or a pattern string")
        if self.offset < 0:
            raise ValidationError("Line offset must be >= 0", context={"offset": self.offset})
        if self.width is not None and self.width < 0:
            raise ValidationError("Line width must be >= 0", context={"width": self.width})

    @property
    def pattern(self) -> str:
        return self.style.value if isinstance(self.style, LineStyle) else self.style

    def layout(self, characters_per_line: int, text_width: int, mode: JustifyMode) -> str:
        """
        Text of the rule for a given line geometry.

        The rule never exceeds ``characters_per_line // text_width`` columns.
        """
        max_width = characters_per_line // text_width
        fitted = max(0, max_width - self.offset)
        width = fitted if self.width is None else min(self.width, fitted)
        line = self.pattern * width
        if self.offset and line:
            padding = " " * self.offset
            line = padding + line if mode is JustifyMode.LEFT else line + padding
        return line[:max_width]

    def frames(
        self,
        options: "PrinterOptions",
        state: "PrinterStyleState",
        encoder: CharacterEncoder,
    ) -> List[bytes]:
        """Overrides, rule text with a line feed, then the restored style."""
        frames: List[bytes] = []
        size = state.text_size
        mode = state.justify

        if self.font is not None:
            frames.append(font(self.font))
        if self.size is not None:
            frames.append(text_size(*self.size))
            size = self.size
        if self.justify is not None:
            frames.append(justify(self.justify))
            mode = self.justify

        line = self.layout(options.characters_per_line, size[0], mode)
        if line:
            frames.append(text(line, state.page_code, encoder))
            frames.append(feed(1))

        if self.font is not None:
            frames.append(font(state.font))
        if self.size is not None:
            frames.append(text_size(*state.text_size))
        if self.justify is not None:
            frames.append(justify(state.justify))
        return frames

    def render(self, printer: "Printer") -> "Printer":
        return printer.draw_line(self)
