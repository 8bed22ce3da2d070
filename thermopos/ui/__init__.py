"""Printable layout components built from protocol frames."""

from thermopos.ui.line import Line, LineStyle

__all__ = ["Line", "LineStyle"]
