"""Report export."""

from .renderer import render_report

__all__ = ["render_report"]
