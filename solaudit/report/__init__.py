"""solaudit — Report rendering (text and JSON)."""

from solaudit.report.writer import render, render_json, render_text

__all__ = ["render", "render_json", "render_text"]
