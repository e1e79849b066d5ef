"""Terminal text layout helpers that account for double-width CJK glyphs."""

from __future__ import annotations

import unicodedata


def display_width(text: str) -> int:
    """Columns `text` occupies in a monospace terminal."""
    width = 0
    for ch in text:
        if unicodedata.combining(ch):
            continue
        width += 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
    return width


def pad_right(text: str, width: int) -> str:
    return text + " " * max(0, width - display_width(text))


def truncate_display(text: str, max_width: int, marker: str = "...") -> str:
    """Cut `text` so it fits in `max_width` columns, adding a marker if cut."""
    if display_width(text) <= max_width:
        return text
    budget = max_width - display_width(marker)
    out: list[str] = []
    used = 0
    for ch in text:
        w = display_width(ch)
        if used + w > budget:
            break
        out.append(ch)
        used += w
    return "".join(out) + marker


def render_table(headers: list[str], rows: list[list[str]]) -> str:
    """ASCII grid table; the header row is separated by a `=` rule."""
    widths = [display_width(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], display_width(cell))

    def rule(ch: str) -> str:
        return "+" + "+".join(ch * (w + 2) for w in widths) + "+"

    def line(cells: list[str]) -> str:
        return "|" + "|".join(f" {pad_right(c, w)} " for c, w in zip(cells, widths)) + "|"

    out = [rule("-"), line(headers), rule("=")]
    out.extend(line(row) for row in rows)
    out.append(rule("-"))
    return "\n".join(out)
