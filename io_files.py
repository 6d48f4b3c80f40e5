"""Helpers for writing solver outputs to disk."""

from __future__ import annotations

import os
from typing import List, Sequence, Tuple

from config import CFG
from models import Problem, SolveOutcome
from render import render_text


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_report(results: Sequence[Tuple[Problem, SolveOutcome]], base_dir: str) -> str:
    """Write every problem's verdict, and its grid when solved."""

    path = _resolve_output_path(base_dir, CFG.REPORT_OUT, "solutions.txt")
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    solved = 0
    with open(path, "w", encoding="utf-8") as f:
        for idx, (problem, outcome) in enumerate(results, start=1):
            counts = " ".join(str(c) for c in problem.counts)
            f.write(f"#{idx} {problem.label}: {counts} -> {outcome.status}")
            if outcome.reason:
                f.write(f" ({outcome.reason})")
            f.write("\n")
            if outcome.ok:
                solved += 1
                for row in render_text(outcome.placements, problem.width, problem.height):
                    f.write(f"  {row}\n")
        f.write(f"{solved} / {len(results)} problem spaces solved\n")
    return path


def write_layout_view_html(sections: List[Tuple[str, str, str]], base_dir: str) -> str:
    """Write an HTML page with one ``(title, svg, legend)`` card per solution."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    cards = "".join(
        f"<section class='card'><h3>{title}</h3><div class='gridwrap'>{svg}</div>"
        f"<ul>{legend}</ul></section>"
        for title, svg, legend in sections
    )
    with open(path, "w", encoding="utf-8") as vf:
        vf.write(
            f"""<!doctype html>
<html><head><meta charset='utf-8'><title>Layout View</title></head>
<body class='container'>
<h1>Layout View</h1>
{cards or "<p>No solution</p>"}
</body></html>"""
        )
    return path


__all__ = ["write_report", "write_layout_view_html"]
