# puzzle_parser.py - shapes and regions from the puzzle text
from __future__ import annotations

import re
from pathlib import Path
from typing import List, Union

from config import CFG
from models import ParseError, Problem, Puzzle, Shape

_SHAPE_HEAD_RE = re.compile(r"^(?P<id>[^x:]*):$")
_REGION_RE = re.compile(r"^(?P<w>[^x:]*)x(?P<h>[^:]*):(?P<counts>.*)$")


def _to_int(tok: str, line_no: int, what: str) -> int:
    tok = tok.strip()
    if not (tok.isascii() and tok.isdecimal()):
        raise ParseError(line_no, f"invalid {what} '{tok}'")
    return int(tok)


def _parse_shape(lines: List[str], i: int, shape_id: int) -> Shape:
    size = CFG.SHAPE_SIZE
    allowed = {CFG.FILLED, CFG.EMPTY}
    if i + size >= len(lines):
        raise ParseError(i + 1, f"shape {shape_id} incomplete, expected {size} grid lines")
    rows = []
    for j in range(1, size + 1):
        row = lines[i + j].strip()
        if len(row) != size:
            raise ParseError(
                i + j + 1,
                f"shape {shape_id} grid line {j} should be {size} characters, got '{row}'",
            )
        bad = set(row) - allowed
        if bad:
            raise ParseError(i + j + 1, f"shape {shape_id} has unexpected marker(s) {''.join(sorted(bad))!r}")
        rows.append(row)
    return Shape(shape_id, tuple(rows))


def parse_puzzle(text: str) -> Puzzle:
    """Parse shape blocks (``N:`` + grid lines) and ``WxH: c0 c1 ...`` regions."""

    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()

    shapes: List[Shape] = []
    problems: List[Problem] = []
    seen_ids = set()
    i = 0
    while i < len(lines):
        line = lines[i].strip()
        line_no = i + 1

        if not line:
            i += 1
            continue

        head = _SHAPE_HEAD_RE.match(line)
        if head:
            shape_id = _to_int(head.group("id"), line_no, "shape ID")
            if shape_id in seen_ids:
                raise ParseError(line_no, f"shape {shape_id} defined twice")
            seen_ids.add(shape_id)
            shapes.append(_parse_shape(lines, i, shape_id))
            i += CFG.SHAPE_SIZE + 1
            continue

        region = _REGION_RE.match(line)
        if region:
            width = _to_int(region.group("w"), line_no, "width")
            height = _to_int(region.group("h"), line_no, "height")
            counts = tuple(
                _to_int(tok, line_no, "shape count") for tok in region.group("counts").split()
            )
            problems.append(Problem(width, height, counts))
            i += 1
            continue

        raise ParseError(line_no, f"unexpected format '{line}'")

    return Puzzle(tuple(shapes), tuple(problems))


def load_puzzle(path: Union[str, Path]) -> Puzzle:
    with open(path, "r", encoding="utf-8") as fh:
        return parse_puzzle(fh.read())


__all__ = ["load_puzzle", "parse_puzzle"]
