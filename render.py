import random
from typing import Dict, List, Tuple

from config import CFG
from models import Placement

SYMBOLS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def shape_symbol(shape_id: int) -> str:
    return SYMBOLS[shape_id % len(SYMBOLS)]


def render_text(placed: List[Placement], W: int, H: int) -> List[str]:
    grid = [[CFG.EMPTY] * W for _ in range(H)]
    for p in placed:
        sym = shape_symbol(p.shape_id)
        for c in p.cells:
            grid[c.y][c.x] = sym
    return ["".join(row) for row in grid]


def _color(shape_id: int) -> str:
    rng = random.Random(shape_id * 2654435761 & 0xFFFFFFFF)
    r = rng.randint(40, 200)
    g = rng.randint(40, 200)
    b = rng.randint(40, 200)
    return f"rgb({r},{g},{b})"


def render_svg(placed: List[Placement], W: int, H: int) -> Tuple[str, str]:
    palette: Dict[int, str] = {}
    for p in sorted(placed, key=lambda p: p.shape_id):
        palette.setdefault(p.shape_id, _color(p.shape_id))

    scale = 24
    svg_w = W * scale + 2
    svg_h = H * scale + 2

    cells = []
    for p in placed:
        fill = palette[p.shape_id]
        for c in p.cells:
            cells.append(
                f'<rect x="{c.x * scale + 1}" y="{c.y * scale + 1}" width="{scale}" height="{scale}" '
                f'fill="{fill}" stroke="black" stroke-width="0.5"/>'
            )
        cells.append(
            f'<text x="{p.x * scale + 4}" y="{p.y * scale + 14}" font-size="10" fill="black">'
            f'{p.shape_id}.{p.instance}</text>'
        )
    grid = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{grid}{"".join(cells)}</svg>'
    )

    legend = "".join(
        f"<li><span class='swatch' style='background:{c}'></span>shape {n}</li>" for n, c in palette.items()
    )
    return svg, legend
