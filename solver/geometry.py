"""Shape orientations: the rotations and reflections of a 3×3 piece."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from config import CFG
from models import Coord, Shape

Orientation = Tuple[Coord, ...]

_ORIENTATION_CACHE: Dict[Tuple[Shape, str], Tuple[Orientation, ...]] = {}


def rotate_90(cells: Iterable[Coord]) -> List[Coord]:
    return [Coord(-c.y, c.x) for c in cells]


def flip_horizontal(cells: Iterable[Coord]) -> List[Coord]:
    return [Coord(-c.x, c.y) for c in cells]


def normalize(cells: Sequence[Coord]) -> Orientation:
    """Translate so the minimum x and y are 0 and sort row-major."""

    if not cells:
        return ()
    min_x = min(c.x for c in cells)
    min_y = min(c.y for c in cells)
    moved = [Coord(c.x - min_x, c.y - min_y) for c in cells]
    return tuple(sorted(moved, key=Coord.row_major))


def _orientation_sort_key(orientation: Orientation) -> Tuple[Tuple[int, int], ...]:
    return tuple(c.row_major() for c in orientation)


def canonical_orientations(shape: Shape) -> Tuple[Orientation, ...]:
    """Return the distinct orientations of ``shape``.

    Four rotations of the piece and four of its mirror image are normalized
    and collected into a set, so symmetric pieces collapse to fewer than eight
    entries. The result is sorted to keep the enumeration order stable across
    runs.
    """

    # Shape cells depend on the configured filled marker
    key = (shape, CFG.FILLED)
    cached = _ORIENTATION_CACHE.get(key)
    if cached is not None:
        return cached

    base = list(shape.cells())
    seen = set()
    for start in (base, flip_horizontal(base)):
        current = start
        for _ in range(4):
            seen.add(normalize(current))
            current = rotate_90(current)

    result = tuple(sorted(seen, key=_orientation_sort_key))
    _ORIENTATION_CACHE[key] = result
    return result


def orientation_count(shape: Shape) -> int:
    return len(canonical_orientations(shape))


def orientation_extent(orientation: Orientation) -> Tuple[int, int]:
    """Bounding box ``(w, h)`` of a normalized orientation."""

    if not orientation:
        return (0, 0)
    return (max(c.x for c in orientation) + 1, max(c.y for c in orientation) + 1)


def symmetry_report(shapes: Iterable[Shape]) -> List[Tuple[int, int, int]]:
    """``(shape_id, cell_count, orientation_count)`` for every shape."""

    return [(s.id, s.cell_count, orientation_count(s)) for s in sorted(shapes, key=lambda s: s.id)]


__all__ = [
    "Orientation",
    "canonical_orientations",
    "flip_horizontal",
    "normalize",
    "orientation_count",
    "orientation_extent",
    "rotate_90",
    "symmetry_report",
]
