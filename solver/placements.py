from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Tuple, Union

from config import CFG
from models import Coord, EmptyShapeError, Placement, Problem, Shape, UnknownShapeError
from solver.geometry import canonical_orientations, orientation_extent

ShapesLike = Union[Mapping[int, Shape], Iterable[Shape]]

_OFFSET_CACHE: Dict[Tuple[Shape, str, int, int], Tuple[Tuple[int, ...], ...]] = {}


def _anchors(extent: Tuple[int, int], width: int, height: int):
    w, h = extent
    for y in range(0, height - h + 1):
        for x in range(0, width - w + 1):
            yield x, y


def generate_placements(shape: Shape, instance: int, width: int, height: int) -> List[Placement]:
    """Every in-bounds placement of ``shape`` on a ``width``×``height`` board.

    Orientations are walked in canonical order, anchors row by row. Only the
    board bounds are checked; other pieces are ignored.
    """

    out: List[Placement] = []
    for orientation in canonical_orientations(shape):
        for x, y in _anchors(orientation_extent(orientation), width, height):
            cells = tuple(Coord(x + c.x, y + c.y) for c in orientation)
            out.append(Placement(shape.id, instance, x, y, cells))
    return out


def placement_offsets(shape: Shape, width: int, height: int) -> Tuple[Tuple[int, ...], ...]:
    """Same enumeration as :func:`generate_placements`, as flat board indices."""

    key = (shape, CFG.FILLED, int(width), int(height))
    cached = _OFFSET_CACHE.get(key)
    if cached is not None:
        return cached

    out: List[Tuple[int, ...]] = []
    for orientation in canonical_orientations(shape):
        rel = tuple(c.y * width + c.x for c in orientation)
        for x, y in _anchors(orientation_extent(orientation), width, height):
            base = y * width + x
            out.append(tuple(base + off for off in rel))
    result = tuple(out)
    _OFFSET_CACHE[key] = result
    return result


def placement_from_offsets(shape_id: int, instance: int, cells: Tuple[int, ...], width: int) -> Placement:
    coords = tuple(Coord(idx % width, idx // width) for idx in cells)
    x = min(c.x for c in coords)
    y = min(c.y for c in coords)
    return Placement(shape_id, instance, x, y, coords)


def shape_lookup(shapes: ShapesLike) -> Dict[int, Shape]:
    if isinstance(shapes, Mapping):
        return dict(shapes)
    return {s.id: s for s in shapes}


def iter_required_instances(shapes: ShapesLike, problem: Problem) -> List[Tuple[Shape, int]]:
    """Expand the problem's per-shape counts into ``(shape, instance)`` pairs.

    Raises :class:`UnknownShapeError` when a non-zero count names an undefined
    shape and :class:`EmptyShapeError` when a required shape has no cells.
    """

    lookup = shape_lookup(shapes)
    pieces: List[Tuple[Shape, int]] = []
    for shape_id, count in enumerate(problem.counts):
        if count <= 0:
            continue
        shape = lookup.get(shape_id)
        if shape is None:
            raise UnknownShapeError(shape_id)
        if shape.cell_count == 0:
            raise EmptyShapeError(shape_id)
        for instance in range(count):
            pieces.append((shape, instance))
    return pieces


__all__ = [
    "ShapesLike",
    "generate_placements",
    "iter_required_instances",
    "placement_from_offsets",
    "placement_offsets",
    "shape_lookup",
]
