import logging
import sys
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import CFG
from models import Placement, Problem, Shape, SolveBudgetExceeded
from solver.geometry import orientation_count
from solver.placements import (
    ShapesLike,
    iter_required_instances,
    placement_from_offsets,
    placement_offsets,
)

log = logging.getLogger(__name__)

ProgressFn = Optional[Callable[..., None]]


def piece_order(pieces: List[Tuple[Shape, int]]) -> List[Tuple[Shape, int]]:
    """Most constrained first: fewest orientations, then most cells."""

    return sorted(
        pieces,
        key=lambda p: (orientation_count(p[0]), -p[0].cell_count, p[0].id, p[1]),
    )


def solve_backtracking(
    shapes: ShapesLike,
    problem: Problem,
    *,
    node_limit: Optional[int] = None,
    on_progress: ProgressFn = None,
    stats: Optional[Dict[str, Any]] = None,
) -> Optional[List[Placement]]:
    """Depth-first placement search over a flat occupancy board.

    Pieces are tried in :func:`piece_order`. Before each piece the number of
    empty cells is compared with the cells still needed by the remaining
    pieces and the branch is cut when it is short. Consecutive instances of
    one shape are placed at strictly increasing placement indices, since the
    instances are interchangeable.

    Returns the placements, or ``None`` when every branch fails. Raises
    :class:`SolveBudgetExceeded` if ``node_limit`` placements are tried
    without a verdict.
    """

    if stats is None:
        stats = {}
    if node_limit is None:
        node_limit = int(getattr(CFG, "BACKTRACK_NODE_LIMIT", 0) or 0) or None
    symmetry = bool(getattr(CFG, "BACKTRACK_SYMMETRY", True))
    t0 = time.time()

    W, H = problem.width, problem.height
    pieces = piece_order(iter_required_instances(shapes, problem))
    n = len(pieces)
    stats.update({
        "board": (W, H),
        "pieces": n,
        "nodes": 0,
        "pruned": 0,
        "limit_hit": False,
        "node_limit": node_limit,
    })

    if n == 0:
        stats["elapsed"] = time.time() - t0
        return []

    options = [placement_offsets(shape, W, H) for shape, _ in pieces]
    # remaining[i] = cells needed by pieces[i:]
    remaining = [0] * (n + 1)
    for i in range(n - 1, -1, -1):
        remaining[i] = remaining[i + 1] + pieces[i][0].cell_count
    same_as_prev = [
        symmetry and i > 0 and pieces[i][0] == pieces[i - 1][0] for i in range(n)
    ]

    grid = bytearray(W * H)
    empty = W * H
    chosen: List[int] = [-1] * n
    nodes = 0

    def _search(depth: int) -> bool:
        nonlocal empty, nodes
        if depth == n:
            return True
        if empty < remaining[depth]:
            stats["pruned"] += 1
            return False

        start = chosen[depth - 1] + 1 if same_as_prev[depth] else 0
        opts = options[depth]
        size = len(opts[0]) if opts else 0
        for k in range(start, len(opts)):
            cells = opts[k]
            if any(grid[c] for c in cells):
                continue
            nodes += 1
            if node_limit is not None and nodes > node_limit:
                stats["limit_hit"] = True
                raise SolveBudgetExceeded(
                    f"Backtracking node limit {node_limit} reached on {problem.label}"
                )
            for c in cells:
                grid[c] = 1
            empty -= size
            chosen[depth] = k
            if on_progress is not None:
                on_progress("placed", board=problem.label, depth=depth + 1, total=n, nodes=nodes)
            if _search(depth + 1):
                return True
            for c in cells:
                grid[c] = 0
            empty += size
        chosen[depth] = -1
        return False

    old_limit = sys.getrecursionlimit()
    if n + 100 > old_limit:
        sys.setrecursionlimit(n + 100)
    try:
        solved = _search(0)
    finally:
        stats["nodes"] = nodes
        stats["elapsed"] = time.time() - t0
        if n + 100 > old_limit:
            sys.setrecursionlimit(old_limit)

    log.debug(
        "backtracking on %s: solved=%s nodes=%d pruned=%d",
        problem.label, solved, nodes, stats["pruned"],
    )
    if not solved:
        return None
    return [
        placement_from_offsets(shape.id, instance, options[i][chosen[i]], W)
        for i, (shape, instance) in enumerate(pieces)
    ]


__all__ = ["piece_order", "solve_backtracking"]
