import logging
import time
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import Placement, Problem, SolveBudgetExceeded, SolverError
from solver.placements import (
    ShapesLike,
    iter_required_instances,
    placement_from_offsets,
    placement_offsets,
)

log = logging.getLogger(__name__)

ProgressFn = Optional[Callable[..., None]]


def _notify(on_progress: ProgressFn, event: str, **fields: Any) -> None:
    if on_progress is not None:
        on_progress(event, **fields)


def _add_at_most_one(m: _cp.CpModel, lits: List[_cp.IntVar], native: bool) -> int:
    """Forbid any two of ``lits`` being true; returns the clause count added."""

    if len(lits) < 2:
        return 0
    if native:
        m.AddAtMostOne(lits)
        return 1
    added = 0
    for i in range(len(lits)):
        not_i = lits[i].Not()
        for j in range(i + 1, len(lits)):
            m.AddBoolOr([not_i, lits[j].Not()])
            added += 1
    return added


def _configure_solver(max_seconds: Optional[float]) -> _cp.CpSolver:
    solver = _cp.CpSolver()
    if max_seconds is not None and max_seconds > 0:
        solver.parameters.max_time_in_seconds = float(max_seconds)
    solver.parameters.num_workers = max(1, int(getattr(CFG, "SAT_WORKERS", 1)))
    solver.parameters.random_seed = int(getattr(CFG, "RANDOM_SEED", 0))
    solver.parameters.log_search_progress = False
    return solver


def solve_sat(
    shapes: ShapesLike,
    problem: Problem,
    *,
    max_seconds: Optional[float] = None,
    on_progress: ProgressFn = None,
    stats: Optional[Dict[str, Any]] = None,
) -> Optional[List[Placement]]:
    """Decide the tiling with a Boolean model solved by CP-SAT.

    One variable per candidate placement. Every required instance gets one
    "at least one" clause over its placements plus pairwise exclusions, and
    every board cell gets pairwise exclusions among the placements covering
    it. Returns the chosen placements, or ``None`` when the model is proven
    infeasible. Raises :class:`SolveBudgetExceeded` when ``max_seconds``
    elapses without a verdict.
    """

    if stats is None:
        stats = {}
    if max_seconds is None:
        max_seconds = float(getattr(CFG, "SAT_MAX_SECONDS", 0) or 0) or None
    native_amo = bool(getattr(CFG, "SAT_NATIVE_AMO", False))
    t0 = time.time()

    W, H = problem.width, problem.height
    pieces = iter_required_instances(shapes, problem)
    stats.update({"board": (W, H), "pieces": len(pieces), "variables": 0, "clauses": 0})

    if not pieces:
        stats["status"] = "trivial"
        return []

    m = _cp.CpModel()
    # per piece: list of (variable, flat cells)
    piece_vars: List[List[Tuple[_cp.IntVar, Tuple[int, ...]]]] = []
    for p_idx, (shape, instance) in enumerate(pieces):
        options = placement_offsets(shape, W, H)
        if not options:
            log.debug("shape %s instance %s has no placement on %s", shape.id, instance, problem.label)
            stats["status"] = "no_options"
            stats["elapsed"] = time.time() - t0
            return None
        piece_vars.append(
            [(m.NewBoolVar(f"p_{p_idx}_{k}"), cells) for k, cells in enumerate(options)]
        )
        stats["variables"] += len(options)

    clauses = 0
    for options in piece_vars:
        lits = [var for var, _ in options]
        m.AddBoolOr(lits)
        clauses += 1
        clauses += _add_at_most_one(m, lits, native_amo)

    cell_to_vars: Dict[int, List[_cp.IntVar]] = defaultdict(list)
    for options in piece_vars:
        for var, cells in options:
            for cell in cells:
                cell_to_vars[cell].append(var)
    for cell in sorted(cell_to_vars):
        clauses += _add_at_most_one(m, cell_to_vars[cell], native_amo)

    stats["clauses"] = clauses
    log.debug(
        "SAT model for %s: %d pieces, %d variables, %d clauses",
        problem.label, len(pieces), stats["variables"], clauses,
    )
    _notify(on_progress, "model_built", board=problem.label, variables=stats["variables"], clauses=clauses)

    solver = _configure_solver(max_seconds)
    res = solver.Solve(m)
    stats["elapsed"] = time.time() - t0
    stats["status"] = solver.StatusName(res)

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        placed: List[Placement] = []
        for (shape, instance), options in zip(pieces, piece_vars):
            for var, cells in options:
                if solver.BooleanValue(var):
                    placed.append(placement_from_offsets(shape.id, instance, cells, W))
                    break
        _notify(on_progress, "solved", board=problem.label, placed=len(placed))
        return placed

    if res == _cp.INFEASIBLE:
        _notify(on_progress, "infeasible", board=problem.label)
        return None
    if res == _cp.MODEL_INVALID:
        raise SolverError(f"Model invalid for {problem.label}: {m.Validate()}")
    raise SolveBudgetExceeded(
        f"CP-SAT stopped before a verdict on {problem.label} (limit {max_seconds}s)"
    )


__all__ = ["solve_sat"]
