# Orchestrator: strategy dispatch, cross-checking and batch solving
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import CFG
from models import (
    Placement,
    Problem,
    Puzzle,
    PuzzleError,
    SolveBudgetExceeded,
    SolveOutcome,
    SolverError,
    StrategyDisagreement,
)
from progress import log_attempt_detail
from solver.backtracking import solve_backtracking
from solver.placements import ShapesLike, iter_required_instances, shape_lookup
from solver.sat import solve_sat

log = logging.getLogger(__name__)

ProgressFn = Optional[Callable[..., None]]

# name -> (solver, keyword of its search budget); solvers return placements | None
STRATEGIES: Dict[str, Tuple[Callable[..., Optional[List[Placement]]], str]] = {
    "sat": (solve_sat, "max_seconds"),
    "backtracking": (solve_backtracking, "node_limit"),
}

STRATEGY_CHOICES = ("auto", "sat", "backtracking", "both")


# ---------- helpers ----------

def validate_solution(problem: Problem, placements: List[Placement], shapes: ShapesLike) -> None:
    """Raise :class:`SolverError` unless ``placements`` is a valid tiling."""

    lookup = shape_lookup(shapes)
    owners: Dict[tuple, Placement] = {}
    for p in placements:
        shape = lookup.get(p.shape_id)
        if shape is None or len(p.cells) != shape.cell_count:
            raise SolverError(f"Placement {p.shape_id}#{p.instance} does not match its shape")
        for c in p.cells:
            if not (0 <= c.x < problem.width and 0 <= c.y < problem.height):
                raise SolverError(f"Cell ({c.x},{c.y}) outside {problem.label}")
            key = (c.x, c.y)
            if key in owners:
                raise SolverError(f"Cell ({c.x},{c.y}) covered twice")
            owners[key] = p

    wanted = sorted((s.id, i) for s, i in iter_required_instances(lookup, problem))
    got = sorted((p.shape_id, p.instance) for p in placements)
    if wanted != got:
        raise SolverError(
            f"Expected {len(wanted)} placements on {problem.label}, got {len(got)}"
        )


def _required_cells(shapes: ShapesLike, problem: Problem) -> int:
    return sum(shape.cell_count for shape, _ in iter_required_instances(shapes, problem))


def _run(strategy: str, shapes: ShapesLike, problem: Problem, budget: Optional[float],
         on_progress: ProgressFn, stats: Dict[str, Any]) -> Optional[List[Placement]]:
    solve, budget_kw = STRATEGIES[strategy]
    return solve(shapes, problem, on_progress=on_progress, stats=stats, **{budget_kw: budget})


def _verdict(placements: Optional[List[Placement]]) -> str:
    return "solved" if placements is not None else "unsolvable"


# ---------- per-problem entrypoint ----------

def solve_problem(
    shapes: ShapesLike,
    problem: Problem,
    strategy: str = "auto",
    *,
    max_seconds: Optional[float] = None,
    node_limit: Optional[int] = None,
    on_progress: ProgressFn = None,
) -> SolveOutcome:
    """Solve one problem with the chosen strategy.

    ``auto`` rejects boards smaller than the pieces' total area, probes with a
    bounded backtracking search and hands inconclusive probes to CP-SAT.
    ``both`` runs the two solvers and raises :class:`StrategyDisagreement`
    when their verdicts differ.
    """

    strategy = (strategy or "auto").lower()
    if strategy not in STRATEGY_CHOICES:
        raise ValueError(f"Unknown strategy {strategy!r}; expected one of {STRATEGY_CHOICES}")

    t0 = time.time()
    meta: Dict[str, Any] = {"board": problem.label, "pieces": problem.total_pieces}

    def _finish(status: str, placements: Optional[List[Placement]], used: str,
                reason: Optional[str] = None) -> SolveOutcome:
        return SolveOutcome(
            status=status,
            placements=list(placements or []),
            strategy=used,
            reason=reason,
            elapsed=time.time() - t0,
            meta=meta,
        )

    try:
        if strategy in STRATEGIES:
            stats: Dict[str, Any] = {}
            meta[strategy] = stats
            budget = max_seconds if strategy == "sat" else node_limit
            placed = _run(strategy, shapes, problem, budget, on_progress, stats)
            return _finish(_verdict(placed), placed, strategy)

        if strategy == "both":
            sat_stats: Dict[str, Any] = {}
            bt_stats: Dict[str, Any] = {}
            meta["sat"] = sat_stats
            meta["backtracking"] = bt_stats
            sat_placed = _run("sat", shapes, problem, max_seconds, on_progress, sat_stats)
            bt_placed = _run("backtracking", shapes, problem, node_limit, on_progress, bt_stats)
            meta["backtracking_verdict"] = _verdict(bt_placed)
            if (sat_placed is None) != (bt_placed is None):
                raise StrategyDisagreement(
                    f"{problem.label}: sat={_verdict(sat_placed)} "
                    f"backtracking={_verdict(bt_placed)}"
                )
            return _finish(_verdict(sat_placed), sat_placed, "both")

        # auto
        needed = _required_cells(shapes, problem)
        meta["required_cells"] = needed
        if needed > problem.area:
            meta["solved_via"] = "area_check"
            return _finish("unsolvable", None, "auto",
                           f"pieces need {needed} cells, board has {problem.area}")

        probe_limit = int(getattr(CFG, "PROBE_NODE_LIMIT", 0) or 0)
        if node_limit is not None:
            probe_limit = min(probe_limit, node_limit) if probe_limit > 0 else node_limit
        probe_stats: Dict[str, Any] = {}
        meta["backtracking"] = probe_stats
        try:
            placed = _run("backtracking", shapes, problem, probe_limit or None, on_progress, probe_stats)
            meta["solved_via"] = "backtracking_probe"
            return _finish(_verdict(placed), placed, "backtracking")
        except SolveBudgetExceeded:
            log.debug("probe inconclusive on %s after %s nodes", problem.label, probe_stats.get("nodes"))

        sat_stats = {}
        meta["sat"] = sat_stats
        placed = _run("sat", shapes, problem, max_seconds, on_progress, sat_stats)
        meta["solved_via"] = "sat"
        return _finish(_verdict(placed), placed, "sat")

    except SolveBudgetExceeded as exc:
        return _finish("unknown", None, strategy, str(exc))
    except PuzzleError as exc:
        return _finish("error", None, strategy, str(exc))


# ---------- batch entrypoint ----------

@dataclass
class BatchSummary:
    outcomes: List[SolveOutcome] = field(default_factory=list)
    elapsed: float = 0.0

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def solved(self) -> int:
        return self.count("solved")

    @property
    def unsolvable(self) -> int:
        return self.count("unsolvable")

    @property
    def unknown(self) -> int:
        return self.count("unknown")

    @property
    def errors(self) -> int:
        return self.count("error")


def solve_puzzle(
    puzzle: Puzzle,
    strategy: str = "auto",
    *,
    max_seconds: Optional[float] = None,
    node_limit: Optional[int] = None,
    on_progress: ProgressFn = None,
    on_outcome: Optional[Callable[[int, Problem, SolveOutcome], None]] = None,
) -> BatchSummary:
    """Solve every problem of ``puzzle`` independently."""

    t0 = time.time()
    shapes = puzzle.shape_map()
    summary = BatchSummary()
    log_attempt_detail("Batch setup", shapes=len(shapes), problems=len(puzzle.problems), strategy=strategy)

    for index, problem in enumerate(puzzle.problems, start=1):
        if on_progress is not None:
            on_progress("problem_start", index=index, board=problem.label, pieces=problem.total_pieces)
        outcome = solve_problem(
            shapes, problem, strategy,
            max_seconds=max_seconds, node_limit=node_limit, on_progress=on_progress,
        )
        if outcome.ok:
            validate_solution(problem, outcome.placements, shapes)
        summary.outcomes.append(outcome)
        if on_outcome is not None:
            on_outcome(index, problem, outcome)

    summary.elapsed = time.time() - t0
    log.info(
        "%d / %d problem spaces solved (%d unsolvable, %d unknown, %d errors) in %.2fs",
        summary.solved, len(summary.outcomes), summary.unsolvable,
        summary.unknown, summary.errors, summary.elapsed,
    )
    return summary


__all__ = [
    "BatchSummary",
    "STRATEGIES",
    "STRATEGY_CHOICES",
    "solve_problem",
    "solve_puzzle",
    "validate_solution",
]
