import pytest

pytest.importorskip("ortools")

from models import Problem, SolveBudgetExceeded, SolverError, UnknownShapeError  # noqa: E402
from solver.backtracking import solve_backtracking  # noqa: E402
from solver.sat import solve_sat  # noqa: E402
from tests.data import CASES, SHAPES, counts  # noqa: E402


def _assert_valid(problem, placements):
    cells = [(c.x, c.y) for p in placements for c in p.cells]
    assert len(cells) == len(set(cells))
    assert all(0 <= x < problem.width and 0 <= y < problem.height for x, y in cells)
    assert sorted((p.shape_id, p.instance) for p in placements) == sorted(
        (sid, i) for sid, n in enumerate(problem.counts) for i in range(n)
    )


@pytest.mark.parametrize("label, problem, solvable", CASES, ids=[c[0] for c in CASES])
def test_sat_verdicts(label, problem, solvable):
    placements = solve_sat(SHAPES, problem)
    assert (placements is not None) == solvable
    if placements is not None:
        _assert_valid(problem, placements)


@pytest.mark.parametrize("label, problem, solvable", CASES, ids=[c[0] for c in CASES])
def test_strategies_agree_on_solvability(label, problem, solvable):
    sat = solve_sat(SHAPES, problem)
    bt = solve_backtracking(SHAPES, problem)
    assert (sat is None) == (bt is None)


def test_monominoes_cover_the_board():
    problem = Problem(2, 2, counts(s0=4))
    placements = solve_sat(SHAPES, problem)
    assert placements is not None
    assert {(p.x, p.y) for p in placements} == {(0, 0), (1, 0), (0, 1), (1, 1)}


def test_pairwise_clause_count():
    stats = {}
    problem = Problem(2, 2, counts(s0=2))
    assert solve_sat(SHAPES, problem, stats=stats) is not None
    # 2 instances x 4 placements: per instance 1 + C(4,2), per cell C(2,2)
    assert stats["variables"] == 8
    assert stats["clauses"] == 2 * (1 + 6) + 4 * 1


def test_native_at_most_one_gives_same_verdicts(monkeypatch):
    import solver.sat as sat_module

    monkeypatch.setattr(sat_module.CFG, "SAT_NATIVE_AMO", True, raising=False)
    for _label, problem, solvable in CASES:
        assert (solve_sat(SHAPES, problem) is not None) == solvable


def test_instance_without_placements_is_infeasible_without_solving():
    stats = {}
    assert solve_sat(SHAPES, Problem(5, 1, counts(s5=1)), stats=stats) is None
    assert stats["status"] == "no_options"


def test_zero_instances_returns_empty_solution():
    assert solve_sat(SHAPES, Problem(2, 2, counts())) == []


def test_unknown_shape_propagates():
    with pytest.raises(UnknownShapeError):
        solve_sat(SHAPES[:2], Problem(3, 3, (0, 0, 1)))


class _FixedStatusSolver:
    def __init__(self, status):
        self.status = status

    def Solve(self, model):
        return self.status

    def StatusName(self, status):
        return str(status)


def test_time_limit_raises_budget_exceeded(monkeypatch):
    import solver.sat as sat

    monkeypatch.setattr(sat, "_configure_solver", lambda max_seconds: _FixedStatusSolver(sat._cp.UNKNOWN))
    stats = {}
    with pytest.raises(SolveBudgetExceeded, match="stopped before a verdict on 4x4"):
        solve_sat(SHAPES, Problem(4, 4, counts(s2=2, s4=3)), max_seconds=1e-6, stats=stats)
    assert stats["variables"] > 0


def test_invalid_model_raises_solver_error(monkeypatch):
    import solver.sat as sat

    monkeypatch.setattr(sat, "_configure_solver", lambda max_seconds: _FixedStatusSolver(sat._cp.MODEL_INVALID))
    with pytest.raises(SolverError, match="Model invalid for 3x3"):
        solve_sat(SHAPES, Problem(3, 3, counts(s0=2)))


def test_time_limit_reaches_solver_parameters():
    from solver.sat import _configure_solver

    assert _configure_solver(0.5).parameters.max_time_in_seconds == 0.5
