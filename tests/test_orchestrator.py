import pytest

pytest.importorskip("ortools")

import solver.orchestrator as orchestrator  # noqa: E402
from models import Coord, Placement, Problem, SolverError, StrategyDisagreement  # noqa: E402
from puzzle_parser import parse_puzzle  # noqa: E402
from tests.data import PUZZLE_TEXT, SHAPES, counts  # noqa: E402

solve_problem = orchestrator.solve_problem
solve_puzzle = orchestrator.solve_puzzle
validate_solution = orchestrator.validate_solution


@pytest.mark.parametrize("strategy", ["sat", "backtracking", "auto", "both"])
def test_every_strategy_solves_and_rejects(strategy):
    ok = solve_problem(SHAPES, Problem(6, 3, counts(s1=2)), strategy)
    assert ok.status == "solved"
    assert len(ok.placements) == 2
    validate_solution(Problem(6, 3, counts(s1=2)), ok.placements, SHAPES)

    no = solve_problem(SHAPES, Problem(5, 3, counts(s1=2)), strategy)
    assert no.status == "unsolvable"
    assert no.placements == []


def test_auto_rejects_by_area_without_search():
    outcome = solve_problem(SHAPES, Problem(3, 3, counts(s2=2)), "auto")
    assert outcome.status == "unsolvable"
    assert outcome.meta["solved_via"] == "area_check"
    assert "10 cells" in outcome.reason


def test_auto_falls_back_to_sat_when_probe_runs_out(monkeypatch):
    monkeypatch.setattr(orchestrator.CFG, "PROBE_NODE_LIMIT", 1, raising=False)
    outcome = solve_problem(SHAPES, Problem(4, 4, counts(s3=1, s5=2)), "auto")
    assert outcome.status == "unsolvable"
    assert outcome.strategy == "sat"
    assert outcome.meta["backtracking"]["limit_hit"] is True


def test_budget_exhaustion_reports_unknown():
    outcome = solve_problem(SHAPES, Problem(2, 2, counts(s0=4)), "backtracking", node_limit=1)
    assert outcome.status == "unknown"
    assert "node limit" in outcome.reason


def test_unknown_shape_is_an_error_outcome():
    outcome = solve_problem(SHAPES, Problem(3, 3, (0,) * len(SHAPES) + (1,)), "sat")
    assert outcome.status == "error"
    assert "not found" in outcome.reason


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValueError):
        solve_problem(SHAPES, Problem(2, 2, counts()), "greedy")


def test_both_raises_when_strategies_disagree(monkeypatch):
    monkeypatch.setitem(orchestrator.STRATEGIES, "backtracking", (lambda *a, **kw: None, "node_limit"))
    with pytest.raises(StrategyDisagreement):
        solve_problem(SHAPES, Problem(2, 2, counts(s0=4)), "both")


def test_validate_solution_rejects_overlap_and_missing_pieces():
    problem = Problem(2, 2, counts(s0=2))
    cell = (Coord(0, 0),)
    overlap = [Placement(0, 0, 0, 0, cell), Placement(0, 1, 0, 0, cell)]
    with pytest.raises(SolverError):
        validate_solution(problem, overlap, SHAPES)
    with pytest.raises(SolverError):
        validate_solution(problem, overlap[:1], SHAPES)
    with pytest.raises(SolverError):
        validate_solution(problem, [Placement(0, 0, 2, 0, (Coord(2, 0),))], SHAPES)


def test_solve_puzzle_counts_outcomes():
    puzzle = parse_puzzle(PUZZLE_TEXT)
    seen = []
    summary = solve_puzzle(puzzle, "auto", on_outcome=lambda i, p, o: seen.append((i, o.status)))
    assert summary.solved == 2
    assert summary.unsolvable == 2
    assert summary.unknown == 0 and summary.errors == 0
    assert seen == [(1, "solved"), (2, "solved"), (3, "unsolvable"), (4, "unsolvable")]


def test_solve_puzzle_forwards_progress_events():
    puzzle = parse_puzzle(PUZZLE_TEXT)
    events = []
    solve_puzzle(puzzle, "backtracking", on_progress=lambda event, **kw: events.append(event))
    assert events.count("problem_start") == len(puzzle.problems)
    assert "placed" in events


def test_sat_time_limit_reports_unknown(monkeypatch):
    import solver.sat as sat

    class _StoppedSolver:
        def Solve(self, model):
            return sat._cp.UNKNOWN

        def StatusName(self, status):
            return "UNKNOWN"

    monkeypatch.setattr(sat, "_configure_solver", lambda max_seconds: _StoppedSolver())
    outcome = solve_problem(SHAPES, Problem(4, 4, counts(s2=2, s4=3)), "sat", max_seconds=1e-6)
    assert outcome.status == "unknown"
    assert outcome.strategy == "sat"
    assert "limit 1e-06s" in outcome.reason
    assert outcome.meta["sat"]["status"] == "UNKNOWN"


def test_strategy_table_drives_dispatch(monkeypatch):
    calls = []

    def _fake(shapes, problem, **kw):
        calls.append(kw)
        return []

    monkeypatch.setitem(orchestrator.STRATEGIES, "sat", (_fake, "max_seconds"))
    outcome = solve_problem(SHAPES, Problem(2, 2, counts()), "sat", max_seconds=3.0, node_limit=7)
    assert outcome.status == "solved"
    assert calls[0]["max_seconds"] == 3.0
    assert "node_limit" not in calls[0]
