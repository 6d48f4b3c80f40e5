from progress import (
    observer,
    record_outcome,
    reset,
    set_done,
    set_problem,
    snapshot,
    start_run,
    status_line,
)


def test_reset_increments_run_identifier():
    reset()
    first = snapshot()["run_id"]
    reset()
    second = snapshot()["run_id"]
    assert isinstance(first, int)
    assert second == first + 1


def test_outcomes_update_counters():
    reset()
    start_run(4, "auto")
    for status in ("solved", "solved", "unsolvable", "unknown", "error"):
        record_outcome(status, strategy="sat")
    snap = snapshot()
    assert snap["status"] == "Solving"
    assert (snap["solved"], snap["unsolvable"], snap["unknown"], snap["errors"]) == (2, 1, 1, 1)


def test_placed_events_track_depth_and_nodes():
    reset()
    set_problem(3, "12x5", 7)
    observer("placed", board="12x5", depth=4, total=7, nodes=120)
    snap = snapshot()
    assert snap["problem"] == 3
    assert snap["board"] == "12x5"
    assert (snap["depth"], snap["nodes"], snap["pieces"]) == (4, 120, 7)


def test_set_done_marks_run_complete():
    reset()
    start_run(1, "sat")
    set_done("finished")
    snap = snapshot()
    assert snap["done"] is True
    assert snap["status"] == "Done"
    assert snap["message"] == "finished"
    assert "elapsed_start" not in snap


def test_status_line_reports_position_and_solved_count():
    reset()
    start_run(10, "auto")
    set_problem(2, "4x4", 2)
    record_outcome("solved")
    assert status_line() == "Solving space 2/10 (1 solved so far)..."
