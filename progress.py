from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config import CFG

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _log_dir() -> Path:
    configured = (getattr(CFG, "LOG_DIR", "") or "").strip()
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parent / "logs"


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("solver.attempt_log")
    if logger.handlers:
        return logger

    log_path = _log_dir() / "solver_attempts.log"
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    except OSError:
        # A read-only checkout still solves; it just keeps no attempt log.
        logger.handlers.clear()
    return logger


ATTEMPT_LOGGER = _init_logger()


def _log_enabled() -> bool:
    return bool(ATTEMPT_LOGGER.handlers)


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    try:
        return f"{float(seconds):.2f}s"
    except (TypeError, ValueError):
        return None


def _emit_log(event: str, **fields: Any) -> None:
    if not _log_enabled():
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    if extras:
        ATTEMPT_LOGGER.info("%s | %s", event, " ".join(extras))
    else:
        ATTEMPT_LOGGER.info("%s", event)


def log_attempt_detail(event: str, **fields: Any) -> None:
    with PROGRESS_LOCK:
        _emit_log(event, **fields)


# Single source of truth for the CLI status line
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Solving | Done
    "problem": 0,              # 1-based index of the problem being solved
    "problem_total": 0,
    "board": "",               # e.g. "12x5"
    "strategy": "",            # sat | backtracking | auto | both
    "depth": 0,                # pieces placed on the current branch
    "pieces": 0,               # pieces required by the current problem
    "nodes": 0,                # placements tried on the current problem
    "solved": 0,
    "unsolvable": 0,
    "unknown": 0,
    "errors": 0,
    "elapsed_start": None,
    "elapsed": 0.0,
    "message": "",
    "done": False,
    "run_id": 0,
}

_COUNTERS = {"solved": "solved", "unsolvable": "unsolvable", "unknown": "unknown", "error": "errors"}

# ------------------------------
# Helpers
# ------------------------------

def _now() -> float:
    return time.time()

def _fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{int(seconds)}s"
    m, s = divmod(int(seconds), 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"

def _touch_elapsed_locked() -> None:
    start = PROGRESS.get("elapsed_start")
    if isinstance(start, (int, float)):
        PROGRESS["elapsed"] = max(0.0, _now() - float(start))

def reset() -> None:
    with PROGRESS_LOCK:
        new_run_id = int(PROGRESS.get("run_id", 0)) + 1
        PROGRESS.update({
            "status": "Idle",
            "problem": 0,
            "problem_total": 0,
            "board": "",
            "strategy": "",
            "depth": 0,
            "pieces": 0,
            "nodes": 0,
            "solved": 0,
            "unsolvable": 0,
            "unknown": 0,
            "errors": 0,
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "run_id": new_run_id,
        })
        _emit_log("Progress reset", run_id=new_run_id)

def start_run(problem_total: int, strategy: str) -> None:
    with PROGRESS_LOCK:
        PROGRESS["status"] = "Solving"
        PROGRESS["problem_total"] = int(problem_total)
        PROGRESS["strategy"] = str(strategy)
        PROGRESS["elapsed_start"] = _now()
        PROGRESS["elapsed"] = 0.0
        _emit_log("Run started", problems=problem_total, strategy=strategy)

def set_problem(index: int, board: str, pieces: int) -> None:
    with PROGRESS_LOCK:
        PROGRESS.update({"problem": int(index), "board": board, "pieces": int(pieces), "depth": 0, "nodes": 0})
        _touch_elapsed_locked()
        _emit_log("Problem started", index=index, board=board, pieces=pieces)

def record_outcome(status: str, *, strategy: str = "", reason: Optional[str] = None,
                   elapsed: Optional[float] = None) -> None:
    with PROGRESS_LOCK:
        counter = _COUNTERS.get(status)
        if counter:
            PROGRESS[counter] += 1
        _touch_elapsed_locked()
        _emit_log(
            "Problem finished",
            index=PROGRESS.get("problem"),
            board=PROGRESS.get("board"),
            status=status,
            strategy=strategy,
            duration=_fmt_seconds(elapsed),
            reason=reason,
        )

def set_done(message: Any = None) -> None:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        PROGRESS["status"] = "Done"
        PROGRESS["done"] = True
        if message is not None:
            PROGRESS["message"] = str(message)
        _emit_log(
            "Run finished",
            solved=PROGRESS["solved"],
            unsolvable=PROGRESS["unsolvable"],
            unknown=PROGRESS["unknown"],
            errors=PROGRESS["errors"],
            duration=_fmt_seconds(PROGRESS["elapsed"]),
            message=PROGRESS.get("message"),
        )

# ------------------------------
# Solver observer
# ------------------------------

def observer(event: str, **fields: Any) -> None:
    """Progress callback handed to the solvers.

    ``placed`` events arrive once per committed piece and only touch the
    in-memory state; the coarser events also reach the attempt log.
    """

    with PROGRESS_LOCK:
        if event == "placed":
            PROGRESS["depth"] = int(fields.get("depth", 0))
            PROGRESS["nodes"] = int(fields.get("nodes", 0))
            return
        _emit_log(event.replace("_", " ").capitalize(), **fields)

# ------------------------------
# Snapshots
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
        snap["elapsed_str"] = _fmt_elapsed(PROGRESS["elapsed"])
        return snap

def status_line() -> str:
    snap = snapshot()
    return (
        f"Solving space {snap['problem']}/{snap['problem_total']} "
        f"({snap['solved']} solved so far)..."
    )
