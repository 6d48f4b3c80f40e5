# config.py
import os

# ======= Puzzle text format =======
FILLED     = os.getenv("PP_FILLED", "#")
EMPTY      = os.getenv("PP_EMPTY", ".")
SHAPE_SIZE = int(os.getenv("PP_SHAPE_SIZE", "3"))

# ======= Strategy selection =======
# auto | sat | backtracking | both
STRATEGY = os.getenv("PP_STRATEGY", "auto").strip().lower()

# ======= CP-SAT knobs =======
# A limit of 0 lets CP-SAT run until it proves a verdict.
SAT_MAX_SECONDS = float(os.getenv("PP_SAT_MAX_SECONDS", "0"))
SAT_WORKERS     = int(os.getenv("PP_SAT_WORKERS", "1"))
SAT_NATIVE_AMO  = int(os.getenv("PP_SAT_NATIVE_AMO", "0")) != 0
RANDOM_SEED     = int(os.getenv("PP_RANDOM_SEED", "0"))

# ======= Backtracking guards =======
# 0 disables the node budget; the search then runs to a verdict.
BACKTRACK_NODE_LIMIT = int(os.getenv("PP_BACKTRACK_NODE_LIMIT", "0"))
BACKTRACK_SYMMETRY   = int(os.getenv("PP_BACKTRACK_SYMMETRY", "1")) != 0

# Budget for the backtracking probe run by the "auto" strategy before CP-SAT.
PROBE_NODE_LIMIT = int(os.getenv("PP_PROBE_NODE_LIMIT", "20000"))

# ======= Output names =======
REPORT_OUT  = os.getenv("PP_REPORT_OUT", "solutions.txt")
LAYOUT_HTML = os.getenv("PP_LAYOUT_HTML", "layout_view.html")
LOG_DIR     = os.getenv("PP_LOG_DIR", "")

class CFG:
    FILLED     = FILLED
    EMPTY      = EMPTY
    SHAPE_SIZE = SHAPE_SIZE

    STRATEGY = STRATEGY

    SAT_MAX_SECONDS = SAT_MAX_SECONDS
    SAT_WORKERS     = SAT_WORKERS
    SAT_NATIVE_AMO  = SAT_NATIVE_AMO
    RANDOM_SEED     = RANDOM_SEED

    BACKTRACK_NODE_LIMIT = BACKTRACK_NODE_LIMIT
    BACKTRACK_SYMMETRY   = BACKTRACK_SYMMETRY
    PROBE_NODE_LIMIT     = PROBE_NODE_LIMIT

    REPORT_OUT  = REPORT_OUT
    LAYOUT_HTML = LAYOUT_HTML
    LOG_DIR     = LOG_DIR

__all__ = ["CFG"]
