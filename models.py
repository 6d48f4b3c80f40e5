from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from config import CFG


# ---------------- errors ----------------

class PuzzleError(ValueError):
    """Bad puzzle data; fatal to the problem that references it."""


class ParseError(PuzzleError):
    def __init__(self, line_no: int, message: str):
        super().__init__(f"Line {line_no}: {message}")
        self.line_no = line_no


class UnknownShapeError(PuzzleError):
    def __init__(self, shape_id: int):
        super().__init__(f"Shape {shape_id} not found")
        self.shape_id = shape_id


class EmptyShapeError(PuzzleError):
    def __init__(self, shape_id: int):
        super().__init__(f"Shape {shape_id} has no filled cells")
        self.shape_id = shape_id


class SolverError(RuntimeError):
    pass


class SolveBudgetExceeded(SolverError):
    """The search stopped before reaching a verdict."""


class StrategyDisagreement(SolverError):
    pass


# ---------------- value types ----------------

@dataclass(frozen=True)
class Coord:
    x: int
    y: int

    def row_major(self) -> Tuple[int, int]:
        return (self.y, self.x)


@dataclass(frozen=True)
class Shape:
    id: int
    rows: Tuple[str, ...]

    def cells(self) -> Tuple[Coord, ...]:
        return tuple(
            Coord(x, y)
            for y, row in enumerate(self.rows)
            for x, ch in enumerate(row)
            if ch == CFG.FILLED
        )

    @property
    def cell_count(self) -> int:
        return sum(row.count(CFG.FILLED) for row in self.rows)


@dataclass(frozen=True)
class Problem:
    width: int
    height: int
    counts: Tuple[int, ...]

    @property
    def total_pieces(self) -> int:
        return sum(self.counts)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def label(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class Puzzle:
    shapes: Tuple[Shape, ...]
    problems: Tuple[Problem, ...]

    def shape_map(self) -> Dict[int, Shape]:
        return {s.id: s for s in self.shapes}


@dataclass(frozen=True)
class Placement:
    shape_id: int
    instance: int
    x: int
    y: int
    cells: Tuple[Coord, ...]


@dataclass
class SolveOutcome:
    status: str  # solved | unsolvable | unknown | error
    placements: List[Placement] = field(default_factory=list)
    strategy: str = ""
    reason: Optional[str] = None
    elapsed: float = 0.0
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "solved"

    def elapsed_str(self) -> str:
        if self.elapsed < 60:
            return f"{self.elapsed:.2f}s"
        return f"{int(self.elapsed // 60)}m {int(self.elapsed % 60)}s"
