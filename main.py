#!/usr/bin/env python3
"""
main.py - command line entry point for the present packer

Usage:
    python main.py solve PUZZLE [--strategy auto|sat|backtracking|both] [--show]
    python main.py shapes PUZZLE
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

from config import CFG
from io_files import write_layout_view_html, write_report
from models import ParseError, Problem, SolveOutcome, StrategyDisagreement
from progress import observer, record_outcome, reset, set_done, set_problem, start_run, status_line
from puzzle_parser import load_puzzle
from render import render_svg, render_text
from solver.geometry import symmetry_report
from solver.orchestrator import STRATEGY_CHOICES, solve_puzzle

log = logging.getLogger("present_packer")


def _progress_hook(event: str, **fields) -> None:
    if event == "problem_start":
        set_problem(fields["index"], fields["board"], fields["pieces"])
        return
    observer(event, **fields)


def cmd_shapes(args) -> int:
    puzzle = load_puzzle(args.puzzle)
    print("Analyzing shape symmetries:")
    for shape_id, cells, orientations in symmetry_report(puzzle.shapes):
        print(f"  Shape {shape_id}: {cells} cells, {orientations} unique transformations (out of 8 possible)")
    return 0


def cmd_solve(args) -> int:
    puzzle = load_puzzle(args.puzzle)
    print(f"Parsed {len(puzzle.shapes)} shapes")
    print(f"Parsed {len(puzzle.problems)} problem spaces")

    reset()
    start_run(len(puzzle.problems), args.strategy)
    results: List[Tuple[Problem, SolveOutcome]] = []

    def _on_outcome(index: int, problem: Problem, outcome: SolveOutcome) -> None:
        record_outcome(outcome.status, strategy=outcome.strategy, reason=outcome.reason,
                       elapsed=outcome.elapsed)
        results.append((problem, outcome))
        if args.show:
            print(f"\n----- Problem Space {index} -----")
            print(f"Dimensions: {problem.label}")
            print(f"Shape counts: {list(problem.counts)}")
            print(f"Verdict: {outcome.status} via {outcome.strategy} in {outcome.elapsed_str()}")
            if outcome.ok:
                print("Solution visualization:")
                for row in render_text(outcome.placements, problem.width, problem.height):
                    print(row)
            elif outcome.status == "unsolvable":
                print("No solution found")
            else:
                print(f"{outcome.status.capitalize()}: {outcome.reason}")
        else:
            print(f"\r{status_line()}", end="", flush=True)

    summary = solve_puzzle(
        puzzle,
        args.strategy,
        max_seconds=args.max_seconds,
        node_limit=args.node_limit,
        on_progress=_progress_hook,
        on_outcome=_on_outcome,
    )
    set_done()
    if not args.show:
        print()

    print(f"\nSummary: {summary.solved} / {len(summary.outcomes)} problem spaces solved")
    if summary.unknown or summary.errors:
        print(f"  ({summary.unknown} unknown, {summary.errors} errors)")
    print(f"Total time: {summary.elapsed:.2f}s")

    base_dir = os.getcwd()
    if args.report:
        print(f"Report: {write_report(results, base_dir)}")
    if args.html:
        sections = []
        for idx, (problem, outcome) in enumerate(results, start=1):
            if outcome.ok:
                svg, legend = render_svg(outcome.placements, problem.width, problem.height)
                sections.append((f"#{idx} {problem.label}", svg, legend))
        print(f"Layout view: {write_layout_view_html(sections, base_dir)}")
    return 0


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Exact-cover packing of 3x3 shapes into regions")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    solve = sub.add_parser("solve", help="Solve every region of a puzzle file")
    solve.add_argument("puzzle", help="Puzzle text file")
    solve.add_argument(
        "--strategy",
        choices=STRATEGY_CHOICES,
        default=CFG.STRATEGY if CFG.STRATEGY in STRATEGY_CHOICES else "auto",
        help="Solver strategy",
    )
    solve.add_argument("--show", action="store_true", help="Print every region and its grid")
    solve.add_argument("--max-seconds", type=float, default=None, help="CP-SAT time limit")
    solve.add_argument("--node-limit", type=int, default=None, help="Backtracking node budget")
    solve.add_argument("--report", action="store_true", help="Write the text report")
    solve.add_argument("--html", action="store_true", help="Write the HTML layout view")
    solve.set_defaults(func=cmd_solve)

    shapes = sub.add_parser("shapes", help="Report the orientation count of every shape")
    shapes.add_argument("puzzle", help="Puzzle text file")
    shapes.set_defaults(func=cmd_shapes)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        return args.func(args)
    except ParseError as exc:
        log.error("%s: %s", args.puzzle, exc)
        return 1
    except OSError as exc:
        log.error("%s", exc)
        return 1
    except StrategyDisagreement as exc:
        log.error("Strategies disagree: %s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
