import os
import tempfile
import unittest

from config import CFG
from io_files import write_layout_view_html, write_report
from models import Coord, Placement, Problem, SolveOutcome
from render import render_svg, render_text, shape_symbol


def _two_monos():
    return [
        Placement(0, 0, 0, 0, (Coord(0, 0),)),
        Placement(11, 0, 1, 1, (Coord(1, 1),)),
    ]


class RenderTestCase(unittest.TestCase):
    def test_render_text_marks_shape_ids(self) -> None:
        rows = render_text(_two_monos(), 3, 2)
        self.assertEqual(rows, ["0..", ".B."])

    def test_symbols_wrap_after_base36(self) -> None:
        self.assertEqual(shape_symbol(9), "9")
        self.assertEqual(shape_symbol(10), "A")
        self.assertEqual(shape_symbol(36), "0")

    def test_render_svg_colours_each_shape_once(self) -> None:
        svg, legend = render_svg(_two_monos(), 3, 2)
        self.assertTrue(svg.startswith("<svg"))
        self.assertEqual(legend.count("<li>"), 2)
        self.assertIn("shape 11", legend)


class WriteOutputsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self._orig_report = CFG.REPORT_OUT
        self._orig_layout = CFG.LAYOUT_HTML

    def tearDown(self) -> None:
        CFG.REPORT_OUT = self._orig_report
        CFG.LAYOUT_HTML = self._orig_layout

    def test_write_report_uses_configured_relative_path(self) -> None:
        CFG.REPORT_OUT = "outputs/custom_report.txt"
        solved = (Problem(3, 2, (1,)), SolveOutcome("solved", _two_monos()[:1], "sat"))
        failed = (Problem(1, 1, (2,)), SolveOutcome("unsolvable", [], "auto", "too small"))

        path = write_report([solved, failed], self.tmpdir.name)

        expected = os.path.join(self.tmpdir.name, "outputs", "custom_report.txt")
        self.assertEqual(path, expected)
        with open(path, "r", encoding="utf-8") as fh:
            contents = fh.read()
        self.assertIn("#1 3x2: 1 -> solved", contents)
        self.assertIn("  0..\n", contents)
        self.assertIn("#2 1x1: 2 -> unsolvable (too small)", contents)
        self.assertIn("1 / 2 problem spaces solved", contents)

    def test_write_layout_view_html_accepts_absolute_path(self) -> None:
        target = os.path.join(self.tmpdir.name, "html", "layout.html")
        CFG.LAYOUT_HTML = target

        svg = "<svg></svg>"
        legend = "<li>shape 0</li>"

        path = write_layout_view_html([("#1 3x2", svg, legend)], self.tmpdir.name)

        self.assertEqual(path, target)
        with open(path, "r", encoding="utf-8") as fh:
            contents = fh.read()
        self.assertIn(svg, contents)
        self.assertIn(legend, contents)
        self.assertIn("#1 3x2", contents)

    def test_write_layout_view_html_without_solutions(self) -> None:
        CFG.LAYOUT_HTML = "empty.html"
        path = write_layout_view_html([], self.tmpdir.name)
        with open(path, "r", encoding="utf-8") as fh:
            self.assertIn("No solution", fh.read())


if __name__ == "__main__":
    unittest.main()
