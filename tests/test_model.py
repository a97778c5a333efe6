from __future__ import annotations

import unittest

from linepicker.model import Line, Match, merge_ranges, unmatched


class LineTests(unittest.TestCase):
    def test_output_value_falls_back_to_display_text(self) -> None:
        self.assertEqual(Line(text="abc").output_value, "abc")
        self.assertEqual(Line(text="abc", output="xyz").output_value, "xyz")

    def test_from_raw_strips_line_terminators(self) -> None:
        line = Line.from_raw("hello\r\n", seq=4)
        self.assertEqual(line.text, "hello")
        self.assertIsNone(line.output)
        self.assertEqual(line.seq, 4)

    def test_from_raw_splits_label_and_output_in_null_mode(self) -> None:
        line = Line.from_raw("label\0/path/to/value\n", null_sep=True)
        self.assertEqual(line.text, "label")
        self.assertEqual(line.output_value, "/path/to/value")

    def test_from_raw_keeps_nul_when_null_mode_is_off(self) -> None:
        line = Line.from_raw("label\0value")
        self.assertEqual(line.text, "label\0value")
        self.assertEqual(line.output_value, "label\0value")

    def test_equal_text_lines_with_different_seq_are_distinct(self) -> None:
        self.assertNotEqual(Line(text="dup", seq=0), Line(text="dup", seq=1))


class MatchTests(unittest.TestCase):
    def test_match_proxies_line_fields(self) -> None:
        match = Match(line=Line(text="a", output="b", seq=7), query="a", ranges=((0, 1),))
        self.assertEqual(match.text, "a")
        self.assertEqual(match.output, "b")
        self.assertEqual(match.seq, 7)

    def test_with_selected_returns_same_object_when_unchanged(self) -> None:
        match = unmatched(Line(text="a"))
        self.assertIs(match.with_selected(False), match)
        selected = match.with_selected(True)
        self.assertTrue(selected.selected)
        self.assertFalse(match.selected)

    def test_merge_ranges_sorts_and_joins_overlaps(self) -> None:
        self.assertEqual(merge_ranges([(5, 7), (0, 2), (1, 3), (7, 9)]), ((0, 3), (5, 9)))
        self.assertEqual(merge_ranges([]), ())


if __name__ == "__main__":
    unittest.main()
