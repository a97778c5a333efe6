"""Matcher strategy and registry behavior.

Covers term splitting, case handling, highlight ranges, and order stability.
"""

from __future__ import annotations

import unittest

from linepicker import matchers
from linepicker.errors import ConfigurationError, UnknownMatcherError
from linepicker.model import Line


def _lines(*texts: str) -> list[Line]:
    return [Line(text=text, seq=idx) for idx, text in enumerate(texts)]


def _texts(found) -> list[str]:
    return [match.text for match in found]


class IgnoreCaseMatcherTests(unittest.TestCase):
    def test_substring_match_ignores_case(self) -> None:
        found = matchers.match_ignore_case("an", _lines("apple", "Banana", "cherry"))
        self.assertEqual(_texts(found), ["Banana"])
        self.assertEqual(found[0].ranges, ((1, 5),))

    def test_every_term_must_match(self) -> None:
        found = matchers.match_ignore_case("foo bar", _lines("foo", "bar foo", "foobar", "baz"))
        self.assertEqual(_texts(found), ["bar foo", "foobar"])

    def test_empty_query_keeps_every_line_in_buffer_order(self) -> None:
        lines = _lines("c", "a", "b")
        found = matchers.match_ignore_case("   ", lines)
        self.assertEqual([m.seq for m in found], [0, 1, 2])
        self.assertTrue(all(m.ranges == () for m in found))

    def test_regex_metacharacters_are_literal(self) -> None:
        found = matchers.match_ignore_case("a.c", _lines("abc", "a.c"))
        self.assertEqual(_texts(found), ["a.c"])


class CaseMatcherTests(unittest.TestCase):
    def test_case_sensitive_requires_exact_case(self) -> None:
        found = matchers.match_case_sensitive("Ban", _lines("banana", "Banana"))
        self.assertEqual(_texts(found), ["Banana"])

    def test_smart_case_is_insensitive_for_lowercase_queries(self) -> None:
        found = matchers.match_smart_case("ban", _lines("banana", "Banana"))
        self.assertEqual(_texts(found), ["banana", "Banana"])

    def test_smart_case_turns_sensitive_with_uppercase(self) -> None:
        found = matchers.match_smart_case("Ban", _lines("banana", "Banana"))
        self.assertEqual(_texts(found), ["Banana"])


class RegexpMatcherTests(unittest.TestCase):
    def test_terms_are_regular_expressions(self) -> None:
        found = matchers.match_regexp("^b.*a$", _lines("banana", "bandit", "Bora"))
        self.assertEqual(_texts(found), ["banana", "Bora"])

    def test_zero_width_match_accepts_line(self) -> None:
        lines = _lines("abc", "xyz", "colour", "color")
        self.assertEqual(_texts(matchers.match_regexp("x?", lines)), ["abc", "xyz", "colour", "color"])

        anchored = matchers.match_regexp("^", lines)
        self.assertEqual(_texts(anchored), ["abc", "xyz", "colour", "color"])
        self.assertTrue(all(match.ranges == () for match in anchored))

    def test_optional_group_highlights_only_non_empty_spans(self) -> None:
        found = matchers.match_regexp("colou?r", _lines("colour", "color", "colr"))
        self.assertEqual(_texts(found), ["colour", "color"])
        self.assertEqual([m.ranges for m in found], [((0, 6),), ((0, 5),)])

    def test_invalid_pattern_matches_nothing(self) -> None:
        self.assertEqual(matchers.match_regexp("foo(", _lines("foo(", "foo")), [])


class MatcherRegistryTests(unittest.TestCase):
    def test_default_registry_lists_builtin_names(self) -> None:
        self.assertEqual(
            matchers.DEFAULT_REGISTRY.names(),
            ("IgnoreCase", "CaseSensitive", "SmartCase", "Regexp"),
        )
        self.assertIn(matchers.DEFAULT_MATCHER, matchers.DEFAULT_REGISTRY)

    def test_unknown_name_raises_configuration_error(self) -> None:
        with self.assertRaises(UnknownMatcherError) as caught:
            matchers.DEFAULT_REGISTRY.get("Fuzzy")
        self.assertIsInstance(caught.exception, ConfigurationError)
        self.assertEqual(caught.exception.name, "Fuzzy")
        self.assertIn("IgnoreCase", str(caught.exception))

    def test_duplicate_names_are_rejected(self) -> None:
        spec = matchers.MatcherSpec("X", "x", matchers.match_ignore_case)
        with self.assertRaises(ValueError):
            matchers.MatcherRegistry([spec, spec])


if __name__ == "__main__":
    unittest.main()
