from __future__ import annotations

import unittest

from color_identifiers.backends.rules import LexicalRule, get_rule, register_rule, unregister_rule
from color_identifiers.backends.scanner import collect_identifiers, scan, scan_language
from color_identifiers.backends.text_model import StyledBuffer


IDENT = r"(?<![\w$])([a-zA-Z_$][a-zA-Z0-9_$]*)"
PLAIN_IDENT = r"([a-zA-Z_$][a-zA-Z0-9_$]*)"


def _rule(**kw) -> LexicalRule:
    return LexicalRule(kw.pop("context", r"[^.]"), kw.pop("identifier", IDENT), **kw)


def _visits(rule, buf, start=0, limit=None, should_continue=None):
    out = []
    done = scan(rule, buf, start, len(buf.text) if limit is None else limit,
                lambda s, e: out.append((s, e)), should_continue)
    return out, done


class TestScanner(unittest.TestCase):
    def test_member_access_suffix_is_skipped(self):
        buf = StyledBuffer("foo.bar baz")
        rule = LexicalRule(r"[^.]", PLAIN_IDENT, (None,))
        visits, done = _visits(rule, buf)
        self.assertTrue(done)
        self.assertEqual(visits, [(0, 3), (8, 11)])

    def test_rejected_word_tail_is_not_visited(self):
        buf = StyledBuffer("a.bcd.efg h")
        rule = LexicalRule(r"[^.]", PLAIN_IDENT, (None,))
        visits, _ = _visits(rule, buf)
        self.assertEqual(visits, [(0, 1), (10, 11)])

    def test_excluded_keyword_tail_is_not_visited(self):
        buf = StyledBuffer("while x")
        rule = LexicalRule(r"[^.]", PLAIN_IDENT, (None,), r"while\b")
        visits, _ = _visits(rule, buf)
        self.assertEqual(visits, [(6, 7)])

    def test_undecorated_text_requires_none_in_tags(self):
        buf = StyledBuffer("foo bar")
        visits, _ = _visits(_rule(tags=("Token.Name",)), buf)
        self.assertEqual(visits, [])

    def test_positions_outside_tag_set_are_skipped(self):
        text = "x = 1 # foo bar\ny"
        buf = StyledBuffer(text)
        buf.set_tag(text.index("#"), text.index("\n"), "Token.Comment")
        visits, _ = _visits(_rule(), buf)
        self.assertEqual(visits, [(0, 1), (16, 17)])

    def test_classified_marker_overrides_tags(self):
        text = "x = 1 # foo bar\ny"
        buf = StyledBuffer(text)
        buf.set_tag(text.index("#"), text.index("\n"), "Token.Comment")
        buf.mark_classified(8, 11)
        visits, _ = _visits(_rule(), buf)
        self.assertEqual(visits, [(0, 1), (8, 11), (16, 17)])

    def test_tag_set_from_callable(self):
        text = "alpha beta"
        buf = StyledBuffer(text, tags=["Token.Name"] * 5 + [None] + ["Token.Keyword"] * 4)
        visits, _ = _visits(_rule(tags=lambda: {"Token.Name"}), buf)
        self.assertEqual(visits, [(0, 5)])

    def test_exclusion_pattern(self):
        buf = StyledBuffer("if iffy")
        visits, _ = _visits(_rule(exclusion=r"if(?!\w)"), buf)
        self.assertEqual(visits, [(3, 7)])

    def test_identifier_at_line_start(self):
        buf = StyledBuffer("a.b\nc")
        visits, _ = _visits(_rule(), buf)
        self.assertEqual(visits, [(0, 1), (4, 5)])

    def test_respects_start_and_limit(self):
        buf = StyledBuffer("foo.bar baz qux")
        visits, done = _visits(_rule(), buf, start=8, limit=11)
        self.assertTrue(done)
        self.assertEqual(visits, [(8, 11)])

    def test_no_match_ends_normally(self):
        buf = StyledBuffer("1 + 2 == 3")
        visits, done = _visits(_rule(), buf)
        self.assertTrue(done)
        self.assertEqual(visits, [])

    def test_cancellation_after_first_match(self):
        buf = StyledBuffer("foo.bar baz")
        visits = []
        done = scan(_rule(), buf, 0, len(buf.text), lambda s, e: visits.append((s, e)),
                    lambda: not visits)
        self.assertFalse(done)
        self.assertEqual(visits, [(0, 3)])

    def test_missing_rule_is_a_no_op(self):
        buf = StyledBuffer("foo bar")
        visits, done = _visits(None, buf)
        self.assertTrue(done)
        self.assertEqual(visits, [])
        out = []
        self.assertTrue(scan_language("no-such-language", buf, 0, 7, lambda s, e: out.append((s, e))))
        self.assertEqual(out, [])


class TestCollectIdentifiers(unittest.TestCase):
    def test_first_occurrence_order(self):
        buf = StyledBuffer("x y x z")
        self.assertEqual(collect_identifiers(_rule(), buf), [("x", 0), ("y", 2), ("z", 6)])

    def test_cancelled_scan_yields_none(self):
        buf = StyledBuffer("x y x z")
        calls = []

        def should_continue():
            calls.append(1)
            return len(calls) < 2

        self.assertIsNone(collect_identifiers(_rule(), buf, should_continue))


class TestRuleTable(unittest.TestCase):
    def tearDown(self):
        unregister_rule("scanner-test")

    def test_register_tuple_and_lookup_case_insensitive(self):
        rule = register_rule("Scanner-Test", (r"[^.]", IDENT, (None,)))
        self.assertIs(get_rule("scanner-test"), rule)
        self.assertIs(get_rule(" SCANNER-TEST "), rule)
        unregister_rule("scanner-test")
        self.assertIsNone(get_rule("scanner-test"))

    def test_identifier_pattern_needs_a_group(self):
        with self.assertRaises(ValueError):
            LexicalRule(r"[^.]", r"[a-z]+")

    def test_empty_language_tag_rejected(self):
        with self.assertRaises(ValueError):
            register_rule("  ", (r"[^.]", IDENT))


if __name__ == "__main__":
    unittest.main()
