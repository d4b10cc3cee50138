from __future__ import annotations

import unittest

from color_identifiers.backends.languages import (
    DEFAULT_RULES,
    canonical_language,
    register_default_rules,
)
from color_identifiers.backends.rules import get_rule, unregister_rule
from color_identifiers.backends.scanner import collect_identifiers
from color_identifiers.backends.text_model import StyledBuffer


def _names(language: str, text: str):
    found = collect_identifiers(DEFAULT_RULES[language], StyledBuffer(text))
    return [w for w, _pos in found]


class TestDefaultRules(unittest.TestCase):
    def tearDown(self):
        for lang in ("lua", "python", "py", "python3"):
            unregister_rule(lang)

    def test_nothing_registered_until_asked(self):
        unregister_rule("lua")
        self.assertIsNone(get_rule("lua"))
        done = register_default_rules(["lua"])
        self.assertEqual(done, ["lua"])
        self.assertIs(get_rule("lua"), DEFAULT_RULES["lua"])
        unregister_rule("lua")

    def test_aliases_registered_with_their_language(self):
        done = register_default_rules(["py"])
        self.assertIn("python", done)
        self.assertIn("py", done)
        self.assertIs(get_rule("py"), get_rule("python"))

    def test_canonical_language(self):
        self.assertEqual(canonical_language(" PY "), "python")
        self.assertEqual(canonical_language("c++"), "cpp")
        self.assertEqual(canonical_language("haskell"), "haskell")
        self.assertEqual(canonical_language(None), "")

    def test_python_keywords_and_attributes(self):
        text = "import os\nvalue = os.path.join(value)"
        found = collect_identifiers(DEFAULT_RULES["python"], StyledBuffer(text))
        self.assertEqual(found, [("os", 7), ("value", 10)])

    def test_python_pygments_tags(self):
        text = "def f(x): return x"
        tags = [None] * len(text)
        for i in range(0, 3):
            tags[i] = "Token.Keyword"
        tags[4] = "Token.Name.Function"
        tags[6] = "Token.Name"
        for i in range(10, 16):
            tags[i] = "Token.Keyword"
        tags[17] = "Token.Name"
        found = collect_identifiers(DEFAULT_RULES["python"], StyledBuffer(text, tags))
        self.assertEqual([w for w, _ in found], ["f", "x"])

    def test_javascript(self):
        self.assertEqual(_names("javascript", "this.foo = bar; $el.x"), ["bar", "$el"])

    def test_c_arrow_and_comparison(self):
        self.assertEqual(_names("c", "p->next = q"), ["p", "q"])
        self.assertEqual(_names("c", "int n = a > b;"), ["n", "a", "b"])

    def test_elisp_symbols(self):
        self.assertEqual(
            _names("elisp", "(defun my-fn (arg) (message arg))"),
            ["my-fn", "arg", "message"],
        )

    def test_ruby_predicate_methods(self):
        self.assertEqual(_names("ruby", "ok = list.empty?\nok"), ["ok", "list"])
        self.assertEqual(_names("ruby", "valid? = 1"), ["valid?"])


if __name__ == "__main__":
    unittest.main()
