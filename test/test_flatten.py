"""Tests for keyword tree flattening."""

import itertools
import random
import re
import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SolrBridge.core.keys import Conjunction, KeywordGroup, Term, keyword_tree_from_dict
from SolrBridge.query.flatten import escape_phrase, flatten_keys

_TOKEN_RE = re.compile(r"\*:\*|\(|\)|-|[^\s()]+")
_TERMS = ("a", "b", "c")


class _QueryEvaluator:
    """Evaluate a flattened query string against a set of present terms.

    Understands exactly the syntax flatten_keys emits: words, `*:*`,
    parentheses, `-` negation, AND/OR operators and implicit AND between
    adjacent clauses.
    """

    def __init__(self, query: str, present: set[str]) -> None:
        self.tokens = _TOKEN_RE.findall(query)
        self.pos = 0
        self.present = present

    def evaluate(self) -> bool:
        value = self._or_expr()
        if self.pos != len(self.tokens):
            raise ValueError(f"Trailing tokens: {self.tokens[self.pos:]}")
        return value

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _or_expr(self) -> bool:
        value = self._and_expr()
        while self._peek() == "OR":
            self._take()
            rhs = self._and_expr()
            value = value or rhs
        return value

    def _and_expr(self) -> bool:
        value = self._unary()
        while self._peek() not in (None, ")", "OR"):
            if self._peek() == "AND":
                self._take()
            rhs = self._unary()
            value = value and rhs
        return value

    def _unary(self) -> bool:
        if self._peek() == "-":
            self._take()
            return not self._unary()
        return self._primary()

    def _primary(self) -> bool:
        token = self._take()
        if token == "(":
            value = self._or_expr()
            if self._take() != ")":
                raise ValueError("Unbalanced parentheses")
            return value
        if token == "*:*":
            return True
        return token in self.present


def _evaluate_tree(node, present: set[str]) -> bool:
    if isinstance(node, Term):
        return node.text in present
    values = [_evaluate_tree(child, present) for child in node.children]
    combined = all(values) if node.conjunction is Conjunction.AND else any(values)
    return not combined if node.negation else combined


def _random_tree(rng: random.Random, depth: int) -> KeywordGroup:
    children = []
    for _ in range(rng.randint(1, 3)):
        if depth > 0 and rng.random() < 0.4:
            children.append(_random_tree(rng, depth - 1))
        else:
            children.append(Term(rng.choice(_TERMS)))
    return KeywordGroup(
        conjunction=rng.choice([Conjunction.AND, Conjunction.OR]),
        negation=rng.random() < 0.4,
        children=tuple(children),
    )


class TestFlattenKeys(unittest.TestCase):
    def test_negated_and(self) -> None:
        tree = KeywordGroup(Conjunction.AND, True, ("A", "B"))
        self.assertEqual(flatten_keys(tree), "*:* AND -(A AND B)")

    def test_or(self) -> None:
        tree = KeywordGroup(Conjunction.OR, False, ("A", "B"))
        self.assertEqual(flatten_keys(tree), "((A) OR (B))")

    def test_negated_or(self) -> None:
        tree = KeywordGroup(Conjunction.OR, True, ("A", "B"))
        self.assertEqual(flatten_keys(tree), "*:* AND -A AND -B")

    def test_single_term_is_not_parenthesized(self) -> None:
        self.assertEqual(flatten_keys(KeywordGroup(children=("cat",))), "cat")

    def test_single_negated_term(self) -> None:
        self.assertEqual(flatten_keys(KeywordGroup(negation=True, children=("cat",))), "*:* AND -cat")

    def test_plain_and_is_space_joined(self) -> None:
        self.assertEqual(flatten_keys(KeywordGroup(children=("shoes", "red"))), "shoes red")

    def test_nested_and_is_and_joined(self) -> None:
        tree = KeywordGroup(
            Conjunction.OR,
            False,
            ("a", KeywordGroup(Conjunction.AND, False, ("b", "c"))),
        )
        self.assertEqual(flatten_keys(tree), "((a) OR (b AND c))")

    def test_nested_group_in_negated_or_is_wrapped(self) -> None:
        tree = KeywordGroup(
            Conjunction.OR,
            True,
            ("a", KeywordGroup(Conjunction.AND, False, ("b", "c"))),
        )
        self.assertEqual(flatten_keys(tree), "*:* AND -a AND -(b AND c)")

    def test_single_nested_group_is_kept(self) -> None:
        tree = KeywordGroup(children=(KeywordGroup(Conjunction.OR, False, ("a", "b")),))
        self.assertEqual(flatten_keys(tree), "((a) OR (b))")

    def test_empty_tree(self) -> None:
        self.assertEqual(flatten_keys(KeywordGroup()), "")

    def test_empty_terms_and_groups_are_dropped(self) -> None:
        tree = KeywordGroup(children=("", "  ", KeywordGroup(children=("",)), "cat"))
        self.assertEqual(flatten_keys(tree), "cat")

    def test_children_keep_their_order(self) -> None:
        tree = KeywordGroup(children=("z", KeywordGroup(Conjunction.OR, False, ("x", "y")), "a"))
        self.assertEqual(flatten_keys(tree), "z ((x) OR (y)) a")

    def test_deterministic(self) -> None:
        rng = random.Random(7)
        tree = _random_tree(rng, 3)
        self.assertEqual(flatten_keys(tree), flatten_keys(tree))

    def test_truth_table_matches_tree_semantics(self) -> None:
        rng = random.Random(20240611)
        assignments = [
            {term for term, on in zip(_TERMS, bits) if on}
            for bits in itertools.product((False, True), repeat=len(_TERMS))
        ]
        for _ in range(300):
            tree = _random_tree(rng, 3)
            query = flatten_keys(tree)
            for present in assignments:
                with self.subTest(query=query, present=sorted(present)):
                    self.assertEqual(
                        _QueryEvaluator(query, present).evaluate(),
                        _evaluate_tree(tree, present),
                    )


class TestEscapePhrase(unittest.TestCase):
    def test_plain_word_is_unchanged(self) -> None:
        self.assertEqual(escape_phrase("cat"), "cat")

    def test_whitespace_is_quoted(self) -> None:
        self.assertEqual(escape_phrase("red shoes"), '"red shoes"')

    def test_special_characters_are_escaped(self) -> None:
        self.assertEqual(escape_phrase('say "hi"'), '"say \\"hi\\""')
        self.assertEqual(escape_phrase("a\\b"), '"a\\\\b"')
        self.assertEqual(escape_phrase("title:x"), '"title:x"')

    def test_operators_are_quoted(self) -> None:
        self.assertEqual(escape_phrase("AND"), '"AND"')
        self.assertEqual(escape_phrase("or"), "or")

    def test_blank(self) -> None:
        self.assertEqual(escape_phrase("   "), "")


class TestKeywordTreeFromDict(unittest.TestCase):
    def test_nested_mapping(self) -> None:
        tree = keyword_tree_from_dict(
            {
                "conjunction": "or",
                "negation": False,
                "children": ["shoes", {"conjunction": "AND", "negation": True, "children": ["red", "leather"]}],
            }
        )
        self.assertIs(tree.conjunction, Conjunction.OR)
        self.assertEqual(tree.children[0], Term("shoes"))
        self.assertEqual(flatten_keys(tree), "((shoes) OR (*:* AND -(red AND leather)))")

    def test_list_is_and_group(self) -> None:
        self.assertEqual(flatten_keys(keyword_tree_from_dict(["shoes", "red"])), "shoes red")

    def test_unknown_conjunction(self) -> None:
        with self.assertRaisesRegex(ValueError, "keys\\.conjunction"):
            keyword_tree_from_dict({"conjunction": "XOR", "children": ["a"]})

    def test_bad_negation_type(self) -> None:
        with self.assertRaisesRegex(TypeError, "keys\\.children\\[1\\]\\.negation"):
            keyword_tree_from_dict({"children": ["a", {"negation": "yes", "children": []}]})


if __name__ == "__main__":
    unittest.main()
