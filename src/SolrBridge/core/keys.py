"""Keyword tree model.

A search's fulltext keys are a small boolean tree: groups carry a
conjunction and a negation flag that apply to all of their direct children,
and children are either plain terms or nested groups.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union


class Conjunction(str, Enum):
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True, slots=True)
class Term:
    """A single search term (word or phrase)."""

    text: str


@dataclass(frozen=True, slots=True)
class KeywordGroup:
    """A group of keyword nodes joined by one conjunction.

    Attributes:
        conjunction: How the children are combined.
        negation: Whether the combined expression is negated.
        children: Terms and nested groups, in input order. Plain strings are
            accepted and stored as `Term`.
    """

    conjunction: Conjunction = Conjunction.AND
    negation: bool = False
    children: tuple["KeywordNode", ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.conjunction, Conjunction):
            object.__setattr__(self, "conjunction", Conjunction(str(self.conjunction).upper()))
        object.__setattr__(
            self,
            "children",
            tuple(Term(child) if isinstance(child, str) else child for child in self.children),
        )


KeywordNode = Union[Term, KeywordGroup]


def keyword_tree_from_dict(value: Any, config_key: str = "keys") -> KeywordGroup:
    """Build a keyword tree from its nested mapping form.

    The mapping form is what YAML configs and JSON payloads use::

        conjunction: OR
        negation: false
        children:
          - shoes
          - {conjunction: AND, children: [red, leather]}

    A bare string or list of strings is accepted as an AND group.

    Args:
        value: Mapping, list or string.
        config_key: Key path used in error messages.

    Returns:
        Parsed keyword group.

    Raises:
        TypeError: If the structure has unexpected types.
        ValueError: If the conjunction is unknown.
    """
    if isinstance(value, str):
        return KeywordGroup(children=(Term(value),))
    if isinstance(value, list):
        return KeywordGroup(children=tuple(_child_from_value(item, f"{config_key}[{idx}]")
                                           for idx, item in enumerate(value)))
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object, a list or a string")

    raw_conjunction = value.get("conjunction", "AND")
    if not isinstance(raw_conjunction, str):
        raise TypeError(f"{config_key}.conjunction must be a string")
    try:
        conjunction = Conjunction(raw_conjunction.strip().upper())
    except ValueError as error:
        raise ValueError(f"{config_key}.conjunction must be AND or OR") from error

    negation = value.get("negation", False)
    if not isinstance(negation, bool):
        raise TypeError(f"{config_key}.negation must be a boolean")

    children = value.get("children", [])
    if not isinstance(children, list):
        raise TypeError(f"{config_key}.children must be a list")

    return KeywordGroup(
        conjunction=conjunction,
        negation=negation,
        children=tuple(
            _child_from_value(item, f"{config_key}.children[{idx}]") for idx, item in enumerate(children)
        ),
    )


def _child_from_value(value: Any, config_key: str) -> KeywordNode:
    if isinstance(value, str):
        return Term(value)
    return keyword_tree_from_dict(value, config_key)
