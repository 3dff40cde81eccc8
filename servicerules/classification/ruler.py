"""Ruler - Default rule evaluation engine.

Evaluates JSON rule documents against a flat mapping of facts. A document
is either a list of rule objects (all must match) or a tree of
``{"all": [...]}`` / ``{"any": [...]}`` nodes whose leaves are rule objects
with ``comparator``, ``path`` and ``value`` keys.

The classifier only talks to this module through the Evaluator protocol
in ``compiler.py``, so another engine can be plugged in instead.
"""

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from servicerules.core.errors import EvaluationError

# Alternate spellings accepted for comparator names
COMPARATOR_ALIASES = {
    "equals": "eq",
    "not-equals": "neq",
    "matches": "regex",
}


def _as_number(value: Any) -> float | None:
    """Convert a fact or rule value to a number if it looks like one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _equal(actual: Any, expected: Any) -> bool:
    # Ports are projected as decimal strings, rules often spell them as numbers
    if isinstance(actual, str) != isinstance(expected, str):
        left, right = _as_number(actual), _as_number(expected)
        if left is not None and right is not None:
            return left == right
    return actual == expected


def _ordered(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(actual: Any, expected: Any) -> bool:
        left, right = _as_number(actual), _as_number(expected)
        if left is not None and right is not None:
            return op(left, right)
        return op(str(actual), str(expected))

    return compare


def _contains(actual: Any, expected: Any) -> bool:
    if isinstance(actual, str):
        return str(expected) in actual
    if isinstance(actual, (list, tuple, set, frozenset, dict)):
        return expected in actual
    return False


def _member(actual: Any, expected: Any) -> bool:
    return any(_equal(actual, candidate) for candidate in expected)


_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": _equal,
    "neq": lambda actual, expected: not _equal(actual, expected),
    "gt": _ordered(lambda a, b: a > b),
    "gte": _ordered(lambda a, b: a >= b),
    "lt": _ordered(lambda a, b: a < b),
    "lte": _ordered(lambda a, b: a <= b),
    "contains": _contains,
    "ncontains": lambda actual, expected: not _contains(actual, expected),
    "in": _member,
    "nin": lambda actual, expected: not _member(actual, expected),
}

# Comparators answered from key presence alone
_PRESENCE = {"exists", "nexists"}


@dataclass(frozen=True)
class Predicate:
    """A compiled atomic test."""

    comparator: str
    path: str
    value: Any = None
    pattern: re.Pattern[str] | None = None

    def test(self, facts: Mapping[str, Any]) -> bool:
        """Test this predicate against a fact mapping."""
        if self.comparator == "exists":
            return self.path in facts
        if self.comparator == "nexists":
            return self.path not in facts

        if self.path not in facts:
            return False
        actual = facts[self.path]

        if self.pattern is not None:
            return actual is not None and self.pattern.search(str(actual)) is not None
        return _COMPARATORS[self.comparator](actual, self.value)


@dataclass(frozen=True)
class Expression:
    """A boolean combination of predicates and nested expressions."""

    operator: str  # "all" or "any"
    operands: tuple["Expression | Predicate", ...] = ()

    def test(self, facts: Mapping[str, Any]) -> bool:
        """Evaluate this expression against a fact mapping."""
        if self.operator == "any":
            return any(operand.test(facts) for operand in self.operands)
        return all(operand.test(facts) for operand in self.operands)


def _compile_predicate(node: dict[str, Any], where: str) -> Predicate:
    comparator = node.get("comparator")
    path = node.get("path")
    if not isinstance(comparator, str) or not isinstance(path, str):
        raise EvaluationError(f"{where}: rule needs string 'comparator' and 'path'")

    comparator = COMPARATOR_ALIASES.get(comparator.lower(), comparator.lower())
    value = node.get("value")

    if comparator == "regex":
        if not isinstance(value, str):
            raise EvaluationError(f"{where}: regex value must be a string")
        try:
            pattern = re.compile(value)
        except re.error as e:
            raise EvaluationError(f"{where}: invalid regex {value!r}: {e}") from e
        return Predicate(comparator=comparator, path=path, value=value, pattern=pattern)

    if comparator in ("in", "nin") and not isinstance(value, list):
        raise EvaluationError(f"{where}: '{comparator}' needs a list value")

    if comparator not in _COMPARATORS and comparator not in _PRESENCE:
        raise EvaluationError(f"{where}: unknown comparator '{node.get('comparator')}'")

    return Predicate(comparator=comparator, path=path, value=value)


def _compile_node(node: Any, where: str) -> Expression | Predicate:
    if isinstance(node, list):
        return Expression(
            operator="all",
            operands=tuple(
                _compile_node(child, f"{where}[{index}]") for index, child in enumerate(node)
            ),
        )

    if not isinstance(node, dict):
        raise EvaluationError(f"{where}: expected a rule object or list, got {type(node).__name__}")

    for operator in ("all", "any"):
        if operator in node:
            children = node[operator]
            if not isinstance(children, list):
                raise EvaluationError(f"{where}.{operator}: expected a list")
            return Expression(
                operator=operator,
                operands=tuple(
                    _compile_node(child, f"{where}.{operator}[{index}]")
                    for index, child in enumerate(children)
                ),
            )

    return _compile_predicate(node, where)


class Ruler:
    """Rule evaluation engine for JSON rule documents.

    Example:
        ruler = Ruler()
        expression = ruler.compile('[{"comparator": "eq", "path": "a", "value": 1}]')
        ruler.evaluate(expression, {"a": 1})  # True
    """

    def compile(self, document: str) -> Expression:
        """Parse and compile a JSON rule document.

        Args:
            document: JSON text of a rule list or rule tree.

        Returns:
            Compiled Expression.

        Raises:
            EvaluationError: If the document is not valid JSON, has the
                wrong shape, or uses an unknown comparator.
        """
        try:
            tree = json.loads(document)
        except (TypeError, json.JSONDecodeError) as e:
            raise EvaluationError(f"Invalid rule document: {e}") from e

        compiled = _compile_node(tree, "rules")
        if isinstance(compiled, Predicate):
            return Expression(operator="all", operands=(compiled,))
        return compiled

    def evaluate(self, expression: Expression, facts: Mapping[str, Any]) -> bool:
        """Evaluate a compiled expression against a fact mapping.

        Raises:
            EvaluationError: If a value can't be compared.
        """
        try:
            return expression.test(facts)
        except TypeError as e:
            raise EvaluationError(f"Rule evaluation failed: {e}") from e
