"""Rule compiler - adapts discovery rulesets to an evaluation engine.

A ruleset's rule list is serialized into the engine's JSON document form
and compiled once; the compiled expression is then evaluated against the
projected attributes of each instance.
"""

import json
from collections.abc import Mapping
from typing import Any, Protocol

from servicerules.classification.ruler import Ruler
from servicerules.core.errors import EvaluationError, RuleCompilationError
from servicerules.core.models import DiscoveryRuleset


class Evaluator(Protocol):
    """Interface of an expression evaluation engine."""

    def compile(self, document: str) -> Any:
        """Compile a JSON rule document into an engine expression."""
        ...

    def evaluate(self, expression: Any, facts: Mapping[str, Any]) -> bool:
        """Evaluate a compiled expression against a flat fact mapping."""
        ...


_default_evaluator = Ruler()


def get_default_evaluator() -> Evaluator:
    """Get the shared default evaluation engine."""
    return _default_evaluator


def serialize_rules(ruleset: DiscoveryRuleset) -> str:
    """Serialize a ruleset's rules into a JSON rule document.

    Raises:
        RuleCompilationError: If a rule value is not JSON serializable.
    """
    try:
        return json.dumps([rule.to_dict() for rule in ruleset.rules])
    except (TypeError, ValueError) as e:
        raise RuleCompilationError(
            f"Cannot serialize rules of ruleset '{ruleset.name}': {e}"
        ) from e


def compile_ruleset(ruleset: DiscoveryRuleset, evaluator: Evaluator | None = None) -> Any:
    """Compile a ruleset into an evaluator expression.

    Args:
        ruleset: Ruleset to compile.
        evaluator: Engine to compile for (default: Ruler).

    Returns:
        The engine's compiled expression.

    Raises:
        RuleCompilationError: If the rules can't be serialized.
        EvaluationError: If the engine rejects the rule document.
    """
    evaluator = evaluator or _default_evaluator
    document = serialize_rules(ruleset)
    try:
        return evaluator.compile(document)
    except EvaluationError as e:
        raise EvaluationError(f"Ruleset '{ruleset.name}' rejected: {e}") from e


def evaluate(
    expression: Any,
    attributes: Mapping[str, Any],
    evaluator: Evaluator | None = None,
) -> bool:
    """Evaluate a compiled expression against projected attributes."""
    evaluator = evaluator or _default_evaluator
    return bool(evaluator.evaluate(expression, attributes))


def matches(
    ruleset: DiscoveryRuleset,
    attributes: Mapping[str, Any],
    evaluator: Evaluator | None = None,
) -> bool:
    """Check whether a ruleset matches a set of projected attributes.

    Args:
        ruleset: Ruleset to test.
        attributes: Flat attribute mapping of one instance.
        evaluator: Engine to use (default: Ruler).

    Returns:
        True if every rule of the ruleset holds.
    """
    expression = compile_ruleset(ruleset, evaluator)
    return evaluate(expression, attributes, evaluator)
