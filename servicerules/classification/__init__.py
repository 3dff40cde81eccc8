"""Classification of discovered service instances by discovery rules."""

from .attributes import CONTAINER_LABEL_PREFIX, NETWORK_LABEL_PREFIX, project_attributes
from .compiler import Evaluator, compile_ruleset, evaluate, matches, serialize_rules
from .engine import PLUGIN_NAME, ClassificationDecision, RuleFilter, create_rule_filter
from .ruler import Expression, Predicate, Ruler
from .signatures import SignatureStore, load_service_signatures, parse_service_signatures

__all__ = [
    # Signature Store
    "SignatureStore",
    "load_service_signatures",
    "parse_service_signatures",
    # Attribute Projection
    "project_attributes",
    "CONTAINER_LABEL_PREFIX",
    "NETWORK_LABEL_PREFIX",
    # Rule Compiler
    "Evaluator",
    "compile_ruleset",
    "evaluate",
    "matches",
    "serialize_rules",
    # Default Evaluator
    "Ruler",
    "Expression",
    "Predicate",
    # Rule Filter
    "RuleFilter",
    "ClassificationDecision",
    "PLUGIN_NAME",
    "create_rule_filter",
]
