"""Error types raised by service-rules.

Construction-time errors (ConfigurationMissing, SourceUnreadable,
MalformedRules) abort building a classifier. Per-call errors
(RuleCompilationError, EvaluationError) abort a single classification call.
"""


class ServiceRulesError(Exception):
    """Base class for all service-rules errors."""


class ConfigurationMissing(ServiceRulesError, ValueError):
    """No rule sources were configured."""


class SourceUnreadable(ServiceRulesError, OSError):
    """A configured rule source could not be read."""


class MalformedRules(ServiceRulesError, ValueError):
    """A rule source does not decode into the expected signatures shape."""


class RuleCompilationError(ServiceRulesError, ValueError):
    """A ruleset could not be serialized into an evaluator expression."""


class EvaluationError(ServiceRulesError, ValueError):
    """The evaluator rejected a compiled expression or its input."""
