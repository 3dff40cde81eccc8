"""Core module - models, configuration, errors and logging."""

from .config import FilterConfig, load_config
from .errors import (
    ConfigurationMissing,
    EvaluationError,
    MalformedRules,
    RuleCompilationError,
    ServiceRulesError,
    SourceUnreadable,
)
from .logging_config import setup_logging
from .models import (
    Container,
    DiscoveryRule,
    DiscoveryRuleset,
    DiscoverySignatures,
    Instance,
    Port,
    PortType,
    Service,
    ServiceType,
)

__all__ = [
    # Models
    "Instance",
    "Container",
    "Port",
    "PortType",
    "Service",
    "ServiceType",
    "DiscoveryRule",
    "DiscoveryRuleset",
    "DiscoverySignatures",
    # Errors
    "ServiceRulesError",
    "ConfigurationMissing",
    "SourceUnreadable",
    "MalformedRules",
    "RuleCompilationError",
    "EvaluationError",
    # Config
    "FilterConfig",
    "load_config",
    "setup_logging",
]
