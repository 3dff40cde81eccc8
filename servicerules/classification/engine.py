"""Rule Filter - Core classification logic.

This module provides the rule filter that maps discovered service
instances to a service type using the first matching discovery ruleset.
"""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from servicerules.classification.attributes import project_attributes
from servicerules.classification.compiler import (
    Evaluator,
    compile_ruleset,
    evaluate,
    get_default_evaluator,
)
from servicerules.classification.signatures import SignatureStore
from servicerules.core.config import FilterConfig
from servicerules.core.logging_config import log_classification_result
from servicerules.core.models import DiscoveryRuleset, Instance

logger = logging.getLogger("servicerules.classification.engine")

PLUGIN_NAME = "filters/service-rules"


@dataclass
class ClassificationDecision:
    """A classification decision with full context.

    Attributes:
        instance: The classified instance, with its service type set
        service_type: The assigned service type
        source_name: Name of the signature source that matched
        ruleset_name: Name of the matching ruleset
        timestamp: When classification was made
    """

    instance: Instance
    service_type: str
    source_name: str
    ruleset_name: str
    timestamp: datetime = field(default_factory=datetime.now)


class RuleFilter:
    """Filters service instances using declarative discovery rules.

    Sources are tried in configured order and rulesets in declared order;
    the first ruleset that matches assigns its type to the instance.
    Instances that match nothing are left out of the result.

    Example:
        config = FilterConfig(services_files=["builtin.json"])
        rule_filter = RuleFilter("service-rules", config)
        services = rule_filter.map(instances)
        for instance in services:
            print(f"{instance.container.image}: {instance.service.type}")
    """

    def __init__(
        self,
        name: str,
        config: FilterConfig,
        evaluator: Evaluator | None = None,
    ) -> None:
        """Initialize the rule filter and load all configured rule files.

        Args:
            name: Name of this filter instance.
            config: Filter configuration listing the rule files.
            evaluator: Expression engine (default: Ruler).

        Raises:
            ConfigurationMissing: If no rule files are configured.
            SourceUnreadable: If a rule file can't be read.
            MalformedRules: If a rule file has invalid content.
        """
        self.name = name
        self.config = config
        self.evaluator = evaluator or get_default_evaluator()
        self._store = self._load_store()

    def _load_store(self) -> SignatureStore:
        return SignatureStore.from_files(
            self.config.services_files,
            known_types=self.config.known_types,
        )

    @property
    def store(self) -> SignatureStore:
        """Get the currently active signature store."""
        return self._store

    def reload(self) -> SignatureStore:
        """Reload all rule files and swap in the new store.

        Calls already in progress keep using the store they started with.
        If loading fails, the current store stays active.

        Returns:
            The newly active store.
        """
        store = self._load_store()
        self._store = store
        logger.info(f"{self.name}: reloaded {store.count} rulesets")
        return store

    def classify_with_details(
        self,
        instances: Sequence[Instance],
    ) -> list[ClassificationDecision]:
        """Classify instances and describe which ruleset matched each one.

        Args:
            instances: Discovered instances in pipeline order.

        Returns:
            One decision per matched instance, in input order.

        Raises:
            RuleCompilationError: If a ruleset can't be serialized.
            EvaluationError: If the evaluator rejects a ruleset.
        """
        store = self._store
        started = time.perf_counter()
        compiled: dict[int, Any] = {}
        decisions: list[ClassificationDecision] = []

        for instance in instances:
            attributes = project_attributes(instance)

            for source, ruleset in store.rulesets():
                if not self._matches(ruleset, attributes, compiled):
                    continue

                annotated = replace(
                    instance,
                    service=replace(instance.service, type=ruleset.type),
                )
                decisions.append(
                    ClassificationDecision(
                        instance=annotated,
                        service_type=ruleset.type,
                        source_name=source.name,
                        ruleset_name=ruleset.name,
                    )
                )
                logger.debug(
                    f"Instance {instance.container.id or instance.id} matched "
                    f"'{ruleset.name}' ({ruleset.type}) from {source.name}"
                )
                break

        duration_ms = (time.perf_counter() - started) * 1000
        log_classification_result(self.name, len(instances), len(decisions), duration_ms)
        return decisions

    def map(self, instances: Sequence[Instance]) -> list[Instance]:
        """Map discovered service instances to a service type.

        Args:
            instances: Discovered instances in pipeline order.

        Returns:
            Matched instances with their service type set, in input order.
            Input instances are not modified.
        """
        return [decision.instance for decision in self.classify_with_details(instances)]

    def _matches(
        self,
        ruleset: DiscoveryRuleset,
        attributes: dict[str, Any],
        compiled: dict[int, Any],
    ) -> bool:
        # Compile each ruleset at most once per call
        key = id(ruleset)
        if key not in compiled:
            compiled[key] = compile_ruleset(ruleset, self.evaluator)
        return evaluate(compiled[key], attributes, self.evaluator)


def create_rule_filter(
    config: FilterConfig,
    name: str = PLUGIN_NAME,
) -> RuleFilter:
    """Create a rule filter from configuration.

    Args:
        config: Filter configuration.
        name: Name for the filter instance.

    Returns:
        Configured RuleFilter.
    """
    return RuleFilter(name, config)
