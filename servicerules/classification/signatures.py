"""Signature Store - Declarative service discovery rulesets.

This module handles loading and validating service discovery signature
files. Each file yields one DiscoverySignatures value; the store keeps
them in configured order, which is the match priority order.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from servicerules.core.errors import ConfigurationMissing, MalformedRules, SourceUnreadable
from servicerules.core.models import DiscoveryRule, DiscoveryRuleset, DiscoverySignatures

logger = logging.getLogger("servicerules.classification.signatures")

_MISSING = object()


def _get_field(data: dict[str, Any], key: str, default: Any = _MISSING) -> Any:
    """Look up a document field, falling back to a case-insensitive match."""
    if key in data:
        return data[key]
    lowered = key.lower()
    for candidate, value in data.items():
        if isinstance(candidate, str) and candidate.lower() == lowered:
            return value
    if default is _MISSING:
        raise KeyError(key)
    return default


def _parse_rule(data: Any, where: str) -> DiscoveryRule:
    """Parse one rule object."""
    if not isinstance(data, dict):
        raise MalformedRules(f"{where}: rule must be an object, got {type(data).__name__}")

    try:
        comparator = _get_field(data, "comparator")
        path = _get_field(data, "path")
    except KeyError as e:
        raise MalformedRules(f"{where}: rule missing required field {e}") from e

    if not isinstance(comparator, str) or not comparator:
        raise MalformedRules(f"{where}: comparator must be a non-empty string")
    if not isinstance(path, str) or not path:
        raise MalformedRules(f"{where}: path must be a non-empty string")

    return DiscoveryRule(
        comparator=comparator,
        path=path,
        value=_get_field(data, "value", None),
    )


def _parse_ruleset(data: Any, where: str) -> DiscoveryRuleset:
    """Parse one ruleset object."""
    if not isinstance(data, dict):
        raise MalformedRules(f"{where}: signature must be an object, got {type(data).__name__}")

    name = _get_field(data, "name", "")
    service_type = _get_field(data, "type", "")
    rules_data = _get_field(data, "rules", [])

    if not isinstance(name, str):
        raise MalformedRules(f"{where}: name must be a string")
    if not isinstance(service_type, str) or not service_type.strip():
        raise MalformedRules(f"{where} ({name or 'unnamed'}): type must be a non-empty string")
    if rules_data is None:
        rules_data = []
    if not isinstance(rules_data, list):
        raise MalformedRules(f"{where} ({name or 'unnamed'}): rules must be a list")

    rules = tuple(
        _parse_rule(rule, f"{where}.rules[{index}]") for index, rule in enumerate(rules_data)
    )
    return DiscoveryRuleset(name=name, type=service_type, rules=rules)


def parse_service_signatures(data: Any, default_name: str = "") -> DiscoverySignatures:
    """Parse a decoded signatures document.

    Args:
        data: Decoded JSON document.
        default_name: Name to use when the document has none.

    Returns:
        Parsed DiscoverySignatures.

    Raises:
        MalformedRules: If the document does not have the signatures shape.
    """
    if not isinstance(data, dict):
        raise MalformedRules("Invalid signature file format: expected an object")

    name = _get_field(data, "name", "") or default_name
    signatures_data = _get_field(data, "signatures", [])

    if not isinstance(name, str):
        raise MalformedRules("Invalid signature file format: name must be a string")
    if signatures_data is None:
        signatures_data = []
    if not isinstance(signatures_data, list):
        raise MalformedRules("Invalid signature file format: signatures must be a list")

    signatures = tuple(
        _parse_ruleset(ruleset, f"signatures[{index}]")
        for index, ruleset in enumerate(signatures_data)
    )
    return DiscoverySignatures(name=name, signatures=signatures)


def load_service_signatures(file_path: Path | str) -> DiscoverySignatures:
    """Read discovery rulesets from a JSON file.

    Args:
        file_path: Path to the signature file.

    Returns:
        Loaded DiscoverySignatures.

    Raises:
        SourceUnreadable: If the file doesn't exist or can't be read.
        MalformedRules: If the content is not valid signatures JSON.
    """
    file_path = Path(file_path)
    logger.info(f"loading service discovery signatures from {file_path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnreadable(f"Cannot read signature file {file_path}: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedRules(f"Invalid JSON in signature file {file_path}: {e}") from e

    try:
        parsed = parse_service_signatures(data, default_name=file_path.stem)
    except MalformedRules as e:
        raise MalformedRules(f"{file_path}: {e}") from e

    return DiscoverySignatures(
        name=parsed.name,
        signatures=parsed.signatures,
        source=str(file_path),
    )


class SignatureStore:
    """Ordered, immutable collection of loaded discovery signatures.

    Sources keep the order they were configured in, and rulesets keep
    their declared order within a source. Iterating the store therefore
    yields rulesets in match priority order.

    Example:
        store = SignatureStore.from_files(["builtin.json", "custom.json"])
        for source, ruleset in store.rulesets():
            print(source.name, ruleset.type)
    """

    def __init__(
        self,
        sources: Iterable[DiscoverySignatures],
        known_types: Iterable[str] | None = None,
    ) -> None:
        """Initialize the store from already loaded sources.

        Args:
            sources: Loaded signatures in priority order.
            known_types: Service types the consumer understands. Rulesets
                naming any other type are logged as warnings.
        """
        self._sources: tuple[DiscoverySignatures, ...] = tuple(sources)
        self._known_types = frozenset(known_types or ())

        if self._known_types:
            self._warn_unknown_types()

    @classmethod
    def from_files(
        cls,
        file_paths: Iterable[Path | str],
        known_types: Iterable[str] | None = None,
    ) -> "SignatureStore":
        """Load every signature file, in order, into a new store.

        Args:
            file_paths: Signature files in priority order.
            known_types: Optional list of recognised service types.

        Returns:
            A fully loaded store.

        Raises:
            ConfigurationMissing: If no files were given.
            SourceUnreadable: If any file can't be read.
            MalformedRules: If any file has invalid content.
        """
        paths = list(file_paths)
        if not paths:
            raise ConfigurationMissing("servicesFiles configuration value missing")

        sources = [load_service_signatures(path) for path in paths]
        store = cls(sources, known_types=known_types)
        logger.info(f"Loaded {store.count} rulesets from {len(sources)} signature files")
        return store

    def _warn_unknown_types(self) -> None:
        for source, ruleset in self.rulesets():
            if ruleset.type not in self._known_types:
                logger.warning(
                    f"Ruleset '{ruleset.name}' in {source.name} assigns "
                    f"unrecognised service type '{ruleset.type}'"
                )

    @property
    def sources(self) -> tuple[DiscoverySignatures, ...]:
        """Get the loaded sources in priority order."""
        return self._sources

    def rulesets(self) -> Iterator[tuple[DiscoverySignatures, DiscoveryRuleset]]:
        """Iterate (source, ruleset) pairs in match priority order."""
        for source in self._sources:
            for ruleset in source.signatures:
                yield source, ruleset

    @property
    def count(self) -> int:
        """Get total number of rulesets across all sources."""
        return sum(source.count for source in self._sources)

    def get_version_info(self) -> dict[str, Any]:
        """Get a summary of the loaded sources.

        Returns:
            Dictionary with per-source names and ruleset counts.
        """
        return {
            "total_rulesets": self.count,
            "files_loaded": len(self._sources),
            "files": [
                {
                    "name": source.name,
                    "path": source.source,
                    "rulesets": source.count,
                }
                for source in self._sources
            ],
        }
