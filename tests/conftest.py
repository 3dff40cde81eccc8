"""Pytest configuration and shared fixtures."""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def _build_instance(
    image: str = "redis:6",
    names: list[str] | None = None,
    private_port: int = 6379,
    public_port: int = 32768,
    container_labels: dict[str, str] | None = None,
    port_labels: dict[str, str] | None = None,
    container_id: str = "abc123",
):
    from servicerules.core.models import Container, Instance, Port, PortType

    return Instance(
        container=Container(
            id=container_id,
            names=["/cache"] if names is None else names,
            image=image,
            pod="web-0",
            command="docker-entrypoint.sh",
            state="running",
            labels=container_labels or {},
        ),
        port=Port(
            ip="172.17.0.2",
            type=PortType.TCP,
            public_port=public_port,
            private_port=private_port,
            labels=port_labels or {},
        ),
    )


def _build_ruleset(name: str, service_type: str, *rules: tuple) -> dict:
    return {
        "name": name,
        "type": service_type,
        "rules": [
            {"comparator": comparator, "path": path, "value": value}
            for comparator, path, value in rules
        ],
    }


@pytest.fixture
def make_instance():
    """Return a factory for service instances."""
    return _build_instance


@pytest.fixture
def make_ruleset():
    """Return a factory for ruleset documents from (comparator, path, value) tuples."""
    return _build_ruleset


@pytest.fixture
def sample_instance():
    """Create a sample redis instance for testing."""
    return _build_instance()


@pytest.fixture
def write_rules(tmp_path: Path):
    """Return a helper that writes a signatures file and returns its path."""

    def _write(file_name: str, *rulesets: dict, name: str | None = None) -> Path:
        document = {"name": name or file_name, "signatures": list(rulesets)}
        path = tmp_path / f"{file_name}.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def redis_rules(write_rules) -> Path:
    """Signature file with one redis ruleset matching on image."""
    return write_rules(
        "redis",
        _build_ruleset("Redis", "redis", ("equals", "ContainerImage", "redis:6")),
    )
