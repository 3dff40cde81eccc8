"""Core data models for service-rules.

This module defines the discovered service instance types consumed by the
classifier and the declarative rule types loaded from signature files.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import uuid4


class PortType(Enum):
    """Transport protocol of a discovered network port."""

    TCP = "TCP"
    UDP = "UDP"
    UNKNOWN = "UNKNOWN"


class ServiceType(str, Enum):
    """Service type of an instance before classification.

    Rulesets assign free-form type strings; the classifier stores whatever
    string the matching ruleset declares.
    """

    UNKNOWN = "unknown"


@dataclass
class Container:
    """Container metadata of a discovered service instance.

    Attributes:
        id: Runtime container identifier
        names: Container names, first one is the primary name
        image: Image reference the container runs
        pod: Owning pod name (orchestrated containers only)
        command: Container entrypoint command
        state: Lifecycle state (running, exited, ...)
        labels: Container-level labels
    """

    id: str = ""
    names: list[str] = field(default_factory=list)
    image: str = ""
    pod: str = ""
    command: str = ""
    state: str = ""
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class Port:
    """Network endpoint of a discovered service instance.

    Attributes:
        ip: Address the port is bound to
        type: Transport protocol
        public_port: Host-side port number
        private_port: Container-side port number
        labels: Endpoint-level labels
    """

    ip: str = ""
    type: PortType = PortType.UNKNOWN
    public_port: int = 0
    private_port: int = 0
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class Service:
    """Service identity assigned to an instance by classification."""

    name: str = ""
    type: str = ServiceType.UNKNOWN.value
    plugin: str = ""


@dataclass
class Instance:
    """A discovered service instance: one container exposing one port.

    Attributes:
        container: Container the service runs in
        port: Network port the service listens on
        service: Service identity (type is set by classification)
        id: Unique identifier (UUID)
    """

    container: Container = field(default_factory=Container)
    port: Port = field(default_factory=Port)
    service: Service = field(default_factory=Service)
    id: str = field(default_factory=lambda: str(uuid4()))

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Instance):
            return self.id == other.id
        return False

    def to_dict(self) -> dict[str, Any]:
        """Convert the instance to a dictionary for JSON serialization."""
        return {
            "id": self.id,
            "container": {
                "id": self.container.id,
                "names": list(self.container.names),
                "image": self.container.image,
                "pod": self.container.pod,
                "command": self.container.command,
                "state": self.container.state,
                "labels": dict(self.container.labels),
            },
            "port": {
                "ip": self.port.ip,
                "type": self.port.type.value,
                "public_port": self.port.public_port,
                "private_port": self.port.private_port,
                "labels": dict(self.port.labels),
            },
            "service": {
                "name": self.service.name,
                "type": self.service.type,
                "plugin": self.service.plugin,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Instance":
        """Create an instance from a dictionary.

        Missing sections and fields, and fields set to null, fall back to
        their defaults.
        """
        container_data = data.get("container") or {}
        port_data = data.get("port") or {}
        service_data = data.get("service") or {}

        type_str = str(port_data.get("type") or "UNKNOWN").upper()
        port_type = (
            PortType[type_str] if type_str in PortType.__members__ else PortType.UNKNOWN
        )

        instance = cls(
            container=Container(
                id=container_data.get("id") or "",
                names=list(container_data.get("names") or []),
                image=container_data.get("image") or "",
                pod=container_data.get("pod") or "",
                command=container_data.get("command") or "",
                state=container_data.get("state") or "",
                labels=dict(container_data.get("labels") or {}),
            ),
            port=Port(
                ip=port_data.get("ip") or "",
                type=port_type,
                public_port=int(port_data.get("public_port") or 0),
                private_port=int(port_data.get("private_port") or 0),
                labels=dict(port_data.get("labels") or {}),
            ),
            service=Service(
                name=service_data.get("name") or "",
                type=service_data.get("type") or ServiceType.UNKNOWN.value,
                plugin=service_data.get("plugin") or "",
            ),
        )
        if data.get("id"):
            instance.id = str(data["id"])
        return instance


@dataclass(frozen=True)
class DiscoveryRule:
    """One atomic test against a projected attribute.

    Attributes:
        comparator: Kind of test (eq, regex, contains, ...)
        path: Name of the attribute to test
        value: Expected value
    """

    comparator: str
    path: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the rule document form used in signature files."""
        return {"comparator": self.comparator, "path": self.path, "value": self.value}


@dataclass(frozen=True)
class DiscoveryRuleset:
    """A named set of discovery rules that identifies one service type.

    Attributes:
        name: Human-readable label
        type: Service type assigned when all rules match
        rules: Ordered rules, combined with AND
    """

    name: str
    type: str
    rules: tuple[DiscoveryRule, ...] = ()


@dataclass(frozen=True)
class DiscoverySignatures:
    """Discovery rulesets loaded from one rule source.

    Attributes:
        name: Source label (the document name or file stem)
        signatures: Rulesets in declared order
        source: Path the rulesets were loaded from
    """

    name: str
    signatures: tuple[DiscoveryRuleset, ...] = ()
    source: str = ""

    @property
    def count(self) -> int:
        """Get the number of rulesets in this source."""
        return len(self.signatures)
