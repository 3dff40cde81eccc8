"""Attribute projection for service instances.

Rules address instance metadata through a flat namespace of attribute
names. The fixed names below are shared with existing rule files and
must not change.
"""

from typing import Any

from servicerules.core.models import Instance

CONTAINER_LABEL_PREFIX = "ContainerLabel-"
NETWORK_LABEL_PREFIX = "NetworkLabel-"


def project_attributes(instance: Instance) -> dict[str, Any]:
    """Project an instance into the flat attribute mapping rules test against.

    Container labels are exposed as ``ContainerLabel-<key>`` and port labels
    as ``NetworkLabel-<key>``, so a label present on both never collides.

    Args:
        instance: Service instance to project.

    Returns:
        Attribute name to value mapping.
    """
    container = instance.container
    port = instance.port

    attributes: dict[str, Any] = {
        "ContainerID": container.id,
        # Containers without names project an empty name
        "ContainerName": container.names[0] if container.names else "",
        "ContainerImage": container.image,
        "ContainerPod": container.pod,
        "ContainerCommand": container.command,
        "ContainerState": container.state,
        "NetworkIP": port.ip,
        "NetworkType": port.type.value,
        "NetworkPublicPort": str(port.public_port),
        "NetworkPrivatePort": str(port.private_port),
    }

    for key, value in container.labels.items():
        attributes[CONTAINER_LABEL_PREFIX + key] = value

    for key, value in port.labels.items():
        attributes[NETWORK_LABEL_PREFIX + key] = value

    return attributes
