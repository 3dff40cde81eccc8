"""Static instance source - reads service instances from a JSON file."""

import json
import logging
from pathlib import Path

from servicerules.core.models import Instance
from servicerules.discovery.base import BaseInstanceSource

logger = logging.getLogger("servicerules.discovery.static")


class StaticInstanceSource(BaseInstanceSource):
    """Instance source backed by a JSON document.

    The document is either a list of instance objects or an object with
    an ``instances`` list, in the format produced by ``Instance.to_dict``.
    """

    def __init__(self, file_path: Path) -> None:
        self.file_path = Path(file_path)

    def get_source_name(self) -> str:
        return f"file:{self.file_path}"

    def discover(self) -> list[Instance]:
        """Load the instances from the file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the file is not a valid instance document.
        """
        if not self.file_path.exists():
            raise FileNotFoundError(f"Instance file not found: {self.file_path}")

        try:
            data = json.loads(self.file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in instance file: {e}") from e

        if isinstance(data, dict):
            data = data.get("instances", [])
        if not isinstance(data, list):
            raise ValueError("Invalid instance file format")

        instances = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                raise ValueError(f"Instance {index} must be an object")
            instances.append(Instance.from_dict(item))
        logger.info(f"Read {len(instances)} instances from {self.file_path}")
        return instances
