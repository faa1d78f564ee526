"""Sources of the endpoints monitored in a cycle."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, List, Tuple, Union

from pydantic import ValidationError

from .exceptions import RegistryError
from .models import Endpoint

logger = logging.getLogger(__name__)


def _validate_unique(endpoints: Tuple[Endpoint, ...]) -> Tuple[Endpoint, ...]:
    seen = set()
    duplicates = []
    for endpoint in endpoints:
        if endpoint.id in seen:
            duplicates.append(endpoint.id)
        seen.add(endpoint.id)
    if duplicates:
        raise RegistryError(
            f"Duplicate endpoint ids: {', '.join(sorted(set(duplicates)))}",
            details={'duplicates': sorted(set(duplicates))}
        )
    return endpoints


def parse_endpoints(entries: Iterable[Any]) -> Tuple[Endpoint, ...]:
    """Validate raw endpoint entries.

    Entries may be Endpoint instances or mappings with ``id``, ``name``,
    ``url`` and ``uptime`` (or ``declared_uptime``).

    Raises:
        RegistryError: If an entry is invalid or ids repeat
    """
    endpoints = []
    for index, entry in enumerate(entries):
        if isinstance(entry, Endpoint):
            endpoints.append(entry)
            continue
        try:
            endpoints.append(Endpoint.model_validate(entry))
        except ValidationError as e:
            raise RegistryError(
                f"Invalid endpoint entry at index {index}: {e.error_count()} error(s)",
                details={'index': index, 'errors': e.errors(include_url=False, include_context=False)}
            ) from e
    return _validate_unique(tuple(endpoints))


class EndpointRegistry(ABC):
    """Read-only, ordered list of monitored endpoints."""

    @abstractmethod
    def load(self) -> Tuple[Endpoint, ...]:
        """Return the endpoints for the next cycle, in order.

        Raises:
            RegistryError: If the endpoints cannot be read
        """


class StaticEndpointRegistry(EndpointRegistry):
    """Registry over a fixed list supplied at construction."""

    def __init__(self, endpoints: Iterable[Any]):
        self._endpoints = parse_endpoints(endpoints)

    def load(self) -> Tuple[Endpoint, ...]:
        return self._endpoints

    def __len__(self) -> int:
        return len(self._endpoints)


class JsonFileEndpointRegistry(EndpointRegistry):
    """Registry backed by a JSON file, re-read on every load.

    The file holds either a list of endpoint objects or an object with an
    ``endpoints`` list.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Tuple[Endpoint, ...]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise RegistryError(f"Endpoints file not found: {self.path}",
                                details={'path': str(self.path)}) from e
        except OSError as e:
            raise RegistryError(f"Could not read endpoints file {self.path}: {e}",
                                details={'path': str(self.path)}) from e
        except json.JSONDecodeError as e:
            raise RegistryError(f"Invalid JSON in endpoints file {self.path}: {e}",
                                details={'path': str(self.path), 'line': e.lineno}) from e
        except UnicodeDecodeError as e:
            raise RegistryError(f"Endpoints file {self.path} is not UTF-8 text",
                                details={'path': str(self.path)}) from e

        if isinstance(data, dict):
            data = data.get('endpoints')
        if not isinstance(data, list):
            raise RegistryError(
                f"Endpoints file {self.path} must contain a list or an object with an 'endpoints' list",
                details={'path': str(self.path)}
            )

        endpoints = parse_endpoints(data)
        logger.debug(f"Loaded {len(endpoints)} endpoints from {self.path}")
        return endpoints


def build_registry(config) -> EndpointRegistry:
    """Build the registry described by the configuration.

    Args:
        config: Application configuration

    Returns:
        A JSON file registry when ``endpoints_file`` is set, otherwise a
        static registry over ``endpoints``
    """
    endpoints_file = getattr(config, 'endpoints_file', None)
    if endpoints_file:
        return JsonFileEndpointRegistry(endpoints_file)

    entries: List[Any] = list(getattr(config, 'endpoints', None) or [])
    return StaticEndpointRegistry(entries)
