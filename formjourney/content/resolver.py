"""Content lookup for step templates.

Content paths look like ``"{StepName}:{segment}.{segment}"``. ``StepContent``
accumulates segments (``content["fields"]["name"]``) and resolves once when
rendered, so templates can write ``{{ content.fields.name }}``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ..errors import MissingContentError

logger = logging.getLogger(__name__)


class ContentResolver(ABC):
    """Resolves content paths to display strings."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def resolve(self, path: str, **params: Any) -> str:
        ...


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class CatalogContentResolver(ContentResolver):
    """Resolve paths against a nested mapping keyed by step name."""

    def __init__(self, catalog: Optional[Mapping[str, Any]] = None):
        self.catalog: Mapping[str, Any] = catalog or {}

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "CatalogContentResolver":
        path = Path(path)
        with open(path) as f:
            catalog = yaml.safe_load(f) or {}
        logger.debug("Loaded content catalog from %s (%d steps)", path, len(catalog))
        return cls(catalog)

    def _lookup(self, path: str) -> Any:
        namespace, _, key = path.partition(":")
        node: Any = self.catalog.get(namespace)
        for segment in key.split(".") if key else []:
            if not isinstance(node, Mapping) or segment not in node:
                return None
            node = node[segment]
        return node

    def exists(self, path: str) -> bool:
        node = self._lookup(path)
        return node is not None and not isinstance(node, Mapping)

    def resolve(self, path: str, **params: Any) -> str:
        if not self.exists(path):
            raise MissingContentError(path)
        return str(self._lookup(path)).format_map(_KeepMissing(params))


class StepContent:
    """Content scoped to one step, addressed by accumulated path segments."""

    def __init__(
        self,
        resolver: Optional[ContentResolver],
        step_name: str,
        params: Optional[Dict[str, Any]] = None,
        prefix: str = "",
    ):
        self.resolver = resolver
        self.step_name = step_name
        self.params = params or {}
        self.prefix = prefix

    @property
    def path(self) -> str:
        return f"{self.step_name}:{self.prefix}"

    def __getitem__(self, segment: str) -> "StepContent":
        prefix = f"{self.prefix}.{segment}" if self.prefix else str(segment)
        return StepContent(self.resolver, self.step_name, self.params, prefix)

    def exists(self) -> bool:
        return self.resolver is not None and self.resolver.exists(self.path)

    def __str__(self) -> str:
        if not self.exists():
            raise MissingContentError(self.path)
        return self.resolver.resolve(self.path, **self.params)

    def __repr__(self) -> str:
        return f"StepContent(path={self.path!r})"
