"""Variable resolvers: where rendered values come from and chomp writes go."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class VariableResolver(Protocol):
    def get(self, name: str) -> Any: ...

    def set(self, name: str, value: Any) -> None: ...


class MappingResolver:
    """Resolve names against a mutable mapping; unknown names resolve to ""."""

    def __init__(self, values: MutableMapping[str, Any] | None = None) -> None:
        self.values: MutableMapping[str, Any] = values if values is not None else {}

    def get(self, name: str) -> Any:
        if name not in self.values:
            logger.debug("unresolved variable %r, using empty string", name)
            return ""
        value = self.values[name]
        return "" if value is None else value

    def set(self, name: str, value: Any) -> None:
        self.values[name] = value


class AttributeResolver:
    """Resolve names as attributes of an object (records, dataclasses, namespaces)."""

    def __init__(self, target: object) -> None:
        self.target = target

    def get(self, name: str) -> Any:
        value = getattr(self.target, name, None)
        if value is None:
            logger.debug("unresolved attribute %r, using empty string", name)
            return ""
        return value

    def set(self, name: str, value: Any) -> None:
        setattr(self.target, name, value)


class JournalingResolver:
    """Wrap a resolver and remember the original value of every name written.

    Used by the renderer to roll a record back when it is deferred to the
    next page.
    """

    def __init__(self, inner: VariableResolver) -> None:
        self.inner = inner
        self._originals: dict[str, Any] = {}

    def get(self, name: str) -> Any:
        value = self.inner.get(name)
        return "" if value is None else value

    def set(self, name: str, value: Any) -> None:
        if name not in self._originals:
            self._originals[name] = self.inner.get(name)
        self.inner.set(name, value)

    def commit(self) -> None:
        self._originals.clear()

    def rollback(self) -> None:
        for name, value in self._originals.items():
            self.inner.set(name, value)
        self._originals.clear()


def stringify(value: Any) -> str:
    return "" if value is None else str(value)
