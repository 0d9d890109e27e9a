"""Shared data contracts and abstract collaborator interfaces.

The alias core owns no I/O.  Configuration, caching, transliteration,
alias storage and notifications are injected as implementations of the
interfaces below; reference implementations live in
:mod:`pathalias.config`, :mod:`pathalias.cache`,
:mod:`pathalias.transliteration`, :mod:`pathalias.storage` and
:mod:`pathalias.notifications`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Any

# Language code used when a path is not bound to a particular language.
LANGUAGE_NOT_SPECIFIED = "und"


class Operation(StrEnum):
    """What the caller is doing with the item being aliased."""

    INSERT = "insert"
    UPDATE = "update"
    BULKUPDATE = "bulkupdate"
    RETURN = "return"


class UpdateAction(IntEnum):
    """What to do when an aliased item is saved again."""

    NO_NEW = 0
    LEAVE = 1
    DELETE = 2


@dataclass(frozen=True)
class PathRecord:
    """A source path and the alias that should point at it."""

    source: str
    alias: str
    language: str = LANGUAGE_NOT_SPECIFIED


@dataclass(frozen=True)
class ExistingAlias:
    """An alias record already held by the store."""

    pid: int
    source: str
    alias: str
    language: str = LANGUAGE_NOT_SPECIFIED


class ConfigProvider(ABC):
    """Read-only view over the ``settings.*`` and ``pattern.*`` namespaces."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under a dotted *key*, or *default*."""
        ...


class CacheBackend(ABC):
    """Minimal get/set cache used for the punctuation catalog."""

    @abstractmethod
    def get(self, key: str) -> Any | None: ...

    @abstractmethod
    def set(self, key: str, data: Any) -> None: ...


class Transliterator(ABC):
    """Converts text to its closest ASCII representation."""

    @abstractmethod
    def transliterate(self, text: str, unknown: str = "?", language: str | None = None) -> str:
        """Transliterate *text*; characters without a mapping become *unknown*."""
        ...


class AliasStorage(ABC):
    """Owner of the alias namespace.

    The store serializes writes: a concurrent check-then-set for the same
    alias string must never map it to two different sources.
    """

    @abstractmethod
    def find_existing(self, source: str, language: str) -> ExistingAlias | None:
        """Return the current alias record for *source*, if any."""
        ...

    @abstractmethod
    def alias_exists(self, alias: str, exclude_source: str, language: str) -> bool:
        """Whether *alias* is taken by a source other than *exclude_source*.

        Comparison is case-insensitive and ignores trailing slashes.
        """
        ...

    @abstractmethod
    def persist(
        self,
        record: PathRecord,
        existing: ExistingAlias | None,
        operation: Operation,
    ) -> Any:
        """Save *record*, taking the previously fetched *existing* record into account."""
        ...

    @abstractmethod
    def get_max_alias_component_length(self) -> int:
        """Schema limit for a stored alias."""
        ...


class NotificationSink(ABC):
    """Fire-and-forget channel for operator-facing messages."""

    @abstractmethod
    def notify(self, message: str, operation: Operation | str) -> None: ...
