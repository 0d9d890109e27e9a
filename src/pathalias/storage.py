"""In-memory alias store.

Reference implementation of :class:`~pathalias.contracts.AliasStorage`
used by the CLI and the tests.  Every write happens under one lock, and
:meth:`InMemoryAliasStorage.persist` re-checks ownership inside it, so
two sources can never end up holding the same alias.
"""

from __future__ import annotations

import itertools
import logging
import threading

from pathalias.config import ALIAS_SCHEMA_MAX_LENGTH
from pathalias.contracts import (
    LANGUAGE_NOT_SPECIFIED,
    AliasStorage,
    ExistingAlias,
    Operation,
    PathRecord,
    UpdateAction,
)
from pathalias.errors import ActionableError

logger = logging.getLogger(__name__)


def _normalize(alias: str) -> str:
    return alias.rstrip("/").lower()


class InMemoryAliasStorage(AliasStorage):
    """Dict-backed alias table keyed by ``pid``.

    ``update_action`` decides what :meth:`persist` does when the source
    already has an alias: keep it (``NO_NEW``), add a second one
    (``LEAVE``) or overwrite it in place (``DELETE``).
    """

    def __init__(
        self,
        *,
        update_action: UpdateAction = UpdateAction.DELETE,
        max_length: int = ALIAS_SCHEMA_MAX_LENGTH,
    ) -> None:
        self.update_action = update_action
        self._max_length = max_length
        self._records: dict[int, ExistingAlias] = {}
        self._pids = itertools.count(1)
        self._lock = threading.RLock()

    # -- reads ---------------------------------------------------------------

    def get_max_alias_component_length(self) -> int:
        return self._max_length

    def find_existing(self, source: str, language: str) -> ExistingAlias | None:
        """Newest alias for *source*, preferring *language* over ``und``."""
        with self._lock:
            matches = [
                record
                for record in self._records.values()
                if record.source == source and record.language in (language, LANGUAGE_NOT_SPECIFIED)
            ]
        if not matches:
            return None
        return max(matches, key=lambda r: (r.language != LANGUAGE_NOT_SPECIFIED, r.pid))

    def alias_exists(self, alias: str, exclude_source: str, language: str) -> bool:
        wanted = _normalize(alias)
        with self._lock:
            return any(
                _normalize(record.alias) == wanted
                and record.source != exclude_source
                and (
                    language == LANGUAGE_NOT_SPECIFIED
                    or record.language in (language, LANGUAGE_NOT_SPECIFIED)
                )
                for record in self._records.values()
            )

    def lookup(self, alias: str) -> ExistingAlias | None:
        """Return the record holding *alias*, if any."""
        wanted = _normalize(alias)
        with self._lock:
            for record in self._records.values():
                if _normalize(record.alias) == wanted:
                    return record
        return None

    def all(self) -> list[ExistingAlias]:
        with self._lock:
            return sorted(self._records.values(), key=lambda r: r.pid)

    # -- writes --------------------------------------------------------------

    def save(self, record: PathRecord, pid: int | None = None) -> ExistingAlias:
        """Insert or overwrite a record, refusing aliases owned by another source."""
        with self._lock:
            if self.alias_exists(record.alias, record.source, record.language):
                raise ActionableError.storage(
                    record.alias, f"already assigned to a source other than '{record.source}'"
                )
            saved = ExistingAlias(
                pid=pid if pid is not None else next(self._pids),
                source=record.source,
                alias=record.alias,
                language=record.language,
            )
            self._records[saved.pid] = saved
            return saved

    def persist(
        self,
        record: PathRecord,
        existing: ExistingAlias | None,
        operation: Operation,
    ) -> ExistingAlias | None:
        """Save *record* according to :attr:`update_action`.

        Returns the saved record, or ``None`` when nothing was written.
        """
        if record.source == record.alias:
            logger.info("Ignoring alias %r because it is the same as the internal path", record.alias)
            return None

        if existing is not None and existing.alias == record.alias:
            return None

        pid: int | None = None
        if existing is not None:
            if self.update_action == UpdateAction.NO_NEW:
                return None
            if self.update_action == UpdateAction.DELETE:
                pid = existing.pid

        saved = self.save(record, pid=pid)
        if existing is not None and pid is None:
            logger.info("Created new alias %r for %s, keeping %r", saved.alias, saved.source, existing.alias)
        elif existing is not None:
            logger.info("Replaced alias %r with %r for %s", existing.alias, saved.alias, saved.source)
        else:
            logger.info("Created new alias %r for %s", saved.alias, saved.source)
        return saved
