"""Collision resolution for generated aliases.

When a candidate alias already belongs to another source, numeric
suffixes are tried in order (``about-us-0``, ``about-us-1``, ...).  The
base is word-safe truncated first so that base plus suffix always fits
the maximum alias length.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pathalias.errors import ActionableError
from pathalias.text import clean_separators, truncate_words

if TYPE_CHECKING:
    from pathalias.contracts import AliasStorage, ConfigProvider

logger = logging.getLogger(__name__)

# Far beyond anything a real namespace needs; reaching it means the
# store keeps reporting collisions for every variant.
DEFAULT_MAX_ATTEMPTS = 10_000


@dataclass(frozen=True)
class SuffixPolicy:
    """Numbering of uniquified aliases.

    ``separator=None`` reuses the configured alias separator.
    """

    start: int = 0
    separator: str | None = None
    max_attempts: int = DEFAULT_MAX_ATTEMPTS


class AliasUniquifier:
    """Finds a variant of an alias that no other source holds.

    ``deadline`` is polled before each attempt; when it returns true the
    search is abandoned with an :class:`~pathalias.errors.ActionableError`.
    """

    def __init__(
        self,
        *,
        config: ConfigProvider,
        storage: AliasStorage,
        policy: SuffixPolicy | None = None,
    ) -> None:
        self._config = config
        self._storage = storage
        self._policy = policy or SuffixPolicy()

    @property
    def max_length(self) -> int:
        return min(
            int(self._config.get("settings.max_length", 100)),
            self._storage.get_max_alias_component_length(),
        )

    def is_reserved(self, alias: str, source: str, language: str) -> bool:
        return self._storage.alias_exists(alias, source, language)

    def uniquify(
        self,
        alias: str,
        source: str,
        language: str,
        *,
        deadline: Callable[[], bool] | None = None,
    ) -> str:
        """Return *alias* itself when free, otherwise the first free suffixed variant."""
        if not self.is_reserved(alias, source, language):
            return alias

        alias_separator = str(self._config.get("settings.separator", "-"))
        separator = self._policy.separator
        if separator is None:
            separator = alias_separator
        max_length = self.max_length

        attempts = 0
        number = self._policy.start
        while attempts < self._policy.max_attempts:
            if deadline is not None and deadline():
                raise ActionableError.uniquify(alias, attempts, "deadline expired")

            suffix = f"{separator}{number}"
            room = max_length - len(suffix)
            if room <= 0:
                raise ActionableError.uniquify(
                    alias, attempts, f"suffix '{suffix}' does not fit in {max_length} characters"
                )
            base = truncate_words(alias, room)
            if base != alias:
                base = clean_separators(base, alias_separator)
            candidate = f"{base}{suffix}"

            attempts += 1
            if not self.is_reserved(candidate, source, language):
                logger.debug("Alias %r taken, using %r after %d attempts", alias, candidate, attempts)
                return candidate
            number += 1

        raise ActionableError.uniquify(alias, attempts, "every candidate is already taken")
