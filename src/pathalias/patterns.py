"""Pattern lookup by entity type, bundle and language."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from pathalias.contracts import LANGUAGE_NOT_SPECIFIED

if TYPE_CHECKING:
    from pathalias.contracts import ConfigProvider

logger = logging.getLogger(__name__)

DEFAULT_KEY = "_default"


class PatternResolver:
    """Selects the most specific configured pattern.

    Candidates, first non-blank wins:

    1. ``pattern.<type>.<bundle>.<language>`` (language is not ``und``)
    2. ``pattern.<type>.<bundle>._default`` (bundle is non-empty)
    3. ``pattern.<type>._default``

    The outcome, including the empty string ("generate nothing"), is cached
    per ``type:bundle:language`` until :meth:`reset`.
    """

    def __init__(self, *, config: ConfigProvider) -> None:
        self._config = config
        self._patterns: dict[str, str] = {}
        self._lock = threading.Lock()

    def resolve(
        self,
        entity_type: str,
        bundle: str = "",
        language: str = LANGUAGE_NOT_SPECIFIED,
    ) -> str:
        pattern_id = f"{entity_type}:{bundle}:{language}"
        with self._lock:
            if pattern_id in self._patterns:
                return self._patterns[pattern_id]

        variables: list[str] = []
        if language != LANGUAGE_NOT_SPECIFIED:
            variables.append(f"{entity_type}.{bundle}.{language}")
        if bundle:
            variables.append(f"{entity_type}.{bundle}.{DEFAULT_KEY}")
        variables.append(f"{entity_type}.{DEFAULT_KEY}")

        pattern = ""
        for variable in variables:
            pattern = str(self._config.get(f"pattern.{variable}", "") or "").strip()
            if pattern:
                logger.debug("Pattern for %s resolved from %s", pattern_id, variable)
                break

        with self._lock:
            self._patterns[pattern_id] = pattern
        return pattern

    def reset(self) -> None:
        with self._lock:
            self._patterns.clear()
