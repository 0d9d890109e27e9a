"""String cleaning for alias components and whole aliases.

:class:`StringCleaner` turns an arbitrary text fragment (usually a token
value such as a title) into a URL-safe component.  The steps run in a
fixed order:

1. Decode entities and strip markup tags.
2. Transliterate (optional).
3. Replace or drop punctuation according to the per-character action.
4. Reduce to ``[A-Za-z0-9/]`` runs joined by the separator (optional).
5. Remove stop words, unless that would leave nothing behind.
6. Turn whitespace runs into the separator.
7. Collapse duplicate separators and trim them from both ends.
8. Lowercase (optional).
9. Truncate on a word boundary to the maximum component length.

Everything derived from configuration is gathered into an immutable
:class:`CleanStringConfig` snapshot, built once per configuration epoch
under a lock.  Cleaned values are memoized per ``(language, text)``
inside that epoch, so a repeated call returns the stored result without
touching the transliterator or re-running the steps.
:meth:`StringCleaner.reset` starts a new epoch.

:class:`AliasCleaner` is the final pass over a fully composed alias
(separators, slashes, overall length).
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pathalias.contracts import LANGUAGE_NOT_SPECIFIED
from pathalias.punctuation import PunctuationAction, default_action
from pathalias.text import clean_separators, compile_ignore_words, strip_tags, truncate_words

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pathalias.contracts import AliasStorage, ConfigProvider, Transliterator
    from pathalias.punctuation import PunctuationTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanStringConfig:
    """Configuration-derived inputs to :meth:`StringCleaner.clean`."""

    separator: str
    transliterate: bool
    reduce_ascii: bool
    lowercase: bool
    max_length: int
    ignore_words: re.Pattern[str] | None
    punctuation: Mapping[str, str]
    punctuation_regex: re.Pattern[str] | None

    def replace_punctuation(self, text: str) -> str:
        """Apply every punctuation replacement in a single pass."""
        if self.punctuation_regex is None:
            return text
        return self.punctuation_regex.sub(lambda m: self.punctuation[m.group(0)], text)


@dataclass
class _CleanState:
    """One epoch: the config snapshot plus the results computed against it."""

    epoch: int
    config: CleanStringConfig
    strings: dict[tuple[str, str], str] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0


@dataclass(frozen=True)
class CacheInfo:
    """Memo table statistics for the current epoch."""

    epoch: int
    hits: int
    misses: int
    size: int


def build_clean_string_config(
    config: ConfigProvider,
    punctuation_table: PunctuationTable,
    storage_max_length: int,
    language: str,
) -> CleanStringConfig:
    """Read the ``settings.*`` namespace into a :class:`CleanStringConfig`."""
    separator = str(config.get("settings.separator", "-"))

    punctuation: dict[str, str] = {}
    for entry in punctuation_table.get(language):
        action = config.get(f"settings.punctuation_{entry.name}", default_action(entry.name))
        if action == PunctuationAction.REMOVE:
            punctuation[entry.value] = ""
        elif action == PunctuationAction.REPLACE:
            punctuation[entry.value] = separator
        # PunctuationAction.NONE: leave the character alone.

    punctuation_regex = None
    if punctuation:
        keys = sorted(punctuation, key=len, reverse=True)
        punctuation_regex = re.compile("|".join(re.escape(key) for key in keys))

    return CleanStringConfig(
        separator=separator,
        transliterate=bool(config.get("settings.transliterate", True)),
        reduce_ascii=bool(config.get("settings.reduce_ascii", False)),
        lowercase=bool(config.get("settings.case", True)),
        max_length=min(int(config.get("settings.max_component_length", 100)), storage_max_length),
        ignore_words=compile_ignore_words(str(config.get("settings.ignore_words", "") or "")),
        punctuation=punctuation,
        punctuation_regex=punctuation_regex,
    )


class StringCleaner:
    """Cleans text fragments into alias components.

    Usage::

        cleaner = StringCleaner(
            config=provider,
            punctuation_table=table,
            transliterator=UnidecodeTransliterator(),
            storage=store,
        )
        cleaner.clean("Hello, World!")  # 'hello-world'
    """

    def __init__(
        self,
        *,
        config: ConfigProvider,
        punctuation_table: PunctuationTable,
        transliterator: Transliterator,
        storage: AliasStorage,
        interface_language: str = "en",
    ) -> None:
        self._config = config
        self._punctuation_table = punctuation_table
        self._transliterator = transliterator
        self._storage = storage
        self._interface_language = interface_language
        self._lock = threading.RLock()
        self._epoch = 0
        self._state: _CleanState | None = None

    # -- snapshot management -------------------------------------------------

    @property
    def settings(self) -> CleanStringConfig:
        """The configuration snapshot for the current epoch."""
        return self._current_state().config

    def _current_state(self) -> _CleanState:
        state = self._state
        if state is None:
            with self._lock:
                if self._state is None:
                    self._state = _CleanState(
                        epoch=self._epoch,
                        config=build_clean_string_config(
                            self._config,
                            self._punctuation_table,
                            self._storage.get_max_alias_component_length(),
                            self._interface_language,
                        ),
                    )
                    logger.debug("Built clean-string settings for epoch %d", self._epoch)
                state = self._state
        return state

    def reset(self) -> None:
        """Drop the snapshot and memo table; the next call rebuilds them."""
        with self._lock:
            self._epoch += 1
            self._state = None
        logger.debug("Clean-string caches reset (epoch %d)", self._epoch)

    def cache_info(self) -> CacheInfo:
        state = self._current_state()
        with self._lock:
            return CacheInfo(
                epoch=state.epoch, hits=state.hits, misses=state.misses, size=len(state.strings)
            )

    # -- cleaning ------------------------------------------------------------

    def clean(self, text: str | None, language: str | None = None) -> str:
        """Clean *text* into an alias component.

        *language* partitions the memo table and is handed to the
        transliterator; it does not otherwise change the result.
        """
        if text is None or text == "":
            return ""

        state = self._current_state()
        key = (language or LANGUAGE_NOT_SPECIFIED, text)
        with self._lock:
            if key in state.strings:
                state.hits += 1
                return state.strings[key]

        output = self._run_pipeline(text, state.config, language)

        with self._lock:
            state.misses += 1
            state.strings[key] = output
        return output

    def _run_pipeline(self, text: str, cfg: CleanStringConfig, language: str | None) -> str:
        sep = cfg.separator

        output = strip_tags(text)

        if cfg.transliterate:
            # With ASCII reduction on, unknown characters would be dropped anyway.
            unknown = "" if cfg.reduce_ascii else "?"
            output = self._transliterator.transliterate(output, unknown, language)

        output = cfg.replace_punctuation(output)

        if cfg.reduce_ascii:
            output = re.sub(r"[^a-zA-Z0-9/]+", lambda _: sep, output)

        if cfg.ignore_words is not None:
            words_removed = cfg.ignore_words.sub("", output)
            if words_removed.strip().strip(sep).strip():
                output = words_removed

        output = re.sub(r"\s+", lambda _: sep, output)

        output = clean_separators(clean_separators(output, sep), sep)

        if cfg.lowercase:
            output = output.lower()

        truncated = truncate_words(output, cfg.max_length)
        if truncated != output:
            output = clean_separators(truncated, sep)
        return output


class AliasCleaner:
    """Final clean-up of a composed alias.

    Token values are cleaned one by one; joining them with the literal
    parts of a pattern can still produce ``value1/-/value2`` or an alias
    longer than the store allows.
    """

    def __init__(self, *, config: ConfigProvider, storage: AliasStorage) -> None:
        self._config = config
        self._storage = storage

    @property
    def max_length(self) -> int:
        return min(
            int(self._config.get("settings.max_length", 100)),
            self._storage.get_max_alias_component_length(),
        )

    def clean_alias(self, alias: str) -> str:
        separator = str(self._config.get("settings.separator", "-"))
        # Separators first: "a/-/b" must not end up as "a//b".
        output = clean_separators(alias, separator)
        output = clean_separators(output, "/")
        output = truncate_words(output, self.max_length)
        return clean_separators(output, separator)
