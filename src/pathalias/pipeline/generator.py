"""Alias generator: orchestrates pattern → tokens → clean → uniquify → store.

The AliasGenerator is the single entry point for building an alias for
an item:

1. Resolve the most specific pattern and run the ``pattern`` hooks
2. Respect the update policy for items that already have an alias
3. Expand the pattern's tokens, cleaning every value
4. Clean the composed alias and run the ``alias`` hooks
5. Uniquify against the existing aliases
6. Return the alias, or hand it to the store

Every "nothing to do" outcome is an :class:`AliasResult` without an
alias, never an exception; collaborator failures propagate unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pathalias.cache import MemoryCacheBackend
from pathalias.cleaner import AliasCleaner, StringCleaner
from pathalias.config import SettingsConfigProvider
from pathalias.contracts import LANGUAGE_NOT_SPECIFIED, Operation, PathRecord, UpdateAction
from pathalias.hooks import HookRegistry
from pathalias.notifications import LoggingNotifier
from pathalias.patterns import PatternResolver
from pathalias.punctuation import PunctuationTable
from pathalias.storage import InMemoryAliasStorage
from pathalias.tokens import TokenSubstitutor
from pathalias.transliteration import UnidecodeTransliterator
from pathalias.uniquifier import AliasUniquifier, SuffixPolicy

if TYPE_CHECKING:
    from pathalias.config import Settings
    from pathalias.contracts import (
        AliasStorage,
        CacheBackend,
        ConfigProvider,
        ExistingAlias,
        NotificationSink,
        Transliterator,
    )
    from pathalias.punctuation import PunctuationEntry
    from pathalias.tokens import TokenResolver

logger = logging.getLogger(__name__)

# Reasons reported by AliasResult when no alias is produced.
NO_PATTERN = "no-pattern"
UPDATE_POLICY = "update-policy"
NO_TOKENS = "no-tokens"
EMPTY_ALIAS = "empty-alias"


@dataclass(frozen=True)
class AliasResult:
    """Outcome of :meth:`AliasGenerator.create_alias`.

    ``alias`` is ``None`` exactly when nothing was generated, in which
    case ``reason`` says why.  ``original_alias`` is the candidate before
    uniquification; ``persisted`` is whatever the store returned.
    """

    alias: str | None
    reason: str | None = None
    original_alias: str | None = None
    persisted: Any = None

    def __bool__(self) -> bool:
        return self.alias is not None

    @property
    def uniquified(self) -> bool:
        return self.alias is not None and self.alias != self.original_alias

    @classmethod
    def skipped(cls, reason: str) -> AliasResult:
        return cls(alias=None, reason=reason)


class AliasGenerator:
    """Builds path aliases for items from configured patterns.

    Usage::

        generator = AliasGenerator.from_settings(load_settings())
        result = generator.create_alias(
            "node", "insert", "node/1", {"node": {"title": "Hello, World!"}}, bundle="article"
        )
        result.alias  # 'hello-world'
    """

    def __init__(
        self,
        *,
        config: ConfigProvider,
        storage: AliasStorage,
        cache: CacheBackend | None = None,
        transliterator: Transliterator | None = None,
        token_resolver: TokenResolver | None = None,
        hooks: HookRegistry | None = None,
        notifier: NotificationSink | None = None,
        suffix_policy: SuffixPolicy | None = None,
        interface_language: str = "en",
    ) -> None:
        self._config = config
        self._storage = storage
        self.hooks = hooks or HookRegistry()
        self._notifier = notifier or LoggingNotifier(verbose=bool(config.get("settings.verbose", False)))
        self._cache = cache or MemoryCacheBackend()
        self._interface_language = interface_language

        self.punctuation = PunctuationTable(cache=self._cache, hooks=self.hooks)
        self.cleaner = StringCleaner(
            config=config,
            punctuation_table=self.punctuation,
            transliterator=transliterator or UnidecodeTransliterator(),
            storage=storage,
            interface_language=interface_language,
        )
        self.alias_cleaner = AliasCleaner(config=config, storage=storage)
        self.patterns = PatternResolver(config=config)
        self.tokens = TokenSubstitutor(resolver=token_resolver)
        self.uniquifier = AliasUniquifier(config=config, storage=storage, policy=suffix_policy)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        storage: AliasStorage | None = None,
        **kwargs: Any,
    ) -> AliasGenerator:
        """Wire a generator from validated settings, defaulting to the in-memory store."""
        if storage is None:
            storage = InMemoryAliasStorage(update_action=settings.alias.update_action)
        return cls(config=SettingsConfigProvider(settings), storage=storage, **kwargs)

    # -- independently callable operations -----------------------------------

    def clean_string(self, text: str | None, language: str | None = None) -> str:
        return self.cleaner.clean(text, language)

    def get_punctuation_characters(self, language: str | None = None) -> list[PunctuationEntry]:
        return self.punctuation.get(language or self._interface_language)

    def get_pattern_by_entity(
        self, entity_type: str, bundle: str = "", language: str = LANGUAGE_NOT_SPECIFIED
    ) -> str:
        return self.patterns.resolve(entity_type, bundle, language)

    def reset_caches(self) -> None:
        """Start a new configuration epoch: patterns and clean-string settings are rebuilt."""
        self.patterns.reset()
        self.cleaner.reset()
        logger.debug("Alias generator caches reset")

    # -- alias generation ----------------------------------------------------

    def create_alias(
        self,
        entity_type: str,
        operation: Operation | str,
        source: str,
        data: Mapping[str, Any],
        bundle: str = "",
        language: str = LANGUAGE_NOT_SPECIFIED,
        *,
        deadline: Callable[[], bool] | None = None,
    ) -> AliasResult:
        """Apply the pattern for *entity_type* / *bundle* to build an alias for *source*.

        Args:
            entity_type: Entity type of the item (``"node"``, ``"user"``, ...).
            operation: ``insert``, ``update``, ``bulkupdate`` or ``return``.
                ``return`` generates the alias without storing it.
            source: Internal path being aliased (``"node/1"``).
            data: Token data keyed by scope (``{"node": {...}}``).
            bundle: Bundle of the item; selects bundle-level patterns.
            language: Language of the alias; ``"und"`` when unspecified.
            deadline: Polled during uniquification; abort when it returns true.

        Raises:
            ActionableError (UNIQUIFY): if no free alias variant can be found.
        """
        op = Operation(operation)
        context: dict[str, Any] = {
            "entity_type": entity_type,
            "operation": op,
            "source": source,
            "data": data,
            "bundle": bundle,
            "language": language,
        }

        pattern = self.patterns.resolve(entity_type, bundle, language)
        pattern = self.hooks.apply("pattern", pattern, context)
        if not pattern:
            # An empty pattern must never wipe out an alias the item already has.
            logger.debug("No pattern for %s:%s:%s", entity_type, bundle, language)
            return AliasResult.skipped(NO_PATTERN)

        existing: ExistingAlias | None = None
        if op in (Operation.UPDATE, Operation.BULKUPDATE):
            existing = self._storage.find_existing(source, language)
            if existing is not None and self._update_action() == UpdateAction.NO_NEW:
                logger.debug("Keeping existing alias %r for %s", existing.alias, source)
                return AliasResult.skipped(UPDATE_POLICY)

        alias, substituted = self.tokens.expand(
            pattern,
            data,
            clean=lambda value: self.cleaner.clean(value, language),
            language=language,
        )
        if not substituted:
            return AliasResult.skipped(NO_TOKENS)

        alias = self.alias_cleaner.clean_alias(alias)
        alias = self.hooks.apply("alias", alias, {**context, "pattern": pattern})
        if not alias:
            return AliasResult.skipped(EMPTY_ALIAS)

        original_alias = alias
        alias = self.uniquifier.uniquify(alias, source, language, deadline=deadline)
        if alias != original_alias:
            self._notifier.notify(
                f"The automatically generated alias {original_alias} conflicted with an "
                f"existing alias. Alias changed to {alias}.",
                op,
            )

        if op == Operation.RETURN:
            return AliasResult(alias=alias, original_alias=original_alias)

        record = PathRecord(source=source, alias=alias, language=language)
        persisted = self._storage.persist(record, existing, op)
        return AliasResult(alias=alias, original_alias=original_alias, persisted=persisted)

    def _update_action(self) -> UpdateAction:
        return UpdateAction(int(self._config.get("settings.update_action", UpdateAction.DELETE)))
