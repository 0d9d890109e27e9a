"""Global test configuration — shared fixtures and factories.

This conftest provides:

1. **Config factories** — ``make_settings`` builds a :class:`Settings`
   with overridden ``[alias]`` fields, punctuation actions and patterns;
   ``make_provider`` wraps one in a :class:`SettingsConfigProvider`.

2. **Collaborator fixtures** — a real in-memory ``storage``, a
   ``spy_transliterator`` (real ``unidecode`` behaviour, call-counted) and a
   ``notifier`` mock.

3. **Component factories** — ``make_cleaner`` and ``make_generator`` wire
   real components together; only the collaborators a test wants to
   observe are spies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

import pytest

from pathalias.cache import MemoryCacheBackend
from pathalias.cleaner import StringCleaner
from pathalias.config import AliasSettings, Settings, SettingsConfigProvider
from pathalias.contracts import NotificationSink, Transliterator
from pathalias.pipeline import AliasGenerator
from pathalias.punctuation import PunctuationAction, PunctuationTable
from pathalias.storage import InMemoryAliasStorage
from pathalias.transliteration import UnidecodeTransliterator

if TYPE_CHECKING:
    from collections.abc import Callable

    from pathalias.contracts import AliasStorage, ConfigProvider


# ---------------------------------------------------------------------------
# Config factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Factory for :class:`Settings` with selective overrides.

    ``punctuation`` entries are merged over the defaults rather than
    replacing them.
    """

    def _factory(
        *,
        patterns: dict[str, str] | None = None,
        punctuation: dict[str, PunctuationAction] | None = None,
        **alias_overrides: Any,
    ) -> Settings:
        alias = AliasSettings(**alias_overrides)
        if punctuation:
            alias.punctuation.update(punctuation)
        return Settings(alias=alias, patterns=dict(patterns or {}))

    return _factory


@pytest.fixture
def make_provider(make_settings: Callable[..., Settings]) -> Callable[..., SettingsConfigProvider]:
    def _factory(**kwargs: Any) -> SettingsConfigProvider:
        return SettingsConfigProvider(make_settings(**kwargs))

    return _factory


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def storage() -> InMemoryAliasStorage:
    return InMemoryAliasStorage()


@pytest.fixture
def spy_transliterator() -> MagicMock:
    """Transliterator spy that delegates to the real ``unidecode`` implementation."""
    return MagicMock(spec=Transliterator, wraps=UnidecodeTransliterator())


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock(spec=NotificationSink)


# ---------------------------------------------------------------------------
# Component factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_cleaner(
    make_provider: Callable[..., SettingsConfigProvider],
    storage: InMemoryAliasStorage,
) -> Callable[..., StringCleaner]:
    """Factory for a :class:`StringCleaner` over real collaborators.

    Pass ``config=`` to use a specific provider, ``transliterator=`` to
    observe transliteration; remaining kwargs go to ``make_provider``.
    """

    def _factory(
        *,
        config: ConfigProvider | None = None,
        transliterator: Transliterator | None = None,
        alias_storage: AliasStorage | None = None,
        punctuation_table: PunctuationTable | None = None,
        **provider_kwargs: Any,
    ) -> StringCleaner:
        return StringCleaner(
            config=config or make_provider(**provider_kwargs),
            punctuation_table=punctuation_table or PunctuationTable(cache=MemoryCacheBackend()),
            transliterator=transliterator or UnidecodeTransliterator(),
            storage=alias_storage or storage,
        )

    return _factory


@pytest.fixture
def make_generator(
    make_settings: Callable[..., Settings],
    storage: InMemoryAliasStorage,
    notifier: MagicMock,
) -> Callable[..., AliasGenerator]:
    """Factory for an :class:`AliasGenerator` wired to the shared ``storage`` and ``notifier``."""

    def _factory(
        *,
        config: ConfigProvider | None = None,
        alias_storage: AliasStorage | None = None,
        generator_kwargs: dict[str, Any] | None = None,
        **settings_kwargs: Any,
    ) -> AliasGenerator:
        settings = make_settings(**settings_kwargs)
        chosen_storage = alias_storage or storage
        if isinstance(chosen_storage, InMemoryAliasStorage):
            chosen_storage.update_action = settings.alias.update_action
        return AliasGenerator(
            config=config or SettingsConfigProvider(settings),
            storage=chosen_storage,
            notifier=notifier,
            **(generator_kwargs or {}),
        )

    return _factory
