"""Punctuation catalog and per-character cleaning actions.

The catalog is a fixed, ordered list of punctuation characters.  Each one
is configured (``settings.punctuation.<name>``) to be removed, replaced by
the separator, or left alone.  The built catalog is stored in the cache
backend per language, after the ``punctuation`` hooks have had a chance
to add, drop or relabel entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathalias.contracts import CacheBackend
    from pathalias.hooks import HookRegistry

logger = logging.getLogger(__name__)

CACHE_PREFIX = "punctuation:"


class PunctuationAction(IntEnum):
    """How a punctuation character is treated by the cleaner."""

    REMOVE = 0
    REPLACE = 1
    NONE = 2


@dataclass(frozen=True)
class PunctuationEntry:
    """One catalog entry: stable ``name``, literal ``value``, display ``label``."""

    name: str
    value: str
    label: str


PUNCTUATION_CATALOG: tuple[PunctuationEntry, ...] = (
    PunctuationEntry("double_quotes", '"', "Double quotation marks"),
    PunctuationEntry("quotes", "'", "Single quotation marks (apostrophe)"),
    PunctuationEntry("backtick", "`", "Back tick"),
    PunctuationEntry("comma", ",", "Comma"),
    PunctuationEntry("period", ".", "Period"),
    PunctuationEntry("hyphen", "-", "Hyphen"),
    PunctuationEntry("underscore", "_", "Underscore"),
    PunctuationEntry("colon", ":", "Colon"),
    PunctuationEntry("semicolon", ";", "Semicolon"),
    PunctuationEntry("pipe", "|", "Vertical bar (pipe)"),
    PunctuationEntry("left_curly", "{", "Left curly bracket"),
    PunctuationEntry("left_square", "[", "Left square bracket"),
    PunctuationEntry("right_curly", "}", "Right curly bracket"),
    PunctuationEntry("right_square", "]", "Right square bracket"),
    PunctuationEntry("plus", "+", "Plus sign"),
    PunctuationEntry("equal", "=", "Equal sign"),
    PunctuationEntry("asterisk", "*", "Asterisk"),
    PunctuationEntry("ampersand", "&", "Ampersand"),
    PunctuationEntry("percent", "%", "Percent sign"),
    PunctuationEntry("caret", "^", "Caret"),
    PunctuationEntry("dollar", "$", "Dollar sign"),
    PunctuationEntry("hash", "#", "Number sign (pound sign, hash)"),
    PunctuationEntry("at", "@", "At sign"),
    PunctuationEntry("exclamation", "!", "Exclamation mark"),
    PunctuationEntry("tilde", "~", "Tilde"),
    PunctuationEntry("left_parenthesis", "(", "Left parenthesis"),
    PunctuationEntry("right_parenthesis", ")", "Right parenthesis"),
    PunctuationEntry("question_mark", "?", "Question mark"),
    PunctuationEntry("less_than", "<", "Less-than sign"),
    PunctuationEntry("greater_than", ">", "Greater-than sign"),
    PunctuationEntry("slash", "/", "Slash"),
    PunctuationEntry("back_slash", "\\", "Backslash"),
)

PUNCTUATION_NAMES = frozenset(entry.name for entry in PUNCTUATION_CATALOG)


def default_action(name: str) -> PunctuationAction:
    """Hyphens become the separator; everything else is removed."""
    return PunctuationAction.REPLACE if name == "hyphen" else PunctuationAction.REMOVE


class PunctuationTable:
    """Supplies the ordered punctuation catalog for a language.

    Usage::

        table = PunctuationTable(cache=MemoryCacheBackend(), hooks=HookRegistry())
        for entry in table.get("en"):
            print(entry.name, entry.value)
    """

    def __init__(self, *, cache: CacheBackend, hooks: HookRegistry | None = None) -> None:
        self._cache = cache
        self._hooks = hooks

    def get(self, language: str) -> list[PunctuationEntry]:
        """Return the catalog for *language*, building and caching it on a miss."""
        cid = CACHE_PREFIX + language
        cached = self._cache.get(cid)
        if cached is not None:
            return list(cached)

        catalog = list(PUNCTUATION_CATALOG)
        if self._hooks is not None:
            catalog = list(self._hooks.apply("punctuation", catalog, {"language": language}))
        self._cache.set(cid, tuple(catalog))
        logger.debug("Built punctuation catalog for %s (%d entries)", language, len(catalog))
        return catalog
