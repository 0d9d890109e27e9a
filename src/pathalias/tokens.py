"""Token expansion for alias patterns.

A pattern such as ``blog/[node:author:name]/[node:title]`` holds bracketed
tokens ``[scope:property]``.  :class:`TokenSubstitutor` resolves each one
through a :class:`TokenResolver`, cleans the value, and substitutes it in
a single pass.  Unresolved tokens become the empty string.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pathalias.contracts import LANGUAGE_NOT_SPECIFIED

logger = logging.getLogger(__name__)

Cleaner = Callable[[str], str]

TOKEN_PATTERN = re.compile(r"\[([^\s\[\]:]+):([^\[\]]+)\]")

# Looser match used only to blank out token syntax when detecting whether
# anything was substituted at all.
_TOKEN_SYNTAX = re.compile(r"\[[^\s\]:]*:[^\s\]]*\]")

# Values of these tokens are already paths; cleaning would destroy the slashes.
_PATH_TOKEN = re.compile(r"(path|alias|url|url-brief)$")


class TokenResolver(ABC):
    """Looks up the raw value of one token."""

    @abstractmethod
    def resolve(
        self,
        scope: str,
        name: str,
        data: Mapping[str, Any],
        *,
        language: str,
        clean: Cleaner,
    ) -> str | None:
        """Return the value for ``[scope:name]``, or ``None`` when unavailable.

        *clean* is the per-value cleaner; resolvers that build paths out of
        several values (``join-path``) clean each part themselves.
        """
        ...


class DataTokenResolver(TokenResolver):
    """Resolves tokens by walking plain data.

    ``[node:author:name]`` looks up ``data["node"]``, then ``author``, then
    ``name``, trying mapping keys first and attributes second, with
    ``-``/``_`` treated as interchangeable.  A trailing ``join-path`` turns
    a list into ``part1/part2/...`` with every part cleaned.
    """

    def resolve(
        self,
        scope: str,
        name: str,
        data: Mapping[str, Any],
        *,
        language: str,
        clean: Cleaner,
    ) -> str | None:
        if scope not in data:
            return None

        parts = name.split(":")
        join_path = parts[-1] == "join-path"
        if join_path:
            parts = parts[:-1]

        value: Any = data[scope]
        for part in parts:
            value = _lookup(value, part)
            if value is None:
                return None

        if join_path:
            items = value if isinstance(value, Sequence) and not isinstance(value, str) else [value]
            cleaned = [clean(str(item)) for item in items]
            return "/".join(part for part in cleaned if part)

        if isinstance(value, Sequence) and not isinstance(value, str):
            return ", ".join(str(item) for item in value)
        return str(value)


def _lookup(value: Any, key: str) -> Any:
    for candidate in dict.fromkeys((key, key.replace("-", "_"), key.replace("_", "-"))):
        if isinstance(value, Mapping):
            if candidate in value:
                return value[candidate]
        elif not isinstance(value, (str, int, float)) and hasattr(value, candidate):
            return getattr(value, candidate)
    return None


def strip_token_syntax(pattern: str) -> str:
    """Remove every token expression from *pattern*, resolving nothing."""
    return _TOKEN_SYNTAX.sub("", pattern)


class TokenSubstitutor:
    """Expands the tokens of a pattern against ``data``.

    Usage::

        substitutor = TokenSubstitutor(resolver=DataTokenResolver())
        alias, substituted = substitutor.expand(
            "[node:title]", {"node": {"title": "Hello"}}, clean=cleaner.clean
        )
    """

    def __init__(self, *, resolver: TokenResolver | None = None) -> None:
        self._resolver = resolver or DataTokenResolver()

    def expand(
        self,
        pattern: str,
        data: Mapping[str, Any],
        clean: Cleaner | None = None,
        language: str = LANGUAGE_NOT_SPECIFIED,
    ) -> tuple[str, bool]:
        """Return ``(expanded, any_substituted)``.

        ``any_substituted`` is false when the expansion equals the pattern
        with all token syntax blanked out, i.e. no token contributed text.
        """
        cleaner: Cleaner = clean or (lambda value: value)
        replacements: dict[str, str] = {}

        def _replace(match: re.Match[str]) -> str:
            token = match.group(0)
            if token not in replacements:
                replacements[token] = self._value(token, match.group(1), match.group(2), data, cleaner, language)
            return replacements[token]

        result = TOKEN_PATTERN.sub(_replace, pattern)
        substituted = result != strip_token_syntax(pattern)
        if not substituted:
            logger.debug("No token in %r produced a value", pattern)
        return result, substituted

    def _value(
        self,
        token: str,
        scope: str,
        name: str,
        data: Mapping[str, Any],
        clean: Cleaner,
        language: str,
    ) -> str:
        value = self._resolver.resolve(scope, name, data, language=language, clean=clean)
        if value is None:
            return ""
        if _PATH_TOKEN.search(name):
            return value
        return clean(value)
