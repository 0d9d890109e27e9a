"""Shared text-processing utilities.

Pure functions with no collaborator dependencies — safe to import from
any layer (cleaner, uniquifier, CLI).
"""

from __future__ import annotations

import html
import re

from bs4 import BeautifulSoup

# Anything that is not a letter, digit or combining mark ends a word.
_WORD_BOUNDARY = r"[\W_]"

_IGNORE_WORDS_EDGES = re.compile(r"^[,\s]+|[,\s]+$")
_IGNORE_WORDS_SPLIT = re.compile(r"[,\s]+")


def strip_tags(text: str) -> str:
    """Decode HTML entities, then drop every markup tag.

    Entities are decoded first so that encoded markup (``&lt;b&gt;``) is
    stripped as well.

    >>> strip_tags("<p>Fish &amp; <em>Chips</em></p>")
    'Fish & Chips'
    """
    decoded = html.unescape(text)
    if "<" not in decoded:
        return decoded
    return BeautifulSoup(decoded, "html.parser").get_text()


def clean_separators(text: str, separator: str) -> str:
    """Collapse repeated separators and trim them from both ends.

    Separators that touch a ``/`` are folded into the slash so path
    segments never start or end with a separator.

    >>> clean_separators("--hello---world-/-again-", "-")
    'hello-world/again'
    """
    if not separator:
        return text

    sep = re.escape(separator)
    output = re.sub(rf"^(?:{sep})+|(?:{sep})+$", "", text)
    output = re.sub(rf"(?:{sep})+", lambda _: separator, output)
    if separator != "/":
        output = re.sub(rf"(?:/|{sep})*(?:{sep}/|/{sep})(?:/|{sep})*", "/", output)
    return output


def truncate_words(text: str, max_length: int) -> str:
    """Shorten *text* to at most *max_length* characters on a word boundary.

    The cut happens before the last boundary character at or before index
    *max_length*, so a boundary right after the limit keeps the full
    prefix.  When no such boundary exists the text is hard-cut at the limit.

    >>> truncate_words("hello-world-again", 13)
    'hello-world'
    >>> truncate_words("hello-world-again", 11)
    'hello-world'
    >>> truncate_words("abcdefgh", 4)
    'abcd'
    """
    max_length = max(max_length, 0)
    if len(text) <= max_length:
        return text
    if max_length == 0:
        return ""

    match = re.match(rf"^(.{{1,{max_length}}}){_WORD_BOUNDARY}", text[: max_length + 1], flags=re.DOTALL)
    if match:
        return match.group(1)
    return text[:max_length]


def compile_ignore_words(words: str | list[str] | tuple[str, ...]) -> re.Pattern[str] | None:
    """Compile a stop-word list into one case-insensitive alternation.

    Accepts a comma/whitespace separated string or a sequence of words.
    Returns ``None`` when there is nothing to ignore.

    >>> compile_ignore_words("a, an ,the").sub("", "The cat")
    ' cat'
    """
    if not isinstance(words, str):
        words = ",".join(words)
    trimmed = _IGNORE_WORDS_EDGES.sub("", words)
    if not trimmed:
        return None
    alternation = "|".join(re.escape(word) for word in _IGNORE_WORDS_SPLIT.split(trimmed))
    return re.compile(rf"\b(?:{alternation})\b", flags=re.IGNORECASE)
