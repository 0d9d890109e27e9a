"""Configuration loading and validation.

Loads ``settings.toml`` and validates all fields at startup, before any
alias is generated.  A bad separator or an out-of-range length discovered
halfway through a bulk update would leave half the site on the old
aliases and half on broken ones.

The validated config is exposed as a :class:`Settings` dataclass and
adapted to the :class:`~pathalias.contracts.ConfigProvider` interface by
:class:`SettingsConfigProvider`, which serves two dotted namespaces:

- ``settings.<name>`` — ``separator``, ``transliterate``, ``reduce_ascii``,
  ``case``, ``max_length``, ``max_component_length``, ``update_action``,
  ``ignore_words``, ``verbose`` and ``punctuation_<name>``
- ``pattern.<variable>`` — e.g. ``pattern.node.article.en`` or
  ``pattern.node._default``
"""

from __future__ import annotations

import tomllib
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from pathalias.contracts import ConfigProvider, UpdateAction
from pathalias.errors import ActionableError
from pathalias.punctuation import PUNCTUATION_NAMES, PunctuationAction, default_action

# Hard limit of the alias column in the reference store.
ALIAS_SCHEMA_MAX_LENGTH = 255

E = TypeVar("E", UpdateAction, PunctuationAction)

DEFAULT_IGNORE_WORDS = (
    "a, an, as, at, before, but, by, for, from, is, in, into, like, of, off, on, "
    "onto, per, since, than, the, this, that, to, up, via, with"
)

# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------


@dataclass
class AliasSettings:
    """Cleaning and update behaviour from ``[alias]``."""

    separator: str = "-"
    lowercase: bool = True
    transliterate: bool = True
    reduce_ascii: bool = False
    max_length: int = 100
    max_component_length: int = 100
    update_action: UpdateAction = UpdateAction.DELETE
    ignore_words: str = DEFAULT_IGNORE_WORDS
    verbose: bool = False
    punctuation: dict[str, PunctuationAction] = field(
        default_factory=lambda: {name: default_action(name) for name in sorted(PUNCTUATION_NAMES)}
    )


@dataclass
class Settings:
    """Top-level validated configuration."""

    alias: AliasSettings = field(default_factory=AliasSettings)
    patterns: dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Default settings path
# ---------------------------------------------------------------------------

DEFAULT_SETTINGS_PATH = Path("config/settings.toml")


# ---------------------------------------------------------------------------
# ConfigProvider adapter
# ---------------------------------------------------------------------------


class MappingConfigProvider(ConfigProvider):
    """Serves a plain ``{"settings.separator": "-", ...}`` mapping.

    The mapping is read live; callers that change it must call
    ``reset_caches()`` on the generator to start a new epoch.
    """

    def __init__(self, values: MutableMapping[str, Any] | None = None) -> None:
        self.values: MutableMapping[str, Any] = values if values is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)


class SettingsConfigProvider(MappingConfigProvider):
    """Serves a :class:`Settings` instance through dotted keys."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(_flatten_settings(settings))


def _flatten_settings(settings: Settings) -> dict[str, Any]:
    alias = settings.alias
    values: dict[str, Any] = {
        "settings.separator": alias.separator,
        "settings.case": alias.lowercase,
        "settings.transliterate": alias.transliterate,
        "settings.reduce_ascii": alias.reduce_ascii,
        "settings.max_length": alias.max_length,
        "settings.max_component_length": alias.max_component_length,
        "settings.update_action": alias.update_action,
        "settings.ignore_words": alias.ignore_words,
        "settings.verbose": alias.verbose,
    }
    for name, action in alias.punctuation.items():
        values[f"settings.punctuation_{name}"] = action
    for variable, pattern in settings.patterns.items():
        values[f"pattern.{variable}"] = pattern
    return values


# ---------------------------------------------------------------------------
# Loading and validation
# ---------------------------------------------------------------------------


def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Settings:
    """Load and validate settings from a TOML file.

    Raises :class:`~pathalias.errors.ActionableError`:
      - CONFIG if the file is missing or a section has the wrong shape
      - VALIDATION if field values are out of range
      - PARSE if the TOML is malformed

    Returns a fully validated :class:`Settings` instance.
    """
    filepath = Path(path)
    if not filepath.exists():
        raise ActionableError.config(
            field_name="settings_path",
            reason=f"Settings file not found: {filepath}",
            suggestion=f"Create {filepath} or copy from config/settings.toml",
        )

    raw_text = filepath.read_text(encoding="utf-8")
    try:
        data = tomllib.loads(raw_text)
    except tomllib.TOMLDecodeError as exc:
        raise ActionableError.parse(
            source=str(filepath),
            raw_error=str(exc),
            suggestion=f"Fix TOML syntax in {filepath}",
        ) from None

    return parse_settings(data)


def parse_settings(data: dict[str, Any]) -> Settings:
    """Validate raw TOML data and return a Settings instance."""

    # -- alias section -------------------------------------------------------
    alias_data = _optional_section(data, "alias")
    defaults = AliasSettings()

    separator = str(alias_data.get("separator", defaults.separator))
    if not separator:
        raise ActionableError.validation(
            field_name="alias.separator",
            reason="must not be empty",
            suggestion='Set [alias].separator to a single character such as "-"',
        )

    lengths: dict[str, int] = {}
    for name in ("max_length", "max_component_length"):
        value = alias_data.get(name, getattr(defaults, name))
        if isinstance(value, bool) or not isinstance(value, int):
            raise ActionableError.validation(
                field_name=f"alias.{name}",
                reason=f"is {value!r} — must be an integer",
            )
        if not 1 <= value <= ALIAS_SCHEMA_MAX_LENGTH:
            raise ActionableError.validation(
                field_name=f"alias.{name}",
                reason=f"is {value} — must be between 1 and {ALIAS_SCHEMA_MAX_LENGTH}",
                suggestion=f"Set [alias].{name} to a value between 1 and {ALIAS_SCHEMA_MAX_LENGTH}",
            )
        lengths[name] = value

    update_action = _parse_enum(
        UpdateAction, alias_data.get("update_action", defaults.update_action), "alias.update_action"
    )

    ignore_words = alias_data.get("ignore_words", defaults.ignore_words)
    if isinstance(ignore_words, list):
        ignore_words = ", ".join(str(word) for word in ignore_words)

    # -- alias.punctuation ---------------------------------------------------
    punctuation = dict(defaults.punctuation)
    punctuation_data = _optional_section(alias_data, "punctuation", parent="alias")
    for name, raw_action in punctuation_data.items():
        if name not in PUNCTUATION_NAMES:
            raise ActionableError.config(
                field_name=f"alias.punctuation.{name}",
                reason=f"'{name}' is not a known punctuation character name",
                suggestion=f"Use one of: {', '.join(sorted(PUNCTUATION_NAMES))}",
            )
        punctuation[name] = _parse_enum(
            PunctuationAction, raw_action, f"alias.punctuation.{name}"
        )

    alias = AliasSettings(
        separator=separator,
        lowercase=bool(alias_data.get("lowercase", defaults.lowercase)),
        transliterate=bool(alias_data.get("transliterate", defaults.transliterate)),
        reduce_ascii=bool(alias_data.get("reduce_ascii", defaults.reduce_ascii)),
        max_length=lengths["max_length"],
        max_component_length=lengths["max_component_length"],
        update_action=update_action,
        ignore_words=str(ignore_words),
        verbose=bool(alias_data.get("verbose", defaults.verbose)),
        punctuation=punctuation,
    )

    # -- patterns section ----------------------------------------------------
    patterns: dict[str, str] = {}
    _flatten_patterns(_optional_section(data, "patterns"), "", patterns)

    return Settings(alias=alias, patterns=patterns)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _optional_section(data: dict[str, Any], name: str, *, parent: str = "") -> dict[str, Any]:
    """Return an optional table, ``{}`` when absent, or raise CONFIG error."""
    section = data.get(name, {})
    if not isinstance(section, dict):
        qualified = f"{parent}.{name}" if parent else name
        raise ActionableError.config(
            field_name=qualified,
            reason=f"[{qualified}] must be a table, not {type(section).__name__}",
            suggestion=f"Define [{qualified}] as a TOML table",
        )
    return section


def _parse_enum(enum_cls: type[E], raw: object, field_name: str) -> E:
    """Accept either the enum member name (case-insensitive) or its integer value."""
    if isinstance(raw, enum_cls):
        return raw
    if isinstance(raw, str):
        try:
            return enum_cls[raw.strip().upper()]
        except KeyError:
            pass
    elif isinstance(raw, int) and not isinstance(raw, bool):
        try:
            return enum_cls(raw)
        except ValueError:
            pass
    choices = ", ".join(member.name.lower() for member in enum_cls)
    raise ActionableError.validation(
        field_name=field_name,
        reason=f"{raw!r} is not one of: {choices}",
        suggestion=f"Set {field_name} to one of: {choices}",
    )


def _flatten_patterns(table: dict[str, Any], prefix: str, out: dict[str, str]) -> None:
    """Turn nested ``[patterns.node.article]`` tables into ``node.article.<key>`` variables."""
    for key, value in table.items():
        variable = f"{prefix}{key}"
        if isinstance(value, dict):
            _flatten_patterns(value, f"{variable}.", out)
        elif isinstance(value, str):
            out[variable] = value
        else:
            raise ActionableError.validation(
                field_name=f"patterns.{variable}",
                reason=f"must be a string, not {type(value).__name__}",
                suggestion=f'Quote the pattern: "{value}"',
            )
