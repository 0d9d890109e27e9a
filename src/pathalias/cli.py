"""CLI command handlers for pathalias.

Each public ``handle_*`` function corresponds to a CLI subcommand and
encapsulates the wiring and output for that command.  Aliases are kept
in an in-memory store for the duration of one invocation; ``--existing``
seeds it so collisions can be reproduced from the shell.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from pathalias.config import DEFAULT_SETTINGS_PATH, Settings, load_settings
from pathalias.contracts import LANGUAGE_NOT_SPECIFIED, Operation, PathRecord
from pathalias.errors import ActionableError
from pathalias.logging import configure_file_logging, set_verbosity
from pathalias.pipeline import AliasGenerator
from pathalias.storage import InMemoryAliasStorage


def _load(args: argparse.Namespace) -> Settings:
    if args.settings is None and not DEFAULT_SETTINGS_PATH.exists():
        return Settings()
    return load_settings(args.settings or DEFAULT_SETTINGS_PATH)


def parse_assignments(pairs: list[str]) -> dict[str, Any]:
    """Turn ``node.title=Hello`` pairs into ``{"node": {"title": "Hello"}}``.

    Repeating a key collects the values into a list.
    """
    data: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ActionableError.parse(
                source="--set",
                raw_error=f"expected KEY=VALUE, got {pair!r}",
                suggestion="Pass token data as --set node.title='My title'",
            )
        *parents, leaf = key.strip().split(".")
        target = data
        for part in parents:
            target = target.setdefault(part, {})
        if leaf in target:
            current = target[leaf]
            target[leaf] = [*current, value] if isinstance(current, list) else [current, value]
        else:
            target[leaf] = value
    return data


def handle_clean(args: argparse.Namespace) -> None:
    """Clean a string the way token values are cleaned."""
    generator = AliasGenerator.from_settings(_load(args))
    print(generator.clean_string(args.text, args.language))


def handle_punctuation(args: argparse.Namespace) -> None:
    """List the punctuation catalog with the configured action for each entry."""
    settings = _load(args)
    generator = AliasGenerator.from_settings(settings)
    for entry in generator.get_punctuation_characters(args.language):
        action = settings.alias.punctuation.get(entry.name)
        action_name = action.name.lower() if action is not None else "remove"
        print(f"  {entry.name:<18} {entry.value!s:<3} {action_name:<8} {entry.label}")


def handle_pattern(args: argparse.Namespace) -> None:
    """Show which pattern applies to an entity type / bundle / language."""
    generator = AliasGenerator.from_settings(_load(args))
    pattern = generator.get_pattern_by_entity(args.entity_type, args.bundle, args.language)
    if not pattern:
        print(f"No pattern configured for {args.entity_type}:{args.bundle}:{args.language}")
        return
    print(pattern)


def handle_generate(args: argparse.Namespace) -> None:
    """Generate an alias for one item."""
    settings = _load(args)
    storage = InMemoryAliasStorage(update_action=settings.alias.update_action)
    for pair in args.existing:
        source, sep, alias = pair.partition("=")
        if not sep:
            raise ActionableError.parse(
                source="--existing",
                raw_error=f"expected SOURCE=ALIAS, got {pair!r}",
                suggestion="Pass existing aliases as --existing node/7=about-us",
            )
        storage.save(PathRecord(source=source, alias=alias, language=args.language))

    generator = AliasGenerator.from_settings(settings, storage=storage)
    result = generator.create_alias(
        args.entity_type,
        args.op,
        args.source,
        parse_assignments(args.set),
        bundle=args.bundle,
        language=args.language,
    )
    if not result:
        print(f"No alias generated ({result.reason})")
        return
    print(result.alias)
    if result.uniquified:
        print(f"  (changed from {result.original_alias} to avoid a collision)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pathalias",
        description="Generate clean, unique URL path aliases from token patterns",
    )
    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        metavar="PATH",
        help=f"Settings file (default: {DEFAULT_SETTINGS_PATH}, built-in defaults if absent)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Also write a timestamped run log under DIR",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # -- clean ---------------------------------------------------------------
    clean_p = sub.add_parser("clean", help="Clean a string into an alias component")
    clean_p.add_argument("text", type=str, help="Text to clean")
    clean_p.add_argument("--language", type=str, default=LANGUAGE_NOT_SPECIFIED)

    # -- punctuation ---------------------------------------------------------
    punct_p = sub.add_parser("punctuation", help="List punctuation characters and their actions")
    punct_p.add_argument("--language", type=str, default=None)

    # -- pattern -------------------------------------------------------------
    pattern_p = sub.add_parser("pattern", help="Show the pattern for an entity type")
    pattern_p.add_argument("entity_type", type=str, help="Entity type, e.g. node")
    pattern_p.add_argument("--bundle", type=str, default="")
    pattern_p.add_argument("--language", type=str, default=LANGUAGE_NOT_SPECIFIED)

    # -- generate ------------------------------------------------------------
    gen_p = sub.add_parser("generate", help="Generate an alias for one item")
    gen_p.add_argument("entity_type", type=str, help="Entity type, e.g. node")
    gen_p.add_argument("source", type=str, help="Internal path, e.g. node/1")
    gen_p.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Token data, e.g. --set node.title='Hello, World!' (repeatable)",
    )
    gen_p.add_argument(
        "--existing",
        action="append",
        default=[],
        metavar="SOURCE=ALIAS",
        help="Pre-existing alias to collide with (repeatable)",
    )
    gen_p.add_argument("--bundle", type=str, default="")
    gen_p.add_argument("--language", type=str, default=LANGUAGE_NOT_SPECIFIED)
    gen_p.add_argument(
        "--op",
        choices=[op.value for op in Operation],
        default=Operation.RETURN.value,
        help="Operation (default: return — print without storing)",
    )

    return parser


_HANDLERS = {
    "clean": handle_clean,
    "punctuation": handle_punctuation,
    "pattern": handle_pattern,
    "generate": handle_generate,
}


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbosity(args.verbose)
    if args.log_dir:
        configure_file_logging(args.log_dir, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        _HANDLERS[args.command](args)
    except ActionableError as exc:
        print(f"Error: {exc.error}", file=sys.stderr)
        if exc.suggestion:
            print(f"  Suggestion: {exc.suggestion}", file=sys.stderr)
        sys.exit(1)
