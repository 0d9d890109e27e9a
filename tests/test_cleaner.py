"""String cleaner tests.

Covers: TestCleaningPipeline, TestStopWords, TestCleanedStringProperties,
TestCleanStringMemoization, TestAliasCleaner
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import pytest

from pathalias.cache import MemoryCacheBackend
from pathalias.cleaner import AliasCleaner
from pathalias.hooks import HookRegistry
from pathalias.punctuation import PunctuationAction, PunctuationEntry, PunctuationTable
from pathalias.storage import InMemoryAliasStorage

if TYPE_CHECKING:
    from collections.abc import Callable
    from unittest.mock import MagicMock

    from pathalias.cleaner import StringCleaner
    from pathalias.config import SettingsConfigProvider

SAMPLES = [
    "Hello, World!",
    "  --Hello--  --World--  ",
    "The Quick Brown Fox",
    "The",
    "A tale of two cities",
    "<h1>Breaking &amp; Entering</h1>",
    "Crème Brûlée Recipes",
    "snake_case and CamelCase",
    "What?! Really... (yes)",
    "Tokyo 東京",
    "x" * 300,
    "word " * 60,
]


class TestCleaningPipeline:
    """REQUIREMENT: Token values are turned into URL-safe alias components.

    WHO: The token substitutor, for every value it inserts into an alias
    WHAT: Tags are stripped; text is transliterated when enabled; punctuation
          is removed or replaced per character; ASCII reduction collapses
          everything outside [A-Za-z0-9/]; whitespace becomes the separator;
          case is folded when enabled
    WHY: A single uncleaned character ("?" or "#") in an alias breaks the URL
    """

    def test_title_with_punctuation_becomes_lowercase_slug(
        self, make_cleaner: Callable[..., StringCleaner]
    ) -> None:
        """Commas and exclamation marks are removed and words joined by the separator."""
        result = make_cleaner().clean("Hello, World!")

        assert result == "hello-world", f"Expected 'hello-world', got {result!r}"

    def test_markup_is_stripped_before_cleaning(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        """HTML tags and entities in a value never leak into the alias."""
        result = make_cleaner().clean("<h1>Breaking &amp; Entering</h1>")

        assert result == "breaking-entering", f"Expected tags and '&' gone, got {result!r}"

    def test_transliteration_converts_accented_letters(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        """With transliteration on, accented characters become their ASCII base letters."""
        result = make_cleaner().clean("Crème Brûlée")

        assert result == "creme-brulee", f"Expected transliterated text, got {result!r}"

    def test_transliteration_off_keeps_unicode(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        """With transliteration off, non-ASCII letters survive (lowercased)."""
        result = make_cleaner(transliterate=False).clean("Crème Brûlée")

        assert result == "crème-brûlée", f"Expected unicode preserved, got {result!r}"

    def test_unknown_character_placeholder_is_question_mark_without_ascii_reduction(
        self, make_cleaner: Callable[..., StringCleaner], spy_transliterator: MagicMock
    ) -> None:
        """Unmappable characters are marked with '?' so they can be seen (and then dropped as punctuation)."""
        make_cleaner(transliterator=spy_transliterator).clean("Café", "fr")

        spy_transliterator.transliterate.assert_called_once_with("Café", "?", "fr")

    def test_unknown_character_placeholder_is_empty_with_ascii_reduction(
        self, make_cleaner: Callable[..., StringCleaner], spy_transliterator: MagicMock
    ) -> None:
        """With ASCII reduction on there is no point marking unknown characters, so they vanish."""
        make_cleaner(transliterator=spy_transliterator, reduce_ascii=True).clean("Café", "fr")

        spy_transliterator.transliterate.assert_called_once_with("Café", "", "fr")

    def test_transliteration_disabled_never_calls_transliterator(
        self, make_cleaner: Callable[..., StringCleaner], spy_transliterator: MagicMock
    ) -> None:
        make_cleaner(transliterator=spy_transliterator, transliterate=False).clean("Café")

        spy_transliterator.transliterate.assert_not_called()

    def test_reduce_ascii_replaces_non_alphanumeric_runs(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        """ASCII reduction collapses anything outside [A-Za-z0-9/] into a single separator."""
        cleaner = make_cleaner(transliterate=False, reduce_ascii=True)

        result = cleaner.clean("Tokyo 東京 guide")

        assert result == "tokyo-guide", f"Expected non-ASCII collapsed, got {result!r}"

    def test_reduce_ascii_keeps_slashes(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        cleaner = make_cleaner(reduce_ascii=True, punctuation={"slash": PunctuationAction.NONE})

        result = cleaner.clean("2024/05 report")

        assert result == "2024/05-report", f"Expected slash kept, got {result!r}"

    def test_punctuation_replace_action_inserts_separator(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        cleaner = make_cleaner(punctuation={"underscore": PunctuationAction.REPLACE})

        assert cleaner.clean("snake_case") == "snake-case"

    def test_punctuation_remove_action_drops_character(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        cleaner = make_cleaner(punctuation={"underscore": PunctuationAction.REMOVE})

        assert cleaner.clean("snake_case") == "snakecase"

    def test_punctuation_none_action_leaves_character(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        cleaner = make_cleaner(punctuation={"period": PunctuationAction.NONE})

        assert cleaner.clean("Release v1.2") == "release-v1.2"

    def test_punctuation_replacement_is_a_single_pass(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        """A replacement is never re-scanned: with "_" as separator, hyphens become "_" and stay."""
        cleaner = make_cleaner(
            separator="_",
            punctuation={"hyphen": PunctuationAction.REPLACE, "underscore": PunctuationAction.REMOVE},
        )

        result = cleaner.clean("well-known")

        assert result == "well_known", f"Replacement separator was removed again: {result!r}"

    def test_lowercase_off_preserves_case(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        assert make_cleaner(lowercase=False).clean("Hello World") == "Hello-World"

    def test_lowercase_folds_non_ascii(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        assert make_cleaner(transliterate=False).clean("ÉCOLE") == "école"

    def test_punctuation_hook_entries_are_cleaned(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        """Characters added to the catalog by a hook get the default (remove) action."""
        hooks = HookRegistry()
        hooks.register("punctuation", lambda catalog, _ctx: [*catalog, PunctuationEntry("section", "§", "Section")])
        table = PunctuationTable(cache=MemoryCacheBackend(), hooks=hooks)

        result = make_cleaner(punctuation_table=table, transliterate=False).clean("§5 Rules")

        assert result == "5-rules", f"Expected hook-added '§' removed, got {result!r}"

    def test_empty_and_none_input_return_empty_string(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        cleaner = make_cleaner()

        assert cleaner.clean("") == ""
        assert cleaner.clean(None) == ""
        assert cleaner.cache_info().misses == 0, "Empty input must bypass the memo table"


class TestStopWords:
    """REQUIREMENT: Stop words are dropped unless nothing would be left.

    WHO: Editors whose titles start with "The", "A", ...
    WHAT: Configured words are removed as whole words, case-insensitively;
          if removal leaves only whitespace or separators the original text
          is kept
    WHY: "The Who" should alias to "who", but "The" alone must not produce
         an empty alias
    """

    def test_stop_words_are_removed(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        result = make_cleaner().clean("The Quick Brown Fox")

        assert result == "quick-brown-fox", f"Expected 'The' removed, got {result!r}"

    def test_multiple_stop_words_are_removed_in_one_pass(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        assert make_cleaner().clean("A tale of two cities") == "tale-two-cities"

    def test_words_containing_a_stop_word_are_kept(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        assert make_cleaner().clean("Theory Ingredients") == "theory-ingredients"

    def test_removal_that_empties_the_string_is_discarded(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        """Only stop words: the text is kept as if removal had been skipped."""
        cleaner = make_cleaner()
        without_stop_words = make_cleaner(ignore_words="")

        for text in ("The", "the of", "A, The"):
            assert cleaner.clean(text) == without_stop_words.clean(text), f"{text!r} was annihilated"
            assert cleaner.clean(text) != "", f"{text!r} produced an empty string"

    def test_separator_leftovers_count_as_empty(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        """After ASCII reduction "The - A" is "The-A"; removing both words leaves only "-", which is empty."""
        cleaner = make_cleaner(reduce_ascii=True)

        result = cleaner.clean("The - A")

        assert result == "the-a", f"Expected stop words kept, got {result!r}"

    def test_empty_ignore_list_disables_the_step(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        assert make_cleaner(ignore_words="").clean("The Fox") == "the-fox"


class TestCleanedStringProperties:
    """REQUIREMENT: Every cleaned string is bounded, well-formed and stable.

    WHO: Every consumer of cleaned values (aliases, uniquifier)
    WHAT: Output never exceeds the maximum component length (the smaller of
          the configured value and the store limit); never starts, ends with
          or doubles the separator; cleaning twice equals cleaning once
    WHY: Aliases that change on re-save, or that the store truncates on its
         own, cause broken links
    """

    @pytest.mark.parametrize("text", SAMPLES)
    def test_clean_is_idempotent(self, make_cleaner: Callable[..., StringCleaner], text: str) -> None:
        cleaner = make_cleaner()
        once = cleaner.clean(text)

        assert cleaner.clean(once) == once, f"Second clean changed {once!r}"

    @pytest.mark.parametrize("text", SAMPLES)
    def test_length_never_exceeds_max_component_length(
        self, make_cleaner: Callable[..., StringCleaner], text: str
    ) -> None:
        cleaner = make_cleaner(max_component_length=12)

        assert len(cleaner.clean(text)) <= 12

    @pytest.mark.parametrize("text", SAMPLES)
    def test_separator_is_never_doubled_or_at_the_edges(
        self, make_cleaner: Callable[..., StringCleaner], text: str
    ) -> None:
        result = make_cleaner(max_component_length=20).clean(text)

        assert "--" not in result, f"Doubled separator in {result!r}"
        assert not result.startswith("-"), f"Leading separator in {result!r}"
        assert not result.endswith("-"), f"Trailing separator in {result!r}"

    def test_truncation_prefers_word_boundary(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        result = make_cleaner(max_component_length=10).clean("Hello wonderful world")

        assert result == "hello", f"Expected cut at word boundary, got {result!r}"

    def test_truncation_hard_cuts_single_long_word(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        result = make_cleaner(max_component_length=10).clean("abcdefghijklmno")

        assert result == "abcdefghij", f"Expected hard cut, got {result!r}"

    def test_store_limit_caps_configured_length(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        """The store's schema limit wins when it is smaller than the configured length."""
        cleaner = make_cleaner(alias_storage=InMemoryAliasStorage(max_length=5), max_component_length=100)

        assert cleaner.settings.max_length == 5
        assert cleaner.clean("abcdefgh") == "abcde"


class TestCleanStringMemoization:
    """REQUIREMENT: Repeated cleaning within an epoch returns the memoized result.

    WHO: Bulk updates that clean the same author names and terms thousands
         of times
    WHAT: A second call with the same (text, language) is a cache hit that
          does not re-run the pipeline; a different language is a separate
          entry; reset() starts a new epoch with a rebuilt configuration
    WHY: Results must be identical for identical inputs, and configuration
         changes must only take effect after an explicit reset
    """

    def test_repeat_call_is_a_cache_hit(
        self, make_cleaner: Callable[..., StringCleaner], spy_transliterator: MagicMock
    ) -> None:
        cleaner = make_cleaner(transliterator=spy_transliterator)

        first = cleaner.clean("Crème Brûlée", "fr")
        second = cleaner.clean("Crème Brûlée", "fr")

        assert first == second == "creme-brulee"
        assert spy_transliterator.transliterate.call_count == 1, "Pipeline re-ran on a cache hit"
        info = cleaner.cache_info()
        assert (info.hits, info.misses, info.size) == (1, 1, 1)

    def test_language_partitions_the_memo_table(
        self, make_cleaner: Callable[..., StringCleaner], spy_transliterator: MagicMock
    ) -> None:
        cleaner = make_cleaner(transliterator=spy_transliterator)

        cleaner.clean("Crème", "fr")
        cleaner.clean("Crème", "de")

        assert spy_transliterator.transliterate.call_count == 2
        assert cleaner.cache_info().size == 2

    def test_config_changes_apply_only_after_reset(
        self, make_cleaner: Callable[..., StringCleaner], make_provider: Callable[..., SettingsConfigProvider]
    ) -> None:
        """The snapshot is stable for the epoch; reset() picks up the new values."""
        provider = make_provider()
        cleaner = make_cleaner(config=provider)
        assert cleaner.clean("Hello World") == "hello-world"

        provider.values["settings.separator"] = "_"
        assert cleaner.clean("Hello World") == "hello-world", "Cached epoch must not see new config"
        assert cleaner.clean("Other Words") == "other-words", "Snapshot must not be rebuilt mid-epoch"

        cleaner.reset()

        assert cleaner.clean("Hello World") == "hello_world"
        assert cleaner.cache_info().epoch == 1

    def test_concurrent_calls_agree(self, make_cleaner: Callable[..., StringCleaner]) -> None:
        cleaner = make_cleaner()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda i: cleaner.clean(SAMPLES[i % len(SAMPLES)]), range(200)))

        for i, result in enumerate(results):
            assert result == cleaner.clean(SAMPLES[i % len(SAMPLES)])


class TestAliasCleaner:
    """REQUIREMENT: The composed alias is cleaned as a whole.

    WHO: The generator, after token values have been inserted into the pattern
    WHAT: Separator noise around slashes, empty path segments, edge slashes
          and overall length are fixed
    WHY: "[term:parent]/[node:title]" with an empty parent gives "/hello"
    """

    def _cleaner(self, make_provider: Callable[..., SettingsConfigProvider], **kwargs: object) -> AliasCleaner:
        return AliasCleaner(config=make_provider(**kwargs), storage=InMemoryAliasStorage())

    def test_empty_segments_and_edge_slashes_are_removed(
        self, make_provider: Callable[..., SettingsConfigProvider]
    ) -> None:
        result = self._cleaner(make_provider).clean_alias("/blog//-hello-world/")

        assert result == "blog/hello-world", f"Expected clean path, got {result!r}"

    def test_alias_is_truncated_to_max_length(self, make_provider: Callable[..., SettingsConfigProvider]) -> None:
        result = self._cleaner(make_provider, max_length=12).clean_alias("blog/hello-world-again")

        assert result == "blog/hello", f"Expected word-safe cut at 12, got {result!r}"
