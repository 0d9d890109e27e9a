"""ASCII transliteration backed by ``unidecode``."""

from __future__ import annotations

from unidecode import unidecode

from pathalias.contracts import Transliterator


class UnidecodeTransliterator(Transliterator):
    """Transliterates with :func:`unidecode.unidecode`.

    ``unidecode`` has no per-language tables, so *language* is accepted
    and ignored.  Characters ``unidecode`` cannot map become *unknown*.
    """

    def transliterate(self, text: str, unknown: str = "?", language: str | None = None) -> str:
        return unidecode(text, errors="replace", replace_str=unknown)
