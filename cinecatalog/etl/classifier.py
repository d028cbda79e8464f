"""Language and region admissibility filter.

Decides whether a fetched record belongs to the Indian-cinema catalog.
"""

from collections.abc import Iterable

from cinecatalog.etl.types import FullRecord

INDIAN_LANGUAGES: tuple[str, ...] = (
    "Hindi",
    "Kannada",
    "Telugu",
    "Tamil",
    "Malayalam",
    "Marathi",
    "Bengali",
    "Punjabi",
)

# Original-language codes used by the movie database.
LANGUAGE_NAMES: dict[str, str] = {
    "hi": "Hindi",
    "ta": "Tamil",
    "te": "Telugu",
    "kn": "Kannada",
    "ml": "Malayalam",
    "bn": "Bengali",
    "mr": "Marathi",
    "pa": "Punjabi",
    "en": "English",
}

LANGUAGE_CODES: dict[str, str] = {name.lower(): code for code, name in LANGUAGE_NAMES.items()}


def language_name(code: str | None) -> str | None:
    """Map a language code to its display name.

    Unknown codes are returned unchanged so nothing is lost.
    """
    if not code:
        return None
    return LANGUAGE_NAMES.get(code.lower(), code)


def language_code(name: str | None) -> str | None:
    """Map a display name back to its code, if known."""
    if not name:
        return None
    return LANGUAGE_CODES.get(name.lower())


class Classifier:
    """Admit records produced in the target country or in an allowed language.

    Attributes:
        target_country: ISO 3166-1 code that admits a record outright.
        allowed_languages: Language names admitted regardless of country.
    """

    def __init__(
        self,
        target_country: str = "IN",
        allowed_languages: Iterable[str] = INDIAN_LANGUAGES,
    ) -> None:
        self.target_country = target_country.upper()
        self.allowed_languages = frozenset(lang.lower() for lang in allowed_languages)

    def accept(self, record: FullRecord) -> bool:
        """Return True if the record belongs in the catalog.

        Args:
            record: Normalized provider record.

        Returns:
            True when the target country is among the production
            countries or the language is allowed (case-insensitive).
        """
        if self.target_country in record.production_countries:
            return True
        language = (record.language or "").strip().lower()
        return language in self.allowed_languages
