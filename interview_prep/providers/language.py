from interview_prep.core.models import Language

# Checked in order; the first language with a hit wins
_KEYWORDS: tuple[tuple[Language, tuple[str, ...]], ...] = (
    (
        Language.PL,
        ("praca", "stanowisko", "wymagania", "doświadczenie", "programisty", "umowa", "wynagrodzenie", "oferujemy"),
    ),
    (
        Language.DE,
        ("stelle", "arbeit", "erfahrung", "kenntnisse", "wir bieten", "aufgaben", "anforderungen"),
    ),
)


def detect_language_heuristic(text: str) -> Language:
    """Guess the posting language from indicative keywords, defaulting to English."""
    lowered = (text or "").lower()
    for language, keywords in _KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return language
    return Language.EN


def parse_language_code(raw: str | None) -> Language:
    """Normalize a model's language answer; anything unrecognized means English."""
    if not raw:
        return Language.EN
    code = raw.strip().strip("\"'`").rstrip(".").strip().lower()
    try:
        return Language(code)
    except ValueError:
        return Language.EN
