"""Answer labels for each supported language."""

from staffmaster.quiz_models import LETTERS, Clef, check_language, check_letter_index

#: Letter names per language code, indexed by letter index (0 = C).
LETTER_LABELS: dict[str, tuple[str, ...]] = {
    "en": LETTERS,
    "es": ("Do", "Re", "Mi", "Fa", "Sol", "La", "Si"),
}

#: Clef names shown next to the staff.
CLEF_LABELS: dict[str, dict[str, str]] = {
    "en": {"treble": "Treble", "bass": "Bass", "alto": "Alto", "mixed": "Mix"},
    "es": {"treble": "Sol", "bass": "Fa", "alto": "Do", "mixed": "Mix"},
}


def letter_label(index: int, language: str = "en") -> str:
    """Return the display name of letter *index* in *language*."""
    return LETTER_LABELS[check_language(language)][check_letter_index(index)]


def clef_label(clef: Clef | str, language: str = "en") -> str:
    key = clef.value if isinstance(clef, Clef) else str(clef)
    return CLEF_LABELS[check_language(language)][key]


def letter_index_for_label(label: str, language: str = "en") -> int | None:
    """Find the letter index whose label matches *label*, ignoring case."""
    wanted = label.strip().lower()
    for index, name in enumerate(LETTER_LABELS[check_language(language)]):
        if name.lower() == wanted:
            return index
    return None
