"""Language code lookup for subtitle tracks."""

UNDETERMINED = "und"

# (ISO 639-2/B, ISO 639-2/T alias or "", ISO 639-1, English name)
_LANGUAGE_ROWS = [
    ("ara", "", "ar", "arabic"),
    ("bul", "", "bg", "bulgarian"),
    ("cat", "", "ca", "catalan"),
    ("chi", "zho", "zh", "chinese"),
    ("cze", "ces", "cs", "czech"),
    ("dan", "", "da", "danish"),
    ("dut", "nld", "nl", "dutch"),
    ("eng", "", "en", "english"),
    ("est", "", "et", "estonian"),
    ("fin", "", "fi", "finnish"),
    ("fre", "fra", "fr", "french"),
    ("ger", "deu", "de", "german"),
    ("gre", "ell", "el", "greek"),
    ("heb", "", "he", "hebrew"),
    ("hin", "", "hi", "hindi"),
    ("hrv", "", "hr", "croatian"),
    ("hun", "", "hu", "hungarian"),
    ("ice", "isl", "is", "icelandic"),
    ("ind", "", "id", "indonesian"),
    ("ita", "", "it", "italian"),
    ("jpn", "", "ja", "japanese"),
    ("kor", "", "ko", "korean"),
    ("lav", "", "lv", "latvian"),
    ("lit", "", "lt", "lithuanian"),
    ("may", "msa", "ms", "malay"),
    ("nor", "", "no", "norwegian"),
    ("per", "fas", "fa", "persian"),
    ("pol", "", "pl", "polish"),
    ("por", "", "pt", "portuguese"),
    ("rum", "ron", "ro", "romanian"),
    ("rus", "", "ru", "russian"),
    ("slo", "slk", "sk", "slovak"),
    ("slv", "", "sl", "slovenian"),
    ("spa", "", "es", "spanish"),
    ("srp", "", "sr", "serbian"),
    ("swe", "", "sv", "swedish"),
    ("tha", "", "th", "thai"),
    ("tur", "", "tr", "turkish"),
    ("ukr", "", "uk", "ukrainian"),
    ("vie", "", "vi", "vietnamese"),
]


def _build_table() -> dict[str, str]:
    table = {}
    for code, alias, short, name in _LANGUAGE_ROWS:
        for key in (code, alias, short, name):
            if key:
                table[key] = code
    return table


LANGUAGES: dict[str, str] = _build_table()


def lookup_language(code: str | None) -> str:
    """Map a code or English name to its ISO 639-2 label, "und" when unknown."""
    if not code:
        return UNDETERMINED
    return LANGUAGES.get(code.strip().lower(), UNDETERMINED)


def subtitle_language_from_filename(filename: str) -> str:
    """Best guess at the language of a sidecar subtitle such as ``movie.eng.vtt``.

    Only the dot components between the base name and the extension are
    considered; the first one found in the table wins.
    """
    parts = filename.split(".")
    for component in parts[1:-1]:
        language = lookup_language(component)
        if language != UNDETERMINED:
            return language
    return UNDETERMINED
