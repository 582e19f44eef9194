"""Language tag helpers."""

from typing import Literal

Direction = Literal["ltr", "rtl"]

# Primary subtags of scripts written right-to-left
RTL_LANGUAGES = frozenset({"ar", "he", "fa", "ur", "yi", "ps", "sd", "ug", "dv", "ckb"})


def primary_subtag(language: str) -> str:
    """Return the primary subtag of a language tag ("pt-BR" -> "pt")."""
    return language.replace("_", "-").split("-", 1)[0].lower()


def direction_for_language(language: str) -> Direction:
    """Map a language tag to its text direction. Defaults to LTR."""
    if primary_subtag(language) in RTL_LANGUAGES:
        return "rtl"
    return "ltr"
