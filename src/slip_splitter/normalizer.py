"""Vietnamese diacritic folding and filename-safe slugs.

Pure functions; the accent table is static data.
"""

from __future__ import annotations

import re

# Every Vietnamese accented vowel (all five tone marks, with and without
# the breve/circumflex/horn) plus đ/Đ, mapped to its base Latin letter.
_ACCENT_GROUPS: dict[str, str] = {
    "a": "àáảãạăằắẳẵặâầấẩẫậ",
    "e": "èéẻẽẹêềếểễệ",
    "i": "ìíỉĩị",
    "o": "òóỏõọôồốổỗộơờớởỡợ",
    "u": "ùúủũụưừứửữự",
    "y": "ỳýỷỹỵ",
    "d": "đ",
    "A": "ÀÁẢÃẠĂẰẮẲẴẶÂẦẤẨẪẬ",
    "E": "ÈÉẺẼẸÊỀẾỂỄỆ",
    "I": "ÌÍỈĨỊ",
    "O": "ÒÓỎÕỌÔỒỐỔỖỘƠỜỚỞỠỢ",
    "U": "ÙÚỦŨỤƯỪỨỬỮỰ",
    "Y": "ỲÝỶỸỴ",
    "D": "Đ",
}

VIETNAMESE_ACCENTS: dict[str, str] = {
    accented: base for base, group in _ACCENT_GROUPS.items() for accented in group
}

_FOLD_TABLE = str.maketrans(VIETNAMESE_ACCENTS)

_WHITESPACE_RUN = re.compile(r"\s+")
_NOT_SLUG_CHAR = re.compile(r"[^a-z0-9_]")
_UNDERSCORE_RUN = re.compile(r"_+")
_NOT_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def fold_diacritics(text: str) -> str:
    """Replace each Vietnamese accented letter with its base letter.

    Case is preserved and characters outside the table pass through unchanged.
    """
    return text.translate(_FOLD_TABLE)


def slugify(full_name: str) -> str:
    """Turn a person's name into a lowercase ``[a-z0-9_]`` token.

    >>> slugify("Nguyễn Văn  Á")
    'nguyen_van_a'
    """
    slug = fold_diacritics(full_name).lower()
    slug = _WHITESPACE_RUN.sub("_", slug)
    slug = _NOT_SLUG_CHAR.sub("", slug)
    slug = _UNDERSCORE_RUN.sub("_", slug)
    return slug.strip("_")


def clean_code(code: str) -> str:
    """Strip every non-ASCII-alphanumeric character from a record code."""
    return _NOT_ALNUM.sub("", code)


def build_filename(code: str, full_name: str, fmt: str) -> str:
    """Build ``{cleanCode}_{slug}.{fmt}``.

    No uniqueness is enforced here; two records with the same code and
    name produce the same filename.
    """
    return f"{clean_code(code)}_{slugify(full_name)}.{fmt}"
