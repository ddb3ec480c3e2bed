"""Deterministic text transforms applied to spoken field values."""

from __future__ import annotations

import re

from voice_vote.models.step import ValueFormat

_FIRST_NUMBER = re.compile(r"\d+")

# Spoken tokens that stand for punctuation in an email address.
EMAIL_TOKENS: dict[str, str] = {
    "at": "@",
    "dot": ".",
    "underscore": "_",
    "dash": "-",
    "hyphen": "-",
}


def normalize_email(text: str) -> str:
    """Turn a spoken email address into its written form.

    Substitution is token-wise, so ``"kate"`` keeps its ``"at"``::

        >>> normalize_email("Kate dot Doe at example dot com")
        'kate.doe@example.com'
    """
    tokens = text.lower().split()
    return "".join(EMAIL_TOKENS.get(token, token) for token in tokens)


def extract_number(text: str) -> str | None:
    """Return the first run of digits in *text*, or ``None``."""
    match = _FIRST_NUMBER.search(text)
    return match.group(0) if match else None


def compact_identifier(text: str) -> str:
    """Admission / registration numbers: whitespace removed, upper-cased."""
    return "".join(text.split()).upper()


def format_value(text: str, value_format: ValueFormat) -> str | None:
    """Apply *value_format* to a raw transcript.

    Returns ``None`` when nothing usable remains (e.g. no digits for a
    ``NUMBER`` field).
    """
    if value_format is ValueFormat.NUMBER:
        return extract_number(text)
    if value_format is ValueFormat.EMAIL:
        value = normalize_email(text)
    elif value_format is ValueFormat.IDENTIFIER:
        value = compact_identifier(text)
    else:
        value = text.strip()
    return value or None
