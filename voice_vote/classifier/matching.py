"""Keyword and vocabulary matching.

Contains the containment rules the classifier uses to decide whether a
transcript mentions a vocabulary phrase, and the tie-break that picks
one phrase when several match.
"""

from __future__ import annotations

import logging
import re
from enum import IntEnum
from typing import Iterable

from voice_vote.classifier.vocabulary import Vocabulary, VocabularyEntry

logger = logging.getLogger(__name__)

# Words longer than this count as "significant" for word-set matching.
SIGNIFICANT_WORD_LENGTH = 3

_WORD = re.compile(r"[a-z0-9']+")


class MatchTier(IntEnum):
    """Strength of a phrase match; higher is stronger."""

    CONTAINED = 1
    """The transcript appears, as whole words, inside the phrase."""

    SIGNIFICANT_WORDS = 2
    """Every significant word of the phrase appears in the transcript."""

    CONTAINS = 3
    """The transcript contains the phrase."""


def words(text: str) -> list[str]:
    """Split lower-cased *text* into words, dropping punctuation."""
    return _WORD.findall(text.lower())


def significant_words(phrase: str) -> list[str]:
    return [w for w in words(phrase) if len(w) > SIGNIFICANT_WORD_LENGTH]


def match_tier(transcript: str, phrase: str) -> MatchTier | None:
    """Return how strongly *transcript* mentions *phrase*, or ``None``.

    Both arguments are expected lower-cased.
    """
    if phrase and phrase in transcript:
        return MatchTier.CONTAINS

    spoken = words(transcript)
    required = significant_words(phrase)
    if required and all(w in spoken for w in required):
        return MatchTier.SIGNIFICANT_WORDS

    if spoken:
        padded_phrase = f" {' '.join(words(phrase))} "
        if f" {' '.join(spoken)} " in padded_phrase:
            return MatchTier.CONTAINED

    return None


def best_match(transcript: str, vocabulary: Vocabulary) -> VocabularyEntry | None:
    """Pick the vocabulary entry *transcript* refers to.

    All entries are tested; the strongest tier decides, and within that
    tier the longest phrase wins (``"vice president"`` over
    ``"president"``).  Remaining ties keep vocabulary order.
    """
    transcript = transcript.lower().strip()
    best: VocabularyEntry | None = None
    best_key: tuple[int, int] = (0, 0)

    for entry in vocabulary.entries:
        tier = match_tier(transcript, entry.phrase)
        if tier is None:
            continue
        key = (int(tier), len(entry.phrase))
        if key > best_key:
            best, best_key = entry, key

    if best is not None:
        logger.debug(
            "Matched '%s' -> %r in vocabulary '%s' (tier=%s)",
            transcript,
            best.value,
            vocabulary.name,
            MatchTier(best_key[0]).name,
        )
    return best


def mentions_keyword(transcript: str, keyword: str) -> bool:
    """Whether *keyword* occurs in *transcript* starting at a word boundary.

    ``"instruction"`` matches ``"replay instructions"`` but ``"stop"``
    does not match ``"christopher"``.
    """
    if not keyword:
        return False
    return re.search(rf"(?<![a-z0-9']){re.escape(keyword)}", transcript) is not None


def longest_keyword(transcript: str, keywords: Iterable[str]) -> str | None:
    """Return the longest keyword mentioned in *transcript*, if any."""
    transcript = transcript.lower()
    found = [k for k in keywords if mentions_keyword(transcript, k)]
    return max(found, key=len) if found else None
