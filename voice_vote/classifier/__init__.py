"""Utterance classification -- keyword and vocabulary matching.

Usage::

    from voice_vote.classifier import ClassificationContext, Vocabulary, classify

    vocab = Vocabulary.from_labels("positions", ["President", "Vice President"])
    context = ClassificationContext(InputKind.ENUMERATED_CHOICE, vocabulary=vocab)
    intent = classify("I vote for vice president", context)
"""

from __future__ import annotations

from voice_vote.classifier.classifier import (
    NEXT_TARGET,
    ClassificationContext,
    UtteranceClassifier,
    classify,
)
from voice_vote.classifier.transforms import (
    compact_identifier,
    extract_number,
    format_value,
    normalize_email,
)
from voice_vote.classifier.vocabulary import (
    KeywordSet,
    Lexicon,
    Vocabulary,
    VocabularyEntry,
    load_default_lexicon,
    parse_vocabulary_yaml,
)

__all__ = [
    "ClassificationContext",
    "UtteranceClassifier",
    "classify",
    "NEXT_TARGET",
    "KeywordSet",
    "Lexicon",
    "Vocabulary",
    "VocabularyEntry",
    "load_default_lexicon",
    "parse_vocabulary_yaml",
    "compact_identifier",
    "extract_number",
    "format_value",
    "normalize_email",
]
