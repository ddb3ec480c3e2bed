"""Utterance classifier -- transcript to ``Intent``.

``classify()`` is a pure function of the transcript and a
``ClassificationContext``.  ``UtteranceClassifier`` binds it to a
``Lexicon`` so wizard steps can name their vocabulary instead of
carrying it around.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from voice_vote.classifier.matching import best_match, longest_keyword, words
from voice_vote.classifier.transforms import format_value
from voice_vote.classifier.vocabulary import (
    KeywordSet,
    Lexicon,
    Vocabulary,
    load_default_lexicon,
    parse_vocabulary_yaml,
)
from voice_vote.models.intent import Intent
from voice_vote.models.step import InputKind, ValueFormat, WizardStep

logger = logging.getLogger(__name__)

NEXT_TARGET = "next"
"""Navigation target produced by completion words on external-action steps."""

# Any of these words turns a yes answer into a no ("not sure", "don't agree").
NEGATIONS = frozenset({"not", "don't", "dont", "never", "cannot", "can't"})


@dataclass(frozen=True)
class ClassificationContext:
    """Everything ``classify()`` needs besides the transcript.

    Attributes
    ----------
    kind:
        Input kind of the active step.
    vocabulary:
        Phrases accepted by ``ENUMERATED_CHOICE`` and ``NAVIGATION``
        steps.
    value_format:
        Transform applied to ``FREE_TEXT`` answers.
    keywords:
        Global command words.
    """

    kind: InputKind
    vocabulary: Vocabulary | None = None
    value_format: ValueFormat = ValueFormat.TEXT
    keywords: KeywordSet = field(default_factory=KeywordSet)


def _classify_confirmation(text: str, keywords: KeywordSet) -> Intent:
    yes = longest_keyword(text, keywords.yes)
    no = longest_keyword(text, keywords.no)
    if yes and NEGATIONS.intersection(words(text)):
        return Intent.confirm(False)
    if yes and no:
        # Longest match wins; an exact tie is read as "no" so nothing
        # is committed on an ambiguous answer.
        return Intent.confirm(len(yes) > len(no))
    if yes:
        return Intent.confirm(True)
    if no:
        return Intent.confirm(False)
    return Intent.unrecognized()


def _classify_for_step(raw: str, text: str, context: ClassificationContext) -> Intent:
    kind = context.kind

    if kind is InputKind.FREE_TEXT:
        value = format_value(raw, context.value_format)
        return Intent.provide(value) if value else Intent.unrecognized()

    if kind in (InputKind.ENUMERATED_CHOICE, InputKind.NAVIGATION):
        if context.vocabulary is None:
            raise ValueError(f"A {kind.value} step requires a vocabulary")
        entry = best_match(text, context.vocabulary)
        if entry is None:
            return Intent.unrecognized()
        if kind is InputKind.NAVIGATION:
            return Intent.navigate(entry.value)
        return Intent.select(entry.value)

    if kind is InputKind.CONFIRMATION:
        return _classify_confirmation(text, context.keywords)

    if kind is InputKind.EXTERNAL_ACTION:
        if longest_keyword(text, context.keywords.next):
            return Intent.navigate(NEXT_TARGET)
        return Intent.unrecognized()

    return Intent.unrecognized()


def classify(transcript: str, context: ClassificationContext) -> Intent:
    """Classify a final transcript into exactly one ``Intent``.

    Rules, in order:

    1. Cancel keywords short-circuit to ``Cancel`` on every step.
    2. The step's own rule (vocabulary match, yes/no, completion words,
       or free-text capture) is applied.
    3. Repeat keywords yield ``RepeatPrompt`` (never on free-text steps,
       where every utterance is an answer).
    4. Anything else is ``Unrecognized``.

    Parameters
    ----------
    transcript:
        Final transcript from the recognizer.
    context:
        Step kind, vocabulary, value format and keywords.

    Returns
    -------
    Intent
        The classified intent.
    """
    raw = transcript.strip()
    text = raw.lower()
    if not text:
        return Intent.unrecognized()

    if longest_keyword(text, context.keywords.cancel):
        return Intent.cancel()

    intent = _classify_for_step(raw, text, context)
    if intent.recognized:
        return intent

    if context.kind is not InputKind.FREE_TEXT and longest_keyword(
        text, context.keywords.repeat
    ):
        return Intent.repeat()

    return intent


class UtteranceClassifier:
    """Classifier bound to a lexicon of named vocabularies.

    Usage::

        classifier = UtteranceClassifier()
        intent = classifier.classify("I vote for vice president", step)
    """

    def __init__(self, lexicon: Lexicon | None = None) -> None:
        self._lexicon = lexicon if lexicon is not None else load_default_lexicon()
        logger.info(
            "UtteranceClassifier initialized with %d vocabularies",
            len(self._lexicon.vocabularies),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> UtteranceClassifier:
        """Create a classifier from a vocabulary YAML file."""
        return cls(parse_vocabulary_yaml(path))

    @property
    def lexicon(self) -> Lexicon:
        return self._lexicon

    @property
    def keywords(self) -> KeywordSet:
        return self._lexicon.keywords

    def context_for(
        self, step: WizardStep, vocabulary: Vocabulary | None = None
    ) -> ClassificationContext:
        """Build the classification context for *step*.

        An explicit *vocabulary* (e.g. the candidates of one ballot
        position) takes precedence over the step's named vocabulary.
        """
        if vocabulary is None and step.choices:
            vocabulary = self._lexicon.vocabulary(step.choices)
        return ClassificationContext(
            kind=step.kind,
            vocabulary=vocabulary,
            value_format=step.value_format,
            keywords=self._lexicon.keywords,
        )

    def classify(
        self,
        transcript: str,
        step: WizardStep,
        vocabulary: Vocabulary | None = None,
    ) -> Intent:
        intent = classify(transcript, self.context_for(step, vocabulary))
        logger.debug(
            "Classified '%s' at step '%s' as %s", transcript, step.step_id, intent.kind.value
        )
        return intent
