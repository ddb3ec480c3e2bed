"""Vocabulary schema and YAML parser.

A vocabulary is the closed set of spoken phrases a step understands,
each mapped to a canonical value (``"sports"`` ->
``"Sports, Entertainment and Security Secretary"``).  Keyword sets hold
the global command words (cancel, repeat, yes, no, next).

The packaged ``vocabularies.yaml`` holds the defaults; a custom file
with the same structure can replace it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

DEFAULT_VOCABULARY_PATH = Path(__file__).with_name("vocabularies.yaml")


@dataclass(frozen=True)
class VocabularyEntry:
    """A spoken phrase and the canonical value it selects."""

    phrase: str
    value: str


@dataclass(frozen=True)
class Vocabulary:
    """Named, ordered set of vocabulary entries.

    Entry order is significant: it breaks ties between equally strong
    matches of equal length.
    """

    name: str
    entries: tuple[VocabularyEntry, ...] = ()

    @classmethod
    def from_labels(cls, name: str, labels: Iterable[str]) -> Vocabulary:
        """Build a vocabulary where every label selects itself."""
        return cls(
            name=name,
            entries=tuple(
                VocabularyEntry(phrase=label.lower(), value=label) for label in labels
            ),
        )

    @classmethod
    def from_mapping(
        cls, name: str, mapping: Mapping[str, Iterable[str] | None]
    ) -> Vocabulary:
        """Build a vocabulary from ``{value: [alias, ...]}``.

        The canonical value is always a phrase of its own.
        """
        entries: list[VocabularyEntry] = []
        for value, aliases in mapping.items():
            value = str(value)
            phrases = [value.lower()]
            phrases.extend(str(a).lower() for a in (aliases or []))
            for phrase in dict.fromkeys(phrases):
                entries.append(VocabularyEntry(phrase=phrase, value=value))
        return cls(name=name, entries=tuple(entries))

    @property
    def values(self) -> list[str]:
        """Distinct canonical values, in order."""
        return list(dict.fromkeys(e.value for e in self.entries))

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class KeywordSet:
    """Command words recognised on every screen.

    Attributes
    ----------
    cancel:
        Global override; always classified as ``Cancel``.
    repeat:
        Ask for the prompt to be spoken again.
    yes / no:
        Answers to a confirmation question.
    next:
        Completion words for external-action steps.
    """

    cancel: tuple[str, ...] = ("cancel", "exit", "stop")
    repeat: tuple[str, ...] = ("repeat", "replay", "instruction")
    yes: tuple[str, ...] = ("yes", "yeah", "yep", "correct", "confirm", "submit", "send", "sure")
    no: tuple[str, ...] = ("no", "nope", "wrong", "incorrect", "change")
    next: tuple[str, ...] = ("next", "done", "skip", "continue")


@dataclass(frozen=True)
class Lexicon:
    """All vocabularies and keyword sets known to the classifier."""

    vocabularies: dict[str, Vocabulary] = field(default_factory=dict)
    keywords: KeywordSet = field(default_factory=KeywordSet)

    def vocabulary(self, name: str) -> Vocabulary:
        try:
            return self.vocabularies[name]
        except KeyError:
            raise KeyError(
                f"Unknown vocabulary: {name!r}. "
                f"Available vocabularies: {', '.join(self.vocabularies)}"
            ) from None


def _parse_keywords(data: dict[str, Any] | None) -> KeywordSet:
    """Parse the optional ``keywords`` block, keeping defaults for gaps."""
    if not data:
        return KeywordSet()

    # YAML 1.1 reads bare ``yes:`` / ``no:`` keys as booleans.
    data = {
        ("yes" if key else "no") if isinstance(key, bool) else str(key): value
        for key, value in data.items()
    }
    defaults = KeywordSet()
    parsed: dict[str, tuple[str, ...]] = {}
    for name in ("cancel", "repeat", "yes", "no", "next"):
        words = data.get(name)
        if words is None:
            parsed[name] = getattr(defaults, name)
        elif isinstance(words, list):
            parsed[name] = tuple(str(w).lower() for w in words)
        else:
            raise ValueError(f"Invalid keywords '{name}': expected a list")
    return KeywordSet(**parsed)


def parse_vocabulary_yaml(path: str | Path) -> Lexicon:
    """Parse vocabularies and keyword sets from a YAML file.

    Parameters
    ----------
    path:
        Path to the YAML file.

    Returns
    -------
    Lexicon
        The parsed vocabularies and keywords.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML structure is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Vocabulary file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict) or "vocabularies" not in data:
        raise ValueError(
            f"Invalid vocabulary file: expected a top-level 'vocabularies' key in {path}"
        )

    vocab_data = data["vocabularies"]
    if not isinstance(vocab_data, dict):
        raise ValueError(
            f"Invalid vocabulary file: 'vocabularies' must be a mapping in {path}"
        )

    vocabularies: dict[str, Vocabulary] = {}
    for name, entries in vocab_data.items():
        if isinstance(entries, list):
            vocabularies[str(name)] = Vocabulary.from_labels(
                str(name), [str(e) for e in entries]
            )
        elif isinstance(entries, dict):
            vocabularies[str(name)] = Vocabulary.from_mapping(str(name), entries)
        else:
            raise ValueError(
                f"Invalid vocabulary '{name}': expected a list or a mapping"
            )

    return Lexicon(
        vocabularies=vocabularies,
        keywords=_parse_keywords(data.get("keywords")),
    )


def load_default_lexicon() -> Lexicon:
    """Load the vocabularies shipped with the package."""
    return parse_vocabulary_yaml(DEFAULT_VOCABULARY_PATH)
