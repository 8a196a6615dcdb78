"""
LPG Utils Cleaning Rules - Ordered Text Cleaning Rule Chain

Each fetched text passes through the same fixed chain before it is
written to the corpus cache:

    1. must-contain filter       (drop text lacking every required char)
    2. must-not-contain filter   (drop text holding any forbidden char)
    3. punctuation removal       (each Unicode punctuation char -> " ")
    4. digit-run removal         (each word-bounded digit run -> " ")
    5. stopword removal          (each whole-word stopword -> " ")

The containment filters run on raw text, so punctuation and digits still
count when they are evaluated. The order is part of the contract.
"""

from __future__ import annotations
import logging
import re
import unicodedata
from abc import ABC, abstractmethod
from typing import List, Optional, Iterable, Pattern

from lpg_core.models import ProfileConfig, StopwordSet

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_DIGIT_RUN_RE = re.compile(r"\b\d+\b")


def collapse_whitespace(text: str) -> str:
    """Replace every whitespace run with a single space"""
    return _WHITESPACE_RE.sub(" ", text)


def contains_any(text: str, chars: str) -> bool:
    """True if any character of ``chars`` occurs anywhere in ``text``"""
    return not set(chars).isdisjoint(text)


class CleaningRule(ABC):
    """A single text transformation in the cleaning chain"""

    name: str = "rule"

    @abstractmethod
    def apply(self, text: str) -> str:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class MustContainCharsRule(CleaningRule):
    name = "must_contain_chars"

    def __init__(self, chars: Optional[str]):
        self.chars = chars or None

    def apply(self, text: str) -> str:
        if self.chars is None:
            return text
        keep = contains_any(text, self.chars)
        logger.debug(f"Rule {self.name}: chars={self.chars!r} keep={keep} length={len(text)}")
        return text if keep else ""


class MustNotContainCharsRule(CleaningRule):
    name = "must_not_contain_chars"

    def __init__(self, chars: Optional[str]):
        self.chars = chars or None

    def apply(self, text: str) -> str:
        if self.chars is None:
            return text
        drop = contains_any(text, self.chars)
        logger.debug(f"Rule {self.name}: chars={self.chars!r} drop={drop} length={len(text)}")
        return "" if drop else text


class PunctuationRule(CleaningRule):
    """Replace every character of Unicode category P* with a space"""

    name = "punctuation"

    def apply(self, text: str) -> str:
        if not text:
            return text
        ret = "".join(
            " " if unicodedata.category(ch).startswith("P") else ch
            for ch in text
        )
        logger.debug(f"Rule {self.name}: removed punctuation")
        return ret


class DigitRunRule(CleaningRule):
    name = "digit_runs"

    def apply(self, text: str) -> str:
        if not text:
            return text
        return _DIGIT_RUN_RE.sub(" ", text)


class StopwordRule(CleaningRule):
    """Replace case-insensitive whole-word stopword matches with a space"""

    name = "stopwords"

    def __init__(self, stopwords: Iterable[str]):
        self.pattern = self._compile(stopwords)

    @staticmethod
    def _compile(stopwords: Iterable[str]) -> Optional[Pattern[str]]:
        words = sorted({w for w in stopwords if w}, key=lambda w: (-len(w), w))
        if not words:
            return None
        alternation = "|".join(re.escape(w) for w in words)
        return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)

    def apply(self, text: str) -> str:
        if not text or self.pattern is None:
            return text
        before = len(text)
        ret = self.pattern.sub(" ", text)
        logger.debug(f"Rule {self.name}: sizes {before}/{len(ret)}")
        return ret


class RuleChain:
    """Ordered sequence of cleaning rules"""

    def __init__(self, rules: List[CleaningRule]):
        self.rules = list(rules)

    @classmethod
    def for_language(cls, config: ProfileConfig, stopwords: StopwordSet) -> RuleChain:
        return cls([
            MustContainCharsRule(config.must_contain_chars),
            MustNotContainCharsRule(config.must_not_contain_chars),
            PunctuationRule(),
            DigitRunRule(),
            StopwordRule(stopwords.words),
        ])

    def apply(self, text: str) -> str:
        for rule in self.rules:
            text = rule.apply(text)
        return text

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"RuleChain({[rule.name for rule in self.rules]})"


def apply_rules(text: str, config: ProfileConfig, stopwords: StopwordSet) -> str:
    """Run the standard chain for one language over ``text``"""
    return RuleChain.for_language(config, stopwords).apply(text)
