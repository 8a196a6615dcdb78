"""
LPG Profiles Profile Builder - N-gram Frequency Profiles

This module reads a corpus cache, extracts character n-grams with the
langdetect n-gram model (the same model the detector later matches
against), and keeps only n-grams that reach a minimum frequency.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

from langdetect.utils.lang_profile import LangProfile

from lpg_core.errors import ProfileBuildError
from lpg_core.models import NgramFrequencyProfile

logger = logging.getLogger(__name__)

DEFAULT_MIN_FREQUENCY = 5

def read_corpus_text(corpus_cache: Union[str, Path], language: str) -> str:
    """Trim each cache line and join the non-empty ones into one text"""
    try:
        with open(corpus_cache, "r", encoding="utf-8") as f:
            lines = [line.strip() for line in f]
    except (OSError, UnicodeDecodeError) as e:
        raise ProfileBuildError(f"Could not read corpus cache {corpus_cache}: {e}", language) from e

    text = " ".join(line for line in lines if line)
    if not text:
        raise ProfileBuildError(f"Corpus cache {corpus_cache} is empty", language)
    return text


class ProfileBuilder:
    """Builds an NgramFrequencyProfile from a corpus cache"""

    def __init__(self, min_frequency: int = DEFAULT_MIN_FREQUENCY):
        if min_frequency < 1:
            raise ValueError(f"min_frequency must be positive, got {min_frequency}")
        self.min_frequency = min_frequency

    def count_ngrams(self, text: str, language: str) -> LangProfile:
        lang_profile = LangProfile(name=language)
        lang_profile.update(text)
        return lang_profile

    def build_from_text(self, text: str, language: str) -> NgramFrequencyProfile:
        counted = self.count_ngrams(text, language)
        kept = {
            gram: count
            for gram, count in counted.freq.items()
            if count >= self.min_frequency
        }
        dropped = len(counted.freq) - len(kept)
        logger.info(
            f"{language}: {len(kept)} n-grams kept, {dropped} below "
            f"minimum frequency {self.min_frequency}"
        )
        if not kept:
            logger.warning(f"{language}: no n-gram reached frequency {self.min_frequency}")
        return NgramFrequencyProfile(
            language=language,
            freq=kept,
            n_words=list(counted.n_words),
            min_frequency=self.min_frequency,
        )

    def build(self, corpus_cache: Union[str, Path], language: str) -> NgramFrequencyProfile:
        text = read_corpus_text(corpus_cache, language)
        logger.info(f"{language}: building profile from {len(text)} characters of text")
        return self.build_from_text(text, language)


def build(
    corpus_cache: Union[str, Path],
    language: str,
    min_frequency: int = DEFAULT_MIN_FREQUENCY
) -> NgramFrequencyProfile:
    return ProfileBuilder(min_frequency).build(corpus_cache, language)
