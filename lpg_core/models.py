"""
LPG Core Models - Domain Objects for Language Profile Generation

This module provides the value objects shared by the crawler, the
cleaning rule chain, the profile builder and the orchestrator.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, FrozenSet, Tuple
from enum import Enum


ISO_639_1_CODES = frozenset("""
aa ab ae af ak am an ar as av ay az ba be bg bh bi bm bn bo br bs ca ce ch
co cr cs cu cv cy da de dv dz ee el en eo es et eu fa ff fi fj fo fr fy ga
gd gl gn gu gv ha he hi ho hr ht hu hy hz ia id ie ig ii ik in io is it iu
iw ja ji jv ka kg ki kj kk kl km kn ko kr ks ku kv kw ky la lb lg li ln lo
lt lu lv mg mh mi mk ml mn mo mr ms mt my na nb nd ne ng nl nn no nr nv ny
oc oj om or os pa pi pl ps pt qu rm rn ro ru rw sa sc sd se sg si sk sl sm
sn so sq sr ss st su sv sw ta te tg th ti tk tl tn to tr ts tt tw ty ug uk
ur uz ve vi vo wa wo xh yi yo za zh zu
""".split())

_LANGUAGE_NAME_RE = re.compile(r"^\w+$")


def validate_language_code(code: str) -> Tuple[bool, bool]:
    """Return (usable as a profile name, known ISO 639-1 code)"""
    is_valid_name = bool(code) and _LANGUAGE_NAME_RE.match(code) is not None
    return is_valid_name, code in ISO_639_1_CODES


class BuildState(Enum):
    """States a single language build passes through"""
    INIT = "init"
    CONFIG_LOADED = "config_loaded"
    CORPUS_READY = "corpus_ready"
    PROFILE_BUILT = "profile_built"
    WRITTEN = "written"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ProfileConfig:
    """Per-language cleaning settings, immutable for one build"""
    language: str
    must_contain_chars: Optional[str] = None
    must_not_contain_chars: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "must_contain_chars": self.must_contain_chars,
            "must_not_contain_chars": self.must_not_contain_chars,
        }


@dataclass(frozen=True)
class StopwordSet:
    """Lower-cased stopwords for one language"""
    language: str
    words: FrozenSet[str] = field(default_factory=frozenset)

    def __len__(self) -> int:
        return len(self.words)


@dataclass
class CrawlResult:
    """Counters collected during one crawl"""
    urls_attempted: int = 0
    bytes_written: int = 0
    urls_failed: int = 0
    urls_malformed: int = 0
    budget_exceeded: bool = False

    def as_tuple(self) -> Tuple[int, int]:
        return self.urls_attempted, self.bytes_written

    def to_dict(self) -> Dict[str, Any]:
        return {
            "urls_attempted": self.urls_attempted,
            "bytes_written": self.bytes_written,
            "urls_failed": self.urls_failed,
            "urls_malformed": self.urls_malformed,
            "budget_exceeded": self.budget_exceeded,
        }


@dataclass
class NgramFrequencyProfile:
    """N-gram counts for one language

    ``n_words`` holds the total number of n-grams observed per length
    (index 0 for unigrams), before the minimum-frequency cutoff.
    """
    language: str
    freq: Dict[str, int] = field(default_factory=dict)
    n_words: List[int] = field(default_factory=list)
    min_frequency: int = 5

    def __len__(self) -> int:
        return len(self.freq)

    def get(self, ngram: str) -> int:
        return self.freq.get(ngram, 0)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the langdetect profile layout"""
        return {
            "freq": dict(sorted(self.freq.items())),
            "n_words": list(self.n_words),
            "name": self.language,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], min_frequency: int = 0) -> NgramFrequencyProfile:
        return cls(
            language=data["name"],
            freq={str(k): int(v) for k, v in data.get("freq", {}).items()},
            n_words=[int(n) for n in data.get("n_words", [])],
            min_frequency=min_frequency,
        )

    def to_lang_profile(self):
        """Convert to a langdetect LangProfile for use with a detector factory"""
        from langdetect.utils.lang_profile import LangProfile

        return LangProfile(name=self.language, freq=dict(self.freq), n_words=list(self.n_words))


@dataclass
class BuildReport:
    """Outcome of building one language profile"""
    language: str
    state: BuildState = BuildState.INIT
    error: Optional[str] = None
    reused_cache: bool = False
    crawl: Optional[CrawlResult] = None
    profile_path: Optional[str] = None
    ngram_count: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state == BuildState.WRITTEN

    def skip(self, error: Exception) -> BuildReport:
        self.state = BuildState.SKIPPED
        self.error = str(error)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "state": self.state.value,
            "error": self.error,
            "reused_cache": self.reused_cache,
            "crawl": self.crawl.to_dict() if self.crawl else None,
            "profile_path": self.profile_path,
            "ngram_count": self.ngram_count,
        }
