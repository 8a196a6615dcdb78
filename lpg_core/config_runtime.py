"""
LPG Core Config Runtime - Runtime Configuration Management

This module provides the build settings (with environment overrides),
path resolution for the directory-per-language layout, and the loaders
for per-language properties and stopword files.
"""

from __future__ import annotations
import os
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Optional, Any, Callable

from lpg_core.errors import ConfigLoadError
from lpg_core.models import ProfileConfig, StopwordSet

logger = logging.getLogger(__name__)


DEFAULT_USER_AGENT = "LanguageProfileGenerator/1.0 (+corpus crawler for language identification profiles)"

MUST_CONTAIN_KEY = "mustContainChars"
MUST_NOT_CONTAIN_KEY = "mustNotContainChars"


def _env_value(name: str, default: Any, cast: Callable[[str], Any]) -> Any:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning(f"Ignoring invalid value {raw!r} for {name}, using {default!r}")
        return default


@dataclass
class BuildSettings:
    """Settings shared by every language build in one invocation"""
    base_dir: Path = field(default_factory=Path.cwd)

    max_total_megabytes: float = 3

    min_cache_bytes: int = 10000

    min_frequency: int = 5

    fetch_timeout: float = 30.0

    user_agent: str = DEFAULT_USER_AGENT

    jobs: int = 1

    @classmethod
    def from_env(cls, **overrides: Any) -> BuildSettings:
        """Build settings from LPG_* environment variables

        Keyword overrides that are not None win over the environment.
        """
        settings = cls(
            base_dir=Path(_env_value("LPG_BASE_DIR", str(Path.cwd()), str)),
            max_total_megabytes=_env_value("LPG_MAX_MB", cls.max_total_megabytes, float),
            min_frequency=_env_value("LPG_MIN_FREQUENCY", cls.min_frequency, int),
            fetch_timeout=_env_value("LPG_FETCH_TIMEOUT", cls.fetch_timeout, float),
            user_agent=_env_value("LPG_USER_AGENT", DEFAULT_USER_AGENT, str),
            jobs=_env_value("LPG_JOBS", cls.jobs, int),
        )
        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(settings, key):
                raise TypeError(f"Unknown build setting: {key}")
            setattr(settings, key, Path(value) if key == "base_dir" else value)
        return settings

    def paths_for(self, language: str) -> ProfilePaths:
        return ProfilePaths(self.base_dir, language)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_dir": str(self.base_dir),
            "max_total_megabytes": self.max_total_megabytes,
            "min_cache_bytes": self.min_cache_bytes,
            "min_frequency": self.min_frequency,
            "fetch_timeout": self.fetch_timeout,
            "user_agent": self.user_agent,
            "jobs": self.jobs,
        }


class ProfilePaths:
    """Resolves the files of one language directory"""

    def __init__(self, base_dir: Path, language: str):
        self.base_dir = Path(base_dir)
        self.language = language

    @property
    def directory(self) -> Path:
        return self.base_dir / self.language

    @property
    def properties_file(self) -> Path:
        return self.directory / f"{self.language}.properties"

    @property
    def stopwords_file(self) -> Path:
        return self.directory / "stopwords.txt"

    @property
    def urls_file(self) -> Path:
        return self.directory / f"{self.language}.urls"

    @property
    def strings_file(self) -> Path:
        return self.directory / f"{self.language}.strings"

    @property
    def profile_file(self) -> Path:
        return self.directory / self.language

    def to_dict(self) -> Dict[str, str]:
        return {
            "directory": str(self.directory),
            "properties": str(self.properties_file),
            "stopwords": str(self.stopwords_file),
            "urls": str(self.urls_file),
            "strings": str(self.strings_file),
            "profile": str(self.profile_file),
        }


_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _unescape(value: str) -> str:
    out = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch != "\\" or i + 1 >= len(value):
            out.append(ch)
            i += 1
            continue
        nxt = value[i + 1]
        if nxt == "u" and i + 6 <= len(value):
            try:
                out.append(chr(int(value[i + 2:i + 6], 16)))
                i += 6
                continue
            except ValueError:
                raise ValueError(f"Malformed \\uXXXX escape: {value[i:i + 6]!r}")
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _logical_lines(text: str):
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip() if pending else raw
        if not pending:
            stripped = line.lstrip()
            if not stripped or stripped[0] in "#!":
                continue
            line = stripped
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        yield pending + line
        pending = ""
    if pending:
        yield pending


def parse_properties(text: str) -> Dict[str, str]:
    """Parse Java .properties syntax into a dict"""
    props: Dict[str, str] = {}
    for line in _logical_lines(text):
        i = 0
        key_chars = []
        while i < len(line):
            ch = line[i]
            if ch == "\\" and i + 1 < len(line):
                key_chars.append(line[i:i + 2])
                i += 2
                continue
            if ch in "=:" or ch.isspace():
                break
            key_chars.append(ch)
            i += 1
        while i < len(line) and line[i].isspace():
            i += 1
        if i < len(line) and line[i] in "=:":
            i += 1
            while i < len(line) and line[i].isspace():
                i += 1
        props[_unescape("".join(key_chars))] = _unescape(line[i:])
    return props


def load_profile_config(paths: ProfilePaths) -> ProfileConfig:
    """Load <lang>/<lang>.properties

    A missing file yields an empty config; an unreadable one raises
    ConfigLoadError.
    """
    path = paths.properties_file
    if not path.exists():
        logger.warning(f"{paths.language}: no properties file {path.name}, cleaning rules use defaults")
        return ProfileConfig(language=paths.language)

    try:
        props = parse_properties(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise ConfigLoadError(f"Could not read {path}: {e}", paths.language) from e

    config = ProfileConfig(
        language=paths.language,
        must_contain_chars=props.get(MUST_CONTAIN_KEY) or None,
        must_not_contain_chars=props.get(MUST_NOT_CONTAIN_KEY) or None,
    )
    logger.debug(f"{paths.language}: loaded properties {config.to_dict()}")
    return config


def load_stopwords(paths: ProfilePaths) -> StopwordSet:
    """Load <lang>/stopwords.txt; a missing file yields an empty set"""
    path = paths.stopwords_file
    if not path.exists():
        return StopwordSet(language=paths.language)

    try:
        with open(path, "r", encoding="utf-8") as f:
            words = {line.strip().lower() for line in f}
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"Could not read {path}: {e}", paths.language) from e

    words.discard("")
    logger.info(f"{paths.language}: loaded {len(words)} stopwords")
    return StopwordSet(language=paths.language, words=frozenset(words))
