"""
LPG Core Errors - Exception Types for Profile Generation

Every failure raised while building a language profile derives from
ProfileGeneratorError. Per-URL errors (MalformedUrlError, FetchError,
ExtractionError) are contained by the crawler; everything else is
contained by the orchestrator at language granularity.
"""

from __future__ import annotations
from typing import Optional


class ProfileGeneratorError(Exception):
    """Base class for all profile generation errors"""

    def __init__(self, message: str, language: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.language = language

    def __str__(self) -> str:
        if self.language:
            return f"[{self.language}] {self.message}"
        return self.message


class ConfigLoadError(ProfileGeneratorError):
    """Properties or stopword file could not be read"""


class MissingInputError(ProfileGeneratorError):
    """Neither a reusable corpus cache nor a URL list exists"""


class MalformedUrlError(ProfileGeneratorError):
    """A URL list line is not a fetchable URL"""

    def __init__(self, url: str, reason: str, language: Optional[str] = None):
        super().__init__(f"Malformed URL {url!r}: {reason}", language)
        self.url = url


class FetchError(ProfileGeneratorError):
    """A URL could not be fetched or returned a non-success status"""

    def __init__(
        self,
        url: str,
        reason: str,
        status_code: Optional[int] = None,
        language: Optional[str] = None
    ):
        super().__init__(f"Failed to fetch {url}: {reason}", language)
        self.url = url
        self.status_code = status_code


class ExtractionError(ProfileGeneratorError):
    """A fetched resource could not be turned into plain text"""

    def __init__(self, url: str, reason: str, language: Optional[str] = None):
        super().__init__(f"Failed to extract text from {url}: {reason}", language)
        self.url = url


class ProfileBuildError(ProfileGeneratorError):
    """Corpus cache is missing, unreadable or empty"""


class WriteError(ProfileGeneratorError):
    """Finished profile could not be persisted"""
