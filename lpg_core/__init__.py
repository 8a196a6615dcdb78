"""
LPG Core - Language Profile Generator Core Module

This package provides the foundational data models, error types,
configuration and logging infrastructure shared by the crawler, the
cleaning rules and the profile builder.

Modules:
    models: Domain objects (ProfileConfig, StopwordSet, CrawlResult, ...)
    errors: Exception hierarchy
    config_runtime: Build settings, path resolution, config loaders
    logging_monitoring: Log formatters and logging setup
"""

from lpg_core.models import (
    ISO_639_1_CODES,
    BuildState,
    ProfileConfig,
    StopwordSet,
    CrawlResult,
    NgramFrequencyProfile,
    BuildReport,
    validate_language_code,
)

from lpg_core.errors import (
    ProfileGeneratorError,
    ConfigLoadError,
    MissingInputError,
    MalformedUrlError,
    FetchError,
    ExtractionError,
    ProfileBuildError,
    WriteError,
)

from lpg_core.config_runtime import (
    BuildSettings,
    ProfilePaths,
    parse_properties,
    load_profile_config,
    load_stopwords,
)

from lpg_core.logging_monitoring import (
    StructuredFormatter,
    ConsoleFormatter,
    setup_logging,
    timed,
)

__version__ = "1.0.0"

__all__ = [
    "ISO_639_1_CODES",
    "BuildState",
    "ProfileConfig",
    "StopwordSet",
    "CrawlResult",
    "NgramFrequencyProfile",
    "BuildReport",
    "validate_language_code",
    "ProfileGeneratorError",
    "ConfigLoadError",
    "MissingInputError",
    "MalformedUrlError",
    "FetchError",
    "ExtractionError",
    "ProfileBuildError",
    "WriteError",
    "BuildSettings",
    "ProfilePaths",
    "parse_properties",
    "load_profile_config",
    "load_stopwords",
    "StructuredFormatter",
    "ConsoleFormatter",
    "setup_logging",
    "timed",
]
