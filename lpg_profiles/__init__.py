"""
LPG Profiles - Language Profile Building Package

This package turns corpus caches into n-gram frequency profiles and
drives complete per-language builds.

Modules:
    profile_builder: N-gram counting with a minimum-frequency cutoff
    profile_writer: langdetect-format profile persistence
    orchestrator: Per-language build state machine
"""

from lpg_profiles.profile_builder import (
    ProfileBuilder,
    build,
    read_corpus_text,
    DEFAULT_MIN_FREQUENCY,
)

from lpg_profiles.profile_writer import (
    write_profile,
    read_profile,
)

from lpg_profiles.orchestrator import ProfileOrchestrator

__version__ = "1.0.0"

__all__ = [
    "ProfileBuilder",
    "build",
    "read_corpus_text",
    "DEFAULT_MIN_FREQUENCY",
    "write_profile",
    "read_profile",
    "ProfileOrchestrator",
]
