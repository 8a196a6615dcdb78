"""
LPG Utils - Text Utility Package

This package provides the text cleaning rule chain applied to every
fetched document before it enters a corpus cache.

Modules:
    cleaning_rules: Cleaning rules and the ordered rule chain
"""

from lpg_utils.cleaning_rules import (
    CleaningRule,
    MustContainCharsRule,
    MustNotContainCharsRule,
    PunctuationRule,
    DigitRunRule,
    StopwordRule,
    RuleChain,
    apply_rules,
    collapse_whitespace,
    contains_any,
)

__version__ = "1.0.0"

__all__ = [
    "CleaningRule",
    "MustContainCharsRule",
    "MustNotContainCharsRule",
    "PunctuationRule",
    "DigitRunRule",
    "StopwordRule",
    "RuleChain",
    "apply_rules",
    "collapse_whitespace",
    "contains_any",
]
