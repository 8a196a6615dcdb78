"""
LPG Profiles Profile Writer - langdetect Profile Serialization

Profiles are stored as the JSON documents the langdetect detector reads:

    {"freq": {"a": 1234, "ab": 56, ...}, "n_words": [n1, n2, n3], "name": "en"}

The file is named after the language code and written atomically, so a
failed write never leaves a truncated profile behind.
"""

from __future__ import annotations
import os
import json
import logging
import tempfile
from pathlib import Path
from typing import Union

from lpg_core.errors import WriteError
from lpg_core.models import NgramFrequencyProfile

logger = logging.getLogger(__name__)


def write_profile(profile: NgramFrequencyProfile, directory: Union[str, Path]) -> Path:
    """Write ``profile`` to ``directory/<language>`` and return the path"""
    directory = Path(directory)
    target = directory / profile.language
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=directory,
            prefix=f".{profile.language}.",
            suffix=".tmp",
            delete=False
        ) as f:
            tmp_name = f.name
            json.dump(profile.to_dict(), f, ensure_ascii=False)
        os.replace(tmp_name, target)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise WriteError(f"Could not write profile to {target}: {e}", profile.language) from e

    logger.info(f"{profile.language}: wrote profile with {len(profile)} n-grams to {target}")
    return target


def read_profile(path: Union[str, Path]) -> NgramFrequencyProfile:
    """Load a profile written by write_profile"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return NgramFrequencyProfile.from_dict(data)
