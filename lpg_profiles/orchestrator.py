"""
LPG Profiles Orchestrator - Per-Language Profile Build Pipeline

This module drives one language build through its states:

    INIT -> CONFIG_LOADED -> CORPUS_READY -> PROFILE_BUILT -> WRITTEN

Any gate may end in SKIPPED instead. Failures are contained per language:
a skipped language is logged and reported, and the rest of a batch
carries on. Languages share no mutable state, so a batch may run on a
thread pool.
"""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from lpg_core.config_runtime import (
    BuildSettings,
    ProfilePaths,
    load_profile_config,
    load_stopwords,
)
from lpg_core.errors import (
    ConfigLoadError,
    MissingInputError,
    ProfileBuildError,
    ProfileGeneratorError,
    WriteError,
)
from lpg_core.logging_monitoring import timed
from lpg_core.models import (
    BuildReport,
    BuildState,
    ProfileConfig,
    StopwordSet,
    validate_language_code,
)
from lpg_utils.cleaning_rules import RuleChain
from lpg_collection.content_extractor import ResourceFetcher, WebTextSource
from lpg_collection.crawler import Crawler
from lpg_profiles.profile_builder import ProfileBuilder
from lpg_profiles.profile_writer import write_profile

logger = logging.getLogger(__name__)


class ProfileOrchestrator:
    """Builds language profiles from per-language directories"""

    def __init__(
        self,
        settings: Optional[BuildSettings] = None,
        text_source_factory: Optional[Callable[[], WebTextSource]] = None,
        builder: Optional[ProfileBuilder] = None
    ):
        self.settings = settings or BuildSettings()
        self.text_source_factory = text_source_factory or self._default_text_source
        self.builder = builder or ProfileBuilder(self.settings.min_frequency)

    def _default_text_source(self) -> WebTextSource:
        fetcher = ResourceFetcher(
            timeout=self.settings.fetch_timeout,
            user_agent=self.settings.user_agent
        )
        return WebTextSource(fetcher)

    def has_reusable_cache(self, paths: ProfilePaths) -> bool:
        strings_file = paths.strings_file
        return strings_file.is_file() and strings_file.stat().st_size >= self.settings.min_cache_bytes

    def _check_language(self, language: str) -> ProfilePaths:
        is_valid, is_iso = validate_language_code(language)
        if not is_valid:
            raise ProfileGeneratorError(f"Profile {language!r} is not a valid profile name", language)
        if not is_iso:
            logger.warning(f"Profile code {language} not a valid ISO-639-1 code")

        paths = self.settings.paths_for(language)
        if not paths.directory.is_dir():
            raise MissingInputError(f"Profile directory {paths.directory} does not exist", language)
        return paths

    def _prepare_corpus(
        self,
        paths: ProfilePaths,
        config: ProfileConfig,
        stopwords: StopwordSet,
        report: BuildReport
    ):
        language = paths.language
        if self.has_reusable_cache(paths):
            logger.info(f"{language}: Found strings file {paths.strings_file.name}, using instead of re-crawling")
            report.reused_cache = True
            return

        if not paths.urls_file.is_file():
            raise MissingInputError(
                f"Neither strings file nor url file exists for profile {language}", language
            )

        rule_chain = RuleChain.for_language(config, stopwords)
        with self.text_source_factory() as source:
            crawler = Crawler(source, rule_chain, language)
            report.crawl = crawler.crawl(
                paths.urls_file,
                paths.strings_file,
                self.settings.max_total_megabytes
            )
        logger.info(f"{language}: Completed crawl for profile")

        if not paths.strings_file.is_file():
            raise MissingInputError(f"Could not find or generate {paths.strings_file.name}", language)

    def build(self, language: str) -> BuildReport:
        """Run one language through the full pipeline"""
        report = BuildReport(language=language)

        try:
            paths = self._check_language(language)
        except ProfileGeneratorError as e:
            logger.error(f"{e}, skipping")
            return report.skip(e)

        try:
            config = load_profile_config(paths)
            stopwords = load_stopwords(paths)
        except ConfigLoadError as e:
            logger.error(f"Failed to init properties for {language}: {e}")
            return report.skip(e)
        report.state = BuildState.CONFIG_LOADED

        try:
            with timed(logger, f"{language}: corpus preparation", language):
                self._prepare_corpus(paths, config, stopwords, report)
        except MissingInputError as e:
            logger.error(f"{e}, skipping")
            return report.skip(e)
        except OSError as e:
            logger.error(f"An IO operation failed while generating profile {language}. Reason: {e}")
            return report.skip(e)
        report.state = BuildState.CORPUS_READY

        try:
            profile = self.builder.build(paths.strings_file, language)
        except ProfileBuildError as e:
            logger.error(f"Failed building profile {language}: {e}, skipping")
            return report.skip(e)
        report.state = BuildState.PROFILE_BUILT
        report.ngram_count = len(profile)

        try:
            profile_path = write_profile(profile, paths.directory)
        except WriteError as e:
            logger.error(f"Failed creating profile for {language}: {e}")
            return report.skip(e)
        report.state = BuildState.WRITTEN
        report.profile_path = str(profile_path)

        logger.info(f"{language}: profile written {report.to_dict()}")
        return report

    def _build_contained(self, language: str) -> BuildReport:
        try:
            return self.build(language)
        except Exception as e:
            logger.exception(f"Unexpected failure building profile {language}")
            return BuildReport(language=language).skip(e)

    def build_all(self, languages: Iterable[str]) -> List[BuildReport]:
        """Build every language; results keep the input order"""
        languages = list(languages)
        jobs = max(1, self.settings.jobs)
        if jobs == 1 or len(languages) < 2:
            return [self._build_contained(language) for language in languages]

        with ThreadPoolExecutor(max_workers=min(jobs, len(languages))) as pool:
            return list(pool.map(self._build_contained, languages))

    def clean(self, languages: Iterable[str]) -> List[Path]:
        """Delete the .strings corpus cache of each language, nothing else"""
        deleted: List[Path] = []
        for language in languages:
            is_valid, _ = validate_language_code(language)
            if not is_valid:
                logger.error(f"Profile {language!r} is not a valid profile name, not cleaning")
                continue
            strings_file = self.settings.paths_for(language).strings_file
            if not strings_file.exists():
                logger.warning(f"{language}: no cache {strings_file.name} to delete")
                continue
            try:
                strings_file.unlink()
            except OSError as e:
                logger.error(f"{language}: could not delete {strings_file}: {e}")
                continue
            logger.info(f"Deleted file {strings_file.name}")
            deleted.append(strings_file)
        return deleted
