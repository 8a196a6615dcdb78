"""
LPG Collection Crawler - Budget-Bounded URL List Crawler

This module reads an ordered URL list and accumulates cleaned text into a
corpus cache file, one line per attempted URL, until a total size budget
is exceeded.

Budget semantics: the running total (sum of cleaned text lengths) is
checked before each new line of the URL list is read, so the URL in
progress when the limit is crossed always completes. Comment lines,
blank lines and malformed URLs never touch the counters.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlsplit

from lpg_core.errors import ExtractionError, FetchError, MalformedUrlError
from lpg_core.models import CrawlResult
from lpg_utils.cleaning_rules import RuleChain, collapse_whitespace
from lpg_collection.content_extractor import WebTextSource

logger = logging.getLogger(__name__)

MEGABYTE = 1024 * 1024

ALLOWED_SCHEMES = ("http", "https")


def parse_url(line: str, language: Optional[str] = None) -> str:
    """Validate one URL list entry, raising MalformedUrlError"""
    url = line.strip()
    if "\ufffd" in url:
        raise MalformedUrlError(url, "undecodable bytes", language)
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise MalformedUrlError(url, str(e), language) from e
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise MalformedUrlError(url, f"unsupported scheme {parts.scheme or 'none'!r}", language)
    if not parts.netloc:
        raise MalformedUrlError(url, "missing host", language)
    return url


def is_skippable(line: str) -> bool:
    """Blank lines and '#' comments are not URL entries"""
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


class Crawler:
    """Sequential crawler for one language"""

    def __init__(
        self,
        text_source: WebTextSource,
        rule_chain: RuleChain,
        language: Optional[str] = None
    ):
        self.text_source = text_source
        self.rule_chain = rule_chain
        self.language = language or "?"

    def _fetch_cleaned(self, url: str) -> str:
        text = collapse_whitespace(self.text_source.fetch_text(url))
        return self.rule_chain.apply(text)

    def crawl(
        self,
        url_list: Union[str, Path],
        corpus_cache_target: Union[str, Path],
        max_total_megabytes: float = 3
    ) -> CrawlResult:
        """Crawl ``url_list`` into ``corpus_cache_target``

        Undecodable bytes in the URL list never abort the crawl: a comment
        stays a comment and a URL line holding them counts as malformed.

        Raises OSError only if either file cannot be opened.
        """
        limit = int(max_total_megabytes * MEGABYTE)
        result = CrawlResult()
        lang = self.language

        with open(url_list, "r", encoding="utf-8", errors="replace") as urls, \
             open(corpus_cache_target, "w", encoding="utf-8", newline="\n") as cache:
            for line in urls:
                if result.bytes_written > limit:
                    break
                if is_skippable(line):
                    continue

                try:
                    url = parse_url(line, lang)
                except MalformedUrlError as e:
                    result.urls_malformed += 1
                    logger.warning(f"{lang}#{result.urls_attempted}: Skipping malformed URL {line.strip()!r} ({e.message})")
                    continue

                result.urls_attempted += 1
                try:
                    text = self._fetch_cleaned(url)
                except (FetchError, ExtractionError) as e:
                    result.urls_failed += 1
                    logger.warning(f"{lang}: Failed fetching from URL {url}, due to {e.message}, skipping")
                    cache.write("\n")
                    continue

                cache.write(text + "\n")
                result.bytes_written += len(text)
                logger.info(f"{lang}: Fetched {len(text)} bytes from {url}")

        if result.bytes_written > limit:
            result.budget_exceeded = True
            logger.info(
                f"{lang}: Aborting crawl, limit of {max_total_megabytes}Mb text exceeded "
                f"after {result.urls_attempted} urls"
            )
        else:
            logger.info(
                f"{lang}: Completed crawl of {result.bytes_written} bytes text "
                f"from {result.urls_attempted} urls"
            )
        return result


def crawl(
    url_list: Union[str, Path],
    corpus_cache_target: Union[str, Path],
    max_total_megabytes: float,
    rule_chain: RuleChain,
    text_source: Optional[WebTextSource] = None,
    language: Optional[str] = None
) -> CrawlResult:
    """Crawl with a fresh text source unless one is given"""
    if text_source is not None:
        return Crawler(text_source, rule_chain, language).crawl(url_list, corpus_cache_target, max_total_megabytes)
    with WebTextSource() as source:
        return Crawler(source, rule_chain, language).crawl(url_list, corpus_cache_target, max_total_megabytes)
