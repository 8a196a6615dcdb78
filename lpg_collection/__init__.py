"""
LPG Collection - Corpus Collection Package

This package fetches documents from URL lists, flattens them to plain
text and accumulates cleaned text into per-language corpus caches.

Modules:
    content_extractor: HTTP fetching and content-type-aware extraction
    crawler: Budget-bounded sequential crawler
"""

from lpg_collection.content_extractor import (
    FetchedResource,
    ContentExtractor,
    ArticleHtmlExtractor,
    PdfExtractor,
    DocxExtractor,
    OpenDocumentExtractor,
    PptxExtractor,
    MarkupExtractor,
    PlainTextExtractor,
    ExtractorRegistry,
    ResourceFetcher,
    WebTextSource,
    parse_content_type,
    sniff_mime_type,
)

from lpg_collection.crawler import (
    Crawler,
    crawl,
    parse_url,
    is_skippable,
)

__version__ = "1.0.0"

__all__ = [
    "FetchedResource",
    "ContentExtractor",
    "ArticleHtmlExtractor",
    "PdfExtractor",
    "DocxExtractor",
    "OpenDocumentExtractor",
    "PptxExtractor",
    "MarkupExtractor",
    "PlainTextExtractor",
    "ExtractorRegistry",
    "ResourceFetcher",
    "WebTextSource",
    "parse_content_type",
    "sniff_mime_type",
    "Crawler",
    "crawl",
    "parse_url",
    "is_skippable",
]
