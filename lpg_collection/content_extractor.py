"""
LPG Collection Content Extractor - Content-Type-Aware Text Extraction

This module turns a fetched web resource into one plain-text string.
HTML pages go through boilerplate removal (trafilatura) so only the main
article body survives; every other format goes through a generic
document-to-text extractor chosen by MIME type, with magic-byte sniffing
as the fallback when the declared type is missing or unknown.

New formats are supported by registering another ContentExtractor with
the ExtractorRegistry; the crawler never branches on content type.
"""

from __future__ import annotations
import io
import logging
import re
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Any

import requests
import trafilatura
from bs4 import BeautifulSoup

from lpg_core.config_runtime import DEFAULT_USER_AGENT
from lpg_core.errors import ExtractionError, FetchError

logger = logging.getLogger(__name__)


HTML_MIME = "text/html"
PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
RTF_MIMES = {"application/rtf", "text/rtf"}
ODF_MIMES = {
    "application/vnd.oasis.opendocument.text",
    "application/vnd.oasis.opendocument.presentation",
    "application/vnd.oasis.opendocument.spreadsheet",
}
GENERIC_MIMES = {"", "application/octet-stream", "binary/octet-stream"}
MARKUP_MIMES = {"application/xhtml+xml", "application/xml", "text/xml", HTML_MIME}


def parse_content_type(content_type: Optional[str]) -> tuple:
    """Split a Content-Type header into (mime type, charset)"""
    if not content_type:
        return "", None
    parts = [p.strip() for p in content_type.split(";")]
    mime = parts[0].lower()
    charset = None
    for param in parts[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value:
            charset = value.strip().strip("\"'") or None
    return mime, charset


@dataclass
class FetchedResource:
    """Body and headers of one successful fetch"""
    url: str
    status_code: int
    content_type: str
    body: bytes
    encoding: Optional[str] = None

    @property
    def mime_type(self) -> str:
        return parse_content_type(self.content_type)[0]

    def decode(self) -> str:
        encoding = self.encoding or "utf-8"
        try:
            return self.body.decode(encoding, errors="replace")
        except LookupError:
            logger.warning(f"Unknown encoding {encoding!r} for {self.url}, decoding as UTF-8")
            return self.body.decode("utf-8", errors="replace")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "status_code": self.status_code,
            "content_type": self.content_type,
            "encoding": self.encoding,
            "size": len(self.body),
        }


def sniff_mime_type(body: bytes) -> Optional[str]:
    """Guess a MIME type from the leading bytes of a document"""
    head = body[:1024].lstrip(b"\xef\xbb\xbf \t\r\n")
    lowered = head[:256].lower()
    if head.startswith(b"%PDF-"):
        return PDF_MIME
    if head.startswith(b"PK\x03\x04"):
        try:
            with zipfile.ZipFile(io.BytesIO(body)) as archive:
                names = set(archive.namelist())
                if "word/document.xml" in names:
                    return DOCX_MIME
                if "ppt/presentation.xml" in names:
                    return PPTX_MIME
                if "mimetype" in names:
                    declared = archive.read("mimetype").decode("ascii", errors="replace").strip()
                    return declared if declared in ODF_MIMES else None
        except (zipfile.BadZipFile, KeyError):
            return None
        return None
    if head.startswith(b"{\\rtf"):
        return "application/rtf"
    if lowered.startswith(b"<!doctype html") or lowered.startswith(b"<html"):
        return HTML_MIME
    if lowered.startswith(b"<?xml"):
        return "application/xml"
    try:
        body[:4096].decode("utf-8")
    except UnicodeDecodeError:
        return None
    return "text/plain"


class ContentExtractor(ABC):
    """Converts one kind of document into plain text"""

    name: str = "extractor"

    @abstractmethod
    def handles(self, mime_type: str) -> bool:
        ...

    @abstractmethod
    def extract(self, resource: FetchedResource) -> str:
        ...


class ArticleHtmlExtractor(ContentExtractor):
    """Main-content extraction for HTML pages, dropping navigation and templates"""

    name = "article_html"

    def __init__(self, include_tables: bool = True, favor_precision: bool = True):
        self.include_tables = include_tables
        self.favor_precision = favor_precision

    def handles(self, mime_type: str) -> bool:
        return mime_type == HTML_MIME

    def extract(self, resource: FetchedResource) -> str:
        try:
            text = trafilatura.extract(
                resource.decode(),
                url=resource.url,
                include_comments=False,
                include_tables=self.include_tables,
                favor_precision=self.favor_precision,
            )
        except Exception as e:
            raise ExtractionError(resource.url, f"boilerplate extraction failed: {e}") from e
        return text or ""


class PdfExtractor(ContentExtractor):
    name = "pdf"

    def handles(self, mime_type: str) -> bool:
        return mime_type == PDF_MIME

    def extract(self, resource: FetchedResource) -> str:
        from pypdf import PdfReader
        from pypdf.errors import PdfReadError

        try:
            reader = PdfReader(io.BytesIO(resource.body))
            parts = [page.extract_text() or "" for page in reader.pages]
        except (PdfReadError, ValueError, OSError, KeyError) as e:
            raise ExtractionError(resource.url, f"unreadable PDF: {e}") from e
        return "\n".join(part for part in parts if part)


class DocxExtractor(ContentExtractor):
    name = "docx"

    def handles(self, mime_type: str) -> bool:
        return mime_type == DOCX_MIME

    def extract(self, resource: FetchedResource) -> str:
        import docx
        from docx.opc.exceptions import PackageNotFoundError

        try:
            document = docx.Document(io.BytesIO(resource.body))
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
            raise ExtractionError(resource.url, f"unreadable DOCX: {e}") from e
        return "\n".join(p.text for p in document.paragraphs if p.text)


def _read_zip_member(resource: FetchedResource, member: str, kind: str) -> str:
    try:
        with zipfile.ZipFile(io.BytesIO(resource.body)) as archive:
            return archive.read(member).decode("utf-8", errors="replace")
    except (zipfile.BadZipFile, KeyError) as e:
        raise ExtractionError(resource.url, f"unreadable {kind}: {e}") from e


class OpenDocumentExtractor(ContentExtractor):
    """Paragraph and heading text of OpenDocument files (content.xml)"""

    name = "opendocument"

    def handles(self, mime_type: str) -> bool:
        return mime_type in ODF_MIMES

    def extract(self, resource: FetchedResource) -> str:
        soup = BeautifulSoup(_read_zip_member(resource, "content.xml", "OpenDocument"), "html.parser")
        # text:s, text:tab and text:line-break stand for whitespace
        for tag in soup.find_all(["text:s", "text:tab", "text:line-break"]):
            tag.replace_with(" ")
        blocks = [tag.get_text("") for tag in soup.find_all(["text:h", "text:p"])]
        return "\n".join(block for block in blocks if block.strip())


class PptxExtractor(ContentExtractor):
    """Slide text of PowerPoint presentations, in slide order"""

    name = "pptx"

    _SLIDE_RE = re.compile(r"^ppt/slides/slide(\d+)\.xml$")

    def handles(self, mime_type: str) -> bool:
        return mime_type == PPTX_MIME

    def extract(self, resource: FetchedResource) -> str:
        try:
            with zipfile.ZipFile(io.BytesIO(resource.body)) as archive:
                slides = sorted(
                    (int(match.group(1)), name)
                    for name in archive.namelist()
                    for match in [self._SLIDE_RE.match(name)]
                    if match
                )
                xml_parts = [archive.read(name).decode("utf-8", errors="replace") for _, name in slides]
        except zipfile.BadZipFile as e:
            raise ExtractionError(resource.url, f"unreadable PPTX: {e}") from e

        lines = []
        for xml in xml_parts:
            soup = BeautifulSoup(xml, "html.parser")
            for paragraph in soup.find_all("a:p"):
                text = "".join(run.get_text("") for run in paragraph.find_all("a:t"))
                if text.strip():
                    lines.append(text)
        return "\n".join(lines)


class MarkupExtractor(ContentExtractor):
    """Generic XML/XHTML text, without boilerplate removal"""

    name = "markup"

    def handles(self, mime_type: str) -> bool:
        return mime_type in MARKUP_MIMES or mime_type.endswith("+xml")

    def extract(self, resource: FetchedResource) -> str:
        soup = BeautifulSoup(resource.decode(), "html.parser")
        for tag in soup(["script", "style", "noscript"]):
            tag.decompose()
        return soup.get_text(" ")


class PlainTextExtractor(ContentExtractor):
    name = "plain_text"

    def handles(self, mime_type: str) -> bool:
        return mime_type.startswith("text/") and mime_type not in RTF_MIMES

    def extract(self, resource: FetchedResource) -> str:
        return resource.decode()


class ExtractorRegistry:
    """Selects an extractor by MIME type

    ``text/html`` always uses the HTML extractor. Everything else is
    matched against the generic extractors in registration order, first
    by declared type and then by sniffed type.
    """

    def __init__(
        self,
        html_extractor: Optional[ContentExtractor] = None,
        extractors: Optional[List[ContentExtractor]] = None
    ):
        self.html_extractor = html_extractor or ArticleHtmlExtractor()
        if extractors is None:
            extractors = [
                PdfExtractor(),
                DocxExtractor(),
                OpenDocumentExtractor(),
                PptxExtractor(),
                MarkupExtractor(),
                PlainTextExtractor(),
            ]
        self.extractors: List[ContentExtractor] = list(extractors)

    def register(self, extractor: ContentExtractor, first: bool = True):
        if first:
            self.extractors.insert(0, extractor)
        else:
            self.extractors.append(extractor)

    def _generic_for(self, mime_type: str) -> Optional[ContentExtractor]:
        for extractor in self.extractors:
            if extractor.handles(mime_type):
                return extractor
        return None

    def select(self, resource: FetchedResource) -> ContentExtractor:
        mime = resource.mime_type
        if mime == HTML_MIME:
            return self.html_extractor

        extractor = None if mime in GENERIC_MIMES else self._generic_for(mime)
        if extractor is None:
            sniffed = sniff_mime_type(resource.body)
            if sniffed:
                logger.debug(f"Sniffed {sniffed} for {resource.url} (declared {mime or 'none'})")
                extractor = self._generic_for(sniffed)
        if extractor is None:
            raise ExtractionError(resource.url, f"unsupported content type {mime or 'unknown'}")
        return extractor

    def extract(self, resource: FetchedResource) -> str:
        extractor = self.select(resource)
        logger.debug(f"URL {resource.url} has type {resource.mime_type or 'unknown'}, using {extractor.name}")
        try:
            return extractor.extract(resource)
        except ExtractionError:
            raise
        except Exception as e:
            # third-party parsers raise arbitrary types on malformed input
            raise ExtractionError(resource.url, f"{extractor.name} failed: {type(e).__name__}: {e}") from e


class ResourceFetcher:
    """Blocking HTTP fetcher with a per-request timeout and no retries"""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None
    ):
        self.timeout = timeout
        self._session = session
        self.user_agent = user_agent

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": self.user_agent})
        return self._session

    def fetch(self, url: str) -> FetchedResource:
        session = self._get_session()
        try:
            response = session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

        if response.status_code != 200:
            raise FetchError(
                url,
                f"got response {response.status_code} {response.reason}",
                status_code=response.status_code
            )

        content_type = response.headers.get("Content-Type", "")
        _, charset = parse_content_type(content_type)
        body = response.content
        encoding = charset or (response.apparent_encoding if body else None)
        resource = FetchedResource(
            url=url,
            status_code=response.status_code,
            content_type=content_type,
            body=body,
            encoding=encoding,
        )
        logger.debug(f"Fetched {resource.to_dict()}")
        return resource

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None


class WebTextSource:
    """Fetches a URL and returns its extracted plain text"""

    def __init__(
        self,
        fetcher: Optional[ResourceFetcher] = None,
        registry: Optional[ExtractorRegistry] = None
    ):
        self.fetcher = fetcher or ResourceFetcher()
        self.registry = registry or ExtractorRegistry()

    def fetch_text(self, url: str) -> str:
        resource = self.fetcher.fetch(url)
        return self.registry.extract(resource)

    def close(self):
        self.fetcher.close()

    def __enter__(self) -> WebTextSource:
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
