"""Tests for fetching and content-type-aware text extraction"""

import io
import zipfile

import pytest
import requests

from lpg_collection import content_extractor
from lpg_collection.content_extractor import (
    DOCX_MIME,
    PDF_MIME,
    PPTX_MIME,
    ArticleHtmlExtractor,
    ContentExtractor,
    ExtractorRegistry,
    FetchedResource,
    MarkupExtractor,
    OpenDocumentExtractor,
    PdfExtractor,
    PlainTextExtractor,
    ResourceFetcher,
    WebTextSource,
    parse_content_type,
    sniff_mime_type,
)
from lpg_core.errors import ExtractionError, FetchError


def _resource(content_type, body, encoding=None, url="http://example.org/doc"):
    return FetchedResource(url=url, status_code=200, content_type=content_type, body=body, encoding=encoding)


class RecordingExtractor(ContentExtractor):
    name = "recording"

    def __init__(self, mime):
        self.mime = mime
        self.seen = []

    def handles(self, mime_type):
        return mime_type == self.mime

    def extract(self, resource):
        self.seen.append(resource.url)
        return f"{self.mime} text"


class FakeResponse:
    def __init__(self, status_code=200, content=b"", headers=None, reason="OK", apparent_encoding="utf-8"):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.reason = reason
        self.apparent_encoding = apparent_encoding


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def test_parse_content_type():
    assert parse_content_type("text/html; charset=UTF-8") == ("text/html", "UTF-8")
    assert parse_content_type("Application/PDF") == ("application/pdf", None)
    assert parse_content_type('text/plain; charset="latin-1"') == ("text/plain", "latin-1")
    assert parse_content_type(None) == ("", None)


def test_html_always_uses_the_article_extractor():
    html = RecordingExtractor("text/html")
    registry = ExtractorRegistry(html_extractor=html, extractors=[PlainTextExtractor()])
    resource = _resource("text/html; charset=utf-8", b"<html><body>x</body></html>")
    assert registry.select(resource) is html
    assert registry.extract(resource) == "text/html text"


def test_article_extractor_returns_main_content(monkeypatch):
    calls = {}

    def fake_extract(html, url=None, **kwargs):
        calls["html"] = html
        calls["url"] = url
        return "Main article body"

    monkeypatch.setattr(content_extractor.trafilatura, "extract", fake_extract)
    text = ArticleHtmlExtractor().extract(_resource("text/html", "<p>Giella</p>".encode("utf-8")))
    assert text == "Main article body"
    assert calls["html"] == "<p>Giella</p>"
    assert calls["url"] == "http://example.org/doc"


def test_article_extractor_without_main_content_returns_empty(monkeypatch):
    monkeypatch.setattr(content_extractor.trafilatura, "extract", lambda html, **kwargs: None)
    assert ArticleHtmlExtractor().extract(_resource("text/html", b"<html></html>")) == ""


def test_plain_text_uses_declared_encoding():
    resource = _resource("text/plain; charset=iso-8859-1", "Sámi".encode("latin-1"), encoding="iso-8859-1")
    assert ExtractorRegistry().extract(resource) == "Sámi"


def test_markup_extractor_drops_scripts():
    body = b"<html><body><p>Hello</p><script>var x = 1;</script></body></html>"
    text = MarkupExtractor().extract(_resource("application/xhtml+xml", body))
    assert "Hello" in text
    assert "var x" not in text


def test_registered_extractor_takes_precedence():
    registry = ExtractorRegistry()
    custom = RecordingExtractor("text/plain")
    registry.register(custom)
    assert registry.extract(_resource("text/plain", b"abc")) == "text/plain text"


def test_octet_stream_is_sniffed():
    registry = ExtractorRegistry()
    assert registry.extract(_resource("application/octet-stream", b"plain words")) == "plain words"


def test_sniff_mime_type():
    assert sniff_mime_type(b"%PDF-1.7\n...") == PDF_MIME
    assert sniff_mime_type(b"  <!DOCTYPE html><html></html>") == "text/html"
    assert sniff_mime_type(b"<?xml version='1.0'?><a/>") == "application/xml"
    assert sniff_mime_type(b"just text") == "text/plain"
    assert sniff_mime_type(b"\x89PNG\r\n\x1a\n\x00\xff") is None


def test_unsupported_content_type_raises():
    registry = ExtractorRegistry()
    with pytest.raises(ExtractionError):
        registry.extract(_resource("image/png", b"\x89PNG\r\n\x1a\n\x00\xff"))


def test_corrupt_pdf_raises_extraction_error():
    registry = ExtractorRegistry()
    with pytest.raises(ExtractionError):
        registry.extract(_resource(PDF_MIME, b"%PDF-1.4\nthis is not really a pdf"))


def test_docx_text_is_extracted():
    docx = pytest.importorskip("docx")
    document = docx.Document()
    document.add_paragraph("Bures boahtin")
    document.add_paragraph("Giitu")
    buffer = io.BytesIO()
    document.save(buffer)

    registry = ExtractorRegistry()
    assert registry.extract(_resource(DOCX_MIME, buffer.getvalue())) == "Bures boahtin\nGiitu"
    assert sniff_mime_type(buffer.getvalue()) == DOCX_MIME


def test_fetcher_returns_resource_with_charset():
    response = FakeResponse(
        content="Giitu".encode("utf-8"),
        headers={"Content-Type": "text/plain; charset=utf-8"},
        apparent_encoding="ascii",
    )
    session = FakeSession(response)
    resource = ResourceFetcher(timeout=4, session=session).fetch("http://example.org/a")
    assert session.calls == [("http://example.org/a", 4)]
    assert resource.mime_type == "text/plain"
    assert resource.encoding == "utf-8"
    assert resource.decode() == "Giitu"
    assert resource.to_dict()["size"] == 5


def test_fetcher_falls_back_to_detected_encoding():
    response = FakeResponse(content=b"abc", headers={"Content-Type": "text/plain"}, apparent_encoding="ascii")
    resource = ResourceFetcher(session=FakeSession(response)).fetch("http://example.org/a")
    assert resource.encoding == "ascii"


def test_fetcher_rejects_non_success_status():
    session = FakeSession(FakeResponse(status_code=404, reason="Not Found"))
    with pytest.raises(FetchError) as excinfo:
        ResourceFetcher(session=session).fetch("http://example.org/missing")
    assert excinfo.value.status_code == 404


def test_fetcher_wraps_transport_errors():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    with pytest.raises(FetchError):
        ResourceFetcher(session=session).fetch("http://example.org/down")


def test_web_text_source_fetches_and_extracts():
    response = FakeResponse(content=b"hello world", headers={"Content-Type": "text/plain"})
    session = FakeSession(response)
    with WebTextSource(ResourceFetcher(session=session)) as source:
        assert source.fetch_text("http://example.org/a") == "hello world"
    assert session.closed


ARTICLE_PAGE = """<!DOCTYPE html>
<html lang="se">
<head><title>Sámi giella</title></head>
<body>
  <nav>
    <ul>
      <li><a href="/">Menu item</a></li>
      <li><a href="/news">Menu item news</a></li>
      <li><a href="/contact">Menu item contact</a></li>
    </ul>
  </nav>
  <article>
    <h1>Northern Sami language revival</h1>
    <p>The northern Sami language is spoken in Norway, Sweden and Finland by
    several tens of thousands of people, and schools across the region now
    teach it as a first language to children from many different families.</p>
    <p>Newspapers, radio programmes and television broadcasts in the language
    have grown steadily over the last decades, and new dictionaries and
    grammars are published by universities and language centres every year.</p>
    <p>Writers and musicians also use the language in their work, which helps
    young speakers hear it in everyday settings far beyond the classroom and
    keeps the vocabulary alive for the generations that follow them.</p>
  </article>
  <footer><p>Copyright notice and cookie settings</p></footer>
</body>
</html>
"""


def _minimal_pdf(text):
    stream = f"BT /F1 12 Tf 20 100 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 300 144] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref)
    return bytes(out)


def _zip(members):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in members.items():
            archive.writestr(name, data)
    return buffer.getvalue()


ODT_CONTENT = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<office:document-content'
    ' xmlns:office="urn:oasis:names:tc:opendocument:xmlns:office:1.0"'
    ' xmlns:text="urn:oasis:names:tc:opendocument:xmlns:text:1.0">'
    '<office:body><office:text>'
    '<text:h text:outline-level="1">Sámi giella</text:h>'
    '<text:p>Bures<text:s/>boahtin</text:p>'
    '<text:p/>'
    '</office:text></office:body></office:document-content>'
)


def _slide(text):
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main"'
        ' xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
        '<p:cSld><p:spTree><p:sp><p:txBody>'
        f'<a:p><a:r><a:t>{text}</a:t></a:r><a:r><a:t> slide</a:t></a:r></a:p>'
        '</p:txBody></p:sp></p:spTree></p:cSld></p:sld>'
    )


def test_html_page_keeps_article_and_drops_navigation():
    text = ExtractorRegistry().extract(_resource("text/html; charset=utf-8", ARTICLE_PAGE.encode("utf-8")))
    assert "spoken in Norway, Sweden and Finland" in text
    assert "keeps the vocabulary alive" in text
    assert "Menu item" not in text


def test_pdf_text_is_extracted():
    body = _minimal_pdf("Bures boahtin")
    assert sniff_mime_type(body) == PDF_MIME
    text = PdfExtractor().extract(_resource(PDF_MIME, body))
    assert "Bures" in text
    assert "boahtin" in text


def test_opendocument_text_is_extracted():
    body = _zip({"mimetype": "application/vnd.oasis.opendocument.text", "content.xml": ODT_CONTENT})
    assert sniff_mime_type(body) == "application/vnd.oasis.opendocument.text"
    assert ExtractorRegistry().extract(_resource("application/octet-stream", body)) == "Sámi giella\nBures boahtin"


def test_opendocument_without_content_raises():
    body = _zip({"mimetype": "application/vnd.oasis.opendocument.text"})
    with pytest.raises(ExtractionError):
        OpenDocumentExtractor().extract(_resource("application/vnd.oasis.opendocument.text", body))


def test_pptx_slides_are_extracted_in_order():
    body = _zip({
        "ppt/presentation.xml": "<p:presentation/>",
        "ppt/slides/slide10.xml": _slide("Second"),
        "ppt/slides/slide2.xml": _slide("First"),
    })
    assert sniff_mime_type(body) == PPTX_MIME
    assert ExtractorRegistry().extract(_resource(PPTX_MIME, body)) == "First slide\nSecond slide"


@pytest.mark.parametrize("content_type", ["text/rtf", "application/octet-stream"])
def test_rtf_is_not_passed_through_as_plain_text(content_type):
    with pytest.raises(ExtractionError):
        ExtractorRegistry().extract(_resource(content_type, b"{\\rtf1\\ansi Bures}"))
