from __future__ import annotations

import asyncio
import io
import logging
import uuid
import zipfile
from typing import List, Optional, Tuple

from .exceptions import PackagingError
from .models import ArticlePayload
from .sanitizer import sanitize_html
from .utils import xml_escape
from .xhtml import to_xhtml

log = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Article"
UNKNOWN_AUTHOR = "Unknown"
MIMETYPE = b"application/epub+zip"


def build_container_xml() -> str:
    return (
        "<?xml version=\"1.0\" encoding=\"UTF-8\"?>\n"
        "<container version=\"1.0\" xmlns=\"urn:oasis:names:tc:opendocument:xmlns:container\">\n"
        "  <rootfiles>\n"
        "    <rootfile full-path=\"OEBPS/content.opf\" media-type=\"application/oebps-package+xml\"/>\n"
        "  </rootfiles>\n"
        "</container>\n"
    )


def build_toc_ncx(book_id: str, title: str) -> str:
    title_xml = xml_escape(title)
    return (
        "<?xml version=\"1.0\" encoding=\"UTF-8\"?>\n"
        "<ncx xmlns=\"http://www.daisy.org/z3986/2005/ncx/\" version=\"2005-1\">\n"
        "  <head>\n"
        "    <meta name=\"dtb:uid\" content=\"urn:uuid:%s\"/>\n"
        "    <meta name=\"dtb:depth\" content=\"1\"/>\n"
        "    <meta name=\"dtb:totalPageCount\" content=\"0\"/>\n"
        "    <meta name=\"dtb:maxPageNumber\" content=\"0\"/>\n"
        "  </head>\n"
        "  <docTitle><text>%s</text></docTitle>\n"
        "  <navMap>\n"
        "    <navPoint id=\"navPoint-1\" playOrder=\"1\">\n"
        "      <navLabel><text>%s</text></navLabel>\n"
        "      <content src=\"content.xhtml\"/>\n"
        "    </navPoint>\n"
        "  </navMap>\n"
        "</ncx>\n"
    ) % (xml_escape(book_id), title_xml, title_xml)


def build_content_opf(book_id: str, title: str, author: str, source_url: Optional[str], lang: str = "en") -> str:
    dc_source = f"    <dc:source>{xml_escape(source_url)}</dc:source>\n" if source_url else ""
    return (
        "<?xml version=\"1.0\" encoding=\"UTF-8\"?>\n"
        "<package xmlns=\"http://www.idpf.org/2007/opf\" version=\"2.0\" unique-identifier=\"BookId\">\n"
        "  <metadata xmlns:dc=\"http://purl.org/dc/elements/1.1/\" xmlns:opf=\"http://www.idpf.org/2007/opf\">\n"
        "    <dc:title>%s</dc:title>\n"
        "    <dc:creator opf:role=\"aut\">%s</dc:creator>\n"
        "    <dc:language>%s</dc:language>\n"
        "    <dc:identifier id=\"BookId\" opf:scheme=\"UUID\">urn:uuid:%s</dc:identifier>\n"
        "%s"
        "  </metadata>\n"
        "  <manifest>\n"
        "    <item id=\"ncx\" href=\"toc.ncx\" media-type=\"application/x-dtbncx+xml\"/>\n"
        "    <item id=\"content\" href=\"content.xhtml\" media-type=\"application/xhtml+xml\"/>\n"
        "  </manifest>\n"
        "  <spine toc=\"ncx\">\n"
        "    <itemref idref=\"content\"/>\n"
        "  </spine>\n"
        "</package>\n"
    ) % (xml_escape(title), xml_escape(author), xml_escape(lang), xml_escape(book_id), dc_source)


def build_content_xhtml(title: str, author: str, source_url: Optional[str], body_xhtml: str, lang: str = "en") -> str:
    title_xml = xml_escape(title)
    byline = f"  <p class=\"byline\">{xml_escape(author)}</p>\n" if author != UNKNOWN_AUTHOR else ""
    source = ""
    if source_url:
        url_xml = xml_escape(source_url)
        source = f"  <p class=\"source\">Original source: <a href=\"{url_xml}\">{url_xml}</a></p>\n"
    return (
        "<?xml version=\"1.0\" encoding=\"UTF-8\"?>\n"
        "<!DOCTYPE html PUBLIC \"-//W3C//DTD XHTML 1.1//EN\" \"http://www.w3.org/TR/xhtml11/DTD/xhtml11.dtd\">\n"
        "<html xmlns=\"http://www.w3.org/1999/xhtml\" xml:lang=\"%s\">\n"
        "<head>\n"
        "  <title>%s</title>\n"
        "</head>\n"
        "<body>\n"
        "  <h1>%s</h1>\n"
        "%s"
        "%s"
        "  <hr />\n"
        "%s\n"
        "</body>\n"
        "</html>\n"
    ) % (xml_escape(lang), title_xml, title_xml, byline, source, body_xhtml)


def article_fields(payload: ArticlePayload) -> Tuple[str, str, Optional[str]]:
    """(title, author, source_url) with placeholders for missing values."""
    title = (payload.title or "").strip() or DEFAULT_TITLE
    author = (payload.byline or payload.site_name or "").strip() or UNKNOWN_AUTHOR
    source_url = (payload.source_url or "").strip() or None
    return title, author, source_url


def epub_parts(payload: ArticlePayload, book_id: str, *, lang: str = "en") -> List[Tuple[str, bytes]]:
    """Ordered archive entries; the mimetype entry is always first."""
    title, author, source_url = article_fields(payload)
    body = to_xhtml(sanitize_html(payload.html or "", source_url))
    return [
        ("mimetype", MIMETYPE),
        ("META-INF/container.xml", build_container_xml().encode("utf-8")),
        ("OEBPS/toc.ncx", build_toc_ncx(book_id, title).encode("utf-8")),
        ("OEBPS/content.opf", build_content_opf(book_id, title, author, source_url, lang).encode("utf-8")),
        ("OEBPS/content.xhtml", build_content_xhtml(title, author, source_url, body, lang).encode("utf-8")),
    ]


def write_epub(parts: List[Tuple[str, bytes]]) -> bytes:
    buf = io.BytesIO()
    try:
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, data in parts:
                if name == "mimetype":
                    zi = zipfile.ZipInfo("mimetype")
                    zi.compress_type = zipfile.ZIP_STORED
                    zf.writestr(zi, data)
                else:
                    zf.writestr(name, data)
    except Exception as e:  # noqa: BLE001
        raise PackagingError(f"Failed to write EPUB archive: {e}") from e
    return buf.getvalue()


def package_article(payload: ArticlePayload, *, lang: str = "en") -> bytes:
    """Package one article into a single-document EPUB 2 archive."""
    book_id = str(uuid.uuid4())
    data = write_epub(epub_parts(payload, book_id, lang=lang))
    log.info("packaged article %r (%d bytes, id=%s)", payload.title, len(data), book_id)
    return data


async def package_article_async(payload: ArticlePayload, *, lang: str = "en") -> bytes:
    return await asyncio.to_thread(package_article, payload, lang=lang)
