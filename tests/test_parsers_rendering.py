import io
import zipfile

import docx
import pytest
from pypdf import PdfReader

from linguala.parsers import (
    FileType,
    ParseError,
    Segment,
    SegmentType,
    detect_file_type,
    get_document_info,
    parse_docx,
    parse_file,
    parse_pdf,
    parse_txt,
)
from linguala.pipelines.rendering import create_translated_docx, create_translated_pdf


def test_detect_file_type_prefers_content(docx_bytes, pdf_bytes):
    assert detect_file_type("report.txt", pdf_bytes) == FileType.PDF
    assert detect_file_type("report.bin", docx_bytes) == FileType.DOCX
    assert detect_file_type("notes.pdf", b"plain words") == FileType.TXT
    assert detect_file_type("blob.txt", b"\xff\xfe\x00\x01") == FileType.UNKNOWN


def test_detect_file_type_other_zip_is_unknown():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("data.csv", "a,b")
    assert detect_file_type("sheet.docx", buffer.getvalue()) == FileType.UNKNOWN


@pytest.mark.parametrize(
    "name,expected",
    [("a.PDF", FileType.PDF), ("b.docx", FileType.DOCX), ("c.txt", FileType.TXT), ("d.odt", FileType.UNKNOWN)],
)
def test_detect_file_type_by_extension(name, expected):
    assert detect_file_type(name) == expected


def test_parse_docx_keeps_structure(docx_bytes):
    parsed = parse_docx(docx_bytes, "report.docx")

    assert [(s.type, s.level) for s in parsed.segments] == [
        (SegmentType.HEADING, 1),
        (SegmentType.HEADING, 2),
        (SegmentType.PARAGRAPH, None),
        (SegmentType.LIST, None),
    ]
    assert parsed.text.split("\n\n")[2] == "Revenue grew in every region."
    assert parsed.metadata["title"] == "Quarterly report"
    assert parsed.metadata["word_count"] == parsed.word_count


def test_parse_docx_rejects_garbage():
    with pytest.raises(ParseError):
        parse_docx(b"PK\x03\x04 not really", "broken.docx")


def test_parse_pdf_pages_and_metadata(pdf_bytes):
    parsed = parse_pdf(pdf_bytes, "summary.pdf")

    assert parsed.page_count == 2
    assert [s.page for s in parsed.segments] == [1, 2]
    assert "translation quality" in parsed.segments[0].text
    assert "short summary" in parsed.segments[1].text
    assert parsed.metadata["title"] == "Annual summary"
    assert parsed.metadata["method"] == "native"


def test_parse_pdf_invalid():
    with pytest.raises(ParseError, match="Invalid PDF"):
        parse_pdf(b"%PDF-1.4 truncated", "bad.pdf")


def test_parse_txt_strips_bom():
    parsed = parse_txt("\ufeffOne.\n\nTwo.".encode("utf-8"), "a.txt")
    assert parsed.text == "One.\n\nTwo."
    assert [s.text for s in parsed.segments] == ["One.", "Two."]


def test_parse_file_unsupported():
    with pytest.raises(ParseError, match="Unsupported"):
        parse_file(b"\x00\x01", "x.bin")


def test_document_info(pdf_bytes):
    info = get_document_info(pdf_bytes, FileType.PDF)
    assert info.is_valid
    assert info.page_count == 2
    assert info.word_count > 10
    assert info.file_size == len(pdf_bytes)

    assert not get_document_info(b"nope", FileType.PDF).is_valid
    assert get_document_info(b"three small words", FileType.TXT).word_count == 3


def test_translated_docx_mirrors_segments():
    segments = [
        Segment("Title", SegmentType.HEADING, 1),
        Segment("Item", SegmentType.LIST),
        Segment("Body text."),
    ]
    content = create_translated_docx("Titel\n\nPunkt\n\nText.", segments)

    document = docx.Document(io.BytesIO(content))
    paragraphs = [p for p in document.paragraphs if p.text]
    assert [p.text for p in paragraphs] == ["Titel", "• Punkt", "Text."]
    assert paragraphs[0].runs[0].bold
    assert paragraphs[0].runs[0].font.size.pt == 16


def test_translated_docx_without_segments():
    content = create_translated_docx("Eins\n\nZwei", [])
    document = docx.Document(io.BytesIO(content))
    assert [p.text for p in document.paragraphs if p.text] == ["Eins", "Zwei"]


def test_translated_pdf_metadata_and_pages():
    content = create_translated_pdf(
        "Erste Seite & mehr <Text>.\n\nZweite Seite.",
        {"title": "Annual summary", "author": "Ana"},
        2,
    )

    reader = PdfReader(io.BytesIO(content))
    assert len(reader.pages) == 2
    assert reader.metadata.title == "Annual summary (Translated)"
    assert reader.metadata.author == "Ana"
    first_page = reader.pages[0].extract_text()
    assert "Erste Seite" in first_page
    assert "<Text>" in first_page


def test_translated_pdf_defaults():
    reader = PdfReader(io.BytesIO(create_translated_pdf("Hola", None, 1)))
    assert reader.metadata.title == "Translated Document"
    assert reader.metadata.author == "Linguala Translator"
