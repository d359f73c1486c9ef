import pytest

from services.pdf_parser import extract_text, is_pdf


def test_is_pdf_checks_extension_and_header():
    assert is_pdf("resume.pdf", b"%PDF-1.7\n...")
    assert is_pdf("RESUME.PDF", b"%PDF-1.4")
    assert not is_pdf("resume.txt", b"%PDF-1.7")
    assert not is_pdf("resume.pdf", b"not a pdf")
    assert not is_pdf(None, b"%PDF-1.7")


def test_extract_text_rejects_garbage():
    with pytest.raises(Exception):
        extract_text(b"not a pdf at all")
