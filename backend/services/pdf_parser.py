import io

import pdfplumber


def extract_text(pdf_bytes: bytes) -> str:
    """Extract all text from a PDF file, pages joined by newlines."""
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages).strip()


def is_pdf(filename: str | None, content: bytes) -> bool:
    """Accept by extension and the %PDF magic header."""
    if not filename or not filename.lower().endswith(".pdf"):
        return False
    return content[:5] == b"%PDF-"
