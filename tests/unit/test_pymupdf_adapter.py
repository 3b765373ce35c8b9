import pytest

from app.pdf.exceptions import PdfExtractionError
from app.pdf.pymupdf_adapter import PyMuPdfAdapter


class TestPyMuPdfAdapter:
    def test_extract_returns_text(self, sample_pdf_bytes: bytes) -> None:
        assert "Hello PDF World" in PyMuPdfAdapter().extract(sample_pdf_bytes)

    def test_extract_pages_keeps_page_order(self, multi_page_pdf_bytes: bytes) -> None:
        pages = PyMuPdfAdapter().extract_pages(multi_page_pdf_bytes)

        assert len(pages) == 2
        assert "Page one content" in pages[0]
        assert "Page two content" in pages[1]

    def test_extract_empty_pdf_returns_empty_string(self, empty_pdf_bytes: bytes) -> None:
        assert PyMuPdfAdapter().extract(empty_pdf_bytes) == ""

    def test_extract_raises_on_invalid_bytes(self) -> None:
        with pytest.raises(PdfExtractionError):
            PyMuPdfAdapter().extract(b"not a pdf")
