from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Access to a PDF's text layer through a third-party library."""

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Return one string per page, in page order.

        Pages without a text layer (scans, photos) yield an empty string.

        Raises:
            PdfExtractionError: if the bytes cannot be parsed as a PDF.
        """

    def extract(self, pdf_bytes: bytes) -> str:
        """Return the non-empty page texts joined by newlines."""
        pages = [page.strip() for page in self.extract_pages(pdf_bytes)]
        return "\n".join(page for page in pages if page)
