import io

import pdfplumber

from app.pdf.base import BasePdfExtractor
from app.pdf.exceptions import PdfExtractionError

# Keeps a question label and a score printed next to it as separate words.
X_TOLERANCE = 1.5


class PdfPlumberAdapter(BasePdfExtractor):
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return [page.extract_text(x_tolerance=X_TOLERANCE) or "" for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber could not read document: {exc}") from exc
