"""Rasterizes PDF pages for the vision extraction path."""

import base64

import pymupdf

from app.extraction.models import PageImage
from app.logging.logger import Log
from app.pdf.exceptions import PageRenderError

PNG_MIME = "image/png"


class PdfPageRenderer:
    """Turns each PDF page into a base64 PNG with PyMuPDF.

    A scale of 2.0 (144 dpi) is enough for handwriting and tick marks while
    keeping each page under the vision endpoint's payload limits.
    """

    def __init__(self, scale: float = 2.0, max_pages: int | None = None) -> None:
        if scale <= 0:
            raise ValueError("scale must be positive")
        self._scale = scale
        self._max_pages = max_pages

    def render(self, pdf_bytes: bytes) -> list[PageImage]:
        """Render every page in order.

        Raises:
            PageRenderError: if the document cannot be opened or a page fails.
        """
        try:
            doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise PageRenderError(f"Cannot open PDF for rendering: {exc}") from exc

        images: list[PageImage] = []
        matrix = pymupdf.Matrix(self._scale, self._scale)
        try:
            for index, page in enumerate(doc):
                if self._max_pages is not None and index >= self._max_pages:
                    Log.warning(f"Page limit {self._max_pages} reached, remaining pages skipped")
                    break
                try:
                    pixmap = page.get_pixmap(matrix=matrix, alpha=False)
                    png = pixmap.tobytes(output="png")
                except Exception as exc:
                    raise PageRenderError(f"Failed to render page {index + 1}: {exc}") from exc
                images.append(
                    PageImage(
                        page_number=index + 1,
                        mime_type=PNG_MIME,
                        data_base64=base64.b64encode(png).decode("ascii"),
                    )
                )
        finally:
            doc.close()

        Log.info(f"Rendered {len(images)} PDF pages to images")
        return images

    @staticmethod
    def from_image(image_bytes: bytes, mime_type: str) -> list[PageImage]:
        """Wrap an uploaded image as a single page; no rendering needed."""
        return [
            PageImage(
                page_number=1,
                mime_type=mime_type,
                data_base64=base64.b64encode(image_bytes).decode("ascii"),
            )
        ]
