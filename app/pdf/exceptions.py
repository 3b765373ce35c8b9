class PdfExtractionError(Exception):
    """Raised when a PDF library cannot parse the document."""


class PageRenderError(PdfExtractionError):
    """Raised when pages cannot be rasterized for the vision path."""
