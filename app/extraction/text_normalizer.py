import re

_WHITESPACE_RE = re.compile(r"\s+")
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E]")
# Runs like "aaaa" or "...." left behind by glyph-level extraction.
_REPEATED_CHAR_RE = re.compile(r"\b(\w)\1{3,}\b")
_NUMERIC_DATE_RE = re.compile(r"\b(\d{1,4})\s*[./-]\s*(\d{1,2})\s*[./-]\s*(\d{2,4})\b")


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_extracted_text(text: str) -> str:
    """Collapse whitespace, drop non-printable characters and repeated-character artifacts."""
    if not text:
        return ""
    cleaned = _NON_PRINTABLE_RE.sub(" ", text)
    cleaned = _REPEATED_CHAR_RE.sub("", cleaned)
    return _collapse(cleaned)


def normalize_for_segmentation(text: str) -> str:
    """Prepare extracted text for the segmenter and heuristic extractor.

    On top of clean_extracted_text, numeric dates are rewritten to a single
    ``a/b/c`` form so date-based boundaries and the date field see one shape.
    """
    cleaned = clean_extracted_text(text)
    return _NUMERIC_DATE_RE.sub(r"\1/\2/\3", cleaned)
