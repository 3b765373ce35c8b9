import re
from dataclasses import dataclass

READABLE_RATIO_THRESHOLD = 0.3
MIN_ACTUAL_WORDS = 50

_READABLE_RUN_RE = re.compile(r"[a-zA-Z\s]{3,}")
_WORD_RE = re.compile(r"\b[a-zA-Z]{4,}\b")
_ENCODED_MARKER_RE = re.compile(r"\b(?:DCTDecode|FlateDecode|stream|endstream|endobj|XObject)\b")


@dataclass(frozen=True)
class ScanAssessment:
    readable_ratio: float
    has_encoded_data: bool
    has_actual_words: bool

    @property
    def is_scanned(self) -> bool:
        return self.readable_ratio < READABLE_RATIO_THRESHOLD or (
            self.has_encoded_data and not self.has_actual_words
        )


class ScannedDocumentDetector:
    """Decides whether extracted text came from a real text layer.

    Scanned or image-only PDFs leave either almost nothing readable or only
    PDF syntax tokens; both route the document to the vision path.
    """

    def classify(self, text: str) -> ScanAssessment:
        if not text:
            return ScanAssessment(readable_ratio=0.0, has_encoded_data=False, has_actual_words=False)
        readable = sum(len(run) for run in _READABLE_RUN_RE.findall(text))
        return ScanAssessment(
            readable_ratio=readable / len(text),
            has_encoded_data=_ENCODED_MARKER_RE.search(text) is not None,
            has_actual_words=len(_WORD_RE.findall(text)) >= MIN_ACTUAL_WORDS,
        )

    def is_scanned(self, text: str) -> bool:
        return self.classify(text).is_scanned
