"""Best-effort plain text from raw document bytes.

Strategies, each tried only while the previous one falls short:

1. structural   - the PDF text layer via the configured PDF library, or,
                  when the library yields nothing, a scan of BT/ET text
                  blocks for Tj/TJ string operands.
2. pattern-scan - survey vocabulary regexes over a lenient UTF-8 decode.
3. raw-decode   - readable runs from several single-pass decodings.

Every strategy reports failure as a StrategyResult with an error instead
of raising, so one broken strategy never blocks the next.
"""

import re

from app.extraction.models import (
    SOURCE_PATTERN_SCAN,
    SOURCE_RAW_DECODE,
    SOURCE_STRUCTURAL,
    StrategyResult,
    TextSpan,
)
from app.extraction.text_normalizer import clean_extracted_text
from app.logging.logger import Log
from app.pdf.base import BasePdfExtractor

STRUCTURAL_MIN_CHARS = 100
PATTERN_SCAN_MIN_CHARS = 50

_TEXT_BLOCK_RE = re.compile(rb"\bBT\b(.*?)\bET\b", re.DOTALL)
_LITERAL = rb"\((?:\\.|[^\\)])*\)"
_TJ_RE = re.compile(rb"(" + _LITERAL + rb")\s*Tj")
_TJ_ARRAY_RE = re.compile(rb"\[([^\[\]]*)\]\s*TJ")
_LITERAL_RE = re.compile(_LITERAL)
_ESCAPE_RE = re.compile(r"\\([nrtbf()\\]|[0-7]{1,3})")
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f"}
_HAS_ALPHA_RE = re.compile(r"[A-Za-z]")

_SCAN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:strongly\s+)?(?:agree|disagree|neutral|excellent|good|fair|poor)", re.I),
    re.compile(r"(?:trainer|instructor|facilitator|course|training|evaluation|survey)", re.I),
    re.compile(r"(?:participant|name|company|email|phone|date)", re.I),
    re.compile(r"(?:suggestions|comments|learning|recommend|satisfied)", re.I),
    re.compile(r"\d+\.\s*[A-Za-z][^.]{10,100}"),
    re.compile(r"[A-Za-z][A-Za-z0-9\s.,;:!?\-']{20,}"),
)
_READABLE_RUN_RE = re.compile(r"[A-Za-z][A-Za-z0-9\s.,;:!?\-']{5,}")
_RAW_ENCODINGS = ("utf-8", "latin-1", "ascii")


def _unescape_literal(raw: bytes) -> str:
    body = raw[1:-1].decode("latin-1")

    def _replace(match: re.Match[str]) -> str:
        token = match.group(1)
        if token in _ESCAPES:
            return _ESCAPES[token]
        if token.isdigit():
            return chr(int(token, 8) & 0xFF)
        return token

    return _ESCAPE_RE.sub(_replace, body)


def scan_text_operators(data: bytes) -> str:
    """Concatenate string operands of Tj/TJ operators inside BT..ET blocks.

    Only works on uncompressed content streams; fragments without any
    letter are discarded.
    """
    fragments: list[str] = []
    for block in _TEXT_BLOCK_RE.finditer(data):
        body = block.group(1)
        for match in _TJ_RE.finditer(body):
            fragments.append(_unescape_literal(match.group(1)))
        for match in _TJ_ARRAY_RE.finditer(body):
            fragments.append(
                "".join(_unescape_literal(lit.group(0)) for lit in _LITERAL_RE.finditer(match.group(1)))
            )
    kept = [f.strip() for f in fragments if f.strip() and _HAS_ALPHA_RE.search(f)]
    return " ".join(kept)


class RawTextExtractor:
    """Runs the structural -> pattern-scan -> raw-decode cascade."""

    def __init__(self, pdf_extractor: BasePdfExtractor | None = None) -> None:
        self._pdf_extractor = pdf_extractor

    def extract(self, data: bytes) -> TextSpan:
        """Return the longest text produced by the strategies that were attempted."""
        attempts = [self.extract_structural(data)]
        Log.info(f"Structural extraction produced {attempts[-1].length} chars")

        if attempts[-1].length < STRUCTURAL_MIN_CHARS:
            attempts.append(self.extract_pattern_scan(data))
            Log.info(f"Pattern-scan extraction produced {attempts[-1].length} chars")

        if attempts[-1].length < PATTERN_SCAN_MIN_CHARS:
            attempts.append(self.extract_raw_decode(data))
            Log.info(f"Raw-decode extraction produced {attempts[-1].length} chars")

        for attempt in attempts:
            if not attempt.ok:
                Log.warning(f"{attempt.span.source} strategy failed: {attempt.error}")

        best = max(attempts, key=lambda a: a.length)
        Log.debug(f"Extracted text preview ({best.span.source}): {best.span.text[:1000]}")
        return best.span

    def extract_structural(self, data: bytes) -> StrategyResult:
        errors: list[str] = []
        text = ""
        if self._pdf_extractor is not None:
            try:
                text = self._pdf_extractor.extract(data)
            except Exception as exc:
                errors.append(str(exc))
            else:
                lines = [line for line in text.splitlines() if _HAS_ALPHA_RE.search(line)]
                text = "\n".join(lines)

        if not text.strip():
            try:
                text = scan_text_operators(data)
            except Exception as exc:
                errors.append(f"operator scan failed: {exc}")
                text = ""

        span = TextSpan(SOURCE_STRUCTURAL, clean_extracted_text(text))
        error = "; ".join(errors) if errors and not span.text else None
        return StrategyResult(span=span, error=error)

    def extract_pattern_scan(self, data: bytes) -> StrategyResult:
        try:
            decoded = data.decode("utf-8", errors="replace")
            matches: list[str] = []
            for pattern in _SCAN_PATTERNS:
                matches.extend(
                    m for m in pattern.findall(decoded) if len(m) > 5 and _HAS_ALPHA_RE.search(m)
                )
            text = clean_extracted_text(" ".join(matches))
        except Exception as exc:
            return StrategyResult(span=TextSpan(SOURCE_PATTERN_SCAN, ""), error=str(exc))
        return StrategyResult(span=TextSpan(SOURCE_PATTERN_SCAN, text))

    def extract_raw_decode(self, data: bytes) -> StrategyResult:
        best = ""
        errors: list[str] = []
        for encoding in _RAW_ENCODINGS:
            try:
                decoded = data.decode(encoding, errors="ignore")
            except LookupError as exc:
                errors.append(str(exc))
                continue
            combined = " ".join(_READABLE_RUN_RE.findall(decoded))
            if len(combined) > len(best):
                best = combined
        span = TextSpan(SOURCE_RAW_DECODE, clean_extracted_text(best))
        error = "; ".join(errors) if errors and not span.text else None
        return StrategyResult(span=span, error=error)
