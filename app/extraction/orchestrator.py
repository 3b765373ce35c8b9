"""Chooses and runs the extraction path for one document.

Order of attempts:

1. LLM (only with a usable per-user config): vision for image uploads and
   scanned PDFs, otherwise the document text.
2. Heuristic segmentation and field extraction over the document text.
3. A single placeholder response when nothing meaningful was found.

Extraction problems never escape this class; they only lower the quality
of the result.
"""

from app.extraction.form_segmenter import FormSegmenter
from app.extraction.heuristic_extractor import HeuristicFieldExtractor
from app.extraction.models import (
    METHOD_HEURISTIC,
    METHOD_LLM_TEXT,
    METHOD_LLM_VISION,
    OUTCOME_HEURISTIC,
    OUTCOME_LLM,
    ExtractionOutcome,
    LlmPathResult,
    PageImage,
    SurveyResponse,
    TextSpan,
    vision_source,
)
from app.extraction.raw_text_extractor import RawTextExtractor
from app.extraction.scanned_detector import ScannedDocumentDetector
from app.extraction.text_normalizer import normalize_for_segmentation
from app.extraction.validator import clean_candidates, placeholder_response
from app.llm.extractor import SurveyLlmExtractor
from app.logging.logger import Log
from app.pdf.page_renderer import PdfPageRenderer
from app.processor.file_loader import PDF_MIME

MIN_HEURISTIC_TEXT_CHARS = 20


class ExtractionOrchestrator:
    def __init__(
        self,
        *,
        text_extractor: RawTextExtractor,
        page_renderer: PdfPageRenderer,
        detector: ScannedDocumentDetector | None = None,
        segmenter: FormSegmenter | None = None,
        field_extractor: HeuristicFieldExtractor | None = None,
    ) -> None:
        self._text_extractor = text_extractor
        self._page_renderer = page_renderer
        self._detector = detector or ScannedDocumentDetector()
        self._segmenter = segmenter or FormSegmenter()
        self._field_extractor = field_extractor or HeuristicFieldExtractor()

    def extract(
        self,
        data: bytes,
        mime_type: str,
        course_name: str,
        llm_extractor: SurveyLlmExtractor | None = None,
    ) -> ExtractionOutcome:
        """Return validated responses for the document; never empty."""
        is_pdf = mime_type == PDF_MIME
        span = self._text_extractor.extract(data) if is_pdf else None
        text = span.text if span else ""

        llm_result: LlmPathResult | None = None
        if llm_extractor is not None:
            llm_result = self._run_llm(data, mime_type, span, course_name, llm_extractor)
            if llm_result.ok and llm_result.responses:
                Log.info(f"LLM extraction produced {len(llm_result.responses)} responses")
                return ExtractionOutcome(
                    responses=llm_result.responses,
                    method=OUTCOME_LLM,
                    pages_processed=llm_result.pages_processed,
                    pages_failed=llm_result.pages_failed,
                    sources=llm_result.sources,
                )
            if llm_result.ok:
                Log.info("LLM extraction found no survey data, trying heuristic extraction")
            else:
                Log.warning(f"LLM extraction failed, falling back to heuristic: {llm_result.error}")
        else:
            Log.info("Using heuristic extraction")

        responses = self.extract_heuristic(text, course_name) if is_pdf else []
        if not responses:
            Log.info("No valid survey forms detected, storing placeholder response")
            responses = [placeholder_response(course_name)]

        return ExtractionOutcome(
            responses=responses,
            method=OUTCOME_HEURISTIC,
            pages_processed=llm_result.pages_processed if llm_result else 0,
            pages_failed=llm_result.pages_failed if llm_result else 0,
            sources=(span.source,) if span else (),
        )

    def _run_llm(
        self,
        data: bytes,
        mime_type: str,
        span: TextSpan | None,
        course_name: str,
        llm_extractor: SurveyLlmExtractor,
    ) -> LlmPathResult:
        try:
            if span is None:
                Log.info(f"Image upload ({mime_type}), using vision extraction")
                pages = PdfPageRenderer.from_image(data, mime_type)
                return self.extract_vision(pages, course_name, llm_extractor)

            assessment = self._detector.classify(span.text)
            Log.info(
                f"Scanned check: readable ratio {assessment.readable_ratio:.2f}, "
                f"encoded data {assessment.has_encoded_data}, "
                f"actual words {assessment.has_actual_words}"
            )
            if assessment.is_scanned:
                Log.info("Document looks scanned, using vision extraction")
                pages = self._page_renderer.render(data)
                return self.extract_vision(pages, course_name, llm_extractor)

            Log.info(f"Using LLM text extraction on {len(span.text)} chars ({span.source})")
            candidates = llm_extractor.extract_from_text(span.text, course_name)
            return LlmPathResult.success(
                clean_candidates(candidates, course_name, METHOD_LLM_TEXT),
                sources=(span.source,),
            )
        except Exception as exc:
            return LlmPathResult.failure(str(exc) or type(exc).__name__)

    def extract_vision(
        self,
        pages: list[PageImage],
        course_name: str,
        llm_extractor: SurveyLlmExtractor,
    ) -> LlmPathResult:
        """Send pages one at a time, in order; a failing page is skipped."""
        if not pages:
            return LlmPathResult.failure("No pages to send to vision extraction")

        responses: list[SurveyResponse] = []
        sources: list[str] = []
        failed = 0
        for page in pages:
            source = vision_source(page.page_number)
            try:
                candidates = llm_extractor.extract_from_image(page, course_name)
            except Exception as exc:
                failed += 1
                Log.warning(f"{source}: vision extraction failed, page skipped: {exc}")
                continue
            page_responses = clean_candidates(candidates, course_name, METHOD_LLM_VISION)
            Log.info(f"{source}: {len(page_responses)} responses")
            responses.extend(page_responses)
            sources.append(source)

        processed = len(pages) - failed
        if processed == 0:
            return LlmPathResult.failure(
                f"Vision extraction failed for all {len(pages)} pages",
                pages_processed=0,
                pages_failed=failed,
            )
        return LlmPathResult.success(
            responses, pages_processed=processed, pages_failed=failed, sources=tuple(sources)
        )

    def extract_heuristic(self, text: str, course_name: str) -> list[SurveyResponse]:
        if len(text.strip()) < MIN_HEURISTIC_TEXT_CHARS:
            Log.info(f"Only {len(text.strip())} chars of text, skipping heuristic extraction")
            return []

        sections = self._segmenter.segment(normalize_for_segmentation(text))
        Log.info(f"Split document into {len(sections)} sections")

        candidates = []
        for section in sections:
            candidate = self._field_extractor.extract(section.text)
            if candidate is not None:
                candidates.append(candidate)

        responses = clean_candidates(candidates, course_name, METHOD_HEURISTIC)
        Log.info(f"Heuristic extraction kept {len(responses)} of {len(sections)} sections")
        return responses
