from dataclasses import dataclass, field

LIKERT_FIELDS: tuple[str, ...] = tuple(f"q{i}_rating" for i in range(1, 10))
RECOMMENDATION_FIELD = "q10_rating"
RATING_FIELDS: tuple[str, ...] = (*LIKERT_FIELDS, RECOMMENDATION_FIELD)

LIKERT_BOUNDS = (1, 5)
RECOMMENDATION_BOUNDS = (0, 10)

TEXT_FIELDS: tuple[str, ...] = (
    "q11_expectations",
    "q12_overall_rating",
    "learned_1",
    "learned_2",
    "learned_3",
    "suggestions",
    "comments",
    "interested_more",
)
CONTACT_FIELDS: tuple[str, ...] = ("participant_name", "company", "email", "phone")

METHOD_LLM_TEXT = "llm-text"
METHOD_LLM_VISION = "llm-vision"
METHOD_HEURISTIC = "heuristic"
METHOD_PLACEHOLDER = "placeholder"

OUTCOME_LLM = "llm"
OUTCOME_HEURISTIC = "heuristic"

SOURCE_STRUCTURAL = "structural"
SOURCE_PATTERN_SCAN = "pattern-scan"
SOURCE_RAW_DECODE = "raw-decode"


def vision_source(page_number: int) -> str:
    return f"vision-page:{page_number}"


@dataclass(frozen=True)
class TextSpan:
    """Extracted text tagged with the strategy that produced it."""

    source: str
    text: str

    def __len__(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class StrategyResult:
    """Outcome of one text-extraction strategy. Failures carry an error, never raise."""

    span: TextSpan
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def length(self) -> int:
        return len(self.span.text)


@dataclass(frozen=True)
class FormSection:
    """A slice of normalized text believed to hold one participant's answers."""

    index: int
    text: str


@dataclass(frozen=True)
class SurveyResponse:
    """One validated survey response, ready to persist."""

    course_name: str
    response_date: str | None = None
    q1_rating: int | None = None
    q2_rating: int | None = None
    q3_rating: int | None = None
    q4_rating: int | None = None
    q5_rating: int | None = None
    q6_rating: int | None = None
    q7_rating: int | None = None
    q8_rating: int | None = None
    q9_rating: int | None = None
    q10_rating: int | None = None
    q11_expectations: str | None = None
    q12_overall_rating: str | None = None
    learned_1: str | None = None
    learned_2: str | None = None
    learned_3: str | None = None
    suggestions: str | None = None
    comments: str | None = None
    interested_more: str | None = None
    participant_name: str | None = None
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    extraction_method: str = METHOD_HEURISTIC

    def ratings(self) -> list[int | None]:
        return [getattr(self, name) for name in RATING_FIELDS]


@dataclass(frozen=True)
class PageImage:
    """One page bitmap, base64-encoded, for the vision path."""

    page_number: int
    mime_type: str
    data_base64: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_base64}"


@dataclass
class ExtractionOutcome:
    """Final output of the orchestrator for one document."""

    responses: list[SurveyResponse] = field(default_factory=list)
    method: str = OUTCOME_HEURISTIC
    pages_processed: int = 0
    pages_failed: int = 0
    sources: tuple[str, ...] = ()


@dataclass(frozen=True)
class LlmPathResult:
    """Outcome of the LLM text or vision path. A failure triggers the heuristic fallback."""

    responses: list[SurveyResponse] = field(default_factory=list)
    error: str | None = None
    pages_processed: int = 0
    pages_failed: int = 0
    sources: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        responses: list[SurveyResponse],
        pages_processed: int = 0,
        pages_failed: int = 0,
        sources: tuple[str, ...] = (),
    ) -> "LlmPathResult":
        return cls(
            responses=responses,
            pages_processed=pages_processed,
            pages_failed=pages_failed,
            sources=sources,
        )

    @classmethod
    def failure(cls, error: str, pages_processed: int = 0, pages_failed: int = 0) -> "LlmPathResult":
        return cls(error=error, pages_processed=pages_processed, pages_failed=pages_failed)
