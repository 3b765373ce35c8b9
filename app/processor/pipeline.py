from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from app.database.models import ExtractionConfig, JobRecord
from app.extraction.models import ExtractionOutcome, SurveyResponse


@dataclass(slots=True)
class PipelineContext:
    job_id: str
    job: JobRecord | None = None
    config: ExtractionConfig = field(default_factory=ExtractionConfig)
    raw_bytes: bytes = b""
    mime_type: str = ""
    outcome: ExtractionOutcome | None = None
    responses_saved: int = 0
    error_message: str = ""

    def require_job(self) -> JobRecord:
        if self.job is None:
            raise ValueError("PipelineContext.job must be loaded first")
        return self.job

    @property
    def responses(self) -> list[SurveyResponse]:
        return self.outcome.responses if self.outcome is not None else []


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
