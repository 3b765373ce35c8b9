from pathlib import Path

from app.config.settings import Settings
from app.database.connection import Database
from app.database.repositories.extraction_settings_repository import ExtractionSettingsRepository
from app.database.repositories.job_repository import JobRepository
from app.database.repositories.survey_responses_repository import SurveyResponsesRepository
from app.extraction.orchestrator import ExtractionOrchestrator
from app.extraction.raw_text_extractor import RawTextExtractor
from app.logging.logger import Log
from app.pdf.factory import PdfExtractorFactory
from app.pdf.page_renderer import PdfPageRenderer
from app.processor.exceptions import InvalidJobStateError
from app.processor.file_loader import FileLoader
from app.processor.models import ProcessingSummary
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    ExtractResponsesStep,
    LoadConfigStep,
    LoadFileStep,
    LoadJobStep,
    MarkCompletedStep,
    MarkFailedStep,
    MarkProcessingStep,
    PersistResponsesStep,
)


class Processor:
    """Runs the job pipeline.

    Pipeline: mark processing -> load job -> load config -> load file ->
    extract -> persist responses -> mark completed. Any step error marks the
    job failed and is re-raised, except a completed or failed upload run
    without a retry, which keeps its status.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, job_id: str) -> ProcessingSummary:
        Log.info(f"Processing upload {job_id}")
        context = PipelineContext(job_id=job_id)
        try:
            for step in self._steps:
                context = step.run(context)
        except InvalidJobStateError:
            Log.warning(f"Upload {job_id} is not runnable, leaving its status unchanged")
            raise
        except Exception as exc:
            context.error_message = str(exc) or type(exc).__name__
            self._run_failed_step(context)
            raise

        count = len(context.responses)
        return ProcessingSummary(
            success=True,
            forms_processed=count,
            method=context.outcome.method if context.outcome else "heuristic",
            message=f"Successfully processed {count} survey responses",
        )

    def _run_failed_step(self, context: PipelineContext) -> None:
        try:
            self._failed_step.run(context)
        except Exception as exc:
            Log.error(f"Could not mark job {context.job_id} as failed: {exc}")


def build_processor(
    settings: Settings,
    db: Database,
    files_root: Path | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    job_repo = JobRepository(db)
    file_loader = FileLoader(
        files_root=files_root or Path(settings.files_root),
        bucket=settings.storage_bucket,
        timeout_seconds=settings.download_timeout_seconds,
    )
    orchestrator = ExtractionOrchestrator(
        text_extractor=RawTextExtractor(PdfExtractorFactory.create(settings.pdf_engine)),
        page_renderer=PdfPageRenderer(
            scale=settings.vision_render_scale,
            max_pages=settings.vision_max_pages,
        ),
    )
    steps: list[PipelineStep] = [
        MarkProcessingStep(job_repo),
        LoadJobStep(job_repo),
        LoadConfigStep(ExtractionSettingsRepository(db)),
        LoadFileStep(file_loader),
        ExtractResponsesStep(orchestrator, settings),
        PersistResponsesStep(SurveyResponsesRepository(db)),
        MarkCompletedStep(job_repo),
    ]
    return Processor(steps=steps, failed_step=MarkFailedStep(job_repo))
