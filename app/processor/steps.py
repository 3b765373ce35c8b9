from app.config.settings import Settings
from app.database.repositories.extraction_settings_repository import ExtractionSettingsRepository
from app.database.repositories.job_repository import JobRepository
from app.database.repositories.survey_responses_repository import SurveyResponsesRepository
from app.extraction.orchestrator import ExtractionOrchestrator
from app.llm.extractor import SurveyLlmExtractor
from app.llm.factory import LlmExtractorFactory
from app.logging.logger import Log
from app.processor.file_loader import FileLoader, detect_mime_type
from app.processor.pipeline import PipelineContext, PipelineStep


class LoadJobStep(PipelineStep):
    def __init__(self, job_repo: JobRepository) -> None:
        self._job_repo = job_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        context.job = self._job_repo.find_by_id(context.job_id)
        Log.info(f"Processing file {context.job.file_name} for course {context.job.course_name!r}")
        return context


class MarkProcessingStep(PipelineStep):
    def __init__(self, job_repo: JobRepository) -> None:
        self._job_repo = job_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        self._job_repo.mark_processing(context.job_id)
        Log.info(f"Job {context.job_id} marked as processing")
        return context


class LoadConfigStep(PipelineStep):
    def __init__(self, settings_repo: ExtractionSettingsRepository) -> None:
        self._settings_repo = settings_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        context.config = self._settings_repo.get_config(context.require_job().created_by)
        Log.info(
            f"Extraction config for job {context.job_id}: enabled={context.config.enabled}, "
            f"key present={context.config.api_key_present}, model={context.config.model_name or '-'}"
        )
        return context


class LoadFileStep(PipelineStep):
    def __init__(self, file_loader: FileLoader) -> None:
        self._file_loader = file_loader

    def run(self, context: PipelineContext) -> PipelineContext:
        job = context.require_job()
        context.raw_bytes = self._file_loader.load(job.file_url)
        context.mime_type = detect_mime_type(context.raw_bytes)
        Log.info(f"Loaded {len(context.raw_bytes)} bytes ({context.mime_type}) for job {context.job_id}")
        return context


class ExtractResponsesStep(PipelineStep):
    def __init__(self, orchestrator: ExtractionOrchestrator, settings: Settings) -> None:
        self._orchestrator = orchestrator
        self._settings = settings

    def run(self, context: PipelineContext) -> PipelineContext:
        job = context.require_job()
        context.outcome = self._orchestrator.extract(
            context.raw_bytes,
            context.mime_type,
            job.course_name,
            llm_extractor=self._create_llm_extractor(context),
        )
        Log.info(
            f"Extracted {len(context.outcome.responses)} responses for job {context.job_id} "
            f"(method={context.outcome.method}, sources={', '.join(context.outcome.sources) or '-'})"
        )
        return context

    def _create_llm_extractor(self, context: PipelineContext) -> SurveyLlmExtractor | None:
        try:
            return LlmExtractorFactory.create(self._settings, context.config)
        except ValueError as exc:
            Log.warning(f"LLM extraction misconfigured, using heuristic extraction: {exc}")
            return None


class PersistResponsesStep(PipelineStep):
    def __init__(self, responses_repo: SurveyResponsesRepository) -> None:
        self._responses_repo = responses_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        context.responses_saved = self._responses_repo.insert_many(context.job_id, context.responses)
        Log.info(f"Saved {context.responses_saved} responses for job {context.job_id}")
        return context


class MarkCompletedStep(PipelineStep):
    def __init__(self, job_repo: JobRepository) -> None:
        self._job_repo = job_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        count = len(context.responses)
        self._job_repo.mark_completed(context.job_id, total_forms=count, processed_forms=count)
        Log.info(f"Job {context.job_id} completed with {count} responses")
        return context


class MarkFailedStep(PipelineStep):
    def __init__(self, job_repo: JobRepository) -> None:
        self._job_repo = job_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        self._job_repo.mark_failed(context.job_id, context.error_message)
        Log.error(f"Job {context.job_id} marked as failed: {context.error_message}")
        return context
