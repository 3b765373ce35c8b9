from unittest.mock import MagicMock, patch

import pytest

from app.config.settings import Settings
from app.database.models import ExtractionConfig, JobRecord
from app.database.repositories.extraction_settings_repository import ExtractionSettingsRepository
from app.database.repositories.job_repository import JobRepository
from app.database.repositories.survey_responses_repository import SurveyResponsesRepository
from app.extraction.models import ExtractionOutcome, SurveyResponse
from app.extraction.orchestrator import ExtractionOrchestrator
from app.processor.exceptions import FileDownloadError, InvalidJobStateError, PersistenceError
from app.processor.file_loader import PDF_MIME, FileLoader
from app.processor.pipeline import PipelineContext
from app.processor.processor import Processor, build_processor
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


def _make_job() -> JobRecord:
    return JobRecord(
        id="7d3c",
        course_name="Fire Safety",
        file_url="user-1/forms.pdf",
        file_name="forms.pdf",
        status="pending",
        created_by="user-1",
    )


def _make_pipeline(
    outcome: ExtractionOutcome | None = None,
) -> tuple[Processor, dict[str, MagicMock]]:
    mocks = {
        "job_repo": MagicMock(spec=JobRepository),
        "settings_repo": MagicMock(spec=ExtractionSettingsRepository),
        "responses_repo": MagicMock(spec=SurveyResponsesRepository),
        "file_loader": MagicMock(spec=FileLoader),
        "orchestrator": MagicMock(spec=ExtractionOrchestrator),
    }
    mocks["job_repo"].find_by_id.return_value = _make_job()
    mocks["settings_repo"].get_config.return_value = ExtractionConfig()
    mocks["file_loader"].load.return_value = b"%PDF-1.4 fake"
    mocks["orchestrator"].extract.return_value = outcome or ExtractionOutcome(
        responses=[SurveyResponse(course_name="Fire Safety", q1_rating=4)],
        method="heuristic",
    )
    mocks["responses_repo"].insert_many.return_value = 1
    settings = MagicMock(llm_provider="openai")

    steps = [
        MarkProcessingStep(mocks["job_repo"]),
        LoadJobStep(mocks["job_repo"]),
        LoadConfigStep(mocks["settings_repo"]),
        LoadFileStep(mocks["file_loader"]),
        ExtractResponsesStep(mocks["orchestrator"], settings),
        PersistResponsesStep(mocks["responses_repo"]),
        MarkCompletedStep(mocks["job_repo"]),
    ]
    processor = Processor(steps=steps, failed_step=MarkFailedStep(mocks["job_repo"]))
    return processor, mocks


class TestProcessorPipeline:
    def test_runs_all_steps_and_returns_summary(self) -> None:
        processor, mocks = _make_pipeline()

        summary = processor.process("7d3c")

        assert summary.success
        assert summary.forms_processed == 1
        assert summary.method == "heuristic"
        assert summary.message == "Successfully processed 1 survey responses"
        mocks["job_repo"].mark_processing.assert_called_once_with("7d3c")
        mocks["settings_repo"].get_config.assert_called_once_with("user-1")
        mocks["file_loader"].load.assert_called_once_with("user-1/forms.pdf")
        mocks["orchestrator"].extract.assert_called_once_with(
            b"%PDF-1.4 fake", PDF_MIME, "Fire Safety", llm_extractor=None
        )
        mocks["responses_repo"].insert_many.assert_called_once()
        mocks["job_repo"].mark_completed.assert_called_once_with(
            "7d3c", total_forms=1, processed_forms=1
        )
        mocks["job_repo"].mark_failed.assert_not_called()

    def test_download_failure_marks_job_failed_and_reraises(self) -> None:
        processor, mocks = _make_pipeline()
        mocks["file_loader"].load.side_effect = FileDownloadError("Failed to download PDF: HTTP 404")

        with pytest.raises(FileDownloadError):
            processor.process("7d3c")

        mocks["job_repo"].mark_failed.assert_called_once_with("7d3c", "Failed to download PDF: HTTP 404")
        mocks["orchestrator"].extract.assert_not_called()
        mocks["responses_repo"].insert_many.assert_not_called()
        mocks["job_repo"].mark_completed.assert_not_called()

    def test_persistence_failure_marks_job_failed(self) -> None:
        processor, mocks = _make_pipeline()
        mocks["responses_repo"].insert_many.side_effect = PersistenceError("db down")

        with pytest.raises(PersistenceError):
            processor.process("7d3c")

        mocks["job_repo"].mark_failed.assert_called_once_with("7d3c", "db down")
        mocks["job_repo"].mark_completed.assert_not_called()

    def test_failure_while_marking_failed_keeps_original_error(self) -> None:
        processor, mocks = _make_pipeline()
        mocks["file_loader"].load.side_effect = FileDownloadError("boom")
        mocks["job_repo"].mark_failed.side_effect = RuntimeError("db gone")

        with pytest.raises(FileDownloadError, match="boom"):
            processor.process("7d3c")

    def test_terminal_upload_keeps_its_status(self) -> None:
        processor, mocks = _make_pipeline()
        mocks["job_repo"].mark_processing.side_effect = InvalidJobStateError("Upload 7d3c is already completed")

        with pytest.raises(InvalidJobStateError):
            processor.process("7d3c")

        mocks["job_repo"].mark_failed.assert_not_called()
        mocks["file_loader"].load.assert_not_called()
        mocks["responses_repo"].insert_many.assert_not_called()

    def test_mark_processing_runs_first(self) -> None:
        processor, mocks = _make_pipeline()
        call_order: list[str] = []
        mocks["job_repo"].mark_processing.side_effect = lambda *_: call_order.append("mark_processing")
        mocks["job_repo"].find_by_id.side_effect = lambda *_: (call_order.append("find_by_id"), _make_job())[1]

        processor.process("7d3c")

        assert call_order == ["mark_processing", "find_by_id"]

    def test_llm_outcome_method_is_reported(self) -> None:
        outcome = ExtractionOutcome(
            responses=[SurveyResponse(course_name="c"), SurveyResponse(course_name="c")],
            method="llm",
        )
        processor, mocks = _make_pipeline(outcome)

        summary = processor.process("7d3c")

        assert summary.method == "llm"
        assert summary.forms_processed == 2
        assert summary.to_dict() == {
            "success": True,
            "formsProcessed": 2,
            "method": "llm",
            "message": "Successfully processed 2 survey responses",
        }


class TestExtractResponsesStep:
    def test_misconfigured_provider_falls_back_to_heuristic(self) -> None:
        orchestrator = MagicMock(spec=ExtractionOrchestrator)
        orchestrator.extract.return_value = ExtractionOutcome()
        settings = MagicMock(llm_provider="mystery", llm_base_url="")
        step = ExtractResponsesStep(orchestrator, settings)

        context = PipelineContext(
            job_id="7d3c",
            job=_make_job(),
            config=ExtractionConfig(api_key="sk", enabled=True),
            raw_bytes=b"%PDF",
            mime_type=PDF_MIME,
        )
        step.run(context)

        assert orchestrator.extract.call_args.kwargs["llm_extractor"] is None


class TestBuildProcessor:
    def test_page_renderer_uses_vision_settings(self) -> None:
        settings = Settings(vision_render_scale=1.5, vision_max_pages=3)

        with patch("app.processor.processor.PdfPageRenderer") as renderer_cls:
            build_processor(settings, MagicMock(), files_root=None)

        renderer_cls.assert_called_once_with(scale=1.5, max_pages=3)
