from unittest.mock import MagicMock

from app.database.models import JobRecord
from app.processor.models import ProcessingSummary
from app.worker.job_runner import JobRunner


def _make_runner() -> tuple[JobRunner, MagicMock]:
    """Create a JobRunner with a mocked processor."""
    mock_processor = MagicMock()
    runner = JobRunner(mock_processor)
    return runner, mock_processor


def _make_job(job_id: str = "job-1") -> JobRecord:
    return JobRecord(
        id=job_id,
        course_name="First Aid",
        file_url="user/forms.pdf",
        file_name="forms.pdf",
        status="processing",
    )


class TestSuccessfulProcessing:
    def test_calls_processor_with_job_id(self) -> None:
        runner, mock_processor = _make_runner()

        runner.run(_make_job())

        mock_processor.process.assert_called_once_with("job-1")

    def test_returns_processor_summary(self) -> None:
        runner, mock_processor = _make_runner()
        summary = ProcessingSummary(success=True, forms_processed=3, method="llm", message="ok")
        mock_processor.process.return_value = summary

        assert runner.run(_make_job()) is summary


class TestFailure:
    def test_returns_failed_summary(self) -> None:
        runner, mock_processor = _make_runner()
        mock_processor.process.side_effect = Exception("boom")

        summary = runner.run(_make_job())

        assert not summary.success
        assert summary.error == "boom"
        assert summary.forms_processed == 0

    def test_empty_error_gets_default_message(self) -> None:
        runner, mock_processor = _make_runner()
        mock_processor.process.side_effect = Exception()

        summary = runner.run(_make_job())

        assert summary.error == "Processing failed"
