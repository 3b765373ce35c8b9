from app.database.models import JobRecord
from app.logging.logger import Log
from app.processor.models import ProcessingSummary
from app.processor.processor import Processor


class JobRunner:
    """Run one job and turn any failure into an unsuccessful summary."""

    def __init__(self, processor: Processor) -> None:
        self._processor = processor

    def run(self, job: JobRecord) -> ProcessingSummary:
        """Execute a single job with every log line tagged by its id.

        The processor has already marked the job failed when it raises.
        """
        with Log.job_context(job.id):
            Log.info(f"Running upload {job.file_name} for course {job.course_name!r}")
            try:
                summary = self._processor.process(job.id)
            except Exception as exc:
                Log.error(f"Upload failed: {exc}")
                return ProcessingSummary.failure(str(exc))
            Log.info(f"Upload completed via {summary.method}: {summary.message}")
            return summary
