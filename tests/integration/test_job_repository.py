from collections.abc import Callable

import pytest

from app.database.connection import Database
from app.database.models import JobRecord
from app.database.repositories.job_repository import JobRepository
from app.processor.exceptions import InvalidJobStateError, JobNotFoundError


def _status(db_conn, job_id: str) -> tuple[str, int | None, str | None]:
    with db_conn.cursor() as cur:
        cur.execute(
            "SELECT processing_status, processed_forms, error_message FROM course_uploads WHERE id = %s",
            (job_id,),
        )
        row = cur.fetchone()
    assert row is not None
    return row[0], row[1], row[2]


@pytest.mark.integration
class TestJobRepositoryClaimNextJob:
    def test_claim_next_job_returns_and_marks_processing(
        self, make_upload: Callable[..., JobRecord], database: Database, db_conn
    ) -> None:
        seeded = make_upload()
        repo = JobRepository(database)

        job = repo.claim_next_job(db_conn)

        assert job is not None
        assert job.id == seeded.id
        assert job.status == "processing"
        assert _status(db_conn, seeded.id)[0] == "processing"

    def test_claim_skips_non_pending_uploads(
        self, make_upload: Callable[..., JobRecord], database: Database, db_conn
    ) -> None:
        make_upload(status="completed")
        make_upload(status="failed")
        repo = JobRepository(database)

        assert repo.claim_next_job(db_conn) is None


@pytest.mark.integration
class TestJobRepositoryTransitions:
    def test_find_by_id(self, make_upload: Callable[..., JobRecord], database: Database) -> None:
        seeded = make_upload(created_by="user-1")

        job = JobRepository(database).find_by_id(seeded.id)

        assert job.course_name == "Fire Safety"
        assert job.file_url == "user-1/forms.pdf"
        assert job.created_by == "user-1"

    def test_find_by_id_raises_for_unknown_upload(self, database: Database) -> None:
        with pytest.raises(JobNotFoundError):
            JobRepository(database).find_by_id("does-not-exist")

    def test_mark_completed_sets_counts_and_clears_error(
        self, make_upload: Callable[..., JobRecord], database: Database, db_conn
    ) -> None:
        seeded = make_upload(status="processing")
        repo = JobRepository(database)
        repo.mark_failed(seeded.id, "earlier failure")

        repo.mark_completed(seeded.id, total_forms=3, processed_forms=3)

        assert _status(db_conn, seeded.id) == ("completed", 3, None)

    def test_mark_failed_stores_message(
        self, make_upload: Callable[..., JobRecord], database: Database, db_conn
    ) -> None:
        seeded = make_upload(status="processing")

        JobRepository(database).mark_failed(seeded.id, "Failed to download PDF: HTTP 404")

        assert _status(db_conn, seeded.id) == ("failed", None, "Failed to download PDF: HTTP 404")

    def test_request_retry_moves_failed_upload_to_processing(
        self, make_upload: Callable[..., JobRecord], database: Database, db_conn
    ) -> None:
        seeded = make_upload(status="failed")

        JobRepository(database).request_retry(seeded.id)

        assert _status(db_conn, seeded.id)[0] == "processing"

    def test_request_retry_raises_for_unknown_upload(self, database: Database) -> None:
        with pytest.raises(JobNotFoundError):
            JobRepository(database).request_retry("does-not-exist")

    def test_mark_processing_refuses_completed_upload(
        self, make_upload: Callable[..., JobRecord], database: Database, db_conn
    ) -> None:
        seeded = make_upload(status="completed")

        with pytest.raises(InvalidJobStateError):
            JobRepository(database).mark_processing(seeded.id)

        assert _status(db_conn, seeded.id)[0] == "completed"
