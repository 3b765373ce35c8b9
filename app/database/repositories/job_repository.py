from typing import Any

import psycopg
from psycopg.rows import dict_row

from app.database.connection import Database
from app.database.models import JOB_PROCESSING, JobRecord
from app.processor.exceptions import InvalidJobStateError, JobNotFoundError

_JOB_COLUMNS = """
    id, course_name, file_url, file_name, processing_status,
    created_by, total_forms, processed_forms, error_message,
    created_at, updated_at
"""


def _row_to_job(row: dict[str, Any]) -> JobRecord:
    return JobRecord(
        id=str(row["id"]),
        course_name=row["course_name"],
        file_url=row["file_url"],
        file_name=row["file_name"],
        status=row["processing_status"],
        created_by=str(row["created_by"]) if row.get("created_by") is not None else None,
        total_forms=row.get("total_forms") or 0,
        processed_forms=row.get("processed_forms") or 0,
        error_message=row.get("error_message"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class JobRepository:
    """Status transitions for extraction jobs stored in course_uploads."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> JobRecord | None:
        """Claim the oldest pending upload using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_JOB_COLUMNS}
                FROM course_uploads
                WHERE processing_status = 'pending'
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """
            )
            row = cur.fetchone()

        if row is None:
            return None

        conn.execute(
            """
            UPDATE course_uploads
            SET processing_status = 'processing', updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        job = _row_to_job(row)
        job.status = JOB_PROCESSING
        return job

    def find_by_id(self, job_id: str) -> JobRecord:
        """Load one upload.

        Raises:
            JobNotFoundError: if no upload with this ID exists.
        """
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_JOB_COLUMNS} FROM course_uploads WHERE id = %s",
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise JobNotFoundError(f"Upload {job_id} not found")
        return _row_to_job(row)

    def mark_processing(self, job_id: str) -> None:
        """Move a pending or claimed upload to processing.

        Raises:
            JobNotFoundError: if no upload with this ID exists.
            InvalidJobStateError: if the upload is completed or failed; only
                request_retry moves an upload out of those states.
        """
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE course_uploads
                    SET processing_status = 'processing', updated_at = NOW()
                    WHERE id = %s AND processing_status IN ('pending', 'processing')
                    """,
                    (job_id,),
                )
                if cur.rowcount == 0:
                    cur.execute(
                        "SELECT processing_status FROM course_uploads WHERE id = %s",
                        (job_id,),
                    )
                    row = cur.fetchone()
                    if row is None:
                        raise JobNotFoundError(f"Upload {job_id} not found")
                    raise InvalidJobStateError(
                        f"Upload {job_id} is already {row[0]}; request a retry to process it again"
                    )
            conn.commit()

    def mark_completed(self, job_id: str, total_forms: int, processed_forms: int) -> None:
        with self._db.connection() as conn:
            conn.execute(
                """
                UPDATE course_uploads
                SET processing_status = 'completed',
                    total_forms = %s,
                    processed_forms = %s,
                    error_message = NULL,
                    updated_at = NOW()
                WHERE id = %s
                """,
                (total_forms, processed_forms, job_id),
            )
            conn.commit()

    def mark_failed(self, job_id: str, error: str) -> None:
        with self._db.connection() as conn:
            conn.execute(
                """
                UPDATE course_uploads
                SET processing_status = 'failed', error_message = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (error, job_id),
            )
            conn.commit()

    def request_retry(self, job_id: str) -> None:
        """Explicit external retry: the only transition allowed out of a terminal state.

        Callers must serialize retries per job id; a retry racing an in-flight
        run will insert duplicate responses.
        """
        self._set_status(job_id, "processing")

    def _set_status(self, job_id: str, status: str) -> None:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE course_uploads
                    SET processing_status = %s, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (status, job_id),
                )
                if cur.rowcount == 0:
                    raise JobNotFoundError(f"Upload {job_id} not found")
            conn.commit()
