from dataclasses import asdict
from typing import Any

from app.database.connection import Database
from app.extraction.models import SurveyResponse
from app.processor.exceptions import PersistenceError

_COLUMNS: tuple[str, ...] = tuple(
    ["upload_id"] + list(SurveyResponse.__dataclass_fields__)
)


def response_to_row(job_id: str, response: SurveyResponse) -> tuple[Any, ...]:
    """Flatten a response into insert parameters, ordered like _COLUMNS."""
    values = asdict(response)
    return (job_id, *(values[name] for name in _COLUMNS[1:]))


class SurveyResponsesRepository:
    """Database operations for the survey_responses table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def insert_many(self, job_id: str, responses: list[SurveyResponse]) -> int:
        """Insert all responses for one upload in a single transaction.

        Raises:
            PersistenceError: if the insert fails; nothing is committed.
        """
        if not responses:
            return 0

        placeholders = ", ".join(["%s"] * len(_COLUMNS))
        query = (
            f"INSERT INTO survey_responses ({', '.join(_COLUMNS)}) "
            f"VALUES ({placeholders})"
        )
        rows = [response_to_row(job_id, r) for r in responses]
        try:
            with self._db.connection() as conn:
                with conn.cursor() as cur:
                    cur.executemany(query, rows)
                conn.commit()
        except Exception as exc:
            raise PersistenceError(
                f"Failed to insert {len(rows)} responses for upload {job_id}: {exc}"
            ) from exc
        return len(rows)

    def count_for_job(self, job_id: str) -> int:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT COUNT(*) FROM survey_responses WHERE upload_id = %s",
                    (job_id,),
                )
                row = cur.fetchone()
        return int(row[0]) if row else 0
