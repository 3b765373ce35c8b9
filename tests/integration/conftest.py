import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import Database
from app.database.models import JobRecord
from app.extraction.models import RATING_FIELDS, SurveyResponse

_RESPONSE_COLUMNS = ",\n".join(
    f"{name} {'INTEGER' if name in RATING_FIELDS else 'TEXT'}"
    for name in SurveyResponse.__dataclass_fields__
    if name != "course_name"
)

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS course_uploads (
    id TEXT PRIMARY KEY,
    course_name TEXT NOT NULL,
    file_url TEXT NOT NULL,
    file_name TEXT NOT NULL,
    processing_status TEXT NOT NULL DEFAULT 'pending',
    created_by TEXT,
    total_forms INTEGER,
    processed_forms INTEGER,
    error_message TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE TABLE IF NOT EXISTS user_settings (
    user_id TEXT PRIMARY KEY,
    openai_api_key TEXT,
    openai_model TEXT,
    openai_enabled BOOLEAN NOT NULL DEFAULT FALSE
);
CREATE TABLE IF NOT EXISTS survey_responses (
    id BIGSERIAL PRIMARY KEY,
    upload_id TEXT NOT NULL REFERENCES course_uploads(id) ON DELETE CASCADE,
    course_name TEXT NOT NULL,
    {_RESPONSE_COLUMNS}
);
"""


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "surveys_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def database(test_settings: Settings) -> Generator[Database, None, None]:
    db = Database(test_settings, min_size=1, max_size=2)
    try:
        db.open()
        with db.connection() as conn:
            conn.execute(_SCHEMA)
            conn.commit()
    except Exception as e:
        db.close()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to point at a test database")
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db_conn(database: Database) -> Generator[psycopg.Connection[Any], None, None]:
    with database.connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(database: Database) -> Generator[list[tuple[str, str]], None, None]:
    cleanup: list[tuple[str, str]] = []
    yield cleanup
    if not cleanup:
        return
    with database.connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "course_uploads":
                    cur.execute("DELETE FROM survey_responses WHERE upload_id = %s", (row_id,))
                    cur.execute("DELETE FROM course_uploads WHERE id = %s", (row_id,))
                elif table == "user_settings":
                    cur.execute("DELETE FROM user_settings WHERE user_id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def make_upload(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, str]],
):
    """Insert a course_uploads row and return it as a JobRecord."""

    def _make(
        file_url: str = "user-1/forms.pdf",
        status: str = "pending",
        created_by: str | None = None,
        course_name: str = "Fire Safety",
    ) -> JobRecord:
        upload_id = str(uuid.uuid4())
        with db_conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO course_uploads
                (id, course_name, file_url, file_name, processing_status, created_by)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (upload_id, course_name, file_url, file_url.rsplit("/", 1)[-1], status, created_by),
            )
        db_conn.commit()
        integration_cleanup.append(("course_uploads", upload_id))
        return JobRecord(
            id=upload_id,
            course_name=course_name,
            file_url=file_url,
            file_name=file_url.rsplit("/", 1)[-1],
            status=status,
            created_by=created_by,
        )

    return _make


@pytest.fixture
def seed_user_settings(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, str]],
) -> str:
    user_id = f"user-{uuid.uuid4()}"
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO user_settings (user_id, openai_api_key, openai_model, openai_enabled)
            VALUES (%s, %s, %s, %s)
            """,
            (user_id, "sk-test", "gpt-4o-mini", True),
        )
    db_conn.commit()
    integration_cleanup.append(("user_settings", user_id))
    return user_id


@pytest.fixture
def survey_pdf_on_disk(
    files_root: Path,
    survey_pdf_bytes: bytes,
    test_settings: Settings,
) -> str:
    """Write the single-survey PDF under the storage bucket and return its relative path."""
    relative = f"user-1/{uuid.uuid4()}.pdf"
    path = files_root / test_settings.storage_bucket / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(survey_pdf_bytes)
    return relative
