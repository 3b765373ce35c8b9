from psycopg.rows import dict_row

from app.database.connection import Database
from app.database.models import ExtractionConfig


class ExtractionSettingsRepository:
    """Reads per-user LLM extraction settings from the user_settings table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def get_config(self, user_id: str | None) -> ExtractionConfig:
        """Return the stored config for a user.

        Users without a row (or uploads without a creator) get a disabled
        config, which routes extraction to the heuristic path.
        """
        if not user_id:
            return ExtractionConfig()

        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT openai_api_key, openai_model, openai_enabled
                    FROM user_settings
                    WHERE user_id = %s
                    """,
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None:
            return ExtractionConfig()

        return ExtractionConfig(
            api_key=row["openai_api_key"],
            model_name=row["openai_model"] or "",
            enabled=bool(row["openai_enabled"]),
        )
