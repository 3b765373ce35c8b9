from dataclasses import dataclass
from datetime import datetime

JOB_PENDING = "pending"
JOB_PROCESSING = "processing"
JOB_COMPLETED = "completed"
JOB_FAILED = "failed"
TERMINAL_STATUSES = frozenset({JOB_COMPLETED, JOB_FAILED})


@dataclass
class JobRecord:
    """Represents a row from the course_uploads table."""

    id: str
    course_name: str
    file_url: str
    file_name: str
    status: str
    created_by: str | None = None
    total_forms: int = 0
    processed_forms: int = 0
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ExtractionConfig:
    """Per-user LLM extraction settings from the user_settings table."""

    api_key: str | None = None
    model_name: str = ""
    enabled: bool = False

    @property
    def api_key_present(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @property
    def usable(self) -> bool:
        return self.enabled and self.api_key_present
