from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ProcessingSummary:
    """Result handed back to the caller for one job run."""

    success: bool
    forms_processed: int = 0
    method: str = "heuristic"
    message: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        payload: dict[str, Any] = {
            "success": data["success"],
            "formsProcessed": data["forms_processed"],
            "method": data["method"],
        }
        if self.message:
            payload["message"] = self.message
        if self.error is not None:
            payload["error"] = self.error
        return payload

    @classmethod
    def failure(cls, error: str) -> "ProcessingSummary":
        return cls(success=False, error=error or "Processing failed")
