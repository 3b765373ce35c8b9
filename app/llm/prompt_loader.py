from pathlib import Path

from app.llm.exceptions import LlmExtractionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

TEXT_PROMPT_FILE = "text_extraction_prompt.txt"
VISION_PROMPT_FILE = "vision_extraction_prompt.txt"
SYSTEM_PROMPT_FILE = "system_prompt.txt"
SCHEMA_FILE = "survey_responses_schema.json"


def load_prompt_template(name: str = TEXT_PROMPT_FILE, prompt_dir: Path | None = None) -> str:
    """Load a bundled prompt template.

    Args:
        name: File name inside the prompt directory.
        prompt_dir: Directory to read from. Defaults to the bundled prompts.

    Returns:
        The raw template string with ``{course_name}``, ``{json_schema}``
        and (text prompt only) ``{document_text}`` placeholders.

    Raises:
        LlmExtractionError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LlmExtractionError(f"Failed to load prompt template: {exc}") from exc


def load_json_schema(path: Path | None = None) -> str:
    """Load the survey responses JSON schema.

    Raises:
        LlmExtractionError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / SCHEMA_FILE
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LlmExtractionError(f"Failed to load JSON schema: {exc}") from exc
