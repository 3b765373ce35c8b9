from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "surveys"
    db_username: str = "surveys"
    db_password: str = "secret"

    job_poll_interval_seconds: int = 5

    files_root: str = "/app/files"
    storage_bucket: str = "survey-pdfs"
    download_timeout_seconds: int = 30

    pdf_engine: str = "pdfplumber"

    llm_provider: str = "openai"
    llm_base_url: str = ""
    llm_default_model_name: str = "gpt-4o"
    llm_timeout_seconds: int = 60
    llm_temperature: float = 0.1
    llm_max_tokens: int = 4000

    vision_render_scale: float = 2.0
    vision_max_pages: int | None = None
    vision_image_detail: str = "high"
