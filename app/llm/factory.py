from typing import ClassVar

from app.config.settings import Settings
from app.database.models import ExtractionConfig
from app.llm.client_base import BaseExtractionClient
from app.llm.example_client_adapter import ExampleClientAdapter
from app.llm.extractor import SurveyLlmExtractor
from app.llm.openai_client_adapter import OpenAIClientAdapter
from app.logging.logger import Log


class LlmExtractorFactory:
    """Creates the LLM extractor for one job, or None when LLM access is off."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings, config: ExtractionConfig) -> SurveyLlmExtractor | None:
        """Build an extractor from application settings and the uploader's config."""
        if not config.usable:
            Log.info(
                "LLM extraction unavailable "
                f"(enabled={config.enabled}, key present={config.api_key_present})"
            )
            return None
        provider = settings.llm_provider.lower()
        return SurveyLlmExtractor(
            client=cls._create_client(provider, settings, config),
            model=config.model_name or settings.llm_default_model_name,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            image_detail=settings.vision_image_detail,
        )

    @classmethod
    def _create_client(
        cls, provider: str, settings: Settings, config: ExtractionConfig
    ) -> BaseExtractionClient:
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=config.api_key or "",
            timeout_seconds=settings.llm_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return settings.llm_base_url.strip() or None
        if provider == "openai_compatible":
            url = settings.llm_base_url.strip()
            if not url:
                raise ValueError("llm_base_url is required for llm_provider=openai_compatible")
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown LLM provider '{provider}'. Choose from: {supported}")
