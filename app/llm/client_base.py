from abc import ABC, abstractmethod
from typing import Any

UserContent = str | list[dict[str, Any]]


class BaseExtractionClient(ABC):
    """Contract for provider-specific chat completion clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_content: UserContent,
        json_schema: dict[str, object],
    ) -> str:
        """Return the provider's message content as plain text.

        ``user_content`` is either a plain string or a list of content parts
        (text and image_url) for vision requests.
        """
