"""Offline extraction client.

Returns an empty extraction for every request. Useful for local runs
without an API key, for tests, and as a template for new provider
adapters: implement BaseExtractionClient and register it in
LlmExtractorFactory.
"""

import json
from typing import ClassVar

from app.llm.client_base import BaseExtractionClient, UserContent


class ExampleClientAdapter(BaseExtractionClient):
    """Answers every request with ``{"responses": []}``; no network calls."""

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {"responses": []}

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
        _ = model, temperature, max_tokens, system_prompt, user_content, json_schema
        return json.dumps(self.DEFAULT_RESPONSE)
