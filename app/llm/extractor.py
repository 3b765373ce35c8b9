"""LLM-backed survey extraction from document text or page images."""

import json
from pathlib import Path
from typing import Any

from app.extraction.models import PageImage
from app.llm.client_base import BaseExtractionClient, UserContent
from app.llm.prompt_loader import (
    SYSTEM_PROMPT_FILE,
    TEXT_PROMPT_FILE,
    VISION_PROMPT_FILE,
    load_json_schema,
    load_prompt_template,
)
from app.llm.response_parser import candidates, parse_payload
from app.logging.logger import Log

MAX_TEMPERATURE = 0.1


class SurveyLlmExtractor:
    """Asks an LLM for strict-JSON survey responses and returns raw candidates.

    Candidates are returned unvalidated; callers run them through the
    response validator together with heuristic candidates.
    """

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        temperature: float = MAX_TEMPERATURE,
        max_tokens: int = 4000,
        image_detail: str = "high",
        prompt_dir: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(MAX_TEMPERATURE, temperature))
        self._max_tokens = max_tokens
        self._image_detail = image_detail
        self._system_prompt = load_prompt_template(SYSTEM_PROMPT_FILE, prompt_dir).strip()
        self._text_template = load_prompt_template(TEXT_PROMPT_FILE, prompt_dir)
        self._vision_template = load_prompt_template(VISION_PROMPT_FILE, prompt_dir)
        self._json_schema = load_json_schema(prompt_dir / "survey_responses_schema.json" if prompt_dir else None)
        self._json_schema_dict = json.loads(self._json_schema)

    @property
    def model(self) -> str:
        return self._model

    @property
    def temperature(self) -> float:
        return self._temperature

    def extract_from_text(self, text: str, course_name: str) -> list[dict[str, Any]]:
        prompt = self._text_template.format(
            course_name=course_name,
            document_text=text,
            json_schema=self._json_schema,
        )
        Log.debug(f"Text extraction prompt:\n{prompt}")
        return self._request(prompt)

    def extract_from_image(self, page: PageImage, course_name: str) -> list[dict[str, Any]]:
        prompt = self._vision_template.format(
            course_name=course_name,
            json_schema=self._json_schema,
        )
        content: list[dict[str, Any]] = [
            {"type": "text", "text": prompt},
            {
                "type": "image_url",
                "image_url": {"url": page.data_url, "detail": self._image_detail},
            },
        ]
        Log.debug(f"Vision extraction request for page {page.page_number}")
        return self._request(content)

    def _request(self, user_content: UserContent) -> list[dict[str, Any]]:
        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            system_prompt=self._system_prompt,
            user_content=user_content,
            json_schema=self._json_schema_dict,
        )
        Log.debug(f"AI raw response:\n{raw_response}")
        return candidates(parse_payload(raw_response))
