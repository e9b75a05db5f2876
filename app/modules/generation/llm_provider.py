import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import logging

from openai import OpenAI, OpenAIError

from app.config.settings import settings
from app.core.errors import GenerationFailed

logger = logging.getLogger(__name__)

RESPONSE_SCHEMA_NAME = "generated_application"


class LanguageModelProvider(ABC):
    """Structured-output generation: prompt plus JSON schema in, parsed object out."""

    @abstractmethod
    def generate(self, prompt: str, response_schema: Dict[str, Any]) -> Dict[str, Any]:
        ...


class OpenAIProvider(LanguageModelProvider):
    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
    ):
        self.model = model or settings.openai_model
        self.temperature = settings.openai_temperature if temperature is None else temperature
        self.client = client or OpenAI(
            api_key=api_key,
            timeout=timeout or settings.openai_timeout_seconds,
            max_retries=0,  # One attempt per run; failures go to the deployment log
        )

    def generate(self, prompt: str, response_schema: Dict[str, Any]) -> Dict[str, Any]:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": RESPONSE_SCHEMA_NAME, "schema": response_schema},
                },
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {str(e)}")
            raise GenerationFailed(f"AI generation failed: {str(e)}", details=str(e))

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise GenerationFailed("AI generation failed: empty response", details="empty response")
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"OpenAI returned non-JSON content ({len(content)} chars)")
            raise GenerationFailed("AI returned invalid JSON", details=str(e))


def get_language_model_provider() -> Optional[LanguageModelProvider]:
    """Provider built from settings, or None when no API key is configured."""
    if not settings.openai_api_key:
        return None
    return OpenAIProvider(api_key=settings.openai_api_key)
