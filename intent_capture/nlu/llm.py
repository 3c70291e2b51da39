# intent_capture/nlu/llm.py
"""Language-understanding capability behind a small interface."""

import logging
from abc import ABC, abstractmethod
from google import genai
from google.genai import types
from google.genai.types import HttpOptions
from ..config import Config

logger = logging.getLogger(__name__)

class LanguageModel(ABC):
    """Abstract text-in, text-out model."""

    @abstractmethod
    async def generate(self, prompt: str, temperature: float = 0.0, max_output_tokens: int = 500) -> str:
        """Return the model's raw text for a prompt."""
        pass

class GeminiLanguageModel(LanguageModel):
    """Gemini through google-genai, on Vertex AI or with an API key."""

    def __init__(self, config: Config):
        self.config = config
        self.model = config.nlu_model_name
        if config.use_vertexai:
            self.client = genai.Client(
                vertexai=True,
                project=config.CLOUD_PROJECT,
                location=config.CLOUD_LOCATION,
                http_options=HttpOptions(api_version="v1")
            )
        else:
            self.client = genai.Client(api_key=config.API_KEY)

    async def generate(self, prompt: str, temperature: float = 0.0, max_output_tokens: int = 500) -> str:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_output_tokens
            )
        )
        text = response.text or ""
        logger.debug(f"Model {self.model} returned {len(text)} characters")
        return text
