import os
import json
import time
import logging
from typing import Any, Dict, Optional, Tuple

import httpx
from openai import OpenAI, OpenAIError

from .interfaces import ITextGenerationCollaborator, IImageGenerationCollaborator, CollaboratorError
from .utils import clean_json_response, with_retry

logger = logging.getLogger("generators.llm")

SYSTEM_PROMPT = "You are an expert web strategist. Always answer with a single JSON object."


def _http_client() -> httpx.Client:
    return httpx.Client(timeout=httpx.Timeout(connect=30.0, read=120.0, write=120.0, pool=30.0))


class OpenAITextCollaborator(ITextGenerationCollaborator):
    """OpenAI-compatible chat completion endpoint returning JSON."""

    def __init__(self, api_key: str, base_url: Optional[str] = None, model: str = "gpt-4o-mini",
                 temperature: float = 0.4):
        self.client = OpenAI(api_key=api_key, base_url=base_url, http_client=_http_client())
        self.model = model
        self.temperature = temperature

    @with_retry(max_retries=2, delay=1.0, retry_on=(OpenAIError, httpx.HTTPError))
    def _complete(self, messages) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""

    def generate(self, prompt: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        messages = [{"role": "system", "content": SYSTEM_PROMPT}]
        if context:
            messages.append({"role": "system", "content": "Context:\n" + json.dumps(context, default=str)})
        messages.append({"role": "user", "content": prompt})

        logger.debug("🔄 [LLM] calling %s (prompt_len=%d)", self.model, len(prompt))
        t0 = time.time()
        try:
            content = self._complete(messages)
        except (OpenAIError, httpx.HTTPError) as e:
            raise CollaboratorError(f"text generation failed: {e}") from e

        parsed = clean_json_response(content)
        if not isinstance(parsed, dict):
            raise CollaboratorError("text generation returned no JSON object")
        logger.debug("✅ [LLM] returned in %.1fs (response_len=%d)", time.time() - t0, len(content))
        return parsed


class OpenAIImageCollaborator(IImageGenerationCollaborator):
    """OpenAI images endpoint."""

    def __init__(self, api_key: str, base_url: Optional[str] = None, model: str = "dall-e-3"):
        self.client = OpenAI(api_key=api_key, base_url=base_url, http_client=_http_client())
        self.model = model

    def generate(self, prompt: str, size: str, quality: str) -> Dict[str, Any]:
        try:
            response = self.client.images.generate(
                model=self.model,
                prompt=prompt,
                size=size,
                quality=quality,
                n=1,
            )
        except (OpenAIError, httpx.HTTPError) as e:
            raise CollaboratorError(f"image generation failed: {e}") from e

        if not response.data or not response.data[0].url:
            raise CollaboratorError("image generation returned no url")
        item = response.data[0]
        return {"url": item.url, "revised_prompt": getattr(item, "revised_prompt", None)}


def collaborators_from_env() -> Tuple[Optional[OpenAITextCollaborator], Optional[OpenAIImageCollaborator]]:
    """Build collaborators when OPENAI_API_KEY is present, otherwise (None, None)."""
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        return None, None
    base_url = os.environ.get("OPENAI_BASE_URL") or None
    model = os.environ.get("SITEGEN_TEXT_MODEL", "gpt-4o-mini")
    image_model = os.environ.get("SITEGEN_IMAGE_MODEL", "dall-e-3")
    return (
        OpenAITextCollaborator(api_key, base_url=base_url, model=model),
        OpenAIImageCollaborator(api_key, base_url=base_url, model=image_model),
    )
