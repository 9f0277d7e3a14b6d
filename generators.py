"""
Generator collaborators.

Thin async adapters around the text-generation services. Each returns a
``GenerationResult`` holding the raw text and any grounding chunks in the
``{"web": {"uri", "title"}}`` shape the deduplicator reads. Transport errors
propagate unchanged; retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from config import PROVIDER_GEMINI, PROVIDER_OPENAI, AnalysisConfig
from errors import ConfigurationError

logger = logging.getLogger(__name__)


class GenerationResult(BaseModel):
    text: str = ""
    grounding_chunks: List[Dict[str, Any]] = Field(default_factory=list)


class TextGenerator(Protocol):
    async def generate(self, prompt: str, *, model: str, enable_search: bool = True) -> GenerationResult:
        ...


def _web_chunk(web: Any) -> Dict[str, Any]:
    return {"web": {"uri": getattr(web, "uri", None), "title": getattr(web, "title", None)}}


class GeminiGenerator:
    """Google Gemini via ``google-genai`` with the Google Search tool."""

    def __init__(self, api_key: str, temperature: Optional[float] = None, client: Any = None):
        if client is None:
            from google import genai

            client = genai.Client(api_key=api_key)
        self.client = client
        self.temperature = temperature

    def _config(self, enable_search: bool) -> Any:
        from google.genai import types

        params: Dict[str, Any] = {}
        if enable_search:
            params["tools"] = [types.Tool(google_search=types.GoogleSearch())]
        if self.temperature is not None:
            params["temperature"] = self.temperature
        return types.GenerateContentConfig(**params)

    async def generate(self, prompt: str, *, model: str, enable_search: bool = True) -> GenerationResult:
        logger.info(f"Calling Gemini model {model} (search={'on' if enable_search else 'off'})")
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=self._config(enable_search),
        )
        chunks: List[Dict[str, Any]] = []
        candidates = getattr(response, "candidates", None) or []
        metadata = getattr(candidates[0], "grounding_metadata", None) if candidates else None
        for chunk in getattr(metadata, "grounding_chunks", None) or []:
            web = getattr(chunk, "web", None)
            chunks.append(_web_chunk(web) if web is not None else {})
        text = getattr(response, "text", None) or ""
        logger.info(f"Gemini returned {len(text)} chars and {len(chunks)} grounding chunks")
        return GenerationResult(text=text, grounding_chunks=chunks)


class OpenAIGenerator:
    """OpenAI chat model via ``langchain-openai``. No grounding metadata."""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.15,
        organization: Optional[str] = None,
        llm: Any = None,
    ):
        if llm is None:
            from langchain_openai import ChatOpenAI

            llm_params = {
                "api_key": api_key,
                "model": model,
                "temperature": temperature,
                "response_format": {"type": "json_object"},
            }
            if organization:
                llm_params["openai_organization"] = organization
            llm = ChatOpenAI(**llm_params)
        self.llm = llm

    async def generate(self, prompt: str, *, model: str, enable_search: bool = True) -> GenerationResult:
        if enable_search:
            logger.debug("Search grounding is not available for the OpenAI provider; ignoring")
        logger.info(f"Calling OpenAI model {model}")
        response = await self.llm.ainvoke(prompt)
        content = getattr(response, "content", response)
        return GenerationResult(text=content if isinstance(content, str) else str(content or ""))


def build_generator(config: AnalysisConfig) -> TextGenerator:
    if not config.has_credentials:
        raise ConfigurationError(
            f"API key not found for provider '{config.provider}'. Set it in the environment or .env file."
        )
    if config.provider == PROVIDER_OPENAI:
        return OpenAIGenerator(
            api_key=config.api_key,
            model=config.model,
            temperature=config.temperature,
            organization=config.openai_organization,
        )
    if config.provider == PROVIDER_GEMINI:
        return GeminiGenerator(api_key=config.api_key, temperature=config.temperature)
    raise ConfigurationError(f"Unsupported provider '{config.provider}'")


__all__ = ["GenerationResult", "GeminiGenerator", "OpenAIGenerator", "TextGenerator", "build_generator"]
