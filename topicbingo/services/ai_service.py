"""
AI Service - LLM integration for shortening bingo topics.

Provides abstraction over multiple chat-completion providers (OpenAI,
Anthropic, Groq, local Ollama models). One request is sent per batch of
topics and the reply is expected as a JSON object ``{"topics": [...]}``
with one short label per topic, in order.
"""

import asyncio
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from ..config import Config, TopicLanguage
from .errors import MalformedResponseError, UnsupportedError

logger = logging.getLogger(__name__)

# Upper bound the schema puts on a single short label
MAX_LABEL_LENGTH = 40


class ProviderError(Exception):
    """Transport or API failure inside a provider."""


class AIProvider(Enum):
    """Supported AI providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"  # Local models
    GROQ = "groq"  # Fast inference


DEFAULT_MODELS = {
    AIProvider.OPENAI: "gpt-4o-mini",
    AIProvider.ANTHROPIC: "claude-3-haiku-20240307",
    AIProvider.OLLAMA: "llama3.2",
    AIProvider.GROQ: "llama-3.1-8b-instant",
}


@dataclass
class AIConfig:
    """Configuration for AI service."""
    provider: AIProvider = AIProvider.OPENAI
    model: str = DEFAULT_MODELS[AIProvider.OPENAI]
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: Optional[float] = 0.2
    max_tokens: int = Config.AI_MAX_TOKENS
    timeout: int = Config.AI_TIMEOUT


def short_topics_schema(expected_count: int) -> Dict[str, Any]:
    """JSON schema for a reply holding exactly ``expected_count`` labels."""
    return {
        "type": "object",
        "properties": {
            "topics": {
                "type": "array",
                "items": {"type": "string", "minLength": 1, "maxLength": MAX_LABEL_LENGTH},
                "minItems": expected_count,
                "maxItems": expected_count,
            }
        },
        "required": ["topics"],
        "additionalProperties": False,
    }


class BaseAIProvider(ABC):
    """Abstract base class for AI providers."""

    def __init__(self, config: AIConfig):
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "BaseAIProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _post_json(self, url: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """POST ``payload`` and return the decoded JSON body."""
        session = await self._get_session()
        name = type(self).__name__
        try:
            async with session.post(url, headers=headers, json=payload) as response:
                if response.status != 200:
                    error = await response.text()
                    raise ProviderError(f"{name} error {response.status}: {error[:200]}")
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ProviderError(f"{name} timeout") from e
        except aiohttp.ClientError as e:
            raise ProviderError(f"{name} request failed: {e}") from e
        except json.JSONDecodeError as e:
            raise ProviderError(f"{name} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise ProviderError(f"{name} returned an unexpected payload")
        return data

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_description: str = ""
    ) -> str:
        """
        Generate a completion for the given prompt.

        Args:
            prompt: User message
            system_prompt: Optional system message
            json_schema: Schema the reply should follow, where the provider supports it
            schema_description: Human-readable description of the schema

        Returns:
            The raw text content of the first choice
        """
        pass


class OpenAIProvider(BaseAIProvider):
    """OpenAI API provider (also works with compatible APIs)."""

    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def _base_url(self) -> str:
        return self.config.base_url or self.DEFAULT_BASE_URL

    def _response_format(self, json_schema: Optional[Dict[str, Any]], description: str) -> Optional[Dict[str, Any]]:
        if json_schema is None:
            return None
        return {
            "type": "json_schema",
            "json_schema": {
                "name": "shorttopics",
                "description": description,
                "schema": json_schema,
                "strict": True,
            },
        }

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_description: str = ""
    ) -> str:
        """Generate completion using the chat completions API."""
        url = f"{self._base_url()}/chat/completions"

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": self.config.max_tokens,
        }
        if self.config.temperature is not None:
            payload["temperature"] = self.config.temperature
        response_format = self._response_format(json_schema, schema_description)
        if response_format:
            payload["response_format"] = response_format

        data = await self._post_json(url, payload, headers)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("Chat completion response has no choices") from e
        if content is None:
            raise ProviderError("Chat completion returned no content")
        return content


class GroqProvider(OpenAIProvider):
    """Groq fast inference provider (OpenAI-compatible)."""

    DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"

    def _response_format(self, json_schema: Optional[Dict[str, Any]], description: str) -> Optional[Dict[str, Any]]:
        # Groq only guarantees plain JSON mode across its models
        return {"type": "json_object"} if json_schema is not None else None


class AnthropicProvider(BaseAIProvider):
    """Anthropic Claude API provider."""

    BASE_URL = "https://api.anthropic.com/v1"

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_description: str = ""
    ) -> str:
        """Generate completion using the messages API."""
        url = f"{self.config.base_url or self.BASE_URL}/messages"

        headers = {
            "x-api-key": self.config.api_key or "",
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        }

        payload: Dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            payload["system"] = system_prompt
        if self.config.temperature is not None:
            payload["temperature"] = self.config.temperature

        data = await self._post_json(url, payload, headers)
        try:
            return data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("Anthropic response has no text content") from e


class OllamaProvider(BaseAIProvider):
    """Ollama local model provider."""

    DEFAULT_BASE_URL = "http://localhost:11434"

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_description: str = ""
    ) -> str:
        """Generate completion using local Ollama."""
        url = f"{self.config.base_url or self.DEFAULT_BASE_URL}/api/generate"

        full_prompt = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt

        payload: Dict[str, Any] = {
            "model": self.config.model,
            "prompt": full_prompt,
            "stream": False,
        }
        if self.config.temperature is not None:
            payload["options"] = {"temperature": self.config.temperature}
        if json_schema is not None:
            payload["format"] = json_schema

        try:
            data = await self._post_json(url, payload)
        except ProviderError as e:
            if isinstance(e.__cause__, aiohttp.ClientConnectorError):
                raise ProviderError("Cannot connect to Ollama. Is it running?") from e
            raise
        return data.get("response", "")


PROVIDER_CLASSES = {
    AIProvider.OPENAI: OpenAIProvider,
    AIProvider.ANTHROPIC: AnthropicProvider,
    AIProvider.OLLAMA: OllamaProvider,
    AIProvider.GROQ: GroqProvider,
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_short_topics(content: str) -> List[str]:
    """
    Decode a ``{"topics": [...]}`` reply.

    A reply wrapped in a Markdown code fence is accepted.

    Raises:
        MalformedResponseError: If the reply is not that structure
    """
    text = (content or "").strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError("The AI reply was not valid JSON") from e

    topics = payload.get("topics") if isinstance(payload, dict) else None
    if not isinstance(topics, list) or not all(isinstance(item, str) for item in topics):
        raise MalformedResponseError("The AI reply has no list of short topics")
    return topics


class AIService:
    """
    High-level AI service for bingo topic shortening.

    Sends one batch request per conversion and returns the raw labels;
    callers run them through the normalizer.
    """

    SYSTEM_PROMPTS = {
        "shorten": "You reply with JSON that matches the provided schema.",
    }

    def __init__(self, config: Optional[AIConfig] = None):
        """
        Initialize AI service.

        Args:
            config: AI configuration. If None, uses environment variables.
        """
        self.config = config or config_from_env()
        self._provider: Optional[BaseAIProvider] = None

    def _get_provider(self) -> BaseAIProvider:
        """Get or create the appropriate provider."""
        if self._provider is None:
            provider_class = PROVIDER_CLASSES.get(self.config.provider, OpenAIProvider)
            self._provider = provider_class(self.config)
        return self._provider

    async def close(self) -> None:
        """Close the AI service and release resources."""
        if self._provider:
            await self._provider.close()
            self._provider = None

    async def shorten(self, topic_texts: Sequence[str], language: TopicLanguage) -> List[str]:
        """
        Ask the provider for one short label per topic.

        Args:
            topic_texts: Long topic texts, in order
            language: Language the labels should be written in

        Returns:
            Raw labels as returned by the provider (not yet normalized)

        Raises:
            UnsupportedError: On transport or API failure
            MalformedResponseError: If the reply cannot be decoded
        """
        texts = list(topic_texts)
        if not texts:
            return []

        provider = self._get_provider()
        try:
            content = await provider.complete(
                language.prompt(texts),
                self.SYSTEM_PROMPTS["shorten"],
                json_schema=short_topics_schema(len(texts)),
                schema_description=language.schema_description,
            )
        except ProviderError as e:
            logger.error("AI topic shortening failed: %s", e)
            raise UnsupportedError() from e

        return parse_short_topics(content)

    @property
    def is_configured(self) -> bool:
        """Check if AI service is properly configured."""
        if self.config.provider == AIProvider.OLLAMA:
            return True  # Ollama doesn't need API key
        return bool(self.config.api_key)


def resolve_provider(name: Optional[str]) -> AIProvider:
    """Map a provider name to the enum, defaulting to OpenAI."""
    try:
        return AIProvider((name or "openai").strip().lower())
    except ValueError:
        logger.warning("Unknown AI provider '%s', using OpenAI", name)
        return AIProvider.OPENAI


def config_from_env() -> AIConfig:
    """Create config from environment variables."""
    provider = resolve_provider(os.environ.get("AI_PROVIDER", Config.AI_PROVIDER))
    try:
        timeout = int(os.environ.get("AI_TIMEOUT", Config.AI_TIMEOUT))
    except ValueError:
        timeout = Config.AI_TIMEOUT

    return AIConfig(
        provider=provider,
        model=os.environ.get("AI_MODEL") or DEFAULT_MODELS[provider],
        api_key=os.environ.get(Config.API_KEY_ENV),
        base_url=os.environ.get("AI_BASE_URL") or None,
        timeout=timeout,
    )


def create_ai_service(
    provider: str = "openai",
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: int = Config.AI_TIMEOUT
) -> AIService:
    """
    Create an AI service with specified configuration.

    Args:
        provider: Provider name (openai, anthropic, ollama, groq)
        model: Model name (uses the provider default if None)
        api_key: API key
        base_url: Override for the provider endpoint
        timeout: Request timeout in seconds

    Returns:
        Configured AIService instance
    """
    provider_enum = resolve_provider(provider)
    config = AIConfig(
        provider=provider_enum,
        model=model or DEFAULT_MODELS[provider_enum],
        api_key=api_key,
        base_url=base_url or None,
        timeout=timeout,
    )
    return AIService(config)
